"""
Failure taxonomy shared by every feature package.

Services raise these; `main.py` turns them into responses (JSON envelope for
`/api/*`, plain status or redirect for the HTML routes).
"""

from __future__ import annotations


class WikiError(RuntimeError):
    status_code = 500

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__


class StoreFailure(WikiError):
    """A statement (or connection acquisition) failed."""

    status_code = 500


class NotAuthenticated(WikiError):
    status_code = 401


class AuthorizationDenied(WikiError):
    status_code = 403

    def __init__(self, capability: str) -> None:
        super().__init__(f"Not authorized: {capability}")
        self.capability = capability


class NotFound(WikiError):
    status_code = 404


class ExternalServiceFailure(WikiError):
    status_code = 502


class BackupRejected(ExternalServiceFailure):
    """The backup endpoint answered with something other than 201."""

    def __init__(self, message: str, *, status: int) -> None:
        super().__init__(message)
        self.status = status


class BackupTransportError(ExternalServiceFailure):
    """The backup endpoint could not be reached."""
