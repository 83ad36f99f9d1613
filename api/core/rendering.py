"""
Markdown to HTML rendering for page display.
"""

from __future__ import annotations

import markdown as _markdown

_EXTENSIONS = ["fenced_code", "tables"]


def render(text: str) -> str:
    return _markdown.markdown(text or "", extensions=_EXTENSIONS)
