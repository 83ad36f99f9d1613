"""
Page request payloads and view models.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from pydantic import BaseModel, Field, model_validator


class CreatePageRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    content: str


class UpdatePageRequest(BaseModel):
    content: str


class SavePageForm(BaseModel):
    id: int | None = None
    name: str = Field(..., min_length=1, max_length=255)
    # Browsers send an emptied textarea as "".
    content: str = ""
    new_page: bool = False

    @model_validator(mode="after")
    def _existing_page_needs_id(self) -> "SavePageForm":
        if not self.new_page and self.id is None:
            raise ValueError("id is required when saving an existing page")
        return self


@dataclass(frozen=True)
class PageView:
    title: str
    id: int
    new_page: bool
    raw_content: str
    content: str
    timestamp: str
    username: str
    can_save_page: bool
    can_delete_page: bool


@dataclass(frozen=True)
class IndexView:
    username: str
    can_create_page: bool
    pages: list[str] = field(default_factory=list)
    backup_gist_url: str | None = None
    title: str = "Wiki home"
