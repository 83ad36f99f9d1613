"""
Page persistence.
This module is where page-related SQL lives.

Every operation takes one connection from the `ConnectionSource` and runs
exactly one parameterized statement on it.
"""

from __future__ import annotations

from typing import Any

from core.db import ConnectionSource

SQL_CREATE_PAGES_TABLE = """
    CREATE TABLE IF NOT EXISTS pages (
      id SERIAL PRIMARY KEY,
      name VARCHAR(255),
      content TEXT
    )
"""

SQL_ALL_PAGES = "SELECT name FROM pages"

SQL_GET_PAGE = "SELECT id, content FROM pages WHERE name = $1 ORDER BY id LIMIT 1"

SQL_GET_PAGE_BY_ID = "SELECT id, name, content FROM pages WHERE id = $1"

SQL_CREATE_PAGE = "INSERT INTO pages (name, content) VALUES ($1, $2)"

SQL_SAVE_PAGE = "UPDATE pages SET content = $1 WHERE id = $2"

SQL_DELETE_PAGE = "DELETE FROM pages WHERE id = $1"

SQL_ALL_PAGES_DATA = "SELECT id, name, content FROM pages"


class PageRepository:
    def __init__(self, source: ConnectionSource) -> None:
        self._source = source

    async def create_schema(self) -> None:
        await self._source.execute(SQL_CREATE_PAGES_TABLE)

    async def fetch_all_pages(self) -> list[str]:
        """
        Names of every page, sorted lexicographically.
        """
        rows = await self._source.fetch_all(SQL_ALL_PAGES)
        return sorted(str(row["name"]) for row in rows)

    async def fetch_page(self, name: str) -> dict[str, Any]:
        # Names are not unique in the table; the oldest matching row wins.
        row = await self._source.fetch_one(SQL_GET_PAGE, name)
        if row is None:
            return {"found": False}
        return {
            "found": True,
            "id": int(row["id"]),
            "raw_content": str(row["content"] or ""),
        }

    async def fetch_page_by_id(self, page_id: int) -> dict[str, Any]:
        row = await self._source.fetch_one(SQL_GET_PAGE_BY_ID, page_id)
        if row is None:
            return {"found": False}
        return {
            "found": True,
            "id": int(row["id"]),
            "name": str(row["name"]),
            "content": str(row["content"] or ""),
        }

    async def create_page(self, name: str, content: str) -> None:
        await self._source.execute(SQL_CREATE_PAGE, name, content)

    async def save_page(self, page_id: int, content: str) -> None:
        """
        Overwrite a page's content. Matching zero rows is not an error.
        """
        await self._source.execute(SQL_SAVE_PAGE, content, page_id)

    async def delete_page(self, page_id: int) -> None:
        """
        Delete a page. Matching zero rows is not an error.
        """
        await self._source.execute(SQL_DELETE_PAGE, page_id)

    async def fetch_all_pages_data(self) -> list[dict[str, Any]]:
        rows = await self._source.fetch_all(SQL_ALL_PAGES_DATA)
        return [
            {
                "id": int(row["id"]),
                "name": str(row["name"]),
                "content": str(row["content"] or ""),
            }
            for row in rows
        ]
