"""
Page Store

Persistence of page metadata. Page text is stored separately as page
versions (see page_version_repository).
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import select, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.clock import to_naive_utc, utc_now
from ..core.entities import Page
from ..core.errors import NotFoundError
from .models import PageRecord
from .session import storage_errors


class PageRepository:
    """
    Async repository over the `page` collection.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add_new_page(self, page: Page) -> Page:
        """
        Persist a new page and return it with its store-assigned id.

        `created_on` defaults to now when the caller leaves it empty.
        """
        record = PageRecord(
            title=page.title,
            tags=list(page.tags),
            created_by=page.created_by,
            created_on=to_naive_utc(page.created_on) or utc_now(),
            last_modified_by=page.last_modified_by,
            last_modified_on=to_naive_utc(page.last_modified_on),
        )
        with storage_errors("add_new_page"):
            self._session.add(record)
            await self._session.flush()

        return Page.model_validate(record)

    async def get_page_by_id(self, page_id: int) -> Optional[Page]:
        with storage_errors("get_page_by_id"):
            record = await self._session.get(PageRecord, page_id)
        return Page.model_validate(record) if record else None

    async def get_page_by_title(self, title: str) -> Optional[Page]:
        """Return the first page whose title matches, ignoring case."""
        stmt = (
            select(PageRecord)
            .where(func.lower(PageRecord.title) == title.lower())
            .order_by(PageRecord.id)
            .limit(1)
        )
        with storage_errors("get_page_by_title"):
            result = await self._session.execute(stmt)
        record = result.scalar_one_or_none()
        return Page.model_validate(record) if record else None

    async def all_pages(self) -> List[Page]:
        with storage_errors("all_pages"):
            result = await self._session.execute(select(PageRecord).order_by(PageRecord.id))
        return [Page.model_validate(r) for r in result.scalars().all()]

    async def find_pages_created_by(self, username: str) -> List[Page]:
        stmt = (
            select(PageRecord)
            .where(func.lower(PageRecord.created_by) == username.lower())
            .order_by(PageRecord.id)
        )
        with storage_errors("find_pages_created_by"):
            result = await self._session.execute(stmt)
        return [Page.model_validate(r) for r in result.scalars().all()]

    async def find_pages_containing_tag(self, tag: str) -> List[Page]:
        """
        Return pages carrying `tag` (case-insensitive), in id order.

        Tags live in a JSON document column, so matching happens after load
        to stay portable across JSON implementations. This scans every page,
        which is acceptable for a single wiki but not for very large stores.
        """
        wanted = tag.strip().lower()
        pages = await self.all_pages()
        return [p for p in pages if any(t.lower() == wanted for t in p.tags)]

    async def update_existing(self, page: Page) -> Page:
        """
        Overwrite the metadata of an existing page.

        Raises
        ------
        NotFoundError
            If no page has `page.id`.
        """
        with storage_errors("update_existing"):
            record = await self._session.get(PageRecord, page.id) if page.id is not None else None
            if record is None:
                raise NotFoundError(f"Page {page.id} does not exist")

            record.title = page.title
            record.tags = list(page.tags)
            record.last_modified_by = page.last_modified_by
            record.last_modified_on = to_naive_utc(page.last_modified_on) or utc_now()
            await self._session.flush()

        return Page.model_validate(record)

    async def delete_page(self, page_id: int) -> None:
        """
        Delete page metadata. Versions of the page are left untouched.

        Raises
        ------
        NotFoundError
            If no page has `page_id`.
        """
        with storage_errors("delete_page"):
            result = await self._session.execute(
                delete(PageRecord).where(PageRecord.id == page_id)
            )
        if result.rowcount == 0:
            raise NotFoundError(f"Page {page_id} does not exist")

    async def wipe(self) -> None:
        """
        Delete every page. Test isolation only; never call from a route.
        """
        with storage_errors("wipe_pages"):
            await self._session.execute(delete(PageRecord))
            await self._session.flush()
