"""
Version Store

Append-only, per-page history of page text. Every edit adds a new
PageVersion; the latest version of a page is the one with the greatest
`date_time`, with ties resolved in favour of the later insert.

Concurrency
-----------
Writers are not serialized here. Two requests adding versions to the same
page at the same moment both succeed, and which one is reported as latest
depends on their timestamps and insert order.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select, delete, func
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.clock import to_naive_utc, utc_now
from ..core.entities import PageVersion
from ..core.errors import NotFoundError
from .models import PageRecord, PageVersionRecord
from .session import storage_errors


# Most recent first; insertion order breaks date ties.
_NEWEST_FIRST = (PageVersionRecord.date_time.desc(), PageVersionRecord.seq.desc())


class PageVersionRepository:
    """
    Async repository over the `page_version` collection.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add_new_version(
        self,
        page_id: int,
        text: str,
        author: str,
        date_time: Optional[datetime] = None,
    ) -> PageVersion:
        """
        Append a new revision to an existing page.

        Parameters
        ----------
        page_id : int
            Id of the page the revision belongs to.
        text : str
            Full text of the revision.
        author : str
            Username of the editor.
        date_time : Optional[datetime]
            Revision timestamp. Defaults to now.

        Returns
        -------
        PageVersion
            The stored revision, with its generated id.

        Raises
        ------
        NotFoundError
            If `page_id` does not reference an existing page.
        """
        with storage_errors("add_new_version"):
            page = await self._session.get(PageRecord, page_id)
            if page is None:
                raise NotFoundError(f"Page {page_id} does not exist")

            record = PageVersionRecord(
                id=str(uuid.uuid4()),
                page_id=page_id,
                text=text,
                author=author,
                date_time=to_naive_utc(date_time) or utc_now(),
            )
            self._session.add(record)
            await self._session.flush()

        return PageVersion.model_validate(record)

    async def update_existing_version(self, version: PageVersion) -> PageVersion:
        """
        Overwrite the text, author and date of an existing revision.

        The revision keeps its id and page id.

        Raises
        ------
        NotFoundError
            If no revision has `version.id`.
        """
        with storage_errors("update_existing_version"):
            record = await self._get_record(version.id)
            if record is None:
                raise NotFoundError(f"Page version {version.id} does not exist")

            record.text = version.text
            record.author = version.author
            record.date_time = to_naive_utc(version.date_time)
            await self._session.flush()

        return PageVersion.model_validate(record)

    async def delete_version(self, version_id: str) -> None:
        """
        Delete exactly one revision. Sibling revisions are never touched.

        Raises
        ------
        NotFoundError
            If no revision has `version_id`.
        """
        with storage_errors("delete_version"):
            result = await self._session.execute(
                delete(PageVersionRecord).where(PageVersionRecord.id == version_id)
            )
        if result.rowcount == 0:
            raise NotFoundError(f"Page version {version_id} does not exist")

    async def get_by_id(self, version_id: str) -> Optional[PageVersion]:
        with storage_errors("get_by_id"):
            record = await self._get_record(version_id)
        return PageVersion.model_validate(record) if record else None

    async def all_versions(self) -> List[PageVersion]:
        """Every stored revision across all pages, in insertion order."""
        stmt = select(PageVersionRecord).order_by(PageVersionRecord.seq)
        with storage_errors("all_versions"):
            result = await self._session.execute(stmt)
        return [PageVersion.model_validate(r) for r in result.scalars().all()]

    async def find_page_versions_by_page_id(self, page_id: int) -> List[PageVersion]:
        """
        All revisions of a page, most recent first.

        The page's original text is the oldest revision and so comes last.
        """
        stmt = (
            select(PageVersionRecord)
            .where(PageVersionRecord.page_id == page_id)
            .order_by(*_NEWEST_FIRST)
        )
        with storage_errors("find_page_versions_by_page_id"):
            result = await self._session.execute(stmt)
        return [PageVersion.model_validate(r) for r in result.scalars().all()]

    async def find_page_versions_by_author(self, author: str) -> List[PageVersion]:
        """All revisions written by `author` (case-insensitive), most recent first."""
        stmt = (
            select(PageVersionRecord)
            .where(func.lower(PageVersionRecord.author) == author.lower())
            .order_by(*_NEWEST_FIRST)
        )
        with storage_errors("find_page_versions_by_author"):
            result = await self._session.execute(stmt)
        return [PageVersion.model_validate(r) for r in result.scalars().all()]

    async def get_latest_version(self, page_id: int) -> Optional[PageVersion]:
        stmt = (
            select(PageVersionRecord)
            .where(PageVersionRecord.page_id == page_id)
            .order_by(*_NEWEST_FIRST)
            .limit(1)
        )
        with storage_errors("get_latest_version"):
            result = await self._session.execute(stmt)
        record = result.scalar_one_or_none()
        return PageVersion.model_validate(record) if record else None

    async def wipe(self) -> None:
        """
        Delete every revision of every page. Test isolation only.
        """
        with storage_errors("wipe_page_versions"):
            await self._session.execute(delete(PageVersionRecord))
            await self._session.flush()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _get_record(self, version_id: str) -> Optional[PageVersionRecord]:
        result = await self._session.execute(
            select(PageVersionRecord).where(PageVersionRecord.id == version_id)
        )
        return result.scalar_one_or_none()
