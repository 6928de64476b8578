"""Repository layer for per-user chapter progress."""
from __future__ import annotations
from datetime import datetime
from typing import Dict, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import func, select, true

from prephub.models.persisted_course import ChapterProgressRecord, ChapterRecord


class ProgressRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(
        self, chapter_id: int, user_id: str
    ) -> Optional[ChapterProgressRecord]:
        result = await self.session.execute(
            select(ChapterProgressRecord).where(
                ChapterProgressRecord.chapter_id == chapter_id,
                ChapterProgressRecord.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def upsert(
        self, chapter_id: int, user_id: str, is_completed: bool, now: datetime
    ) -> ChapterProgressRecord:
        """Set the completion flag for (chapter, user).

        ``completed_at`` is stamped when the row enters the completed state,
        kept while it stays completed and cleared when it is unmarked.
        """
        record = await self.get(chapter_id, user_id)
        if record is None:
            record = ChapterProgressRecord(
                chapter_id=chapter_id,
                user_id=user_id,
                is_completed=is_completed,
                completed_at=now if is_completed else None,
            )
            self.session.add(record)
        else:
            if is_completed and not (record.is_completed and record.completed_at):
                record.completed_at = now
            elif not is_completed:
                record.completed_at = None
            record.is_completed = is_completed
        await self.session.flush()
        return record

    async def count_completed(self, course_id: int, user_id: str) -> int:
        result = await self.session.execute(
            select(func.count(ChapterProgressRecord.id))
            .join(ChapterRecord, ChapterRecord.id == ChapterProgressRecord.chapter_id)
            .where(
                ChapterRecord.course_id == course_id,
                ChapterProgressRecord.user_id == user_id,
                ChapterProgressRecord.is_completed == true(),
            )
        )
        return result.scalar_one()

    async def count_for_course(self, course_id: int, user_id: str) -> int:
        result = await self.session.execute(
            select(func.count(ChapterProgressRecord.id))
            .join(ChapterRecord, ChapterRecord.id == ChapterProgressRecord.chapter_id)
            .where(
                ChapterRecord.course_id == course_id,
                ChapterProgressRecord.user_id == user_id,
            )
        )
        return result.scalar_one()

    async def by_chapter(
        self, course_id: int, user_id: str
    ) -> Dict[int, ChapterProgressRecord]:
        result = await self.session.execute(
            select(ChapterProgressRecord)
            .join(ChapterRecord, ChapterRecord.id == ChapterProgressRecord.chapter_id)
            .where(
                ChapterRecord.course_id == course_id,
                ChapterProgressRecord.user_id == user_id,
            )
        )
        return {row.chapter_id: row for row in result.scalars().all()}
