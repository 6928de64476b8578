"""Repository layer for enrollments.

Methods here only stage changes on the session; the calling service decides
the transaction boundary (see ``prephub.db.transaction.atomic``).
"""
from __future__ import annotations
from datetime import datetime
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import delete, select

from prephub.models.persisted_course import (
    ChapterProgressRecord,
    ChapterRecord,
    EnrollmentRecord,
    utcnow,
)


class EnrollmentRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(
        self, course_id: int, user_id: str, for_update: bool = False
    ) -> Optional[EnrollmentRecord]:
        stmt = select(EnrollmentRecord).where(
            EnrollmentRecord.course_id == course_id,
            EnrollmentRecord.user_id == user_id,
        )
        if for_update:
            # Row lock on backends that support it; ignored by SQLite.
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def add(self, course_id: int, user_id: str) -> EnrollmentRecord:
        now = utcnow()
        record = EnrollmentRecord(
            course_id=course_id,
            user_id=user_id,
            enrolled_at=now,
            is_completed=False,
            completed_at=None,
            progress_percentage=0,
            last_accessed_at=now,
        )
        self.session.add(record)
        await self.session.flush()
        return record

    async def remove_with_progress(self, record: EnrollmentRecord) -> None:
        """Stage deletion of the enrollment and the user's progress in its course."""
        await self.session.execute(
            delete(ChapterProgressRecord)
            .where(
                ChapterProgressRecord.user_id == record.user_id,
                ChapterProgressRecord.chapter_id.in_(
                    select(ChapterRecord.id).where(
                        ChapterRecord.course_id == record.course_id
                    )
                ),
            )
            .execution_options(synchronize_session="fetch")
        )
        await self.session.delete(record)
        await self.session.flush()

    def touch(
        self, record: EnrollmentRecord, when: Optional[datetime] = None
    ) -> EnrollmentRecord:
        record.last_accessed_at = when or utcnow()
        return record
