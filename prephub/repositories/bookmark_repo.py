"""Repository layer for course bookmarks."""
from __future__ import annotations
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from prephub.models.persisted_course import BookmarkRecord


class BookmarkRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, course_id: int, user_id: str) -> Optional[BookmarkRecord]:
        result = await self.session.execute(
            select(BookmarkRecord).where(
                BookmarkRecord.course_id == course_id,
                BookmarkRecord.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()

    async def add(self, course_id: int, user_id: str) -> BookmarkRecord:
        record = BookmarkRecord(course_id=course_id, user_id=user_id)
        self.session.add(record)
        await self.session.flush()
        return record

    async def remove(self, record: BookmarkRecord) -> None:
        await self.session.delete(record)
        await self.session.flush()
