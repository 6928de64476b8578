"""Repository layer for Course and Chapter persistence.

Provides an abstraction over direct SQLAlchemy session usage so that routers
and services remain thin and testable.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import delete, func, or_, select, update

from prephub.db.transaction import atomic
from prephub.errors import (
    ChapterNotFoundError,
    CourseNotFoundError,
    ValidationError,
)
from prephub.models.persisted_course import (
    BookmarkRecord,
    ChapterProgressRecord,
    ChapterRecord,
    CourseRecord,
    EnrollmentRecord,
)
from prephub.services.access import readable_by

LIST_FILTERS = ("all", "my-courses", "bookmarked", "enrolled")
LIST_SORTS = ("recent", "popular", "oldest")


@dataclass
class ChapterDraft:
    title: str
    description: str = ""
    order_index: Optional[int] = None


@dataclass
class CourseStats:
    chapter_count: int = 0
    bookmark_count: int = 0
    enrollment_count: int = 0
    is_bookmarked: bool = False
    is_enrolled: bool = False

    def to_dict(self) -> dict:
        return {
            "chapterCount": self.chapter_count,
            "bookmarkCount": self.bookmark_count,
            "enrollmentCount": self.enrollment_count,
            "isBookmarked": self.is_bookmarked,
            "isEnrolled": self.is_enrolled,
        }


def assign_order(chapters: Iterable[ChapterDraft]) -> List[Tuple[int, ChapterDraft]]:
    """Resolve each chapter's order index (explicit or 1-based position)."""
    ordered = [
        (draft.order_index or position + 1, draft)
        for position, draft in enumerate(chapters)
    ]
    if not ordered:
        raise ValidationError("A course needs at least one chapter")
    indexes = [index for index, _ in ordered]
    if len(set(indexes)) != len(indexes):
        raise ValidationError("Chapter order indexes must be unique")
    return ordered


class CourseRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    # CREATE -----------------------------------------------------------------
    async def create(
        self,
        author_id: str,
        title: str,
        description: str,
        topic: str,
        chapters: Sequence[ChapterDraft],
        is_public: bool = True,
    ) -> Tuple[CourseRecord, List[ChapterRecord]]:
        ordered = assign_order(chapters)
        async with atomic(self.session, "create course"):
            record = CourseRecord(
                title=title,
                description=description,
                topic=topic,
                author_id=author_id,
                is_public=is_public,
                views=0,
            )
            self.session.add(record)
            await self.session.flush()
            chapter_records = [
                ChapterRecord(
                    course_id=record.id,
                    title=draft.title,
                    description=draft.description,
                    order_index=index,
                )
                for index, draft in ordered
            ]
            self.session.add_all(chapter_records)
        chapter_records.sort(key=lambda c: c.order_index)
        return record, chapter_records

    # READ -------------------------------------------------------------------
    async def get(self, pk: int) -> CourseRecord:
        result = await self.session.execute(
            select(CourseRecord).where(CourseRecord.id == pk)
        )
        record = result.scalar_one_or_none()
        if not record:
            raise CourseNotFoundError
        return record

    async def list_chapters(self, course_id: int) -> Sequence[ChapterRecord]:
        result = await self.session.execute(
            select(ChapterRecord)
            .where(ChapterRecord.course_id == course_id)
            .order_by(ChapterRecord.order_index)
        )
        return result.scalars().all()

    async def get_chapter(self, course_id: int, chapter_id: int) -> ChapterRecord:
        result = await self.session.execute(
            select(ChapterRecord).where(
                ChapterRecord.id == chapter_id,
                ChapterRecord.course_id == course_id,
            )
        )
        chapter = result.scalar_one_or_none()
        if not chapter:
            raise ChapterNotFoundError
        return chapter

    async def count_chapters(self, course_id: int) -> int:
        result = await self.session.execute(
            select(func.count(ChapterRecord.id)).where(
                ChapterRecord.course_id == course_id
            )
        )
        return result.scalar_one()

    async def list_visible(
        self,
        viewer_id: Optional[str],
        search: Optional[str] = None,
        list_filter: str = "all",
        sort: str = "recent",
        page: int = 1,
        limit: int = 12,
    ) -> Tuple[Sequence[CourseRecord], int]:
        conditions = [readable_by(viewer_id)]
        if viewer_id is not None:
            if list_filter == "my-courses":
                conditions.append(CourseRecord.author_id == viewer_id)
            elif list_filter == "bookmarked":
                conditions.append(
                    CourseRecord.id.in_(
                        select(BookmarkRecord.course_id).where(
                            BookmarkRecord.user_id == viewer_id
                        )
                    )
                )
            elif list_filter == "enrolled":
                conditions.append(
                    CourseRecord.id.in_(
                        select(EnrollmentRecord.course_id).where(
                            EnrollmentRecord.user_id == viewer_id
                        )
                    )
                )
        if search:
            # Literal substring match: % and _ in the query are not wildcards
            conditions.append(
                or_(
                    CourseRecord.title.icontains(search, autoescape=True),
                    CourseRecord.description.icontains(search, autoescape=True),
                    CourseRecord.topic.icontains(search, autoescape=True),
                )
            )

        if sort == "popular":
            order_by = [
                CourseRecord.views.desc(),
                CourseRecord.created_at.desc(),
                CourseRecord.id.desc(),
            ]
        elif sort == "oldest":
            order_by = [CourseRecord.created_at.asc(), CourseRecord.id.asc()]
        else:
            order_by = [CourseRecord.created_at.desc(), CourseRecord.id.desc()]

        total = (
            await self.session.execute(
                select(func.count(CourseRecord.id)).where(*conditions)
            )
        ).scalar_one()
        result = await self.session.execute(
            select(CourseRecord)
            .where(*conditions)
            .order_by(*order_by)
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return result.scalars().all(), total

    async def stats_for(
        self, course_ids: Sequence[int], viewer_id: Optional[str]
    ) -> Dict[int, CourseStats]:
        """Aggregate counts and viewer flags for a page of courses."""
        stats = {course_id: CourseStats() for course_id in course_ids}
        if not course_ids:
            return stats

        for model, attr in (
            (ChapterRecord, "chapter_count"),
            (BookmarkRecord, "bookmark_count"),
            (EnrollmentRecord, "enrollment_count"),
        ):
            rows = await self.session.execute(
                select(model.course_id, func.count(model.id))
                .where(model.course_id.in_(course_ids))
                .group_by(model.course_id)
            )
            for course_id, count in rows.all():
                setattr(stats[course_id], attr, count)

        if viewer_id is not None:
            for model, attr in (
                (BookmarkRecord, "is_bookmarked"),
                (EnrollmentRecord, "is_enrolled"),
            ):
                rows = await self.session.execute(
                    select(model.course_id).where(
                        model.course_id.in_(course_ids),
                        model.user_id == viewer_id,
                    )
                )
                for course_id in rows.scalars().all():
                    setattr(stats[course_id], attr, True)
        return stats

    # UPDATE -----------------------------------------------------------------
    async def update_record(
        self,
        pk: int,
        title: Optional[str] = None,
        description: Optional[str] = None,
        topic: Optional[str] = None,
        is_public: Optional[bool] = None,
    ) -> CourseRecord:
        record = await self.get(pk)
        async with atomic(self.session, "update course"):
            if title:
                record.title = title
            if description:
                record.description = description
            if topic:
                record.topic = topic
            if is_public is not None:
                record.is_public = is_public
        await self.session.refresh(record)
        return record

    async def increment_views(self, record: CourseRecord) -> CourseRecord:
        async with atomic(self.session, "record course view"):
            await self.session.execute(
                update(CourseRecord)
                .where(CourseRecord.id == record.id)
                .values(views=CourseRecord.views + 1)
                .execution_options(synchronize_session=False)
            )
        await self.session.refresh(record)
        return record

    async def set_chapter_content(
        self, chapter: ChapterRecord, content: str
    ) -> ChapterRecord:
        async with atomic(self.session, "save chapter content"):
            chapter.content = content
        await self.session.refresh(chapter)
        return chapter

    # DELETE -----------------------------------------------------------------
    async def delete_record(self, pk: int) -> None:
        record = await self.get(pk)
        chapter_ids = select(ChapterRecord.id).where(ChapterRecord.course_id == pk)
        async with atomic(self.session, "delete course"):
            await self.session.execute(
                delete(ChapterProgressRecord).where(
                    ChapterProgressRecord.chapter_id.in_(chapter_ids)
                )
            )
            await self.session.execute(
                delete(EnrollmentRecord).where(EnrollmentRecord.course_id == pk)
            )
            await self.session.execute(
                delete(BookmarkRecord).where(BookmarkRecord.course_id == pk)
            )
            await self.session.execute(
                delete(ChapterRecord).where(ChapterRecord.course_id == pk)
            )
            await self.session.delete(record)
