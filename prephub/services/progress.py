"""Chapter completion tracking and enrollment progress recomputation.

``Enrollment.progress_percentage`` is a cached aggregate. It is recomputed
from ChapterProgress rows on every completion write, inside the same
transaction as the write itself:

1. upsert the (chapter, user) progress row
2. count the course's chapters and the user's completed chapters
3. ``progress_percentage = round_half_up(100 * completed / total)``
4. ``is_completed = progress_percentage == 100``; ``completed_at`` is stamped
   the first time the enrollment completes and never overwritten
"""
from __future__ import annotations
import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from prephub.db.transaction import atomic
from prephub.errors import EnrollmentRequiredError
from prephub.models.persisted_course import (
    ChapterProgressRecord,
    EnrollmentRecord,
    utcnow,
)
from prephub.repositories.course_repo import CourseRepository
from prephub.repositories.enrollment_repo import EnrollmentRepository
from prephub.repositories.progress_repo import ProgressRepository

logger = logging.getLogger(__name__)


def progress_percentage(completed: int, total: int) -> int:
    """Integer percentage rounded half-up (2 of 3 -> 67, 1 of 8 -> 13)."""
    if total <= 0:
        return 0
    return (200 * completed + total) // (2 * total)


@dataclass
class ProgressUpdate:
    progress: ChapterProgressRecord
    enrollment: EnrollmentRecord

    @property
    def progress_percentage(self) -> int:
        return self.enrollment.progress_percentage

    def to_dict(self) -> dict:
        chapter = self.progress.to_dict()
        return {
            "isCompleted": chapter["isCompleted"],
            "completedAt": chapter["completedAt"],
            "progressPercentage": self.enrollment.progress_percentage,
            "enrollment": self.enrollment.to_dict(),
        }


class ProgressService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.courses = CourseRepository(session)
        self.enrollments = EnrollmentRepository(session)
        self.progress = ProgressRepository(session)

    async def set_chapter_completion(
        self,
        course_id: int,
        chapter_id: int,
        user_id: str,
        is_completed: bool,
    ) -> ProgressUpdate:
        async with atomic(self.session, "update progress"):
            enrollment = await self.enrollments.get(
                course_id, user_id, for_update=True
            )
            if enrollment is None:
                raise EnrollmentRequiredError
            await self.courses.get_chapter(course_id, chapter_id)

            now = utcnow()
            record = await self.progress.upsert(
                chapter_id, user_id, is_completed, now
            )

            total = await self.courses.count_chapters(course_id)
            completed = await self.progress.count_completed(course_id, user_id)
            percentage = progress_percentage(completed, total)
            course_completed = percentage == 100

            enrollment.progress_percentage = percentage
            enrollment.is_completed = course_completed
            enrollment.last_accessed_at = now
            if course_completed and enrollment.completed_at is None:
                enrollment.completed_at = now
                logger.info("User %s completed course %s", user_id, course_id)

        logger.debug(
            "Progress for user %s in course %s: %d/%d chapters (%d%%)",
            user_id,
            course_id,
            completed,
            total,
            percentage,
        )
        return ProgressUpdate(progress=record, enrollment=enrollment)
