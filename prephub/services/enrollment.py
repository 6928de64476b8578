"""Enrollment lifecycle: enroll, unenroll and last-access tracking."""
from __future__ import annotations
import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from prephub.db.transaction import atomic
from prephub.errors import (
    AccessDeniedError,
    AlreadyEnrolledError,
    NotEnrolledError,
)
from prephub.models.persisted_course import EnrollmentRecord
from prephub.repositories.course_repo import CourseRepository
from prephub.repositories.enrollment_repo import EnrollmentRepository
from prephub.repositories.progress_repo import ProgressRepository
from prephub.services.access import can_read

logger = logging.getLogger(__name__)


class EnrollmentService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.courses = CourseRepository(session)
        self.enrollments = EnrollmentRepository(session)
        self.progress = ProgressRepository(session)

    async def enroll(self, course_id: int, user_id: str) -> EnrollmentRecord:
        course = await self.courses.get(course_id)
        if not can_read(course, user_id):
            raise AccessDeniedError("Course is not available for enrollment")
        if await self.enrollments.get(course_id, user_id) is not None:
            raise AlreadyEnrolledError

        async with atomic(
            self.session, "enroll in course", on_conflict=AlreadyEnrolledError
        ):
            record = await self.enrollments.add(course_id, user_id)
        logger.info("User %s enrolled in course %s", user_id, course_id)
        return record

    async def unenroll(self, course_id: int, user_id: str) -> int:
        """Remove the enrollment and the user's progress in one transaction."""
        record = await self.enrollments.get(course_id, user_id)
        if record is None:
            raise NotEnrolledError

        async with atomic(self.session, "unenroll from course"):
            removed = await self.progress.count_for_course(course_id, user_id)
            await self.enrollments.remove_with_progress(record)
        logger.info(
            "User %s unenrolled from course %s (%d progress rows removed)",
            user_id,
            course_id,
            removed,
        )
        return removed

    async def touch_access(
        self, course_id: int, user_id: Optional[str]
    ) -> Optional[EnrollmentRecord]:
        if user_id is None:
            return None
        record = await self.enrollments.get(course_id, user_id)
        if record is None:
            return None
        async with atomic(self.session, "update last access"):
            self.enrollments.touch(record)
        return record
