"""Read side of the course catalog: listings and course detail views."""
from __future__ import annotations
import math
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from prephub.errors import AccessDeniedError
from prephub.repositories.course_repo import CourseRepository
from prephub.repositories.enrollment_repo import EnrollmentRepository
from prephub.repositories.progress_repo import ProgressRepository
from prephub.services.access import can_read
from prephub.services.enrollment import EnrollmentService


class CourseCatalog:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.courses = CourseRepository(session)
        self.enrollments = EnrollmentRepository(session)
        self.progress = ProgressRepository(session)

    async def list_courses(
        self,
        viewer_id: Optional[str],
        search: Optional[str] = None,
        list_filter: str = "all",
        sort: str = "recent",
        page: int = 1,
        limit: int = 12,
    ) -> dict:
        records, total = await self.courses.list_visible(
            viewer_id,
            search=search,
            list_filter=list_filter,
            sort=sort,
            page=page,
            limit=limit,
        )
        stats = await self.courses.stats_for([r.id for r in records], viewer_id)
        return {
            "courses": [
                {**record.to_dict(), **stats[record.id].to_dict()}
                for record in records
            ],
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "pages": math.ceil(total / limit) if limit else 0,
            },
        }

    async def course_details(self, course_id: int, viewer_id: Optional[str]) -> dict:
        """Full course view for ``viewer_id``.

        Counts as a view (``views`` is incremented) and refreshes the
        viewer's ``last_accessed_at`` when enrolled.
        """
        course = await self.courses.get(course_id)
        if not can_read(course, viewer_id):
            raise AccessDeniedError

        await self.courses.increment_views(course)
        enrollment = await EnrollmentService(self.session).touch_access(
            course_id, viewer_id
        )

        chapters = await self.courses.list_chapters(course_id)
        progress = (
            await self.progress.by_chapter(course_id, viewer_id)
            if enrollment is not None
            else {}
        )
        chapter_views = []
        for chapter in chapters:
            row = progress.get(chapter.id)
            chapter_views.append(
                {
                    **chapter.to_dict(),
                    "isCompleted": bool(row and row.is_completed),
                    "completedAt": row.to_dict()["completedAt"] if row else None,
                }
            )

        stats = (await self.courses.stats_for([course_id], viewer_id))[course_id]
        return {
            **course.to_dict(),
            **stats.to_dict(),
            "enrollment": enrollment.to_dict() if enrollment else None,
            "chapters": chapter_views,
        }
