"""Enrollment, chapter progress and bookmark endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from prephub.auth import get_current_user
from prephub.db.config import get_session
from prephub.models.course import (
    BookmarkResponse,
    ChapterProgressUpdate,
    EnrollmentResponse,
    MessageResponse,
    ProgressResponse,
)
from prephub.services.bookmarks import toggle_bookmark
from prephub.services.enrollment import EnrollmentService
from prephub.services.progress import ProgressService

router = APIRouter(prefix="/courses", tags=["Enrollment"])


@router.post(
    "/{course_id}/enroll",
    response_model=EnrollmentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def enroll_course(
    course_id: int,
    user_id: str = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    enrollment = await EnrollmentService(session).enroll(course_id, user_id)
    return {
        "message": "Successfully enrolled in course",
        "enrollment": enrollment.to_dict(),
    }


@router.delete("/{course_id}/enroll", response_model=MessageResponse)
async def unenroll_course(
    course_id: int,
    user_id: str = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    await EnrollmentService(session).unenroll(course_id, user_id)
    return {"message": "Successfully unenrolled from course"}


@router.patch(
    "/{course_id}/chapters/{chapter_id}/progress",
    response_model=ProgressResponse,
)
async def update_chapter_progress(
    course_id: int,
    chapter_id: int,
    payload: ChapterProgressUpdate,
    user_id: str = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    update = await ProgressService(session).set_chapter_completion(
        course_id, chapter_id, user_id, payload.isCompleted
    )
    return {"message": "Progress updated successfully", "progress": update.to_dict()}


@router.patch("/{course_id}/bookmark", response_model=BookmarkResponse)
async def toggle_course_bookmark(
    course_id: int,
    user_id: str = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
):
    bookmarked = await toggle_bookmark(session, course_id, user_id)
    return {
        "message": "Course bookmarked" if bookmarked else "Course unbookmarked",
        "bookmarked": bookmarked,
    }
