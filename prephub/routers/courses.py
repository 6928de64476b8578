"""Courses router: catalog listing, course detail and author CRUD.

Authorization decisions go through ``prephub.services.access``; failures
are raised as ``prephub.errors`` exceptions and rendered by the global
handlers in ``prephub.main``.
"""
from __future__ import annotations
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from prephub.auth import get_current_user, get_optional_user
from prephub.db.config import get_session
from prephub.errors import AccessDeniedError
from prephub.models.course import (
    CourseCreate,
    CourseListFilter,
    CourseListSort,
    CourseUpdate,
)
from prephub.repositories.course_repo import ChapterDraft, CourseRepository
from prephub.services.access import can_write
from prephub.services.catalog import CourseCatalog

router = APIRouter(prefix="/courses", tags=["Courses"])

# Helpers ------------------------------------------------------------------


async def _get_repo(
    session: AsyncSession = Depends(get_session),
) -> CourseRepository:
    return CourseRepository(session)


async def _get_catalog(
    session: AsyncSession = Depends(get_session),
) -> CourseCatalog:
    return CourseCatalog(session)


async def _get_owned_course(
    course_id: int, repo: CourseRepository, user_id: str
):
    course = await repo.get(course_id)
    if not can_write(course, user_id):
        raise AccessDeniedError
    return course

# Routes -------------------------------------------------------------------


@router.get("")
async def list_courses(
    search: Optional[str] = Query(None, max_length=200),
    list_filter: CourseListFilter = Query("all", alias="filter"),
    sort: CourseListSort = "recent",
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    viewer_id: Optional[str] = Depends(get_optional_user),
    catalog: CourseCatalog = Depends(_get_catalog),
):
    return await catalog.list_courses(
        viewer_id,
        search=search,
        list_filter=list_filter,
        sort=sort,
        page=page,
        limit=limit,
    )


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_course(
    payload: CourseCreate,
    user_id: str = Depends(get_current_user),
    repo: CourseRepository = Depends(_get_repo),
):
    course, chapters = await repo.create(
        author_id=user_id,
        title=payload.title,
        description=payload.description,
        topic=payload.topic,
        is_public=payload.isPublic,
        chapters=[
            ChapterDraft(
                title=c.title,
                description=c.description,
                order_index=c.order_index,
            )
            for c in payload.chapters
        ],
    )
    return {**course.to_dict(), "chapters": [c.to_dict() for c in chapters]}


@router.get("/{course_id}")
async def get_course(
    course_id: int,
    viewer_id: Optional[str] = Depends(get_optional_user),
    catalog: CourseCatalog = Depends(_get_catalog),
):
    return await catalog.course_details(course_id, viewer_id)


@router.patch("/{course_id}")
async def update_course(
    course_id: int,
    payload: CourseUpdate,
    user_id: str = Depends(get_current_user),
    repo: CourseRepository = Depends(_get_repo),
):
    await _get_owned_course(course_id, repo, user_id)
    course = await repo.update_record(
        pk=course_id,
        title=payload.title,
        description=payload.description,
        topic=payload.topic,
        is_public=payload.isPublic,
    )
    return course.to_dict()


@router.delete("/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_course(
    course_id: int,
    user_id: str = Depends(get_current_user),
    repo: CourseRepository = Depends(_get_repo),
):
    await _get_owned_course(course_id, repo, user_id)
    await repo.delete_record(course_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
