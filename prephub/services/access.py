"""Course access gate.

The single home of the course visibility rule: a course is readable when it is
public or the viewer authored it, and writable only by its author.
"""
from __future__ import annotations
from typing import Optional

from sqlalchemy import ColumnElement, true

from prephub.models.persisted_course import CourseRecord


def can_read(course: CourseRecord, viewer_id: Optional[str]) -> bool:
    return bool(course.is_public) or (
        viewer_id is not None and viewer_id == course.author_id
    )


def can_write(course: CourseRecord, viewer_id: Optional[str]) -> bool:
    return viewer_id is not None and viewer_id == course.author_id


def readable_by(viewer_id: Optional[str]) -> ColumnElement[bool]:
    """SQL form of :func:`can_read` for use in WHERE clauses."""
    if viewer_id is None:
        return CourseRecord.is_public == true()
    return (CourseRecord.is_public == true()) | (
        CourseRecord.author_id == viewer_id
    )
