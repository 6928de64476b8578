"""SQLAlchemy ORM models for persisted entities.

Separate from the Pydantic models in course.py which describe request and
response payloads. This layer manages persistence concerns only. User
identities are external (issued by the auth layer) and stored as opaque
strings; there is no users table.
"""
from __future__ import annotations
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column, declarative_base
from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)

Base = declarative_base()


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the DateTime columns below."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class CourseRecord(Base):
    __tablename__ = "courses"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200))
    description: Mapped[str] = mapped_column(Text)
    topic: Mapped[str] = mapped_column(String(200), index=True)
    author_id: Mapped[str] = mapped_column(String(64), index=True)
    is_public: Mapped[bool] = mapped_column(Boolean, default=True)
    views: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "topic": self.topic,
            "authorId": self.author_id,
            "isPublic": self.is_public,
            "views": self.views,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


class ChapterRecord(Base):
    """A chapter of a course; ``order_index`` defines the learning order."""

    __tablename__ = "chapters"
    __table_args__ = (
        UniqueConstraint(
            "course_id", "order_index", name="uq_chapters_course_order"
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    course_id: Mapped[int] = mapped_column(
        ForeignKey("courses.id", ondelete="CASCADE"), index=True
    )
    title: Mapped[str] = mapped_column(String(200))
    description: Mapped[str] = mapped_column(Text, default="")
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    order_index: Mapped[int] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "courseId": self.course_id,
            "title": self.title,
            "description": self.description,
            "content": self.content,
            "orderIndex": self.order_index,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


class EnrollmentRecord(Base):
    """Enrollment of a user in a course.

    ``progress_percentage``, ``is_completed`` and ``completed_at`` are derived
    from ChapterProgress rows and only written by the progress service.
    """

    __tablename__ = "enrollments"
    __table_args__ = (
        UniqueConstraint(
            "course_id", "user_id", name="uq_enrollments_course_user"
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    course_id: Mapped[int] = mapped_column(
        ForeignKey("courses.id", ondelete="CASCADE"), index=True
    )
    user_id: Mapped[str] = mapped_column(String(64), index=True)
    enrolled_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    is_completed: Mapped[bool] = mapped_column(Boolean, default=False)
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime, nullable=True
    )
    progress_percentage: Mapped[int] = mapped_column(Integer, default=0)
    last_accessed_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "courseId": self.course_id,
            "userId": self.user_id,
            "enrolledAt": _iso(self.enrolled_at),
            "isCompleted": self.is_completed,
            "completedAt": _iso(self.completed_at),
            "progressPercentage": self.progress_percentage,
            "lastAccessedAt": _iso(self.last_accessed_at),
        }


class ChapterProgressRecord(Base):
    __tablename__ = "chapter_progress"
    __table_args__ = (
        UniqueConstraint(
            "chapter_id", "user_id", name="uq_chapter_progress_chapter_user"
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    chapter_id: Mapped[int] = mapped_column(
        ForeignKey("chapters.id", ondelete="CASCADE"), index=True
    )
    user_id: Mapped[str] = mapped_column(String(64), index=True)
    is_completed: Mapped[bool] = mapped_column(Boolean, default=False)
    completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime, nullable=True
    )

    def to_dict(self) -> dict:
        return {
            "chapterId": self.chapter_id,
            "userId": self.user_id,
            "isCompleted": self.is_completed,
            "completedAt": _iso(self.completed_at),
        }


class BookmarkRecord(Base):
    __tablename__ = "bookmarks"
    __table_args__ = (
        UniqueConstraint(
            "course_id", "user_id", name="uq_bookmarks_course_user"
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    course_id: Mapped[int] = mapped_column(
        ForeignKey("courses.id", ondelete="CASCADE"), index=True
    )
    user_id: Mapped[str] = mapped_column(String(64), index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
