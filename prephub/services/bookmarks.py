"""Bookmark toggling."""
from __future__ import annotations
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from prephub.db.transaction import atomic
from prephub.repositories.bookmark_repo import BookmarkRepository
from prephub.repositories.course_repo import CourseRepository

logger = logging.getLogger(__name__)


async def toggle_bookmark(session: AsyncSession, course_id: int, user_id: str) -> bool:
    """Flip the bookmark for (course, user); returns the new state."""
    await CourseRepository(session).get(course_id)
    bookmarks = BookmarkRepository(session)

    async with atomic(session, "toggle bookmark"):
        existing = await bookmarks.get(course_id, user_id)
        if existing is not None:
            await bookmarks.remove(existing)
            bookmarked = False
        else:
            await bookmarks.add(course_id, user_id)
            bookmarked = True
    logger.debug(
        "User %s %s course %s",
        user_id,
        "bookmarked" if bookmarked else "unbookmarked",
        course_id,
    )
    return bookmarked
