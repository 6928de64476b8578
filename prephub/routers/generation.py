"""LLM-backed authoring endpoints (outline and chapter content)."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from prephub.auth import get_current_user
from prephub.db.config import get_session
from prephub.models.course import OutlineRequest
from prephub.services.course_generation import (
    generate_chapter_content,
    generate_outline,
)
from prephub.services.llm_client import TextGenerator, get_text_generator
from prephub.utils.feature_flags import require_feature

router = APIRouter(
    prefix="/courses",
    tags=["Generation"],
    dependencies=[Depends(require_feature("ai_generation"))],
)


@router.post("/generate-outline")
async def create_outline(
    payload: OutlineRequest,
    user_id: str = Depends(get_current_user),
    generator: TextGenerator = Depends(get_text_generator),
):
    return await generate_outline(generator, payload.topic)


@router.post("/{course_id}/chapters/{chapter_id}/generate-content")
async def create_chapter_content(
    course_id: int,
    chapter_id: int,
    user_id: str = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
    generator: TextGenerator = Depends(get_text_generator),
):
    chapter = await generate_chapter_content(
        session, generator, course_id, chapter_id, user_id
    )
    return {
        "message": "Chapter content generated successfully",
        "content": chapter.content,
        "chapter": chapter.to_dict(),
    }
