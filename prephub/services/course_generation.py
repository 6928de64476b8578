"""Course outline and chapter content generation.

Both operations are thin wrappers around the text generator: format a prompt,
call the model, validate the shape of the reply.
"""
from __future__ import annotations
import json
import logging
from typing import Any, Dict

from jsonschema import ValidationError as JsonSchemaError, validate
from sqlalchemy.ext.asyncio import AsyncSession

from prephub.errors import AccessDeniedError, TextGenerationError
from prephub.models.persisted_course import ChapterRecord
from prephub.repositories.course_repo import CourseRepository
from prephub.services.access import can_write
from prephub.services.llm_client import TextGenerator

logger = logging.getLogger(__name__)

OUTLINE_MAX_TOKENS = 2000
CHAPTER_MAX_TOKENS = 32768

OUTLINE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "required": ["title", "description", "chapters"],
    "properties": {
        "title": {"type": "string", "minLength": 1},
        "description": {"type": "string"},
        "chapters": {
            "type": "array",
            "minItems": 1,
            "items": {
                "type": "object",
                "required": ["title"],
                "properties": {
                    "title": {"type": "string", "minLength": 1},
                    "description": {"type": "string"},
                    "order_index": {"type": "integer", "minimum": 1},
                },
            },
        },
    },
}


def outline_prompt(topic: str) -> str:
    return (
        f'Design a course outline for the topic "{topic}".\n'
        "Reply with a single JSON object and nothing else, shaped as:\n"
        '{"title": str, "description": str, "chapters": '
        '[{"title": str, "description": str, "order_index": int}]}\n'
        "Use 8 to 12 chapters ordered from fundamentals to advanced material, "
        "numbering order_index from 1."
    )


def chapter_prompt(course_title: str, chapter: ChapterRecord) -> str:
    return (
        f'Write the chapter "{chapter.title}" of the course "{course_title}".\n'
        f"Chapter summary: {chapter.description}\n"
        "Format the answer as Markdown with sections for learning objectives, "
        "core concepts, worked examples, common mistakes and key takeaways."
    )


def parse_outline(raw: str) -> Dict[str, Any]:
    """Extract and validate the JSON outline object from a model reply."""
    start, end = raw.find("{"), raw.rfind("}")
    if start == -1 or end < start:
        raise TextGenerationError(
            "Failed to generate course outline", details="Reply contained no JSON object"
        )
    try:
        outline = json.loads(raw[start:end + 1])
        validate(instance=outline, schema=OUTLINE_SCHEMA)
    except json.JSONDecodeError as exc:
        raise TextGenerationError(
            "Failed to generate course outline", details=f"Invalid JSON: {exc.msg}"
        ) from exc
    except JsonSchemaError as exc:
        raise TextGenerationError(
            "Failed to generate course outline", details=exc.message
        ) from exc
    for position, chapter in enumerate(outline["chapters"]):
        chapter.setdefault("description", "")
        chapter.setdefault("order_index", position + 1)
    return outline


async def generate_outline(generator: TextGenerator, topic: str) -> Dict[str, Any]:
    try:
        raw = await generator.generate(
            outline_prompt(topic), max_tokens=OUTLINE_MAX_TOKENS
        )
    except TextGenerationError as exc:
        raise TextGenerationError(
            "Failed to generate course outline", details=exc.details
        ) from exc
    outline = parse_outline(raw)
    logger.info(
        "Generated outline for %r with %d chapters", topic, len(outline["chapters"])
    )
    return outline


async def generate_chapter_content(
    session: AsyncSession,
    generator: TextGenerator,
    course_id: int,
    chapter_id: int,
    user_id: str,
) -> ChapterRecord:
    """Generate Markdown for a chapter and store it, replacing earlier content."""
    repo = CourseRepository(session)
    course = await repo.get(course_id)
    if not can_write(course, user_id):
        raise AccessDeniedError
    chapter = await repo.get_chapter(course_id, chapter_id)

    try:
        content = await generator.generate(
            chapter_prompt(course.title, chapter), max_tokens=CHAPTER_MAX_TOKENS
        )
    except TextGenerationError as exc:
        raise TextGenerationError(
            "Failed to generate chapter content", details=exc.details
        ) from exc
    return await repo.set_chapter_content(chapter, content)
