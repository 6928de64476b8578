"""Outline and chapter-content generation endpoints (stubbed generator)."""

import json

import pytest

from conftest import (
    AUTHOR,
    OTHER,
    assert_error,
    auth_headers,
    chapter_ids,
    create_course,
)
from prephub.errors import TextGenerationError
from prephub.services.course_generation import parse_outline
from prephub.utils.feature_flags import feature_flags

OUTLINE = {
    "title": "Graph Algorithms",
    "description": "From traversal to shortest paths",
    "chapters": [
        {"title": "Breadth-first search"},
        {"title": "Dijkstra", "description": "Weighted shortest paths"},
    ],
}


async def post_outline(client, topic="graphs", user=AUTHOR):
    return await client.post(
        "/api/v1/courses/generate-outline",
        json={"topic": topic},
        headers=auth_headers(user),
    )


class TestOutline:
    @pytest.mark.asyncio
    async def test_outline_is_extracted_from_reply(self, client, text_generator):
        text_generator.generate.return_value = (
            "Sure! Here is the outline:\n" + json.dumps(OUTLINE) + "\nEnjoy."
        )
        r = await post_outline(client)
        assert r.status_code == 200, r.text
        outline = r.json()
        assert outline["title"] == "Graph Algorithms"
        assert [c["order_index"] for c in outline["chapters"]] == [1, 2]
        assert outline["chapters"][0]["description"] == ""
        prompt = text_generator.generate.await_args.args[0]
        assert '"graphs"' in prompt

    @pytest.mark.asyncio
    async def test_reply_without_json(self, client, text_generator):
        text_generator.generate.return_value = "I cannot help with that."
        r = await post_outline(client)
        body = assert_error(r, 500, "generation_failed")
        assert body["error"] == "Failed to generate course outline"
        assert body["details"] == "Reply contained no JSON object"

    @pytest.mark.asyncio
    async def test_backend_failure_details_pass_through(self, client, text_generator):
        text_generator.generate.side_effect = TextGenerationError(
            details="Generation backend returned HTTP 429"
        )
        r = await post_outline(client)
        body = assert_error(r, 500, "generation_failed")
        assert body["details"] == "Generation backend returned HTTP 429"

    @pytest.mark.asyncio
    async def test_outline_requires_authentication(self, client):
        r = await client.post(
            "/api/v1/courses/generate-outline", json={"topic": "graphs"}
        )
        assert_error(r, 401)

    @pytest.mark.asyncio
    async def test_disabled_feature_hides_routes(self, client, monkeypatch):
        monkeypatch.setattr(feature_flags.flags["ai_generation"], "enabled", False)
        r = await post_outline(client)
        assert_error(r, 404, "not_found")


class TestParseOutline:
    def test_invalid_json(self):
        with pytest.raises(TextGenerationError) as excinfo:
            parse_outline('{"title": }')
        assert excinfo.value.details.startswith("Invalid JSON")

    def test_outline_without_chapters(self):
        with pytest.raises(TextGenerationError):
            parse_outline(json.dumps({**OUTLINE, "chapters": []}))

    def test_explicit_order_index_kept(self):
        outline = parse_outline(
            json.dumps({**OUTLINE, "chapters": [{"title": "Only", "order_index": 4}]})
        )
        assert outline["chapters"][0]["order_index"] == 4


class TestChapterContent:
    @pytest.mark.asyncio
    async def test_author_generates_and_stores_content(self, client, text_generator):
        text_generator.generate.return_value = "# BFS\n\nQueues all the way down."
        course = await create_course(client)
        chapter_id = chapter_ids(course)[0]

        r = await client.post(
            f"/api/v1/courses/{course['id']}/chapters/{chapter_id}/generate-content",
            headers=auth_headers(AUTHOR),
        )
        assert r.status_code == 200, r.text
        assert r.json()["content"] == "# BFS\n\nQueues all the way down."

        detail = (
            await client.get(
                f"/api/v1/courses/{course['id']}", headers=auth_headers(AUTHOR)
            )
        ).json()
        assert detail["chapters"][0]["content"] == "# BFS\n\nQueues all the way down."
        assert detail["chapters"][1]["content"] is None

    @pytest.mark.asyncio
    async def test_non_author_rejected(self, client, text_generator):
        course = await create_course(client)
        r = await client.post(
            f"/api/v1/courses/{course['id']}/chapters/{chapter_ids(course)[0]}/generate-content",
            headers=auth_headers(OTHER),
        )
        assert_error(r, 403, "access_denied")
        text_generator.generate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_chapter_of_other_course(self, client):
        course = await create_course(client)
        other = await create_course(client, title="Other")
        r = await client.post(
            f"/api/v1/courses/{course['id']}/chapters/{chapter_ids(other)[0]}/generate-content",
            headers=auth_headers(AUTHOR),
        )
        assert_error(r, 404, "not_found")

    @pytest.mark.asyncio
    async def test_generation_failure_keeps_old_content(self, client, text_generator):
        course = await create_course(client)
        chapter_id = chapter_ids(course)[0]
        text_generator.generate.side_effect = TextGenerationError(
            details="No content generated"
        )
        r = await client.post(
            f"/api/v1/courses/{course['id']}/chapters/{chapter_id}/generate-content",
            headers=auth_headers(AUTHOR),
        )
        body = assert_error(r, 500, "generation_failed")
        assert body["error"] == "Failed to generate chapter content"
        assert body["details"] == "No content generated"

        detail = (await client.get(f"/api/v1/courses/{course['id']}")).json()
        assert detail["chapters"][0]["content"] is None
