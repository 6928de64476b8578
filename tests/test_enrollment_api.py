"""Enrollment, progress and bookmark endpoints."""

import pytest

from conftest import (
    AUTHOR,
    OTHER,
    STUDENT,
    assert_error,
    auth_headers,
    chapter_ids,
    create_course,
    enroll,
    set_progress,
)


@pytest.mark.asyncio
async def test_enroll_then_duplicate_enroll(client):
    course = await create_course(client)

    r = await enroll(client, course["id"])
    assert r.status_code == 201, r.text
    enrollment = r.json()["enrollment"]
    assert enrollment["progressPercentage"] == 0
    assert enrollment["isCompleted"] is False
    assert enrollment["completedAt"] is None
    assert enrollment["userId"] == STUDENT

    r = await enroll(client, course["id"])
    body = assert_error(r, 400, "already_exists")
    assert body["error"] == "Already enrolled in this course"

    r = await client.get(f"/api/v1/courses/{course['id']}")
    assert r.json()["enrollmentCount"] == 1


@pytest.mark.asyncio
async def test_private_course_enroll_denied(client):
    course = await create_course(client, is_public=False)

    r = await enroll(client, course["id"], user=OTHER)
    assert_error(r, 403, "access_denied")

    r = await client.get(
        f"/api/v1/courses/{course['id']}", headers=auth_headers(AUTHOR)
    )
    assert r.json()["enrollmentCount"] == 0


@pytest.mark.asyncio
async def test_enroll_requires_authentication(client):
    course = await create_course(client)
    r = await client.post(f"/api/v1/courses/{course['id']}/enroll")
    assert_error(r, 401, "authentication_required")

    r = await client.post(
        f"/api/v1/courses/{course['id']}/enroll",
        headers={"Authorization": "Bearer not-a-jwt"},
    )
    assert_error(r, 401)


@pytest.mark.asyncio
async def test_enroll_missing_course(client):
    r = await enroll(client, 9999)
    assert_error(r, 404, "not_found")


@pytest.mark.asyncio
async def test_unenroll_clears_progress(client):
    course = await create_course(client, chapters=2)
    ids = chapter_ids(course)
    await enroll(client, course["id"])
    r = await set_progress(client, course["id"], ids[0])
    assert r.status_code == 200, r.text

    r = await client.delete(
        f"/api/v1/courses/{course['id']}/enroll", headers=auth_headers(STUDENT)
    )
    assert r.status_code == 200, r.text

    # Re-enrolling starts from scratch
    r = await enroll(client, course["id"])
    assert r.json()["enrollment"]["progressPercentage"] == 0
    detail = (
        await client.get(
            f"/api/v1/courses/{course['id']}", headers=auth_headers(STUDENT)
        )
    ).json()
    assert [c["isCompleted"] for c in detail["chapters"]] == [False, False]


@pytest.mark.asyncio
async def test_unenroll_when_not_enrolled(client):
    course = await create_course(client)
    r = await client.delete(
        f"/api/v1/courses/{course['id']}/enroll", headers=auth_headers(STUDENT)
    )
    body = assert_error(r, 404, "not_found")
    assert body["error"] == "Not enrolled in this course"


class TestChapterProgress:
    @pytest.mark.asyncio
    async def test_four_chapter_scenario(self, client):
        course = await create_course(client, chapters=4)
        ids = chapter_ids(course)
        await enroll(client, course["id"])

        await set_progress(client, course["id"], ids[0])
        r = await set_progress(client, course["id"], ids[1])
        progress = r.json()["progress"]
        assert progress["progressPercentage"] == 50
        assert progress["enrollment"]["isCompleted"] is False

        r = await set_progress(client, course["id"], ids[2])
        assert r.json()["progress"]["progressPercentage"] == 75

        r = await set_progress(client, course["id"], ids[3])
        progress = r.json()["progress"]
        assert progress["progressPercentage"] == 100
        assert progress["isCompleted"] is True
        assert progress["enrollment"]["isCompleted"] is True
        assert progress["enrollment"]["completedAt"] is not None

    @pytest.mark.asyncio
    async def test_uncomplete_and_recomplete_keeps_completed_at(self, client):
        course = await create_course(client, chapters=3)
        ids = chapter_ids(course)
        await enroll(client, course["id"])
        for chapter_id in ids:
            r = await set_progress(client, course["id"], chapter_id)
        first = r.json()["progress"]["enrollment"]["completedAt"]

        r = await set_progress(client, course["id"], ids[0], is_completed=False)
        progress = r.json()["progress"]
        assert progress["progressPercentage"] == 67
        assert progress["isCompleted"] is False
        assert progress["completedAt"] is None
        assert progress["enrollment"]["isCompleted"] is False

        r = await set_progress(client, course["id"], ids[0])
        enrollment = r.json()["progress"]["enrollment"]
        assert enrollment["progressPercentage"] == 100
        assert enrollment["isCompleted"] is True
        assert enrollment["completedAt"] == first

    @pytest.mark.asyncio
    async def test_progress_requires_enrollment(self, client):
        course = await create_course(client)
        r = await set_progress(client, course["id"], chapter_ids(course)[0])
        body = assert_error(r, 403, "access_denied")
        assert body["error"] == "Must be enrolled in course to track progress"

    @pytest.mark.asyncio
    async def test_chapter_from_other_course(self, client):
        course = await create_course(client)
        other = await create_course(client, title="Other")
        await enroll(client, course["id"])
        r = await set_progress(client, course["id"], chapter_ids(other)[0])
        body = assert_error(r, 404, "not_found")
        assert body["error"] == "Chapter not found"

    @pytest.mark.asyncio
    async def test_is_completed_must_be_boolean(self, client):
        course = await create_course(client)
        await enroll(client, course["id"])
        r = await client.patch(
            f"/api/v1/courses/{course['id']}/chapters/{chapter_ids(course)[0]}/progress",
            json={"isCompleted": "maybe"},
            headers=auth_headers(STUDENT),
        )
        assert_error(r, 422, "validation_error")

        r = await client.patch(
            f"/api/v1/courses/{course['id']}/chapters/{chapter_ids(course)[0]}/progress",
            json={},
            headers=auth_headers(STUDENT),
        )
        assert_error(r, 422, "validation_error")

    @pytest.mark.asyncio
    async def test_progress_is_per_user(self, client):
        course = await create_course(client, chapters=2)
        ids = chapter_ids(course)
        await enroll(client, course["id"], user=STUDENT)
        await enroll(client, course["id"], user=OTHER)
        await set_progress(client, course["id"], ids[0], user=STUDENT)
        r = await set_progress(client, course["id"], ids[1], user=OTHER)
        assert r.json()["progress"]["progressPercentage"] == 50

        detail = (
            await client.get(
                f"/api/v1/courses/{course['id']}", headers=auth_headers(OTHER)
            )
        ).json()
        assert [c["isCompleted"] for c in detail["chapters"]] == [False, True]


class TestBookmarks:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("toggles", [1, 2, 3, 4])
    async def test_toggle_is_strict_flip(self, client, toggles):
        course = await create_course(client)
        for _ in range(toggles):
            r = await client.patch(
                f"/api/v1/courses/{course['id']}/bookmark",
                headers=auth_headers(STUDENT),
            )
            assert r.status_code == 200, r.text
        assert r.json()["bookmarked"] is (toggles % 2 == 1)

        listing = (
            await client.get(
                "/api/v1/courses?filter=bookmarked", headers=auth_headers(STUDENT)
            )
        ).json()
        assert len(listing["courses"]) == (toggles % 2)

    @pytest.mark.asyncio
    async def test_bookmark_missing_course(self, client):
        r = await client.patch(
            "/api/v1/courses/31337/bookmark", headers=auth_headers(STUDENT)
        )
        assert_error(r, 404, "not_found")
