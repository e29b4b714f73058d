"""
Little Application: Courses API Tests
========================================

What:  /api/v1/courses listing and CRUD, the nested post courses routes,
       and average_cost maintenance.
"""

import uuid

import pytest

ALL = {"limit": "10"}

NEW_COURSE = {
    "title": "Mobile Development",
    "description": "Build native apps",
    "weeks": "10",
    "tuition": 7001,
    "minimum_skill": "intermediate",
    "scholarship_available": True,
}


def titles(response):
    return [doc["title"] for doc in response.json()["data"]]


class TestListCourses:

    @pytest.mark.asyncio
    async def test_post_summary_is_embedded(self, client, seeded):
        response = await client.get("/api/v1/courses", params=ALL)

        assert response.status_code == 200
        body = response.json()
        assert body["count"] == 4
        assert titles(response) == [
            "Data Science Program",
            "UI/UX",
            "Full Stack Web Development",
            "Front End Web Development",
        ]
        for doc in body["data"]:
            assert set(doc["post"]) == {"id", "name", "description"}
        assert body["data"][1]["post"]["name"] == "ModernTech Bootcamp"

    @pytest.mark.asyncio
    async def test_in_filter_on_minimum_skill(self, client, seeded):
        response = await client.get(
            "/api/v1/courses", params={"minimum_skill[in]": "beginner,advanced", **ALL}
        )
        assert titles(response) == [
            "Data Science Program",
            "UI/UX",
            "Front End Web Development",
        ]

    @pytest.mark.asyncio
    async def test_repeated_in_params_merge(self, client, seeded):
        response = await client.get(
            "/api/v1/courses?minimum_skill[in]=beginner&minimum_skill[in]=intermediate&limit=10"
        )
        assert response.headers["X-Total-Count"] == "3"

    @pytest.mark.asyncio
    async def test_filter_by_post(self, client, seeded):
        post = seeded["posts"]["devworks"]
        response = await client.get("/api/v1/courses", params={"post_id": str(post.id), **ALL})
        assert len(response.json()["data"]) == 2

    @pytest.mark.asyncio
    async def test_select_without_post(self, client, seeded):
        response = await client.get(
            "/api/v1/courses", params={"select": "title,tuition", "sort": "tuition", **ALL}
        )

        data = response.json()["data"]
        assert [doc["tuition"] for doc in data] == [5000, 8000, 12000, 12000]
        assert all(set(doc) == {"id", "title", "tuition"} for doc in data)

    @pytest.mark.asyncio
    async def test_limit_is_capped(self, client, seeded, settings):
        response = await client.get("/api/v1/courses", params={"limit": "100000"})

        assert response.status_code == 200
        assert response.json()["count"] == 4


class TestPostCourses:

    @pytest.mark.asyncio
    async def test_list_for_post(self, client, seeded):
        post = seeded["posts"]["devworks"]
        response = await client.get(f"/api/v1/posts/{post.id}/courses")

        body = response.json()
        assert body["count"] == 2
        assert titles(response) == ["Front End Web Development", "Full Stack Web Development"]
        assert "pagination" not in body

    @pytest.mark.asyncio
    async def test_list_for_missing_post(self, client, seeded):
        response = await client.get(f"/api/v1/posts/{uuid.uuid4()}/courses")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_add_course_recomputes_average_cost(self, client, tokens, seeded):
        post = seeded["posts"]["moderntech"]
        response = await client.post(
            f"/api/v1/posts/{post.id}/courses", json=NEW_COURSE, headers=tokens["pub1"]
        )

        assert response.status_code == 201
        assert response.json()["data"]["post_id"] == str(post.id)

        # (5000 + 7001) / 2 = 6000.5 → rounded up to the next 10
        detail = await client.get(f"/api/v1/posts/{post.id}")
        assert detail.json()["data"]["average_cost"] == 6010

    @pytest.mark.asyncio
    async def test_add_course_to_someone_elses_post(self, client, tokens, seeded):
        post = seeded["posts"]["codemasters"]
        response = await client.post(
            f"/api/v1/posts/{post.id}/courses", json=NEW_COURSE, headers=tokens["pub1"]
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_add_course_rejects_unknown_skill(self, client, tokens, seeded):
        post = seeded["posts"]["moderntech"]
        response = await client.post(
            f"/api/v1/posts/{post.id}/courses",
            json={**NEW_COURSE, "minimum_skill": "wizard"},
            headers=tokens["pub1"],
        )
        assert response.status_code == 400


class TestSingleCourse:

    @pytest.mark.asyncio
    async def test_get_includes_post(self, client, seeded):
        course = seeded["courses"]["uiux"]
        response = await client.get(f"/api/v1/courses/{course.id}")

        data = response.json()["data"]
        assert data["title"] == "UI/UX"
        assert data["post"]["name"] == "ModernTech Bootcamp"

    @pytest.mark.asyncio
    async def test_get_missing(self, client, seeded):
        missing = uuid.uuid4()
        response = await client.get(f"/api/v1/courses/{missing}")

        assert response.status_code == 404
        assert response.json()["message"] == f"No course found with id of {missing}"

    @pytest.mark.asyncio
    async def test_update_recomputes_average_cost(self, client, tokens, seeded):
        course = seeded["courses"]["frontend"]
        response = await client.put(
            f"/api/v1/courses/{course.id}", json={"tuition": 9000}, headers=tokens["pub1"]
        )

        assert response.status_code == 200
        assert response.json()["data"]["tuition"] == 9000

        # (9000 + 12000) / 2 = 10500
        post = await client.get(f"/api/v1/posts/{course.post_id}")
        assert post.json()["data"]["average_cost"] == 10500

    @pytest.mark.asyncio
    async def test_non_owner_cannot_update(self, client, tokens, seeded):
        course = seeded["courses"]["frontend"]
        response = await client.put(
            f"/api/v1/courses/{course.id}", json={"tuition": 1}, headers=tokens["pub2"]
        )

        assert response.status_code == 403
        assert "not authorized to update this course" in response.json()["message"]

    @pytest.mark.asyncio
    async def test_delete_last_course_clears_average_cost(self, client, tokens, seeded):
        course = seeded["courses"]["uiux"]
        response = await client.delete(f"/api/v1/courses/{course.id}", headers=tokens["pub1"])

        assert response.status_code == 200
        post = await client.get(f"/api/v1/posts/{course.post_id}")
        assert post.json()["data"]["average_cost"] is None
