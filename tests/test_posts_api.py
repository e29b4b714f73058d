"""
Little Application: Posts API Tests
======================================

What:  End-to-end tests for /api/v1/posts through the ASGI app.
How:   httpx.AsyncClient + ASGITransport against a seeded SQLite database
       (see conftest.py for the seed data).
"""

import uuid
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

from littleapp.main import create_app

ALL = {"limit": "10"}


def names(response):
    return [doc["name"] for doc in response.json()["data"]]


class TestListPosts:

    @pytest.mark.asyncio
    async def test_default_page_is_one_newest_record(self, client, seeded):
        response = await client.get("/api/v1/posts")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["count"] == 1
        assert body["data"][0]["name"] == "Codemasters"
        assert body["pagination"] == {"next": {"page": 2, "limit": 1}}
        assert response.headers["X-Total-Count"] == "3"

    @pytest.mark.asyncio
    async def test_middle_page_has_next_and_prev(self, client, seeded):
        response = await client.get("/api/v1/posts", params={"page": "2", "limit": "1"})

        body = response.json()
        assert names(response) == ["ModernTech Bootcamp"]
        assert body["pagination"] == {
            "next": {"page": 3, "limit": 1},
            "prev": {"page": 1, "limit": 1},
        }

    @pytest.mark.asyncio
    async def test_last_page_has_only_prev(self, client, seeded):
        response = await client.get("/api/v1/posts", params={"page": "3", "limit": "1"})

        assert names(response) == ["Devworks Bootcamp"]
        assert response.json()["pagination"] == {"prev": {"page": 2, "limit": 1}}

    @pytest.mark.asyncio
    async def test_page_past_the_end_is_empty(self, client, seeded):
        response = await client.get("/api/v1/posts", params={"page": "9", "limit": "1"})

        body = response.json()
        assert body["count"] == 0
        assert body["data"] == []
        assert body["pagination"] == {"prev": {"page": 8, "limit": 1}}

    @pytest.mark.asyncio
    async def test_huge_page_is_empty_not_an_error(self, client, seeded):
        page = 99999999999999999999
        response = await client.get("/api/v1/posts", params={"page": str(page), "limit": "10"})

        assert response.status_code == 200
        body = response.json()
        assert body["data"] == []
        assert body["pagination"] == {"prev": {"page": page - 1, "limit": 10}}
        assert response.headers["X-Total-Count"] == "3"

    @pytest.mark.asyncio
    async def test_non_numeric_page_behaves_like_omitted(self, client, seeded):
        omitted = await client.get("/api/v1/posts")
        garbage = await client.get("/api/v1/posts", params={"page": "abc"})

        assert garbage.status_code == 200
        assert garbage.json() == omitted.json()

    @pytest.mark.asyncio
    async def test_select_projects_fields_plus_id(self, client, seeded):
        response = await client.get("/api/v1/posts", params={"select": "name,description", **ALL})

        for doc in response.json()["data"]:
            assert set(doc) == {"id", "name", "description"}

    @pytest.mark.asyncio
    async def test_select_can_keep_courses(self, client, seeded):
        response = await client.get("/api/v1/posts", params={"select": "name,courses", **ALL})

        devworks = response.json()["data"][2]
        assert set(devworks) == {"id", "name", "courses"}
        assert len(devworks["courses"]) == 2

    @pytest.mark.asyncio
    async def test_courses_are_embedded(self, client, seeded):
        response = await client.get("/api/v1/posts", params=ALL)

        by_name = {doc["name"]: doc for doc in response.json()["data"]}
        titles = [c["title"] for c in by_name["Devworks Bootcamp"]["courses"]]
        assert titles == ["Front End Web Development", "Full Stack Web Development"]
        assert by_name["Codemasters"]["courses"][0]["tuition"] == 12000

    @pytest.mark.asyncio
    async def test_sort_ascending_and_descending(self, client, seeded):
        ascending = await client.get("/api/v1/posts", params={"sort": "average_cost", **ALL})
        descending = await client.get("/api/v1/posts", params={"sort": "-average_cost", **ALL})

        assert names(ascending) == ["ModernTech Bootcamp", "Devworks Bootcamp", "Codemasters"]
        assert names(descending) == ["Codemasters", "Devworks Bootcamp", "ModernTech Bootcamp"]

    @pytest.mark.asyncio
    async def test_comparison_filter(self, client, seeded):
        response = await client.get("/api/v1/posts", params={"average_cost[lte]": "10000", **ALL})

        assert names(response) == ["ModernTech Bootcamp", "Devworks Bootcamp"]
        assert response.headers["X-Total-Count"] == "2"

    @pytest.mark.asyncio
    async def test_combined_range_filter(self, client, seeded):
        response = await client.get(
            "/api/v1/posts",
            params={"average_cost[gt]": "5000", "average_cost[lt]": "12000", **ALL},
        )
        assert names(response) == ["Devworks Bootcamp"]

    @pytest.mark.asyncio
    async def test_equality_filter_on_boolean(self, client, seeded):
        response = await client.get("/api/v1/posts", params={"housing": "true", **ALL})
        assert names(response) == ["Devworks Bootcamp"]

    @pytest.mark.asyncio
    async def test_in_filter(self, client, seeded):
        response = await client.get(
            "/api/v1/posts",
            params={"name[in]": "Codemasters,Devworks Bootcamp", **ALL},
        )
        assert names(response) == ["Codemasters", "Devworks Bootcamp"]

    @pytest.mark.asyncio
    async def test_filtered_pagination_uses_filtered_total(self, client, seeded):
        response = await client.get(
            "/api/v1/posts",
            params={"average_cost[lte]": "10000", "page": "2", "limit": "1"},
        )
        assert response.json()["pagination"] == {"prev": {"page": 1, "limit": 1}}

    @pytest.mark.asyncio
    async def test_unfiltered_total_when_configured(self, settings, seeded):
        app = create_app(settings.model_copy(update={"count_filtered_total": False}))
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as http:
            response = await http.get(
                "/api/v1/posts",
                params={"average_cost[lte]": "10000", "page": "2", "limit": "1"},
            )
        await app.state.database.dispose()

        assert response.headers["X-Total-Count"] == "3"
        assert "next" in response.json()["pagination"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("params, message", [
        ({"bogus": "1"}, "Unknown field 'bogus'"),
        ({"average_cost[ne]": "5"}, "Unsupported filter operator 'ne'"),
        ({"average_cost[gt]": "abc"}, "Invalid number value 'abc'"),
        ({"select": "name,bogus"}, "Unknown field 'bogus'"),
        ({"sort": "-bogus"}, "Unknown field 'bogus'"),
    ])
    async def test_bad_query_is_400(self, client, seeded, params, message):
        response = await client.get("/api/v1/posts", params=params)

        assert response.status_code == 400
        body = response.json()
        assert body["success"] is False
        assert body["error"] == "validation_error"
        assert message in body["message"]
        assert body["request_id"] == response.headers["X-Request-ID"]


class TestGetPost:

    @pytest.mark.asyncio
    async def test_found(self, client, seeded):
        post = seeded["posts"]["devworks"]
        response = await client.get(f"/api/v1/posts/{post.id}")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["name"] == "Devworks Bootcamp"
        assert data["slug"] == "devworks-bootcamp"

    @pytest.mark.asyncio
    async def test_not_found(self, client, seeded):
        missing = uuid.uuid4()
        response = await client.get(f"/api/v1/posts/{missing}")

        assert response.status_code == 404
        assert response.json()["message"] == f"No post found with id of {missing}"

    @pytest.mark.asyncio
    async def test_malformed_id_is_400(self, client, seeded):
        response = await client.get("/api/v1/posts/not-a-uuid")
        assert response.status_code == 400


class TestWritePosts:

    NEW_POST = {
        "name": "Devcentral Bootcamp",
        "description": "Is coding your passion?",
        "address": "45 Upper College Rd Kingston RI 02881",
        "website": "https://devcentral.com",
        "email": "enroll@devcentral.com",
        "housing": False,
    }

    @pytest.mark.asyncio
    async def test_create_requires_token(self, client, seeded):
        response = await client.post("/api/v1/posts", json=self.NEW_POST)

        assert response.status_code == 401
        assert response.json()["message"] == "Not authorized to access this route"

    @pytest.mark.asyncio
    async def test_create_requires_publisher_role(self, client, tokens):
        response = await client.post("/api/v1/posts", json=self.NEW_POST, headers=tokens["user"])
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_create(self, client, tokens, seeded):
        response = await client.post("/api/v1/posts", json=self.NEW_POST, headers=tokens["pub2"])

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["slug"] == "devcentral-bootcamp"
        assert data["photo"] == "no-photo.jpg"
        assert data["user_id"] == str(seeded["users"]["pub2"].id)

        listing = await client.get("/api/v1/posts")
        assert listing.json()["data"][0]["name"] == "Devcentral Bootcamp"

    @pytest.mark.asyncio
    async def test_duplicate_name_is_400(self, client, tokens):
        body = {**self.NEW_POST, "name": "Codemasters"}
        response = await client.post("/api/v1/posts", json=body, headers=tokens["pub1"])

        assert response.status_code == 400
        assert response.json()["message"] == "Duplicate field value entered"

    @pytest.mark.asyncio
    async def test_invalid_body_is_400(self, client, tokens):
        body = {**self.NEW_POST, "website": "not a url"}
        response = await client.post("/api/v1/posts", json=body, headers=tokens["pub1"])

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    @pytest.mark.asyncio
    async def test_owner_updates_and_slug_follows_name(self, client, tokens, seeded):
        post = seeded["posts"]["moderntech"]
        response = await client.put(
            f"/api/v1/posts/{post.id}",
            json={"name": "ModernTech Academy", "housing": True},
            headers=tokens["pub1"],
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["slug"] == "moderntech-academy"
        assert data["housing"] is True
        assert data["description"] == "ModernTech Bootcamp description"

    @pytest.mark.asyncio
    async def test_non_owner_cannot_update(self, client, tokens, seeded):
        post = seeded["posts"]["devworks"]
        response = await client.put(
            f"/api/v1/posts/{post.id}", json={"housing": False}, headers=tokens["pub2"]
        )

        assert response.status_code == 403
        assert "not authorized to update this post" in response.json()["message"]

    @pytest.mark.asyncio
    async def test_admin_can_update_any_post(self, client, tokens, seeded):
        post = seeded["posts"]["devworks"]
        response = await client.put(
            f"/api/v1/posts/{post.id}", json={"phone": "(111) 111-1111"}, headers=tokens["admin"]
        )
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_delete_removes_courses(self, client, tokens, seeded):
        post = seeded["posts"]["devworks"]
        response = await client.delete(f"/api/v1/posts/{post.id}", headers=tokens["pub1"])

        assert response.status_code == 200
        assert response.json() == {"success": True, "data": {}}

        missing = await client.get(f"/api/v1/posts/{post.id}")
        assert missing.status_code == 404
        courses = await client.get("/api/v1/courses", params=ALL)
        assert courses.headers["X-Total-Count"] == "2"


class TestPhotoUpload:

    @pytest.mark.asyncio
    async def test_upload(self, client, tokens, seeded, settings, sample_image_bytes):
        post = seeded["posts"]["devworks"]
        response = await client.put(
            f"/api/v1/posts/{post.id}/photo",
            files={"file": ("Campus.PNG", sample_image_bytes, "image/png")},
            headers=tokens["pub1"],
        )

        assert response.status_code == 200
        name = response.json()["data"]
        assert name == f"photo_{post.id}.png"
        assert (Path(settings.file_upload_path) / name).read_bytes() == sample_image_bytes

        detail = await client.get(f"/api/v1/posts/{post.id}")
        assert detail.json()["data"]["photo"] == name

    @pytest.mark.asyncio
    async def test_missing_file(self, client, tokens, seeded):
        post = seeded["posts"]["devworks"]
        response = await client.put(f"/api/v1/posts/{post.id}/photo", headers=tokens["pub1"])

        assert response.status_code == 400
        assert response.json()["message"] == "Please upload a file"

    @pytest.mark.asyncio
    async def test_non_image_rejected(self, client, tokens, seeded):
        post = seeded["posts"]["devworks"]
        response = await client.put(
            f"/api/v1/posts/{post.id}/photo",
            files={"file": ("notes.txt", b"hello", "text/plain")},
            headers=tokens["pub1"],
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Please upload an image file"

    @pytest.mark.asyncio
    async def test_non_owner_rejected(self, client, tokens, seeded, sample_image_bytes):
        post = seeded["posts"]["devworks"]
        response = await client.put(
            f"/api/v1/posts/{post.id}/photo",
            files={"file": ("a.jpg", sample_image_bytes, "image/jpeg")},
            headers=tokens["pub2"],
        )
        assert response.status_code == 403
