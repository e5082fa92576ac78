"""
Tests for the REST API.

Tests:
- Bearer token identity
- Session endpoints and their error codes
- Unit upload, listing and word queries
"""

import pytest

from .conftest import TOKENS


def word_json(word_id, target, source, list_id=1):
    return {"id": word_id, "sourceText": source, "targetText": target, "listId": list_id}


@pytest.fixture
def session_body():
    return {
        "listSelector": "1",
        "queue": [word_json(1, "cat", "кот"), word_json(2, "dog", "собака")],
        "progress": {"total": 2, "done": 0},
    }


BOB = {"Authorization": "Bearer bob-token"}


class TestAuth:
    def test_missing_token(self, http):
        response = http.get("/api/v1/session")

        assert response.status_code == 401
        assert response.json()["error_code"] == "UNAUTHORIZED"

    def test_unknown_token(self, http):
        response = http.get("/api/v1/units", headers={"Authorization": "Bearer nope"})

        assert response.status_code == 401

    def test_tokens_map_to_owners(self, http):
        assert set(TOKENS.values()) == {"alice", "bob"}
        response = http.get("/api/v1/units", headers=BOB)

        assert response.status_code == 200
        assert [u["name"] for u in response.json()] == ["Food"]


class TestSessionEndpoints:
    def test_get_without_session_is_null(self, http, alice_headers):
        response = http.get("/api/v1/session", headers=alice_headers)

        assert response.status_code == 200
        assert response.json() is None

    def test_create_then_get(self, http, alice_headers, session_body):
        created = http.post("/api/v1/session", json=session_body, headers=alice_headers)

        assert created.status_code == 201
        data = http.get("/api/v1/session", headers=alice_headers).json()
        assert data["listSelector"] == "1"
        assert data["progress"] == {"total": 2, "done": 0}
        assert [w["targetText"] for w in data["queue"]] == ["cat", "dog"]
        assert data["updatedAt"] > 0

    def test_sessions_are_isolated_per_owner(self, http, alice_headers, session_body):
        http.post("/api/v1/session", json=session_body, headers=alice_headers)

        assert http.get("/api/v1/session", headers=BOB).json() is None

    def test_duplicate_create_conflicts(self, http, alice_headers, session_body):
        http.post("/api/v1/session", json=session_body, headers=alice_headers)
        response = http.post("/api/v1/session", json=session_body, headers=alice_headers)

        assert response.status_code == 409
        assert response.json()["error_code"] == "SESSION_CONFLICT"

    def test_create_with_broken_invariant(self, http, alice_headers, session_body):
        session_body["progress"]["total"] = 5
        response = http.post("/api/v1/session", json=session_body, headers=alice_headers)

        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_create_with_malformed_body(self, http, alice_headers):
        response = http.post("/api/v1/session", json={"queue": []}, headers=alice_headers)

        assert response.status_code == 422

    def test_update(self, http, alice_headers, session_body):
        http.post("/api/v1/session", json=session_body, headers=alice_headers)

        response = http.put("/api/v1/session", json={
            "queue": [word_json(2, "dog", "собака")],
            "progress": {"total": 2, "done": 1},
        }, headers=alice_headers)

        assert response.status_code == 200
        assert response.json() == {"success": True}
        data = http.get("/api/v1/session", headers=alice_headers).json()
        assert data["progress"]["done"] == 1
        assert data["listSelector"] == "1"

    def test_update_without_session(self, http, alice_headers, session_body):
        del session_body["listSelector"]
        response = http.put("/api/v1/session", json=session_body, headers=alice_headers)

        assert response.status_code == 404
        assert response.json()["error_code"] == "SESSION_NOT_FOUND"

    def test_stale_update(self, http, alice_headers, session_body):
        http.post("/api/v1/session", json=session_body, headers=alice_headers)
        http.put("/api/v1/session", json={
            "queue": [word_json(2, "dog", "собака")],
            "progress": {"total": 2, "done": 1},
        }, headers=alice_headers)

        response = http.put("/api/v1/session", json={
            "queue": [word_json(2, "dog", "собака"), word_json(1, "cat", "кот")],
            "progress": {"total": 2, "done": 0},
        }, headers=alice_headers)

        assert response.status_code == 409

    def test_update_breaking_invariant(self, http, alice_headers, session_body):
        http.post("/api/v1/session", json=session_body, headers=alice_headers)

        response = http.put("/api/v1/session", json={
            "queue": [word_json(2, "dog", "собака")],
            "progress": {"total": 2, "done": 0},
        }, headers=alice_headers)

        assert response.status_code == 400

    def test_delete_is_idempotent(self, http, alice_headers, session_body):
        http.post("/api/v1/session", json=session_body, headers=alice_headers)

        assert http.delete("/api/v1/session", headers=alice_headers).status_code == 200
        assert http.delete("/api/v1/session", headers=alice_headers).status_code == 200
        assert http.get("/api/v1/session", headers=alice_headers).json() is None


class TestUnitEndpoints:
    def test_list_units_newest_first(self, http, alice_headers):
        response = http.get("/api/v1/units", headers=alice_headers)

        assert response.status_code == 200
        assert [u["name"] for u in response.json()] == ["Colors", "Animals"]

    def test_upload_unit(self, http, alice_headers):
        content = " hello , привет \nworld,мир\nbroken\n".encode("utf-8")

        response = http.post(
            "/api/v1/units",
            files={"file": ("greetings.csv", content, "text/csv")},
            data={"name": "Greetings"},
            headers=alice_headers,
        )

        assert response.status_code == 201
        unit = response.json()
        assert unit["name"] == "Greetings"
        words = http.get(f"/api/v1/units/{unit['id']}", headers=alice_headers).json()["words"]
        assert [(w["targetText"], w["sourceText"]) for w in words] == [
            ("Hello", "Привет"),
            ("World", "Мир"),
        ]

    def test_upload_defaults_name_to_filename(self, http, alice_headers):
        response = http.post(
            "/api/v1/units",
            files={"file": ("verbs.csv", b"go,ir\n", "text/csv")},
            headers=alice_headers,
        )

        assert response.json()["name"] == "verbs.csv"

    def test_upload_empty_file(self, http, alice_headers):
        response = http.post(
            "/api/v1/units",
            files={"file": ("empty.csv", b"\n\n", "text/csv")},
            headers=alice_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Empty or invalid file"

    def test_upload_binary_file(self, http, alice_headers):
        response = http.post(
            "/api/v1/units",
            files={"file": ("bad.csv", b"\xff\xfe\xfa", "text/csv")},
            headers=alice_headers,
        )

        assert response.status_code == 400

    def test_get_unit(self, http, alice_headers):
        data = http.get("/api/v1/units/1", headers=alice_headers).json()

        assert data["unit"]["name"] == "Animals"
        assert [w["targetText"] for w in data["words"]] == ["cat", "dog", "bird"]

    def test_other_owners_unit_is_hidden(self, http, alice_headers):
        response = http.get("/api/v1/units/3", headers=alice_headers)

        assert response.status_code == 404
        assert response.json()["error_code"] == "UNIT_NOT_FOUND"

    def test_delete_unit(self, http, alice_headers):
        assert http.delete("/api/v1/units/2", headers=alice_headers).status_code == 200
        assert http.get("/api/v1/units/2", headers=alice_headers).status_code == 404
        assert http.delete("/api/v1/units/3", headers=alice_headers).status_code == 404


class TestWordsEndpoint:
    def test_words_of_several_units(self, http, alice_headers):
        response = http.get("/api/v1/words", params={"units": "1,2,3,x"}, headers=alice_headers)

        assert response.status_code == 200
        assert sorted(w["id"] for w in response.json()["words"]) == [1, 2, 3, 4, 5]

    def test_missing_units_param(self, http, alice_headers):
        response = http.get("/api/v1/words", headers=alice_headers)

        assert response.status_code == 400
        assert response.json()["error"] == "No units specified"

    def test_only_malformed_ids(self, http, alice_headers):
        response = http.get("/api/v1/words", params={"units": "x,y"}, headers=alice_headers)

        assert response.status_code == 200
        assert response.json() == {"words": []}


class TestSystemEndpoints:
    def test_health(self, http):
        data = http.get("/health").json()

        assert data["status"] == "healthy"
        assert data["service"] == "drill"

    def test_root(self, http):
        assert http.get("/").json()["docs"] == "/api/docs"
