"""HTTP tests for barters, bookmarks, requests and profile routes."""
from typing import Any

import pytest

from skillbarter.rate_limit import limiter
from tests.conftest import GHOST, headers_for


def create_barter(client, seed, user_id: str, **overrides: Any) -> dict[str, Any]:
    """Factory helper: post a barter and return the response JSON."""
    payload = {
        "title": "Guitar for Spanish",
        "description": "Chords for conjugations",
        "mode": "online",
        "teach_skill_id": seed.skills["Guitar"],
        "learn_skill_id": seed.skills["Spanish"],
        "skill_rating": 4,
    }
    payload.update(overrides)
    r = client.post("/api/v1/barters/", json=payload, headers=headers_for(user_id))
    assert r.status_code == 201, f"Failed to create barter: {r.text}"
    return r.json()


def test_create_barter(client, seed):
    data = create_barter(client, seed, seed.alice)
    assert data["owner_id"] == seed.alice
    assert data["display_mode"] == "Online"
    assert data["time_ago"] == "just now"
    assert data["is_expired"] is False


def test_create_barter_requires_session(client, seed):
    r = client.post("/api/v1/barters/", json={
        "title": "x", "description": "y", "teach_skill_id": seed.skills["Guitar"],
        "learn_skill_id": seed.skills["Spanish"],
    })
    assert r.status_code == 401
    assert r.json()["detail"]["code"] == "UNAUTHENTICATED"


def test_create_barter_validation(client, seed):
    r = client.post("/api/v1/barters/", json={
        "title": "t" * 101, "description": "y", "teach_skill_id": seed.skills["Guitar"],
        "learn_skill_id": seed.skills["Spanish"],
    }, headers=headers_for(seed.alice))
    assert r.status_code == 422

    r = client.post("/api/v1/barters/", json={
        "title": "Same", "description": "y", "teach_skill_id": seed.skills["Guitar"],
        "learn_skill_id": seed.skills["Guitar"],
    }, headers=headers_for(seed.alice))
    assert r.status_code == 422


def test_create_barter_unknown_skill(client, seed):
    r = client.post("/api/v1/barters/", json={
        "title": "x", "description": "y", "teach_skill_id": seed.skills["Guitar"],
        "learn_skill_id": 555,
    }, headers=headers_for(seed.alice))
    assert r.status_code == 422
    assert r.json()["detail"]["code"] == "VALIDATION_ERROR"


def test_feed_with_category_and_bookmarks(client, seed):
    design = create_barter(client, seed, seed.alice, teach_skill_id=seed.skills["Illustrator"],
                           learn_skill_id=seed.skills["Blogging"])
    create_barter(client, seed, seed.alice)

    r = client.post(f"/api/v1/barters/{design['id']}/bookmark", headers=headers_for(seed.bob))
    assert r.json() == {"barter_id": design["id"], "bookmarked": True}

    r = client.get("/api/v1/barters/", params={"category": "Design"}, headers=headers_for(seed.bob))
    assert r.status_code == 200
    data = r.json()
    assert data["total"] == 1
    item = data["barters"][0]
    assert item["id"] == design["id"]
    assert item["teach_skill_name"] == "Illustrator"
    assert item["learn_skill_name"] == "Blogging"
    assert item["owner_display_name"] == "alice"
    assert item["bookmarked"] is True

    r = client.get("/api/v1/barters/")
    assert r.json()["total"] == 2
    assert all(not b["bookmarked"] for b in r.json()["barters"])

    r = client.get("/api/v1/me/bookmarks", headers=headers_for(seed.bob))
    assert [b["id"] for b in r.json()["barters"]] == [design["id"]]

    r = client.post(f"/api/v1/barters/{design['id']}/bookmark", headers=headers_for(seed.bob))
    assert r.json()["bookmarked"] is False


def test_feed_pagination(client, seed):
    for i in range(3):
        create_barter(client, seed, seed.alice, title=f"Barter {i}")
    r = client.get("/api/v1/barters/", params={"limit": 2, "offset": 2})
    data = r.json()
    assert data["total"] == 3
    assert [b["title"] for b in data["barters"]] == ["Barter 0"]


def test_get_barter_detail(client, seed):
    created = create_barter(client, seed, seed.alice)
    r = client.get(f"/api/v1/barters/{created['id']}")
    assert r.status_code == 200
    assert r.json()["learn_skill_name"] == "Spanish"


def test_get_barter_not_found(client, seed):
    r = client.get("/api/v1/barters/99999")
    assert r.status_code == 404
    assert r.json()["detail"]["code"] == "NOT_FOUND"


def test_request_lifecycle(client, seed):
    barter = create_barter(client, seed, seed.alice)

    r = client.post(f"/api/v1/barters/{barter['id']}/requests", headers=headers_for(seed.alice))
    assert r.status_code == 403

    r = client.post(f"/api/v1/barters/{barter['id']}/requests", headers=headers_for(seed.bob))
    assert r.status_code == 201
    req = r.json()
    assert req["status"] == "pending"

    r = client.post(f"/api/v1/barters/{barter['id']}/requests", headers=headers_for(seed.bob))
    assert r.status_code == 409
    assert r.json()["detail"]["code"] == "DUPLICATE_REQUEST"
    assert "pending request" in r.json()["detail"]["message"]

    r = client.get("/api/v1/requests/", params={"role": "received"}, headers=headers_for(seed.alice))
    views = r.json()["requests"]
    assert [v["counterpart_name"] for v in views] == ["bob"]
    assert views[0]["teach_skill_name"] == "Guitar"

    r = client.post(f"/api/v1/requests/{req['id']}/accept", headers=headers_for(seed.carol))
    assert r.status_code == 403

    r = client.post(f"/api/v1/requests/{req['id']}/accept", headers=headers_for(seed.alice))
    assert r.status_code == 200
    assert r.json()["status"] == "accepted"

    r = client.post(f"/api/v1/requests/{req['id']}/decline", headers=headers_for(seed.alice))
    assert r.status_code == 400
    assert r.json()["detail"]["code"] == "INVALID_STATUS"

    r = client.delete(f"/api/v1/requests/{req['id']}", headers=headers_for(seed.bob))
    assert r.status_code == 400


def test_cancel_then_request_again(client, seed):
    barter = create_barter(client, seed, seed.alice)
    req = client.post(f"/api/v1/barters/{barter['id']}/requests", headers=headers_for(seed.bob)).json()

    r = client.delete(f"/api/v1/requests/{req['id']}", headers=headers_for(seed.alice))
    assert r.status_code == 403

    r = client.delete(f"/api/v1/requests/{req['id']}", headers=headers_for(seed.bob))
    assert r.status_code == 200
    assert r.json()["message"] == "Request cancelled"

    r = client.get("/api/v1/requests/", params={"role": "pending"}, headers=headers_for(seed.bob))
    assert r.json()["total"] == 0

    r = client.post(f"/api/v1/barters/{barter['id']}/requests", headers=headers_for(seed.bob))
    assert r.status_code == 201


def test_list_requests_bad_role(client, seed):
    r = client.get("/api/v1/requests/", params={"role": "archived"}, headers=headers_for(seed.bob))
    assert r.status_code == 422


def test_profile_routes(client, seed):
    newcomer = "77777777-7777-7777-7777-777777777777"
    r = client.get("/api/v1/me", headers=headers_for(newcomer))
    assert r.status_code == 404

    r = client.post("/api/v1/me", json={"email": "eve@example.com"}, headers=headers_for(newcomer))
    assert r.status_code == 200
    assert r.json()["username"] == "eve"
    assert r.json()["skills_selected"] is False

    r = client.put("/api/v1/me/skills", json={"skill_ids": [seed.skills["Guitar"]]}, headers=headers_for(newcomer))
    assert r.status_code == 200
    assert [s["name"] for s in r.json()] == ["Guitar"]

    r = client.get("/api/v1/me", headers=headers_for(newcomer))
    assert r.json()["skills_selected"] is True
    assert [s["name"] for s in r.json()["skills"]] == ["Guitar"]

    r = client.get("/api/v1/me/skill-options", headers=headers_for(newcomer))
    assert [s["name"] for s in r.json()["teach"]] == ["Guitar"]
    assert len(r.json()["learn"]) == 4

    r = client.put("/api/v1/me/skills", json={"skill_ids": [1, 2, 3, 4]}, headers=headers_for(newcomer))
    assert r.status_code == 422


def test_user_stats_route(client, seed):
    create_barter(client, seed, seed.alice, skill_rating=5)
    create_barter(client, seed, seed.alice, skill_rating=3)
    r = client.get(f"/api/v1/users/{seed.alice}/stats")
    assert r.json() == {"user_id": seed.alice, "barters": 2, "skills": 0, "rating": 4.0}


def test_title_with_ampersand_round_trips(client, seed):
    created = create_barter(client, seed, seed.alice, title="Tom & Jerry sketching")
    assert created["title"] == "Tom & Jerry sketching"
    r = client.get(f"/api/v1/barters/{created['id']}")
    assert r.json()["title"] == "Tom & Jerry sketching"


def test_request_without_profile_is_404(client, seed, foreign_keys):
    barter = create_barter(client, seed, seed.alice)
    r = client.post(f"/api/v1/barters/{barter['id']}/requests", headers=headers_for(GHOST))
    assert r.status_code == 404
    detail = r.json()["detail"]
    assert detail["code"] == "NOT_FOUND"
    assert "Profile not found" in detail["message"]


def test_feed_pages_without_category(client, seed):
    for i in range(5):
        create_barter(client, seed, seed.alice, title=f"Barter {i}")
    create_barter(client, seed, seed.bob, title="Bob's barter")
    r = client.get("/api/v1/barters/", params={"limit": 2, "offset": 1, "owner_id": seed.alice})
    data = r.json()
    assert data["total"] == 5
    assert [b["title"] for b in data["barters"]] == ["Barter 3", "Barter 2"]


@pytest.fixture()
def rate_limited(monkeypatch):
    monkeypatch.setattr(limiter, "enabled", True)
    limiter.reset()
    yield
    limiter.reset()


def test_write_routes_are_rate_limited(client, seed, rate_limited):
    barter = create_barter(client, seed, seed.alice)
    url = f"/api/v1/barters/{barter['id']}/bookmark"
    for _ in range(30):
        assert client.post(url, headers=headers_for(seed.bob)).status_code == 200
    assert client.post(url, headers=headers_for(seed.bob)).status_code == 429
    assert client.get("/api/v1/barters/").status_code == 200
