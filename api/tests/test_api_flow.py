import pytest

from deeplove import repo
from deeplove.services.swipe_limit import QuotaStoreError

PROFILE = {
    "display_name": "Alex",
    "age": 30,
    "occupation": "Chef",
    "bio": "Hi",
    "interests": ["Music", "Travel"],
    "relationship_goal": "longTerm",
    "gender": "female",
    "religion": "none",
    "ethnicity": "none",
}

CRITERIA = {
    "age_min": 25,
    "age_max": 35,
    "gender": "any",
    "relationship_goal": "longTerm",
    "hobbies": ["Music", "Travel", "Art"],
    "religion": "none",
    "ethnicity": "none",
    "distance_km": 25,
}


def _onboard(client, signup, email: str, **profile) -> tuple[str, dict[str, str]]:
    uid, headers = signup(email)
    res = client.put(f"/api/profiles/{uid}", json={**PROFILE, **profile}, headers=headers)
    assert res.status_code == 200, res.text
    return uid, headers


def test_health(client):
    assert client.get("/api/health").json() == {"status": "ok"}


def test_feed_requires_criteria(client, signup):
    _, headers = _onboard(client, signup, "a@example.com")
    res = client.get("/api/matches", headers=headers)
    assert res.status_code == 409
    assert res.json()["detail"] == "criteria required"


def test_feed_ranks_candidates_and_excludes_requester(client, signup):
    me, headers = _onboard(client, signup, "me@example.com")
    close, _ = _onboard(client, signup, "close@example.com", age=30)
    far, _ = _onboard(client, signup, "far@example.com", age=70, interests=[], relationship_goal="casual")
    assert client.post("/api/criteria", json=CRITERIA, headers=headers).status_code == 200

    res = client.get("/api/matches", headers=headers)
    assert res.status_code == 200
    body = res.json()
    ids = [p["id"] for p in body["profiles"]]
    assert ids == [close, far]
    assert me not in ids
    assert all(50 <= p["matchPercentage"] <= 99 for p in body["profiles"])
    assert body["swipes_remaining"] == 20
    assert body["is_pro"] is False


def test_feed_limit_is_bounded(client, signup):
    _, headers = _onboard(client, signup, "me@example.com")
    assert client.get("/api/matches?limit=0", headers=headers).status_code == 422


def test_criteria_validation(client, signup):
    _, headers = signup("me@example.com")
    assert client.get("/api/criteria", headers=headers).status_code == 404
    bad_range = client.post("/api/criteria", json={**CRITERIA, "age_min": 40, "age_max": 30}, headers=headers)
    assert bad_range.status_code == 422
    too_young = client.post("/api/criteria", json={**CRITERIA, "age_min": 16}, headers=headers)
    assert too_young.status_code == 422
    ok = client.post("/api/criteria", json=CRITERIA, headers=headers)
    assert ok.status_code == 200
    assert client.get("/api/criteria", headers=headers).json()["criteria"]["hobbies"] == ["Music", "Travel", "Art"]


def test_profile_update_is_owner_only(client, signup):
    me, headers = _onboard(client, signup, "me@example.com")
    other, _ = _onboard(client, signup, "other@example.com")
    assert client.put(f"/api/profiles/{other}", json=PROFILE, headers=headers).status_code == 403
    assert client.get(f"/api/profiles/{other}", headers=headers).status_code == 200
    assert client.get("/api/profiles/missing", headers=headers).status_code == 404


def test_mutual_right_swipes_match(client, signup):
    a, a_headers = _onboard(client, signup, "a@example.com")
    b, b_headers = _onboard(client, signup, "b@example.com", display_name="Bo")

    first = client.post("/api/swipes", json={"to_id": b, "direction": "right"}, headers=a_headers)
    assert first.status_code == 200
    assert first.json() == {"success": True, "isMatch": False, "swipes_remaining": 19}

    second = client.post("/api/swipes", json={"to_id": a, "direction": "right"}, headers=b_headers)
    assert second.json()["isMatch"] is True

    matches = client.get("/api/matches/mutual", headers=a_headers).json()["matches"]
    assert [m["user_id"] for m in matches] == [b]
    assert matches[0]["profile"]["name"] == "Bo"


def test_swipe_validation(client, signup):
    me, headers = _onboard(client, signup, "me@example.com")
    other, _ = _onboard(client, signup, "other@example.com")
    assert client.post("/api/swipes", json={"to_id": me, "direction": "right"}, headers=headers).status_code == 400
    assert client.post("/api/swipes", json={"to_id": "nobody", "direction": "left"}, headers=headers).status_code == 404
    assert client.post("/api/swipes", json={"to_id": other, "direction": "up"}, headers=headers).status_code == 422


def test_free_quota_blocks_21st_swipe_and_upgrade_lifts_it(client, signup, fake_repo):
    _, headers = _onboard(client, signup, "me@example.com")
    other, _ = _onboard(client, signup, "other@example.com")

    for i in range(20):
        res = client.post("/api/swipes", json={"to_id": other, "direction": "left"}, headers=headers)
        assert res.status_code == 200
        assert res.json()["swipes_remaining"] == 19 - i

    blocked = client.post("/api/swipes", json={"to_id": other, "direction": "left"}, headers=headers)
    assert blocked.status_code == 402
    assert blocked.json()["detail"]["upgrade_url"] == "/paywall"
    assert len(fake_repo.swipes) == 20

    quota = client.get("/api/swipes/quota", headers=headers).json()
    assert quota["used"] == 20
    assert quota["remaining"] == 0
    assert quota["limit"] == 20

    upgraded = client.post("/api/entitlement/upgrade", json={"plan": "yearly"}, headers=headers)
    assert upgraded.json() == {"is_pro": True, "plan": "yearly"}
    assert client.get("/api/entitlement", headers=headers).json()["is_pro"] is True

    res = client.post("/api/swipes", json={"to_id": other, "direction": "right"}, headers=headers)
    assert res.status_code == 200
    assert res.json()["swipes_remaining"] is None
    assert client.get("/api/swipes/quota", headers=headers).json()["remaining"] is None


def test_quota_write_failure_denies_swipe(client, signup, quota_store, fake_repo, monkeypatch):
    _, headers = _onboard(client, signup, "me@example.com")
    other, _ = _onboard(client, signup, "other@example.com")

    def failing_increment(user_id, day, cap):
        raise QuotaStoreError("disk full")

    monkeypatch.setattr(quota_store, "increment", failing_increment)
    res = client.post("/api/swipes", json={"to_id": other, "direction": "right"}, headers=headers)
    assert res.status_code == 503
    assert fake_repo.swipes == []


def test_swipe_is_counted_before_it_is_recorded(client, signup, quota_store, monkeypatch):
    me, headers = _onboard(client, signup, "me@example.com")
    other, _ = _onboard(client, signup, "other@example.com")

    def failing_record(from_id, to_id, direction):
        raise RuntimeError("insert failed")

    monkeypatch.setattr(repo, "record_swipe", failing_record)
    with pytest.raises(RuntimeError):
        client.post("/api/swipes", json={"to_id": other, "direction": "right"}, headers=headers)
    assert quota_store.get(me).used_count == 1
