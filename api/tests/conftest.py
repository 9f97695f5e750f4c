import uuid
from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import deeplove.main as m
from deeplove import config, models, repo
from deeplove.services import discovery
from deeplove.services.swipe_limit import InMemoryQuotaStore


class FakeRepo:
    """In-memory stand-in for the functions in ``deeplove.repo``."""

    def __init__(self) -> None:
        self.users: dict[str, dict[str, Any]] = {}
        self.profiles: dict[str, dict[str, Any]] = {}
        self.criteria: dict[str, dict[str, Any]] = {}
        self.swipes: list[tuple[str, str, str]] = []
        self.entitlements: dict[str, dict[str, Any]] = {}

    def create_user(self, email: str, password_hash: str):
        if any(u["email"] == email for u in self.users.values()):
            return None
        user = {"id": str(uuid.uuid4()), "email": email, "password_hash": password_hash}
        self.users[user["id"]] = user
        return user

    def get_user_by_email(self, email: str):
        return next((u for u in self.users.values() if u["email"] == email), None)

    def get_user_by_id(self, user_id: str):
        return self.users.get(user_id)

    def get_profile(self, user_id: str):
        return self.profiles.get(user_id)

    def upsert_profile(self, user_id: str, fields: dict[str, Any]):
        self.profiles[user_id] = {"id": user_id, **fields}
        return self.profiles[user_id]

    def list_candidate_profiles(self, user_id: str, limit: int = 50):
        return [p for pid, p in self.profiles.items() if pid != user_id][:limit]

    def count_profiles(self) -> int:
        return len(self.profiles)

    def get_criteria(self, user_id: str):
        return self.criteria.get(user_id)

    def upsert_criteria(self, user_id: str, fields: dict[str, Any]):
        self.criteria[user_id] = {"user_id": user_id, **fields}
        return self.criteria[user_id]

    def record_swipe(self, from_id: str, to_id: str, direction: str) -> bool:
        self.swipes.append((from_id, to_id, direction))
        return direction == "right" and (to_id, from_id, "right") in self.swipes

    def list_mutual_matches(self, user_id: str):
        out = []
        for a, b, d in self.swipes:
            if a == user_id and d == "right" and (b, a, "right") in self.swipes:
                p = self.profiles.get(b) or {}
                out.append({"other_user_id": b, "matched_at": None, "other_display_name": p.get("display_name")})
        return out

    def get_entitlement(self, user_id: str):
        return self.entitlements.get(user_id, {"is_pro": False, "plan": None})

    def set_entitlement(self, user_id: str, is_pro: bool, plan: str | None):
        self.entitlements[user_id] = {"is_pro": is_pro, "plan": plan}
        return self.entitlements[user_id]


@pytest.fixture
def fake_repo(monkeypatch):
    fake = FakeRepo()
    for name in (
        "create_user",
        "get_user_by_email",
        "get_user_by_id",
        "get_profile",
        "upsert_profile",
        "list_candidate_profiles",
        "count_profiles",
        "get_criteria",
        "upsert_criteria",
        "record_swipe",
        "list_mutual_matches",
        "get_entitlement",
        "set_entitlement",
    ):
        monkeypatch.setattr(repo, name, getattr(fake, name))
    return fake


@pytest.fixture
def quota_store(monkeypatch):
    store = InMemoryQuotaStore()
    monkeypatch.setattr(discovery, "quota_store", store)
    return store


@pytest.fixture
def client(monkeypatch, fake_repo, quota_store):
    monkeypatch.setattr(config, "JWT_SECRET", "test-secret")
    monkeypatch.setattr(m, "wait_for_db", lambda *args, **kwargs: None)
    monkeypatch.setattr(m, "init_db", lambda: None)
    return TestClient(m.app)


@pytest.fixture
def signup(client):
    """Register a user in bearer mode; returns (user_id, auth headers)."""

    def _signup(email: str, password: str = "hunter22") -> tuple[str, dict[str, str]]:
        res = client.post("/api/auth/signup", json={"email": email, "password": password}, headers={"X-Auth-Mode": "bearer"})
        assert res.status_code == 201, res.text
        body = res.json()
        return body["user"]["id"], {"Authorization": f"Bearer {body['access_token']}"}

    return _signup


@pytest.fixture
def session_factory(tmp_path, monkeypatch):
    """A throwaway SQLite database wired into ``deeplove.repo``."""
    engine = create_engine(f"sqlite:///{tmp_path / 'test.sqlite'}", future=True)
    models.Base.metadata.create_all(bind=engine)
    factory = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    monkeypatch.setattr(repo, "SessionLocal", factory)
    yield factory
    engine.dispose()
