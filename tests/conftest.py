"""Shared test fixtures: in-memory Supabase double, temp image storage, HTTP client and users."""

import pytest
from fastapi.testclient import TestClient

from fake_supabase import FakeSupabase
from helpers import make_user
from gear_exchange.config.settings import settings
from gear_exchange.core.rate_limit import limiter
from gear_exchange.database.supabase_client import get_service_supabase, get_supabase
from gear_exchange.main import app
from gear_exchange.modules.listings.image_storage import LocalImageStorage, get_image_storage


@pytest.fixture(autouse=True)
def fast_hashing(monkeypatch):
    monkeypatch.setattr(settings, "bcrypt_rounds", 4)


@pytest.fixture(autouse=True)
def no_rate_limit():
    limiter.enabled = False
    yield
    limiter.enabled = False
    limiter.reset()


@pytest.fixture
def db() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def storage(tmp_path) -> LocalImageStorage:
    return LocalImageStorage(str(tmp_path / "uploads"), "/images/uploaded")


@pytest.fixture
def client(db, storage):
    app.dependency_overrides[get_supabase] = lambda: db
    app.dependency_overrides[get_service_supabase] = lambda: db
    app.dependency_overrides[get_image_storage] = lambda: storage
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_user(db):
    """The protected main admin account"""
    return make_user(db, "admin", role="admin")


@pytest.fixture
def other_admin(db):
    return make_user(db, "second_admin", role="admin")


@pytest.fixture
def volunteer(db):
    return make_user(db, "vol_dana", role="verified_volunteer")


@pytest.fixture
def regular_user(db):
    return make_user(db, "plain_yossi", role="user")


@pytest.fixture
def pending_user(db):
    return make_user(db, "pending_noa", role="pending_volunteer")
