"""
Pytest configuration and shared fixtures
"""

import pytest
from datetime import date, datetime, timedelta, timezone

from accountability.adapters.memory_store import MemoryStore
from accountability.schemas.goal import GoalCreate
from accountability.schemas.user import ProfileCreate
from accountability.services import goals as goal_service
from accountability.services import partners


NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def store():
    """Fresh in-memory store per test"""
    return MemoryStore()


@pytest.fixture
def alice(store):
    return partners.register_profile(store, "alice", ProfileCreate(name="Alice Smith", email="alice@example.com"))


@pytest.fixture
def bob(store):
    return partners.register_profile(store, "bob", ProfileCreate(name="Bob Jones", email="bob@example.com"))


@pytest.fixture
def carol(store):
    return partners.register_profile(store, "carol", ProfileCreate(name="Carol King", email="carol@example.org"))


@pytest.fixture
def make_goal(store, now):
    """Factory creating a goal for an owner with sensible defaults"""
    def _make(owner_id, created_at=None, **overrides):
        data = {
            "title": "Run a marathon",
            "target_date": (now + timedelta(days=30)).date(),
        }
        data.update(overrides)
        return goal_service.create_goal(store, owner_id, GoalCreate(**data), now=created_at or now)
    return _make


@pytest.fixture
def target_in():
    """Target date a given number of days from NOW"""
    def _target(days: int) -> date:
        return NOW.date() + timedelta(days=days)
    return _target
