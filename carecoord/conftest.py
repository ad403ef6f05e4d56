"""Shared fixtures: settings isolation and an in-memory dashboard data source."""

from collections.abc import Iterator

import pytest

from carecoord.auth.config import set_auth_settings
from carecoord.config import AppSettings, set_app_settings
from carecoord.db.changes.feed import set_change_feed
from carecoord.db.config import set_db_settings
from carecoord.testing import FakeDataSource


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch) -> Iterator[None]:
    """Fresh settings singletons and a known environment for every test."""
    monkeypatch.setenv("LLM_API_KEY", "test-llm-key")
    monkeypatch.setenv("DB_URL", "postgresql://postgres@localhost:5432/carecoord_test")
    monkeypatch.delenv("AUTH_JWT_SECRET", raising=False)
    monkeypatch.delenv("AI_PROVIDER", raising=False)
    set_app_settings(AppSettings(timezone="UTC"))
    set_auth_settings(None)
    set_db_settings(None)
    set_change_feed(None)
    yield
    set_app_settings(None)
    set_auth_settings(None)
    set_db_settings(None)
    set_change_feed(None)


@pytest.fixture
def data_source() -> FakeDataSource:
    return FakeDataSource()
