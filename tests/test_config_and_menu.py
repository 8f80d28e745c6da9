from __future__ import annotations

import pytest

from clientdesk.core.config import AppConfig
from clientdesk.menu import QUICK_ACTIONS, quick_actions_for
from tests.fakes import AGENT


def test_app_config_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "AUTH_SECRET_KEY",
        "AUTH_ADMIN_EMAILS",
        "MONGODB_URI",
        "MONGODB_DB",
        "LOCAL_STORE_DIR",
        "REQUEST_MAX_BYTES",
    ):
        monkeypatch.delenv(name, raising=False)

    config = AppConfig.from_env()

    assert config.store.mongo_uri == ""
    assert config.store.mongo_db == "clientdesk"
    assert config.store.local_store_dir == "runtime/local_store"
    assert config.security.request_max_bytes == 1024 * 1024
    assert "admin@example.com" in config.auth.admin_emails


def test_app_config_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AUTH_ADMIN_EMAILS", " Boss@Example.com , ,lead@example.com")
    monkeypatch.setenv("MONGODB_URI", "mongodb://db:27017")
    monkeypatch.setenv("CORS_ALLOWED_ORIGINS", "https://desk.example.com")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    config = AppConfig.from_env()

    assert config.auth.admin_emails == ["boss@example.com", "lead@example.com"]
    assert config.store.mongo_uri == "mongodb://db:27017"
    assert config.security.cors_allowed_origins == ["https://desk.example.com"]
    assert config.logging.level == "debug"


def test_quick_actions_need_a_session() -> None:
    assert quick_actions_for(None) == []

    items = quick_actions_for(AGENT)

    assert [item["id"] for item in items] == [action.id for action in QUICK_ACTIONS]
    assert items[0]["path"] == "/addedclients"
    assert {item["path"] for item in items} >= {"/?tab=reports", "/?tab=order-requests"}
