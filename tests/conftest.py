"""
Shared fixtures: stores, a recording messaging provider, settings, API client.
"""

import pytest
from fastapi.testclient import TestClient

from tsl.infrastructure.config import (
    PLACEHOLDER_REVIEW_LINK,
    CampaignSettings,
    DatabaseSettings,
    ServerSettings,
    Settings,
    WhatsAppSettings,
)
from tsl.infrastructure.persistence import MemoryStore, SqliteStore
from tsl.infrastructure.whatsapp import MessagingProvider


class RecordingProvider(MessagingProvider):
    """Captures send_template calls instead of talking to WhatsApp."""

    def __init__(self):
        self.sent = []

    def send_template(self, to, template_name=None, parameters=(), language=None):
        self.sent.append(
            {
                "to": to,
                "template_name": template_name,
                "parameters": list(parameters),
                "language": language,
            }
        )


def make_settings(**campaign) -> Settings:
    return Settings(
        database=DatabaseSettings(url=""),
        whatsapp=WhatsAppSettings(
            access_token="",
            phone_number_id="",
            template_name="review_request",
            template_language="en",
        ),
        campaign=CampaignSettings(
            default_review_link=campaign.get("default_review_link", PLACEHOLDER_REVIEW_LINK),
            batch_size=campaign.get("batch_size", 200),
        ),
        server=ServerSettings(cors_origins=("*",), log_level="INFO"),
    )


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def sqlite_store(tmp_path):
    store = SqliteStore(str(tmp_path / "tsl-test.db"))
    store.init()
    return store


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path):
    """Runs a test once per backend."""
    if request.param == "memory":
        return MemoryStore()
    store = SqliteStore(str(tmp_path / "tsl-test.db"))
    store.init()
    return store


@pytest.fixture
def provider():
    return RecordingProvider()


@pytest.fixture
def client(store, provider, settings):
    from tsl.web import app as app_module

    app_module.app.dependency_overrides[app_module.get_store] = lambda: store
    app_module.app.dependency_overrides[app_module.get_messaging] = lambda: provider
    app_module.app.dependency_overrides[app_module.get_app_settings] = lambda: settings
    try:
        yield TestClient(app_module.app, raise_server_exceptions=False)
    finally:
        app_module.app.dependency_overrides.clear()
