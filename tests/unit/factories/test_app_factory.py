"""
Tests for the NPSRouterFactory.
"""
import pytest

from nps_router.adapters.navigation_adapter import RecordingNavigator
from nps_router.adapters.storage_adapter import JsonFileStorageAdapter, MemoryStorageAdapter
from nps_router.adapters.webhook_adapter import NullWebhookProvider, RequestsWebhookAdapter
from nps_router.factories.app_factory import NPSRouterFactory


def test_defaults():
    """Test wiring with an empty configuration."""
    components = NPSRouterFactory.create_from_config({})

    assert isinstance(components.store.storage, MemoryStorageAdapter)
    assert isinstance(components.survey_service.webhook, RequestsWebhookAdapter)
    assert isinstance(components.survey_service.navigator, RecordingNavigator)
    assert components.base_url == "http://localhost/"
    assert components.token_key == "c"
    assert components.nps_service.repository is components.store
    assert components.survey_service.repository is components.store


def test_full_config(tmp_path):
    """Test wiring every option."""
    navigator = RecordingNavigator()
    components = NPSRouterFactory.create_from_config(
        {
            "storage": {"path": str(tmp_path / "nps.json")},
            "app": {"origin": "https://nps.example/", "base_url": "https://nps.example/app/"},
            "webhook": {"enabled": False},
            "portable": {"token_key": "cfg"},
        },
        navigator=navigator,
    )

    assert isinstance(components.store.storage, JsonFileStorageAdapter)
    assert isinstance(components.survey_service.webhook, NullWebhookProvider)
    assert components.survey_service.navigator is navigator
    assert components.base_url == "https://nps.example/app/"
    assert components.survey_service.app_base_url == "https://nps.example/app/"
    assert components.token_key == "cfg"
    assert components.survey_service.token_key == "cfg"


def test_origin_derives_base_url():
    """Test that the base URL defaults to the origin."""
    components = NPSRouterFactory.create_from_config({"app": {"origin": "https://nps.example"}})

    assert components.base_url == "https://nps.example/"


def test_webhook_timeout(tmp_path):
    """Test passing the adapter timeout."""
    components = NPSRouterFactory.create_from_config({"webhook": {"timeout": 2.5}})

    assert components.survey_service.webhook.timeout == 2.5


@pytest.mark.parametrize("config", [
    {"webhook": {"timeout": 0}},
    {"webhook": {"timeout": "fast"}},
    {"portable": {"token_key": ""}},
])
def test_invalid_config(config):
    """Test that invalid values are rejected."""
    with pytest.raises(ValueError):
        NPSRouterFactory.create_from_config(config)
