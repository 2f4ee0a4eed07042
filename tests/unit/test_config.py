"""Unit tests for configuration loading."""

import pytest

from chat_studio.services import create_genai_client
from chat_studio.utils.config import (
    Config,
    GeminiConfig,
    _merge_gemini_with_env,
    extract_legacy_gemini_env,
    initialize_config,
)
from chat_studio.utils.errors import ConfigurationError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "GEMINI_API_KEY",
        "GEMINI_TEXT_MODEL",
        "GEMINI_IMAGE_MODEL",
        "CONFIG_GEMINI__API_KEY",
        "CONFIG_GEMINI__TEXT_MODEL",
        "CONFIG_GEMINI__IMAGE_MODEL",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    gemini = GeminiConfig()

    assert gemini.api_key is None
    assert gemini.text_model == "models/gemini-1.5-flash-latest"
    assert gemini.image_model == "models/gemini-2.5-flash-image"


def test_blank_api_key_is_none():
    assert GeminiConfig(api_key="   ").api_key is None


def test_prefixed_env_overrides(monkeypatch):
    monkeypatch.setenv("CONFIG_GEMINI__TEXT_MODEL", "models/gemini-2.5-flash")
    monkeypatch.setenv("CONFIG_SERVER__PORT", "9001")

    config = Config()

    assert config.gemini.text_model == "models/gemini-2.5-flash"
    assert config.server.port == 9001


def test_legacy_env_variables(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "legacy-key")
    monkeypatch.setenv("GEMINI_IMAGE_MODEL", "models/custom-image")

    config = initialize_config()

    assert config.gemini.api_key == "legacy-key"
    assert config.gemini.image_model == "models/custom-image"


def test_prefixed_env_wins_over_legacy(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "legacy-key")
    monkeypatch.setenv("CONFIG_GEMINI__API_KEY", "prefixed-key")

    assert extract_legacy_gemini_env() == {}
    assert initialize_config().gemini.api_key == "prefixed-key"


def test_merge_without_overrides_returns_same_object():
    base = GeminiConfig(api_key="k")

    assert _merge_gemini_with_env(base, {}) is base


def test_invalid_config_exits(monkeypatch):
    monkeypatch.setenv("CONFIG_SERVER__PORT", "70000")

    with pytest.raises(SystemExit):
        initialize_config()


def test_client_requires_api_key():
    with pytest.raises(ConfigurationError, match="GEMINI_API_KEY is not set"):
        create_genai_client(GeminiConfig())


def test_client_built_with_api_key():
    client = create_genai_client(GeminiConfig(api_key="test-key"))

    assert hasattr(client, "aio")
