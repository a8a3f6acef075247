import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from supportbot.modules.config import ConfigModule


@pytest.fixture
def session_env(monkeypatch):
    monkeypatch.setenv("SUPPORT_SESSION_CHANNELS", "#help-1, #help-2,,#help-3")
    return monkeypatch


def test_channels_keep_order(session_env):
    """Test the channel pool is parsed in order without blanks."""
    config = ConfigModule()

    assert config.get("session_channels") == ["#help-1", "#help-2", "#help-3"]


def test_defaults(session_env):
    """Test optional settings fall back to defaults."""
    for var in ("REDIS_HOST", "REDIS_PORT", "LOGS_DIR", "PASTE_URL", "USER_SUPPORT_CHANNEL"):
        session_env.delenv(var, raising=False)

    config = ConfigModule()

    assert config.get("redis_host") == "localhost"
    assert config.get("redis_port") == 6379
    assert config.get("logs_dir") == "logs"
    assert config.get("paste_url") is None
    assert config.get("user_support_channel") == "#support"
    assert config.get("paste_timeout") == 10.0


def test_kubernetes_style_redis_port(session_env):
    """Test tcp://host:port values are accepted for REDIS_PORT."""
    session_env.setenv("REDIS_PORT", "tcp://10.0.0.5:6380")

    assert ConfigModule().get("redis_port") == 6380


def test_missing_channel_pool(monkeypatch):
    """Test an empty channel pool is rejected."""
    monkeypatch.delenv("SUPPORT_SESSION_CHANNELS", raising=False)

    with pytest.raises(ValueError, match="session_channels"):
        ConfigModule()


def test_schema_documents_keys():
    """Test the schema lists required and optional keys."""
    schema = ConfigModule.get_config_schema()

    assert "session_channels" in schema["required"]
    assert "paste_url" in schema["optional"]
