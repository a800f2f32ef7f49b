from pathlib import Path

import pytest

from reserveguard.errors import ConfigurationError
from reserveguard.settings import Settings, get_settings

_VARS = (
    "RESERVEGUARD_LOG_LEVEL",
    "RESERVEGUARD_LOG_FORMAT",
    "RESERVEGUARD_POLICY",
    "RESERVEGUARD_POLICY_VERSION",
    "RESERVEGUARD_LEDGER_PATH",
    "RESERVEGUARD_HISTORY_LIMIT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = get_settings()
    assert settings == Settings()
    assert settings.json_logs
    assert settings.load_policy().version == "1.0.0"


def test_env_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("RESERVEGUARD_LOG_LEVEL", "debug")
    monkeypatch.setenv("RESERVEGUARD_LOG_FORMAT", "TEXT")
    monkeypatch.setenv("RESERVEGUARD_POLICY", "strict")
    monkeypatch.setenv("RESERVEGUARD_POLICY_VERSION", "1.1.7")
    monkeypatch.setenv("RESERVEGUARD_LEDGER_PATH", str(tmp_path / "audit.jsonl"))
    monkeypatch.setenv("RESERVEGUARD_HISTORY_LIMIT", "50")

    settings = get_settings()
    assert settings.log_level == "DEBUG"
    assert not settings.json_logs
    assert settings.ledger_path == Path(tmp_path / "audit.jsonl")
    assert settings.history_limit == 50

    policy = settings.load_policy()
    assert policy.version == "1.1.7"
    assert policy.asset_quality.max_risky_percentage == 30


@pytest.mark.parametrize(
    "name,value",
    [
        ("RESERVEGUARD_LOG_LEVEL", "LOUD"),
        ("RESERVEGUARD_LOG_FORMAT", "xml"),
        ("RESERVEGUARD_HISTORY_LIMIT", "many"),
        ("RESERVEGUARD_HISTORY_LIMIT", "0"),
    ],
)
def test_invalid_env_values(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ConfigurationError):
        get_settings()


def test_bad_policy_surfaces_as_configuration_error(monkeypatch):
    monkeypatch.setenv("RESERVEGUARD_POLICY", "no-such-preset")
    with pytest.raises(ConfigurationError):
        get_settings().load_policy()

    monkeypatch.setenv("RESERVEGUARD_POLICY", "default")
    monkeypatch.setenv("RESERVEGUARD_POLICY_VERSION", "latest")
    with pytest.raises(ConfigurationError):
        get_settings().load_policy()
