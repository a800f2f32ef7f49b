from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .errors import ConfigurationError, ValidationError
from .rules_engine.config import PolicyConfig, load_policy_config


load_dotenv()

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Settings:
    log_level: str = "INFO"
    log_format: str = "json"
    policy: str = "default"
    policy_version: Optional[str] = None
    ledger_path: Optional[Path] = None
    history_limit: int = 1000

    @property
    def json_logs(self) -> bool:
        return self.log_format == "json"

    def load_policy(self) -> PolicyConfig:
        try:
            policy = load_policy_config(self.policy)
            if self.policy_version:
                policy = policy.with_version(self.policy_version)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid policy configuration: {'; '.join(exc.errors)}") from exc
        return policy


def get_settings() -> Settings:
    """
    Load settings from environment variables (a `.env` file is honoured):
      RESERVEGUARD_LOG_LEVEL, RESERVEGUARD_LOG_FORMAT, RESERVEGUARD_POLICY,
      RESERVEGUARD_POLICY_VERSION, RESERVEGUARD_LEDGER_PATH,
      RESERVEGUARD_HISTORY_LIMIT
    """
    log_level = os.getenv("RESERVEGUARD_LOG_LEVEL", "INFO").strip().upper()
    if log_level not in _LOG_LEVELS:
        raise ConfigurationError(f"RESERVEGUARD_LOG_LEVEL must be one of {', '.join(_LOG_LEVELS)}.")

    log_format = os.getenv("RESERVEGUARD_LOG_FORMAT", "json").strip().lower()
    if log_format not in ("json", "text"):
        raise ConfigurationError("RESERVEGUARD_LOG_FORMAT must be 'json' or 'text'.")

    ledger_raw = os.getenv("RESERVEGUARD_LEDGER_PATH", "").strip()

    return Settings(
        log_level=log_level,
        log_format=log_format,
        policy=os.getenv("RESERVEGUARD_POLICY", "default").strip() or "default",
        policy_version=os.getenv("RESERVEGUARD_POLICY_VERSION", "").strip() or None,
        ledger_path=Path(ledger_raw) if ledger_raw else None,
        history_limit=_int_env("RESERVEGUARD_HISTORY_LIMIT", 1000),
    )


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer.") from exc
    if value < 1:
        raise ConfigurationError(f"{name} must be at least 1.")
    return value
