"""Runtime settings, read from environment variables."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

ENV_PREFIX = "UPI_GUARD_"


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _env_log_level(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if not raw:
        return default
    level = logging.getLevelName(raw.upper())
    if not isinstance(level, int):
        raise ValueError(f"{name} must be a logging level name, got {raw!r}")
    return level


@dataclass(frozen=True)
class Settings:
    """
    Process-wide settings.

    Attributes:
        log_level: Root log level (``UPI_GUARD_LOG_LEVEL``, default INFO).
        environment: Deployment environment label
            (``UPI_GUARD_ENVIRONMENT``, then ``ENVIRONMENT``).
        alert_webhook_url: Where CRITICAL fraud alerts are POSTed
            (``UPI_GUARD_ALERT_WEBHOOK_URL``). Unset disables the webhook.
        alert_cooldown_seconds: Minimum gap between repeated notifications
            for the same counterparty (``UPI_GUARD_ALERT_COOLDOWN_SECONDS``).
        simulator_seed: Seed for the transaction simulator
            (``UPI_GUARD_SIMULATOR_SEED``).
        otlp_endpoint: OTLP HTTP endpoint (``OTEL_EXPORTER_OTLP_ENDPOINT``).
            Unset disables trace export.
    """

    log_level: int = logging.INFO
    environment: str = "development"
    alert_webhook_url: Optional[str] = None
    alert_cooldown_seconds: int = 0
    simulator_seed: int = 42
    otlp_endpoint: Optional[str] = None

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from ``env`` (defaults to ``os.environ``)."""
        env = os.environ if env is None else env

        cooldown = _env_int(env, ENV_PREFIX + "ALERT_COOLDOWN_SECONDS", 0)
        if cooldown < 0:
            raise ValueError("UPI_GUARD_ALERT_COOLDOWN_SECONDS must be >= 0")

        return cls(
            log_level=_env_log_level(env, ENV_PREFIX + "LOG_LEVEL", logging.INFO),
            environment=(
                env.get(ENV_PREFIX + "ENVIRONMENT")
                or env.get("ENVIRONMENT")
                or "development"
            ),
            alert_webhook_url=env.get(ENV_PREFIX + "ALERT_WEBHOOK_URL") or None,
            alert_cooldown_seconds=cooldown,
            simulator_seed=_env_int(env, ENV_PREFIX + "SIMULATOR_SEED", 42),
            otlp_endpoint=env.get("OTEL_EXPORTER_OTLP_ENDPOINT") or None,
        )
