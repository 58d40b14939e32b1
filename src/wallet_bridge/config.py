"""Configuration containers for the wallet bridge."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from dotenv import load_dotenv

from .exceptions import ConfigurationError

DEFAULT_TARGET_URL = "https://clashofcoins.com/agentic?ref=H-bxcl-ohgv-7048"
DEFAULT_PRIVATE_KEY_FILE = "wallet1.txt"
DEFAULT_RPC_URL = "https://rpc.ankr.com/eth"
DEFAULT_CLAIM_TIMEOUT_MS = 120_000
DEFAULT_CONNECT_TIMEOUT_MS = 15_000
DEFAULT_SETTLE_MS = 8_000
DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_LOG_LEVEL = "INFO"

CONNECT_LABEL_PATTERN = r"connect|wallet|login|sign in|start|claim|connect wallet"
CLAIM_LABEL_PATTERN = r"claim|reward|mint|клейм|награда|получить"


@dataclass(frozen=True)
class FlowConfig:
    """Timeouts and control labels used by the claim flow."""

    target_url: str = DEFAULT_TARGET_URL
    claim_timeout_ms: float = DEFAULT_CLAIM_TIMEOUT_MS
    connect_timeout_ms: float = DEFAULT_CONNECT_TIMEOUT_MS
    settle_ms: float = DEFAULT_SETTLE_MS
    connect_pattern: str = CONNECT_LABEL_PATTERN
    claim_pattern: str = CLAIM_LABEL_PATTERN


@dataclass(frozen=True)
class BridgeConfig:
    """Aggregated process configuration."""

    private_key_file: str = DEFAULT_PRIVATE_KEY_FILE
    rpc_url: str = DEFAULT_RPC_URL
    headless: bool = False
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    log_level: str = DEFAULT_LOG_LEVEL
    flow: FlowConfig = field(default_factory=FlowConfig)

    @property
    def target_url(self) -> str:
        return self.flow.target_url

    @property
    def claim_timeout_ms(self) -> float:
        return self.flow.claim_timeout_ms


def load_config(env: Mapping[str, str] | None = None) -> BridgeConfig:
    """Build configuration from ``env`` or, by default, ``.env`` plus the process environment."""

    if env is None:
        load_dotenv()
        env = os.environ

    flow = FlowConfig(
        target_url=env.get("TARGET_URL") or DEFAULT_TARGET_URL,
        claim_timeout_ms=_number(env, "CLAIM_TIMEOUT_MS", DEFAULT_CLAIM_TIMEOUT_MS),
    )

    return BridgeConfig(
        private_key_file=env.get("PRIVATE_KEY_FILE") or DEFAULT_PRIVATE_KEY_FILE,
        rpc_url=env.get("RPC_URL") or DEFAULT_RPC_URL,
        headless=env.get("HEADLESS", "false").lower() != "false",
        request_timeout=_number(env, "RPC_REQUEST_TIMEOUT", DEFAULT_REQUEST_TIMEOUT),
        log_level=_log_level(env),
        flow=flow,
    )


def _number(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default

    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be numeric", field=name, value=raw) from exc

    if value <= 0:
        raise ConfigurationError(f"{name} must be positive", field=name, value=raw)
    return value


def _log_level(env: Mapping[str, str]) -> str:
    level = (env.get("LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigurationError("LOG_LEVEL is not a logging level", field="LOG_LEVEL", value=level)
    return level
