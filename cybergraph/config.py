"""Configuration helpers for the follow-graph engine."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .models import Network

PROJECT_ROOT = Path(__file__).resolve().parents[1]
ENV_PATH = PROJECT_ROOT / ".env"

# Load environment variables early so downstream modules can rely on them.
load_dotenv(ENV_PATH, override=False)

ENDPOINT_ENV = "CYBERCONNECT_ENDPOINT"
NAMESPACE_ENV = "CYBERCONNECT_NAMESPACE"
NETWORK_ENV = "CYBERCONNECT_NETWORK"
PAGE_SIZE_ENV = "FOLLOW_PAGE_SIZE"
TIMEOUT_ENV = "QUERY_TIMEOUT_SECONDS"
LOG_DIR_ENV = "CYBERGRAPH_LOG_DIR"

DEFAULT_ENDPOINT = "https://api.cybertino.io/connect/"
DEFAULT_NAMESPACE = "CyberConnect"
DEFAULT_NETWORK = Network.ETH
DEFAULT_PAGE_SIZE = 10
DEFAULT_TIMEOUT_SECONDS = 15.0
DEFAULT_LOG_DIR = Path("logs")


@dataclass(frozen=True)
class GraphSettings:
    """Scope and sizing for every follow-graph query."""

    endpoint: str = DEFAULT_ENDPOINT
    namespace: str = DEFAULT_NAMESPACE
    network: Network = DEFAULT_NETWORK
    page_size: int = DEFAULT_PAGE_SIZE
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS


def _get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value


def _positive_int(name: str, default: int) -> int:
    raw = _get_env(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be an integer; received '{raw}'.") from exc
    if value <= 0:
        raise RuntimeError(f"{name} must be positive; received '{raw}'.")
    return value


def _positive_float(name: str, default: float) -> float:
    raw = _get_env(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be a number; received '{raw}'.") from exc
    if value <= 0:
        raise RuntimeError(f"{name} must be positive; received '{raw}'.")
    return value


def get_network() -> Network:
    raw = _get_env(NETWORK_ENV, DEFAULT_NETWORK.value)
    try:
        return Network(raw.upper())
    except ValueError as exc:
        choices = ", ".join(n.value for n in Network)
        raise RuntimeError(f"{NETWORK_ENV} must be one of {choices}; received '{raw}'.") from exc


def get_graph_settings() -> GraphSettings:
    """Resolve query settings from the environment with sensible defaults."""

    return GraphSettings(
        endpoint=_get_env(ENDPOINT_ENV, DEFAULT_ENDPOINT),
        namespace=_get_env(NAMESPACE_ENV, DEFAULT_NAMESPACE),
        network=get_network(),
        page_size=_positive_int(PAGE_SIZE_ENV, DEFAULT_PAGE_SIZE),
        timeout_seconds=_positive_float(TIMEOUT_ENV, DEFAULT_TIMEOUT_SECONDS),
    )


def get_log_dir() -> Path:
    raw_path = _get_env(LOG_DIR_ENV, str(DEFAULT_LOG_DIR))
    return Path(raw_path).expanduser()
