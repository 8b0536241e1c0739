from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

from dotenv import load_dotenv

DEFAULT_API_VERSION = "7.0"
DEFAULT_TIMEOUT_MS = 30_000

# Versions addressed without the "v" prefix in the API path.
_UNPREFIXED_VERSIONS = frozenset({"internal", "unsupported"})


@dataclass(frozen=True)
class ConnectionConfig:
    """Connection settings, fixed for the lifetime of a client."""

    url: str
    version: str = DEFAULT_API_VERSION
    api_key: Optional[str] = None
    always_use_get: bool = False
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    email_aliases: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        url = (self.url or "").strip().rstrip("/")
        if not url:
            raise ValueError("url must be provided.")
        object.__setattr__(self, "url", url)

    @property
    def base_path(self) -> str:
        return api_base_path(self.version)


def api_base_path(version: str) -> str:
    version = (version or DEFAULT_API_VERSION).strip()
    if version in _UNPREFIXED_VERSIONS:
        return f"/attask/api/{version}"
    return f"/attask/api/v{version}"


def _get_bool_env(name: str, default: bool) -> bool:
    """Parse a boolean environment variable with a safe default."""
    raw = os.getenv(name)
    if raw is None:
        return default
    val = raw.strip().lower()
    if val in {"1", "true", "t", "yes", "y", "on"}:
        return True
    if val in {"0", "false", "f", "no", "n", "off"}:
        return False
    return default


def _get_int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def parse_email_aliases(raw: str) -> Dict[str, str]:
    """Parse ``a@x=b@y,c@x=d@y`` into a lowercase forward mapping."""
    aliases: Dict[str, str] = {}
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        source, sep, target = part.partition("=")
        if not sep or not source.strip() or not target.strip():
            raise ValueError(f"Invalid email alias entry: {part!r}")
        aliases[source.strip().lower()] = target.strip().lower()
    return aliases


def load_env_config(*, use_dotenv: bool = True) -> ConnectionConfig:
    """Load Workfront connection settings from environment (optional .env)."""
    if use_dotenv:
        load_dotenv()
    return ConnectionConfig(
        url=os.getenv("WORKFRONT_URL", "").strip(),
        version=os.getenv("WORKFRONT_API_VERSION", "").strip() or DEFAULT_API_VERSION,
        api_key=os.getenv("WORKFRONT_API_KEY", "").strip() or None,
        always_use_get=_get_bool_env("WORKFRONT_ALWAYS_USE_GET", False),
        timeout_ms=_get_int_env("WORKFRONT_TIMEOUT_MS", DEFAULT_TIMEOUT_MS),
        email_aliases=parse_email_aliases(os.getenv("WORKFRONT_EMAIL_ALIASES", "")),
    )


__all__ = [
    "ConnectionConfig",
    "DEFAULT_API_VERSION",
    "DEFAULT_TIMEOUT_MS",
    "api_base_path",
    "load_env_config",
    "parse_email_aliases",
]
