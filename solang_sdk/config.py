"""
SDK configuration: RPC endpoints, commitment level and timeouts.

- Loads sane defaults and supports overrides via environment variables (SOLANG_*).
- Provides helpers for building HTTP headers and validating endpoints.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from urllib.parse import urlsplit, urlunsplit

from .version import __version__

_DEFAULT_RPC = "http://127.0.0.1:8899"

COMMITMENTS = ("processed", "confirmed", "finalized")


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    v = os.getenv(name)
    return v if v is not None else default


def _ensure_scheme(url: Optional[str], allowed: tuple[str, ...]) -> Optional[str]:
    if not url:
        return url
    lower = url.lower()
    if not any(lower.startswith(f"{sch}://") for sch in allowed):
        raise ValueError(f"URL must start with {allowed}, got: {url!r}")
    return url


def _ensure_commitment(level: str) -> str:
    if level not in COMMITMENTS:
        raise ValueError(f"commitment must be one of {COMMITMENTS}, got: {level!r}")
    return level


def derive_ws_url(rpc_url: str) -> str:
    """
    Websocket endpoint for an RPC URL: http→ws, https→wss, and an explicit
    port moves up by one (the validator's pubsub port convention).
    """
    parts = urlsplit(rpc_url)
    scheme = "wss" if parts.scheme == "https" else "ws"
    netloc = parts.netloc
    if parts.port is not None:
        host = netloc.rsplit(":", 1)[0]
        netloc = f"{host}:{parts.port + 1}"
    return urlunsplit((scheme, netloc, parts.path, parts.query, parts.fragment))


@dataclass(slots=True)
class SDKConfig:
    # Core
    rpc_url: str = field(default_factory=lambda: _DEFAULT_RPC)
    # Optional WS (for log subscriptions); derived from rpc_url when unset
    ws_url: Optional[str] = field(default=None)
    commitment: str = "confirmed"
    # HTTP/WS behavior
    request_timeout: float = 30.0
    confirm_timeout: float = 60.0
    poll_interval: float = 0.5
    # Headers / identity
    user_agent: str = field(default_factory=lambda: f"solang-sdk-py/{__version__}")

    @property
    def effective_ws_url(self) -> str:
        return self.ws_url or derive_ws_url(self.rpc_url)

    @classmethod
    def from_env(cls, prefix: str = "SOLANG_") -> "SDKConfig":
        """
        Create config from environment variables:

        SOLANG_RPC_URL          (http/https; falls back to RPC_URL)
        SOLANG_WS_URL           (ws/wss) optional
        SOLANG_COMMITMENT       (processed | confirmed | finalized)
        SOLANG_TIMEOUT          (float seconds, HTTP)
        SOLANG_CONFIRM_TIMEOUT  (float seconds, waiting for confirmation)
        SOLANG_POLL_INTERVAL    (float seconds between status polls)
        SOLANG_USER_AGENT       (str)
        """
        rpc = _env(f"{prefix}RPC_URL", _env("RPC_URL", _DEFAULT_RPC))
        ws = _env(f"{prefix}WS_URL", None)
        commitment = _env(f"{prefix}COMMITMENT", "confirmed") or "confirmed"
        timeout = float(_env(f"{prefix}TIMEOUT", "30.0"))
        confirm_timeout = float(_env(f"{prefix}CONFIRM_TIMEOUT", "60.0"))
        poll = float(_env(f"{prefix}POLL_INTERVAL", "0.5"))
        ua = _env(f"{prefix}USER_AGENT", f"solang-sdk-py/{__version__}")

        _ensure_scheme(rpc, ("http", "https"))
        _ensure_scheme(ws, ("ws", "wss"))
        _ensure_commitment(commitment)

        return cls(
            rpc_url=rpc or _DEFAULT_RPC,
            ws_url=ws,
            commitment=commitment,
            request_timeout=timeout,
            confirm_timeout=confirm_timeout,
            poll_interval=poll,
            user_agent=ua or f"solang-sdk-py/{__version__}",
        )

    @classmethod
    def with_overrides(
        cls, base: Optional["SDKConfig"] = None, **overrides: Any
    ) -> "SDKConfig":
        """
        Build from an existing config plus keyword overrides.
        Unknown keys are ignored.
        """
        base = base or cls.from_env()
        data = base.to_dict()
        data.update({k: v for k, v in overrides.items() if k in data})
        if "rpc_url" in overrides:
            _ensure_scheme(data["rpc_url"], ("http", "https"))
        if "ws_url" in overrides:
            _ensure_scheme(data["ws_url"], ("ws", "wss"))
        if "commitment" in overrides:
            _ensure_commitment(data["commitment"])
        return cls(**data)

    def http_headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": self.user_agent,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rpc_url": self.rpc_url,
            "ws_url": self.ws_url,
            "commitment": self.commitment,
            "request_timeout": float(self.request_timeout),
            "confirm_timeout": float(self.confirm_timeout),
            "poll_interval": float(self.poll_interval),
            "user_agent": self.user_agent,
        }


__all__ = ["SDKConfig", "COMMITMENTS", "derive_ws_url"]
