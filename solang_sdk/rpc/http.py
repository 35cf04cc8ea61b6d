from __future__ import annotations

"""
HTTP JSON-RPC client (async) over httpx.

- One `httpx.AsyncClient` per client instance; pass `transport=` to plug in an
  `httpx.MockTransport` in tests.
- No retries: a transport failure surfaces as `RpcError` immediately.

Example:
    from solang_sdk.rpc.http import RpcClient

    async with RpcClient("http://127.0.0.1:8899") as rpc:
        bh = await rpc.request("getLatestBlockhash", [{"commitment": "confirmed"}])
"""

import json
import logging
import time
from dataclasses import dataclass, field
from itertools import count
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Union

import httpx

from ..errors import RpcError
from ..version import __version__ as SDK_VERSION

JSON = Union[dict, list, str, int, float, bool, None]
Params = Union[Sequence[Any], Mapping[str, Any], None]

log = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class RpcClient:
    """Asynchronous JSON-RPC 2.0 client over HTTP."""

    url: str
    timeout: float = 30.0
    headers: Optional[Mapping[str, str]] = None
    transport: Optional[httpx.AsyncBaseTransport] = None
    _id_counter: Iterable[int] = field(default_factory=lambda: count(start=_now_ms()))
    _client: Optional[httpx.AsyncClient] = field(init=False, default=None)

    def __post_init__(self) -> None:
        ua = f"solang-sdk-python/{SDK_VERSION}"
        merged_headers: Dict[str, str] = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": ua,
        }
        if self.headers:
            merged_headers.update(dict(self.headers))
        self._client = httpx.AsyncClient(
            timeout=self.timeout,
            headers=merged_headers,
            transport=self.transport,
        )

    # --- context manager -------------------------------------------------

    async def __aenter__(self) -> "RpcClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        await self.close()

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # --- public API ------------------------------------------------------

    async def request(self, method: str, params: Params = None, *, id: Optional[Union[int, str]] = None) -> JSON:
        """Perform a single JSON-RPC request and return `result` or raise RpcError."""
        payload = self._make_payload(method, params, id)
        return await self._send_once(payload)

    # --- internals -------------------------------------------------------

    def _make_payload(self, method: str, params: Params, id: Optional[Union[int, str]] = None) -> Dict[str, Any]:
        if id is None:
            id = next(self._id_counter)
        if params is None:
            params = []
        elif isinstance(params, Mapping):
            params = dict(params)
        elif isinstance(params, Sequence) and not isinstance(params, (str, bytes, bytearray)):
            params = list(params)
        else:
            # Coerce single param into positional list
            params = [params]  # type: ignore[list-item]
        return {"jsonrpc": "2.0", "id": id, "method": method, "params": params}

    async def _send_once(self, payload: Dict[str, Any]) -> JSON:
        if self._client is None:
            raise RpcError(code=-32098, message="RPC client closed", method=payload["method"])
        method = payload["method"]
        body = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
        log.debug("rpc -> %s id=%s", method, payload["id"])
        try:
            r = await self._client.post(self.url, content=body)
        except httpx.HTTPError as e:
            raise RpcError(code=-32098, message="Network error", data=str(e), method=method) from e
        try:
            resp = r.json()
        except ValueError as e:
            raise RpcError(
                code=-32603,
                message="Non-JSON response from RPC",
                data=f"HTTP {r.status_code}: {r.text[:256]}",
                method=method,
            ) from e

        if not isinstance(resp, dict):
            raise RpcError(code=-32603, message="Invalid JSON-RPC response type", data=type(resp).__name__, method=method)
        if resp.get("error") is not None:
            err = resp["error"] or {}
            raise RpcError(
                code=err.get("code", -32603),
                message=err.get("message", "Unknown error"),
                data=err.get("data"),
                method=method,
            )
        if "result" not in resp:
            raise RpcError(code=-32603, message="Malformed JSON-RPC response", data=resp, method=method)
        return resp["result"]


__all__ = ["RpcClient", "JSON", "Params"]
