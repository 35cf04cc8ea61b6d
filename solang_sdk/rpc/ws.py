from __future__ import annotations

"""
WebSocket JSON-RPC client (async) with subscription helpers.

- Uses the `websockets` package.
- Correlates requests by `id` and dispatches subscription notifications.
- No reconnect: a dropped connection fails pending requests with `RpcError`
  and ends the reader; the owner decides whether to connect again.

Example:
    import asyncio
    from solang_sdk.rpc.ws import WsClient

    async def main():
        async with WsClient("ws://127.0.0.1:8900") as ws:
            sub_id = await ws.subscribe(
                "logsSubscribe",
                [{"mentions": [program_id]}, {"commitment": "confirmed"}],
                on_event=lambda ev: print(ev["value"]["logs"]),
            )
            await asyncio.sleep(10)
            await ws.unsubscribe("logsUnsubscribe", sub_id)

    asyncio.run(main())
"""

import asyncio
import contextlib
import json
import logging
import time
from dataclasses import dataclass, field
from itertools import count
from typing import Any, Callable, Dict, Mapping, Optional, Union

from websockets.asyncio.client import ClientConnection, connect as ws_connect
from websockets.exceptions import ConnectionClosed

from ..errors import RpcError
from ..version import __version__ as SDK_VERSION

JSON = Union[dict, list, str, int, float, bool, None]
Params = Union[list, dict, None]
OnEvent = Callable[[JSON], None]

log = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class WsClient:
    url: str
    headers: Optional[Mapping[str, str]] = None
    connect_timeout: float = 15.0
    request_timeout: float = 30.0
    ping_interval: Optional[float] = 20.0
    _id_counter: Any = field(default_factory=lambda: count(start=_now_ms()))
    _ws: Optional[ClientConnection] = field(init=False, default=None)
    _reader_task: Optional[asyncio.Task] = field(init=False, default=None)
    _pending: Dict[int, asyncio.Future] = field(init=False, default_factory=dict)
    _sub_handlers: Dict[str, OnEvent] = field(init=False, default_factory=dict)
    _closing: bool = field(init=False, default=False)

    # ------------- context manager -------------

    async def __aenter__(self) -> "WsClient":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        await self.close()

    # ------------- lifecycle -------------------

    @property
    def connected(self) -> bool:
        return self._ws is not None

    async def connect(self) -> None:
        """Establish a WebSocket connection and start the reader loop."""
        self._closing = False
        hdrs = {"User-Agent": f"solang-sdk-python/{SDK_VERSION}"}
        if self.headers:
            hdrs.update(dict(self.headers))
        try:
            self._ws = await asyncio.wait_for(
                ws_connect(self.url, additional_headers=hdrs, ping_interval=self.ping_interval),
                timeout=self.connect_timeout,
            )
        except (OSError, asyncio.TimeoutError) as e:
            raise RpcError(code=-32098, message="WS connect failed", data=str(e)) from e
        self._reader_task = asyncio.create_task(self._reader_loop(), name="WsClient.reader")
        log.debug("ws connected to %s", self.url)

    async def close(self) -> None:
        """Close the WebSocket and cancel tasks."""
        self._closing = True
        if self._reader_task and not self._reader_task.done():
            self._reader_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._reader_task
        self._reader_task = None
        if self._ws is not None:
            await self._ws.close()
            self._ws = None
        self._fail_pending("WS closed")
        self._sub_handlers.clear()

    # ------------- RPC primitives --------------

    async def request(self, method: str, params: Params = None, *, id: Optional[int] = None) -> JSON:
        """Send a JSON-RPC request and await the response."""
        if self._ws is None:
            await self.connect()
        assert self._ws is not None
        if id is None:
            id = next(self._id_counter)
        if params is None:
            params = []

        payload = {"jsonrpc": "2.0", "id": id, "method": method, "params": params}
        fut: asyncio.Future = asyncio.get_running_loop().create_future()
        self._pending[id] = fut

        try:
            await asyncio.wait_for(
                self._ws.send(json.dumps(payload, separators=(",", ":"))),
                timeout=self.request_timeout,
            )
        except (ConnectionClosed, asyncio.TimeoutError) as e:
            self._pending.pop(id, None)
            raise RpcError(code=-32098, message="WS send failed", data=str(e), method=method) from e

        try:
            return await asyncio.wait_for(fut, timeout=self.request_timeout)
        finally:
            self._pending.pop(id, None)

    # ------------- Subscriptions ----------------

    async def subscribe(self, method: str, params: Params = None, *, on_event: OnEvent) -> JSON:
        """
        Generic subscription helper.

        The server returns a subscription id in `result`; notifications look like
          {"jsonrpc":"2.0","method":"<x>Notification","params":{"subscription":<id>,"result":<event>}}
        """
        sub_id = await self.request(method, params or [])
        self._sub_handlers[str(sub_id)] = on_event
        return sub_id

    async def unsubscribe(self, method: str, sub_id: JSON) -> bool:
        """Unsubscribe via server method and remove the handler."""
        self._sub_handlers.pop(str(sub_id), None)
        ok = await self.request(method, [sub_id])
        return bool(ok)

    # ------------- internals --------------------

    def _fail_pending(self, reason: str) -> None:
        for fut in list(self._pending.values()):
            if not fut.done():
                fut.set_exception(RpcError(code=-32098, message=reason, data=None))
        self._pending.clear()

    async def _reader_loop(self) -> None:
        """Continuously read frames and dispatch to pending futures or handlers."""
        assert self._ws is not None
        while True:
            try:
                msg = await self._ws.recv()
            except ConnectionClosed:
                if not self._closing:
                    log.warning("ws connection to %s closed", self.url)
                    self._ws = None
                    self._fail_pending("WS disconnected")
                return
            self._handle_message(msg)

    def _handle_message(self, msg: Union[str, bytes]) -> None:
        try:
            data = json.loads(msg)
        except ValueError:
            log.debug("ignoring non-JSON ws frame")
            return
        if not isinstance(data, dict):
            return

        # Response to a request
        if "id" in data and data.get("id") is not None:
            rid = data["id"]
            fut = self._pending.get(rid) if isinstance(rid, int) else None
            if fut is not None and not fut.done():
                err = data.get("error")
                if err is not None:
                    fut.set_exception(
                        RpcError(
                            code=err.get("code", -32603),
                            message=err.get("message", "Unknown error"),
                            data=err.get("data"),
                        )
                    )
                else:
                    fut.set_result(data.get("result"))
            return

        # Subscription notification
        params = data.get("params")
        if isinstance(params, dict) and "subscription" in params:
            handler = self._sub_handlers.get(str(params["subscription"]))
            if handler is None:
                return
            try:
                handler(params.get("result"))
            except Exception:
                log.exception("ws subscription handler failed")


__all__ = ["WsClient", "JSON", "Params", "OnEvent"]
