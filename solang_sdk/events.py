"""
solang_sdk.events
=================

Event and log listeners over the program's live log stream.

`EventDispatcher` owns one registry of listeners (event listeners and raw
`Program log:` listeners share it, and share one id counter) plus at most one
transport log subscription:

- the subscription is opened when the registry goes from empty to non-empty;
- it is closed exactly once when the registry goes back to empty, even when
  several removals land in the same tick;
- open/close run under an `asyncio.Lock`.

Each notification's `Program data:` records are offered to every event
listener over a snapshot of the registry. A record that a listener's ABI
cannot decode is skipped for that listener only, since every contract of the
program shares the stream. Callback exceptions are logged and never stop
delivery to the other listeners; awaitable callback results are scheduled on
the running loop.

Public API
----------
- EventDispatcher(subscriber, program_id)
- await .subscribe(interface, callback, event=None) -> id
- await .unsubscribe(id)
- await .subscribe_logs(callback) -> id
- await .unsubscribe_logs(id)
- await .close()
- decode_events(interface, lines) -> List[DecodedEvent]
"""

from __future__ import annotations

import asyncio
import inspect
import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Protocol, Set, Union

from .abi.interface import ContractInterface, DecodedEvent
from .errors import AbiError, ListenerNotFoundError
from .logs import parse_log_message, parse_log_topic
from .publickey import PublicKey

__all__ = [
    "LogNotification",
    "LogSubscriber",
    "EventCallback",
    "LogCallback",
    "EventDispatcher",
    "decode_events",
]

log = logging.getLogger(__name__)

EventCallback = Callable[[DecodedEvent], Union[None, Awaitable[None]]]
LogCallback = Callable[[str], Union[None, Awaitable[None]]]
SubscriptionId = Union[int, str]


@dataclass(frozen=True)
class LogNotification:
    """One transaction's log lines as pushed by the transport."""

    logs: List[str]
    err: Any = None
    signature: Optional[str] = None


class LogSubscriber(Protocol):
    async def on_logs(
        self, program_id: PublicKey, callback: Callable[[LogNotification], None]
    ) -> SubscriptionId: ...

    async def remove_on_logs(self, subscription_id: SubscriptionId) -> None: ...


@dataclass(frozen=True)
class _EventListener:
    interface: ContractInterface
    callback: EventCallback
    event: Optional[str] = None

    def wants(self, decoded: DecodedEvent) -> bool:
        return self.event is None or self.event in (decoded.name, decoded.signature)


@dataclass
class EventDispatcher:
    subscriber: LogSubscriber
    program_id: PublicKey
    _events: Dict[int, _EventListener] = field(init=False, default_factory=dict)
    _logs: Dict[int, LogCallback] = field(init=False, default_factory=dict)
    _ids: Any = field(init=False, default_factory=lambda: itertools.count(1))
    _lock: asyncio.Lock = field(init=False, default_factory=asyncio.Lock)
    _subscription_id: Optional[SubscriptionId] = field(init=False, default=None)
    _tasks: Set[asyncio.Future] = field(init=False, default_factory=set)

    # --- registry ---

    @property
    def listener_count(self) -> int:
        return len(self._events) + len(self._logs)

    @property
    def is_subscribed(self) -> bool:
        return self._subscription_id is not None

    async def subscribe(
        self,
        interface: ContractInterface,
        callback: EventCallback,
        event: Optional[str] = None,
    ) -> int:
        """Register `callback` for events decodable by `interface` (optionally one event)."""
        if event is not None:
            interface.get_event(event)
        listener_id = next(self._ids)
        self._events[listener_id] = _EventListener(interface, callback, event)
        await self._open_for(self._events, listener_id)
        return listener_id

    async def unsubscribe(self, listener_id: int) -> None:
        if listener_id not in self._events:
            raise ListenerNotFoundError(listener_id, kind="event")
        del self._events[listener_id]
        await self._maybe_close()

    async def subscribe_logs(self, callback: LogCallback) -> int:
        """Register `callback` for the text of every `Program log:` line."""
        listener_id = next(self._ids)
        self._logs[listener_id] = callback
        await self._open_for(self._logs, listener_id)
        return listener_id

    async def unsubscribe_logs(self, listener_id: int) -> None:
        if listener_id not in self._logs:
            raise ListenerNotFoundError(listener_id, kind="log")
        del self._logs[listener_id]
        await self._maybe_close()

    async def close(self) -> None:
        """Drop every listener and the transport subscription."""
        self._events.clear()
        self._logs.clear()
        await self._maybe_close()
        for task in list(self._tasks):
            task.cancel()

    # --- transport subscription ---

    async def _open_for(self, registry: Dict[int, Any], listener_id: int) -> None:
        try:
            await self._ensure_open()
        except BaseException:
            # the id never reached the caller
            registry.pop(listener_id, None)
            raise

    async def _ensure_open(self) -> None:
        async with self._lock:
            if self._subscription_id is not None or not self.listener_count:
                return
            self._subscription_id = await self.subscriber.on_logs(self.program_id, self.handle_notification)
            log.debug("opened log subscription %s for %s", self._subscription_id, self.program_id)

    async def _maybe_close(self) -> None:
        async with self._lock:
            if self.listener_count or self._subscription_id is None:
                return
            sub_id, self._subscription_id = self._subscription_id, None
            await self.subscriber.remove_on_logs(sub_id)
            log.debug("closed log subscription %s", sub_id)

    # --- delivery ---

    def handle_notification(self, notification: LogNotification) -> None:
        if notification.err is not None:
            return
        for line in notification.logs:
            record = parse_log_topic(line)
            if record is not None:
                for lst in list(self._events.values()):
                    try:
                        decoded = lst.interface.parse_log(record)
                    except AbiError:
                        continue
                    if lst.wants(decoded):
                        self._invoke(lst.callback, decoded)
                continue
            text = parse_log_message(line)
            if text is not None:
                for cb in list(self._logs.values()):
                    self._invoke(cb, text)

    def _invoke(self, callback: Callable[[Any], Any], arg: Any) -> None:
        try:
            result = callback(arg)
        except Exception:
            log.exception("listener %r raised", callback)
            return
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._tasks.add(task)
            task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Future) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            log.error("async listener failed", exc_info=exc)


def decode_events(interface: ContractInterface, lines: Iterable[str]) -> List[DecodedEvent]:
    """Decode the events of one finished call; records of other contracts are skipped."""
    out: List[DecodedEvent] = []
    for line in lines:
        record = parse_log_topic(line)
        if record is None:
            continue
        try:
            out.append(interface.parse_log(record))
        except AbiError as e:
            log.debug("skipping undecodable event record: %s", e)
    return out
