"""Industrial IoT Monitor — Subscriber Registry.

The set of push-channel connections currently eligible for broadcasts.
Membership changes only through connection lifecycle events; delivery
always works from a snapshot taken at send time, so a connection that
joins or leaves mid-broadcast never disturbs the iteration.

The registry is confined to the event loop thread: add/discard are plain
synchronous calls and never interleave with a snapshot.
"""

from __future__ import annotations

import asyncio
from typing import Protocol

from starlette.websockets import WebSocketState

from logger import get_logger

logger = get_logger(__name__)

DEFAULT_SEND_TIMEOUT_SECONDS = 1.0


class Subscriber(Protocol):
    """The part of a WebSocket the registry relies on."""

    client_state: WebSocketState
    application_state: WebSocketState

    async def send_text(self, data: str) -> None: ...


def is_open(subscriber: Subscriber) -> bool:
    """True only while both ends of the connection are connected."""
    return (
        subscriber.client_state == WebSocketState.CONNECTED
        and subscriber.application_state == WebSocketState.CONNECTED
    )


class SubscriberRegistry:
    """Identity-keyed set of connected subscribers with best-effort fan-out."""

    def __init__(self, send_timeout: float = DEFAULT_SEND_TIMEOUT_SECONDS) -> None:
        if send_timeout <= 0:
            raise ValueError(f"send_timeout must be positive, got {send_timeout}")
        self.send_timeout = send_timeout
        self._subscribers: set[Subscriber] = set()
        self.logger = logger.bind(service="SubscriberRegistry")

    def __len__(self) -> int:
        return len(self._subscribers)

    def __contains__(self, subscriber: object) -> bool:
        return subscriber in self._subscribers

    def add(self, subscriber: Subscriber) -> None:
        self._subscribers.add(subscriber)
        self.logger.info("Subscriber connected", subscribers=len(self._subscribers))

    def discard(self, subscriber: Subscriber) -> None:
        """Remove a subscriber; removing one that is absent is a no-op."""
        if subscriber in self._subscribers:
            self._subscribers.discard(subscriber)
            self.logger.info("Subscriber disconnected", subscribers=len(self._subscribers))

    def snapshot(self) -> tuple[Subscriber, ...]:
        """Members at this instant, decoupled from later membership changes."""
        return tuple(self._subscribers)

    async def _deliver(self, subscriber: Subscriber, message: str) -> bool:
        try:
            await asyncio.wait_for(subscriber.send_text(message), timeout=self.send_timeout)
        except asyncio.TimeoutError:
            self.logger.warning(
                "Subscriber stalled, dropping",
                timeout_seconds=self.send_timeout,
            )
            self.discard(subscriber)
            return False
        except Exception as exc:
            self.logger.debug(
                "Delivery skipped",
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return False
        return True

    async def broadcast(self, message: str) -> int:
        """Send ``message`` to every subscriber that is open right now.

        Sends run concurrently and each is bounded by ``send_timeout``, so
        one slow peer delays a broadcast by at most that long. Subscribers
        that are connecting, closing or closed are skipped, a send that
        fails is logged and skipped, and a send that times out drops the
        subscriber from the registry. There is no queueing and no retry.

        Returns:
            Number of subscribers the message was handed to.
        """
        targets = [subscriber for subscriber in self.snapshot() if is_open(subscriber)]
        if not targets:
            return 0
        results = await asyncio.gather(*(self._deliver(s, message) for s in targets))
        return sum(results)
