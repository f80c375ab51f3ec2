"""
In-process publish/subscribe for chat messages and reservation changes.

Each subscriber owns an asyncio queue bound to the event loop it subscribed
from. Publishing may happen from any thread; delivery is handed to the
subscriber's loop, in publish order per channel.
"""

import asyncio
import logging
import threading
from typing import Any, Callable, Iterable, Optional

from fastapi import WebSocket, WebSocketDisconnect

logger = logging.getLogger(__name__)


class Subscription:
    def __init__(self, channels: Iterable[str]):
        self.channels = frozenset(channels)
        self.queue: asyncio.Queue = asyncio.Queue()
        self.loop = asyncio.get_running_loop()

    async def get(self) -> Any:
        return await self.queue.get()


class MessageBroker:
    """Channels are reservation ids (chat messages) or account channels (reservation changes)"""

    def __init__(self):
        self._channels: dict[str, set[Subscription]] = {}
        self._lock = threading.Lock()

    def subscribe(self, channels: Iterable[str]) -> Subscription:
        """Must be called from the event loop that will consume the queue"""
        subscription = Subscription(channels)
        with self._lock:
            for channel in subscription.channels:
                self._channels.setdefault(channel, set()).add(subscription)
        logger.debug(f"🔔 Subscribed to {len(subscription.channels)} channel(s)")
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        with self._lock:
            for channel in subscription.channels:
                subscribers = self._channels.get(channel)
                if not subscribers:
                    continue
                subscribers.discard(subscription)
                if not subscribers:
                    del self._channels[channel]
        logger.debug(f"🔕 Unsubscribed from {len(subscription.channels)} channel(s)")

    def set_channels(self, subscription: Subscription, channels: Iterable[str]) -> None:
        """Move a live subscription to a new channel set, keeping its queue"""
        channels = frozenset(channels)
        with self._lock:
            for channel in subscription.channels - channels:
                subscribers = self._channels.get(channel)
                if subscribers:
                    subscribers.discard(subscription)
                    if not subscribers:
                        del self._channels[channel]
            for channel in channels - subscription.channels:
                self._channels.setdefault(channel, set()).add(subscription)
            subscription.channels = channels
        logger.debug(f"🔁 Subscription moved to {len(channels)} channel(s)")

    def subscriber_count(self, channel: str) -> int:
        with self._lock:
            return len(self._channels.get(channel, ()))

    def publish(self, channel: str, payload: Any) -> int:
        """Deliver payload to every subscriber of channel; returns the number reached"""
        with self._lock:
            subscribers = list(self._channels.get(channel, ()))

        delivered = 0
        for subscription in subscribers:
            try:
                subscription.loop.call_soon_threadsafe(subscription.queue.put_nowait, payload)
                delivered += 1
            except RuntimeError:
                # Loop already closed; the connection is gone
                logger.warning(f"⚠️ Dropping stale subscriber on channel {channel}")
                self.unsubscribe(subscription)
        return delivered


broker = MessageBroker()


async def relay(websocket: WebSocket, subscription: Subscription, render: Callable[[Any], Optional[dict]]) -> None:
    """
    Forward published payloads to the socket until the client disconnects.
    ``render`` maps a payload to the JSON frame to send, or None to skip it.
    """

    async def forward():
        while True:
            frame = render(await subscription.get())
            if frame is not None:
                await websocket.send_json(frame)

    sender = asyncio.create_task(forward())
    try:
        while True:
            # Clients only send keepalives; reading is how a disconnect is noticed
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.debug("🔌 WebSocket client disconnected")
    finally:
        sender.cancel()
        try:
            await sender
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.error(f"❌ WebSocket relay stopped forwarding: {str(e)}")


def close_code_for(status_code: int) -> int:
    """WebSocket close code mirroring an HTTP error status (4401, 4403, 4404)"""
    return 4000 + status_code


def account_channel(account_id: str) -> str:
    """Channel carrying reservation changes that concern one account"""
    return f"account:{account_id}"


RESERVATIONS_CHANGED = "reservations_changed"
