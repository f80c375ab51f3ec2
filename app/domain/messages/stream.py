"""
Two-phase chat delivery.

A stream first emits the stored snapshot, then live appends. The live channel
is subscribed before the snapshot is read, so a message can arrive both ways;
every message id is emitted at most once.
"""

from typing import Any, Iterable, Optional


def _message_id(message: Any) -> str:
    if isinstance(message, dict):
        return message["id"]
    return message.id


class ChatStream:
    def __init__(self):
        self._seen: set[str] = set()

    def load_snapshot(self, messages: Iterable[Any]) -> list[Any]:
        """Phase 1: return the snapshot with duplicate ids removed"""
        return [message for message in messages if self._mark(message)]

    def accept(self, message: Any) -> Optional[Any]:
        """Phase 2: return the message if it has not been emitted yet, else None"""
        return message if self._mark(message) else None

    def _mark(self, message: Any) -> bool:
        message_id = _message_id(message)
        if message_id in self._seen:
            return False
        self._seen.add(message_id)
        return True