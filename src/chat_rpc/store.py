"""In-memory, append-only chat message store (thread-safe)."""
from __future__ import annotations

import threading
import uuid
from typing import Iterable, Iterator, List, Tuple

from .models import ChatMessage

# Messages the stock server starts with.
DEFAULT_SEED: Tuple[Tuple[str, str], ...] = (
    ("User1", "This is my the first message!"),
    ("User2", "Alright alright alright"),
)


def _new_id() -> str:
    return str(uuid.uuid4())


class MessageStore:
    """Ordered sequence of :class:`ChatMessage`, oldest first.

    The store owns the underlying list. Entries are immutable and are only
    created through :meth:`append`; callers always receive a fresh list, never
    the internal one.

    Parameters
    ----------
    initial : Iterable[tuple[str, str]]
        Optional ``(user, message)`` pairs appended in order at construction.
    """

    def __init__(self, initial: Iterable[Tuple[str, str]] = ()) -> None:
        self._messages: List[ChatMessage] = []
        self._lock = threading.RLock()
        for user, message in initial:
            self.append(user, message)

    # --------- core API ----------
    def append(self, user: str, message: str) -> ChatMessage:
        """Create a message with a fresh id, append it and return it."""
        entry = ChatMessage(id=_new_id(), user=user, message=message)
        with self._lock:
            self._messages.append(entry)
        return entry

    def tail(self, n: int) -> List[ChatMessage]:
        """Return the last ``n`` messages in insertion order.

        ``n`` larger than the store returns everything; ``n <= 0`` returns an
        empty list.
        """
        if n <= 0:
            return []
        with self._lock:
            return self._messages[-n:]

    # --------- convenience ----------
    def __len__(self) -> int:
        with self._lock:
            return len(self._messages)

    def __iter__(self) -> Iterator[ChatMessage]:
        with self._lock:
            snapshot = list(self._messages)
        return iter(snapshot)

    def __repr__(self) -> str:
        return f"MessageStore(size={len(self)})"
