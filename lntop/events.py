"""Domain events emitted by the node and the feed that carries them."""

import logging
import threading
from collections import deque
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)

# Events published before the dispatcher starts (bootstrap) wait here.
DEFAULT_BUFFER = 1024


class EventKind(Enum):
    BLOCK_RECEIVED = "block.received"
    CHANNEL_PENDING = "channel.pending"
    CHANNEL_ACTIVE = "channel.active"
    CHANNEL_INACTIVE = "channel.inactive"
    INVOICE_SETTLED = "invoice.settled"
    PEER_UPDATED = "peer.updated"


@dataclass(frozen=True)
class DomainEvent:
    kind: EventKind
    payload: Any = None


class EventFeed:
    """Ordered, bounded, closable stream of domain events.

    Producers call publish() from any thread and never block. A single
    consumer iterates the feed; iteration ends once the feed is closed and
    every buffered event has been handed out.
    """

    def __init__(self, maxsize: int = DEFAULT_BUFFER) -> None:
        self._items: deque[DomainEvent] = deque()
        self._maxsize = maxsize
        self._cond = threading.Condition()
        self._closed = False
        self.dropped = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        with self._cond:
            return len(self._items)

    def publish(self, event: DomainEvent) -> bool:
        with self._cond:
            if self._closed:
                logger.debug("feed closed, ignoring %s", event.kind.value)
                return False
            if len(self._items) >= self._maxsize:
                self.dropped += 1
                logger.warning(
                    "event buffer full (%d), dropping %s", self._maxsize, event.kind.value
                )
                return False
            self._items.append(event)
            self._cond.notify()
            return True

    def close(self) -> None:
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def __iter__(self) -> Iterator[DomainEvent]:
        while True:
            with self._cond:
                while not self._items and not self._closed:
                    self._cond.wait()
                if not self._items:
                    return
                event = self._items.popleft()
            yield event
