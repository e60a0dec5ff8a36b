import logging
import threading
from typing import Callable, Protocol, TypeVar

from lntop.errors import DataSourceError
from lntop.events import DomainEvent, EventFeed, EventKind
from lntop.services.lnd import ChannelSummary, InfoSnapshot, Invoice

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Sequential REST calls made by one poll.
POLL_CALLS = 3

_CHANNEL_EVENTS = {
    ChannelSummary.OPENING: EventKind.CHANNEL_PENDING,
    ChannelSummary.ACTIVE: EventKind.CHANNEL_ACTIVE,
    ChannelSummary.INACTIVE: EventKind.CHANNEL_INACTIVE,
}


class NodeSource(Protocol):
    def get_info(self) -> InfoSnapshot: ...

    def list_channels(self) -> list[ChannelSummary]: ...

    def list_invoices(self) -> list[Invoice]: ...


class PubSub:
    """Poll the node and publish a DomainEvent for every observed change.

    The first poll records a baseline and publishes nothing.
    """

    def __init__(
        self,
        source: NodeSource,
        feed: EventFeed,
        interval: float = 3.0,
        call_timeout: float = 5.0,
    ) -> None:
        self.source = source
        self.feed = feed
        self.interval = interval
        self.call_timeout = call_timeout
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._block_height: int | None = None
        self._num_peers: int | None = None
        self._channels: dict[str, str] | None = None
        self._settle_index: int | None = None

    @property
    def join_timeout(self) -> float:
        """Upper bound on how long an in-flight poll can take to finish."""
        return POLL_CALLS * self.call_timeout + 1

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(target=self.run, name="pubsub", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        self._stop.set()
        self.feed.close()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout=self.join_timeout)
            if self._thread.is_alive():
                logger.warning("poll thread still running after %.1fs", self.join_timeout)

    def run(self) -> None:
        logger.debug("polling every %.1fs", self.interval)
        while not self._stop.is_set():
            self.poll()
            self._stop.wait(self.interval)

    def _call(self, name: str, call: Callable[[], T]) -> T | None:
        try:
            return call()
        except DataSourceError as e:
            logger.warning("poll %s failed: %s", name, e.cause)
            return None

    def poll(self) -> list[DomainEvent]:
        events: list[DomainEvent] = []
        info = self._call("get_info", self.source.get_info)
        if info is not None:
            events.extend(self._diff_info(info))
        channels = self._call("list_channels", self.source.list_channels)
        if channels is not None:
            events.extend(self._diff_channels(channels))
        invoices = self._call("list_invoices", self.source.list_invoices)
        if invoices is not None:
            events.extend(self._diff_invoices(invoices))

        for event in events:
            logger.debug("publish %s %s", event.kind.value, event.payload)
            self.feed.publish(event)
        return events

    def _diff_info(self, info: InfoSnapshot) -> list[DomainEvent]:
        events = []
        if self._block_height is not None and info.block_height != self._block_height:
            events.append(DomainEvent(EventKind.BLOCK_RECEIVED, info.block_height))
        if self._num_peers is not None and info.num_peers != self._num_peers:
            events.append(DomainEvent(EventKind.PEER_UPDATED, info.num_peers))
        self._block_height = info.block_height
        self._num_peers = info.num_peers
        return events

    def _diff_channels(self, channels: list[ChannelSummary]) -> list[DomainEvent]:
        current = {channel.channel_point: channel.status for channel in channels}
        previous = self._channels
        self._channels = current
        if previous is None:
            return []

        events = []
        for point, status in current.items():
            if previous.get(point) != status:
                events.append(DomainEvent(_CHANNEL_EVENTS[status], point))
        for point in previous:
            if point not in current:
                # Closed channels disappear from the list.
                events.append(DomainEvent(EventKind.CHANNEL_INACTIVE, point))
        return events

    def _diff_invoices(self, invoices: list[Invoice]) -> list[DomainEvent]:
        settled = sorted(
            (invoice for invoice in invoices if invoice.settled and invoice.settle_index),
            key=lambda invoice: invoice.settle_index,
        )
        latest = settled[-1].settle_index if settled else 0
        last_seen = self._settle_index
        self._settle_index = max(latest, last_seen or 0)
        if last_seen is None:
            return []
        return [
            DomainEvent(EventKind.INVOICE_SETTLED, invoice.r_hash)
            for invoice in settled
            if invoice.settle_index > last_seen
        ]
