"""In-memory snapshot of node state, refreshed from the data source.

Only the dispatcher thread writes to a ModelStore. Each refresh builds its new
value completely before a single attribute assignment publishes it, so the
render loop reading concurrently sees either the old or the new value.
"""

import logging
from dataclasses import dataclass
from typing import Protocol

from lntop.errors import DataSourceError, IndexOutOfRange
from lntop.services.lnd import ChannelsBalance, ChannelSummary, InfoSnapshot, WalletBalance

logger = logging.getLogger(__name__)

BOOTSTRAP_SEQUENCE = (
    "refresh_info",
    "refresh_wallet_balance",
    "refresh_channels_balance",
    "refresh_channels",
)


class DataSource(Protocol):
    def get_info(self) -> InfoSnapshot: ...

    def get_wallet_balance(self) -> WalletBalance: ...

    def get_channels_balance(self) -> ChannelsBalance: ...

    def list_channels(self) -> list[ChannelSummary]: ...


@dataclass(frozen=True)
class ModelSnapshot:
    info: InfoSnapshot
    wallet_balance: WalletBalance
    channels_balance: ChannelsBalance
    channels: tuple[ChannelSummary, ...]
    current_channel_index: int | None
    current_channel_point: str | None = None

    @property
    def current_channel(self) -> ChannelSummary | None:
        """The selected channel, followed by channel point if the list reordered."""
        if self.current_channel_index is None:
            return None
        if self.current_channel_index < len(self.channels):
            channel = self.channels[self.current_channel_index]
            if channel.channel_point == self.current_channel_point:
                return channel
        for channel in self.channels:
            if channel.channel_point == self.current_channel_point:
                return channel
        return None


class ModelStore:
    def __init__(self, source: DataSource) -> None:
        self.source = source
        self.info = InfoSnapshot()
        self.wallet_balance = WalletBalance()
        self.channels_balance = ChannelsBalance()
        self.channels: tuple[ChannelSummary, ...] = ()
        # (index, channel_point), replaced as one value.
        self._selection: tuple[int, str] | None = None

    @property
    def current_channel_index(self) -> int | None:
        return None if self._selection is None else self._selection[0]

    def _fetch(self, operation: str, call):
        try:
            return call()
        except DataSourceError:
            raise
        except Exception as e:
            raise DataSourceError(operation, e) from e

    def refresh_info(self) -> None:
        self.info = self._fetch("refresh_info", self.source.get_info)

    def refresh_wallet_balance(self) -> None:
        self.wallet_balance = self._fetch("refresh_wallet_balance", self.source.get_wallet_balance)

    def refresh_channels_balance(self) -> None:
        self.channels_balance = self._fetch(
            "refresh_channels_balance", self.source.get_channels_balance
        )

    def refresh_channels(self) -> None:
        self.channels = tuple(self._fetch("refresh_channels", self.source.list_channels))

    def set_current_channel(self, index: int) -> None:
        channels = self.channels
        if not 0 <= index < len(channels):
            raise IndexOutOfRange(index, len(channels))
        self._selection = (index, channels[index].channel_point)

    def current_channel(self) -> ChannelSummary | None:
        return self.snapshot().current_channel

    def snapshot(self) -> ModelSnapshot:
        index, point = self._selection or (None, None)
        return ModelSnapshot(
            info=self.info,
            wallet_balance=self.wallet_balance,
            channels_balance=self.channels_balance,
            channels=self.channels,
            current_channel_index=index,
            current_channel_point=point,
        )

    def bootstrap(self) -> None:
        """Refresh every facet in order, stopping at the first failure."""
        for name in BOOTSTRAP_SEQUENCE:
            logger.debug("bootstrap: %s", name)
            getattr(self, name)()
