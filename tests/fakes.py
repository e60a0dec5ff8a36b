"""Fakes shared by the lntop tests. Nothing here touches the network."""

from lntop.errors import DataSourceError
from lntop.services.lnd import ChannelsBalance, ChannelSummary, InfoSnapshot, Invoice, WalletBalance


def make_channel(n: int, status: str = ChannelSummary.ACTIVE, **kwargs) -> ChannelSummary:
    return ChannelSummary(
        channel_point=f"{n:064x}:0",
        remote_pubkey=f"02{n:064x}",
        status=status,
        capacity=kwargs.pop("capacity", 1_000_000),
        local_balance=kwargs.pop("local_balance", 400_000),
        remote_balance=kwargs.pop("remote_balance", 600_000),
        **kwargs,
    )


class FakeSource:
    """In-memory node. Calls are recorded; names in `fail` raise DataSourceError."""

    def __init__(self, channels=None, fail=()) -> None:
        self.calls: list[str] = []
        self.fail = set(fail)
        self.info = InfoSnapshot(alias="alice", block_height=800_000, num_peers=3)
        self.wallet = WalletBalance(total=150_000, confirmed=100_000, unconfirmed=50_000)
        self.balance = ChannelsBalance(balance=1_200_000, pending_open=0)
        self.channels = list(channels if channels is not None else [make_channel(i) for i in range(3)])
        self.invoices: list[Invoice] = []

    def _call(self, name, value):
        self.calls.append(name)
        if name in self.fail:
            raise DataSourceError(name, "connection refused")
        return value

    def get_info(self):
        return self._call("get_info", self.info)

    def get_wallet_balance(self):
        return self._call("get_wallet_balance", self.wallet)

    def get_channels_balance(self):
        return self._call("get_channels_balance", self.balance)

    def list_channels(self):
        return self._call("list_channels", list(self.channels))

    def list_invoices(self):
        return self._call("list_invoices", list(self.invoices))


class RecordingModels:
    """Stand-in for ModelStore that records refresh operations by name."""

    def __init__(self, fail=()) -> None:
        self.calls: list[str] = []
        self.fail = set(fail)
        self.channels = ()
        self.current_channel_index = None

    def _refresh(self, name):
        self.calls.append(name)
        if name in self.fail:
            raise DataSourceError(name, "timeout")

    def refresh_info(self):
        self._refresh("refresh_info")

    def refresh_wallet_balance(self):
        self._refresh("refresh_wallet_balance")

    def refresh_channels_balance(self):
        self._refresh("refresh_channels_balance")

    def refresh_channels(self):
        self._refresh("refresh_channels")

