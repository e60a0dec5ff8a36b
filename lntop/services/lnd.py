from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, TypeVar

import requests

from lntop.config import Config
from lntop.errors import ConfigError, DataSourceError

T = TypeVar("T")

MACAROON_HEADER = "Grpc-Metadata-macaroon"


def _int(value: Any, default: int = 0) -> int:
    # LND's REST gateway encodes int64 fields as strings.
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class InfoSnapshot:
    pubkey: str = ""
    alias: str = ""
    version: str = ""
    chain: str = ""
    network: str = ""
    block_height: int = 0
    block_hash: str = ""
    synced_to_chain: bool = False
    synced_to_graph: bool = False
    num_peers: int = 0
    num_active_channels: int = 0
    num_inactive_channels: int = 0
    num_pending_channels: int = 0

    @classmethod
    def from_json(cls, data: dict) -> "InfoSnapshot":
        chains = data.get("chains") or [{}]
        first = chains[0] if isinstance(chains[0], dict) else {}
        return cls(
            pubkey=str(data.get("identity_pubkey", "")),
            alias=str(data.get("alias", "")),
            version=str(data.get("version", "")),
            chain=str(first.get("chain", "")),
            network=str(first.get("network", "")),
            block_height=_int(data.get("block_height")),
            block_hash=str(data.get("block_hash", "")),
            synced_to_chain=bool(data.get("synced_to_chain", False)),
            synced_to_graph=bool(data.get("synced_to_graph", False)),
            num_peers=_int(data.get("num_peers")),
            num_active_channels=_int(data.get("num_active_channels")),
            num_inactive_channels=_int(data.get("num_inactive_channels")),
            num_pending_channels=_int(data.get("num_pending_channels")),
        )


@dataclass(frozen=True)
class WalletBalance:
    total: int = 0
    confirmed: int = 0
    unconfirmed: int = 0

    @classmethod
    def from_json(cls, data: dict) -> "WalletBalance":
        return cls(
            total=_int(data.get("total_balance")),
            confirmed=_int(data.get("confirmed_balance")),
            unconfirmed=_int(data.get("unconfirmed_balance")),
        )


@dataclass(frozen=True)
class ChannelsBalance:
    balance: int = 0
    pending_open: int = 0

    @classmethod
    def from_json(cls, data: dict) -> "ChannelsBalance":
        local = data.get("local_balance")
        balance = _int(data.get("balance"))
        if not balance and isinstance(local, dict):
            balance = _int(local.get("sat"))
        return cls(balance=balance, pending_open=_int(data.get("pending_open_balance")))


@dataclass(frozen=True)
class ChannelSummary:
    channel_point: str
    remote_pubkey: str
    status: str
    capacity: int = 0
    local_balance: int = 0
    remote_balance: int = 0
    commit_fee: int = 0
    unsettled_balance: int = 0
    total_sent: int = 0
    total_received: int = 0
    num_updates: int = 0
    chan_id: str = ""
    private: bool = False

    ACTIVE = "active"
    INACTIVE = "inactive"
    OPENING = "opening"

    @classmethod
    def from_json(cls, data: dict) -> "ChannelSummary":
        return cls(
            channel_point=str(data["channel_point"]),
            remote_pubkey=str(data.get("remote_pubkey", "")),
            status=cls.ACTIVE if data.get("active") else cls.INACTIVE,
            capacity=_int(data.get("capacity")),
            local_balance=_int(data.get("local_balance")),
            remote_balance=_int(data.get("remote_balance")),
            commit_fee=_int(data.get("commit_fee")),
            unsettled_balance=_int(data.get("unsettled_balance")),
            total_sent=_int(data.get("total_satoshis_sent")),
            total_received=_int(data.get("total_satoshis_received")),
            num_updates=_int(data.get("num_updates")),
            chan_id=str(data.get("chan_id", "")),
            private=bool(data.get("private", False)),
        )

    @classmethod
    def from_pending_json(cls, data: dict) -> "ChannelSummary":
        channel = data["channel"]
        return cls(
            channel_point=str(channel["channel_point"]),
            remote_pubkey=str(channel.get("remote_node_pub", "")),
            status=cls.OPENING,
            capacity=_int(channel.get("capacity")),
            local_balance=_int(channel.get("local_balance")),
            remote_balance=_int(channel.get("remote_balance")),
            commit_fee=_int(data.get("commit_fee")),
        )


@dataclass(frozen=True)
class Invoice:
    r_hash: str
    memo: str = ""
    value: int = 0
    amount_paid: int = 0
    settled: bool = False
    settle_index: int = 0

    @classmethod
    def from_json(cls, data: dict) -> "Invoice":
        return cls(
            r_hash=str(data.get("r_hash", "")),
            memo=str(data.get("memo", "")),
            value=_int(data.get("value")),
            amount_paid=_int(data.get("amt_paid_sat")),
            settled=data.get("state") == "SETTLED" or bool(data.get("settled", False)),
            settle_index=_int(data.get("settle_index")),
        )


class LndClient:
    """Blocking client for the LND REST gateway."""

    def __init__(
        self,
        rest_url: str,
        macaroon: bytes | None = None,
        tls_cert: str | None = None,
        timeout: float = 5.0,
        session: requests.Session | None = None,
    ) -> None:
        self.rest_url = rest_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.verify = tls_cert if tls_cert else True
        if macaroon:
            self.session.headers[MACAROON_HEADER] = macaroon.hex()

    @classmethod
    def from_config(cls, config: Config) -> "LndClient":
        macaroon = None
        if config.macaroon:
            try:
                macaroon = Path(config.macaroon).expanduser().read_bytes()
            except OSError as e:
                raise ConfigError(f"cannot read macaroon {config.macaroon}: {e}") from e
        tls_cert = None
        if config.tls_cert:
            tls_cert = str(Path(config.tls_cert).expanduser())
            if not Path(tls_cert).is_file():
                raise ConfigError(f"tls certificate not found: {config.tls_cert}")
        return cls(config.rest_url, macaroon=macaroon, tls_cert=tls_cert, timeout=config.timeout)

    def _get(self, operation: str, path: str, params: dict | None = None) -> dict:
        try:
            response = self.session.get(
                f"{self.rest_url}{path}", params=params, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise DataSourceError(operation, e) from e
        try:
            data = response.json()
        except ValueError as e:
            if not response.ok:
                raise DataSourceError(operation, f"HTTP {response.status_code}") from e
            raise DataSourceError(operation, f"invalid JSON: {e}") from e
        if not isinstance(data, dict):
            raise DataSourceError(operation, "unexpected response shape")
        if not response.ok or data.get("error"):
            message = data.get("message") or data.get("error") or f"HTTP {response.status_code}"
            raise DataSourceError(operation, message)
        return data

    @staticmethod
    def _parse(operation: str, parser: Callable[[], T]) -> T:
        try:
            return parser()
        except (KeyError, TypeError, IndexError, AttributeError) as e:
            raise DataSourceError(operation, f"malformed response: {e!r}") from e

    def get_info(self) -> InfoSnapshot:
        data = self._get("get_info", "/v1/getinfo")
        return self._parse("get_info", lambda: InfoSnapshot.from_json(data))

    def get_wallet_balance(self) -> WalletBalance:
        data = self._get("get_wallet_balance", "/v1/balance/blockchain")
        return self._parse("get_wallet_balance", lambda: WalletBalance.from_json(data))

    def get_channels_balance(self) -> ChannelsBalance:
        data = self._get("get_channels_balance", "/v1/balance/channels")
        return self._parse("get_channels_balance", lambda: ChannelsBalance.from_json(data))

    def list_channels(self) -> list[ChannelSummary]:
        opened = self._get("list_channels", "/v1/channels")
        pending = self._get("list_channels", "/v1/channels/pending")

        def parse() -> list[ChannelSummary]:
            channels = [ChannelSummary.from_json(c) for c in opened.get("channels") or []]
            channels.extend(
                ChannelSummary.from_pending_json(c)
                for c in pending.get("pending_open_channels") or []
            )
            return channels

        return self._parse("list_channels", parse)

    def list_invoices(self, max_invoices: int = 100) -> list[Invoice]:
        data = self._get(
            "list_invoices",
            "/v1/invoices",
            params={"num_max_invoices": max_invoices, "reversed": "true"},
        )
        return self._parse(
            "list_invoices",
            lambda: [Invoice.from_json(i) for i in data.get("invoices") or []],
        )
