"""Named view regions and the registry that tracks which one has focus."""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable

from rich.text import Text

from lntop import __version__
from lntop.models import ModelSnapshot, ModelStore
from lntop.services.lnd import ChannelSummary

LIST = "channels"
DETAIL = "channel"
HELP = "help"

# Rows reserved above the list/detail body for the node summary.
SUMMARY_HEIGHT = 6
FOOTER_HEIGHT = 1


@dataclass(frozen=True)
class Region:
    x0: int
    y0: int
    x1: int
    y1: int

    @property
    def width(self) -> int:
        return max(0, self.x1 - self.x0 + 1)

    @property
    def height(self) -> int:
        return max(0, self.y1 - self.y0 + 1)


def _sats(value: int) -> str:
    return f"{value:,}"


def _short(value: str, length: int = 16) -> str:
    if len(value) <= length:
        return value
    return f"{value[: length - 1]}…"


def _gauge(channel: ChannelSummary, width: int = 10) -> str:
    if channel.capacity <= 0:
        return "[" + " " * width + "]"
    filled = round(width * channel.local_balance / channel.capacity)
    filled = min(width, max(0, filled))
    return "[" + "|" * filled + " " * (width - filled) + "]"


def render_summary(snapshot: ModelSnapshot) -> Text:
    info = snapshot.info
    wallet = snapshot.wallet_balance
    balance = snapshot.channels_balance
    text = Text()
    text.append(f"{info.alias or '-'}", style="bold cyan")
    text.append(f"  {info.version or '-'}  {info.chain or '-'}/{info.network or '-'}\n")
    text.append(f"height {info.block_height:,}  ")
    if info.synced_to_chain:
        text.append("synced", style="green")
    else:
        text.append("syncing", style="yellow")
    text.append(f"  peers {info.num_peers}\n")
    text.append(
        f"channels  active {info.num_active_channels}  inactive {info.num_inactive_channels}"
        f"  pending {info.num_pending_channels}\n"
    )
    text.append(
        f"wallet    total {_sats(wallet.total)}  confirmed {_sats(wallet.confirmed)}"
        f"  unconfirmed {_sats(wallet.unconfirmed)}\n"
    )
    text.append(
        f"in channels {_sats(balance.balance)}  pending open {_sats(balance.pending_open)}"
    )
    return text


class NamedView:
    """A view region. Cursor movements are no-ops unless a view overrides them."""

    name = ""

    def __init__(self) -> None:
        self.region: Region | None = None
        self.visible = False

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"

    def cursor_up(self) -> None:
        pass

    def cursor_down(self) -> None:
        pass

    def cursor_left(self) -> None:
        pass

    def cursor_right(self) -> None:
        pass

    def render(self, snapshot: ModelSnapshot) -> Text:
        return Text()


Column = tuple[str, int, Callable[[ChannelSummary], str]]


class ChannelsView(NamedView):
    name = LIST

    COLUMNS: list[Column] = [
        ("STATUS", 9, lambda c: c.status),
        ("GAUGE", 12, _gauge),
        ("LOCAL", 13, lambda c: _sats(c.local_balance)),
        ("REMOTE", 13, lambda c: _sats(c.remote_balance)),
        ("CAPACITY", 13, lambda c: _sats(c.capacity)),
        ("SENT", 12, lambda c: _sats(c.total_sent)),
        ("RECEIVED", 12, lambda c: _sats(c.total_received)),
        ("UNSETTLED", 10, lambda c: _sats(c.unsettled_balance)),
        ("UPDATES", 8, lambda c: str(c.num_updates)),
        ("PRIVATE", 8, lambda c: "yes" if c.private else "no"),
        ("PEER", 18, lambda c: _short(c.remote_pubkey)),
        ("CHANNEL POINT", 24, lambda c: _short(c.channel_point, 24)),
    ]

    def __init__(self, models: ModelStore) -> None:
        super().__init__()
        self.models = models
        self.cursor = 0
        self.origin = 0
        self.column_offset = 0

    @property
    def cursor_row(self) -> int:
        """Absolute index of the highlighted channel."""
        return self.origin + self.cursor

    @property
    def page_size(self) -> int:
        if self.region is None:
            return 1
        # One row for the column header.
        return max(1, self.region.height - 1)

    def clamp(self, count: int) -> None:
        """Pull the cursor back inside a list that shrank."""
        if count == 0:
            self.cursor = self.origin = 0
            return
        if self.cursor_row >= count:
            last = count - 1
            self.origin = max(0, last - self.page_size + 1)
            self.cursor = last - self.origin
        if self.cursor >= self.page_size:
            self.origin += self.cursor - self.page_size + 1
            self.cursor = self.page_size - 1

    def cursor_down(self) -> None:
        if self.cursor_row + 1 >= len(self.models.channels):
            return
        if self.cursor + 1 >= self.page_size:
            self.origin += 1
        else:
            self.cursor += 1

    def cursor_up(self) -> None:
        if self.cursor > 0:
            self.cursor -= 1
        elif self.origin > 0:
            self.origin -= 1

    def cursor_right(self) -> None:
        self.column_offset = min(self.column_offset + 1, len(self.COLUMNS) - 1)

    def cursor_left(self) -> None:
        self.column_offset = max(self.column_offset - 1, 0)

    def render(self, snapshot: ModelSnapshot) -> Text:
        self.clamp(len(snapshot.channels))
        columns = self.COLUMNS[self.column_offset :]
        text = Text()
        text.append(" ".join(title.ljust(width) for title, width, _ in columns), style="bold")
        if not snapshot.channels:
            text.append("\nNo channels.")
            return text
        rows = snapshot.channels[self.origin : self.origin + self.page_size]
        for offset, channel in enumerate(rows):
            line = " ".join(_short(get(channel), width).ljust(width) for _, width, get in columns)
            style = "reverse" if offset == self.cursor else ""
            if channel.status == ChannelSummary.INACTIVE and not style:
                style = "dim"
            text.append("\n")
            text.append(line, style=style)
        return text


class ChannelView(NamedView):
    name = DETAIL

    def render(self, snapshot: ModelSnapshot) -> Text:
        channel = snapshot.current_channel
        text = Text()
        if channel is None:
            text.append("No channel selected.")
            return text
        rows = [
            ("Status", channel.status),
            ("Channel point", channel.channel_point),
            ("Channel ID", channel.chan_id or "-"),
            ("Peer", channel.remote_pubkey or "-"),
            ("Capacity", _sats(channel.capacity)),
            ("Local balance", _sats(channel.local_balance)),
            ("Remote balance", _sats(channel.remote_balance)),
            ("Balance", _gauge(channel, 20)),
            ("Commit fee", _sats(channel.commit_fee)),
            ("Unsettled", _sats(channel.unsettled_balance)),
            ("Total sent", _sats(channel.total_sent)),
            ("Total received", _sats(channel.total_received)),
            ("Updates", str(channel.num_updates)),
            ("Private", "yes" if channel.private else "no"),
        ]
        text.append("Channel\n", style="bold cyan")
        for label, value in rows:
            text.append(f"{label:<16}", style="bold")
            text.append(f"{value}\n")
        text.append("\nenter: back", style="dim")
        return text


class HelpView(NamedView):
    name = HELP

    def __init__(self, keys: Iterable[tuple[str, str]] = ()) -> None:
        super().__init__()
        self.keys = list(keys)

    def render(self, snapshot: ModelSnapshot) -> Text:
        text = Text()
        text.append(f"lntop {__version__}\n\n", style="bold cyan")
        for keys, description in self.keys:
            text.append(f"{keys:<12}", style="bold")
            text.append(f"{description}\n")
        text.append("\nf1: close help", style="dim")
        return text


class Origin(Enum):
    NONE = "none"
    LIST = "list"
    OTHER = "other"


@dataclass(frozen=True)
class CameFrom:
    """Where the focused view was reached from.

    LIST marks the detail view's way back; OTHER marks the view under the
    help overlay and carries the value it displaced in `restore`.
    """

    origin: Origin = Origin.NONE
    view: NamedView | None = None
    restore: "CameFrom | None" = None

    @property
    def is_set(self) -> bool:
        return self.origin is not Origin.NONE

    @classmethod
    def list(cls, view: NamedView) -> "CameFrom":
        return cls(Origin.LIST, view)

    @classmethod
    def other(cls, view: NamedView, restore: "CameFrom") -> "CameFrom":
        return cls(Origin.OTHER, view, restore)


NOWHERE = CameFrom()


class Views:
    def __init__(self, models: ModelStore, help_keys: Iterable[tuple[str, str]] = ()) -> None:
        self.channels = ChannelsView(models)
        self.channel = ChannelView()
        self.help = HelpView(help_keys)
        self._by_name = {view.name: view for view in (self.channels, self.channel, self.help)}
        self.current: NamedView | None = None
        self.previous: CameFrom = NOWHERE
        self.width = 0
        self.height = 0

    def all(self) -> list[NamedView]:
        return list(self._by_name.values())

    def get(self, name: str) -> NamedView | None:
        return self._by_name.get(name)

    def activate(self, view: NamedView) -> None:
        view.visible = True
        self.current = view

    def deactivate(self, view: NamedView) -> None:
        view.visible = False
        if self.current is view:
            self.current = None

    def layout(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        # The key footer is docked below the body.
        bottom = height - 1 - FOOTER_HEIGHT
        body = Region(0, SUMMARY_HEIGHT, max(0, width - 1), max(SUMMARY_HEIGHT, bottom))
        self.channels.region = body
        self.channel.region = body
        self.help.region = Region(0, 0, max(0, width - 1), max(0, height - 1))
        if self.current is None and not any(view.visible for view in self.all()):
            self.activate(self.channels)
