"""Event-driven refresh dispatch and key routing for the dashboard."""

import logging
import queue
import threading
from collections.abc import Callable, Iterable

from lntop.errors import BindingSetupError, DataSourceError
from lntop.events import DomainEvent, EventKind
from lntop.models import ModelStore
from lntop.navigation import Navigator
from lntop.views import Views

logger = logging.getLogger(__name__)

_CHANNEL_REFRESH = ("refresh_info", "refresh_channels_balance", "refresh_channels")

# Order within each entry is the order the refreshes run in.
REFRESH_TABLE: dict[EventKind, tuple[str, ...]] = {
    EventKind.BLOCK_RECEIVED: ("refresh_info",),
    EventKind.CHANNEL_PENDING: _CHANNEL_REFRESH,
    EventKind.CHANNEL_ACTIVE: _CHANNEL_REFRESH,
    EventKind.CHANNEL_INACTIVE: _CHANNEL_REFRESH,
    EventKind.INVOICE_SETTLED: _CHANNEL_REFRESH,
    EventKind.PEER_UPDATED: ("refresh_info",),
}

# (keys, action, description). Actions resolve to `action_<name>` on the app.
KEY_BINDINGS: tuple[tuple[str, str, str], ...] = (
    ("ctrl+c", "quit", "Quit"),
    ("f10", "quit", "Quit"),
    ("up", "cursor_up", "Up"),
    ("down", "cursor_down", "Down"),
    ("left", "cursor_left", "Scroll left"),
    ("right", "cursor_right", "Scroll right"),
    ("enter", "enter", "Open / back"),
    ("f1", "toggle_help", "Help"),
)


def check_key_bindings(target: object, bindings: Iterable[tuple[str, str, str]] = KEY_BINDINGS) -> None:
    """Fail fast when a binding has no handler on the target."""
    for keys, action, _ in bindings:
        if not keys:
            raise BindingSetupError(f"empty key for action {action!r}")
        handler = getattr(target, f"action_{action}", None)
        if not callable(handler):
            raise BindingSetupError(f"no handler for {action!r} bound to {keys!r}")


class RedrawSignal:
    """Single-slot redraw request shared by the event loop and the renderer.

    request() never blocks: while a request is pending further requests
    coalesce into it. `on_pending` is called only when the slot goes from
    empty to pending.
    """

    def __init__(self, on_pending: Callable[[], None] | None = None) -> None:
        self._slot: queue.Queue[bool] = queue.Queue(maxsize=1)
        self._lock = threading.Lock()
        self.on_pending = on_pending
        self.requests = 0

    @property
    def pending(self) -> bool:
        return not self._slot.empty()

    def request(self) -> None:
        with self._lock:
            self.requests += 1
        try:
            self._slot.put_nowait(True)
        except queue.Full:
            return
        if self.on_pending is not None:
            self.on_pending()

    def consume(self) -> bool:
        try:
            self._slot.get_nowait()
        except queue.Empty:
            return False
        return True


class Controller:
    def __init__(self, models: ModelStore, redraw: RedrawSignal | None = None) -> None:
        self.models = models
        self.views = Views(models, help_keys=[(keys, desc) for keys, _, desc in KEY_BINDINGS])
        self.navigator = Navigator(self.views, models)
        self.redraw = redraw or RedrawSignal()

    def layout(self, width: int, height: int) -> None:
        self.views.layout(width, height)

    def cursor_up(self) -> None:
        if self.views.current is not None:
            self.views.current.cursor_up()

    def cursor_down(self) -> None:
        if self.views.current is not None:
            self.views.current.cursor_down()

    def cursor_left(self) -> None:
        if self.views.current is not None:
            self.views.current.cursor_left()

    def cursor_right(self) -> None:
        if self.views.current is not None:
            self.views.current.cursor_right()

    def on_enter(self) -> None:
        self.navigator.on_enter()

    def help(self) -> None:
        self.navigator.help()
        if self.views.current is None:
            base = self.views.channel if self.views.channel.visible else self.views.channels
            self.views.activate(base)

    def handle(self, event: DomainEvent) -> list[str]:
        """Run the refreshes mapped to the event and request one redraw.

        Every refresh is attempted; failures are logged and returned by name.
        """
        operations = REFRESH_TABLE.get(event.kind)
        if operations is None:
            logger.warning("no refresh mapped for event %r", event.kind)
            return []

        failed = []
        for name in operations:
            try:
                getattr(self.models, name)()
            except DataSourceError as e:
                failed.append(name)
                logger.error("%s failed on %s: %s", name, event.kind.value, e.cause)
        self.redraw.request()
        return failed

    def listen(self, feed: Iterable[DomainEvent]) -> None:
        logger.debug("listening...")
        for event in feed:
            logger.debug("event received: %s", event.kind.value)
            self.handle(event)
        logger.debug("event feed closed")
