import threading

from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.message import Message
from textual.widgets import Footer, Static

from lntop.controller import KEY_BINDINGS, Controller, check_key_bindings
from lntop.errors import IndexOutOfRange
from lntop.events import EventFeed
from lntop.views import DETAIL, HELP, LIST, render_summary


class Redraw(Message):
    """Posted from the dispatcher thread when a redraw becomes pending."""


class ViewPanel(Static):
    def __init__(self, view_name: str, **kwargs: object) -> None:
        super().__init__("... loading", id=view_name, **kwargs)
        self.view_name = view_name


class LntopApp(App):
    TITLE = "lntop"

    BINDINGS = [
        Binding(keys, action, description, priority=True, show=action in ("quit", "toggle_help"))
        for keys, action, description in KEY_BINDINGS
    ]

    CSS = """
    Screen {
        layers: base overlay;
    }
    #summary {
        height: 6;
        padding: 0 1;
        color: #e6f4ff;
    }
    #body {
        height: 1fr;
    }
    #channels, #channel {
        height: 1fr;
        padding: 0 1;
    }
    #help {
        layer: overlay;
        width: 100%;
        height: 100%;
        padding: 1 2;
        border: round #666;
        background: $surface;
    }
    """

    def __init__(self, controller: Controller, feed: EventFeed) -> None:
        super().__init__()
        check_key_bindings(self)
        self.controller = controller
        self.feed = feed
        self.summary_panel = Static("... loading", id="summary")
        self.panels = {name: ViewPanel(name) for name in (LIST, DETAIL, HELP)}
        controller.redraw.on_pending = self._post_redraw

    def _post_redraw(self) -> None:
        # Runs on the dispatcher thread; post_message is thread-safe.
        self.post_message(Redraw())

    def compose(self) -> ComposeResult:
        yield self.summary_panel
        with Container(id="body"):
            yield self.panels[LIST]
            yield self.panels[DETAIL]
        yield self.panels[HELP]
        yield Footer()

    def on_mount(self) -> None:
        self.controller.layout(self.size.width, self.size.height)
        self.repaint()
        self._dispatcher = threading.Thread(
            target=self.controller.listen, args=(self.feed,), name="dispatcher", daemon=True
        )
        self._dispatcher.start()

    def on_unmount(self) -> None:
        self.feed.close()

    def on_resize(self, event: events.Resize) -> None:
        self.controller.layout(event.size.width, event.size.height)
        self.repaint()

    def on_redraw(self, message: Redraw) -> None:
        self.controller.redraw.consume()
        self.repaint()

    def repaint(self) -> None:
        snapshot = self.controller.models.snapshot()
        self.summary_panel.update(render_summary(snapshot))
        for view in self.controller.views.all():
            panel = self.panels[view.name]
            panel.display = view.visible
            if view.visible:
                panel.update(view.render(snapshot))

    async def action_quit(self) -> None:
        self.feed.close()
        self.exit()

    def action_cursor_up(self) -> None:
        self.controller.cursor_up()
        self.repaint()

    def action_cursor_down(self) -> None:
        self.controller.cursor_down()
        self.repaint()

    def action_cursor_left(self) -> None:
        self.controller.cursor_left()
        self.repaint()

    def action_cursor_right(self) -> None:
        self.controller.cursor_right()
        self.repaint()

    def action_enter(self) -> None:
        try:
            self.controller.on_enter()
        except IndexOutOfRange as e:
            self.notify(str(e), severity="warning", timeout=3)
        self.repaint()

    def action_toggle_help(self) -> None:
        self.controller.help()
        self.repaint()
