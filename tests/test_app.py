"""Key handling and redraws through the Textual app, using the in-process pilot."""

import asyncio

from lntop.app import LntopApp
from lntop.controller import Controller
from lntop.events import DomainEvent, EventFeed, EventKind
from lntop.models import ModelStore
from lntop.views import DETAIL, HELP, LIST
from tests.fakes import FakeSource, make_channel


def _app(source):
    models = ModelStore(source)
    models.bootstrap()
    source.calls.clear()
    feed = EventFeed()
    return LntopApp(Controller(models), feed), feed


async def test_enter_help_and_back():
    app, _ = _app(FakeSource())
    async with app.run_test(size=(160, 40)) as pilot:
        await pilot.pause()
        views = app.controller.views
        assert views.current.name == LIST
        assert app.panels[LIST].display
        assert not app.panels[HELP].display

        await pilot.press("down", "enter")
        await pilot.pause()
        assert views.current.name == DETAIL
        assert app.controller.models.current_channel_index == 1
        assert app.panels[DETAIL].display
        assert not app.panels[LIST].display

        await pilot.press("f1")
        await pilot.pause()
        assert views.current.name == HELP
        assert app.panels[HELP].display

        await pilot.press("f1")
        await pilot.pause()
        assert views.current.name == DETAIL

        await pilot.press("enter")
        await pilot.pause()
        assert views.current.name == LIST


async def test_enter_on_empty_list_stays_put():
    app, _ = _app(FakeSource(channels=[]))
    async with app.run_test(size=(160, 40)) as pilot:
        await pilot.press("enter")
        await pilot.pause()
        assert app.controller.views.current.name == LIST
        assert app.is_running


async def test_event_triggers_refresh_and_redraw():
    source = FakeSource()
    app, feed = _app(source)
    async with app.run_test(size=(160, 40)) as pilot:
        await pilot.pause()
        source.fail = {"list_channels"}
        feed.publish(DomainEvent(EventKind.CHANNEL_ACTIVE))
        redraw = app.controller.redraw
        for _ in range(100):
            if redraw.requests and not redraw.pending:
                break
            await asyncio.sleep(0.02)
            await pilot.pause()
        assert source.calls == ["get_info", "get_channels_balance", "list_channels"]
        assert app.controller.redraw.requests == 1
        assert not app.controller.redraw.pending
        assert len(app.controller.models.channels) == 3


async def test_quit_closes_feed():
    app, feed = _app(FakeSource())
    async with app.run_test(size=(160, 40)) as pilot:
        await pilot.press("f10")
    assert feed.closed


async def test_scrolled_cursor_row_stays_inside_list_panel():
    app, _ = _app(FakeSource(channels=[make_channel(i) for i in range(30)]))
    async with app.run_test(size=(160, 20)) as pilot:
        await pilot.pause()
        await pilot.press(*["down"] * 40)
        await pilot.pause()
        channels = app.controller.views.channels
        panel_rows = app.panels[LIST].content_region.height
        assert channels.origin > 0
        # Header row plus the highlighted row must both be drawn.
        assert channels.cursor + 1 < panel_rows
        assert channels.page_size + 1 <= panel_rows
