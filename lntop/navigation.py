"""Focus transitions between the channel list, channel detail and help overlay."""

import logging

from lntop.models import ModelStore
from lntop.views import NOWHERE, CameFrom, Views

logger = logging.getLogger(__name__)


class Navigator:
    def __init__(self, views: Views, models: ModelStore) -> None:
        self.views = views
        self.models = models

    def on_enter(self) -> None:
        """Open the highlighted channel from the list, or go back from the detail.

        Raises IndexOutOfRange when the highlighted row is not a loaded
        channel; focus does not change in that case.
        """
        views = self.views
        view = views.current
        if view is views.channels:
            row = views.channels.cursor_row
            self.models.set_current_channel(row)
            views.previous = CameFrom.list(view)
            views.deactivate(view)
            views.activate(views.channel)
            logger.debug("enter: channels -> channel (row %d)", row)
        elif view is views.channel:
            views.deactivate(view)
            previous = views.previous
            views.previous = NOWHERE
            if previous.is_set and previous.view is not None:
                views.activate(previous.view)
            else:
                # Back-navigation was lost; the list is the base view.
                views.activate(views.channels)
            logger.debug("enter: channel -> %s", views.current.name)

    def help(self) -> None:
        views = self.views
        view = views.current
        if view is None:
            return

        if view is not views.help:
            views.previous = CameFrom.other(view, restore=views.previous)
            views.activate(views.help)
            logger.debug("help: shown over %s", view.name)
            return

        views.deactivate(views.help)
        previous = views.previous
        if previous.is_set and previous.view is not None:
            views.activate(previous.view)
            views.previous = previous.restore or NOWHERE
            logger.debug("help: dismissed, back to %s", previous.view.name)
        else:
            views.previous = NOWHERE
            logger.debug("help: dismissed with nothing to return to")
