"""
Global page-loading overlay.

The overlay flag lives on an explicit ``LoadingContext`` owned by one UI
session. It changes only through ``show_loader()`` and ``hide_loader()``, and
both take effect on the next frame of the context's ``FrameScheduler``. In the
Streamlit app one script rerun is one frame.
"""

from __future__ import annotations

import itertools
import logging
from collections import OrderedDict
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class FrameScheduler:
    """Queue of callbacks to run on the next frame."""

    def __init__(self) -> None:
        self._queue: OrderedDict[int, Callable[[], None]] = OrderedDict()
        self._ids = itertools.count(1)

    def request_frame(self, callback: Callable[[], None]) -> int:
        handle = next(self._ids)
        self._queue[handle] = callback
        return handle

    def cancel(self, handle: int) -> None:
        self._queue.pop(handle, None)

    @property
    def pending(self) -> int:
        return len(self._queue)

    def tick(self) -> int:
        """
        Run the callbacks queued before this tick began, in request order.

        Callbacks requested while the tick runs wait for the following tick.
        Returns the number of callbacks run.
        """
        batch = list(self._queue.items())
        self._queue.clear()
        for _, callback in batch:
            callback()
        return len(batch)


class LoadingContext:
    def __init__(self, scheduler: Optional[FrameScheduler] = None) -> None:
        self.scheduler = scheduler or FrameScheduler()
        self._is_loading = False
        self._pending_show: set[int] = set()

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    def _set(self, value: bool) -> None:
        self._is_loading = value

    def show_loader(self) -> None:
        handle: int = 0

        def apply() -> None:
            self._pending_show.discard(handle)
            self._set(True)

        handle = self.scheduler.request_frame(apply)
        self._pending_show.add(handle)

    def hide_loader(self) -> None:
        # A hide supersedes every show requested before it.
        for handle in self._pending_show:
            self.scheduler.cancel(handle)
        self._pending_show.clear()
        self.scheduler.request_frame(lambda: self._set(False))


class PageLoader:
    """Overlay consumer: hides the loader whenever the route changes."""

    def __init__(self, context: LoadingContext) -> None:
        self.context = context
        self._pathname: Optional[str] = None

    def on_route(self, pathname: str) -> None:
        # The first route seen counts as a change too.
        if pathname != self._pathname:
            logger.debug("Route changed %s -> %s", self._pathname, pathname)
            self._pathname = pathname
            self.context.hide_loader()

    @property
    def visible(self) -> bool:
        return self.context.is_loading


class TransitionLink:
    """A link that raises the overlay when it leads somewhere else."""

    def __init__(self, href: str, context: LoadingContext, *, label: str = "") -> None:
        self.href = href
        self.label = label
        self.context = context

    def click(self, current_path: str) -> str:
        """Handle a click from ``current_path``; returns the navigation target."""
        if current_path != self.href:
            self.context.show_loader()
        return self.href
