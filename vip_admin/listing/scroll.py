"""Sentinel-driven next-page loading.

The browser watches a sentinel row with an ``IntersectionObserver`` and
reports visibility changes; this class decides whether a change should load
the next page.
"""

from vip_admin.core.logging import get_logger
from vip_admin.listing.controller import FetchResult, ListQueryController

logger = get_logger(__name__)


class InfiniteScrollTrigger:
    """Fires ``load_next_page`` once per hidden-to-visible sentinel transition.

    The trigger only observes while the view is mounted and the controller
    reports more pages. Every load restarts the observation, matching an
    observer that is re-attached after each fetch: if the sentinel is still
    in view afterwards, the next report counts as a fresh transition.
    """

    def __init__(self, controller: ListQueryController):
        self.controller = controller
        self._visible = False
        self._mounted = True

    @property
    def observing(self) -> bool:
        return self._mounted and self.controller.has_more

    @property
    def mounted(self) -> bool:
        return self._mounted

    async def on_visibility(self, fully_visible: bool) -> FetchResult | None:
        """Handle a visibility report; returns the fetch result when one ran."""
        if not self.observing:
            # Detached: after exhaustion or unmount nothing fires
            self._visible = False
            return None
        if self.controller.is_loading:
            # Observer is detached while a fetch is in flight
            self._visible = False
            return None

        was_visible = self._visible
        self._visible = fully_visible
        if not fully_visible or was_visible:
            return None

        logger.debug(
            "Sentinel visible, loading next %s page",
            self.controller.collection,
            extra={"collection": self.controller.collection, "operation": "scroll"},
        )
        try:
            return await self.controller.load_next_page()
        finally:
            self._visible = False

    def unmount(self) -> None:
        """Stop observing for good. In-flight fetches are left to finish."""
        self._mounted = False
        self._visible = False
