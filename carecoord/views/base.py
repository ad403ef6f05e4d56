"""Start/stop lifecycle shared by the table-watching views."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, ClassVar

from carecoord.db.changes.feed import ChangeEvent, Subscription
from carecoord.db.constants import Table
from carecoord.utils.logger import logger
from carecoord.views.sources import DashboardDataSource


class WatchedView(ABC):
    """
    A view over one table that stays current while started.

    ``start`` subscribes to the table's change notifications and loads the
    rows; every notification triggers a full reload. ``stop`` only
    unsubscribes, so a reload already in flight still completes. A failed
    reload is logged and leaves the previous rows in place. When reloads
    overlap, only the most recently started one may replace the rows.
    """

    table: ClassVar[Table]

    def __init__(
        self,
        source: DashboardDataSource,
        on_update: Callable[["WatchedView"], None] | None = None,
    ):
        self.source = source
        self.on_update = on_update
        self.last_error: Exception | None = None
        self._subscription: Subscription | None = None
        self._generation = 0

    @property
    def watching(self) -> bool:
        return self._subscription is not None and self._subscription.active

    @abstractmethod
    async def _fetch(self) -> Any:
        """Fetch fresh rows without touching the view's state."""

    @abstractmethod
    def _apply(self, rows: Any) -> None:
        """Replace the view's state with the result of ``_fetch``."""

    async def refresh(self) -> bool:
        """
        Reload the rows.

        Returns:
            bool: False if the fetch failed (old rows kept) or a newer reload
            started while this one was fetching (its result is dropped)
        """
        self._generation += 1
        generation = self._generation
        try:
            rows = await self._fetch()
        except Exception as e:
            if generation == self._generation:
                self.last_error = e
            logger.exception(
                "View refresh failed",
                view=type(self).__name__,
                table=self.table.value,
                error=str(e),
            )
            return False

        if generation != self._generation:
            logger.debug(
                "Dropping superseded view refresh",
                view=type(self).__name__,
                generation=generation,
                latest=self._generation,
            )
            return False

        self._apply(rows)
        self.last_error = None
        if self.on_update is not None:
            self.on_update(self)
        return True

    async def _on_change(self, change: ChangeEvent) -> None:
        logger.debug(
            "Reloading view after change",
            view=type(self).__name__,
            change_type=change.event.value,
            record_id=change.record_id,
        )
        await self.refresh()

    async def start(self) -> None:
        if self.watching:
            return
        self._subscription = self.source.subscribe(self.table.value, self._on_change)
        await self.refresh()

    async def stop(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()
