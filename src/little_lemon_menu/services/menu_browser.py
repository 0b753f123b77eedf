"""Headless state of the menu browsing screen.

Holds what the home screen renders (the item list, category chips, the
current criteria and any failure notice) and drives filter queries through
the debounced trigger.
"""

import logging

from little_lemon_menu.exceptions import MenuServiceError, StorageQueryError
from little_lemon_menu.models.menu_models import MenuItem
from little_lemon_menu.services.debounce import DEFAULT_QUIET_INTERVAL, DebouncedQueryTrigger
from little_lemon_menu.services.filter_engine import FilterCriteria, FilterEngine
from little_lemon_menu.services.menu_repository import MenuRepository

logger = logging.getLogger(__name__)

LOAD_FAILURE_NOTICE = "Failed to load menu. Please try again."


def display_category(category: str) -> str:
    """Chip label for a category: first letter upper-cased."""
    return category[:1].upper() + category[1:]


class MenuBrowser:
    """Menu list, facets and criteria for one browsing session."""

    def __init__(
        self,
        repository: MenuRepository,
        filter_engine: FilterEngine,
        quiet_interval: float = DEFAULT_QUIET_INTERVAL,
    ) -> None:
        self.repository = repository
        self.filter_engine = filter_engine
        self.items: list[MenuItem] = []
        self.categories: list[str] = []
        self.criteria = FilterCriteria()
        self.notice: str | None = None
        self.is_loading = False
        self._trigger: DebouncedQueryTrigger[FilterCriteria] = DebouncedQueryTrigger(
            self._apply_filter, quiet_interval
        )
        self._issued = 0
        self._applied = 0

    @property
    def trigger(self) -> DebouncedQueryTrigger[FilterCriteria]:
        return self._trigger

    async def load(self) -> None:
        """Populate the list and the category chips.

        On failure the list stays empty and ``notice`` holds a message for
        the user; the browser remains usable.
        """
        self.is_loading = True
        self.notice = None
        try:
            try:
                self.items = await self.repository.ensure_populated()
            except MenuServiceError as e:
                logger.error(f"Error loading menu data: {e}")
                self.notice = LOAD_FAILURE_NOTICE
            self.categories = await self.repository.load_categories()
        finally:
            self.is_loading = False

    def set_search_text(self, text: str) -> None:
        self._update(self.criteria.with_search_text(text))

    def toggle_category(self, category: str) -> None:
        self._update(self.criteria.toggle_category(category))

    def is_selected(self, category: str) -> bool:
        return category in self.criteria.selected_categories

    def _update(self, criteria: FilterCriteria) -> None:
        self.criteria = criteria
        self._trigger.notify(criteria)

    async def _apply_filter(self, criteria: FilterCriteria) -> None:
        self._issued += 1
        generation = self._issued
        try:
            results = await self.filter_engine.run(criteria)
        except StorageQueryError as e:
            # Keep showing the previous results
            logger.error(f"Error filtering menu: {e}")
            return
        if generation < self._applied:
            logger.debug("Discarding results of a superseded filter query")
            return
        self._applied = generation
        self.items = results

    async def close(self) -> None:
        """Tear down: cancel any pending query and wait for running ones."""
        self._trigger.close()
        await self._trigger.join()
