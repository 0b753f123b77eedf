"""Menu repository: populate-if-empty orchestration over the local store."""

import asyncio
import logging

from little_lemon_menu.exceptions import RemoteSourceError, StorageQueryError
from little_lemon_menu.models.menu_models import MenuItem
from little_lemon_menu.observability.decorators import traced
from little_lemon_menu.observability.metrics import (
    record_fetch_failure,
    record_fetch_success,
    record_items_persisted,
    record_store_fallback,
)
from little_lemon_menu.repositories.menu_store import MenuStore
from little_lemon_menu.services.menu_source_client import MenuSourceClient

logger = logging.getLogger(__name__)


class MenuRepository:
    """Decides between the local store and the remote source.

    The store is filled from the remote source the first time it is found
    empty; afterwards all reads are served locally. Population is
    single-flight: concurrent ``ensure_populated()`` callers share one
    in-flight sequence and observe the same result or error.
    """

    def __init__(self, store: MenuStore, source_client: MenuSourceClient) -> None:
        """Initialize the repository.

        Args:
            store: Local store holding the cached menu
            source_client: Client for the remote menu snapshot
        """
        self.store = store
        self.source_client = source_client
        self._inflight: asyncio.Future[list[MenuItem]] | None = None

    async def ensure_populated(self) -> list[MenuItem]:
        """Return the persisted menu, fetching it first if the store is empty.

        Safe to call on every screen focus or request.

        Returns:
            All persisted menu items ordered by name

        Raises:
            StorageInitError: If the store cannot be initialized
            StorageQueryError: If persisting or reading back fails
            RemoteUnavailableError: If the first-run fetch cannot reach the source
            RemoteFormatError: If the first-run fetch returns a malformed document
        """
        if self._inflight is None:
            self._inflight = asyncio.ensure_future(self._populate())
            self._inflight.add_done_callback(self._clear_inflight)
        return await asyncio.shield(self._inflight)

    def _clear_inflight(self, future: "asyncio.Future[list[MenuItem]]") -> None:
        if self._inflight is future:
            self._inflight = None
        # Mark the exception retrieved for the case where every waiter was cancelled
        if not future.cancelled():
            future.exception()

    @traced("ensure_menu_populated")
    async def _populate(self) -> list[MenuItem]:
        await self.store.initialize()

        try:
            empty = await self.store.is_empty()
        except StorageQueryError as e:
            # Assume data exists rather than re-fetching on every failure
            logger.warning(f"Emptiness check failed, treating store as populated: {e}")
            record_store_fallback("is_empty")
            empty = False

        if not empty:
            logger.info("Loading menu from local store")
            return await self.store.list_all()

        logger.info("Local store is empty, fetching menu from remote source")
        try:
            snapshot = await self.source_client.fetch_snapshot()
        except RemoteSourceError as e:
            record_fetch_failure(type(e).__name__)
            raise
        record_fetch_success(len(snapshot))

        await self.store.replace_all(snapshot)
        record_items_persisted(len(snapshot))

        # Read back so callers see store-assigned ids and category defaults
        return await self.store.list_all()

    async def load_categories(self) -> list[str]:
        """Return the category facet list, or an empty list on store failure."""
        try:
            return await self.store.distinct_categories()
        except StorageQueryError as e:
            logger.warning(f"Failed to load menu categories: {e}")
            record_store_fallback("distinct_categories")
            return []
