"""Filter criteria and their execution against the local store."""

import logging
import time
from collections.abc import Iterable
from dataclasses import dataclass, field, replace

from little_lemon_menu.models.menu_models import MenuItem
from little_lemon_menu.observability.decorators import traced
from little_lemon_menu.observability.metrics import record_query_duration
from little_lemon_menu.repositories.menu_store import MenuStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FilterCriteria:
    """Transient filter state owned by the consumer.

    Attributes:
        search_text: Name substring; surrounding whitespace is ignored
        selected_categories: Allowed categories; empty means any category
    """

    search_text: str = ""
    selected_categories: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def create(cls, search_text: str = "", categories: Iterable[str] = ()) -> "FilterCriteria":
        return cls(search_text=search_text, selected_categories=frozenset(categories))

    @property
    def normalized_text(self) -> str:
        return self.search_text.strip()

    @property
    def is_empty(self) -> bool:
        """True when no predicate applies."""
        return not self.normalized_text and not self.selected_categories

    def with_search_text(self, text: str) -> "FilterCriteria":
        return replace(self, search_text=text)

    def toggle_category(self, category: str) -> "FilterCriteria":
        """Return criteria with ``category`` added, or removed if already selected."""
        return replace(self, selected_categories=self.selected_categories ^ {category})


class FilterEngine:
    """Runs filter criteria as a parameterized query on the store."""

    def __init__(self, store: MenuStore) -> None:
        self.store = store

    @traced("filter_menu")
    async def run(self, criteria: FilterCriteria) -> list[MenuItem]:
        """Return items matching ``criteria``, ordered by name.

        Raises:
            StorageQueryError: If the query fails
        """
        started = time.perf_counter()
        results = await self.store.query(criteria.normalized_text, criteria.selected_categories)
        record_query_duration(time.perf_counter() - started, filtered=not criteria.is_empty)

        logger.debug(
            f"Filter text={criteria.normalized_text!r} "
            f"categories={sorted(criteria.selected_categories)} -> {len(results)} items"
        )
        return results
