"""Component tests for the menu pipeline: HTTP source, SQLite store, browser and API."""

import asyncio
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient

from little_lemon_menu.exceptions import RemoteFormatError, RemoteUnavailableError
from little_lemon_menu.handlers.api_handler import create_app
from little_lemon_menu.repositories.menu_store import MenuStore
from little_lemon_menu.services.filter_engine import FilterEngine
from little_lemon_menu.services.menu_browser import LOAD_FAILURE_NOTICE, MenuBrowser
from little_lemon_menu.services.menu_repository import MenuRepository
from little_lemon_menu.services.menu_source_client import MenuSourceClient

QUIET = 0.02


class CountingHandler:
    """httpx MockTransport handler serving a fixed response and counting requests."""

    def __init__(self, status_code: int, payload: object) -> None:
        self.status_code = status_code
        self.payload = payload
        self.requests = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests += 1
        return httpx.Response(self.status_code, json=self.payload)


def build(db_path: Path, handler: CountingHandler) -> tuple[MenuStore, MenuRepository, FilterEngine]:
    store = MenuStore(str(db_path))
    client = MenuSourceClient(url="https://menu.test/capstone.json", transport=httpx.MockTransport(handler))
    return store, MenuRepository(store=store, source_client=client), FilterEngine(store=store)


@pytest.mark.component
class TestMenuPipeline:
    """End-to-end behavior of the pipeline against a SQLite file."""

    @pytest.mark.asyncio
    async def test_first_run_fetches_once_and_caches(
        self, tmp_path: Path, mock_menu_payload: dict
    ) -> None:
        """Test one fetch on first run and none on later runs, even after reopening."""
        handler = CountingHandler(200, mock_menu_payload)
        store, repository, _ = build(tmp_path / "menu.db", handler)

        items = await repository.ensure_populated()
        await repository.ensure_populated()
        await store.close()

        _, reopened, _ = build(tmp_path / "menu.db", handler)
        cached = await reopened.ensure_populated()

        assert handler.requests == 1
        assert [item.name for item in items] == [
            "Bruschetta",
            "Greek Salad",
            "Grilled Fish",
            "Lemon Dessert",
            "Pasta",
        ]
        assert cached == items
        assert await reopened.load_categories() == ["desserts", "mains", "starters"]
        await reopened.store.close()

    @pytest.mark.asyncio
    async def test_missing_menu_field_leaves_store_empty(self, tmp_path: Path) -> None:
        """Test that a malformed document raises and writes nothing."""
        handler = CountingHandler(200, {"items": []})
        store, repository, _ = build(tmp_path / "menu.db", handler)

        with pytest.raises(RemoteFormatError):
            await repository.ensure_populated()

        assert await store.is_empty() is True
        await store.close()

    @pytest.mark.asyncio
    async def test_server_error_then_recovery(
        self, tmp_path: Path, mock_menu_payload: dict
    ) -> None:
        """Test that a failed first run is retried from scratch on the next call."""
        handler = CountingHandler(503, {"error": "unavailable"})
        store, repository, _ = build(tmp_path / "menu.db", handler)

        with pytest.raises(RemoteUnavailableError):
            await repository.ensure_populated()
        assert await store.is_empty() is True

        handler.status_code = 200
        handler.payload = mock_menu_payload
        items = await repository.ensure_populated()

        assert len(items) == 5
        assert handler.requests == 2
        await store.close()

    @pytest.mark.asyncio
    async def test_concurrent_population_is_single_flight(
        self, tmp_path: Path, mock_menu_payload: dict
    ) -> None:
        """Test that overlapping first-run calls issue one request."""
        handler = CountingHandler(200, mock_menu_payload)
        store, repository, _ = build(tmp_path / "menu.db", handler)

        results = await asyncio.gather(*(repository.ensure_populated() for _ in range(5)))

        assert handler.requests == 1
        assert all(result == results[0] for result in results)
        await store.close()

    @pytest.mark.asyncio
    async def test_browser_session(self, tmp_path: Path, mock_menu_payload: dict) -> None:
        """Test load, debounced search, category filter and teardown."""
        handler = CountingHandler(200, mock_menu_payload)
        store, repository, engine = build(tmp_path / "menu.db", handler)
        browser = MenuBrowser(repository, engine, quiet_interval=QUIET)

        await browser.load()
        assert len(browser.items) == 5
        assert browser.categories == ["desserts", "mains", "starters"]

        browser.set_search_text("g")
        browser.set_search_text("gr")
        browser.toggle_category("mains")
        await asyncio.sleep(QUIET * 4)
        await browser.trigger.join()
        assert [item.name for item in browser.items] == ["Grilled Fish"]

        browser.set_search_text("")
        browser.toggle_category("mains")
        await asyncio.sleep(QUIET * 4)
        await browser.trigger.join()
        assert len(browser.items) == 5

        browser.set_search_text("pasta")
        await browser.close()
        await asyncio.sleep(QUIET * 4)
        assert len(browser.items) == 5
        await store.close()

    @pytest.mark.asyncio
    async def test_browser_load_failure_is_degraded(self, tmp_path: Path) -> None:
        """Test that an unreachable source leaves an empty list and a notice."""
        handler = CountingHandler(500, {})
        store, repository, engine = build(tmp_path / "menu.db", handler)
        browser = MenuBrowser(repository, engine, quiet_interval=QUIET)

        await browser.load()

        assert browser.items == []
        assert browser.categories == []
        assert browser.notice == LOAD_FAILURE_NOTICE
        await browser.close()
        await store.close()


@pytest.mark.component
def test_api_end_to_end(tmp_path: Path, mock_menu_payload: dict) -> None:
    """Test the HTTP API over a real store and a mocked source."""
    handler = CountingHandler(200, mock_menu_payload)
    _, repository, engine = build(tmp_path / "menu.db", handler)
    app = create_app(repository=repository, filter_engine=engine, image_base_url="https://assets.test")

    with TestClient(app) as client:
        menu = client.get("/menu").json()
        categories = client.get("/menu/categories").json()
        search = client.get("/menu/search", params={"q": "SALAD", "category": "starters"}).json()

    assert len(menu["items"]) == 5
    assert menu["items"][1]["image_url"] == "https://assets.test/greekSalad.jpg?raw=true"
    assert categories == ["desserts", "mains", "starters"]
    assert [item["name"] for item in search["items"]] == ["Greek Salad"]
    assert handler.requests == 1


@pytest.mark.component
def test_api_search_before_menu_on_existing_database(
    tmp_path: Path, mock_menu_payload: dict
) -> None:
    """Test that a restarted service answers search and categories from an existing file."""
    db_path = tmp_path / "menu.db"

    async def seed() -> None:
        store, repository, _ = build(db_path, CountingHandler(200, mock_menu_payload))
        await repository.ensure_populated()
        await store.close()

    asyncio.run(seed())

    handler = CountingHandler(500, {})
    _, repository, engine = build(db_path, handler)
    app = create_app(repository=repository, filter_engine=engine)

    with TestClient(app) as client:
        search = client.get("/menu/search", params={"q": "salad"})
        categories = client.get("/menu/categories")

    assert search.status_code == 200
    assert [item["name"] for item in search.json()["items"]] == ["Greek Salad"]
    assert categories.json() == ["desserts", "mains", "starters"]
    assert handler.requests == 0


@pytest.mark.component
def test_api_starts_when_store_cannot_open(tmp_path: Path) -> None:
    """Test that an unopenable database degrades requests instead of failing startup."""
    handler = CountingHandler(200, {"menu": []})
    _, repository, engine = build(tmp_path / "missing" / "menu.db", handler)
    app = create_app(repository=repository, filter_engine=engine)

    with TestClient(app) as client:
        health = client.get("/health")
        search = client.get("/menu/search", params={"q": "salad"})

    assert health.status_code == 200
    assert search.status_code == 503
