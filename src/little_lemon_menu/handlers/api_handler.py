"""FastAPI application exposing the cached menu."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import Union

from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from little_lemon_menu.exceptions import MenuServiceError, StorageInitError, StorageQueryError
from little_lemon_menu.models.menu_models import MenuItem
from little_lemon_menu.services.filter_engine import FilterCriteria, FilterEngine
from little_lemon_menu.services.menu_browser import LOAD_FAILURE_NOTICE
from little_lemon_menu.services.menu_repository import MenuRepository

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_BASE_URL = (
    "https://github.com/Meta-Mobile-Developer-PC/Working-With-Data-API/blob/main/images"
)


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str


class MenuItemResponse(BaseModel):
    """Menu item as rendered by clients, with its image resolved."""

    id: int | None
    name: str
    price: Decimal
    description: str
    category: str | None
    image: str
    image_url: str | None


class MenuResponse(BaseModel):
    """List of menu items plus an optional user-facing notice."""

    items: list[MenuItemResponse]
    notice: str | None = None


def resolve_image_url(image: str, base_url: str) -> str | None:
    """Resolve a relative image token to a displayable asset URL.

    Absolute URLs are returned unchanged; an empty token has no image.
    """
    if not image:
        return None
    if image.startswith(("http://", "https://")):
        return image
    return f"{base_url.rstrip('/')}/{image}?raw=true"


def create_app(
    repository: MenuRepository,
    filter_engine: FilterEngine,
    image_base_url: str = DEFAULT_IMAGE_BASE_URL,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        repository: Repository serving the cached menu
        filter_engine: Engine answering filtered queries
        image_base_url: Base location image tokens are resolved against

    Returns:
        Configured FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        # Open an existing database up front so search and categories work before /menu
        try:
            await app.state.repository.store.initialize()
        except StorageInitError as e:
            logger.error(f"Menu store unavailable at startup, serving degraded: {e}")
        yield
        await app.state.repository.store.close()

    app = FastAPI(
        title="Little Lemon Menu API",
        description="Cached restaurant menu with category and text filtering",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.repository = repository
    app.state.filter_engine = filter_engine
    app.state.image_base_url = image_base_url

    def to_response(items: list[MenuItem], notice: str | None = None) -> MenuResponse:
        return MenuResponse(
            items=[
                MenuItemResponse(
                    **item.model_dump(),
                    image_url=resolve_image_url(item.image, app.state.image_base_url),
                )
                for item in items
            ],
            notice=notice,
        )

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(status="healthy")

    @app.get("/menu", response_model=MenuResponse, tags=["Menu"])
    async def get_menu() -> Union[MenuResponse, JSONResponse]:
        """Return the full menu, populating the local cache on first use.

        A load failure yields 503 with an empty item list and a notice.
        """
        try:
            items = await app.state.repository.ensure_populated()
        except MenuServiceError as e:
            logger.error(f"Error loading menu data: {e}")
            return JSONResponse(
                status_code=503,
                content=to_response([], notice=LOAD_FAILURE_NOTICE).model_dump(mode="json"),
            )
        return to_response(items)

    @app.get("/menu/categories", response_model=list[str], tags=["Menu"])
    async def get_categories() -> list[str]:
        """Return the distinct categories present in the cached menu."""
        categories: list[str] = await app.state.repository.load_categories()
        return categories

    @app.get("/menu/search", response_model=MenuResponse, tags=["Menu"])
    async def search_menu(
        q: str = "",
        category: list[str] = Query(default=[]),
    ) -> MenuResponse:
        """Filter the cached menu by name substring and categories.

        Args:
            q: Name substring (case-insensitive for ASCII letters)
            category: Repeatable category filter

        Raises:
            HTTPException: 503 if the store query fails
        """
        criteria = FilterCriteria.create(search_text=q, categories=category)
        try:
            items = await app.state.filter_engine.run(criteria)
        except StorageQueryError as e:
            logger.error(f"Error filtering menu: {e}")
            raise HTTPException(status_code=503, detail="Menu search is unavailable") from e
        return to_response(items)

    return app
