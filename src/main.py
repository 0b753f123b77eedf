"""Main application entry point for the Little Lemon menu service.

This module provides the FastAPI application factory and configuration
for running the service locally or in production.
"""

import logging
import os

from fastapi import FastAPI

from little_lemon_menu.handlers.api_handler import DEFAULT_IMAGE_BASE_URL, create_app
from little_lemon_menu.observability import configure_logging, setup_observability
from little_lemon_menu.repositories.menu_store import MenuStore
from little_lemon_menu.services.filter_engine import FilterEngine
from little_lemon_menu.services.menu_repository import MenuRepository
from little_lemon_menu.services.menu_source_client import DEFAULT_MENU_URL, MenuSourceClient

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = "little_lemon.db"


def create_menu_store() -> MenuStore:
    """Create the local menu store from MENU_DB_PATH.

    Returns:
        Uninitialized MenuStore; it is opened on first population
    """
    db_path = os.getenv("MENU_DB_PATH", DEFAULT_DB_PATH)
    logger.info(f"Using menu store at {db_path}")
    return MenuStore(db_path=db_path)


def create_application() -> FastAPI:
    """Create and configure the FastAPI application with all dependencies.

    This factory function:
    1. Configures logging
    2. Creates the local store and remote source client
    3. Wires the repository and filter engine
    4. Creates the FastAPI app
    5. Sets up observability

    Returns:
        Configured FastAPI application instance
    """
    configure_logging(os.getenv("LOG_LEVEL", "INFO"))

    logger.info("Initializing menu service...")

    store = create_menu_store()

    menu_source_url = os.getenv("MENU_SOURCE_URL", DEFAULT_MENU_URL)
    source_client = MenuSourceClient(url=menu_source_url)
    logger.info(f"Menu source configured - URL: {menu_source_url}")

    repository = MenuRepository(store=store, source_client=source_client)
    filter_engine = FilterEngine(store=store)

    app = create_app(
        repository=repository,
        filter_engine=filter_engine,
        image_base_url=os.getenv("MENU_IMAGE_BASE_URL", DEFAULT_IMAGE_BASE_URL),
    )

    setup_observability(app)

    logger.info("Menu service initialized successfully")

    return app


# Create the FastAPI application instance (only when not in test mode)
# This prevents the app from being created during test collection
if os.getenv("ENVIRONMENT") != "test":  # noqa: SIM108
    app = create_application()
else:
    app = FastAPI()


if __name__ == "__main__":
    """Run the application with uvicorn when executed directly."""
    import uvicorn

    port = int(os.getenv("PORT", "8001"))
    host = os.getenv("HOST", "0.0.0.0")

    logger.info(f"Starting development server on {host}:{port}")

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=True,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )
