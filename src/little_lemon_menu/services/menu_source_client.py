"""Client for the remote menu snapshot endpoint."""

import logging
from decimal import Decimal
from typing import Any

import httpx
from pydantic import ValidationError

from little_lemon_menu.exceptions import RemoteFormatError, RemoteUnavailableError
from little_lemon_menu.models.menu_models import MenuItem
from little_lemon_menu.observability.decorators import traced

logger = logging.getLogger(__name__)

DEFAULT_MENU_URL = (
    "https://raw.githubusercontent.com/Meta-Mobile-Developer-PC/"
    "Working-With-Data-API/main/capstone.json"
)


class MenuSourceClient:
    """HTTP client for fetching the complete menu snapshot.

    The endpoint returns a JSON document whose ``menu`` field lists every
    item. There is no pagination; one request yields the whole menu.
    """

    def __init__(
        self,
        url: str = DEFAULT_MENU_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the menu source client.

        Args:
            url: Location of the menu JSON document
            transport: Optional httpx transport, used instead of the network
        """
        self.url = url
        self.transport = transport

    @traced("fetch_menu_snapshot")
    async def fetch_snapshot(self) -> list[MenuItem]:
        """Fetch and parse the menu snapshot.

        Returns:
            List of unpersisted MenuItem objects (empty if the menu is empty)

        Raises:
            RemoteUnavailableError: On transport failure or non-2xx status
            RemoteFormatError: If the body is not a valid menu document
        """
        try:
            async with httpx.AsyncClient(transport=self.transport) as client:
                response = await client.get(self.url)
                response.raise_for_status()
        except (httpx.HTTPStatusError, httpx.RequestError) as e:
            logger.error(f"Failed to fetch menu from {self.url}: {e}")
            raise RemoteUnavailableError(f"Menu source unavailable: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            logger.error(f"Menu source returned a non-JSON body: {e}")
            raise RemoteFormatError("Menu source returned a non-JSON body") from e

        items = self._parse_menu(data)
        logger.info(f"Fetched {len(items)} menu items from {self.url}")
        return items

    def _parse_menu(self, data: Any) -> list[MenuItem]:
        if not isinstance(data, dict) or "menu" not in data:
            logger.error("Menu document has no 'menu' field")
            raise RemoteFormatError("Menu document has no 'menu' field")

        raw_items = data["menu"]
        if not isinstance(raw_items, list):
            logger.error(f"Menu field is a {type(raw_items).__name__}, expected a list")
            raise RemoteFormatError("Menu field is not a list")

        items = []
        for index, raw_item in enumerate(raw_items):
            if not isinstance(raw_item, dict):
                raise RemoteFormatError(f"Menu entry {index} is not an object")
            item_data = dict(raw_item)
            price = item_data.get("price")
            if isinstance(price, bool):
                logger.error(f"Menu entry {index} has a boolean price")
                raise RemoteFormatError(f"Menu entry {index} is malformed")
            # Identity is assigned by the local store
            item_data.pop("id", None)
            try:
                # Avoid binary float artifacts when the price arrives as a number
                if isinstance(price, (int, float)):
                    item_data["price"] = Decimal(str(price))
                items.append(MenuItem(**item_data))
            except (ValidationError, ArithmeticError) as e:
                logger.error(f"Menu entry {index} failed validation: {e}")
                raise RemoteFormatError(f"Menu entry {index} is malformed") from e

        return items
