"""Menu data models.

These models represent menu items as delivered by the remote menu source and
as persisted in the local store.
"""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field, field_validator

DEFAULT_CATEGORY = "main"


class MenuItem(BaseModel):
    """Menu item model.

    ``id`` is assigned by the local store on insert and is ``None`` for items
    parsed straight from a remote snapshot. ``category`` may likewise be
    ``None`` before persistence; the store writes ``DEFAULT_CATEGORY`` in its
    place.
    """

    id: int | None = Field(None, description="Store-assigned identifier")
    name: str = Field(..., description="Item name", min_length=1)
    price: Decimal = Field(..., description="Item price", ge=0)
    description: str = Field(default="", description="Item description")
    image: str = Field(default="", description="Relative image reference")
    category: str | None = Field(None, description="Category facet label")

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        """Reject names made only of whitespace."""
        if not v.strip():
            raise ValueError("name must not be blank")
        return v

    @field_validator("description", "image", mode="before")
    @classmethod
    def empty_string_for_none(cls, v: Any) -> Any:
        """Normalize missing free-text fields to an empty string."""
        return "" if v is None else v

    @field_validator("category", mode="before")
    @classmethod
    def none_for_blank_category(cls, v: Any) -> Any:
        """Treat an empty category label as absent."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def stored_category(self) -> str:
        """Category as it is written to the store."""
        return self.category or DEFAULT_CATEGORY
