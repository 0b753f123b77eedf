"""Shared pytest fixtures and configuration for all tests."""

import os

os.environ.setdefault("ENVIRONMENT", "test")

import pytest  # noqa: E402

from little_lemon_menu.models.menu_models import MenuItem  # noqa: E402


@pytest.fixture
def mock_menu_payload() -> dict:
    """Fixture providing a remote menu document as served by the endpoint."""
    return {
        "menu": [
            {
                "name": "Greek Salad",
                "price": "12.99",
                "description": "Crispy lettuce, peppers, olives and feta",
                "image": "greekSalad.jpg",
                "category": "starters",
            },
            {
                "name": "Bruschetta",
                "price": "7.99",
                "description": "Grilled bread with garlic and tomatoes",
                "image": "bruschetta.jpg",
                "category": "starters",
            },
            {
                "name": "Grilled Fish",
                "price": "20.00",
                "description": "Fish marinated in herbs",
                "image": "grilledFish.jpg",
                "category": "mains",
            },
            {
                "name": "Pasta",
                "price": "18.99",
                "description": "Penne with a light tomato sauce",
                "image": "pasta.jpg",
                "category": "mains",
            },
            {
                "name": "Lemon Dessert",
                "price": "6.99",
                "description": "Light and fluffy lemon cake",
                "image": "lemonDessert.jpg",
                "category": "desserts",
            },
        ]
    }


@pytest.fixture
def mock_menu_items() -> list[MenuItem]:
    """Fixture providing unpersisted menu items, one without a category."""
    return [
        MenuItem(name="Greek Salad", price="12.99", description="Feta", image="greekSalad.jpg", category="starters"),
        MenuItem(name="Chicken Salad", price="11.50", description="", image="chicken.jpg", category="main"),
        MenuItem(name="Lemon Dessert", price="6.99", description="Cake", image="lemonDessert.jpg", category="dessert"),
        MenuItem(name="Pasta", price="18.99", description="Penne", image="pasta.jpg"),
        MenuItem(name="Iced Tea", price="3.00", description="", image="tea.jpg", category="drinks"),
    ]
