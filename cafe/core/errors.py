"""
Domain errors raised by the services layer.

Every error carries the HTTP status the API should answer with and a short
machine readable code; ``cafe.core.exception_handlers`` turns them into the
standard error envelope.
"""
from decimal import Decimal
from typing import Optional


class CafeError(Exception):
    status_code = 400
    code = "bad_request"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(CafeError):
    """A referenced ingredient, menu item or order does not exist."""
    status_code = 404
    code = "not_found"


class InvalidRecipeError(CafeError):
    """A recipe entry has a bad quantity or names an unknown ingredient."""
    code = "invalid_recipe"

    def __init__(self, index: int, name: Optional[str], reason: str):
        super().__init__(f"Invalid recipe entry #{index} ({name!r}): {reason}")
        self.index = index
        self.name = name
        self.reason = reason


class IngredientMissingError(CafeError):
    """A recipe references an ingredient row that no longer exists."""
    code = "ingredient_missing"

    def __init__(self, ingredient: str):
        super().__init__(f"Ingredient missing: {ingredient}")
        self.ingredient = ingredient


class InsufficientStockError(CafeError):
    code = "insufficient_stock"

    def __init__(self, ingredient: str, needed: Decimal, available: Decimal, unit: str = ""):
        suffix = f" {unit}" if unit else ""
        super().__init__(
            f"Insufficient stock for {ingredient}: need {needed:f}{suffix}, have {available:f}{suffix}"
        )
        self.ingredient = ingredient
        self.needed = needed
        self.available = available
        self.unit = unit


class InvalidOrderError(CafeError):
    """The order request does not match the current menu."""
    code = "invalid_order"


class InvalidStatusTransitionError(CafeError):
    code = "invalid_status_transition"


class InvalidStockError(CafeError):
    """A stock quantity is not a finite number, or would leave stock below zero."""
    code = "invalid_stock"


class MenuItemInUseError(CafeError):
    """The menu item is referenced by existing orders and cannot be deleted."""
    code = "menu_item_in_use"
