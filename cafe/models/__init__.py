# cafe/models/__init__.py
from .inventory import Ingredient, MenuIngredient, StockMovement
from .order import Order, OrderItem, OrderStatus, MenuItem, ORDER_TRANSITIONS
from .outbox import OutboxEvent
from .processed_event import ProcessedEvent

# Export all models
__all__ = [
    "Ingredient",
    "MenuIngredient",
    "StockMovement",
    "Order",
    "OrderItem",
    "OrderStatus",
    "ORDER_TRANSITIONS",
    "OutboxEvent",
    "ProcessedEvent",
    "MenuItem",
]
