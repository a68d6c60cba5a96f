from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field
from cafe.models.order import OrderStatus


class OrderItemRequest(BaseModel):
    """Schema for a single item in the order request."""
    menu_item_id: int = Field(..., gt=0)
    quantity: int = Field(..., gt=0)
    price: Decimal = Field(..., ge=0)
    customizations: Dict[str, Any] = Field(default_factory=dict)


class OrderRequest(BaseModel):
    """Schema for the full order placement request body."""
    customer_id: Optional[str] = Field(None, max_length=100)
    customer_info: Dict[str, Any] = Field(default_factory=dict)
    items: List[OrderItemRequest]
    total: Decimal = Field(..., ge=0)
    discount_amount: Decimal = Field(Decimal("0"), ge=0)
    notes: Optional[str] = Field(None, max_length=100)


class OrderStatusUpdate(BaseModel):
    """Schema for updating an order status."""
    status: OrderStatus


class OrderItemResponse(BaseModel):
    """Schema for an item inside the detailed order response."""
    id: int
    menu_item_id: int
    menu_name: Optional[str] = None
    image_url: Optional[str] = None
    quantity: int
    price: float
    customizations: Dict[str, Any] = Field(default_factory=dict)


class OrderDetailResponse(BaseModel):
    """Schema for fetching detailed order information."""
    id: int
    customer_id: Optional[str] = None
    customer_info: Dict[str, Any] = Field(default_factory=dict)
    status: OrderStatus
    total: float
    discount_amount: float
    notes: Optional[str] = None
    items: List[OrderItemResponse]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, order) -> "OrderDetailResponse":
        """Builds the response from an Order with 'items__menu_item' prefetched."""
        items = []
        for i in order.items:
            menu = getattr(i, "menu_item", None)
            items.append(OrderItemResponse(
                id=i.id,
                menu_item_id=i.menu_item_id,
                menu_name=getattr(menu, "name", None),
                image_url=getattr(menu, "image_url", None),
                quantity=i.quantity,
                price=float(i.price),
                customizations=i.customizations or {},
            ))
        return cls(
            id=order.id,
            customer_id=order.customer_id,
            customer_info=order.customer_info or {},
            status=order.status,
            total=float(order.total),
            discount_amount=float(order.discount_amount or 0),
            notes=order.notes,
            items=items,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class DailySalesResponse(BaseModel):
    day: str
    total_orders: int
    total_revenue: float
    completed_revenue: float
    by_status: Dict[str, int]
