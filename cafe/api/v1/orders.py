import logging
from datetime import date
from typing import Optional
from fastapi import APIRouter, HTTPException, status
from cafe.schemas.response import SuccessResponse
from cafe.services.order_service import (
    validate_order_items,
    create_order,
    get_order_by_id,
    list_orders,
    update_order_status,
    get_daily_sales,
)
from cafe.models.order import OrderStatus
from cafe.schemas.order import OrderRequest, OrderStatusUpdate, OrderDetailResponse, DailySalesResponse

router = APIRouter()
log = logging.getLogger("cafe.api.orders")


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def create_order_endpoint(request_data: OrderRequest):
    """
    Places a new order. Stock is reserved in the same transaction, so a 400
    with code 'insufficient_stock' means nothing was stored.
    """
    if not request_data.items:
        raise HTTPException(status_code=400, detail="Order must contain items.")

    await validate_order_items(request_data.items, request_data.total, request_data.discount_amount)
    order = await create_order(request_data)
    log.info(f"Order {order.id} placed successfully.")

    data = OrderDetailResponse.from_model(order).model_dump()
    return SuccessResponse(data=data, message="Order created successfully")


@router.get("/", response_model=SuccessResponse)
async def list_orders_endpoint(status: Optional[OrderStatus] = None, day: Optional[date] = None):
    """Lists orders, newest first, optionally filtered by status and day."""
    orders = await list_orders(status=status, day=day)
    data = [OrderDetailResponse.from_model(o).model_dump() for o in orders]
    return SuccessResponse(data=data)


@router.get("/sales/today", response_model=SuccessResponse)
async def today_sales_endpoint():
    """Order counts and revenue for the current day."""
    data = DailySalesResponse(**await get_daily_sales()).model_dump()
    return SuccessResponse(data=data)


@router.get("/{order_id}", response_model=SuccessResponse)
async def get_order_endpoint(order_id: int):
    """Fetches details for a specific order."""
    order = await get_order_by_id(order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return SuccessResponse(data=OrderDetailResponse.from_model(order).model_dump())


@router.patch("/{order_id}/status", response_model=SuccessResponse)
async def update_status_endpoint(order_id: int, payload: OrderStatusUpdate):
    """
    Updates status (e.g. 'preparing', 'ready', 'completed', 'cancelled').
    """
    order = await update_order_status(order_id, payload.status)
    data = OrderDetailResponse.from_model(order).model_dump()
    return SuccessResponse(data=data, message=f"Order status successfully updated to {order.status.value}")
