import logging
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

from tortoise import timezone
from tortoise.transactions import in_transaction

from cafe.core.errors import InvalidOrderError, InvalidStatusTransitionError, NotFoundError
from cafe.events.outbox_utility import create_outbox_event
from cafe.models.order import MenuItem, Order, OrderItem, OrderStatus, ORDER_TRANSITIONS
from cafe.schemas.order import OrderItemRequest, OrderRequest
from cafe.services.inventory_service import check_and_deduct_stock

log = logging.getLogger("cafe.orders")

# Allowed difference between the submitted total and the item prices
TOTAL_TOLERANCE = Decimal("0.01")

ORDER_CREATED_EVENT = "order.created.v1"
ORDER_STATUS_CHANGED_EVENT = "order.status_changed.v1"


async def validate_order_items(
    items: Sequence[OrderItemRequest], total: Decimal, discount_amount: Decimal = Decimal("0")
) -> None:
    """
    Checks an order request against the menu before it is placed: every item
    must exist and be active, and the total must match the item prices.
    """
    if not items:
        raise InvalidOrderError("Order must contain items.")

    menu_ids = {it.menu_item_id for it in items}
    menu_items = await MenuItem.filter(id__in=list(menu_ids))
    menu_map = {m.id: m for m in menu_items}

    calculated = Decimal("0")
    for it in items:
        menu = menu_map.get(it.menu_item_id)
        if menu is None:
            raise InvalidOrderError(f"Menu item {it.menu_item_id} not found.")
        if not menu.active:
            raise InvalidOrderError(f'Menu item "{menu.name}" is currently unavailable.')
        calculated += it.price * it.quantity

    if abs(calculated - discount_amount - total) > TOTAL_TOLERANCE:
        raise InvalidOrderError("Order total does not match item prices.")


async def create_order(order_data: OrderRequest) -> Order:
    """
    Persists the order and reserves its ingredients in one transaction.

    If the stock reservation fails the order header and its items are rolled
    back with it, so an order that cannot be fulfilled is never stored. The
    'order created' notification is queued in the outbox inside the same
    transaction and delivered after commit.
    """
    async with in_transaction() as conn:
        # 1. Create the Order header
        order = await Order.create(
            customer_id=order_data.customer_id,
            customer_info=order_data.customer_info,
            status=OrderStatus.PENDING,
            total=order_data.total,
            discount_amount=order_data.discount_amount,
            notes=order_data.notes,
            using_db=conn
        )

        # 2. Create Order Item lines
        for it in order_data.items:
            await OrderItem.create(
                order=order,
                menu_item_id=it.menu_item_id,
                customizations=it.customizations,
                quantity=it.quantity,
                price=it.price,
                using_db=conn
            )

        # 3. Reserve ingredients on the same transaction
        await check_and_deduct_stock(
            conn,
            [(it.menu_item_id, it.quantity) for it in order_data.items],
            order_id=order.id,
        )

        await create_outbox_event(
            aggregate_type="order",
            aggregate_id=order.id,
            event_type=ORDER_CREATED_EVENT,
            payload={"order_id": order.id, "status": OrderStatus.PENDING.value},
            conn=conn
        )

    log.info(f"Order {order.id} created with {len(order_data.items)} item(s).")
    return await get_order_by_id(order.id)


async def get_order_by_id(order_id: int) -> Optional[Order]:
    """Fetches order details with items, including the menu item name/image."""
    return await Order.get_or_none(id=order_id).prefetch_related('items', 'items__menu_item')


def _day_bounds(day: date):
    start = timezone.make_aware(datetime.combine(day, time.min))
    return start, start + timedelta(days=1)


async def list_orders(status: Optional[OrderStatus] = None, day: Optional[date] = None) -> List[Order]:
    """Orders newest first, optionally filtered by status and creation day."""
    query = Order.all()
    if status is not None:
        query = query.filter(status=status)
    if day is not None:
        start, end = _day_bounds(day)
        query = query.filter(created_at__gte=start, created_at__lt=end)
    return await query.order_by("-created_at", "-id").prefetch_related('items', 'items__menu_item')


async def update_order_status(order_id: int, new_status: OrderStatus) -> Order:
    """
    Moves an order along pending -> preparing -> ready -> completed, or to
    cancelled from pending/preparing. Cancelling does not return stock.
    """
    async with in_transaction() as conn:
        order = await Order.filter(id=order_id).using_db(conn).select_for_update().first()
        if not order:
            raise NotFoundError(f"Order not found: {order_id}")

        old_status = OrderStatus(order.status)
        if new_status not in ORDER_TRANSITIONS[old_status]:
            raise InvalidStatusTransitionError(
                f"Cannot change order {order_id} from {old_status.value} to {new_status.value}."
            )

        order.status = new_status
        await order.save(update_fields=['status', 'updated_at'], using_db=conn)

        # Emitted in the same transaction as the status change
        await create_outbox_event(
            aggregate_type="order",
            aggregate_id=order.id,
            event_type=ORDER_STATUS_CHANGED_EVENT,
            payload={
                "order_id": order.id,
                "old_status": old_status.value,
                "new_status": new_status.value,
            },
            conn=conn
        )

    log.info(f"Order {order_id} moved from {old_status.value} to {new_status.value}.")
    return await get_order_by_id(order_id)


async def get_daily_sales(day: Optional[date] = None) -> Dict:
    """Order counts per status and revenue for one day (today by default)."""
    day = day or timezone.now().date()
    start, end = _day_bounds(day)
    orders = await Order.filter(created_at__gte=start, created_at__lt=end)

    by_status = {s.value: 0 for s in OrderStatus}
    total_revenue = Decimal("0")
    completed_revenue = Decimal("0")
    for order in orders:
        status = OrderStatus(order.status)
        by_status[status.value] += 1
        total_revenue += order.total
        if status == OrderStatus.COMPLETED:
            completed_revenue += order.total

    return {
        "day": day.isoformat(),
        "total_orders": len(orders),
        "total_revenue": float(total_revenue),
        "completed_revenue": float(completed_revenue),
        "by_status": by_status,
    }
