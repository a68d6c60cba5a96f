import logging
from typing import Any, Dict
from uuid import UUID
from tortoise.transactions import in_transaction
from cafe.models.processed_event import ProcessedEvent
from cafe.services.order_service import get_order_by_id
from cafe.services.notification_service import notify_order_event

log = logging.getLogger("notification_consumer")


async def handle_order_event(event_type: str, event_payload: Dict[str, Any], event_id: UUID) -> bool:
    """
    Consumer logic for 'order.created.v1' and 'order.status_changed.v1'.
    Re-reads the committed order and fans it out to the notification channels.
    Returns False when the event was already handled or the order is gone.
    """
    order_id = event_payload.get("order_id")
    event_id_str = str(event_id)

    # Idempotency Check
    if await ProcessedEvent.filter(event_id=event_id_str).exists():
        log.info(f"Idempotency: Event {event_id_str} already processed.")
        return False

    order = await get_order_by_id(order_id)
    if not order:
        log.warning(f"Order {order_id} not found, skipping {event_type}.")
        return False

    delivered = await notify_order_event(event_type, order)
    log.info(f"{event_type} for order {order_id} delivered to {delivered} channel(s).")

    async with in_transaction() as conn:
        await ProcessedEvent.create(event_id=event_id_str, using_db=conn)
    return True
