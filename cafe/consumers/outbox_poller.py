import asyncio
import logging
from cafe.models.outbox import OutboxEvent
from cafe.consumers.notification_consumer import handle_order_event
from cafe.core.db import init_db, close_db
from cafe.core.config import POLLING_INTERVAL, MAX_ATTEMPTS, BATCH_SIZE, LOG_LEVEL, LOG_FORMAT
from cafe.services.order_service import ORDER_CREATED_EVENT, ORDER_STATUS_CHANGED_EVENT

log = logging.getLogger("outbox_poller")

NOTIFICATION_EVENTS = {ORDER_CREATED_EVENT, ORDER_STATUS_CHANGED_EVENT}


async def dispatch_event(event: OutboxEvent):
    """
    Routes an OutboxEvent to the correct handler.
    """
    event_type = event.event_type
    log.info(f"Poller DISPATCHING: {event_type} (ID: {event.id.hex[:8]}...)")

    if event_type in NOTIFICATION_EVENTS:
        await handle_order_event(event_type, event.payload, event.id)
    else:
        log.warning(f"No handler found for event type: {event_type}")


async def poll_outbox_for_new_events() -> int:
    """
    Queries the Outbox table for unpublished events and attempts to dispatch them.
    Returns the number of events published.
    """
    # Select events that haven't been published and haven't exceeded max attempts
    events = await OutboxEvent.filter(published=False, attempts__lt=MAX_ATTEMPTS).order_by('created_at').limit(BATCH_SIZE)

    published = 0
    for event in events:
        try:
            await dispatch_event(event)
            event.published = True
            await event.save(update_fields=['published'])
            published += 1
        except Exception:
            event.attempts += 1
            await event.save(update_fields=['attempts'])
            log.exception(f"Dispatch failed for event {event.id} (attempt {event.attempts}).")
    return published


async def start_outbox_poller():
    """Main loop for the poller service."""
    await init_db()
    log.info("--- Outbox Poller Service Started ---")

    try:
        while True:
            try:
                await poll_outbox_for_new_events()
            except Exception as e:
                log.error(f"Poller encountered a critical DB error: {e}.")

            await asyncio.sleep(POLLING_INTERVAL)
    finally:
        await close_db()

if __name__ == "__main__":
    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)
    try:
        asyncio.run(start_outbox_poller())
    except KeyboardInterrupt:
        log.info("Poller service stopped.")
