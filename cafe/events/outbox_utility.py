from typing import Any, Dict, Optional
from tortoise.backends.base.client import BaseDBAsyncClient
from cafe.models.outbox import OutboxEvent


async def create_outbox_event(
    aggregate_type: str,
    aggregate_id: Any,
    event_type: str,
    payload: Dict[str, Any],
    conn: Optional[BaseDBAsyncClient] = None
) -> OutboxEvent:
    """
    Creates a new Outbox event record using the provided database connection (transaction).

    Passing 'conn' makes the event commit or roll back together with the business data.
    """
    return await OutboxEvent.create(
        aggregate_type=aggregate_type,
        aggregate_id=str(aggregate_id) if aggregate_id is not None else None,
        event_type=event_type,
        payload=payload,
        published=False,
        attempts=0,
        using_db=conn
    )
