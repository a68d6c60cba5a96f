from tortoise import fields, models
import uuid


class OutboxEvent(models.Model):
    """
    Events written in the same transaction as the business data they describe.
    The poller publishes them only after that transaction has committed, so a
    rolled back order never produces a notification.
    """
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    aggregate_type = fields.CharField(max_length=64) # e.g., 'order'
    aggregate_id = fields.CharField(max_length=64, null=True) # ID of the entity that generated the event
    event_type = fields.CharField(max_length=128) # e.g., 'order.created.v1'
    payload = fields.JSONField()
    published = fields.BooleanField(default=False)
    attempts = fields.IntField(default=0)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "outbox_events"
        indexes = [
            ("published", "attempts", "created_at"),  # Poller scan
        ]
