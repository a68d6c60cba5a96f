from enum import Enum
from tortoise import fields, models


class OrderStatus(str, Enum):
    PENDING = "pending"  # Created, stock already deducted
    PREPARING = "preparing"
    READY = "ready"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Allowed forward moves; completed and cancelled are terminal
ORDER_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PREPARING, OrderStatus.CANCELLED},
    OrderStatus.PREPARING: {OrderStatus.READY, OrderStatus.CANCELLED},
    OrderStatus.READY: {OrderStatus.COMPLETED},
    OrderStatus.COMPLETED: set(),
    OrderStatus.CANCELLED: set(),
}


class MenuItem(models.Model):
    id = fields.IntField(primary_key=True)
    name = fields.CharField(max_length=100)
    category = fields.CharField(max_length=100, null=True)
    base_price = fields.DecimalField(max_digits=10, decimal_places=2)
    image_url = fields.TextField(null=True)
    description = fields.TextField(null=True)
    customizations = fields.JSONField(default=dict)
    active = fields.BooleanField(default=True)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "menus"
        indexes = [
            ("active",),              # Public menu only lists active items
            ("category", "name"),     # Menu ordering
        ]


class Order(models.Model):
    id = fields.IntField(primary_key=True)
    customer_id = fields.CharField(max_length=100, null=True)
    customer_info = fields.JSONField(default=dict)
    status = fields.CharEnumField(OrderStatus, max_length=20, default=OrderStatus.PENDING)
    discount_amount = fields.DecimalField(max_digits=10, decimal_places=2, default=0)
    total = fields.DecimalField(max_digits=10, decimal_places=2)
    notes = fields.CharField(max_length=100, null=True)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "orders"
        indexes = [
            ("status",),                 # Status-based filtering
            ("customer_id",),            # Customer order history
            ("created_at",),             # Time-based queries
            ("status", "created_at"),    # Composite: status with time
        ]


class OrderItem(models.Model):
    id = fields.IntField(primary_key=True)
    order = fields.ForeignKeyField("models.Order", related_name="items", on_delete=fields.CASCADE)
    menu_item = fields.ForeignKeyField("models.MenuItem", related_name="order_items", on_delete=fields.RESTRICT)
    customizations = fields.JSONField(default=dict)
    quantity = fields.IntField(default=1)
    price = fields.DecimalField(max_digits=10, decimal_places=2)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "order_items"
        indexes = [
            ("menu_item_id",),          # Menu item popularity
        ]
