from tortoise import fields, models


class Ingredient(models.Model):
    id = fields.IntField(primary_key=True)
    name = fields.CharField(max_length=100, unique=True)
    unit = fields.CharField(max_length=20)
    stock = fields.DecimalField(max_digits=14, decimal_places=3, default=0)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "ingredients"


class MenuIngredient(models.Model):
    """How much of one ingredient a single unit of a menu item consumes."""
    id = fields.IntField(primary_key=True)
    menu_item = fields.ForeignKeyField("models.MenuItem", related_name="recipe", on_delete=fields.CASCADE)
    # Ingredients referenced by a recipe cannot be deleted
    ingredient = fields.ForeignKeyField("models.Ingredient", related_name="recipes", on_delete=fields.RESTRICT)
    quantity_per_unit = fields.DecimalField(max_digits=14, decimal_places=3)

    class Meta:
        table = "menu_ingredients"
        unique_together = (("menu_item", "ingredient"),)


class StockMovement(models.Model):
    """
    Append-only audit trail of stock changes. ``change`` is signed:
    positive for additions, negative for deductions.
    """
    id = fields.IntField(primary_key=True)
    ingredient = fields.ForeignKeyField("models.Ingredient", related_name="movements", on_delete=fields.RESTRICT)
    change = fields.DecimalField(max_digits=14, decimal_places=3)
    reason = fields.CharField(max_length=64, null=True)  # e.g. 'set_stock', 'add_stock', 'order_deduction'
    order = fields.ForeignKeyField("models.Order", related_name="stock_movements", null=True, on_delete=fields.SET_NULL)
    meta = fields.JSONField(default=dict)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "stock_movements"
        indexes = [
            ("ingredient_id", "created_at"),  # Ledger per ingredient
        ]
