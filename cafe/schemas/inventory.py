from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel, Field


class IngredientRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="Unique ingredient name (e.g., Milk).")
    unit: str = Field(..., min_length=1, max_length=20, description="Unit of measure (e.g., ml, g).")


class StockRequest(BaseModel):
    quantity: Decimal = Field(..., description="Amount to add in the ingredient's unit; negative for corrections.")
    reason: Optional[str] = Field(None, max_length=64, description="Ledger reason, defaults to add_stock.")


class SetStockRequest(BaseModel):
    quantity: Decimal = Field(..., ge=0, description="New absolute stock level in the ingredient's unit.")


class IngredientResponse(BaseModel):
    id: int
    name: str
    unit: str
    stock: float
    updated_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, ingredient) -> "IngredientResponse":
        return cls(
            id=ingredient.id,
            name=ingredient.name,
            unit=ingredient.unit,
            stock=float(ingredient.stock),
            updated_at=ingredient.updated_at,
        )


class RecipeEntry(BaseModel):
    """One line of a recipe; quantity is validated by the recipe registry."""
    ingredient_name: str
    quantity: Decimal


class RecipeRequest(BaseModel):
    entries: List[RecipeEntry]


class RecipeLineResponse(BaseModel):
    ingredient_id: int
    name: str
    unit: str
    quantity_per_unit: float


class StockMovementResponse(BaseModel):
    id: int
    ingredient_id: int
    change: float
    reason: Optional[str] = None
    order_id: Optional[int] = None
    meta: dict = Field(default_factory=dict)
    created_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, movement) -> "StockMovementResponse":
        return cls(
            id=movement.id,
            ingredient_id=movement.ingredient_id,
            change=float(movement.change),
            reason=movement.reason,
            order_id=movement.order_id,
            meta=movement.meta or {},
            created_at=movement.created_at,
        )
