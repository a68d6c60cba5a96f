from decimal import Decimal
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field


class MenuItemRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="Display name (e.g., Iced Latte).")
    category: Optional[str] = Field(None, max_length=100)
    base_price: Decimal = Field(..., ge=0, description="Selling price of one unit.")
    image_url: Optional[str] = None
    description: Optional[str] = None
    customizations: Dict[str, Any] = Field(default_factory=dict)
    active: bool = Field(True, description="Whether the item can be ordered.")


class MenuItemResponse(BaseModel):
    id: int
    name: str
    category: Optional[str] = None
    base_price: float
    image_url: Optional[str] = None
    description: Optional[str] = None
    customizations: Dict[str, Any] = Field(default_factory=dict)
    active: bool

    @classmethod
    def from_model(cls, item) -> "MenuItemResponse":
        return cls(
            id=item.id,
            name=item.name,
            category=item.category,
            base_price=float(item.base_price),
            image_url=item.image_url,
            description=item.description,
            customizations=item.customizations or {},
            active=item.active,
        )
