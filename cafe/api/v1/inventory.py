from typing import List
from fastapi import APIRouter, status
from cafe.schemas.inventory import (
    IngredientRequest,
    IngredientResponse,
    RecipeLineResponse,
    RecipeRequest,
    SetStockRequest,
    StockMovementResponse,
    StockRequest,
)
from cafe.schemas.response import SuccessResponse
from cafe.services import inventory_service

router = APIRouter()


@router.post("/ingredients", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def upsert_ingredient_endpoint(body: IngredientRequest):
    """Creates an ingredient with zero stock or updates its unit."""
    ingredient = await inventory_service.upsert_ingredient(body.name, body.unit)
    return SuccessResponse(data=IngredientResponse.from_model(ingredient).model_dump())


@router.get("/ingredients", response_model=SuccessResponse)
async def list_ingredients_endpoint():
    ingredients = await inventory_service.list_ingredients()
    return SuccessResponse(data=[IngredientResponse.from_model(i).model_dump() for i in ingredients])


@router.put("/ingredients/{name}/stock", response_model=SuccessResponse)
async def set_stock_endpoint(name: str, body: SetStockRequest):
    """Sets the absolute stock level of an ingredient."""
    ingredient = await inventory_service.set_stock(name, body.quantity)
    return SuccessResponse(data=IngredientResponse.from_model(ingredient).model_dump())


@router.post("/ingredients/{name}/stock", response_model=SuccessResponse)
async def add_stock_endpoint(name: str, body: StockRequest):
    """Adds to the stock of an ingredient (e.g. a delivery)."""
    reason = body.reason or inventory_service.REASON_ADD_STOCK
    ingredient = await inventory_service.add_stock(name, body.quantity, reason=reason)
    return SuccessResponse(data=IngredientResponse.from_model(ingredient).model_dump())


@router.get("/ingredients/{name}/movements", response_model=SuccessResponse)
async def list_movements_endpoint(name: str, limit: int = 100):
    movements = await inventory_service.list_movements(name, limit=limit)
    return SuccessResponse(data=[StockMovementResponse.from_model(m).model_dump() for m in movements])


@router.put("/recipes/{menu_item_id}", response_model=SuccessResponse)
async def set_recipe_endpoint(menu_item_id: int, body: RecipeRequest):
    """Sets the ingredients consumed by one unit of a menu item."""
    entries = [(e.ingredient_name, e.quantity) for e in body.entries]
    await inventory_service.set_recipe(menu_item_id, entries)
    return SuccessResponse(data=await _recipe_data(menu_item_id), message="Recipe updated")


@router.get("/recipes/{menu_item_id}", response_model=SuccessResponse)
async def get_recipe_endpoint(menu_item_id: int):
    return SuccessResponse(data=await _recipe_data(menu_item_id))


async def _recipe_data(menu_item_id: int) -> List[dict]:
    lines = await inventory_service.get_recipe(menu_item_id)
    return [
        RecipeLineResponse(
            ingredient_id=line.ingredient_id,
            name=line.name,
            unit=line.unit,
            quantity_per_unit=float(line.quantity_per_unit),
        ).model_dump()
        for line in lines
    ]
