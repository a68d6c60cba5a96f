from fastapi import APIRouter, status
from cafe.schemas.menu import MenuItemRequest, MenuItemResponse
from cafe.schemas.response import SuccessResponse
from cafe.services.menu_service import (
    create_menu_item,
    delete_menu_item,
    get_menu_item,
    list_menu,
    update_menu_item,
)

router = APIRouter()


@router.get("/", response_model=SuccessResponse)
async def list_menu_endpoint(include_inactive: bool = False):
    """Public menu; admins may include inactive items."""
    items = await list_menu(include_inactive=include_inactive)
    return SuccessResponse(data=[MenuItemResponse.from_model(i).model_dump() for i in items])


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def create_menu_item_endpoint(body: MenuItemRequest):
    item = await create_menu_item(body)
    return SuccessResponse(data=MenuItemResponse.from_model(item).model_dump(), message="Menu item created")


@router.get("/{menu_item_id}", response_model=SuccessResponse)
async def get_menu_item_endpoint(menu_item_id: int):
    item = await get_menu_item(menu_item_id)
    return SuccessResponse(data=MenuItemResponse.from_model(item).model_dump())


@router.put("/{menu_item_id}", response_model=SuccessResponse)
async def update_menu_item_endpoint(menu_item_id: int, body: MenuItemRequest):
    item = await update_menu_item(menu_item_id, body)
    return SuccessResponse(data=MenuItemResponse.from_model(item).model_dump(), message="Menu item updated")


@router.delete("/{menu_item_id}", response_model=SuccessResponse)
async def delete_menu_item_endpoint(menu_item_id: int):
    """Deletes a menu item that has never been ordered."""
    item = await delete_menu_item(menu_item_id)
    return SuccessResponse(data=MenuItemResponse.from_model(item).model_dump(), message="Menu item deleted")
