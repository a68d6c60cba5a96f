import logging
from typing import List
from tortoise.transactions import in_transaction
from cafe.core.errors import MenuItemInUseError, NotFoundError
from cafe.models.order import MenuItem, OrderItem
from cafe.schemas.menu import MenuItemRequest

log = logging.getLogger("cafe.menu")


async def create_menu_item(data: MenuItemRequest) -> MenuItem:
    return await MenuItem.create(**data.model_dump())


async def get_menu_item(menu_item_id: int) -> MenuItem:
    item = await MenuItem.get_or_none(id=menu_item_id)
    if item is None:
        raise NotFoundError(f"Menu item not found: {menu_item_id}")
    return item


async def list_menu(include_inactive: bool = False) -> List[MenuItem]:
    """Menu ordered by category then name; only active items unless asked otherwise."""
    query = MenuItem.all() if include_inactive else MenuItem.filter(active=True)
    return await query.order_by("category", "name")


async def update_menu_item(menu_item_id: int, data: MenuItemRequest) -> MenuItem:
    """Replaces every field of a menu item. Setting ``active=False`` takes it off the menu."""
    item = await get_menu_item(menu_item_id)
    item.update_from_dict(data.model_dump())
    await item.save()
    log.info(f"Menu item {menu_item_id} updated (active={item.active}).")
    return item


async def delete_menu_item(menu_item_id: int) -> MenuItem:
    """
    Deletes a menu item together with its recipe. Items that appear on any
    order are kept for the order history; deactivate those instead.
    """
    async with in_transaction() as conn:
        item = await MenuItem.filter(id=menu_item_id).using_db(conn).select_for_update().first()
        if item is None:
            raise NotFoundError(f"Menu item not found: {menu_item_id}")
        if await OrderItem.filter(menu_item_id=menu_item_id).using_db(conn).exists():
            raise MenuItemInUseError(
                f"Menu item {menu_item_id} has existing orders and cannot be deleted; deactivate it instead"
            )
        await item.delete(using_db=conn)
    log.info(f"Menu item {menu_item_id} deleted.")
    return item
