import pytest
from decimal import Decimal

from cafe.core.errors import InvalidOrderError, MenuItemInUseError, NotFoundError
from cafe.models.inventory import MenuIngredient
from cafe.models.order import MenuItem
from cafe.schemas.menu import MenuItemRequest
from cafe.schemas.order import OrderItemRequest, OrderRequest
from cafe.services.inventory_service import set_recipe, upsert_ingredient
from cafe.services.menu_service import (
    create_menu_item,
    delete_menu_item,
    get_menu_item,
    list_menu,
    update_menu_item,
)
from cafe.services.order_service import create_order, validate_order_items


@pytest.mark.asyncio
async def test_menu_listing(db):
    await create_menu_item(MenuItemRequest(name="Matcha Latte", category="Tea", base_price=Decimal("75")))
    await create_menu_item(MenuItemRequest(name="Latte", category="Coffee", base_price=Decimal("65")))
    await create_menu_item(MenuItemRequest(name="Affogato", category="Coffee", base_price=Decimal("80"), active=False))

    assert [m.name for m in await list_menu()] == ["Latte", "Matcha Latte"]
    assert [m.name for m in await list_menu(include_inactive=True)] == ["Affogato", "Latte", "Matcha Latte"]


@pytest.mark.asyncio
async def test_get_menu_item(db):
    created = await create_menu_item(MenuItemRequest(name="Latte", base_price=Decimal("65"), customizations={"size": ["S", "M"]}))

    item = await get_menu_item(created.id)
    assert item.name == "Latte"
    assert item.customizations == {"size": ["S", "M"]}

    with pytest.raises(NotFoundError):
        await get_menu_item(created.id + 1)


@pytest.mark.asyncio
async def test_update_menu_item_can_take_it_off_the_menu(db):
    created = await create_menu_item(MenuItemRequest(name="Latte", category="Coffee", base_price=Decimal("65")))

    updated = await update_menu_item(
        created.id,
        MenuItemRequest(name="Iced Latte", category="Coffee", base_price=Decimal("70"), active=False),
    )

    assert updated.name == "Iced Latte"
    stored = await get_menu_item(created.id)
    assert stored.base_price == Decimal("70")
    assert stored.active is False
    assert await list_menu() == []

    items = [OrderItemRequest(menu_item_id=created.id, quantity=1, price=Decimal("70"))]
    with pytest.raises(InvalidOrderError):
        await validate_order_items(items, Decimal("70"), Decimal("0"))


@pytest.mark.asyncio
async def test_update_unknown_menu_item(db):
    with pytest.raises(NotFoundError):
        await update_menu_item(999, MenuItemRequest(name="Ghost", base_price=Decimal("1")))


@pytest.mark.asyncio
async def test_delete_menu_item_removes_its_recipe(db):
    await upsert_ingredient("Milk", "ml")
    created = await create_menu_item(MenuItemRequest(name="Latte", base_price=Decimal("65")))
    await set_recipe(created.id, [("Milk", 200)])

    deleted = await delete_menu_item(created.id)

    assert deleted.name == "Latte"
    assert await MenuItem.filter(id=created.id).count() == 0
    assert await MenuIngredient.filter(menu_item_id=created.id).count() == 0

    with pytest.raises(NotFoundError):
        await delete_menu_item(created.id)


@pytest.mark.asyncio
async def test_ordered_menu_item_cannot_be_deleted(latte):
    await create_order(OrderRequest(
        items=[OrderItemRequest(menu_item_id=latte.id, quantity=1, price=Decimal("65.00"))],
        total=Decimal("65.00"),
    ))

    with pytest.raises(MenuItemInUseError):
        await delete_menu_item(latte.id)

    assert await MenuItem.filter(id=latte.id).exists()
