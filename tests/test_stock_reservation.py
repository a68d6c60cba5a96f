import pytest
from decimal import Decimal
from tortoise import connections
from tortoise.transactions import in_transaction

from cafe.core.errors import IngredientMissingError, InsufficientStockError
from cafe.models.inventory import Ingredient, StockMovement
from cafe.models.order import MenuItem
from cafe.services.inventory_service import (
    aggregate_requirements,
    check_and_deduct_stock,
    list_movements,
    set_recipe,
    set_stock,
    add_stock,
    upsert_ingredient,
)


async def _stock(name):
    return (await Ingredient.get(name=name)).stock


async def _two_milk_drinks():
    """Item A needs 50 ml milk per unit, item B needs 100 ml."""
    await upsert_ingredient("Milk", "ml")
    a = await MenuItem.create(name="Cortado", base_price=Decimal("50"))
    b = await MenuItem.create(name="Latte", base_price=Decimal("65"))
    await set_recipe(a.id, [("Milk", 50)])
    await set_recipe(b.id, [("Milk", 100)])
    return a, b


@pytest.mark.asyncio
async def test_requirements_are_summed_across_lines(db):
    a, b = await _two_milk_drinks()

    async with in_transaction() as conn:
        required = await aggregate_requirements(conn, [(a.id, 2), (b.id, 1)])

    [req] = required.values()
    assert req.name == "Milk"
    assert req.required_qty == Decimal("200")


@pytest.mark.asyncio
async def test_combined_demand_over_stock_deducts_nothing(db):
    a, b = await _two_milk_drinks()
    await set_stock("Milk", 150)

    with pytest.raises(InsufficientStockError) as excinfo:
        async with in_transaction() as conn:
            await check_and_deduct_stock(conn, [(a.id, 2), (b.id, 1)])

    assert excinfo.value.needed == 200
    assert excinfo.value.available == 150
    assert await _stock("Milk") == 150
    assert await StockMovement.filter(reason="order_deduction").count() == 0


@pytest.mark.asyncio
async def test_insufficient_stock_scenario(latte):
    with pytest.raises(InsufficientStockError) as excinfo:
        async with in_transaction() as conn:
            await check_and_deduct_stock(conn, [(latte.id, 3)])

    err = excinfo.value
    assert err.ingredient == "Milk"
    assert err.needed == 600
    assert err.available == 500
    assert err.unit == "ml"
    assert "Milk" in str(err)
    assert await _stock("Milk") == 500


@pytest.mark.asyncio
async def test_successful_deduction_scenario(latte):
    await set_stock("Milk", 700)

    async with in_transaction() as conn:
        await check_and_deduct_stock(conn, [(latte.id, 3)])

    assert await _stock("Milk") == 100
    [movement] = await StockMovement.filter(reason="order_deduction")
    assert movement.change == -600
    assert movement.meta == {"unit": "ml"}


@pytest.mark.asyncio
async def test_exact_stock_is_enough(latte):
    await set_stock("Milk", 600)

    async with in_transaction() as conn:
        await check_and_deduct_stock(conn, [(latte.id, 3)])

    assert await _stock("Milk") == 0


@pytest.mark.asyncio
async def test_one_short_ingredient_leaves_others_untouched(db):
    await upsert_ingredient("Milk", "ml")
    await upsert_ingredient("Matcha", "g")
    await set_stock("Milk", 1000)
    await set_stock("Matcha", 2)
    item = await MenuItem.create(name="Matcha Latte", base_price=Decimal("75"))
    await set_recipe(item.id, [("Milk", 200), ("Matcha", 5)])

    with pytest.raises(InsufficientStockError) as excinfo:
        async with in_transaction() as conn:
            await check_and_deduct_stock(conn, [(item.id, 1)])

    assert excinfo.value.ingredient == "Matcha"
    assert await _stock("Milk") == 1000
    assert await _stock("Matcha") == 2


@pytest.mark.asyncio
async def test_items_without_recipe_consume_nothing(db):
    water = await MenuItem.create(name="Water", base_price=Decimal("0"))

    async with in_transaction() as conn:
        required = await check_and_deduct_stock(conn, [(water.id, 10), (12345, 1)])

    assert required == {}
    assert await StockMovement.all().count() == 0


@pytest.mark.asyncio
async def test_missing_ingredient_row(latte):
    milk = await Ingredient.get(name="Milk")
    # Remove the row behind the recipe's back; the schema would otherwise restrict it
    conn = connections.get("default")
    await conn.execute_script("PRAGMA foreign_keys=OFF")
    await StockMovement.filter(ingredient_id=milk.id).delete()
    await Ingredient.filter(id=milk.id).delete()
    await conn.execute_script("PRAGMA foreign_keys=ON")

    with pytest.raises(IngredientMissingError) as excinfo:
        async with in_transaction() as tx:
            await check_and_deduct_stock(tx, [(latte.id, 1)])

    assert excinfo.value.ingredient == f"#{milk.id}"
    assert await StockMovement.all().count() == 0


@pytest.mark.asyncio
async def test_requires_transaction_handle(latte):
    with pytest.raises(TypeError):
        await check_and_deduct_stock(None, [(latte.id, 1)])
    assert await _stock("Milk") == 500


@pytest.mark.asyncio
async def test_ledger_reconciles_with_stock(latte):
    initial = await _stock("Milk")
    await add_stock("Milk", 250)
    async with in_transaction() as conn:
        await check_and_deduct_stock(conn, [(latte.id, 2)], order_id=None)
    await set_stock("Milk", 321)
    async with in_transaction() as conn:
        await check_and_deduct_stock(conn, [(latte.id, 1)])

    movements = await list_movements("Milk")
    # The fixture's own set_stock is the first movement, from a zero stock
    assert sum(m.change for m in movements) == await _stock("Milk")
    assert sum(m.change for m in movements[1:]) == await _stock("Milk") - initial
    assert await _stock("Milk") == 121
