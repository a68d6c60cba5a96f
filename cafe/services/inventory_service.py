"""
Ingredient stock, recipes and the stock reservation performed for each order.

Stock rows are only ever protected by database row locks
(``SELECT ... FOR UPDATE``); nothing here keeps in-process state, so several
app instances can share one database safely.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from tortoise.backends.base.client import BaseDBAsyncClient
from tortoise.transactions import in_transaction

from cafe.core.errors import (
    IngredientMissingError,
    InsufficientStockError,
    InvalidRecipeError,
    InvalidStockError,
    NotFoundError,
)
from cafe.models.inventory import Ingredient, MenuIngredient, StockMovement
from cafe.models.order import MenuItem

log = logging.getLogger("cafe.inventory")

# Tolerance when comparing stock against demand
STOCK_EPSILON = Decimal("1e-9")
# Quantities are stored with three decimal places
STOCK_QUANT = Decimal("0.001")

REASON_SET_STOCK = "set_stock"
REASON_ADD_STOCK = "add_stock"
REASON_ORDER_DEDUCTION = "order_deduction"


@dataclass
class RecipeLine:
    ingredient_id: int
    name: str
    unit: str
    quantity_per_unit: Decimal


@dataclass
class Requirement:
    name: str
    unit: str
    required_qty: Decimal


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _stock_quantity(value: Any) -> Decimal:
    """Converts ``value`` to a finite Decimal rounded the way the stock columns store it."""
    try:
        qty = _to_decimal(value)
        if qty.is_finite():
            return qty.quantize(STOCK_QUANT)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidStockError(f"Stock quantity {value!r} is not a number")
    raise InvalidStockError(f"Stock quantity must be finite, got {value!r}")


# --- Ingredient registry ---

async def upsert_ingredient(name: str, unit: str) -> Ingredient:
    """Creates the ingredient with zero stock, or updates the unit of an existing one."""
    async with in_transaction() as conn:
        ingredient = await Ingredient.filter(name=name).using_db(conn).select_for_update().first()
        if ingredient is None:
            ingredient = await Ingredient.create(name=name, unit=unit, stock=Decimal("0"), using_db=conn)
            log.info(f"Ingredient '{name}' created ({unit}).")
        elif ingredient.unit != unit:
            ingredient.unit = unit
            await ingredient.save(update_fields=["unit", "updated_at"], using_db=conn)
    return ingredient


async def _lock_by_name(name: str, conn: BaseDBAsyncClient) -> Ingredient:
    ingredient = await Ingredient.filter(name=name).using_db(conn).select_for_update().first()
    if ingredient is None:
        raise NotFoundError(f"Ingredient not found: {name}")
    return ingredient


async def set_stock(name: str, quantity: Any) -> Ingredient:
    """Sets the absolute stock level and records the difference in the ledger."""
    target = _stock_quantity(quantity)
    if target < 0:
        raise InvalidStockError(f"Stock of '{name}' cannot be set below zero, got {target:f}")
    async with in_transaction() as conn:
        ingredient = await _lock_by_name(name, conn)
        delta = target - ingredient.stock
        ingredient.stock = target
        await ingredient.save(update_fields=["stock", "updated_at"], using_db=conn)
        await StockMovement.create(
            ingredient_id=ingredient.id, change=delta, reason=REASON_SET_STOCK, using_db=conn
        )
    log.info(f"Stock of '{name}' set to {target} (delta {delta}).")
    return ingredient


async def add_stock(name: str, quantity: Any, reason: str = REASON_ADD_STOCK) -> Ingredient:
    """
    Adds ``quantity`` to the current stock. A negative quantity is accepted
    for manual corrections as long as the stock stays at or above zero.
    """
    change = _stock_quantity(quantity)
    async with in_transaction() as conn:
        ingredient = await _lock_by_name(name, conn)
        if ingredient.stock + change < 0:
            raise InvalidStockError(
                f"Correction of {change:f} would leave '{name}' below zero (have {ingredient.stock:f})"
            )
        ingredient.stock = ingredient.stock + change
        await ingredient.save(update_fields=["stock", "updated_at"], using_db=conn)
        await StockMovement.create(
            ingredient_id=ingredient.id, change=change, reason=reason, using_db=conn
        )
    log.info(f"Stock of '{name}' changed by {change} ({reason}).")
    return ingredient


async def list_ingredients() -> List[Ingredient]:
    return await Ingredient.all().order_by("name")


async def list_movements(name: str, limit: int = 100) -> List[StockMovement]:
    """Returns the ledger of one ingredient, oldest first."""
    ingredient = await Ingredient.get_or_none(name=name)
    if ingredient is None:
        raise NotFoundError(f"Ingredient not found: {name}")
    return await StockMovement.filter(ingredient_id=ingredient.id).order_by("id").limit(limit)


# --- Recipe registry ---

def _validate_recipe_entries(entries: Iterable[Tuple[str, Any]]) -> List[Tuple[str, Decimal]]:
    validated = []
    for index, (name, quantity) in enumerate(entries):
        if not name or not str(name).strip():
            raise InvalidRecipeError(index, name, "ingredient name is required")
        try:
            qty = _stock_quantity(quantity)
        except InvalidStockError as e:
            raise InvalidRecipeError(index, name, e.message)
        # Anything that rounds to zero in storage would consume nothing
        if qty <= 0:
            raise InvalidRecipeError(index, name, f"quantity must be at least {STOCK_QUANT}, got {quantity!r}")
        validated.append((name, qty))
    return validated


async def set_recipe(menu_item_id: int, entries: Iterable[Tuple[str, Any]]) -> None:
    """
    Sets the quantity-per-unit of each (ingredient_name, quantity) pair for a
    menu item, replacing any previous quantity for that pair. Every entry is
    checked before anything is written; one bad entry rejects the whole call.
    """
    validated = _validate_recipe_entries(entries)

    async with in_transaction() as conn:
        if not await MenuItem.filter(id=menu_item_id).using_db(conn).exists():
            raise NotFoundError(f"Menu item not found: {menu_item_id}")

        resolved = []
        for index, (name, qty) in enumerate(validated):
            ingredient = await Ingredient.get_or_none(name=name).using_db(conn)
            if ingredient is None:
                raise InvalidRecipeError(index, name, "ingredient does not exist")
            resolved.append((ingredient, qty))

        for ingredient, qty in resolved:
            row = await MenuIngredient.get_or_none(
                menu_item_id=menu_item_id, ingredient_id=ingredient.id
            ).using_db(conn)
            if row is None:
                await MenuIngredient.create(
                    menu_item_id=menu_item_id,
                    ingredient_id=ingredient.id,
                    quantity_per_unit=qty,
                    using_db=conn,
                )
            else:
                row.quantity_per_unit = qty
                await row.save(update_fields=["quantity_per_unit"], using_db=conn)

    log.info(f"Recipe for menu item {menu_item_id} set ({len(validated)} entries).")


async def get_recipe(menu_item_id: int, conn: Optional[BaseDBAsyncClient] = None) -> List[RecipeLine]:
    """Recipe rows for a menu item; empty when the item consumes no ingredients."""
    query = MenuIngredient.filter(menu_item_id=menu_item_id)
    if conn is not None:
        query = query.using_db(conn)
    rows = await query.order_by("ingredient__name").values(
        "ingredient_id", "ingredient__name", "ingredient__unit", "quantity_per_unit"
    )
    return [
        RecipeLine(
            ingredient_id=r["ingredient_id"],
            name=r["ingredient__name"],
            unit=r["ingredient__unit"],
            quantity_per_unit=_to_decimal(r["quantity_per_unit"]),
        )
        for r in rows
    ]


# --- Stock reservation ---

async def aggregate_requirements(
    conn: BaseDBAsyncClient, items: Sequence[Tuple[int, int]]
) -> Dict[int, Requirement]:
    """
    Expands (menu_item_id, quantity) pairs into total demand per ingredient id.
    Demand for the same ingredient from different lines is summed.
    """
    required: Dict[int, Requirement] = {}
    for menu_item_id, quantity in items:
        for line in await get_recipe(menu_item_id, conn=conn):
            needed = line.quantity_per_unit * _to_decimal(quantity)
            if line.ingredient_id not in required:
                required[line.ingredient_id] = Requirement(line.name, line.unit, Decimal("0"))
            required[line.ingredient_id].required_qty += needed
    return required


async def check_and_deduct_stock(
    conn: BaseDBAsyncClient,
    items: Sequence[Tuple[int, int]],
    order_id: Optional[int] = None,
) -> Dict[int, Requirement]:
    """
    Reserves the ingredients for one order inside the caller's transaction.

    ``conn`` must be the client yielded by ``in_transaction()``; this function
    never commits or rolls back. Rows are locked in ascending id order, every
    ingredient is validated before any is deducted, and each deduction writes
    one ``order_deduction`` ledger row. Any error leaves the rollback to the
    caller.
    """
    if conn is None:
        raise TypeError("check_and_deduct_stock must be called with an open transaction")

    required = await aggregate_requirements(conn, items)
    if not required:
        return required

    locked = await (
        Ingredient.filter(id__in=list(required.keys()))
        .using_db(conn)
        .select_for_update()
        .order_by("id")
    )
    by_id = {ing.id: ing for ing in locked}

    for ingredient_id, req in required.items():
        ingredient = by_id.get(ingredient_id)
        if ingredient is None:
            # The recipe row outlived its ingredient, so there is no name to report
            raise IngredientMissingError(req.name or f"#{ingredient_id}")
        if ingredient.stock < req.required_qty - STOCK_EPSILON:
            raise InsufficientStockError(req.name, req.required_qty, ingredient.stock, req.unit)

    for ingredient_id, req in required.items():
        ingredient = by_id[ingredient_id]
        ingredient.stock = ingredient.stock - req.required_qty
        await ingredient.save(update_fields=["stock", "updated_at"], using_db=conn)
        await StockMovement.create(
            ingredient_id=ingredient_id,
            change=-req.required_qty,
            reason=REASON_ORDER_DEDUCTION,
            order_id=order_id,
            meta={"unit": req.unit},
            using_db=conn,
        )

    log.info(f"Deducted {len(required)} ingredient(s) for order {order_id}.")
    return required
