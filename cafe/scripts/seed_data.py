# cafe/scripts/seed_data.py
import asyncio
import logging
from decimal import Decimal
from cafe.core.config import LOG_FORMAT
from cafe.core.db import init_db, close_db
from cafe.models.order import MenuItem
from cafe.services.inventory_service import upsert_ingredient, set_stock, set_recipe

log = logging.getLogger("seed_data")

INGREDIENTS = [
    # name, unit, stock
    ("Milk", "ml", 5000),
    ("Espresso", "shot", 200),
    ("Matcha", "g", 500),
    ("Sugar Syrup", "ml", 1000),
]

MENU = [
    # name, category, price, recipe
    ("Latte", "Coffee", "65.00", [("Espresso", 1), ("Milk", 200)]),
    ("Cappuccino", "Coffee", "60.00", [("Espresso", 1), ("Milk", 150)]),
    ("Matcha Latte", "Tea", "75.00", [("Matcha", 5), ("Milk", 200), ("Sugar Syrup", 15)]),
]


async def seed():
    for name, unit, stock in INGREDIENTS:
        await upsert_ingredient(name, unit)
        # set_stock is idempotent and leaves a ledger row per run
        await set_stock(name, stock)
    log.info(f"{len(INGREDIENTS)} ingredients seeded.")

    for name, category, price, recipe in MENU:
        item, _ = await MenuItem.get_or_create(
            name=name, defaults={"category": category, "base_price": Decimal(price), "active": True}
        )
        await set_recipe(item.id, recipe)
        log.info(f"Menu item {item.id}: {name}")


async def main():
    await init_db()
    try:
        await seed()
    finally:
        await close_db()

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    asyncio.run(main())
