import pytest_asyncio
from decimal import Decimal

from cafe.core.db import init_db, close_db
from cafe.models.order import MenuItem
from cafe.services.inventory_service import upsert_ingredient, set_stock, set_recipe


@pytest_asyncio.fixture
async def db():
    """Fresh in-memory SQLite database with all tables created."""
    await init_db("sqlite://:memory:")
    yield
    await close_db()


@pytest_asyncio.fixture
async def latte(db):
    """A 'Latte' menu item consuming 200 ml of Milk per unit, with 500 ml in stock."""
    await upsert_ingredient("Milk", "ml")
    await set_stock("Milk", 500)
    item = await MenuItem.create(name="Latte", category="Coffee", base_price=Decimal("65.00"))
    await set_recipe(item.id, [("Milk", 200)])
    return item
