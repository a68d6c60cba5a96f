import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, status
from cafe.core.db import init_db, close_db
from cafe.api.v1.orders import router as orders_router
from cafe.api.v1.inventory import router as inventory_router
from cafe.api.v1.menu import router as menu_router
from cafe.core.config import PROJECT_NAME, VERSION, LOG_LEVEL, LOG_FORMAT
from cafe.core.exception_handlers import setup_exception_handlers

logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)
log = logging.getLogger("cafe")

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handles startup and shutdown events."""
    log.info(f"Starting {PROJECT_NAME} v{VERSION}...")
    await init_db() # Connect to DB and generate schemas
    yield
    await close_db()
    log.info(f"{PROJECT_NAME} stopped.")

app = FastAPI(
    title=PROJECT_NAME,
    version=VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)

# Include routers for modular API structure
app.include_router(menu_router, prefix="/api/v1/menu", tags=["Menu"])
app.include_router(orders_router, prefix="/api/v1/orders", tags=["Order Management"])
app.include_router(inventory_router, prefix="/api/v1/inventory", tags=["Inventory"])


setup_exception_handlers(app)

@app.get("/health", status_code=status.HTTP_200_OK)
async def health_check():
    """Simple health check endpoint."""
    return {"status": "ok", "app_name": PROJECT_NAME}
