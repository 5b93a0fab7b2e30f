# storefront/main.py
from contextlib import asynccontextmanager
import logging

from fastapi.middleware.cors import CORSMiddleware
from fastapi import FastAPI

from storefront.core.cart_session import CartSessions
from storefront.core.config import get_settings
from storefront.database import create_db_and_tables, engine

# Import models so SQLModel metadata is populated before create_all()
from storefront.models import cart as _cart_models  # noqa: F401
from storefront.repositories.cart_repo import SqlCartSlot

# Routers
from storefront.routers.addresses import router as addresses_router
from storefront.routers.cart import router as cart_router
from storefront.routers.orders import router as orders_router

settings = get_settings()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("uvicorn")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
      - Verify DB connectivity and create the cart snapshot table.
      - Open the session registry that owns every live cart.

    Shutdown:
      - Tear down all live carts (snapshots stay persisted).
    """
    logger.info("🔄 Startup: Connecting to cart database...")
    try:
        create_db_and_tables()
        logger.info("✅ Startup: DB connection OK, tables verified.")
    except Exception as e:
        logger.error(f"❌ Startup: DB connection FAILED: {e}")
        raise

    app.state.cart_sessions = CartSessions(
        SqlCartSlot(engine),
        prefix=settings.CART_SLOT_PREFIX,
        idle_seconds=settings.CART_SESSION_IDLE_SECONDS,
        max_sessions=settings.CART_MAX_SESSIONS,
    )
    yield

    logger.info(f"Shutdown: closing {len(app.state.cart_sessions)} cart session(s)")
    app.state.cart_sessions.close_all()


app = FastAPI(
    title=settings.PROJECT_NAME or "Food Storefront API",
    version="0.1.0",
    lifespan=lifespan,
)


# --- CORS configuration ---
# Credentials are allowed so the cart_session cookie reaches the API.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Versioned API prefix, e.g. /api/v1
app.include_router(cart_router, prefix=settings.API_V1_STR)
app.include_router(orders_router, prefix=settings.API_V1_STR)
app.include_router(addresses_router, prefix=settings.API_V1_STR)


@app.get("/")
def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "storefront-cart"}
