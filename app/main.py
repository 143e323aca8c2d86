# app/main.py
from contextlib import asynccontextmanager
import logging

from fastapi.middleware.cors import CORSMiddleware
from fastapi import FastAPI

from app.core.auth import build_ledger
from app.core.config import get_settings
from app.core.cosmic_client import close_cosmic_client
from app.database import create_db_and_tables

# Import models so SQLModel metadata is populated before create_all()
from app.models import storage as _storage_models  # noqa: F401


# Routers
from app.routers.auth import router as auth_router
from app.routers.cart import router as cart_router
from app.routers.wallet import router as wallet_router
from app.routers.purchases import router as purchases_router
from app.routers.catalog import router as catalog_router

settings = get_settings()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("uvicorn")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
      - Create the local storage table.
      - Load the ledger as one unit and expire lapsed subscriptions.

    Shutdown:
      - Close the catalog HTTP client. The ledger needs no flush;
        every mutation is already written through.
    """
    logger.info("🔄 Startup: Opening local storage...")
    try:
        create_db_and_tables()
        ledger = build_ledger(settings)
        ledger.load()
        ledger.expire_overdue()
        app.state.ledger = ledger
        logger.info("✅ Startup: Ledger loaded.")
    except Exception as e:
        logger.error(f"❌ Startup: Local storage FAILED: {e}")
        raise
    yield
    close_cosmic_client()
    logger.info("Shutdown: catalog client closed.")


app = FastAPI(
    title=settings.PROJECT_NAME or "Prompt Storefront API",
    version="0.1.0",
    lifespan=lifespan,
)


# --- CORS configuration ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Versioned API prefix, e.g. /api/v1
app.include_router(auth_router, prefix=settings.API_V1_STR)
app.include_router(cart_router, prefix=settings.API_V1_STR)
app.include_router(wallet_router, prefix=settings.API_V1_STR)
app.include_router(purchases_router, prefix=settings.API_V1_STR)
app.include_router(catalog_router, prefix=settings.API_V1_STR)


@app.get("/")
def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "prompt-storefront"}
