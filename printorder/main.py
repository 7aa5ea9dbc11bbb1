# printorder/main.py
from contextlib import asynccontextmanager
import logging

from fastapi.middleware.cors import CORSMiddleware
from fastapi import FastAPI

from printorder.core.config import get_settings
from printorder.core.exceptions import (
    OrderNotFoundError,
    OrderValidationError,
    StorageError,
    not_found_handler,
    storage_error_handler,
    validation_error_handler,
)
from printorder.core.supabase_client import create_supabase

# Routers
from printorder.routers.orders import router as orders_router

settings = get_settings()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("uvicorn")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
      - Create the Supabase client and keep it on app.state for the
        dependency chain (core/dependencies.py).

    Shutdown:
      - No special cleanup needed; the client holds no pooled DB connections.
    """
    logger.info("🔄 Startup: Creating Supabase client...")
    try:
        app.state.supabase = await create_supabase(settings)
        logger.info("✅ Startup: Supabase client ready.")
    except Exception as e:
        logger.error(f"❌ Startup: Supabase client FAILED: {e}")
        raise
    yield


app = FastAPI(
    title=settings.PROJECT_NAME or "Print Order Backend",
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

# --- Domain error mapping ---
app.add_exception_handler(OrderValidationError, validation_error_handler)
app.add_exception_handler(OrderNotFoundError, not_found_handler)
app.add_exception_handler(StorageError, storage_error_handler)

# Versioned API prefix, e.g. /api/v1
app.include_router(orders_router, prefix=settings.API_V1_STR)


@app.get("/")
def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "printorder-backend"}
