# bookstore/main.py
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from bookstore.core.config import get_settings
from bookstore.core.errors import BookstoreError
from bookstore.database import create_db_and_tables

# Import models so SQLModel metadata is populated before create_all()
from bookstore.models import user as _user_models  # noqa: F401
from bookstore.models import catalog as _catalog_models  # noqa: F401
from bookstore.models import cart as _cart_models  # noqa: F401
from bookstore.models import order as _order_models  # noqa: F401
from bookstore.models import promotion as _promotion_models  # noqa: F401


# Routers
from bookstore.routers.admin import router as admin_router
from bookstore.routers.cart import router as cart_router
from bookstore.routers.catalog import router as catalog_router
from bookstore.routers.orders import router as orders_router

settings = get_settings()

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger("uvicorn")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
      - Verify DB connectivity and create tables.

    Shutdown:
      - No special cleanup needed for sync engine.
    """
    logger.info("Startup: connecting to database...")
    try:
        create_db_and_tables()
        logger.info("Startup: DB connection OK, tables verified.")
    except Exception as e:
        logger.error(f"Startup: DB connection FAILED: {e}")
        raise
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


# --- Error envelopes ---


@app.exception_handler(BookstoreError)
async def bookstore_error_handler(request: Request, exc: BookstoreError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(exc.to_payload(include_detail=not settings.is_production)),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "success": False,
            "message": "Invalid request",
            "code": "validation_error",
            "errors": jsonable_encoder(exc.errors()),
        },
    )


# --- CORS configuration ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API prefix, e.g. /api
app.include_router(catalog_router, prefix=settings.API_PREFIX)
app.include_router(cart_router, prefix=settings.API_PREFIX)
app.include_router(orders_router, prefix=settings.API_PREFIX)
app.include_router(admin_router, prefix=settings.API_PREFIX)


@app.get("/")
def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "bookstore-backend"}
