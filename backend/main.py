import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from core.config import settings
from core.errors import AppError
from core.gate import AuthGateMiddleware
from db.database import create_db_and_tables
from routers.auth import router as auth_router
from routers.categories import router as categories_router
from routers.items import router as items_router
from routers.locations import router as locations_router
from routers.settings import router as settings_router
from routers.suppliers import router as suppliers_router
from routers.transactions import router as transactions_router
from routers.users import router as users_router

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    await create_db_and_tables()
    yield


app = FastAPI(
    title="Stock Tracker API",
    description="Inventory tracking: items, stock adjustments, batches and audit log",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Added first so CORS (added last) wraps it and also decorates 401s.
app.add_middleware(AuthGateMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(exc.to_body(), status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = [
        {
            "field": ".".join(str(p) for p in err.get("loc", ())[1:]),
            "message": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    return JSONResponse({"error": "Validation error", "details": details}, status_code=status.HTTP_400_BAD_REQUEST)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse({"error": "Internal server error"}, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


@app.get("/health", tags=["health"])
async def health():
    return {"status": "ok"}


# Authentication routes
app.include_router(auth_router, prefix="/api/auth", tags=["auth"])

# Inventory routes
app.include_router(items_router, prefix="/api/items", tags=["items"])
app.include_router(transactions_router, prefix="/api/transactions", tags=["transactions"])

# Reference data / admin routes
app.include_router(categories_router, prefix="/api/categories", tags=["categories"])
app.include_router(suppliers_router, prefix="/api/suppliers", tags=["suppliers"])
app.include_router(locations_router, prefix="/api/locations", tags=["locations"])
app.include_router(settings_router, prefix="/api/settings", tags=["settings"])
app.include_router(users_router, prefix="/api/users", tags=["users"])

if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
