import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from byteletters.api.deps import get_settings
from byteletters.domain.errors import StoreUnavailable, StoreWriteConflict

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    # Fail fast on bad configuration, honouring overrides installed before startup
    settings = app.dependency_overrides.get(get_settings, get_settings)()
    logger.info("Serving users from %s", settings.db_path)
    yield


app = FastAPI(
    title="ByteLetters API",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- Routers ---
from byteletters.api.routes import admin_users, auth  # noqa: E402

app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(admin_users.router, prefix="/api/admin/users", tags=["Admin Users"])


# CORS (Allow extension and landing page)
origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_origin_regex=r"chrome-extension://.*",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StoreUnavailable)
async def store_unavailable_handler(request: Request, exc: StoreUnavailable) -> JSONResponse:
    logger.error("User store unavailable on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=503, content={"detail": "User store unavailable"})


@app.exception_handler(StoreWriteConflict)
async def store_conflict_handler(request: Request, exc: StoreWriteConflict) -> JSONResponse:
    # Lost a race against a concurrent write to the same unique column
    logger.warning("Write conflict on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=409, content={"detail": "Email already registered"})


@app.get("/health")
def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "service": "api"}
