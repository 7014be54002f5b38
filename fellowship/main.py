"""Fellowship API - Main Application"""

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from fellowship.auth.identity import IdentityProvider
from fellowship.config import Settings, get_settings
from fellowship.errors import FellowshipError, SetupRequiredError, TransientError
from fellowship.routes import (
    auth,
    families,
    media,
    notifications,
    posts,
    requests,
    setup,
    stats,
    users,
    websocket,
)
from fellowship.services.blob_service import BlobStore
from fellowship.services.database_service import Store
from fellowship.services.setup_service import SetupService

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

VERSION = "0.1.0"

# Reachable before first-run setup
SETUP_EXEMPT_PREFIXES = ("/setup", "/health", "/docs", "/redoc", "/openapi.json")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    settings: Settings = app.state.settings
    logger.info(f"Starting {settings.app_name}...")
    Path(settings.uploads_dir).mkdir(parents=True, exist_ok=True)
    app.state.store.initialize()
    yield
    # Shutdown
    logger.info(f"Shutting down {settings.app_name}...")
    app.state.store.close()


def error_response(exc: FellowshipError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code}
    )


def register_exception_handlers(app: FastAPI):
    @app.exception_handler(FellowshipError)
    async def fellowship_exception_handler(request: Request, exc: FellowshipError):
        """Expected failures raised by services"""
        if exc.status_code >= 500:
            logger.warning(f"{request.method} {request.url.path} failed: {exc.message}")
        return error_response(exc)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Global exception handler"""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error", "code": "internal"}
        )


def register_middleware(app: FastAPI, settings: Settings):
    @app.middleware("http")
    async def require_setup(request: Request, call_next):
        """Answer 428 on every route but setup and health until the deployment is initialized"""
        if not request.url.path.startswith(SETUP_EXEMPT_PREFIXES):
            store = request.app.state.store
            setup_service = SetupService(store, request.app.state.identity, request.app.state.settings)
            if not setup_service.is_initialized():
                return error_response(SetupRequiredError("Initial setup has not been completed"))
        return await call_next(request)

    @app.middleware("http")
    async def request_timeout(request: Request, call_next):
        """Answer 503 when a request outlives ``request_timeout_seconds``.

        Only awaited work is interrupted; store calls run inline on the event loop.
        """
        try:
            return await asyncio.wait_for(call_next(request), timeout=settings.request_timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning(f"{request.method} {request.url.path} timed out")
            return error_response(TransientError("Request timed out, please retry"))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the API around one store, blob store and identity provider"""
    settings = settings or get_settings()
    if settings.debug:
        logging.getLogger("fellowship").setLevel(logging.DEBUG)

    app = FastAPI(
        title=settings.app_name,
        description="Church community API - families, posts, media and notifications",
        version=VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )

    store = Store(settings.database_path)
    app.state.settings = settings
    app.state.store = store
    app.state.identity = IdentityProvider(store)
    app.state.blobs = BlobStore(Path(settings.uploads_dir), settings.public_base_url)

    register_exception_handlers(app)
    register_middleware(app, settings)

    # Include routers
    app.include_router(setup.router, prefix="/setup", tags=["Setup"])
    app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
    app.include_router(users.router, prefix="/users", tags=["Users"])
    app.include_router(families.router, prefix="/families", tags=["Families"])
    app.include_router(posts.router, tags=["Posts"])
    app.include_router(media.router, tags=["Media"])
    app.include_router(notifications.router, tags=["Notifications"])
    app.include_router(requests.router, tags=["Requests"])
    app.include_router(stats.router, prefix="/stats", tags=["Stats"])
    app.include_router(websocket.router, tags=["Live updates"])

    app.mount(
        "/uploads",
        StaticFiles(directory=settings.uploads_dir, check_dir=False),
        name="uploads"
    )

    # Health check endpoints
    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "fellowship-api",
            "version": VERSION
        }

    return app


app = create_app()
