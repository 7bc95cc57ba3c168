"""
FastAPI application factory and entry point.

create_app() builds and configures the application:
  1. Settings — constructed once (or passed in) and attached to app.state
  2. Shared services — database engine, session factory, password hasher
     and token service, all derived from the settings and stored on
     app.state for the dependencies in book_api.dependencies
  3. Lifespan manager — creates tables on startup, disposes the engine on
     shutdown
  4. CORS middleware, exception handlers and routers

Running locally:
    uvicorn book_api.main:create_app --factory --reload

or, using HOST/PORT from the settings:
    python -m book_api
"""

from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from book_api import models  # noqa: F401  (registers every table on Base.metadata)
from book_api.config import Settings
from book_api.database import Base, build_engine, build_sessionmaker
from book_api.exceptions import register_exception_handlers
from book_api.logging_config import get_logger, setup_logging
from book_api.routers import admin, auth, books
from book_api.security import PasswordHasher, TokenService

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Startup:
      Creates all database tables if they don't exist.

    Shutdown:
      Disposes of the database engine, closing all connections cleanly.
    """
    engine = app.state.engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("app_started", database=engine.url.render_as_string(hide_password=True))
    yield
    await engine.dispose()
    logger.info("app_stopped")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application from ``settings`` (read from the environment if omitted)."""
    if settings is None:
        settings = Settings()

    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Book catalog REST API with token authentication and admin-only mutations",
        lifespan=lifespan,
    )

    engine = build_engine(settings)
    app.state.settings = settings
    app.state.engine = engine
    app.state.sessionmaker = build_sessionmaker(engine)
    app.state.password_hasher = PasswordHasher(time_cost=settings.PASSWORD_HASH_TIME_COST)
    app.state.token_service = TokenService(
        secret_key=settings.SECRET_KEY,
        algorithm=settings.ALGORITHM,
        ttl=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )

    # ---------------------------------------------------------------------------
    # Middleware
    # ---------------------------------------------------------------------------

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ---------------------------------------------------------------------------
    # Exception handlers
    # ---------------------------------------------------------------------------

    register_exception_handlers(app)

    # ---------------------------------------------------------------------------
    # Routers
    # ---------------------------------------------------------------------------

    prefix = settings.API_PREFIX.rstrip("/")
    app.include_router(auth.router, prefix=prefix, tags=["Auth"])
    app.include_router(admin.router, prefix=f"{prefix}/admin", tags=["Admin"])
    app.include_router(books.router, prefix=f"{prefix}/books", tags=["Books"])

    @app.get(prefix or "/", tags=["Index"])
    async def api_index():
        """List the available endpoints."""
        return {
            "success": True,
            "message": f"{settings.APP_NAME} is running!",
            "endpoints": {
                "register": f"POST {prefix}/register",
                "login": f"POST {prefix}/login",
                "profile": f"GET {prefix}/profile",
                "changePassword": f"PUT {prefix}/admin/change-password",
                "getAll": f"GET {prefix}/books",
                "getOne": f"GET {prefix}/books/:id",
                "create": f"POST {prefix}/books",
                "update": f"PUT {prefix}/books/:id",
                "delete": f"DELETE {prefix}/books/:id",
                "search": f"GET {prefix}/books/search/:query",
            },
        }

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint for deployment probes."""
        return {"status": "ok", "version": settings.APP_VERSION}

    return app
