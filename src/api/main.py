"""
FastAPI application factory.
Creates the app with CORS, the configured Google authorization provider,
the save orchestrator, and router registration.
Swagger UI available at /docs, ReDoc at /redoc.
"""
import sys
from pathlib import Path
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Ensure src/ is on the path
_src_dir = str(Path(__file__).parent.parent)
if _src_dir not in sys.path:
    sys.path.insert(0, _src_dir)

from repair.errors import RepairRecorderError


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown logic for the FastAPI app."""
    settings = app.state.settings
    logger = app.state.logger
    logger.info(
        f"Repair Recorder API starting on port {settings.api_port} "
        f"(auth mode: {settings.auth_mode}, environment: {settings.runtime_environment})",
        component="API",
    )
    logger.info(f"Swagger UI: http://localhost:{settings.api_port}/docs", component="API")

    yield

    logger.info("Shutting down API server", component="API")


def create_app(settings=None, provider=None, orchestrator=None, logger=None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: config.Settings; built from the environment when omitted.
        provider: AuthorizedClientProvider; built from settings when omitted.
        orchestrator: RepairSaveOrchestrator; built from settings when omitted.
        logger: RepairLogger; the global logger when omitted.
    """
    import config
    from auth_providers import SessionCookieSigner, SessionStore, build_provider
    from repair.save_orchestrator import RepairSaveOrchestrator
    from utils.logger import get_logger

    settings = settings or config.build_settings()
    logger = logger or get_logger(
        log_level=settings.log_level,
        log_dir=settings.log_folder,
        max_mb=settings.log_file_max_mb,
        backup_count=settings.log_file_backup_count,
    )

    session_store = None
    cookie_signer = None
    if settings.auth_mode == "session":
        session_store = SessionStore(ttl_minutes=settings.session_ttl_minutes)
        cookie_signer = SessionCookieSigner(settings.session_secret, expiry_minutes=settings.session_ttl_minutes)

    provider = provider or build_provider(settings, session_store)
    if session_store is None:
        session_store = getattr(provider, "session_store", None)
    orchestrator = orchestrator or RepairSaveOrchestrator(settings, provider, logger=logger)

    app = FastAPI(
        title="Substation Repair Recorder API",
        description=(
            "Records substation equipment-repair reports: appends a row to the "
            "shared Google Sheet and files the scanned document in a "
            "per-substation Google Drive folder."
        ),
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.logger = logger
    app.state.provider = provider
    app.state.orchestrator = orchestrator
    app.state.session_store = session_store
    app.state.cookie_signer = cookie_signer

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RepairRecorderError)
    async def repair_error_handler(request: Request, exc: RepairRecorderError):
        logger.error(f"{type(exc).__name__} on {request.url.path}: {exc}", component="API")
        return JSONResponse(status_code=500, content={"error": str(exc)})

    # Register routers
    from api.routes.repair_routes import router as repair_router
    from api.routes.auth_routes import router as auth_router
    from api.routes.health_routes import router as health_router

    app.include_router(repair_router, prefix="/api/repair", tags=["Repair"])
    app.include_router(auth_router, prefix="/api/auth", tags=["Authentication"])
    app.include_router(health_router, prefix="/api/health", tags=["Health"])

    return app
