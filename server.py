"""NextDNS dashboard proxy - keeps the NextDNS API key on the server."""

import logging
import os
import platform
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

import config
from nextdns_client import NextDNSClient, UpstreamError
from routers import lists, profiles, reports

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def create_nextdns_client() -> NextDNSClient:
    """Build the NextDNS client from startup configuration.

    A missing API key is logged but does not stop startup.
    """
    if not config.NEXTDNS_API_KEY:
        logger.error("NEXTDNS_API_KEY is not configured - NextDNS calls will be rejected upstream")
    return NextDNSClient(
        config.NEXTDNS_API_KEY,
        base_url=config.NEXTDNS_API_BASE,
        timeout=config.NEXTDNS_TIMEOUT,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup: one shared NextDNS client (connection pooling)
    app.state.nextdns_client = create_nextdns_client()
    logger.info(f"NextDNS proxy started, upstream: {config.NEXTDNS_API_BASE}")
    yield
    # Shutdown: close upstream connections
    await app.state.nextdns_client.aclose()


app = FastAPI(
    title="NextDNS Dashboard Proxy",
    description="Server-side proxy for managing a NextDNS profile without exposing the API key",
    version="1.0.0",
    lifespan=lifespan,
)


def configure_cors(app: FastAPI) -> None:
    """Configure CORS middleware based on environment settings.

    Security rules:
    - If specific origins are configured, use them with optional credentials
    - If CORS_ALLOW_ALL is true, allow all origins but DISABLE credentials
    - If neither is set, CORS is effectively disabled (no origins allowed)
    """
    origins: list[str] = []
    allow_credentials = False

    if config.CORS_ORIGINS:
        origins = [o.strip() for o in config.CORS_ORIGINS.split(",") if o.strip()]
        allow_credentials = config.CORS_ALLOW_CREDENTIALS
        logger.info(f"CORS configured with specific origins: {origins}, credentials: {allow_credentials}")
    elif config.CORS_ALLOW_ALL:
        # Wildcard + credentials is invalid CORS
        origins = ["*"]
        allow_credentials = False
        logger.warning(
            "CORS configured to allow ALL origins (development mode). "
            "Credentials are DISABLED. Set CORS_ORIGINS for production use."
        )
    else:
        logger.info("CORS not configured - cross-origin requests will be blocked")
        return

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def error_response(status_code: int, message: str, headers: dict = None) -> JSONResponse:
    """Build the `{error: true, message}` body shared by every failure."""
    return JSONResponse(status_code=status_code, content={"error": True, "message": message}, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """Map every failure to an `{error: true, message}` response."""

    @app.exception_handler(UpstreamError)
    async def upstream_error_handler(request: Request, exc: UpstreamError):
        logger.warning(f"[API] {request.method} {request.url.path} failed upstream: {exc.message}")
        return error_response(exc.status_code or 500, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
        return error_response(400, message)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error(f"[API] {request.method} {request.url.path} failed: {exc}", exc_info=exc)
        return error_response(500, "Internal server error")


def include_routers(app: FastAPI) -> None:
    """Mount the browser-facing API under /api."""
    app.include_router(profiles.router, prefix="/api")
    app.include_router(lists.router, prefix="/api")
    app.include_router(reports.router, prefix="/api")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to add security headers to all responses."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        # Prevent MIME type sniffing
        response.headers["X-Content-Type-Options"] = "nosniff"
        # Prevent clickjacking
        response.headers["X-Frame-Options"] = "DENY"
        # Control referrer information leakage
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response


configure_cors(app)
app.add_middleware(SecurityHeadersMiddleware)
register_exception_handlers(app)
include_routers(app)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "ok"}


def get_server_version() -> str:
    """Get server version from VERSION file, optionally with git hash suffix."""
    try:
        with open(os.path.join(os.path.dirname(os.path.abspath(__file__)), "VERSION")) as f:
            base_version = f.read().strip()
    except FileNotFoundError:
        base_version = "unknown"

    git_hash = os.environ.get("GIT_VERSION", "")
    return f"{base_version}-{git_hash}" if git_hash else base_version


@app.get("/info")
async def info(request: Request):
    """Server info with dependency versions. Never includes the API key."""
    import importlib.metadata

    packages = {}
    for pkg in ["fastapi", "uvicorn", "httpx", "pydantic"]:
        try:
            packages[pkg] = importlib.metadata.version(pkg)
        except importlib.metadata.PackageNotFoundError:
            packages[pkg] = "not installed"

    client = getattr(request.app.state, "nextdns_client", None)

    return {
        "name": "NextDNS Dashboard Proxy",
        "version": get_server_version(),
        "python": sys.version.split()[0],
        "platform": platform.platform(),
        "packages": packages,
        "config": {
            "nextdns_api_base": client.base_url if client else config.NEXTDNS_API_BASE,
            "nextdns_api_key_configured": client.has_api_key if client else bool(config.NEXTDNS_API_KEY),
            "nextdns_timeout": config.NEXTDNS_TIMEOUT,
        },
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("server:app", host=config.HOST, port=config.PORT, reload=config.DEBUG)
