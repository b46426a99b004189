"""FastAPI application serving the static front-end"""

import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from money_tracker import __version__
from money_tracker.config import Settings, get_settings
from money_tracker.core.exceptions import AppException
from money_tracker.core.logging_config import setup_logging

logger = logging.getLogger(__name__)


def _page(static_dir: Path, filename: str) -> FileResponse:
    path = static_dir / filename
    if not path.is_file():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{filename} not found")
    return FileResponse(path, media_type="text/html")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the static file server.

    `/` and `/login` map to the index and login pages; every other path is
    served from the static directory.

    Args:
        settings: Settings to use (defaults to the cached environment settings)

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level)
    static_dir = Path(settings.static_dir).resolve()

    app = FastAPI(
        title=settings.app_name,
        debug=settings.debug,
        version=__version__,
        description="Static front-end server for the Money Tracker",
        docs_url=None,
        redoc_url=None,
    )

    # Add CORS middleware
    allowed_origins = [origin.strip() for origin in settings.allowed_origins if origin.strip()]
    if allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=allowed_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # Exception handlers
    @app.exception_handler(AppException)
    async def app_exception_handler(request: Request, exc: AppException):
        """Handle custom application exceptions"""
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": {
                    "message": exc.message,
                    "type": exc.error_type,
                    "path": str(request.url.path),
                }
            },
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle all other exceptions"""
        logger.exception("Unhandled exception on %s", request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {"message": "Internal server error", "type": "InternalServerError"}
            },
        )

    @app.get("/", include_in_schema=False)
    async def index():
        """Main dashboard page"""
        return _page(static_dir, settings.index_file)

    @app.get(settings.login_path, include_in_schema=False)
    async def login_page():
        """Login page"""
        return _page(static_dir, settings.login_file)

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint"""
        return {"status": "healthy"}

    @app.get("/config.json", tags=["Config"])
    async def client_config():
        """Backend location for front-ends that call the API directly"""
        return {
            "apiBaseUrl": settings.resolved_api_url,
            "loginPath": settings.login_path,
            "currencySymbol": settings.currency_symbol,
        }

    # Must stay last: the mount matches every path
    app.mount("/", StaticFiles(directory=str(static_dir)), name="static")

    logger.info("Serving %s", static_dir)
    return app


app = create_app()
