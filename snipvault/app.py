"""FastAPI application factory."""

import logging
import time
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from .config import settings
from .api.router import api_router
from .errors import InvalidStateError, SnippetNotFoundError
from .services.snippet_manager import snippet_manager

# Configure logging for our modules
logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(name)s: %(message)s")
logging.getLogger("snipvault").setLevel(logging.DEBUG)

logger = logging.getLogger(__name__)


class RequestLogMiddleware(BaseHTTPMiddleware):
    """Log method, path, status and duration of every request."""
    async def dispatch(self, request: Request, call_next):
        started = time.monotonic()
        response = await call_next(request)
        elapsed_ms = (time.monotonic() - started) * 1000
        logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f} ms)")
        return response


async def _not_found_handler(request: Request, exc: SnippetNotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc), "error": "not_found"})


async def _invalid_state_handler(request: Request, exc: InvalidStateError):
    # The HTTP contract folds wrong-state into 404; "error" tells them apart.
    return JSONResponse(status_code=404, content={"detail": str(exc), "error": "invalid_state"})


async def _unhandled_handler(request: Request, exc: Exception):
    logger.exception(f"Error in {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def create_app(database_url: Optional[str] = None) -> FastAPI:
    snippet_manager.configure(database_url or settings.database_url)

    app = FastAPI(
        title="snipvault",
        version="0.1.0",
        description="Snippet library with filtered, paginated listing and a recycle bin",
    )

    app.add_middleware(RequestLogMiddleware)
    app.add_exception_handler(SnippetNotFoundError, _not_found_handler)
    app.add_exception_handler(InvalidStateError, _invalid_state_handler)
    app.add_exception_handler(Exception, _unhandled_handler)
    app.include_router(api_router, prefix="/api")

    return app
