"""FastAPI application for the GitHub digest relay."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from ..config import Config, load_config
from ..db import SubscriberStore
from ..digest.sender import SmtpMailer
from ..dispatch import DigestDispatcher
from ..errors import DigestError
from ..sources.github import GitHubEventSource
from .routes import api

logger = logging.getLogger(__name__)


async def _http_error(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


async def _bad_request(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": "Invalid request"})


async def _server_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"error": "Server error"})


def create_app(
    config: Config | None = None,
    *,
    source=None,
    store=None,
    mailer=None,
) -> FastAPI:
    """Create the app, wiring adapters built from config unless given."""
    config = config or load_config()
    source = source or GitHubEventSource.from_config(config)
    store = store or SubscriberStore.from_config(config)
    mailer = mailer or SmtpMailer.from_config(config)

    dispatcher = DigestDispatcher(source, store, mailer, max_concurrent_sends=config.max_concurrent_sends)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        dispatcher.close()
        source.close()
        store.close()
        logger.info("Closed feed, store and dispatch clients")

    app = FastAPI(
        title="GitHub Digest",
        description="Email signups and digests of recent public GitHub events",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.config = config
    app.state.store = store
    app.state.dispatcher = dispatcher

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(HTTPException, _http_error)
    app.add_exception_handler(RequestValidationError, _bad_request)
    # Handlers keyed on Exception run outside CORSMiddleware
    app.add_exception_handler(DigestError, _server_error)
    app.add_exception_handler(Exception, _server_error)

    app.include_router(api.router, prefix="/api", tags=["api"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "service": "github-digest"}

    return app
