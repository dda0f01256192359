"""
kaabhub.api.main — FastAPI application entry point
=====================================================

Run with::

    uvicorn kaabhub.api.main:app --reload --port 5000

Tests build their own app around an in-memory database::

    app = create_app(AppContext.create(config, engine=engine))
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

load_dotenv()

from kaabhub import __version__  # noqa: E402
from kaabhub.api.auth import router as auth_router  # noqa: E402
from kaabhub.api.context import AppContext  # noqa: E402
from kaabhub.api.routes.answers import router as answers_router  # noqa: E402
from kaabhub.api.routes.mentors import router as mentors_router  # noqa: E402
from kaabhub.api.routes.opportunities import router as opportunities_router  # noqa: E402
from kaabhub.api.routes.questions import router as questions_router  # noqa: E402
from kaabhub.api.routes.rooms import router as rooms_router  # noqa: E402
from kaabhub.api.routes.users import router as users_router  # noqa: E402
from kaabhub.errors import KaabError  # noqa: E402

logger = logging.getLogger(__name__)


def _cors_origins() -> list[str]:
    """Resolve allowed CORS origins from env with safe defaults.

    Priority:
      1) CORS_ALLOW_ORIGINS (comma-separated)
      2) FRONTEND_URL (single origin)
    """
    raw = os.getenv("CORS_ALLOW_ORIGINS", "").strip()
    if raw:
        return [origin.strip().rstrip("/") for origin in raw.split(",") if origin.strip()]

    frontend_url = os.getenv("FRONTEND_URL", "").strip()
    if frontend_url:
        return [frontend_url.rstrip("/")]

    return []


def _configure_logging() -> None:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )


# ---------------------------------------------------------------------------
# Error handlers: every failure body is {"message": ...}
# ---------------------------------------------------------------------------
async def _kaab_error_handler(request: Request, exc: KaabError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


async def _http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def _validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"message": "Validation failed", "errors": jsonable_encoder(exc.errors())},
    )


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"message": "Something went wrong!"})


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------
def create_app(context: AppContext | None = None) -> FastAPI:
    """Build the API.

    With *context* the app uses it as-is and never closes it.  Without one
    the lifespan creates an :class:`AppContext` at startup and closes it at
    shutdown.
    """
    _configure_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = app.state.context is None
        if owned:
            app.state.context = AppContext.create()
        logger.info(
            "KAAB HUB API started — %s (engine %s)",
            app.state.context.config.community_name,
            app.state.context.engine.url.get_backend_name(),
        )
        yield
        logger.info("KAAB HUB API shutting down")
        if owned:
            app.state.context.close()
            app.state.context = None

    app = FastAPI(
        title="KAAB HUB API",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.context = context

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(KaabError, _kaab_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)

    # Mount routers
    app.include_router(auth_router, prefix="/api")
    app.include_router(users_router, prefix="/api")
    app.include_router(questions_router, prefix="/api")
    app.include_router(answers_router, prefix="/api")
    app.include_router(opportunities_router, prefix="/api")
    app.include_router(mentors_router, prefix="/api")
    app.include_router(rooms_router, prefix="/api")

    @app.get("/api/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()
