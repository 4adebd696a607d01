"""FastAPI application entry point."""

import logging
import os

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from english_hub.api.routes import router
from english_hub.config import Settings
from english_hub.content.generator import ContentGenerator
from english_hub.content.vocabulary import load_vocabulary
from english_hub.storage.blob import JsonFileBlobStore
from english_hub.storage.progress_store import ProgressStore

# Configure structlog based on environment
is_production = os.getenv("ENV", "development").lower() == "production"

if is_production:
    # Production: JSON format for machine parsing
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.INFO),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
else:
    # Development: console format for human readability
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

logger = structlog.get_logger()


def create_app(settings: Settings) -> FastAPI:
    """Build the app with its single progress store and content generator."""
    app = FastAPI(title="English Learning Hub", version="0.1.0")

    store = ProgressStore(JsonFileBlobStore(settings.progress_dir), key=settings.storage_key)
    data = store.load()
    logger.info("progress_loaded", level=data.level, xp=data.xp, streak=data.login_streak)
    app.state.progress_store = store

    if settings.openai_api_key:
        app.state.content_generator = ContentGenerator(
            api_key=settings.openai_api_key,
            model=settings.generation_model,
            feedback_model=settings.feedback_model,
            timeout=settings.generation_timeout_seconds,
        )
    else:
        logger.warning("content_generation_disabled", reason="OPENAI_API_KEY not set")
        app.state.content_generator = None

    try:
        app.state.vocabulary = load_vocabulary(settings.vocabulary_path)
    except FileNotFoundError:
        logger.warning("vocabulary_missing", path=str(settings.vocabulary_path))
        app.state.vocabulary = {}

    allowed_origins_env = os.getenv(
        "ALLOWED_ORIGINS", "http://localhost:8000,http://127.0.0.1:8000"
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in allowed_origins_env.split(",")],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router)

    @app.middleware("http")
    async def auth_middleware(request: Request, call_next):
        """Optional APP_SECRET authentication middleware."""
        if not settings.app_secret or request.url.path == "/api/health":
            return await call_next(request)
        if request.headers.get("X-App-Secret", "") != settings.app_secret:
            return JSONResponse({"error": "Unauthorized"}, status_code=401)
        return await call_next(request)

    return app


settings = Settings()
app = create_app(settings)


def main() -> None:
    """Run the application."""
    uvicorn.run(
        "english_hub.main:app",
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level="info",
    )


if __name__ == "__main__":
    main()
