import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api import admin, feedback
from .config.settings import Settings, get_settings
from .exceptions import FeedbackError
from .middleware.origin import OriginAllowListMiddleware
from .models.database import Base, build_engine, build_session_factory
from .services.store import FeedbackStore
from .utils.upload_client import CloudinaryUploadClient

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    engine: Optional[Engine] = None,
    upload_client: Optional[CloudinaryUploadClient] = None,
) -> FastAPI:
    """
    Build the feedback API.

    The database engine and upload client are created in the lifespan unless
    supplied. Startup fails if the database cannot be reached.
    """
    settings = settings or get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        db_engine = engine or build_engine(settings)
        store = FeedbackStore(build_session_factory(db_engine))
        try:
            store.ping()
        except FeedbackError:
            logger.exception("Database connection error")
            db_engine.dispose()
            raise
        Base.metadata.create_all(bind=db_engine)
        logger.info("Database connected")

        uploader = upload_client or CloudinaryUploadClient(settings)
        if not settings.upload_configured:
            logger.warning("Cloudinary credentials missing; image submissions will fail")

        app.state.settings = settings
        app.state.store = store
        app.state.upload_client = uploader
        try:
            yield
        finally:
            await uploader.aclose()
            db_engine.dispose()
            logger.info("Feedback API stopped")

    app = FastAPI(
        title="ISHOW Feedback API",
        description="Collects user feedback with optional images",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOWED_ORIGINS,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["Content-Type"],
    )
    # Added last so it runs first.
    app.add_middleware(
        OriginAllowListMiddleware, allowed_origins=settings.CORS_ALLOWED_ORIGINS
    )

    register_exception_handlers(app)

    @app.get("/")
    def root():
        return {"ok": True, "message": "ISHOW feedback API"}

    @app.get("/health")
    def health_check():
        return {"status": "ok"}

    app.include_router(feedback.router, prefix="/api", tags=["Feedback"])
    app.include_router(admin.router, prefix="/api", tags=["Admin"])
    return app


def register_exception_handlers(app: FastAPI):
    @app.exception_handler(FeedbackError)
    async def feedback_error_handler(request: Request, exc: FeedbackError):
        if exc.status_code >= 500:
            logger.error(
                f"{request.method} {request.url.path} error: {exc}",
                exc_info=(type(exc), exc, exc.__traceback__),
            )
        else:
            logger.info(f"{request.method} {request.url.path} rejected: {exc}")
        return JSONResponse(status_code=exc.status_code, content={"error": exc.client_message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        logger.info(f"{request.method} {request.url.path} invalid request: {exc.errors()}")
        return JSONResponse(status_code=400, content={"error": "Invalid request"})

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"{request.method} {request.url.path} error")
        return JSONResponse(status_code=500, content={"error": "Server error"})


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "services.feedback_service.app.main:app",
        host="0.0.0.0",
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )
