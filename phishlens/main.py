import logging
import random
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from phishlens.config import Settings, settings as default_settings
from phishlens.routers.analyze import router as analyze_router
from phishlens.routers.feedback import router as feedback_router
from phishlens.routers.scans import router as scans_router
from phishlens.storage import MemStorage

logger = logging.getLogger(__name__)

# message for a request body or form that fails validation, by path
VALIDATION_MESSAGES = {
    "/api/analyze/url": "URL is required",
    "/api/analyze/screenshot": "Image file is required",
    "/api/feedback": "Invalid feedback data",
}


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    message = VALIDATION_MESSAGES.get(request.url.path, "Invalid request")
    return JSONResponse(
        status_code=400,
        content={"message": message, "errors": jsonable_encoder(exc.errors())},
    )


def create_app(
    settings: Optional[Settings] = None,
    storage: Optional[MemStorage] = None,
    rng: Optional[random.Random] = None,
) -> FastAPI:
    """
    Build the API with its own store.

    Each call gets a fresh ``MemStorage`` unless one is passed in, so tests
    never share records.
    """
    settings = settings or default_settings
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title=settings.app_name,
        version="0.1.0",
        description="URL and screenshot phishing detection with scan history and feedback",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.storage = storage if storage is not None else MemStorage()
    app.state.rng = rng or random.Random()

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    @app.get("/health")
    async def health_check():
        return {"status": "ok"}

    app.include_router(analyze_router)
    app.include_router(scans_router)
    app.include_router(feedback_router)

    logger.info(f"{settings.app_name} ready (upload limit {settings.max_upload_bytes} bytes)")
    return app


app = create_app()
