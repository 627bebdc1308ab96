import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from . import __version__
from .api import health_router, logs_router, thumbnails_router, uploads_router
from .core.config import settings
from .core.errors import ImageServerError
from .core.log_buffer import configure_logging, install_log_buffer
from .core.upload_store import UploadStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.LOG_LEVEL)
    install_log_buffer()
    # Storage root must exist before the first request is accepted.
    UploadStore(settings.UPLOADS_DIR).initialize()
    logger.info("Serving uploads from %s", settings.UPLOADS_DIR.resolve())
    yield
    logger.info("Shutting down")


app = FastAPI(
    title="Image Server API",
    description="Upload images, fetch them resized or filtered, and generate placeholder thumbnails.",
    version=__version__,
    docs_url="/api-docs",
    redoc_url=None,
    lifespan=lifespan,
)


@app.exception_handler(ImageServerError)
async def image_server_error_handler(request: Request, exc: ImageServerError) -> Response:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message, exc_info=exc)
    else:
        logger.info("%s %s -> %d: %s", request.method, request.url.path, exc.status_code, exc.message)
    if request.method == "HEAD":
        return Response(status_code=exc.status_code)
    return JSONResponse(
        status_code=exc.status_code,
        content={"status": "error", "message": exc.message},
    )


app.include_router(health_router)
app.include_router(uploads_router)
app.include_router(thumbnails_router)
app.include_router(logs_router)


def run() -> None:
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
