"""FileDepot Backend Application.

This is the main entry point for the FileDepot service. Clients upload
files over HTTP; the service stores them on disk, records metadata in
DuckDB, derives thumbnails for raster images and later serves, lists or
deletes them.

Modules:
    - files: upload pipeline, blob store, thumbnails, metadata catalog
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from filedepot import __version__
from filedepot.config import get_config
from filedepot.files import build_depot, get_depot, set_depot
from filedepot.files import router as files_router
from filedepot.files.errors import InternalError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

# Multipart parsing logs every part at DEBUG.
for _noisy in ("multipart", "python_multipart", "PIL"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup/shutdown events."""
    # Startup
    config = get_config()

    # Apply configured log level to root logger so that
    # `logging.level: "debug"` in filedepot.settings.yaml activates DEBUG output.
    configured_level = getattr(logging, config.logging.level.upper(), None)
    if configured_level is not None:
        logging.getLogger().setLevel(configured_level)
        logger.info("Root logger level set to %s", config.logging.level.upper())

    # A depot installed beforehand (tests) is left alone.
    owns_depot = get_depot() is None
    if owns_depot:
        set_depot(build_depot(config))
        logger.info(
            "File storage ready: uploads=%s thumbnails=%s catalog=%s",
            config.storage.uploads_dir,
            config.storage.thumbnails_dir,
            config.catalog.db_path,
        )

    yield  # Application runs here

    # Shutdown
    if owns_depot:
        depot = get_depot()
        if depot is not None:
            depot.close()
        set_depot(None)
    logger.info("Application shutdown complete")


# Create FastAPI application with metadata
app = FastAPI(
    title="FileDepot API",
    description="File storage service with thumbnails for raster images",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_config().server.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(files_router)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unexpected failures and answer with a generic 500."""
    logger.exception("Server error on %s %s: %s", request.method, request.url.path, exc)
    error = InternalError("Internal server error")
    return JSONResponse({"error": error.message}, status_code=error.status_code)


@app.get("/health")
async def health() -> dict:
    """Health check endpoint.

    Returns:
        dict: Status object indicating the server is running.
    """
    return {"status": "ok"}


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    config = get_config()
    uvicorn.run(
        "filedepot.main:app",
        host=config.server.host,
        port=config.server.port,
        log_level=config.logging.level,
    )
