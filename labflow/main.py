import logging
from contextlib import asynccontextmanager

from labflow.config import AUTO_CREATE_TABLES, CORS_ALLOW_ORIGINS, LOG_LEVEL

# Log configuration (before other imports)
# ruff: noqa: E402
logging.basicConfig(
    level=LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    force=True
)

from fastapi import FastAPI  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402
from labflow import __version__  # noqa: E402
from labflow.api.base import api_router  # noqa: E402
from labflow.db import engine, init_db  # noqa: E402
from labflow.db.session import log_pool_stats  # noqa: E402

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if AUTO_CREATE_TABLES:
        await init_db()
    log_pool_stats("startup")
    yield
    await engine.dispose()
    logger.info("Database engine disposed")


app = FastAPI(
    title="LabFlow Task API",
    description="Task tracking API with filtering, paging and soft delete",
    version=__version__,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOW_ORIGINS,
    # Credentials cannot be combined with a wildcard origin
    allow_credentials="*" not in CORS_ALLOW_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include all API routes
app.include_router(api_router)


@app.get("/")
def read_root():
    return {
        "message": "LabFlow Task API",
        "docs": "/docs",
        "version": __version__,
    }
