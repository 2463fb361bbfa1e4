import tomllib
from contextlib import asynccontextmanager
from importlib import metadata
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cemtras.ai.chat.router import router as chat_router
from cemtras.ai.gemini.config import get_gemini_settings
from cemtras.auth.router import router as auth_router
from cemtras.config import get_app_settings, get_client_base_url
from cemtras.db.histories.router import router as histories_router
from cemtras.exceptions import ConfigurationError
from cemtras.utils.logger import logger


def get_version():
    """Get version from pyproject.toml, or from the installed package metadata"""
    pyproject_path = Path(__file__).parent.parent.parent / "pyproject.toml"
    if not pyproject_path.exists():
        return metadata.version("cemtras")
    with open(pyproject_path, "rb") as f:
        data = tomllib.load(f)
    return data["project"]["version"]


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_app_settings()
    logger.info(
        "Starting CemtrAS API",
        environment=settings.environment.value,
        storage_backend=settings.storage_backend.value,
    )
    try:
        get_gemini_settings()
    except ConfigurationError as e:
        # Chat sessions report this to the user on their first message
        logger.warning("Gemini is not configured", error=e.message)
    yield


app = FastAPI(
    title="CemtrAS API",
    description="API for the CemtrAS cement plant assistant",
    version=get_version(),
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[get_client_base_url()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router, prefix="/api")
app.include_router(chat_router, prefix="/api")
app.include_router(histories_router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint."""
    return {"status": "ok", "message": "CemtrAS API is running"}


@app.get("/healthcheck")
async def healthcheck():
    """Health check endpoint."""
    return {"status": "ok", "message": "CemtrAS API is running"}
