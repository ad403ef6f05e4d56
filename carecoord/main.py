import tomllib
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse

from carecoord.ai.chat.router import router as chat_router
from carecoord.config import get_app_settings
from carecoord.db.changes.feed import get_change_feed, track_session_changes
from carecoord.db.changes.listener import PostgresChangeListener
from carecoord.db.changes.router import router as changes_router
from carecoord.db.chat_messages.router import router as chat_history_router
from carecoord.db.config import get_db_settings
from carecoord.db.database import close_db
from carecoord.db.inventory.router import router as inventory_router
from carecoord.db.schedule.router import router as schedule_router
from carecoord.stats.router import router as stats_router
from carecoord.utils.logger import logger

CORS_ALLOW_HEADERS = "authorization, x-client-info, apikey, content-type"


def get_version():
    """Get version from pyproject.toml"""
    pyproject_path = Path(__file__).parent.parent / "pyproject.toml"
    if not pyproject_path.exists():
        try:
            return version("carecoord")
        except PackageNotFoundError:
            return "0.0.0"
    with open(pyproject_path, "rb") as f:
        data = tomllib.load(f)
    return data["project"]["version"]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_app_settings()
    feed = get_change_feed()
    listener: PostgresChangeListener | None = None
    untrack = None
    logger.info(
        "Starting API",
        environment=settings.environment.value,
        realtime_enabled=settings.realtime_enabled,
    )

    if settings.realtime_enabled:
        listener = PostgresChangeListener(feed, get_db_settings().get_listener_dsn())
        await listener.start()
    else:
        untrack = track_session_changes(feed)

    try:
        yield
    finally:
        if listener is not None:
            await listener.stop()
        if untrack is not None:
            untrack()
        await close_db()


app = FastAPI(
    title="Care Coordination API",
    description="Inventory, service schedule and assistant chat for a community organization",
    version=get_version(),
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


def allowed_origin(request: Request) -> str:
    origins = get_app_settings().cors_allow_origins
    if "*" in origins:
        return "*"
    origin = request.headers.get("origin")
    if origin in origins:
        return origin
    return origins[0]


def apply_cors_headers(request: Request, response: Response) -> Response:
    response.headers["Access-Control-Allow-Origin"] = allowed_origin(request)
    response.headers["Access-Control-Allow-Headers"] = CORS_ALLOW_HEADERS
    response.headers["Vary"] = "Origin"
    return response


@app.middleware("http")
async def cors(request: Request, call_next):
    """
    Answer preflights with an empty 200 and add CORS headers to every response.

    Exceptions that escape a route are turned into ``{"error": ...}`` here so
    they still carry CORS headers.
    """
    if request.method == "OPTIONS":
        return apply_cors_headers(request, Response(status_code=status.HTTP_200_OK))

    try:
        response = await call_next(request)
    except Exception as e:
        logger.exception(
            "Unhandled error",
            path=request.url.path,
            error=str(e),
            error_type=type(e).__name__,
        )
        response = JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": str(e)},
        )
    return apply_cors_headers(request, response)


app.include_router(chat_router, prefix="/api")
app.include_router(chat_history_router, prefix="/api")
app.include_router(inventory_router, prefix="/api")
app.include_router(schedule_router, prefix="/api")
app.include_router(stats_router, prefix="/api")
app.include_router(changes_router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint."""
    return {"status": "ok", "message": "Care Coordination API is running"}


@app.get("/healthcheck")
async def healthcheck():
    """Health check endpoint."""
    return {"status": "ok", "message": "Care Coordination API is running"}
