# healthcomm/main.py

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from healthcomm import __version__
from healthcomm.common.database.database import async_session, connect_to_db, close_db_connection
from healthcomm.common.config import settings
from healthcomm.common.errors import HealthCommError, InvalidArgument
from healthcomm.common.scheduler import SweepScheduler, default_jobs
from healthcomm.router.routers import include_routers

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# Lifespan context manager for startup and shutdown events
@asynccontextmanager
async def lifespan(app: FastAPI):
    await connect_to_db()
    scheduler = None
    if settings.SCHEDULER_ENABLED:
        scheduler = SweepScheduler(default_jobs(), async_session)
        scheduler.start()
    yield
    if scheduler:
        await scheduler.stop()
    await close_db_connection()

# Initialize FastAPI app with lifespan manager
app = FastAPI(
    title="HealthComm API",
    description="Care-team matching, escalation and vitals alerting for remote patient monitoring",
    version=__version__,
    lifespan=lifespan
)

# Middleware for CORS using allowed origins from settings
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Typed errors carry a stable code next to the detail
@app.exception_handler(HealthCommError)
async def healthcomm_error_handler(request: Request, exc: HealthCommError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"code": exc.code, "detail": exc.detail},
        headers=exc.headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=InvalidArgument.status_code_default,
        content={
            "code": InvalidArgument.code,
            "detail": InvalidArgument.default_detail,
            "errors": jsonable_errors(exc),
        },
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    """Validation errors without the raw input or exception objects pydantic attaches."""
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]


# Include routers from a separate file
include_routers(app)

# Root endpoint
@app.get("/")
async def root():
    return {"name": "HealthComm API", "version": __version__, "docs": "/docs"}
