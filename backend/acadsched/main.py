from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from acadsched.api.routes import (
    activity,
    assignments,
    conflicts,
    faculty,
    health,
    schedules,
    substitutes,
    views,
)
from acadsched.core.config import get_settings
from acadsched.core.exceptions import AppError
from acadsched.core.logging import configure_logging
from acadsched.core.middleware import RequestLoggingMiddleware, RequestSizeLimitMiddleware
from acadsched.db.bootstrap import ensure_runtime_schema_compatibility

settings = get_settings()


@asynccontextmanager
async def lifespan(_: FastAPI):
    configure_logging(settings)
    ensure_runtime_schema_compatibility()
    yield


async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message, "details": exc.details},
    )

app = FastAPI(title=settings.project_name, lifespan=lifespan)
app.add_exception_handler(AppError, app_error_handler)

app.add_middleware(RequestSizeLimitMiddleware, max_bytes=settings.max_request_size_bytes)
app.add_middleware(RequestLoggingMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, prefix=settings.api_prefix, tags=["health"])
app.include_router(schedules.router, prefix=settings.api_prefix, tags=["schedules"])
app.include_router(assignments.router, prefix=settings.api_prefix, tags=["assignments"])
app.include_router(substitutes.router, prefix=settings.api_prefix, tags=["substitutes"])
app.include_router(faculty.router, prefix=settings.api_prefix, tags=["faculty"])
app.include_router(views.router, prefix=settings.api_prefix, tags=["views"])
app.include_router(conflicts.router, prefix=settings.api_prefix, tags=["conflicts"])
app.include_router(activity.router, prefix=settings.api_prefix, tags=["activity"])
