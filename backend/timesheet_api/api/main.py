from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import os
import time
import logging

from . import API_PREFIX
from ..auth import jwt_handler
from ..database.connection import DatabaseManager, SessionLocal
from ..errors import UpstreamError
from ..storage.object_storage import ObjectStorage
from .routes import auth, invite_codes, organizations, users, projects, timesheets, photos

# Configure logging
logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)

# Initialize FastAPI app with metadata
app = FastAPI(
    title="Timesheet API",
    description="Multi-tenant timesheet API: organizations, invite codes, projects, time entries with photos, and reporting.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=[
        {
            "name": "Authentication",
            "description": "Sign-up, sign-in and invite code verification"
        },
        {
            "name": "Invite Codes",
            "description": "Invite code management for organization admins"
        },
        {
            "name": "Organizations",
            "description": "Organization details, members and timesheet reports"
        },
        {
            "name": "Users",
            "description": "User management and profile operations"
        },
        {
            "name": "Projects",
            "description": "Project management and staff assignment"
        },
        {
            "name": "Timesheets",
            "description": "Time entry CRUD operations"
        },
        {
            "name": "Photos",
            "description": "Before/after photo upload and signed downloads"
        },
        {
            "name": "Health",
            "description": "Service health"
        }
    ]
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("ALLOWED_ORIGINS", "*").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log method, path, status and elapsed time of every request."""
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f} ms)")
    return response


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Render every HTTP error as ``{"error": detail}``."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies and parameters are reported as 400."""
    fields = sorted({
        ".".join(str(part) for part in error["loc"] if part not in ("body", "query", "path"))
        for error in exc.errors()
    } - {""})
    message = "Invalid request"
    if fields:
        message = f"Invalid request: {', '.join(fields)}"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": message}
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for unhandled errors."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"}
    )


def signing_key_warnings() -> list:
    """Configuration problems that break tokens or photo URLs across restarts."""
    warnings = []
    if not jwt_handler.SECRET_KEY_CONFIGURED:
        warnings.append("SECRET_KEY is unset; access tokens are signed with a per-process key "
                        "and become invalid on restart or across workers")
    if not jwt_handler.STORAGE_SIGNING_KEY:
        warnings.append("STORAGE_SIGNING_KEY is unset; photo uploads are refused")
    return warnings


# Startup event
@app.on_event("startup")
async def startup_event():
    """Initialize database and storage."""
    logger.info("Starting up Timesheet API...")
    for warning in signing_key_warnings():
        logger.warning(warning)

    try:
        DatabaseManager.init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise

    db = SessionLocal()
    try:
        ObjectStorage(db).ensure_bucket()
    finally:
        db.close()


# Shutdown event
@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down Timesheet API...")


@app.get(f"{API_PREFIX}/health", tags=["Health"])
def health_check():
    """
    Health check endpoint.

    Reports database connectivity.
    """
    try:
        DatabaseManager.ping()
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        raise UpstreamError("Service unhealthy - database connection failed")
    return {"status": "ok", "database": "connected"}


# Include routers
app.include_router(auth.router, prefix=API_PREFIX)
app.include_router(invite_codes.router, prefix=API_PREFIX)
app.include_router(organizations.router, prefix=API_PREFIX)
app.include_router(users.router, prefix=API_PREFIX)
app.include_router(projects.router, prefix=API_PREFIX)
app.include_router(timesheets.router, prefix=API_PREFIX)
app.include_router(photos.router, prefix=API_PREFIX)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "timesheet_api.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
