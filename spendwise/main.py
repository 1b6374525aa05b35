# spendwise/main.py
import uvicorn
import os
import logging
from pathlib import Path
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from spendwise.core.config import settings
from spendwise.core.database import create_db_and_tables
from spendwise.core.exceptions import AuthenticationError, SpendwiseError
from spendwise.api.deps import authenticate_request, route_requires_auth
from spendwise.api.v1.api import api_router
# Register every mapped table on Base.metadata
from spendwise.models import category, expense, receipt  # noqa: F401

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    openapi_tags=[
        {"name": "Authentication", "description": "Signup, login and logout"},
        {"name": "expenses", "description": "Expense records owned by the caller"},
        {"name": "receipts", "description": "Receipt files attached to expenses"},
        {"name": "analytics", "description": "Monthly trends and category breakdown"},
    ],
)

# CORS Configuration
origins = [
    settings.FRONTEND_URL,
    "http://localhost:3000",  # Local development
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ------------------------------------------------------------
# ERROR HANDLERS
# ------------------------------------------------------------
@app.exception_handler(SpendwiseError)
async def spendwise_exception_handler(request: Request, exc: SpendwiseError):
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == status.HTTP_401_UNAUTHORIZED else None
    detail = exc.message
    if exc.status_code >= 500:
        # Internal failures stay in the log; callers get a generic message
        logger.error(f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
        detail = "Internal server error"
    return JSONResponse(status_code=exc.status_code, content={"detail": detail}, headers=headers)

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Schema violations become a 400 with one entry per offending field"""
    raw_errors = exc.errors()
    body_unparseable = any(error.get("type") == "json_invalid" for error in raw_errors)

    # The body is decoded before any dependency runs, so a protected route
    # has to check the caller here to keep 401 ahead of 400
    if body_unparseable and route_requires_auth(request):
        if await authenticate_request(request) is None:
            return await spendwise_exception_handler(request, AuthenticationError())

    errors = []
    for error in raw_errors:
        if error.get("type") == "json_invalid":
            field = "body"
        else:
            # Drop the "body"/"query"/"path" prefix from the location
            location = [str(part) for part in error.get("loc", ())][1:]
            field = ".".join(location) or "body"
        errors.append({
            "field": field,
            "message": error.get("msg", "Invalid value"),
        })
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Validation failed", "errors": errors},
    )

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled exception on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )

# ------------------------------------------------------------
# ROOT / HEALTH
# ------------------------------------------------------------
@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information"""
    return {
        "message": f"{settings.APP_NAME} is running!",
        "version": settings.VERSION,
    }

@app.get("/health", tags=["Health"])
async def health_check():
    return {
        "status": "healthy",
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
    }

# ------------------------------------------------------------
# BUSINESS LOGIC ROUTES
# ------------------------------------------------------------
app.include_router(api_router, prefix="/api/v1")

if not settings.use_s3:
    # Local receipt storage is served straight from disk
    Path(settings.UPLOAD_DIR).mkdir(parents=True, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")

# ------------------------------------------------------------
# STARTUP EVENT
# ------------------------------------------------------------
@app.on_event("startup")
async def on_startup():
    """Create database tables"""
    await create_db_and_tables()
    logger.info("✅ Database tables created successfully")
    if settings.use_s3:
        logger.info(f"✅ Receipts stored in S3 bucket {settings.S3_BUCKET_NAME}")
    else:
        logger.info(f"✅ Receipts stored locally in {settings.UPLOAD_DIR}")

if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run("spendwise.main:app", host="0.0.0.0", port=port, reload=False)
