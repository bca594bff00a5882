"""
Main FastAPI application entrypoint.
"""
import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from nalanda.api.routes.auth import router as auth_router
from nalanda.api.routes.bookmarks import router as bookmarks_router
from nalanda.api.routes.books import router as books_router
from nalanda.api.routes.reviews import router as reviews_router
from nalanda.api.routes.usage import router as usage_router
from nalanda.api.routes.users import router as users_router
from nalanda.core.config import settings
from nalanda.core.exceptions import AuthenticationError, QuotaExceededError, ServiceError
from nalanda.db.session import SessionLocal, create_tables
from nalanda.schemas.usage import utc_isoformat
from nalanda.services.auth_service import AuthService

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Nalanda e-book platform API",
    version="1.0.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
)

# Set up CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth_router, tags=["auth"])
app.include_router(users_router, prefix="/api", tags=["users"])
app.include_router(books_router, prefix="/api/Books", tags=["books"])
app.include_router(reviews_router, prefix="/api/BookReview", tags=["reviews"])
app.include_router(bookmarks_router, prefix="/api/Bookmark", tags=["bookmarks"])
app.include_router(usage_router, prefix="/api/Usage", tags=["usage"])


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    """Translate service-layer errors into JSON error responses."""
    headers = None
    content = {"detail": exc.message}

    if isinstance(exc, AuthenticationError):
        headers = {"WWW-Authenticate": "Bearer"}
    elif isinstance(exc, QuotaExceededError):
        content["remaining"] = exc.remaining
        content["reset_at"] = utc_isoformat(exc.reset_at) if exc.reset_at else None

    if exc.status_code >= 500:
        logger.error(f"Unhandled service error on {request.url.path}: {exc.message}")

    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.error(f"Unexpected error on {request.method} {request.url.path}: {str(exc)}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.on_event("startup")
async def startup_event():
    """Initialize application on startup."""
    logger.info("Starting Nalanda service...")
    create_tables()

    db = SessionLocal()
    try:
        AuthService(db).ensure_default_admin()
    finally:
        db.close()


@app.get("/health", tags=["health"])
async def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
