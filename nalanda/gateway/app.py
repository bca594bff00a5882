"""
Gateway FastAPI application entrypoint.
"""
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from nalanda.core.config import settings
from nalanda.gateway.routes import router as gateway_router

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def create_gateway_app() -> FastAPI:
    """Build the browser-facing proxy application."""
    gateway = FastAPI(
        title=f"{settings.PROJECT_NAME} Gateway",
        description="Session-aware proxy in front of the Nalanda services",
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    gateway.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    gateway.include_router(gateway_router, tags=["gateway"])

    @gateway.get("/health", tags=["health"])
    async def health_check():
        """Health check endpoint."""
        return {"status": "ok"}

    return gateway


app = create_gateway_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "nalanda.gateway.app:app",
        host=settings.HOST,
        port=settings.GATEWAY_PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )
