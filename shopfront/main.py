"""
Main FastAPI application
"""

from fastapi import FastAPI

from shopfront.api import api_router
from shopfront.core.config import settings
from shopfront.core.events import lifespan
from shopfront.core.middleware import setup_middleware, register_exception_handlers
from shopfront.services.audit_service import register_audit_handlers

def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Shopfront API - catalogue, cart, orders and payments",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
        lifespan=lifespan
    )

    setup_middleware(app)
    register_exception_handlers(app)
    register_audit_handlers()

    # Include API routes
    app.include_router(api_router, prefix="/api")

    # Root endpoint
    @app.get("/")
    async def root():
        return {
            "app": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "status": "running",
            "docs": "/api/docs"
        }

    return app

app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "shopfront.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        workers=1 if settings.DEBUG else settings.WORKERS
    )
