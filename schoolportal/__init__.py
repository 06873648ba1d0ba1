# schoolportal/__init__.py
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.future import select

from schoolportal.core.config import settings
from schoolportal.core.database import close_db, get_db_context, init_db
from schoolportal.core.errors import register_exception_handlers
from schoolportal.core.logging import logger
from schoolportal.core.redis import close_redis, init_redis
from schoolportal.core.security import get_password_hash
from schoolportal.middleware import RequestIDMiddleware
from schoolportal.models import User
from schoolportal.routes import API_ROUTERS, realtime
from schoolportal.schemas.enums import UserRole


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        description="Multi-tenant school management API",
        version=settings.VERSION,
        docs_url="/api/docs" if settings.DEBUG else None,
        redoc_url="/api/redoc" if settings.DEBUG else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIDMiddleware)
    register_exception_handlers(app)

    for module, prefix in API_ROUTERS:
        app.include_router(module.router, prefix=f"/api{prefix}")
    app.include_router(realtime.router)

    @app.get("/api/health", tags=["Health"])
    async def health():
        return {"status": "ok", "version": settings.VERSION}

    @app.on_event("startup")
    async def startup_event():
        await init_db()
        await init_redis()
        await create_super_admin()
        logger.info("Application startup completed")

    @app.on_event("shutdown")
    async def shutdown_event():
        await close_redis()
        await close_db()
        logger.info("Application shutdown completed")

    return app


async def create_super_admin() -> None:
    """Seed the platform super admin once, when a password is configured"""
    if not settings.SUPER_ADMIN_PASSWORD:
        logger.info("SUPER_ADMIN_PASSWORD not set, skipping super admin seed")
        return

    async with get_db_context() as db:
        result = await db.execute(select(User).filter(User.role == UserRole.SUPERADMIN))
        if result.scalars().first():
            logger.info("Super admin already exists")
            return

        db.add(User(
            name="Super Admin",
            email=settings.SUPER_ADMIN_EMAIL.lower(),
            role=UserRole.SUPERADMIN,
            password_hash=get_password_hash(settings.SUPER_ADMIN_PASSWORD.get_secret_value()),
            is_active=True
        ))
        logger.info("Super admin created successfully")
