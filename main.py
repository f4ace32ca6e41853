import logging

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from newsdesk.config import settings
from newsdesk.database import AsyncSessionLocal, Base, engine
from newsdesk.exception_handlers import register_exception_handlers
from newsdesk.routes import blogs, editions, roles, users
from newsdesk.scheduler import start_status_refresh, stop_status_refresh
from newsdesk.services.role_service import seed_roles

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Create the FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        description="Newsroom CMS: role-based permissions and a scheduled publication workflow",
        debug=settings.debug,
        version=settings.app_version,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(users.router, prefix="/api/v1/users", tags=["Users"])
    app.include_router(roles.router, prefix="/api/v1/roles", tags=["Roles"])
    app.include_router(blogs.router, prefix="/api/v1/blogs", tags=["Blogs"])
    app.include_router(editions.router, prefix="/api/v1/editions", tags=["Editions"])

    if settings.debug:
        logger.info(f"Running in {settings.environment} mode")
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)  # Logs SQL statements
        logging.getLogger("sqlalchemy.pool").setLevel(logging.INFO)

    return app


app = create_app()


@app.on_event("startup")
async def startup_event():
    """Tasks to run at application startup."""
    logger.info("Starting up the application...")
    # Migrations own the schema outside debug runs
    if settings.debug:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        async with AsyncSessionLocal() as db:
            await seed_roles(db)
        logger.info("Database tables created (if not existing).")

    start_status_refresh()


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Shutting down the application...")
    stop_status_refresh()


@app.get("/", tags=["Root"])
async def root():
    return {"message": f"Welcome to the {settings.app_name} API"}


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=settings.debug)
