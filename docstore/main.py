"""
docstore — FastAPI application factory.
"""
import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI
from sqlalchemy.engine import Engine

from docstore.config import Settings
from docstore.database import Base, create_db_engine, create_session_factory
from docstore.filestore import FileStore, S3FileStore
from docstore.logging_setup import setup_logging
from docstore.problem import register_handlers
from docstore.security import Authenticator, current_user
from docstore.spa import SpaStaticFiles

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    # Startup: ensure upload dir + tables exist
    os.makedirs(settings.upload.upload_path, exist_ok=True)
    # Import models so Base.metadata knows about them
    import docstore.models  # noqa: F401
    Base.metadata.create_all(bind=app.state.engine)
    logger.info("Database tables ready (%s)", app.state.engine.url)
    yield
    logger.info("Shutting down")


def create_app(
    settings: Optional[Settings] = None,
    engine: Optional[Engine] = None,
    filestore: Optional[FileStore] = None,
    configure_logging: bool = True,
) -> FastAPI:
    settings = settings or Settings()
    if configure_logging:
        setup_logging(settings.logging)

    engine = engine or create_db_engine(settings.database)
    app = FastAPI(
        title=settings.app.name,
        description="Document metadata, tags, senders and stored files",
        version=settings.app.version,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.filestore = filestore or S3FileStore.from_settings(settings.filestore)
    app.state.authenticator = Authenticator(settings.security)

    register_handlers(app)

    # ── Register API routers ─────────────────────────────────────────────
    from docstore.routers.appinfo import router as appinfo_router
    from docstore.routers.catalog import router as catalog_router
    from docstore.routers.documents import router as documents_router
    from docstore.routers.files import router as files_router
    from docstore.routers.uploads import router as uploads_router

    secured = [Depends(current_user)]
    app.include_router(appinfo_router, prefix=API_PREFIX, tags=["AppInfo"])
    app.include_router(documents_router, prefix=API_PREFIX, tags=["Documents"], dependencies=secured)
    app.include_router(catalog_router, prefix=API_PREFIX, tags=["Tags & Senders"], dependencies=secured)
    app.include_router(files_router, prefix=API_PREFIX, tags=["Files"], dependencies=secured)
    app.include_router(uploads_router, prefix=API_PREFIX, tags=["Uploads"], dependencies=secured)

    if settings.file_server.path:
        app.mount(
            settings.file_server.url_path,
            SpaStaticFiles(settings.file_server.path, settings.file_server.spa_index_file),
            name="ui",
        )
        logger.info("serving static files from '%s' at '%s'", settings.file_server.path, settings.file_server.url_path)

    return app
