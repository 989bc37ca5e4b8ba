import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from jli.config import settings
from jli.scanner import scan
from jli.store import Store

# Routers
from jli.routers import (
    files_router,
    keyframes_router,
    labels_router,
    media_router,
)

logger = logging.getLogger(__name__)


# -----------------------
# CATALOGUE SYNC
# -----------------------
def sync_catalogue(store: Store, media_root: str) -> int:
    """
    Scan *media_root* and upsert everything found. Returns the number of
    newly discovered files.
    """
    added = store.upsert_media_files(scan(media_root))
    logger.info(
        "Found %d media files in %s (%d new)",
        store.media_file_count(),
        media_root,
        added,
    )
    return added


# -----------------------
# CREATE APP
# -----------------------
def create_app(
    media_root: str = ".",
    database_path: Optional[str] = None,
    store: Optional[Store] = None,
) -> FastAPI:
    """
    Build the API for one scanned directory.

    Without *store*, the app opens its own catalogue on startup, syncs it with
    the directory and closes it on shutdown. A caller-provided *store* is used
    as is and stays owned by the caller.
    """
    media_root = os.path.abspath(media_root)
    db_path = database_path or settings.database_path_for(media_root)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if store is not None:
            app.state.store = store
            yield
            return

        with Store(db_path) as owned:
            sync_catalogue(owned, media_root)
            app.state.store = owned
            yield

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Label media files with descriptions, labels and keyframes.",
        version=settings.VERSION,
        lifespan=lifespan,
    )
    app.state.media_root = media_root

    # -----------------------
    # ROUTES
    # -----------------------
    app.include_router(files_router.router)
    app.include_router(keyframes_router.router)
    app.include_router(labels_router.router)
    app.include_router(media_router.router)

    return app
