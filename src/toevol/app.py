import logging
import os
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from typing import Optional

from fastapi import FastAPI

from .config import Settings, check_settings, settings
from .library import LibraryService
from .log_handler import SQLiteHandler
from .review import ReviewService
from .router import router
from .store import VocabularyStore
from .vocabulary import VocabularyManager


# --- Logging Setup ---
def setup_logging(config: Settings):
    logger = logging.getLogger("toevol")
    logger.setLevel(logging.DEBUG if config.DEBUG else logging.INFO)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if not os.path.exists(config.LOG_DIR):
        os.makedirs(config.LOG_DIR, exist_ok=True)
    log_path = os.path.join(config.LOG_DIR, config.LOG_FILE)
    file_handler = RotatingFileHandler(log_path, maxBytes=5_000_000, backupCount=3)
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
    )
    logger.addHandler(file_handler)
    if config.LOG_TO_DB:
        logger.addHandler(SQLiteHandler(config.database_path))
    # Also configure root logger to see logs from other libraries
    logging.basicConfig(level=logging.INFO)


# --- Lifecycle ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    config: Settings = app.state.settings
    if config.SEED_VOCABULARY:
        VocabularyManager(config.VOCAB_DIR, app.state.library).load_all()
    yield


# --- App Factory ---
def create_app(config: Optional[Settings] = None) -> FastAPI:
    config = config or settings
    check_settings(config)

    setup_logging(config)
    store = VocabularyStore(config.database_path, timeout=config.DB_TIMEOUT_SECONDS)
    store.init_schema()

    app = FastAPI(
        title=config.PROJECT_NAME,
        debug=config.DEBUG,
        lifespan=lifespan,
        root_path=config.ROOT_PATH,
    )
    app.state.settings = config
    app.state.store = store
    app.state.library = LibraryService(store)
    app.state.review_service = ReviewService(store)

    app.include_router(router)

    return app
