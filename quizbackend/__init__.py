"""
Image Quiz Backend

Backend for a web quiz served from image files. Players receive random
multiple-choice image questions; every answer feeds an adaptive difficulty
rating kept in a hosted Postgres/REST store.

The platform features:
1. Random question selection, optionally by difficulty tier
2. Adaptive difficulty classification from each question's success rate
3. A time-bounded cache of the difficulty map with explicit invalidation
4. Admin reporting, bootstrap and manual difficulty overrides
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI

logger = logging.getLogger(__name__)

__version__ = "0.1.0"


def build_store(settings: Any):
    """
    Create the question statistics store selected by ``STORE_BACKEND``.
    
    Raises:
        ConfigurationError: If the REST store is selected without URL or key
    """
    if settings.STORE_BACKEND == "memory":
        from quizbackend.domain.questions.memory_repository import MemoryQuestionStatsStore
        logger.warning("Using in-memory question statistics store; data is not persisted")
        return MemoryQuestionStatsStore()
    
    from quizbackend.domain.questions.rest_repository import PostgrestQuestionStatsStore
    return PostgrestQuestionStatsStore.from_settings(settings)


async def _preload_difficulties(service) -> None:
    try:
        mapping = await service.get_all_difficulties_map()
        logger.info(f"Preloaded {len(mapping)} question difficulties")
    except Exception as e:
        logger.error(f"Difficulty preload failed: {e}", exc_info=True)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    FastAPI application lifespan context manager.
    
    Warms the difficulty cache in the background on startup and closes the
    store's HTTP session on shutdown.
    """
    logger.info("Application startup sequence initiated.")
    preload: Optional[asyncio.Task] = None
    if app.state.settings.PRELOAD_CACHE:
        preload = asyncio.create_task(_preload_difficulties(app.state.difficulty_service))
    
    yield
    
    logger.info("Application shutdown sequence initiated.")
    if preload is not None and not preload.done():
        preload.cancel()
    await app.state.difficulty_service.store.close()
    logger.info("Application shutdown sequence complete.")


def create_app(
    settings: Any = None,
    store: Any = None,
    image_source: Any = None,
    clock: Any = None
) -> FastAPI:
    """
    Create and configure a FastAPI application instance.
    
    Args:
        settings: Application settings (defaults to the environment)
        store: Question statistics store (defaults to ``build_store(settings)``)
        image_source: Where quiz images are listed from
            (defaults to ``QUIZ_IMAGES_DIR`` on local disk)
        clock: Monotonic time source for the difficulty cache TTL
        
    Returns:
        Configured FastAPI application
    """
    from fastapi.exceptions import RequestValidationError
    
    from quizbackend.api import (
        base_error_handler,
        main_router,
        register_module,
        validation_exception_handler,
    )
    from quizbackend.common.exceptions import BaseError
    from quizbackend.common.logger import configure_from_settings
    from quizbackend.config import settings as default_settings
    from quizbackend.difficulty.cache import DifficultyCache
    from quizbackend.difficulty.controller import router as difficulty_router
    from quizbackend.difficulty.loader import BulkLoader
    from quizbackend.difficulty.service import QuestionDifficultyService
    from quizbackend.quiz.controller import router as quiz_router
    from quizbackend.quiz.images import LocalImageSource
    from quizbackend.quiz.selection import QuestionSelector
    
    if settings is None:
        settings = default_settings
    configure_from_settings(settings)
    
    store = store if store is not None else build_store(settings)
    cache_kwargs = {"ttl": settings.DIFFICULTY_CACHE_TTL_SECONDS}
    if clock is not None:
        cache_kwargs["clock"] = clock
    service = QuestionDifficultyService(
        store,
        cache=DifficultyCache(store, **cache_kwargs),
        loader=BulkLoader(store, page_size=settings.BULK_PAGE_SIZE),
    )
    if image_source is None:
        image_source = LocalImageSource(settings.QUIZ_IMAGES_DIR)
    
    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Image quiz with adaptive question difficulty",
        version=__version__,
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.difficulty_service = service
    app.state.image_source = image_source
    app.state.question_selector = QuestionSelector(image_source, service)
    
    register_module("difficulty", difficulty_router)
    register_module("quiz", quiz_router)
    app.include_router(main_router, prefix="/api")
    
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(BaseError, base_error_handler)
    
    @app.get("/health")
    async def health():
        return {"status": "ok", "version": __version__}
    
    logger.info(f"Application created with {len(app.routes)} routes")
    return app
