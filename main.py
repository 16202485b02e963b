from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from courseconnect.apis.auth.main import router as auth_router
from courseconnect.apis.chat.main import router as chat_router
from courseconnect.apis.documents.main import router as documents_router
from courseconnect.apis.exams.main import router as exams_router
from courseconnect.apis.flashcards.main import router as flashcards_router
from courseconnect.apis.quiz.main import router as quiz_router
from courseconnect.apis.realtime.main import router as realtime_router
from courseconnect.apis.study.main import router as study_router
from courseconnect.apis.syllabus.main import router as syllabus_router
from courseconnect.apis.user_profile.main import router as user_profile_router
from courseconnect.core.cache import profile_cache
from courseconnect.core.config import settings
from courseconnect.core.db.base import engine, init_models
from courseconnect.core.logging import get_logger, setup_logging
from courseconnect.modules.media import media_store
from courseconnect.modules.quiz import session_manager

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    if settings.database.create_tables:
        await init_models()
    session_manager.start(
        idle_seconds=settings.sessions.idle_seconds,
        sweep_interval=settings.sessions.sweep_interval_seconds,
    )
    logger.info("%s %s started", settings.app.name, settings.app.version)
    try:
        yield
    finally:
        await session_manager.stop()
        await profile_cache.close()
        await engine.dispose()


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.app.name, version=settings.app.version, lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.app.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Serve stored profile pictures as static files
    Path(media_store.base_dir).mkdir(parents=True, exist_ok=True)
    app.mount(
        "/media",
        StaticFiles(directory=str(media_store.base_dir), html=False),
        name="media",
    )

    app.include_router(auth_router)
    app.include_router(user_profile_router)
    app.include_router(flashcards_router)
    app.include_router(study_router)
    app.include_router(quiz_router)
    app.include_router(exams_router)
    app.include_router(documents_router)
    app.include_router(chat_router)
    app.include_router(syllabus_router)
    app.include_router(realtime_router)

    @app.get("/")
    async def root():
        return {
            "status": "ok",
            "app": settings.app.name,
            "version": settings.app.version,
        }

    return app


app = create_app()


if __name__ == "__main__":
    try:
        uvicorn.run(
            "main:app",
            host="0.0.0.0",
            port=settings.app.port,
            reload=not settings.app.is_production,
        )
    except Exception as e:
        print(f"An error occurred when starting the server: {e}.")
