# challenge_tracker/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from challenge_tracker.config.settings import settings
from challenge_tracker.db.database import Base, engine as default_engine
from challenge_tracker.routers import challenges
from streak_engine.core.errors import TrackerError

# create_all이 테이블을 인식하도록 모델 import (중요)
import challenge_tracker.models  # noqa: F401

logging.basicConfig(level=settings.log_level, format="%(asctime)s [%(levelname)s] %(message)s")
logger = logging.getLogger(__name__)


def create_app(bind=None) -> FastAPI:
    bind = bind or default_engine

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # SQLAlchemy로 정의한 테이블 생성 (기존 테이블 컬럼 추가는 못함)
        Base.metadata.create_all(bind=bind)
        logger.info("challenge tracker started")
        try:
            yield
        finally:
            logger.info("challenge tracker stopped")

    app = FastAPI(lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(TrackerError)
    async def tracker_error_handler(request: Request, exc: TrackerError):
        logger.warning(f"[{exc.__class__.__name__}] {request.method} {request.url.path}: {exc.detail}")
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    # 라우터 등록
    app.include_router(challenges.router)

    # 확인용 엔드포인트
    @app.get("/")
    async def root():
        return {
            "message": "Challenge tracker API is running",
            "version": "1.0.0",
        }

    return app


app = create_app()
