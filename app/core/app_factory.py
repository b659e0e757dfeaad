from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from .config import Settings
from .container import ApplicationContainer
from .logging import configure_logging
from ..application.services.account_service import AccountService
from ..application.services.access_gate import ADMIN_HEADER, AUTHORIZATION_HEADER
from ..application.services.profile_query_service import ProfileQueryService
from ..application.services.token_service import TokenService
from ..application.services.upload_service import UploadAdmissionPipeline
from ..infrastructure.persistence.sqlite import SQLitePersistence
from ..presentation.api.errors import register_exception_handlers
from ..presentation.api.routers import admin as admin_router
from ..presentation.api.routers import auth as auth_router
from ..presentation.api.routers import profiles as profiles_router

logger = logging.getLogger(__name__)

UPLOADS_MOUNT = "/uploads"
PROFILE_PICTURES_PUBLIC_PREFIX = f"{UPLOADS_MOUNT}/profile-pictures"


def create_application(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings()

    app = FastAPI(title="Matchmaking Profile API", lifespan=_create_lifespan(settings))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
        allow_headers=["Content-Type", AUTHORIZATION_HEADER, ADMIN_HEADER],
    )

    register_exception_handlers(app)

    app.include_router(auth_router.router)
    app.include_router(profiles_router.router)
    app.include_router(admin_router.router)

    settings.profile_picture_dir.mkdir(parents=True, exist_ok=True)
    app.mount(UPLOADS_MOUNT, StaticFiles(directory=settings.upload_root), name="uploads")

    @app.get("/api/health")
    async def health() -> Dict[str, str]:
        return {"status": "ok", "message": "API is running"}

    return app


def _create_lifespan(settings: Settings):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging(settings.log_level)
        persistence = SQLitePersistence(settings.database_path)
        token_service = TokenService(
            secret_key=settings.jwt_secret,
            token_exp_minutes=settings.jwt_exp_minutes,
            algorithm=settings.jwt_algorithm,
        )
        upload_pipeline = UploadAdmissionPipeline(
            settings.profile_picture_dir,
            PROFILE_PICTURES_PUBLIC_PREFIX,
            max_bytes=settings.max_upload_bytes,
        )

        app.state.container = ApplicationContainer(  # type: ignore[attr-defined]
            settings=settings,
            persistence=persistence,
            token_service=token_service,
            upload_pipeline=upload_pipeline,
            account_service=AccountService(persistence, token_service),
            profile_query_service=ProfileQueryService(persistence),
        )
        logger.info("Profile API ready (database=%s)", settings.database_path)

        try:
            yield
        finally:
            persistence.close()

    return lifespan
