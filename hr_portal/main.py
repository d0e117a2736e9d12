import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlmodel import Session

from .config import settings
from .core.dates import get_today
from .core.exceptions import PortalError
from .core.logging_config import configure_logging
from .database import engine, init_db
from .routers import admin_users as admin_users_router
from .routers import auth as auth_router
from .routers import minijob_settings as minijob_settings_router
from .services.minijob_settings import MinijobSettingService


logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="HR Portal – Backend", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(PortalError)
    def portal_error_handler(request: Request, exc: PortalError):
        return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))

    @app.on_event("startup")
    def on_startup():
        init_db()
        # "today" moves on without any write, so re-derive the active flag on boot
        with Session(engine) as session:
            MinijobSettingService(session).refresh_active_status(get_today())
        logger.info("HR portal started (%s)", settings.environment)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    app.include_router(auth_router.router)
    app.include_router(admin_users_router.router)
    app.include_router(minijob_settings_router.router)

    return app


app = create_app()
