from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from minicrud.core.config import Settings, get_settings
from minicrud.core.logging_setup import configure_logging
from minicrud.repositories.json_storage import JsonCollection
from minicrud.routers import actions as actions_router
from minicrud.routers import auth as auth_router
from minicrud.routers import records as records_router
from minicrud.routers.envelope import install_error_handlers, ok
from minicrud.services.action_service import ActionService
from minicrud.services.auth_service import AuthService
from minicrud.services.record_service import RecordService
from minicrud.services.session_service import SessionManager

logger = logging.getLogger("minicrud.api")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Inject baseline security headers (anti clickjacking, no sniffing, no caching of API data)."""

    def __init__(self, app, *, enforce_hsts: bool) -> None:
        super().__init__(app)
        self._enforce_hsts = enforce_hsts

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer-when-downgrade")
        response.headers.setdefault("Cache-Control", "no-store")
        if self._enforce_hsts:
            response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        return response


def _allowed_origins(settings: Settings) -> list[str]:
    allowed_cors = {settings.public_base_url}
    if settings.app_env != "prod":
        allowed_cors.update(
            {
                "http://localhost:8000",
                "http://127.0.0.1:8000",
                "http://localhost:5173",
                "http://127.0.0.1:5173",
            }
        )
    return sorted(origin for origin in allowed_cors if origin)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the API with its own services; uvicorn uses ``minicrud.app_factory:app``."""
    settings = settings or get_settings()
    configure_logging()

    users = JsonCollection(settings.users_file, lock_timeout=settings.lock_timeout_seconds)
    records = JsonCollection(settings.records_file, lock_timeout=settings.lock_timeout_seconds)
    users.ensure_exists()
    records.ensure_exists()

    app = FastAPI(title="minicrud API")
    app.state.settings = settings
    app.state.session_manager = SessionManager(ttl_seconds=settings.session_ttl_seconds)
    app.state.action_service = ActionService(
        auth=AuthService(users=users),
        records=RecordService(records),
        sessions=app.state.session_manager,
    )

    origins = _allowed_origins(settings)
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            allow_headers=["*"],
        )
    app.add_middleware(SecurityHeadersMiddleware, enforce_hsts=settings.app_env == "prod")
    install_error_handlers(app)

    @app.get("/healthz")
    def healthz():
        return ok({"status": "ok"})

    app.include_router(auth_router.router)
    app.include_router(records_router.router)
    app.include_router(actions_router.router)

    logger.info("minicrud ready (users=%s, records=%s)", settings.users_file, settings.records_file)
    return app
