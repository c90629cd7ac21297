import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from boost_portal.config import settings
from boost_portal.db.base import engine
from boost_portal.errors import (
    ConflictError,
    IdentityProviderConfigError,
    IdentityProviderError,
    InvalidRequestError,
    NotFoundError,
    PermissionDeniedError,
)
from boost_portal.routers import (
    advertiser_accounts,
    audience_requests,
    audiences,
    campaigns,
    companies,
    debug,
    notifications,
    users,
)

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(title="Boost Portal API", default_response_class=ORJSONResponse)

    allow_origins = sorted(set(settings.BACKEND_CORS_ORIGINS))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(PermissionDeniedError)
    async def permission_denied_handler(_request: Request, exc: PermissionDeniedError) -> ORJSONResponse:
        return ORJSONResponse(status_code=403, content=exc.to_payload())

    @app.exception_handler(InvalidRequestError)
    async def invalid_request_handler(_request: Request, exc: InvalidRequestError) -> ORJSONResponse:
        return ORJSONResponse(status_code=400, content={"detail": str(exc), "field": exc.field})

    @app.exception_handler(ConflictError)
    async def conflict_handler(_request: Request, exc: ConflictError) -> ORJSONResponse:
        return ORJSONResponse(status_code=409, content={"detail": str(exc)})

    @app.exception_handler(NotFoundError)
    async def not_found_handler(_request: Request, exc: NotFoundError) -> ORJSONResponse:
        return ORJSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(IdentityProviderConfigError)
    async def identity_config_handler(_request: Request, exc: IdentityProviderConfigError) -> ORJSONResponse:
        logger.error("Identity provider is not configured", extra={"setting": exc.setting})
        return ORJSONResponse(status_code=503, content={"detail": str(exc), "setting": exc.setting})

    @app.exception_handler(IdentityProviderError)
    async def identity_error_handler(_request: Request, exc: IdentityProviderError) -> ORJSONResponse:
        logger.error(
            "Identity provider request failed",
            extra={"status_code": exc.status_code, "error": exc.error_payload},
        )
        return ORJSONResponse(status_code=502, content={"detail": str(exc)})

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(_request: Request, exc: IntegrityError) -> ORJSONResponse:
        logger.info("Integrity conflict", extra={"error": str(exc.orig)})
        return ORJSONResponse(status_code=409, content={"detail": "Record conflicts with an existing one"})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(_request: Request, exc: Exception) -> ORJSONResponse:
        logger.exception("Unhandled server exception", exc_info=exc)
        return ORJSONResponse(status_code=500, content={"detail": "Internal server error."})

    @app.get("/health")
    async def health() -> dict[str, bool]:
        return {"ok": True}

    @app.get("/health/db")
    def health_db() -> dict[str, str]:
        try:
            with engine.connect() as connection:
                connection.execute(text("SELECT 1"))
            return {"db": "ok"}
        except Exception as exc:  # pragma: no cover - simple runtime check
            return {"db": f"error: {exc}"}

    app.include_router(users.router)
    app.include_router(companies.router)
    app.include_router(campaigns.router)
    app.include_router(audience_requests.router)
    app.include_router(audiences.router)
    app.include_router(notifications.router)
    app.include_router(advertiser_accounts.router)
    app.include_router(debug.router)

    return app


app = create_app()
