from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..core.errors import (
    AddressTaken,
    AlreadyRegistered,
    BadgeRegError,
    InsufficientFee,
    InvalidInput,
    InvariantViolation,
    NotAdmin,
    NotFound,
    NotOwner,
)
from ..core.registry import BadgeRegistry
from .parsing import MissingPrincipal
from .routes import mount_admin_api, mount_badges_api

logger = logging.getLogger(__name__)

# Checked in order, so subclasses must precede their bases.
ERROR_STATUS: tuple[tuple[type[BadgeRegError], int], ...] = (
    (InvalidInput, 400),
    (MissingPrincipal, 401),
    (InsufficientFee, 402),
    (NotOwner, 403),
    (NotAdmin, 403),
    (NotFound, 404),
    (AlreadyRegistered, 409),
    (AddressTaken, 409),
    (InvariantViolation, 500),
)


def status_for_error(exc: BadgeRegError) -> int:
    for cls, status in ERROR_STATUS:
        if isinstance(exc, cls):
            return status
    return 400


def create_api_app(registry: BadgeRegistry) -> FastAPI:
    app = FastAPI(title="badgereg", version="0.1.0")
    app.state.registry = registry

    @app.exception_handler(BadgeRegError)
    def _registry_error(request: Request, exc: BadgeRegError) -> JSONResponse:
        status = status_for_error(exc)
        if status >= 500:
            logger.error("api.error %s %s -> %s: %s", request.method, request.url.path, exc.code, exc)
        return JSONResponse(status_code=status, content={"error": exc.code, "detail": str(exc)})

    @app.exception_handler(RequestValidationError)
    def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        # Malformed path params and non-object bodies are plain bad input.
        detail = "; ".join(
            f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', 'invalid')}" for err in exc.errors()
        )
        return JSONResponse(status_code=400, content={"error": InvalidInput.code, "detail": detail})

    mount_badges_api(app, registry)
    mount_admin_api(app, registry)

    @app.get("/healthz")
    def healthz() -> dict[str, bool]:
        return {"ok": True}

    return app


__all__ = ["create_api_app", "status_for_error", "ERROR_STATUS"]
