"""Map core errors to JSON responses on a FastAPI app."""

from __future__ import annotations

import structlog
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from app.core.errors import ConsistencyFault, FanclubError, ValidationError

log = structlog.get_logger()


def register_exception_handlers(app: FastAPI) -> None:
    """Keep FastAPI's ``detail`` field and add the stable error ``code``."""

    @app.exception_handler(FanclubError)
    async def _fanclub_error_handler(request: Request, exc: FanclubError) -> Response:
        if isinstance(exc, ConsistencyFault):
            log.error("membership.count_mismatch", path=request.url.path, **exc.meta)
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_public_dict(),
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def _request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> Response:
        """Malformed bodies and params get the same shape as a core ValidationError."""
        errors = [
            {"loc": list(err["loc"]), "msg": err["msg"], "type": err["type"]}
            for err in exc.errors()
        ]
        log.info("request.invalid", path=request.url.path, errors=len(errors))
        payload = ValidationError("Request validation failed").to_public_dict()
        payload["errors"] = errors
        return JSONResponse(status_code=ValidationError.status_code, content=payload)
