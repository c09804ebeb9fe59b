"""Exception handlers rendering the API's ``{success: false, ...}`` error bodies."""

import logging
from typing import Any, Dict, List

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from apps.annonces.errors import AnnonceError

logger = logging.getLogger(__name__)


def _field_errors(exc: RequestValidationError) -> List[Dict[str, Any]]:
    errors = []
    for err in exc.errors():
        # drop the "body" / "query" prefix pydantic puts first
        loc = [str(part) for part in err.get("loc", ())[1:]]
        errors.append({
            "field": ".".join(loc),
            "message": err.get("msg", ""),
            "type": err.get("type", ""),
        })
    return errors


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = _field_errors(exc)
    logger.info("Validation failed on %s %s: %s", request.method, request.url.path, errors)
    return JSONResponse(status_code=422, content={"success": False, "errors": errors})


async def annonce_error_handler(request: Request, exc: AnnonceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"success": False, "error": exc.message})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"success": False, "error": str(exc)})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(AnnonceError, annonce_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
