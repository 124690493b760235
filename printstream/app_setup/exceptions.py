"""
Gestionnaires d'exceptions: enveloppe JSON unique {"message": ..., ...}.
- HTTPException: detail str -> {"message": detail}; detail dict -> renvoyé tel quel.
- RequestValidationError: 400 (au lieu du 422 FastAPI) avec la liste des erreurs.
- Exception non gérée: 500 {"message": "Server error", "error": ...}.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


def error_body(detail) -> dict:
    if isinstance(detail, dict):
        return detail
    return {"message": str(detail) if detail is not None else "Error"}


def _validation_message(errors) -> str:
    if not errors:
        return "Invalid request"
    msg = str(errors[0].get("msg") or "Invalid request")
    # pydantic préfixe les ValueError levées par les validateurs
    return msg.replace("Value error, ", "", 1)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.detail),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        return JSONResponse(
            status_code=400,
            content={"message": _validation_message(errors), "errors": jsonable_encoder(errors)},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("app.unhandled failed path=%s", request.url.path)
        return JSONResponse(status_code=500, content={"message": "Server error", "error": str(exc)})
