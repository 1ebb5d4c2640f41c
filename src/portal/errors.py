"""
Response shaping for errors.

Routes raise HTTPException. A string `detail` is rendered as {"message": detail};
a dict `detail` is rendered verbatim, which is how the endpoints that answer
with a {"success": ..., ...} envelope keep that shape on failure.
Anything else that escapes a route is logged and answered with
a JSON 500 {"message": "Server error"}.
"""

import logging

from botocore.exceptions import BotoCoreError, ClientError
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

# Anything the store client can raise.
STORE_ERRORS = (BotoCoreError, ClientError)


def is_condition_failure(exc: Exception) -> bool:
    """True when a conditional write failed, i.e. the target item does not exist."""
    return (
        isinstance(exc, ClientError)
        and exc.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException"
    )


def server_error(log_message: str, exc: Exception) -> HTTPException:
    """Log a store failure and build the plain 500 response."""
    logger.exception(log_message, exc_info=exc)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Server error",
    )


def envelope_error(message: str, exc: Exception) -> HTTPException:
    """Log a store failure and build the 500 response in the success envelope."""
    logger.exception(message, exc_info=exc)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"success": False, "message": message, "error": str(exc)},
    )


def not_found(message: str, envelope: bool = False) -> HTTPException:
    detail = {"success": False, "message": message} if envelope else message
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


async def _http_exception_handler(request: Request, exc: StarletteHTTPException):
    body = exc.detail if isinstance(exc.detail, dict) else {"message": exc.detail}
    return JSONResponse(
        status_code=exc.status_code,
        content=body,
        headers=getattr(exc, "headers", None),
    )


async def _validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": "Invalid request", "errors": jsonable_encoder(exc.errors())},
    )


async def _unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Server error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)
