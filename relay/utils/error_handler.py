"""
Exception handlers that render errors as `{message, success: false}`.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from relay.exceptions import AppException
from relay.logging import logger
from relay.schemas.response import ApiResponse


async def app_exception_handler(request: Request, ex: AppException) -> JSONResponse:
    if ex.http_status >= 500:
        logger.error(
            f"{type(ex).__name__} on {request.method} {request.url.path}: {ex.message}"
        )
    else:
        logger.debug(
            f"{type(ex).__name__} on {request.method} {request.url.path}: {ex.message}"
        )
    return JSONResponse(
        status_code=ex.http_status, content=ApiResponse.error(ex.message)
    )


async def request_validation_handler(
    request: Request, ex: RequestValidationError
) -> JSONResponse:
    logger.debug(f"Rejected request to {request.url.path}: {ex.errors()}")
    return JSONResponse(status_code=400, content=ApiResponse.error("Bad Request"))


async def unhandled_exception_handler(request: Request, ex: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled {type(ex).__name__} on {request.method} {request.url.path}: {ex}",
        exc_info=True,
    )
    return JSONResponse(
        status_code=500, content=ApiResponse.error("Internal Server Error")
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
