'''
Global exception handlers.
'''
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..common.exceptions import ValidationError
from ..common.logger import log


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    log.warning(f"{request.method} {request.url.path} rejected: {exc.code.value} - {exc.message}")
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


def register_error_handlers(app: FastAPI):
    """Attaches the business-rule error handler to the app."""
    app.add_exception_handler(ValidationError, validation_error_handler)
