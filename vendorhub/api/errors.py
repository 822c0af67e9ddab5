import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from vendorhub.core.errors import (
    AlreadyExists,
    InvalidStateTransition,
    NotFound,
    SchemaDefinitionError,
    StaleSchemaError,
    ValidationError,
    VendorHubError,
)
from vendorhub.schemas.common import ErrorResponse

log = logging.getLogger(__name__)

_STATUS: dict[type, int] = {
    NotFound: 404,
    AlreadyExists: 409,
    StaleSchemaError: 409,
    InvalidStateTransition: 409,
    SchemaDefinitionError: 422,
    ValidationError: 422,
}


def status_for(exc: VendorHubError) -> int:
    for cls in type(exc).__mro__:
        if cls in _STATUS:
            return _STATUS[cls]
    return 400


async def vendorhub_error_handler(request: Request, exc: VendorHubError) -> JSONResponse:
    status = status_for(exc)
    log.info("request failed path=%s status=%s code=%s: %s", request.url.path, status, exc.code, exc)
    body = ErrorResponse(code=exc.code, message=str(exc), details=exc.details())
    return JSONResponse(status_code=status, content=jsonable_encoder(body))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(VendorHubError, vendorhub_error_handler)
