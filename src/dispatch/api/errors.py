"""Map domain errors onto HTTP responses."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, ValidationError

from dispatch.exceptions import DispatchError
from dispatch.utils.logging import get_logger

logger = get_logger(__name__)


async def dispatch_error_handler(request: Request, exc: DispatchError) -> JSONResponse:
    logger.info(
        "Request rejected",
        path=request.url.path,
        error=exc.code,
        message=exc.message,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"error": "MalformedInput", "message": "Validation failed", "details": exc.messages},
    )


async def object_not_found_handler(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": "NotFound", "message": str(exc)})


async def expected_version_handler(request: Request, exc: ExpectedVersionError) -> JSONResponse:
    logger.warning("Stale write rejected", path=request.url.path, reason=str(exc))
    return JSONResponse(
        status_code=409,
        content={"error": "Conflict", "message": "Record was modified concurrently; reload and retry"},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DispatchError, dispatch_error_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(ObjectNotFoundError, object_not_found_handler)
    app.add_exception_handler(ExpectedVersionError, expected_version_handler)
