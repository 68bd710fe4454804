import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from app.domain.errors import DomainError
from app.domain.services import utcnow
from app.schemas.responses import ApiErrorOut

logger = logging.getLogger(__name__)

_STATUS_BY_KIND = {
    "unauthorized": status.HTTP_401_UNAUTHORIZED,
    "conflict": status.HTTP_409_CONFLICT,
    "invalid_input": status.HTTP_400_BAD_REQUEST,
    "not_found": status.HTTP_404_NOT_FOUND,
    "unavailable": status.HTTP_503_SERVICE_UNAVAILABLE,
}


def error_response(status_code: int, code: str, message: str) -> JSONResponse:
    body = ApiErrorOut(
        timestamp=utcnow(), status=status_code, code=code, message=message
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    status_code = _STATUS_BY_KIND.get(exc.kind, status.HTTP_400_BAD_REQUEST)
    if status_code >= 500:
        logger.error(
            "request failed on backing store",
            extra={"path": request.url.path, "error": exc.message},
        )
        # no internals in the payload
        return error_response(status_code, exc.kind, "service temporarily unavailable")
    return error_response(status_code, exc.kind, exc.message)


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
