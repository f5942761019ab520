"""Translate service outcomes into response envelopes.

Controllers hand a zero-argument callable to `StatusTranslator.translate`.
Whatever happens inside it, a successful value, an expected rejection or
an exception, comes back as a `JSONResponse` carrying an `ApiResponse`
envelope and one of four status codes (200, 400, 404, 500). Nothing
raised by the callable escapes the translator.

Expected rejections are translated without logging. `UNKNOWN` results
and exceptions are logged with their detail, and the caller only sees a
generic error text.
"""

import logging
from typing import Any, Callable, Optional
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from .errors import ErrorKind, ServiceResult
from .schemas import AnyResponse

INTERNAL_ERROR_TEXT = "Internal server error"

STATUS_BY_KIND = {
    ErrorKind.DUPLICATE_KEY: 400,
    ErrorKind.INTEGRITY_VIOLATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.UNKNOWN: 500,
}

_unmapped = set(ErrorKind) - set(STATUS_BY_KIND)
if _unmapped:
    raise RuntimeError(f"no HTTP status mapped for {sorted(k.name for k in _unmapped)}")


def envelope(http_status: int, message: str, data: Any = None, error: Optional[str] = None) -> JSONResponse:
    """Build a JSON response with the uniform envelope."""
    body = AnyResponse(
        status="success" if http_status < 400 else "error",
        http_status=http_status,
        message=message,
        data=data,
        error=error,
    )
    return JSONResponse(status_code=http_status, content=jsonable_encoder(body, by_alias=True))


class StatusTranslator:
    """Maps the outcome of one service call to an envelope and status code."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def success(self, message: str, data: Any = None) -> JSONResponse:
        return envelope(200, message, data=data)

    def failure(self, http_status: int, message: str, error: Optional[str] = None) -> JSONResponse:
        return envelope(http_status, message, error=error)

    def translate(
        self,
        call: Callable[[], ServiceResult],
        *,
        success_message: str,
        failure_message: str,
        not_found_message: Optional[str] = None,
        data: Any = None,
        render: Optional[Callable[[Any], Any]] = None,
    ) -> JSONResponse:
        """Run `call` and convert its outcome.

        On success the envelope carries `render(value)` when `render` is
        given, otherwise the fixed `data`.
        """
        try:
            result = call()
        except Exception:
            self.logger.exception(failure_message)
            return self.failure(500, failure_message, INTERNAL_ERROR_TEXT)

        if result.ok:
            return self.success(success_message, render(result.value) if render else data)

        status = STATUS_BY_KIND[result.error]
        if status == 404:
            return self.failure(404, not_found_message or failure_message, result.detail)
        if status == 500:
            self.logger.error("%s: %s", failure_message, result.detail)
            return self.failure(500, failure_message, INTERNAL_ERROR_TEXT)
        message = f"{failure_message}: {result.detail}" if result.detail else failure_message
        return self.failure(status, message, result.detail)


_api_logger = logging.getLogger("eduverse.api")


def get_translator() -> StatusTranslator:
    """FastAPI dependency providing a translator bound to the API logger."""
    return StatusTranslator(_api_logger)
