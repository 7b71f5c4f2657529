"""Error taxonomy and FastAPI exception handlers for the relay API."""
from typing import Any, Dict, Optional
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class RelayError(Exception):
    status_code = 500

    def __init__(self, message: str, *, status_code: Optional[int] = None, payload: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.payload = payload or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"success": False, "message": self.message, **self.payload}


class MissingFieldError(RelayError):
    status_code = 400


class InvalidParameterError(RelayError):
    status_code = 400


class UnauthorizedError(RelayError):
    status_code = 401


class OrderNotFoundError(RelayError):
    status_code = 404

    def __init__(self, tran_id: str) -> None:
        super().__init__("Order not found")
        self.tran_id = tran_id


class GatewayError(RelayError):
    """Network failure or non-2xx answer from the payment gateway."""


class GatewayInitiationError(RelayError):
    """Gateway answered but refused to open a checkout session."""

    status_code = 400


class ImageError(RelayError):
    """Base for image proxy errors; rendered as {"error": message}."""

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message}


class ImageParameterError(ImageError):
    status_code = 400


class ImageProviderError(ImageError):
    """
    Raised by the image client for any failed fetch.

    status_code is the provider's HTTP status when it answered, else 502.
    """

    status_code = 502

    @property
    def aborts_batch(self) -> bool:
        return self.status_code in (401, 403, 429)


class ImageBatchError(ImageError):
    status_code = 500


class ErrorHandler:
    GENERIC_MESSAGE = "Internal error"

    def handle_exception(self, exc: Exception, context: Dict[str, Any] = None) -> Dict[str, Any]:
        logger.error("Unhandled exception in relay API: %s (context=%s)", exc, context or {}, exc_info=True)
        return {"success": False, "message": self.GENERIC_MESSAGE}

    def handle_relay_error(self, exc: RelayError, context: Dict[str, Any] = None) -> Dict[str, Any]:
        if exc.status_code >= 500:
            logger.error("Relay error %s: %s (context=%s)", exc.status_code, exc.message, context or {})
        else:
            logger.info("Relay error %s: %s", exc.status_code, exc.message)
        return exc.to_dict()

    def handle_validation_error(self, exc: RequestValidationError) -> Dict[str, Any]:
        errors = exc.errors()
        if errors:
            first = errors[0]
            field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
            message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
        else:
            message = "Invalid request"
        return {"success": False, "message": message}


def register_exception_handlers(app: FastAPI, handler: Optional[ErrorHandler] = None) -> None:
    handler = handler or ErrorHandler()

    async def _relay_error(request: Request, exc: RelayError):
        body = handler.handle_relay_error(exc, context={"path": request.url.path})
        return JSONResponse(status_code=exc.status_code, content=body)

    async def _validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content=handler.handle_validation_error(exc))

    async def _unexpected(request: Request, exc: Exception):
        body = handler.handle_exception(exc, context={"path": request.url.path, "method": request.method})
        return JSONResponse(status_code=500, content=body)

    app.add_exception_handler(RelayError, _relay_error)
    app.add_exception_handler(RequestValidationError, _validation_error)
    app.add_exception_handler(Exception, _unexpected)
