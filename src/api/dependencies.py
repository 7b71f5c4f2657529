import hmac
import logging
from typing import Optional

from fastapi import Header, Request

from src.error_handler import UnauthorizedError
from src.integrations.services.image_batch_service import ImageBatchService
from src.integrations.services.payment_flow_service import PaymentFlowService

logger = logging.getLogger(__name__)


def get_payment_flow(request: Request) -> PaymentFlowService:
    return request.app.state.payment_flow


def get_image_batch(request: Request) -> ImageBatchService:
    return request.app.state.image_batch


async def verify_internal_token(
    request: Request,
    x_internal_token: Optional[str] = Header(default=None, alias="x-internal-token"),
):
    """Shared-secret check for internal callers; disabled when no secret is configured."""
    expected = request.app.state.settings.internal_shared_token
    if not expected:
        return

    candidate = x_internal_token or ""
    if not candidate or not hmac.compare_digest(candidate.encode("utf-8"), expected.encode("utf-8")):
        logger.warning("Internal token rejected: path=%s header_present=%s", request.url.path, bool(x_internal_token))
        raise UnauthorizedError("Unauthorized (internal token)")
