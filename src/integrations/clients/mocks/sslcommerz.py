"""
SSLCommerz: MOCK client.

This is a mock implementation for local development and testing.
No network calls are made; responses are shaped like the real gateway's
JSON and the scenario is chosen through the constructor.
"""

import logging
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from src.error_handler import GatewayError
from src.integrations.contracts.interfaces import PaymentGateway

logger = logging.getLogger(__name__)

MOCK_CHECKOUT_URL = "https://sandbox.sslcommerz.com/EasyCheckOut/test"


class MockSSLCommerzClient(PaymentGateway):
    """
    Args:
        initiation_status: "SUCCESS" opens a session, anything else is a refusal
        validation_status: status returned by validate(), e.g. "VALID" or "FAILED"
        failed_reason: failedreason sent with a refused initiation
        raise_on_validate: simulate a network failure on validate()
    """

    def __init__(
        self,
        initiation_status: str = "SUCCESS",
        validation_status: str = "VALID",
        failed_reason: str = "Store Credential Error Or Store is De-active",
        raise_on_validate: bool = False,
    ) -> None:
        self.initiation_status = initiation_status
        self.validation_status = validation_status
        self.failed_reason = failed_reason
        self.raise_on_validate = raise_on_validate
        self.initiate_calls: List[Dict[str, Any]] = []
        self.validate_calls: List[Dict[str, Any]] = []

    async def initiate(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        self.initiate_calls.append(dict(payload))
        logger.info("[MOCK] SSLCommerz initiate tran_id=%s", payload.get("tran_id"))

        if self.initiation_status != "SUCCESS":
            return {"status": self.initiation_status, "failedreason": self.failed_reason}

        session_key = uuid.uuid4().hex.upper()
        return {
            "status": "SUCCESS",
            "failedreason": "",
            "sessionkey": session_key,
            "GatewayPageURL": f"{MOCK_CHECKOUT_URL}{session_key[:12]}",
            "storeBanner": "",
            "storeLogo": "",
        }

    async def validate(
        self,
        val_id: str,
        store_id: Optional[str] = None,
        store_passwd: Optional[str] = None,
    ) -> Dict[str, Any]:
        self.validate_calls.append({"val_id": val_id, "store_id": store_id, "store_passwd": store_passwd})
        logger.info("[MOCK] SSLCommerz validate val_id=%s", val_id)

        if self.raise_on_validate:
            raise GatewayError("Mock gateway unreachable")

        return {
            "status": self.validation_status,
            "val_id": val_id,
            "tran_date": datetime.utcnow().strftime("%Y-%m-%d %H:%M:%S"),
            "bank_tran_id": f"MOCK{uuid.uuid4().hex[:10].upper()}",
            "card_type": "VISA-Dutch Bangla",
        }
