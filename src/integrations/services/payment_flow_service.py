"""
Payment flow - checkout initiation, IPN validation and browser redirects.

Per-transaction state machine: initiated -> paid | failed | cancelled.
No terminal state is locked; a later IPN or redirect overwrites.

Two update paths exist:
- trusted (IPN callback, server-to-server, always re-validated with the gateway)
- advisory (browser redirects, spoofable, stored as provisional)
"""

import logging
import time
import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from src.error_handler import (
    GatewayInitiationError,
    InvalidParameterError,
    MissingFieldError,
    OrderNotFoundError,
)
from src.integrations.contracts.interfaces import OrderLedger, PaymentGateway
from src.integrations.contracts.payments import (
    InitiatePaymentRequest,
    OrderRecord,
    OrderStatus,
    StatusSource,
)
from src.integrations.services.response_wrappers import (
    ValidationResultModel,
    normalize_initiation_response,
    normalize_validation_response,
)
from src.utils.settings import RelaySettings

logger = logging.getLogger(__name__)

# SSLCommerz rejects sessions without these, so every one gets a default.
DEFAULT_CUSTOMER_NAME = "Customer"
DEFAULT_CUSTOMER_EMAIL = "customer@example.com"
DEFAULT_CUSTOMER_ADDRESS = "Dhaka"
DEFAULT_CUSTOMER_CITY = "Dhaka"
DEFAULT_CUSTOMER_COUNTRY = "Bangladesh"
DEFAULT_CUSTOMER_PHONE = "01700000000"


def generate_tran_id() -> str:
    """Timestamp-based id; the random suffix keeps ids distinct within one millisecond."""
    return f"ORD_{int(time.time() * 1000)}_{uuid.uuid4().hex[:6]}"


class PaymentFlowService:
    def __init__(self, gateway: PaymentGateway, ledger: OrderLedger, settings: RelaySettings):
        self.gateway = gateway
        self.ledger = ledger
        self.settings = settings

    # -- Initiation --

    def build_gateway_payload(self, request: InitiatePaymentRequest, tran_id: str) -> Dict[str, Any]:
        customer = request.customer
        name = customer.name or DEFAULT_CUSTOMER_NAME
        address = customer.address or DEFAULT_CUSTOMER_ADDRESS
        city = customer.city or DEFAULT_CUSTOMER_CITY
        country = customer.country or DEFAULT_CUSTOMER_COUNTRY

        return {
            "store_id": self.settings.sslc_store_id,
            "store_passwd": self.settings.sslc_store_password,
            "total_amount": request.amount,
            "currency": request.currency,
            "tran_id": tran_id,
            "success_url": request.success_url or self.settings.success_url,
            "fail_url": request.fail_url or self.settings.fail_url,
            "cancel_url": request.cancel_url or self.settings.cancel_url,
            "product_name": request.product_name,
            "product_category": request.product_category,
            "product_profile": request.product_profile,
            "cus_name": name,
            "cus_email": customer.email or DEFAULT_CUSTOMER_EMAIL,
            "cus_add1": address,
            "cus_city": city,
            "cus_country": country,
            "cus_phone": customer.phone or DEFAULT_CUSTOMER_PHONE,
            "ship_name": name,
            "ship_add1": address,
            "ship_city": city,
            "ship_country": country,
        }

    async def initiate(self, request: InitiatePaymentRequest) -> Dict[str, Any]:
        if request.amount is None:
            raise MissingFieldError("amount is required")
        if request.amount <= 0:
            raise InvalidParameterError("amount must be greater than zero")

        tran_id = request.tran_id or generate_tran_id()
        payload = self.build_gateway_payload(request, tran_id)

        result = normalize_initiation_response(await self.gateway.initiate(payload))
        if not result.ok:
            logger.warning("Gateway refused initiation tran_id=%s reason=%s", tran_id, result.failure_message)
            raise GatewayInitiationError(result.failure_message, payload={"gateway": result.raw})

        now = datetime.utcnow()
        self.ledger.put(
            tran_id,
            OrderRecord(
                status=OrderStatus.INITIATED,
                amount=float(request.amount),
                currency=request.currency,
                customer=request.customer,
                meta=request.meta,
                gateway_response=result.raw,
                status_source=StatusSource.INITIATE,
                created_at=now,
            ),
        )
        logger.info("Order initiated tran_id=%s amount=%s %s", tran_id, request.amount, request.currency)
        return {"success": True, "tran_id": tran_id, "paymentUrl": result.gateway_page_url}

    # -- Trusted path --

    async def handle_ipn(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        tran_id = payload.get("tran_id")
        val_id = payload.get("val_id")
        if not tran_id or not val_id:
            raise MissingFieldError("Missing tran_id or val_id")

        validation = await self._validate(val_id)
        status = OrderStatus.PAID if validation.is_paid else OrderStatus.FAILED
        self.apply_trusted_update(tran_id, status, validated=validation.raw, ipn_payload=dict(payload))

        return {
            "success": True,
            "message": "Payment successful" if validation.is_paid else "Payment failed",
            "status_from_ipn": payload.get("status"),
            "validated_status": validation.status,
        }

    def apply_trusted_update(
        self,
        tran_id: str,
        status: OrderStatus,
        validated: Optional[Dict[str, Any]] = None,
        ipn_payload: Optional[Dict[str, Any]] = None,
    ) -> OrderRecord:
        changes: Dict[str, Any] = {"validated": validated}
        if ipn_payload is not None:
            changes["ipn_payload"] = ipn_payload
        return self._write(tran_id, status, StatusSource.IPN, provisional=False, **changes)

    # -- Advisory path --

    async def handle_success_redirect(self, tran_id: Optional[str], val_id: Optional[str]) -> Dict[str, Any]:
        if tran_id and val_id:
            validation = await self._validate(val_id)
            status = OrderStatus.PAID if validation.is_paid else OrderStatus.FAILED
            self.apply_advisory_update(tran_id, status, validated=validation.raw)
        return {"success": True, "message": "Success redirect captured", "tran_id": tran_id, "val_id": val_id}

    def handle_fail_redirect(self, tran_id: Optional[str]) -> Dict[str, Any]:
        if tran_id:
            self.apply_advisory_update(tran_id, OrderStatus.FAILED)
        return {"success": False, "message": "Payment failed", "tran_id": tran_id}

    def handle_cancel_redirect(self, tran_id: Optional[str]) -> Dict[str, Any]:
        if tran_id:
            self.apply_advisory_update(tran_id, OrderStatus.CANCELLED)
        return {"success": False, "message": "Payment cancelled", "tran_id": tran_id}

    def apply_advisory_update(
        self,
        tran_id: str,
        status: OrderStatus,
        validated: Optional[Dict[str, Any]] = None,
    ) -> OrderRecord:
        changes: Dict[str, Any] = {}
        if validated is not None:
            changes["validated"] = validated
        return self._write(tran_id, status, StatusSource.REDIRECT, provisional=True, **changes)

    # -- Lookup --

    def get_order(self, tran_id: str) -> OrderRecord:
        record = self.ledger.get(tran_id)
        if record is None:
            raise OrderNotFoundError(tran_id)
        return record

    def list_orders(self) -> Dict[str, OrderRecord]:
        return self.ledger.list()

    # -- Internals --

    async def _validate(self, val_id: str) -> ValidationResultModel:
        raw = await self.gateway.validate(
            val_id,
            store_id=self.settings.sslc_store_id,
            store_passwd=self.settings.sslc_store_password,
        )
        result = normalize_validation_response(raw)
        logger.info("Validation val_id=%s status=%s paid=%s", val_id, result.status, result.is_paid)
        return result

    def _write(self, tran_id: str, status: OrderStatus, source: StatusSource, provisional: bool, **changes: Any) -> OrderRecord:
        before = self.ledger.get(tran_id)
        updates = {
            "status": status,
            "status_source": source,
            "provisional": provisional,
            "updated_at": datetime.utcnow(),
            **changes,
        }
        record = before.model_copy(update=updates) if before is not None else OrderRecord(**updates)
        self.ledger.put(tran_id, record)
        logger.info(
            "Order %s -> %s (source=%s provisional=%s, previous=%s)",
            tran_id,
            status.value,
            source.value,
            provisional,
            before.status.value if before is not None else None,
        )
        return record
