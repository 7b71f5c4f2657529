"""
Payment contracts.

Defines the order record kept for every transaction and the request shape
accepted by the initiation endpoint.

These contracts are used by:
- clients/mocks/sslcommerz.py and clients/real_http/sslcommerz.py
- services/payment_flow_service.py
- database/order_ledger*.py (records are stored as JSON documents)
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_CURRENCY = "BDT"

PAID_VALIDATION_STATUSES = frozenset({"VALID", "VALIDATED"})


class OrderStatus(str, Enum):
    INITIATED = "initiated"
    PAID = "paid"
    FAILED = "failed"
    CANCELLED = "cancelled"


class StatusSource(str, Enum):
    INITIATE = "initiate"
    IPN = "ipn"          # server-to-server, authoritative
    REDIRECT = "redirect"  # browser-facing, advisory only


class CustomerInfo(BaseModel):
    # callers may send extra customer fields; they are stored as given
    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None


class InitiatePaymentRequest(BaseModel):
    amount: Optional[float] = None
    tran_id: Optional[str] = None
    customer: CustomerInfo = Field(default_factory=CustomerInfo)
    success_url: Optional[str] = None
    fail_url: Optional[str] = None
    cancel_url: Optional[str] = None
    meta: Dict[str, Any] = Field(default_factory=dict)
    currency: str = DEFAULT_CURRENCY
    product_name: str = "Order"
    product_category: str = "General"
    product_profile: str = "general"


class OrderRecord(BaseModel):
    status: OrderStatus
    amount: Optional[float] = None
    currency: Optional[str] = None
    customer: Optional[CustomerInfo] = None
    meta: Optional[Dict[str, Any]] = None
    gateway_response: Optional[Dict[str, Any]] = None
    validated: Optional[Dict[str, Any]] = None
    ipn_payload: Optional[Dict[str, Any]] = None
    status_source: StatusSource = StatusSource.INITIATE
    provisional: bool = False
    created_at: Optional[datetime] = Field(default=None, serialization_alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, serialization_alias="updatedAt")

    def to_public_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def is_paid_validation_status(status: Any) -> bool:
    """VALID / VALIDATED (any case) means the gateway confirmed payment."""
    return str(status or "").strip().upper() in PAID_VALIDATION_STATUSES
