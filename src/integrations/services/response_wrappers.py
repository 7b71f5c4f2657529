from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from src.integrations.contracts.payments import is_paid_validation_status

INITIATION_SUCCESS_STATUS = "SUCCESS"
DEFAULT_INITIATION_FAILURE = "SSLCommerz initiation failed"


class InitiationResultModel(BaseModel):
    status: str = ""
    gateway_page_url: Optional[str] = None
    failed_reason: Optional[str] = None
    raw: Dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == INITIATION_SUCCESS_STATUS and bool(self.gateway_page_url)

    @property
    def failure_message(self) -> str:
        return self.failed_reason or DEFAULT_INITIATION_FAILURE


class ValidationResultModel(BaseModel):
    status: Optional[str] = None
    is_paid: bool = False
    raw: Dict[str, Any] = Field(default_factory=dict)


def normalize_initiation_response(raw: Optional[Dict[str, Any]]) -> InitiationResultModel:
    raw = raw if isinstance(raw, dict) else {}
    return InitiationResultModel(
        status=str(raw.get("status") or ""),
        gateway_page_url=_non_empty_str(raw.get("GatewayPageURL")),
        failed_reason=_non_empty_str(raw.get("failedreason")),
        raw=raw,
    )


def normalize_validation_response(raw: Optional[Dict[str, Any]]) -> ValidationResultModel:
    raw = raw if isinstance(raw, dict) else {}
    status = raw.get("status")
    return ValidationResultModel(
        status=None if status is None else str(status),
        is_paid=is_paid_validation_status(status),
        raw=raw,
    )


def _non_empty_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
