"""
SSLCommerz HTTP Client.

Wraps the two remote calls the payment flow needs:
- initiate: form-encoded POST that opens a hosted checkout session
- validate: GET against the validation API for an IPN / redirect val_id

The sandbox flag is the only environment switch.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from src.error_handler import GatewayError
from src.integrations.contracts.interfaces import PaymentGateway

logger = logging.getLogger(__name__)

SANDBOX_BASE_URL = "https://sandbox.sslcommerz.com"
LIVE_BASE_URL = "https://securepay.sslcommerz.com"
INITIATE_PATH = "/gwprocess/v4/api.php"
VALIDATE_PATH = "/validator/api/validationserverAPI.php"


@dataclass(frozen=True)
class GatewayEndpoints:
    init: str
    validate: str


def endpoints_for(sandbox: bool) -> GatewayEndpoints:
    base = SANDBOX_BASE_URL if sandbox else LIVE_BASE_URL
    return GatewayEndpoints(init=f"{base}{INITIATE_PATH}", validate=f"{base}{VALIDATE_PATH}")


class SSLCommerzClient(PaymentGateway):
    def __init__(
        self,
        store_id: str = "",
        store_password: str = "",
        sandbox: bool = False,
        timeout_seconds: float = 20.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.store_id = store_id
        self.store_password = store_password
        self.sandbox = sandbox
        self.endpoints = endpoints_for(sandbox)
        self.timeout_seconds = timeout_seconds
        self._transport = transport
        if not store_id:
            logger.warning("SSLCommerz store id is not set.")

    async def initiate(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        # Absent fields are omitted rather than sent as "None".
        form = {k: str(v) for k, v in payload.items() if v is not None}
        logger.info("Initiating SSLCommerz session tran_id=%s sandbox=%s", form.get("tran_id"), self.sandbox)
        return await self._request("POST", self.endpoints.init, data=form)

    async def validate(
        self,
        val_id: str,
        store_id: Optional[str] = None,
        store_passwd: Optional[str] = None,
    ) -> Dict[str, Any]:
        params = {
            "val_id": val_id,
            "store_id": store_id or self.store_id,
            "store_passwd": store_passwd or self.store_password,
            "format": "json",
        }
        logger.info("Validating SSLCommerz val_id=%s", val_id)
        return await self._request("GET", self.endpoints.validate, params=params)

    async def _request(self, method: str, url: str, **kwargs: Any) -> Dict[str, Any]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport) as client:
                response = await client.request(method, url, **kwargs)
                response.raise_for_status()
                data = response.json() if response.content else {}
        except httpx.HTTPStatusError as e:
            body = _safe_body(e.response)
            logger.error(f"HTTP error from SSLCommerz: {e.response.status_code} {body}")
            raise GatewayError(
                f"Request failed with status code {e.response.status_code}",
                payload={"gateway": body},
            ) from e
        except httpx.RequestError as e:
            logger.error(f"Request error connecting to SSLCommerz: {e}")
            raise GatewayError(str(e) or "Could not reach SSLCommerz") from e
        except ValueError as e:
            logger.error(f"SSLCommerz returned a non-JSON body: {e}")
            raise GatewayError("SSLCommerz returned an unreadable response") from e

        if not isinstance(data, dict):
            raise GatewayError("SSLCommerz returned an unexpected payload", payload={"gateway": data})
        return data


def _safe_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text
