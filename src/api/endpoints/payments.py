import json
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, Request

from src.api.dependencies import get_payment_flow, verify_internal_token
from src.error_handler import MissingFieldError
from src.integrations.contracts.payments import InitiatePaymentRequest
from src.integrations.services.payment_flow_service import PaymentFlowService


api = APIRouter()
payments_api = api


async def _read_ipn_payload(request: Request) -> Dict[str, Any]:
    """SSLCommerz posts form fields (urlencoded or multipart); JSON bodies are accepted too."""
    content_type = request.headers.get("content-type", "")
    if "application/json" in content_type:
        body = await request.body()
        if not body:
            return {}
        try:
            data = json.loads(body)
        except ValueError as e:
            raise MissingFieldError("Malformed JSON body") from e
        return data if isinstance(data, dict) else {}
    form = await request.form()
    # uploaded files are not part of the notification
    return {key: value for key, value in form.items() if isinstance(value, str)}


@api.post("/initiate", tags=["Payments"], dependencies=[Depends(verify_internal_token)])
async def initiate_payment(
    body: InitiatePaymentRequest,
    flow: PaymentFlowService = Depends(get_payment_flow),
):
    """
    Open an SSLCommerz checkout session.

    Flow: frontend backend -> this route -> SSLCommerz -> GatewayPageURL
    """
    return await flow.initiate(body)


@api.post("/ipn", tags=["Payments"])
async def ipn(request: Request, flow: PaymentFlowService = Depends(get_payment_flow)):
    """
    SSLCommerz IPN receiver. Every notification is re-validated with the
    validation API before the order is updated.
    """
    payload = await _read_ipn_payload(request)
    return await flow.handle_ipn(payload)


@api.get("/success", tags=["Payments"])
async def success_redirect(
    tran_id: Optional[str] = Query(default=None),
    val_id: Optional[str] = Query(default=None),
    flow: PaymentFlowService = Depends(get_payment_flow),
):
    return await flow.handle_success_redirect(tran_id, val_id)


@api.get("/fail", tags=["Payments"])
async def fail_redirect(
    tran_id: Optional[str] = Query(default=None),
    flow: PaymentFlowService = Depends(get_payment_flow),
):
    return flow.handle_fail_redirect(tran_id)


@api.get("/cancel", tags=["Payments"])
async def cancel_redirect(
    tran_id: Optional[str] = Query(default=None),
    flow: PaymentFlowService = Depends(get_payment_flow),
):
    return flow.handle_cancel_redirect(tran_id)


@api.get("/order/{tran_id}", tags=["Payments"])
async def get_order(tran_id: str, flow: PaymentFlowService = Depends(get_payment_flow)):
    """Order status lookup, used for polling after checkout."""
    order = flow.get_order(tran_id)
    return {"success": True, "order": order.to_public_dict()}


@api.get("/orders", tags=["Payments"], dependencies=[Depends(verify_internal_token)])
async def list_orders(flow: PaymentFlowService = Depends(get_payment_flow)):
    orders = flow.list_orders()
    return {"success": True, "orders": {tran_id: o.to_public_dict() for tran_id, o in orders.items()}}
