"""End-to-end tests for the /api/payments routes (mock gateway, in-memory ledger)."""

import pytest
from fastapi.testclient import TestClient

from src.api.main import create_app
from src.database.order_ledger import InMemoryOrderLedger
from src.integrations.clients.mocks.sslcommerz import MockSSLCommerzClient


def test_health_endpoints(client):
    assert client.get("/").json()["status"] == "healthy"
    body = client.get("/health").json()
    assert body["ledger"] == {"backend": "InMemoryOrderLedger", "connected": True}
    assert body["sandbox"] is True


def test_initiate_then_ipn_marks_order_paid(client, ledger, gateway):
    r = client.post("/api/payments/initiate", json={"amount": 100})
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["paymentUrl"]
    tran_id = body["tran_id"]

    order = client.get(f"/api/payments/order/{tran_id}").json()["order"]
    assert order["status"] == "initiated"
    assert order["amount"] == 100
    assert order["currency"] == "BDT"
    assert "createdAt" in order
    assert "created_at" not in order

    gateway.validation_status = "VALIDATED"
    r = client.post(
        "/api/payments/ipn",
        data={"tran_id": tran_id, "val_id": "VAL1", "status": "VALID", "bank_tran_id": "B1"},
    )
    assert r.status_code == 200
    assert r.json() == {
        "success": True,
        "message": "Payment successful",
        "status_from_ipn": "VALID",
        "validated_status": "VALIDATED",
    }

    order = client.get(f"/api/payments/order/{tran_id}").json()["order"]
    assert order["status"] == "paid"
    assert order["validated"]["status"] == "VALIDATED"
    assert order["ipn_payload"]["bank_tran_id"] == "B1"
    assert order["provisional"] is False


def test_initiate_keeps_extra_customer_fields(client, ledger, gateway):
    customer = {"name": "Rahim", "email": "r@example.com", "postcode": "1207", "loyalty": {"tier": "gold"}}
    r = client.post("/api/payments/initiate", json={"amount": 75, "tran_id": "ORD_C", "customer": customer})
    assert r.status_code == 200

    stored = ledger.get("ORD_C").customer
    assert stored.name == "Rahim"
    assert stored.model_extra == {"postcode": "1207", "loyalty": {"tier": "gold"}}
    assert gateway.initiate_calls[-1]["cus_name"] == "Rahim"

    order = client.get("/api/payments/order/ORD_C").json()["order"]
    assert order["customer"] == customer


def test_initiate_missing_amount_is_400_and_no_record(client, ledger):
    r = client.post("/api/payments/initiate", json={"tran_id": "ORD_NOPE"})
    assert r.status_code == 400
    assert r.json() == {"success": False, "message": "amount is required"}
    assert len(ledger) == 0


def test_initiate_without_body_is_400(client, ledger):
    r = client.post("/api/payments/initiate")
    assert r.status_code == 400
    assert r.json()["success"] is False
    assert len(ledger) == 0


def test_initiate_gateway_refusal_is_400_with_reason(client, gateway, ledger):
    gateway.initiation_status = "FAILED"
    gateway.failed_reason = "Store Credential Error Or Store is De-active"

    r = client.post("/api/payments/initiate", json={"amount": 100, "tran_id": "ORD_R"})

    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert body["message"] == "Store Credential Error Or Store is De-active"
    assert body["gateway"]["status"] == "FAILED"
    assert ledger.get("ORD_R") is None


def test_ipn_accepts_json_body(client, ledger):
    r = client.post("/api/payments/ipn", json={"tran_id": "ORD_J", "val_id": "V1", "status": "VALID"})
    assert r.status_code == 200
    assert ledger.get("ORD_J").status.value == "paid"


def test_ipn_form_with_non_utf8_bytes_is_processed(client, ledger):
    r = client.post(
        "/api/payments/ipn",
        content=b"tran_id=ORD_U&val_id=V1&status=VALID&cus_name=Jos\xe9",
        headers={"content-type": "application/x-www-form-urlencoded"},
    )
    assert r.status_code == 200
    order = ledger.get("ORD_U")
    assert order.status.value == "paid"
    assert order.ipn_payload["cus_name"] == "José"


def test_ipn_accepts_multipart_form(client, ledger, gateway):
    r = client.post(
        "/api/payments/ipn",
        data={"tran_id": "ORD_M", "val_id": "V1", "status": "VALID"},
        files={"attachment": ("note.txt", b"ignored", "text/plain")},
    )
    assert r.status_code == 200
    assert gateway.validate_calls[-1]["val_id"] == "V1"
    order = ledger.get("ORD_M")
    assert order.status.value == "paid"
    assert "attachment" not in order.ipn_payload


def test_ipn_missing_ids_is_400_without_mutation(client, ledger):
    r = client.post("/api/payments/ipn", data={"tran_id": "ORD_1", "status": "VALID"})
    assert r.status_code == 400
    assert r.json() == {"success": False, "message": "Missing tran_id or val_id"}
    assert len(ledger) == 0


def test_ipn_gateway_outage_is_500(client, gateway):
    gateway.raise_on_validate = True
    r = client.post("/api/payments/ipn", data={"tran_id": "ORD_1", "val_id": "V1"})
    assert r.status_code == 500
    assert r.json()["success"] is False


def test_success_redirect_revalidates(client, ledger):
    r = client.get("/api/payments/success", params={"tran_id": "ORD_S", "val_id": "V1"})
    assert r.status_code == 200
    assert r.json() == {"success": True, "message": "Success redirect captured", "tran_id": "ORD_S", "val_id": "V1"}
    order = ledger.get("ORD_S")
    assert order.status.value == "paid"
    assert order.provisional is True


def test_cancel_creates_record_without_prior_order(client):
    r = client.get("/api/payments/cancel", params={"tran_id": "X"})
    assert r.status_code == 200
    assert r.json() == {"success": False, "message": "Payment cancelled", "tran_id": "X"}

    order = client.get("/api/payments/order/X").json()["order"]
    assert order["status"] == "cancelled"
    assert "updatedAt" in order
    assert "updated_at" not in order
    assert "createdAt" not in order
    assert "amount" not in order
    assert "gateway_response" not in order


def test_fail_redirect_sets_failed(client, ledger):
    client.post("/api/payments/initiate", json={"amount": 40, "tran_id": "ORD_F"})
    r = client.get("/api/payments/fail", params={"tran_id": "ORD_F"})
    assert r.json() == {"success": False, "message": "Payment failed", "tran_id": "ORD_F"}
    assert ledger.get("ORD_F").status.value == "failed"


def test_unknown_order_is_404(client):
    r = client.get("/api/payments/order/does-not-exist")
    assert r.status_code == 404
    assert r.json() == {"success": False, "message": "Order not found"}


@pytest.fixture
def guarded_client(settings, ledger, gateway, image_provider):
    settings = settings.model_copy(update={"internal_shared_token": "s3cret"})
    app = create_app(settings=settings, ledger=ledger, gateway=gateway, image_provider=image_provider)
    return TestClient(app)


def test_internal_token_required_when_configured(guarded_client, ledger):
    r = guarded_client.post("/api/payments/initiate", json={"amount": 100})
    assert r.status_code == 401
    assert r.json() == {"success": False, "message": "Unauthorized (internal token)"}

    r = guarded_client.post("/api/payments/initiate", json={"amount": 100}, headers={"x-internal-token": "wrong"})
    assert r.status_code == 401
    assert len(ledger) == 0

    r = guarded_client.post("/api/payments/initiate", json={"amount": 100}, headers={"x-internal-token": "s3cret"})
    assert r.status_code == 200
    assert len(ledger) == 1


@pytest.mark.parametrize("token", [" s3cret ", "s3cret ", "S3CRET"])
def test_internal_token_must_match_exactly(guarded_client, ledger, token):
    r = guarded_client.post("/api/payments/initiate", json={"amount": 100}, headers={"x-internal-token": token})
    assert r.status_code == 401
    assert len(ledger) == 0


def test_internal_token_does_not_gate_callbacks(guarded_client):
    r = guarded_client.post("/api/payments/ipn", data={"tran_id": "ORD_1", "val_id": "V1"})
    assert r.status_code == 200
    r = guarded_client.get("/api/payments/cancel", params={"tran_id": "ORD_1"})
    assert r.status_code == 200


def test_list_orders_is_token_gated(guarded_client):
    guarded_client.get("/api/payments/cancel", params={"tran_id": "ORD_1"})
    assert guarded_client.get("/api/payments/orders").status_code == 401

    r = guarded_client.get("/api/payments/orders", headers={"x-internal-token": "s3cret"})
    assert r.status_code == 200
    assert r.json()["orders"]["ORD_1"]["status"] == "cancelled"


def test_mock_mode_selects_mock_gateway(settings):
    settings = settings.model_copy(update={"integrations_mode": "mock"})
    app = create_app(settings=settings, ledger=InMemoryOrderLedger())
    assert isinstance(app.state.payment_flow.gateway, MockSSLCommerzClient)
