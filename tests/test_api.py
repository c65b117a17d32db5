"""End-to-end tests for the commission ledger HTTP API."""

import sys
from decimal import Decimal
from unittest.mock import MagicMock, patch
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from commission_ledger.main import app
from tests.conftest import ADMIN, STAFF, auth_headers, create_commission, create_operator_payment

BASE = "/api/commissions"


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def admin():
    return auth_headers(ADMIN)


@pytest.fixture
def staff():
    return auth_headers(STAFF)


def _close_payload(entries, **overrides):  # type: ignore[no-untyped-def]
    payload = {
        "commission_ids": [str(e.id) for e in entries],
        "closing_type": "salesperson",
        "recipient_name": "Maria Lopez",
        "period_start": "2026-03-01",
        "period_end": "2026-03-31",
        "currency": "USD",
    }
    payload.update(overrides)
    return payload


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "running"


class TestAuthRequired:
    def test_missing_token(self, client):
        assert client.get(f"{BASE}/").status_code == 401

    def test_garbage_token(self, client):
        response = client.get(f"{BASE}/", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401


class TestLedgerEndpoints:
    def test_register_and_get(self, client, staff):
        response = client.post(
            f"{BASE}/entries/",
            json={
                "kind": "commission",
                "subject_name": "Maria Lopez",
                "reservation_id": str(uuid4()),
                "reservation_number": "R-2001",
                "sale_date": "2026-03-01",
                "operation_date": "2026-03-04",
                "gross_amount": "500.00",
                "currency": "USD",
                "rate": "10",
            },
            headers=staff,
        )
        assert response.status_code == 201
        body = response.json()
        assert Decimal(body["amount"]) == Decimal("50")
        assert body["closing_info"]["is_closed"] is False

        fetched = client.get(f"{BASE}/entries/{body['id']}", headers=staff)
        assert fetched.status_code == 200
        assert fetched.json()["reservation_number"] == "R-2001"

    def test_register_operator_without_cost(self, client, staff):
        response = client.post(
            f"{BASE}/entries/",
            json={
                "kind": "operator_payment",
                "subject_name": "Andes Transfers",
                "reservation_id": str(uuid4()),
                "reservation_number": "R-2002",
                "sale_date": "2026-03-01",
                "operation_date": "2026-03-04",
            },
            headers=staff,
        )
        assert response.status_code == 422

    def test_unknown_entry(self, client, staff):
        response = client.get(f"{BASE}/entries/{uuid4()}", headers=staff)
        assert response.status_code == 404
        assert response.json()["error_code"] == "ERR_NOT_FOUND"

    def test_lists_split_by_kind(self, client, staff, db_session):
        commission = create_commission(db_session)
        payment = create_operator_payment(db_session)

        commissions = client.get(f"{BASE}/", headers=staff)
        operators = client.get(f"{BASE}/operators/", headers=staff)

        assert [e["id"] for e in commissions.json()] == [str(commission.id)]
        assert commissions.headers["X-Total-Count"] == "1"
        assert [e["id"] for e in operators.json()] == [str(payment.id)]
        assert operators.json()[0]["can_close"] is True

    def test_status_filter_accepts_many(self, client, staff, db_session):
        create_commission(db_session, status="pending")
        create_commission(db_session, status="approved")
        create_commission(db_session, status="paid")

        response = client.get(
            f"{BASE}/", params=[("status", "pending"), ("status", "paid")], headers=staff
        )
        assert sorted(e["status"] for e in response.json()) == ["paid", "pending"]

    def test_approve_and_pay(self, client, staff, db_session):
        entry = create_commission(db_session)

        approved = client.post(f"{BASE}/{entry.id}/approve/", headers=staff)
        paid = client.post(f"{BASE}/{entry.id}/pay/?payment_date=2026-04-02", headers=staff)

        assert approved.json()["status"] == "approved"
        assert paid.json()["status"] == "paid"
        assert paid.json()["payment_date"] == "2026-04-02"

    def test_summary_and_unique_values(self, client, staff, db_session):
        create_commission(db_session, computed_amount=Decimal("40.00"))
        create_operator_payment(db_session)

        summary = client.get(f"{BASE}/summary/", headers=staff).json()
        assert len(summary) == 1
        assert Decimal(summary[0]["amount_total"]) == Decimal("40")

        values = client.get(f"{BASE}/operators/unique-values/", headers=staff).json()
        assert values["subjects"] == ["Andes Transfers"]

    def test_closure_status(self, client, admin, db_session):
        reservation = uuid4()
        entry = create_commission(db_session, reservation_id=reservation)
        client.post(f"{BASE}/close/", json=_close_payload([entry]), headers=admin)

        body = client.get(f"{BASE}/closure-status/{reservation}/", headers=admin).json()
        assert body["all_closed"] is True
        assert body["entries"][0]["closing_info"]["invoice_number"] == "SAL-000001"

    def test_export_csv(self, client, staff, db_session):
        create_commission(db_session)
        create_commission(db_session)

        response = client.get(f"{BASE}/export/", headers=staff)

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert 'filename="commissions_' in response.headers["content-disposition"]
        assert len(response.text.strip().splitlines()) == 3


class TestClosingEndpoints:
    def test_close_commissions(self, client, staff, db_session):
        a = create_commission(db_session, computed_amount=Decimal("100.00"))
        b = create_commission(db_session, computed_amount=Decimal("150.00"))

        response = client.post(f"{BASE}/close/", json=_close_payload([a, b]), headers=staff)

        assert response.status_code == 201
        body = response.json()
        assert body["closing"]["invoice_number"] == "SAL-000001"
        assert Decimal(body["closing"]["total_amount"]) == Decimal("250")
        assert body["closing"]["item_count"] == 2
        assert set(body["closing"]["item_ids"]) == {str(a.id), str(b.id)}
        assert body["financial_entry_id"]
        assert "SAL-000001" in body["message"]

    def test_close_twice_conflicts(self, client, staff, db_session):
        entry = create_commission(db_session)
        client.post(f"{BASE}/close/", json=_close_payload([entry]), headers=staff)

        response = client.post(f"{BASE}/close/", json=_close_payload([entry]), headers=staff)

        assert response.status_code == 409
        body = response.json()
        assert body["error_code"] == "ERR_CONFLICT"
        assert body["item_id"] == str(entry.id)
        assert "error" in body

    def test_staff_override_forbidden(self, client, staff, db_session):
        entry = create_commission(db_session)
        payload = _close_payload([entry], adjustments={str(entry.id): {"amount": "10"}})

        response = client.post(f"{BASE}/close/", json=payload, headers=staff)

        assert response.status_code == 403

    def test_admin_override(self, client, admin, db_session):
        entry = create_commission(db_session)
        payload = _close_payload(
            [entry], adjustments={str(entry.id): {"percentage": "5", "notes": "promo"}}
        )

        response = client.post(f"{BASE}/close/", json=payload, headers=admin)

        assert response.status_code == 201
        assert Decimal(response.json()["closing"]["total_amount"]) == Decimal("50")

    def test_mixed_currency_rejected(self, client, staff, db_session):
        entries = [create_commission(db_session), create_commission(db_session, currency="EUR")]
        response = client.post(f"{BASE}/close/", json=_close_payload(entries), headers=staff)
        assert response.status_code == 400
        assert response.json()["error_code"] == "ERR_VALIDATION"

    def test_close_operator_payments(self, client, staff, db_session):
        ready = create_operator_payment(db_session)
        response = client.post(
            f"{BASE}/operators/close/",
            json={
                "payment_ids": [str(ready.id)],
                "operator_name": "Andes Transfers",
                "period_start": "2026-03-01",
                "period_end": "2026-03-31",
                "currency": "USD",
            },
            headers=staff,
        )
        assert response.status_code == 201
        assert response.json()["closing"]["closing_type"] == "operator"

        payables = client.get("/api/financial-entries/?direction=payable", headers=staff).json()
        assert len(payables) == 1

    def test_operator_payment_not_ready(self, client, staff, db_session):
        pending = create_operator_payment(db_session, logistic_status="confirmed")
        response = client.post(
            f"{BASE}/operators/close/",
            json={
                "payment_ids": [str(pending.id)],
                "operator_name": "Andes Transfers",
                "period_start": "2026-03-01",
                "period_end": "2026-03-31",
                "currency": "USD",
            },
            headers=staff,
        )
        assert response.status_code == 400
        assert response.json()["item_id"] == str(pending.id)

    def test_detail_and_list(self, client, staff, db_session):
        entry = create_commission(db_session)
        closing_id = client.post(
            f"{BASE}/close/", json=_close_payload([entry]), headers=staff
        ).json()["closing"]["id"]

        detail = client.get(f"{BASE}/closings/{closing_id}/", headers=staff).json()
        listed = client.get(f"{BASE}/closings/?closing_type=salesperson", headers=staff).json()

        assert detail["items"][0]["ledger_entry_id"] == str(entry.id)
        assert [c["id"] for c in listed] == [closing_id]

    def test_undo(self, client, admin, staff, db_session):
        entry = create_commission(db_session)
        closing_id = client.post(
            f"{BASE}/close/", json=_close_payload([entry]), headers=staff
        ).json()["closing"]["id"]

        forbidden = client.post(
            f"{BASE}/closings/{closing_id}/undo/", json={"reason": "x"}, headers=staff
        )
        blank = client.post(
            f"{BASE}/closings/{closing_id}/undo/", json={"reason": ""}, headers=admin
        )
        done = client.post(
            f"{BASE}/closings/{closing_id}/undo/", json={"reason": "wrong period"}, headers=admin
        )

        assert forbidden.status_code == 403
        assert blank.status_code == 400
        assert done.status_code == 200
        assert done.json()["items_reopened"] == 1
        assert "message" in done.json()
        reopened = client.get(f"{BASE}/?is_closed=false", headers=staff).json()
        assert [e["id"] for e in reopened] == [str(entry.id)]

    def test_undo_unknown(self, client, admin):
        response = client.post(
            f"{BASE}/closings/{uuid4()}/undo/", json={"reason": "x"}, headers=admin
        )
        assert response.status_code == 404

    def test_invoice_pdf(self, client, staff, db_session):
        entry = create_commission(db_session)
        closing_id = client.post(
            f"{BASE}/close/", json=_close_payload([entry]), headers=staff
        ).json()["closing"]["id"]

        mock_weasyprint = MagicMock()
        mock_weasyprint.HTML.return_value.write_pdf.return_value = b"%PDF-1.4 fake"
        with patch.dict(sys.modules, {"weasyprint": mock_weasyprint}):
            response = client.get(f"{BASE}/closings/{closing_id}/invoice/", headers=staff)

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.headers["content-disposition"] == (
            'attachment; filename="invoice_SAL-000001.pdf"'
        )
        assert response.content == b"%PDF-1.4 fake"


class TestAdjustmentEndpoints:
    def test_request_and_approve(self, client, staff, admin, db_session):
        entry = create_commission(db_session, computed_amount=Decimal("100.00"))

        created = client.post(
            f"{BASE}/adjustments/request/",
            json={"item_id": str(entry.id), "new_amount": "80", "reason": "client dispute"},
            headers=staff,
        )
        assert created.status_code == 201
        request_id = created.json()["id"]

        pending = client.get(f"{BASE}/adjustments/pending/", headers=admin).json()
        assert [r["id"] for r in pending] == [request_id]

        denied = client.post(f"{BASE}/adjustments/{request_id}/approve/", headers=staff)
        assert denied.status_code == 403
        approved = client.post(f"{BASE}/adjustments/{request_id}/approve/", headers=admin)
        assert approved.json()["status"] == "approved"

        entry_body = client.get(f"{BASE}/entries/{entry.id}", headers=staff).json()
        assert Decimal(entry_body["amount"]) == Decimal("80")

    def test_request_requires_reason(self, client, staff, db_session):
        entry = create_commission(db_session)
        response = client.post(
            f"{BASE}/adjustments/request/",
            json={"item_id": str(entry.id), "new_amount": "80"},
            headers=staff,
        )
        assert response.status_code == 400

    def test_reject(self, client, staff, admin, db_session):
        entry = create_commission(db_session)
        request_id = client.post(
            f"{BASE}/adjustments/request/",
            json={"item_id": str(entry.id), "new_amount": "80", "reason": "client dispute"},
            headers=staff,
        ).json()["id"]

        no_reason = client.post(
            f"{BASE}/adjustments/{request_id}/reject/", json={"reason": ""}, headers=admin
        )
        rejected = client.post(
            f"{BASE}/adjustments/{request_id}/reject/",
            json={"reason": "insufficient evidence"},
            headers=admin,
        )

        assert no_reason.status_code == 400
        assert rejected.json()["status"] == "rejected"
        history = client.get(f"{BASE}/adjustments/item/{entry.id}/", headers=staff).json()
        assert [r["id"] for r in history] == [request_id]


class TestForecastAndAudit:
    def test_forecast(self, client, staff, db_session):
        create_commission(db_session, computed_amount=Decimal("100.00"))
        create_operator_payment(db_session, cost_amount=Decimal("60.00"))

        body = client.get(f"{BASE}/forecast/", headers=staff).json()

        assert Decimal(body["net_forecast"][0]["amount"]) == Decimal("40")
        assert body["net_forecast"][0]["count"] == 2

    def test_audit_trail_of_closing(self, client, staff, db_session):
        entry = create_commission(db_session)
        closing_id = client.post(
            f"{BASE}/close/", json=_close_payload([entry]), headers=staff
        ).json()["closing"]["id"]

        logs = client.get(f"/api/audit-logs/closing/{closing_id}", headers=staff).json()

        assert [log["action"] for log in logs] == ["closed"]
        assert logs[0]["actor_id"] == STAFF.id
