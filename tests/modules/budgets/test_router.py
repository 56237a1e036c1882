"""
API tests for the budget admin router.

The service layer is patched; these tests cover status codes, error
mapping and access control.
"""

from decimal import Decimal
from unittest.mock import AsyncMock, patch
from uuid import uuid4

from tutormatch.core.security import create_access_token
from tutormatch.modules.budgets.exceptions import (
    RefundAlreadyProcessedError,
    TransactionNotPartialError,
)
from tutormatch.modules.budgets.models import TransactionStatus
from tutormatch.modules.budgets.schemas import BudgetStats

SERVICE = "tutormatch.modules.budgets.service"
BASE = "/api/v1/admin/budget"


def _payment_payload(**overrides):
    payload = {
        "teacher_id": str(uuid4()),
        "vacancy_id": str(uuid4()),
        "amount": "500.00",
        "type": "payment",
    }
    payload.update(overrides)
    return payload


class TestListTransactions:
    def test_includes_teacher_phone(self, client, make_transaction):
        transaction = make_transaction()

        with patch(f"{SERVICE}.list_transactions", AsyncMock(return_value=[transaction])):
            response = client.get(f"{BASE}/transactions")

        assert response.status_code == 200
        row = response.json()["data"][0]
        assert row["id"] == str(transaction.id)
        assert row["teacher_phone"] == "+233200000001"
        assert Decimal(row["amount"]) == Decimal("500.00")


class TestRecordTransaction:
    def test_payment_recorded(self, client, make_transaction):
        with patch(
            f"{SERVICE}.record_transaction", AsyncMock(return_value=make_transaction())
        ) as mock_record:
            response = client.post(f"{BASE}/transactions", json=_payment_payload())

        assert response.status_code == 201
        assert response.json()["message"] == "Payment recorded successfully"
        assert mock_record.await_args.args[1].amount == Decimal("500.00")

    def test_partial_payment_message(self, client, make_transaction):
        payload = _payment_payload(
            status="partial", remaining_amount="100", due_date="2026-12-01T00:00:00Z"
        )
        created = make_transaction(status=TransactionStatus.PARTIAL, remaining_amount="100")

        with patch(f"{SERVICE}.record_transaction", AsyncMock(return_value=created)):
            response = client.post(f"{BASE}/transactions", json=payload)

        assert response.status_code == 201
        assert response.json()["message"] == "Partial payment recorded successfully"

    def test_partial_without_due_date_rejected(self, client):
        payload = _payment_payload(status="partial", remaining_amount="100")

        with patch(f"{SERVICE}.record_transaction", AsyncMock()) as mock_record:
            response = client.post(f"{BASE}/transactions", json=payload)

        assert response.status_code == 422
        mock_record.assert_not_awaited()

    def test_second_refund_maps_to_conflict(self, client):
        payload = _payment_payload(
            type="refund", reason="Lessons cancelled", original_payment_id=str(uuid4())
        )

        with patch(
            f"{SERVICE}.record_transaction", AsyncMock(side_effect=RefundAlreadyProcessedError())
        ):
            response = client.post(f"{BASE}/transactions", json=payload)

        assert response.status_code == 409
        assert response.json()["detail"]["error"] == "REFUND_ALREADY_PROCESSED"


class TestUpdateTransactionStatus:
    def test_mark_paid(self, client, make_transaction):
        settled = make_transaction(status=TransactionStatus.PAID)

        with patch(f"{SERVICE}.mark_paid", AsyncMock(return_value=settled)) as mock_paid:
            response = client.put(
                f"{BASE}/transactions/{settled.id}/status", json={"status": "paid"}
            )

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "paid"
        assert mock_paid.await_args.args[1] == settled.id

    def test_not_partial_maps_to_conflict(self, client):
        with patch(f"{SERVICE}.mark_paid", AsyncMock(side_effect=TransactionNotPartialError())):
            response = client.put(f"{BASE}/transactions/{uuid4()}/status", json={"status": "paid"})

        assert response.status_code == 409
        assert response.json()["detail"]["error"] == "TRANSACTION_NOT_PARTIAL"

    def test_only_paid_accepted(self, client):
        response = client.put(f"{BASE}/transactions/{uuid4()}/status", json={"status": "refunded"})
        assert response.status_code == 422


class TestStats:
    def test_totals(self, client):
        stats = BudgetStats(
            total_payments=Decimal("1000"), total_refunds=Decimal("250"), net_amount=Decimal("750")
        )

        with patch(f"{SERVICE}.get_stats", AsyncMock(return_value=stats)):
            response = client.get(f"{BASE}/stats")

        assert response.status_code == 200
        assert Decimal(response.json()["data"]["net_amount"]) == Decimal("750")


class TestAccessControl:
    def test_teacher_cannot_read_budget(self, unauthenticated_client):
        token = create_access_token(str(uuid4()), {"role": "teacher"})

        response = unauthenticated_client.get(
            f"{BASE}/transactions", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 403
        assert response.json()["detail"]["error"] == "ADMIN_ACCESS_REQUIRED"

    def test_missing_token_rejected(self, unauthenticated_client):
        response = unauthenticated_client.get(f"{BASE}/stats")
        assert response.status_code in (401, 403)
