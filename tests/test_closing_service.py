"""Tests for ClosingService - sealing ledger entries into invoiced closings."""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from commission_ledger.core.exceptions import (
    ConflictError,
    PermissionDeniedError,
    ValidationError,
)
from commission_ledger.models.audit_log import AuditLog
from commission_ledger.models.closing import ClosedEntry, Closing, ClosingType
from commission_ledger.models.financial_entry import FinancialEntry
from commission_ledger.schemas.closing import ClosingOverride
from commission_ledger.services.closing_service import ClosingService
from commission_ledger.services.ledger_service import LedgerService
from tests.conftest import ADMIN, STAFF, create_commission, create_operator_payment

PERIOD = (date(2026, 3, 1), date(2026, 3, 31))


@pytest.fixture
def service(db_session):
    return ClosingService(db_session)


def _close(service, entries, closing_type=ClosingType.SALESPERSON, currency="USD",
           overrides=None, actor=ADMIN, recipient="Maria Lopez"):  # type: ignore[no-untyped-def]
    return service.close(
        [e.id for e in entries],
        closing_type,
        recipient,
        PERIOD[0],
        PERIOD[1],
        currency,
        overrides,
        actor,
    )


class TestClose:
    def test_two_usd_entries(self, db_session, service):
        """100 + 150 USD close into one 250 USD closing and both entries read as closed."""
        a = create_commission(db_session, computed_amount=Decimal("100.00"))
        b = create_commission(db_session, computed_amount=Decimal("150.00"))

        closing = _close(service, [a, b], actor=STAFF)

        assert closing.total_amount == Decimal("250")
        assert closing.currency == "USD"
        assert closing.item_count == 2
        assert closing.is_active is True
        assert closing.invoice_number == "SAL-000001"
        ledger = LedgerService(db_session)
        assert ledger.closing_info(a.id).is_closed is True
        assert ledger.closing_info(b.id).invoice_number == "SAL-000001"

    def test_total_matches_line_items(self, db_session, service):
        entries = [
            create_commission(db_session, computed_amount=Decimal(amount))
            for amount in ("10.10", "20.20", "30.33", "0.01")
        ]
        closing = _close(service, entries)
        _, items = service.get_detail(closing.id)

        assert len(items) == closing.item_count == 4
        assert sum(Decimal(str(i.amount)) for i in items) == Decimal(str(closing.total_amount))
        assert closing.total_amount == Decimal("60.64")

    def test_creates_receivable_for_commissions(self, db_session, service):
        entry = create_commission(db_session)
        closing = _close(service, [entry])

        financial = db_session.query(FinancialEntry).filter_by(closing_id=closing.id).one()
        assert financial.direction == "receivable"
        assert financial.amount == Decimal("100")
        assert financial.counterparty == "Maria Lopez"

    def test_creates_payable_for_operators(self, db_session, service):
        payment = create_operator_payment(db_session)
        closing = _close(service, [payment], closing_type=ClosingType.OPERATOR,
                         recipient="Andes Transfers")

        assert closing.invoice_number == "OPE-000001"
        financial = service.financial_entry_for(closing.id)
        assert financial.direction == "payable"
        assert financial.amount == Decimal("60")

    def test_sequences_are_per_type(self, db_session, service):
        first = _close(service, [create_commission(db_session)])
        agency = _close(
            service,
            [create_commission(db_session, recipient_type="agency", subject_name="Sol Travel")],
            closing_type=ClosingType.AGENCY,
            recipient="Sol Travel",
        )
        second = _close(service, [create_commission(db_session)])

        assert first.invoice_number == "SAL-000001"
        assert agency.invoice_number == "AGE-000001"
        assert second.invoice_number == "SAL-000002"

    def test_records_audit_fact(self, db_session, service):
        closing = _close(service, [create_commission(db_session)])
        log = db_session.query(AuditLog).filter_by(resource_id=closing.id, action="closed").one()
        assert log.actor_id == ADMIN.id
        assert log.changes["invoice_number"] == "SAL-000001"

    def test_clp_rounds_to_whole_units(self, db_session, service):
        entry = create_commission(
            db_session, currency="CLP", gross_amount=Decimal("100005"), computed_amount=None
        )
        closing = _close(
            service,
            [entry],
            currency="CLP",
            overrides={entry.id: ClosingOverride(percentage=Decimal("10"))},
        )
        assert closing.total_amount == Decimal("10001")


class TestCloseValidation:
    def test_empty_selection(self, service):
        with pytest.raises(ValidationError):
            _close(service, [])

    def test_duplicate_ids(self, db_session, service):
        entry = create_commission(db_session)
        with pytest.raises(ValidationError) as exc_info:
            _close(service, [entry, entry])
        assert exc_info.value.item_id == entry.id

    def test_blank_recipient(self, db_session, service):
        with pytest.raises(ValidationError):
            _close(service, [create_commission(db_session)], recipient="  ")

    def test_period_reversed(self, db_session, service):
        entry = create_commission(db_session)
        with pytest.raises(ValidationError):
            service.close(
                [entry.id], ClosingType.SALESPERSON, "Maria", date(2026, 4, 1),
                date(2026, 3, 1), "USD", None, ADMIN,
            )

    def test_unsupported_currency(self, db_session, service):
        with pytest.raises(ValidationError):
            _close(service, [create_commission(db_session)], currency="JPY")

    def test_unknown_entry(self, service):
        missing = uuid4()
        with pytest.raises(ValidationError) as exc_info:
            service.close(
                [missing], ClosingType.SALESPERSON, "Maria", *PERIOD, "USD", None, ADMIN
            )
        assert exc_info.value.item_id == missing

    def test_kind_must_match_closing_type(self, db_session, service):
        payment = create_operator_payment(db_session)
        with pytest.raises(ValidationError):
            _close(service, [payment], closing_type=ClosingType.SALESPERSON)

    @pytest.mark.parametrize("logistic_status", ["pending", "confirmed", "reconfirmed"])
    def test_operator_payment_not_concluded(self, db_session, service, logistic_status):
        payment = create_operator_payment(db_session, logistic_status=logistic_status)
        with pytest.raises(ValidationError) as exc_info:
            _close(service, [payment], closing_type=ClosingType.OPERATOR)
        assert exc_info.value.item_id == payment.id
        assert db_session.query(Closing).count() == 0

    @pytest.mark.parametrize("logistic_status", ["completed", "no-show", "cancelled"])
    def test_operator_payment_concluded(self, db_session, service, logistic_status):
        payment = create_operator_payment(db_session, logistic_status=logistic_status)
        closing = _close(service, [payment], closing_type=ClosingType.OPERATOR)
        assert closing.item_count == 1

    @pytest.mark.parametrize(
        "currencies", [("USD", "EUR"), ("USD", "BRL", "CLP"), ("ARS", "ARS", "USD")]
    )
    def test_mixed_currencies_rejected(self, db_session, service, currencies):
        entries = [create_commission(db_session, currency=c) for c in currencies]
        with pytest.raises(ValidationError):
            _close(service, entries, currency=currencies[0])
        assert db_session.query(Closing).count() == 0
        assert db_session.query(ClosedEntry).count() == 0

    def test_entry_currency_differs_from_closing(self, db_session, service):
        entry = create_commission(db_session, currency="EUR")
        with pytest.raises(ValidationError):
            _close(service, [entry], currency="USD")


class TestCloseOverrides:
    def test_staff_cannot_override(self, db_session, service):
        entry = create_commission(db_session)
        with pytest.raises(PermissionDeniedError):
            _close(
                service,
                [entry],
                overrides={entry.id: ClosingOverride(amount=Decimal("5"))},
                actor=STAFF,
            )
        assert db_session.query(Closing).count() == 0

    def test_amount_override_only_changes_snapshot(self, db_session, service):
        entry = create_commission(db_session, computed_amount=Decimal("100.00"))
        closing = _close(
            service,
            [entry],
            overrides={entry.id: ClosingOverride(amount=Decimal("90.00"), notes="goodwill")},
        )
        _, items = service.get_detail(closing.id)

        assert closing.total_amount == Decimal("90")
        assert items[0].is_overridden is True
        assert items[0].original_amount == Decimal("100")
        assert items[0].override_notes == "goodwill"
        db_session.refresh(entry)
        assert entry.amount == Decimal("100")

    def test_percentage_override(self, db_session, service):
        entry = create_commission(db_session, gross_amount=Decimal("1234.50"))
        closing = _close(
            service, [entry], overrides={entry.id: ClosingOverride(percentage=Decimal("12.5"))}
        )
        _, items = service.get_detail(closing.id)
        assert closing.total_amount == Decimal("154.31")
        assert items[0].rate == Decimal("12.5")

    def test_amount_wins_over_percentage(self, db_session, service):
        entry = create_commission(db_session)
        closing = _close(
            service,
            [entry],
            overrides={
                entry.id: ClosingOverride(amount=Decimal("42"), percentage=Decimal("50"))
            },
        )
        assert closing.total_amount == Decimal("42")

    def test_operator_payment_rejects_percentage(self, db_session, service):
        entry = create_operator_payment(db_session)
        with pytest.raises(ValidationError) as exc_info:
            _close(
                service,
                [entry],
                closing_type=ClosingType.OPERATOR,
                overrides={entry.id: ClosingOverride(percentage=Decimal("50"))},
            )
        assert exc_info.value.item_id == entry.id
        assert db_session.query(Closing).count() == 0

    def test_operator_payment_amount_override(self, db_session, service):
        entry = create_operator_payment(db_session, cost_amount=Decimal("60.00"))
        closing = _close(
            service,
            [entry],
            closing_type=ClosingType.OPERATOR,
            overrides={entry.id: ClosingOverride(amount=Decimal("55.00"))},
        )
        assert closing.total_amount == Decimal("55")

    def test_override_for_unselected_entry(self, db_session, service):
        entry = create_commission(db_session)
        with pytest.raises(ValidationError):
            _close(service, [entry], overrides={uuid4(): ClosingOverride(amount=Decimal("1"))})

    def test_negative_override(self, db_session, service):
        entry = create_commission(db_session)
        with pytest.raises(ValidationError):
            _close(service, [entry], overrides={entry.id: ClosingOverride(amount=Decimal("-1"))})


class TestCloseConflicts:
    def test_already_closed_entry(self, db_session, service):
        entry = create_commission(db_session)
        first = _close(service, [entry])

        with pytest.raises(ConflictError) as exc_info:
            _close(service, [entry, create_commission(db_session)])

        assert exc_info.value.item_id == entry.id
        assert db_session.query(Closing).count() == 1
        membership = db_session.query(ClosedEntry).filter_by(ledger_entry_id=entry.id).one()
        assert membership.closing_id == first.id

    def test_membership_constraint_stops_second_closing(self, db_session, service, monkeypatch):
        entry = create_commission(db_session)
        first = _close(service, [entry])
        # A second request that read the entry as open before the first committed.
        monkeypatch.setattr(ClosingService, "_check_not_closed", lambda self, entries: None)

        with pytest.raises(ConflictError):
            _close(service, [entry])

        assert db_session.query(Closing).count() == 1
        assert db_session.query(FinancialEntry).count() == 1
        membership = db_session.query(ClosedEntry).filter_by(ledger_entry_id=entry.id).one()
        assert membership.closing_id == first.id

    def test_failed_closing_does_not_reuse_invoice_numbers(
        self, db_session, service, monkeypatch
    ):
        entry = create_commission(db_session)
        _close(service, [entry])
        monkeypatch.setattr(ClosingService, "_check_not_closed", lambda self, entries: None)
        with pytest.raises(ConflictError):
            _close(service, [entry])
        monkeypatch.undo()

        second = _close(service, [create_commission(db_session)])

        numbers = [c.invoice_number for c in db_session.query(Closing).all()]
        assert sorted(numbers) == ["SAL-000001", "SAL-000002"]
        assert second.invoice_number == "SAL-000002"

    def test_failed_close_leaves_no_partial_rows(self, db_session, service):
        good = create_commission(db_session)
        bad = create_commission(db_session, currency="EUR")
        with pytest.raises(ValidationError):
            _close(service, [good, bad])

        assert db_session.query(ClosedEntry).count() == 0
        assert db_session.query(FinancialEntry).count() == 0
        assert LedgerService(db_session).closing_info(good.id).is_closed is False


class TestClosingQueries:
    def test_list_filters_by_type(self, db_session, service):
        _close(service, [create_commission(db_session)])
        _close(service, [create_operator_payment(db_session)], closing_type=ClosingType.OPERATOR)

        operator = service.list(closing_type=ClosingType.OPERATOR)
        assert [c.invoice_number for c in operator] == ["OPE-000001"]
        assert len(service.list()) == 2

    def test_responses_carry_item_ids(self, db_session, service):
        a = create_commission(db_session)
        b = create_commission(db_session)
        closing = _close(service, [a, b])

        response = service.to_responses([closing])[0]
        assert set(response.item_ids) == {a.id, b.id}
