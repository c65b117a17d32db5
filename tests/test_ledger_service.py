"""Tests for LedgerService and LedgerEntryRepository queries."""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from commission_ledger.core.exceptions import ConflictError, NotFoundError, ValidationError
from commission_ledger.models.closing import ClosingType
from commission_ledger.models.ledger_entry import LedgerEntryKind, LedgerEntryStatus
from commission_ledger.schemas.ledger_entry import DateType, LedgerEntryCreate, LedgerEntryFilters
from commission_ledger.services.closing_service import ClosingService
from commission_ledger.services.ledger_service import LedgerService
from tests.conftest import ADMIN, STAFF, create_commission, create_operator_payment


@pytest.fixture
def service(db_session):
    return LedgerService(db_session)


def _close(db_session, entries):  # type: ignore[no-untyped-def]
    return ClosingService(db_session).close(
        [e.id for e in entries],
        ClosingType.SALESPERSON,
        "Maria Lopez",
        date(2026, 3, 1),
        date(2026, 3, 31),
        entries[0].currency,
        None,
        ADMIN,
    )


class TestRegister:
    def test_commission_amount_from_rate(self, service):
        data = LedgerEntryCreate(
            kind=LedgerEntryKind.COMMISSION,
            subject_name="Maria Lopez",
            reservation_id=uuid4(),
            reservation_number="R-1001",
            sale_date=date(2026, 3, 1),
            operation_date=date(2026, 3, 5),
            gross_amount=Decimal("1234.56"),
            currency="usd",
            rate=Decimal("7.5"),
        )
        entry = service.register(data, STAFF)

        assert entry.currency == "USD"
        assert entry.recipient_type == "salesperson"
        assert entry.computed_amount == Decimal("92.59")
        assert entry.can_close is True

    def test_operator_payment_defaults(self, service):
        data = LedgerEntryCreate(
            kind=LedgerEntryKind.OPERATOR_PAYMENT,
            subject_name="Andes Transfers",
            reservation_id=uuid4(),
            reservation_number="R-1002",
            sale_date=date(2026, 3, 1),
            operation_date=date(2026, 3, 5),
            currency="CLP",
            cost_amount=Decimal("45000.4"),
        )
        entry = service.register(data, STAFF)

        assert entry.logistic_status == "pending"
        assert entry.recipient_type is None
        assert entry.cost_amount == Decimal("45000")
        assert entry.can_close is False

    def test_unsupported_currency(self, service):
        data = LedgerEntryCreate(
            kind=LedgerEntryKind.COMMISSION,
            subject_name="Maria Lopez",
            reservation_id=uuid4(),
            reservation_number="R-1003",
            sale_date=date(2026, 3, 1),
            operation_date=date(2026, 3, 5),
            currency="JPY",
            rate=Decimal("5"),
        )
        with pytest.raises(ValidationError):
            service.register(data, STAFF)

    def test_commission_needs_rate_or_amount(self):
        with pytest.raises(ValueError):
            LedgerEntryCreate(
                kind=LedgerEntryKind.COMMISSION,
                subject_name="Maria Lopez",
                reservation_id=uuid4(),
                reservation_number="R-1004",
                sale_date=date(2026, 3, 1),
                operation_date=date(2026, 3, 5),
            )


class TestListing:
    def test_filters_by_closed_state(self, db_session, service):
        closed = create_commission(db_session)
        open_entry = create_commission(db_session)
        _close(db_session, [closed])

        closed_ids = [e.id for e in service.list(LedgerEntryFilters(is_closed=True))]
        open_ids = [e.id for e in service.list(LedgerEntryFilters(is_closed=False))]

        assert closed_ids == [closed.id]
        assert open_ids == [open_entry.id]

    def test_search_is_case_insensitive(self, db_session, service):
        match = create_commission(db_session, client_name="Olivia Fernandez")
        create_commission(db_session, client_name="Peter Pan")

        found = service.list(LedgerEntryFilters(search="fernandez"))
        assert [e.id for e in found] == [match.id]

    def test_filters_by_operation_date(self, db_session, service):
        inside = create_commission(db_session, operation_date=date(2026, 5, 10))
        create_commission(db_session, operation_date=date(2026, 6, 10))

        found = service.list(
            LedgerEntryFilters(
                start_date=date(2026, 5, 1),
                end_date=date(2026, 5, 31),
                date_type=DateType.OPERATION,
            )
        )
        assert [e.id for e in found] == [inside.id]

    def test_filters_by_kind_and_statuses(self, db_session, service):
        paid = create_commission(db_session, status="paid")
        create_commission(db_session, status="pending")
        create_operator_payment(db_session, status="paid")

        found = service.list(
            LedgerEntryFilters(kind=LedgerEntryKind.COMMISSION, statuses=[LedgerEntryStatus.PAID])
        )
        assert [e.id for e in found] == [paid.id]

    def test_filters_by_tour_id_or_name(self, db_session, service):
        entry = create_commission(db_session, tour_id="T-9", tour_name="Easter Island")
        create_commission(db_session, tour_id="T-1", tour_name="Valle Nevado")

        assert [e.id for e in service.list(LedgerEntryFilters(tour="T-9"))] == [entry.id]
        assert [e.id for e in service.list(LedgerEntryFilters(tour="Easter Island"))] == [entry.id]

    def test_responses_include_closing_info(self, db_session, service):
        entry = create_commission(db_session)
        closing = _close(db_session, [entry])

        response = service.list_responses()[0]
        assert response.closing_info.is_closed is True
        assert response.closing_info.invoice_number == closing.invoice_number
        assert response.closing_info.closed_by == ADMIN.name


class TestStatusChanges:
    def test_pay_sets_payment_date(self, db_session, service):
        entry = create_commission(db_session)
        paid = service.pay(entry.id, STAFF, payment_date=date(2026, 4, 2))
        assert paid.status == "paid"
        assert paid.payment_date == date(2026, 4, 2)

    def test_closed_entry_is_frozen(self, db_session, service):
        entry = create_commission(db_session)
        _close(db_session, [entry])
        with pytest.raises(ConflictError):
            service.approve(entry.id, STAFF)

    def test_status_change_locks_entry(self, db_session, service, monkeypatch):
        entry = create_commission(db_session)
        locked = []
        original_lock = service.repo.lock

        def recording_lock(entry_id):  # type: ignore[no-untyped-def]
            locked.append(entry_id)
            return original_lock(entry_id)

        monkeypatch.setattr(service.repo, "lock", recording_lock)
        service.approve(entry.id, STAFF)

        assert locked == [entry.id]

    def test_closing_committed_before_lock_freezes_entry(self, db_session, service, monkeypatch):
        entry = create_commission(db_session)
        original_lock = service.repo.lock

        def lock_after_close(entry_id):  # type: ignore[no-untyped-def]
            _close(db_session, [entry])
            return original_lock(entry_id)

        monkeypatch.setattr(service.repo, "lock", lock_after_close)
        with pytest.raises(ConflictError):
            service.pay(entry.id, STAFF)

        db_session.refresh(entry)
        assert entry.status == "pending"
        assert entry.payment_date is None

    def test_status_change_of_unknown_entry(self, service):
        with pytest.raises(NotFoundError):
            service.approve(uuid4(), STAFF)

    def test_cancelled_entry_cannot_be_paid(self, db_session, service):
        entry = create_commission(db_session, status="cancelled")
        with pytest.raises(ValidationError):
            service.pay(entry.id, STAFF)

    def test_unknown_entry(self, service):
        with pytest.raises(NotFoundError):
            service.get(uuid4())


class TestRollups:
    def test_summary_per_currency(self, db_session, service):
        reservation = uuid4()
        create_commission(db_session, reservation_id=reservation, computed_amount=Decimal("100"))
        create_commission(
            db_session, reservation_id=reservation, computed_amount=Decimal("50"), status="paid"
        )
        create_commission(db_session, currency="EUR", computed_amount=Decimal("30"))

        summaries = service.summarize(LedgerEntryFilters(kind=LedgerEntryKind.COMMISSION))

        assert [s.currency for s in summaries] == ["EUR", "USD"]
        usd = summaries[1]
        assert usd.count == 2
        assert usd.reservation_count == 1
        assert usd.amount_total == Decimal("150.00")
        assert usd.pending_amount == Decimal("100.00")
        assert usd.paid_amount == Decimal("50.00")

    def test_unique_values(self, db_session, service):
        create_commission(db_session, subject_name="Maria Lopez", tour_name="Atacama")
        create_commission(db_session, subject_name="Diego Rojas", tour_name="Atacama")
        create_operator_payment(db_session, subject_name="Andes Transfers")

        values = service.unique_values(LedgerEntryKind.COMMISSION)

        assert values.subjects == ["Diego Rojas", "Maria Lopez"]
        assert [t.name for t in values.tours] == ["Atacama"]
        assert values.logistic_statuses == []
        assert service.unique_values(LedgerEntryKind.OPERATOR_PAYMENT).logistic_statuses

    def test_closure_status(self, db_session, service):
        reservation = uuid4()
        commission = create_commission(db_session, reservation_id=reservation)
        create_operator_payment(db_session, reservation_id=reservation)
        _close(db_session, [commission])

        status = service.closure_status(reservation)

        assert len(status.entries) == 2
        assert status.all_closed is False
