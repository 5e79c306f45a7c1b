from datetime import date, timedelta
from decimal import Decimal
import re
import threading

import pytest
from sqlalchemy import event
from sqlalchemy.dialects import postgresql

from modules.bookings.models import Booking, BookingStatus
from modules.bookings.schemas import FoodItemCreate
from modules.bookings.service import BookingService
from modules.payments.models import Payment, PaymentMethod, PaymentStatus
from modules.payments.service import PaymentService
from shared.exceptions import AppException, ErrorCode


@pytest.fixture()
def booking_id(db, seed):
    check_in = date.today() + timedelta(days=7)
    booking_id, _ = BookingService(db).create_from_catalog(
        seed.alice_id, seed.catalog_id, None, check_in, check_in + timedelta(days=2), check_in
    )
    return booking_id


@pytest.fixture()
def row_locks(db):
    """Tables locked with SELECT ... FOR UPDATE through this session, in order."""
    locks = []

    def record(state):
        if not state.is_select:
            return
        # SQLite drops FOR UPDATE, so render the statement as PostgreSQL would run it
        sql = str(state.statement.compile(dialect=postgresql.dialect()))
        if "FOR UPDATE" in sql:
            locks.append(re.search(r"\bFROM (\w+)", sql).group(1))

    event.listen(db, "do_orm_execute", record)
    yield locks
    event.remove(db, "do_orm_execute", record)


def _code(excinfo):
    return excinfo.value.code


# ============ process ============

def test_process_creates_pending_payment_for_booking_total(db, booking_id):
    payment_id, amount = PaymentService(db).process(booking_id, "credit_card")

    assert amount == Decimal("38502.00")
    payment = db.get(Payment, payment_id)
    assert payment.status == PaymentStatus.PENDING
    assert payment.method == PaymentMethod.CREDIT_CARD
    assert payment.amount == Decimal("38502.00")
    assert payment.transaction_id is None
    # Processing does not confirm the booking
    assert BookingService(db).get_booking(booking_id).status == BookingStatus.PENDING


def test_process_keeps_caller_transaction_reference(db, booking_id):
    payment_id, _ = PaymentService(db).process(booking_id, "paypal", transaction_id="PP-123")
    assert db.get(Payment, payment_id).transaction_id == "PP-123"


def test_process_unknown_booking(db, seed):
    with pytest.raises(AppException) as excinfo:
        PaymentService(db).process("missing", "credit_card")
    assert _code(excinfo) == ErrorCode.NOT_FOUND


def test_process_cancelled_booking(db, booking_id):
    BookingService(db).cancel(booking_id)
    with pytest.raises(AppException) as excinfo:
        PaymentService(db).process(booking_id, "credit_card")
    assert _code(excinfo) == ErrorCode.CANCELLED_BOOKING


def test_process_rejects_unknown_method(db, booking_id):
    with pytest.raises(AppException) as excinfo:
        PaymentService(db).process(booking_id, "bitcoin")
    assert _code(excinfo) == ErrorCode.INVALID_METHOD
    assert db.query(Payment).count() == 0


def test_second_payment_is_rejected(db, booking_id):
    service = PaymentService(db)
    service.process(booking_id, "credit_card")

    with pytest.raises(AppException) as excinfo:
        service.process(booking_id, "debit_card")
    assert _code(excinfo) == ErrorCode.PAYMENT_EXISTS
    assert excinfo.value.status_code == 409
    assert db.query(Payment).count() == 1


def test_existing_payment_is_reported_before_bad_method(db, booking_id):
    service = PaymentService(db)
    service.process(booking_id, "credit_card")

    with pytest.raises(AppException) as excinfo:
        service.process(booking_id, "bitcoin")
    assert _code(excinfo) == ErrorCode.PAYMENT_EXISTS


def test_concurrent_insert_loses_on_unique_constraint(db, booking_id, monkeypatch):
    service = PaymentService(db)
    service.process(booking_id, "credit_card")

    # Simulate a caller that passed the existence check before the other insert landed
    monkeypatch.setattr(service, "_existing_payment", lambda booking_id: None)

    with pytest.raises(AppException) as excinfo:
        service.process(booking_id, "paypal")
    assert _code(excinfo) == ErrorCode.PAYMENT_EXISTS
    assert db.query(Payment).filter(Payment.booking_id == booking_id).count() == 1


def test_process_booking_without_items(db, seed):
    check_in = date.today() + timedelta(days=7)
    booking_id, total = BookingService(db).create_from_catalog(
        seed.alice_id, seed.empty_catalog_id, None, check_in, check_in + timedelta(days=1), check_in
    )
    assert total == Decimal("0.00")

    with pytest.raises(AppException) as excinfo:
        PaymentService(db).process(booking_id, "credit_card")
    assert _code(excinfo) == ErrorCode.NO_PAYABLE_ITEMS


def test_amount_is_recomputed_from_line_items(db, seed):
    booking_id, total = BookingService(db).create_custom(
        seed.bob_id, None, food=[FoodItemCreate(food_id=seed.full_board_id, quantity=3)]
    )
    _, amount = PaymentService(db).process(booking_id, "bank_transfer")
    assert amount == total == Decimal("10500.00")


# ============ complete ============

def test_complete_confirms_booking_and_generates_reference(db, booking_id):
    service = PaymentService(db)
    payment_id, _ = service.process(booking_id, "credit_card")

    payment = service.complete(payment_id)

    assert payment.status == PaymentStatus.COMPLETED
    assert payment.transaction_id.startswith("TXN-")
    assert BookingService(db).get_booking(booking_id).status == BookingStatus.CONFIRMED


def test_complete_prefers_supplied_reference(db, booking_id):
    service = PaymentService(db)
    payment_id, _ = service.process(booking_id, "credit_card", transaction_id="CARD-1")
    assert service.complete(payment_id).transaction_id == "CARD-1"

    other_booking, _ = BookingService(db).create_custom(
        1, None, food=[FoodItemCreate(food_id=1)]
    )
    other_payment, _ = service.process(other_booking, "paypal", transaction_id="PP-OLD")
    assert service.complete(other_payment, transaction_id="PP-NEW").transaction_id == "PP-NEW"


def test_complete_twice_is_rejected(db, booking_id):
    service = PaymentService(db)
    payment_id, _ = service.process(booking_id, "credit_card")
    service.complete(payment_id)

    with pytest.raises(AppException) as excinfo:
        service.complete(payment_id)
    assert _code(excinfo) == ErrorCode.NOT_PENDING


def test_complete_unknown_payment(db, seed):
    with pytest.raises(AppException) as excinfo:
        PaymentService(db).complete("missing")
    assert _code(excinfo) == ErrorCode.PAYMENT_NOT_FOUND


def test_complete_after_booking_cancelled_changes_nothing(db, booking_id):
    service = PaymentService(db)
    payment_id, _ = service.process(booking_id, "credit_card")
    BookingService(db).cancel(booking_id)

    with pytest.raises(AppException) as excinfo:
        service.complete(payment_id)
    assert _code(excinfo) == ErrorCode.CANCELLED_BOOKING

    db.expire_all()
    assert db.get(Payment, payment_id).status == PaymentStatus.PENDING
    assert db.get(Booking, booking_id).status == BookingStatus.CANCELLED


def test_failed_payment_cannot_be_completed(db, booking_id):
    service = PaymentService(db)
    payment_id, _ = service.process(booking_id, "debit_card")
    service.update_status_admin(payment_id, "failed")

    with pytest.raises(AppException) as excinfo:
        service.complete(payment_id)
    assert _code(excinfo) == ErrorCode.NOT_PENDING
    assert BookingService(db).get_booking(booking_id).status == BookingStatus.PENDING


# ============ admin override ============

def test_admin_status_update_does_not_touch_booking(db, booking_id):
    service = PaymentService(db)
    payment_id, _ = service.process(booking_id, "credit_card")

    payment = service.update_status_admin(payment_id, "completed", transaction_id="MANUAL-7")

    assert payment.status == PaymentStatus.COMPLETED
    assert payment.transaction_id == "MANUAL-7"
    assert BookingService(db).get_booking(booking_id).status == BookingStatus.PENDING


def test_admin_status_update_rejects_unknown_status(db, booking_id):
    service = PaymentService(db)
    payment_id, _ = service.process(booking_id, "credit_card")
    with pytest.raises(AppException) as excinfo:
        service.update_status_admin(payment_id, "chargeback")
    assert _code(excinfo) == ErrorCode.INVALID_STATUS


def test_admin_status_update_unknown_payment(db, seed):
    with pytest.raises(AppException) as excinfo:
        PaymentService(db).update_status_admin("missing", "refunded")
    assert _code(excinfo) == ErrorCode.PAYMENT_NOT_FOUND


# ============ reads ============

def test_get_by_booking_id(db, booking_id):
    service = PaymentService(db)
    payment_id, _ = service.process(booking_id, "paypal")

    payment = service.get_by_booking_id(booking_id)
    assert payment["payment_id"] == payment_id
    assert payment["customer_name"] == "Alice Khan"
    assert payment["method"] == "paypal"
    assert payment["status"] == "pending"


def test_get_by_booking_id_without_payment(db, booking_id):
    with pytest.raises(AppException) as excinfo:
        PaymentService(db).get_by_booking_id(booking_id)
    assert _code(excinfo) == ErrorCode.PAYMENT_NOT_FOUND


def test_list_all_includes_customer_names(db, seed, booking_id):
    service = PaymentService(db)
    service.process(booking_id, "credit_card")
    bob_booking, _ = BookingService(db).create_custom(
        seed.bob_id, None, food=[FoodItemCreate(food_id=seed.breakfast_id)]
    )
    service.process(bob_booking, "paypal")

    payments = service.list_all()
    assert {p["customer_name"] for p in payments} == {"Alice Khan", "Bob Ali"}


def test_booking_detail_shows_payment(db, booking_id):
    payment_id, _ = PaymentService(db).process(booking_id, "credit_card")
    detail = BookingService(db).get_by_id(booking_id)
    assert detail["payment"]["payment_id"] == payment_id
    assert detail["payment_status"] == "pending"
    assert detail["paid_amount"] == Decimal("38502.00")


# ============ locking and concurrency ============

def test_complete_and_cancel_lock_booking_before_payment(db, booking_id, row_locks):
    service = PaymentService(db)
    payment_id, _ = service.process(booking_id, "credit_card")

    row_locks.clear()
    service.complete(payment_id)
    assert row_locks[:2] == ["bookings", "payments"]

    row_locks.clear()
    BookingService(db).cancel(booking_id)
    assert row_locks == ["bookings", "payments"]


def test_cancel_sees_payment_completed_by_another_session(file_database):
    first, second = file_database.session(), file_database.session()
    try:
        booking_id, _ = BookingService(first).create_custom(1, None, food=[FoodItemCreate(food_id=1)])
        payment_id, _ = PaymentService(first).process(booking_id, "credit_card")
        cached = first.get(Payment, payment_id)
        assert cached.status == PaymentStatus.PENDING

        PaymentService(second).complete(payment_id)

        assert BookingService(first).cancel(booking_id) is True
        assert cached.status == PaymentStatus.REFUNDED
    finally:
        first.close()
        second.close()


def test_concurrent_process_creates_one_payment(file_database):
    setup = file_database.session()
    try:
        booking_id, _ = BookingService(setup).create_custom(1, None, food=[FoodItemCreate(food_id=1)])
    finally:
        setup.close()

    barrier = threading.Barrier(2, timeout=10)
    outcomes = []

    def pay(method):
        session = file_database.session()
        try:
            barrier.wait()
            PaymentService(session).process(booking_id, method)
            outcomes.append("created")
        except AppException as e:
            outcomes.append(e.code)
        finally:
            session.close()

    threads = [threading.Thread(target=pay, args=(method,)) for method in ("credit_card", "paypal")]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert outcomes.count("created") == 1
    assert outcomes.count(ErrorCode.PAYMENT_EXISTS) == 1

    check = file_database.session()
    try:
        assert check.query(Payment).filter(Payment.booking_id == booking_id).count() == 1
    finally:
        check.close()
