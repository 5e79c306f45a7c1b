from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

from modules.bookings.schemas import FoodItemCreate
from modules.bookings.service import BookingService
from modules.payments.models import Payment
from modules.payments.service import PaymentService
from modules.reports.service import ReportService


def _book_and_pay(db, customer_id, food_id, quantity=1, complete=True):
    booking_id, _ = BookingService(db).create_custom(
        customer_id, None, food=[FoodItemCreate(food_id=food_id, quantity=quantity)]
    )
    payments = PaymentService(db)
    payment_id, _ = payments.process(booking_id, "credit_card")
    if complete:
        payments.complete(payment_id)
    return booking_id, payment_id


def test_dashboard_stats(db, seed):
    _book_and_pay(db, seed.alice_id, seed.breakfast_id)            # confirmed, 1200 paid
    _book_and_pay(db, seed.bob_id, seed.full_board_id, complete=False)  # pending
    cancelled, _ = _book_and_pay(db, seed.bob_id, seed.breakfast_id, quantity=2)
    BookingService(db).cancel(cancelled)                            # refunded

    stats = ReportService(db).dashboard_stats()

    assert stats["total_customers"] == 2
    assert stats["total_bookings"] == 3
    assert stats["confirmed_bookings"] == 1
    assert stats["pending_bookings"] == 1
    assert stats["cancelled_bookings"] == 1
    assert stats["total_revenue"] == Decimal("1200.00")
    assert stats["total_catalogs"] == 2


def test_revenue_report_groups_by_month(db, seed):
    check_in = date.today() + timedelta(days=5)
    package_booking, _ = BookingService(db).create_from_catalog(
        seed.alice_id, seed.catalog_id, None, check_in, check_in + timedelta(days=1), check_in
    )
    payments = PaymentService(db)
    package_payment, _ = payments.process(package_booking, "paypal")
    payments.complete(package_payment)                                    # 23501.00 package

    _, custom_payment = _book_and_pay(db, seed.bob_id, seed.full_board_id)  # 3500.00 custom
    _book_and_pay(db, seed.bob_id, seed.breakfast_id, complete=False)       # 1200.00 pending
    refunded_booking, old_payment = _book_and_pay(db, seed.alice_id, seed.breakfast_id)
    BookingService(db).cancel(refunded_booking)                             # 1200.00 refunded

    # Move one payment into an earlier month
    db.get(Payment, old_payment).created_at = datetime(2024, 1, 15, tzinfo=timezone.utc)
    db.commit()

    report = ReportService(db).revenue_report()

    assert [row["month"] for row in report][-1] == "2024-01"
    current, january = report[0], report[-1]
    assert len(report) == 2

    assert current["total_transactions"] == 3
    assert current["unique_bookings"] == 3
    assert current["unique_customers"] == 2
    assert current["completed_revenue"] == Decimal("27001.00")
    assert current["package_revenue"] == Decimal("23501.00")
    assert current["custom_revenue"] == Decimal("3500.00")
    assert current["pending_revenue"] == Decimal("1200.00")
    assert current["refunded_amount"] == Decimal("0.00")

    assert january["total_transactions"] == 1
    assert january["refunded_amount"] == Decimal("1200.00")
    assert january["completed_revenue"] == Decimal("0.00")


def test_revenue_report_empty(db, seed):
    assert ReportService(db).revenue_report() == []
