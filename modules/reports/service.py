from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload
from decimal import Decimal
from typing import List
import logging

from modules.bookings.models import Booking, BookingStatus
from modules.bookings.costs import to_money
from modules.catalogs.models import Catalog
from modules.payments.models import Payment, PaymentStatus
from modules.users.models import Customer

logger = logging.getLogger(__name__)


class ReportService:
    def __init__(self, db: Session):
        self.db = db

    def dashboard_stats(self) -> dict:
        """
        Headline numbers for the admin dashboard.
        """
        total_customers = self.db.query(Customer).count()

        # Bookings
        total_bookings = self.db.query(Booking).count()
        by_status = dict(
            self.db.query(Booking.status, func.count(Booking.id)).group_by(Booking.status).all()
        )

        # Revenue
        total_revenue = self.db.query(func.sum(Payment.amount)).filter(
            Payment.status == PaymentStatus.COMPLETED
        ).scalar() or 0

        total_catalogs = self.db.query(Catalog).count()

        return {
            "total_customers": total_customers,
            "total_bookings": total_bookings,
            "confirmed_bookings": by_status.get(BookingStatus.CONFIRMED, 0),
            "pending_bookings": by_status.get(BookingStatus.PENDING, 0),
            "cancelled_bookings": by_status.get(BookingStatus.CANCELLED, 0),
            "total_revenue": to_money(total_revenue),
            "total_catalogs": total_catalogs,
        }

    def revenue_report(self) -> List[dict]:
        """
        Payment activity grouped by payment month, newest month first.
        """
        payments = self.db.query(Payment).options(
            selectinload(Payment.booking)
        ).order_by(Payment.created_at.desc()).all()

        months = {}
        for payment in payments:
            key = payment.created_at.strftime("%Y-%m")
            row = months.get(key)
            if row is None:
                row = months[key] = {
                    "month": key,
                    "total_transactions": 0,
                    "bookings": set(),
                    "customers": set(),
                    "completed_revenue": Decimal("0.00"),
                    "pending_revenue": Decimal("0.00"),
                    "refunded_amount": Decimal("0.00"),
                    "package_revenue": Decimal("0.00"),
                    "custom_revenue": Decimal("0.00"),
                }

            amount = to_money(payment.amount)
            row["total_transactions"] += 1
            row["bookings"].add(payment.booking_id)
            if payment.booking is not None:
                row["customers"].add(payment.booking.customer_id)

            if payment.status == PaymentStatus.COMPLETED:
                row["completed_revenue"] += amount
                if payment.booking is not None and payment.booking.is_custom:
                    row["custom_revenue"] += amount
                else:
                    row["package_revenue"] += amount
            elif payment.status == PaymentStatus.PENDING:
                row["pending_revenue"] += amount
            elif payment.status == PaymentStatus.REFUNDED:
                row["refunded_amount"] += amount

        report = []
        for key in sorted(months, reverse=True):
            row = months[key]
            bookings = row.pop("bookings")
            customers = row.pop("customers")
            row["unique_bookings"] = len(bookings)
            row["unique_customers"] = len(customers)
            report.append(row)

        logger.info(f"📊 Revenue report built: {len(report)} months from {len(payments)} payments")
        return report
