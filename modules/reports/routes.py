from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from database.base import get_db
from modules.reports.schemas import DashboardStats, MonthlyRevenue
from modules.reports.service import ReportService
from shared.dependencies import CurrentUser, get_admin_user

router = APIRouter()


@router.get("/dashboard", response_model=DashboardStats)
def get_dashboard_stats(
    current_user: CurrentUser = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    """
    Get overall platform statistics (admin only).
    """
    return ReportService(db).dashboard_stats()


@router.get("/revenue", response_model=List[MonthlyRevenue])
def get_revenue_report(
    current_user: CurrentUser = Depends(get_admin_user),
    db: Session = Depends(get_db)
):
    """
    Monthly revenue: completed, pending and refunded amounts, split into
    package and custom bookings (admin only).
    """
    return ReportService(db).revenue_report()
