from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from datetime import date
from typing import List

from database.base import get_db
from modules.bookings.costs import stay_nights
from modules.catalogs.schemas import CatalogListResponse, CatalogDetailResponse, CatalogQuoteResponse
from modules.catalogs.service import CatalogService
from shared.dependencies import CurrentUser, get_current_user
from shared.exceptions import BadRequestException, ErrorCode

router = APIRouter()


@router.get("", response_model=List[CatalogListResponse])
def list_catalogs(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """List all catalog packages with their calculated totals."""
    return CatalogService(db).list_catalogs()


@router.get("/{catalog_id}", response_model=CatalogDetailResponse)
def get_catalog(
    catalog_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """Catalog package with its hotels, transport and food."""
    return CatalogService(db).get_catalog_detail(catalog_id)


@router.get("/{catalog_id}/quote", response_model=CatalogQuoteResponse)
def quote_catalog(
    catalog_id: int,
    check_in: date = Query(...),
    check_out: date = Query(...),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user)
):
    """
    Price the package for a stay window. Matches the total a booking of this
    package with the same dates is created with.
    """
    if check_out <= check_in:
        raise BadRequestException("Check-out date must be after check-in date", ErrorCode.INVALID_DATE_RANGE)

    costs = CatalogService(db).quote(catalog_id, check_in, check_out)
    return {"catalog_id": catalog_id, "nights": stay_nights(check_in, check_out), **costs.as_dict()}
