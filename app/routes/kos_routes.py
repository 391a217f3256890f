import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from config import DEFAULT_PAGE_SIZE
from database.init import get_db
from database.models.user_model import User
from schemas.kos_schema import KosCreate, KosUpdate
from services.booking_service import BookingService
from services.errors import ServiceError
from services.kos_service import KosService
from utils.date_utils import parse_iso_date
from utils.dependencies import get_current_user, seller_required

from responses.success import success_response
from responses.error import internal_server_error, service_error, validation_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/kos", tags=["Kos"])

kos_service = KosService()
booking_service = BookingService()


@router.get("")
def list_kos(
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
    city: Optional[str] = None,
    search: Optional[str] = None,
    min_price: Optional[int] = Query(default=None, alias="minPrice", ge=0),
    max_price: Optional[int] = Query(default=None, alias="maxPrice", ge=0),
    db: Session = Depends(get_db),
):
    try:
        items, pagination = kos_service.search_kos(
            db,
            page=page,
            limit=limit,
            city=city,
            search=search,
            min_price=min_price,
            max_price=max_price,
        )
        return success_response(
            "Kos retrieved successfully",
            {
                "kos": [kos_service.format_kos_response(k) for k in items],
                "pagination": pagination,
            },
        )
    except Exception:
        logger.exception("Failed to list kos")
        return internal_server_error("Failed to retrieve kos")


@router.post("")
def create_kos(
    payload: KosCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(seller_required),
):
    try:
        kos = kos_service.create_kos(db, current_user, payload)
        return success_response(
            "Kos created successfully", {"kos": kos_service.format_kos_response(kos)}
        )
    except Exception:
        logger.exception("Failed to create kos for user %s", current_user.id)
        return internal_server_error("Failed to create kos")


@router.get("/my")
def get_my_kos(
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
    db: Session = Depends(get_db),
    current_user: User = Depends(seller_required),
):
    try:
        items, pagination = kos_service.search_kos(
            db, page=page, limit=limit, owner_id=current_user.id
        )
        return success_response(
            "Kos retrieved successfully",
            {
                "kos": [kos_service.format_kos_response(k) for k in items],
                "pagination": pagination,
            },
        )
    except Exception:
        logger.exception("Failed to list kos of user %s", current_user.id)
        return internal_server_error("Failed to retrieve kos")


@router.get("/{kos_id}")
def get_kos(kos_id: int, db: Session = Depends(get_db)):
    try:
        kos = kos_service.get_kos(db, kos_id)
        return success_response(
            "Kos retrieved successfully", {"kos": kos_service.format_kos_response(kos)}
        )
    except ServiceError as e:
        return service_error(e)
    except Exception:
        logger.exception("Failed to fetch kos %s", kos_id)
        return internal_server_error("Failed to retrieve kos")


@router.put("/{kos_id}")
def update_kos(
    kos_id: int,
    payload: KosUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Update a kos listing. Existing bookings keep the price they were created with."""
    try:
        kos = kos_service.update_kos(db, kos_id, payload, current_user)
        return success_response(
            "Kos updated successfully", {"kos": kos_service.format_kos_response(kos)}
        )
    except ServiceError as e:
        return service_error(e)
    except Exception:
        logger.exception("Failed to update kos %s", kos_id)
        return internal_server_error("Failed to update kos")


@router.get("/{kos_id}/availability")
def check_availability(
    kos_id: int,
    check_in_date: Optional[str] = Query(default=None, alias="checkInDate"),
    duration: Optional[int] = Query(default=None),
    db: Session = Depends(get_db),
):
    if not check_in_date or duration is None:
        return validation_error("checkInDate and duration are required")
    try:
        check_in = parse_iso_date(check_in_date)
    except ValueError:
        return validation_error(
            "Invalid checkInDate",
            details=[{"field": "checkInDate", "message": "Must be an ISO-8601 date"}],
        )

    try:
        availability = booking_service.check_availability(
            db, kos_id, check_in, duration, today=date.today()
        )
        return success_response("Availability checked successfully", availability)
    except ServiceError as e:
        return service_error(e)
    except Exception:
        logger.exception("Failed to check availability for kos %s", kos_id)
        return internal_server_error("Failed to check availability")


@router.delete("/{kos_id}")
def delete_kos(
    kos_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(seller_required),
):
    """Withdraw a listing. Bookings already made for it are kept."""
    try:
        kos = kos_service.delete_kos(db, kos_id, current_user)
        return success_response(f'Kos "{kos.name}" deleted successfully')
    except ServiceError as e:
        return service_error(e)
    except Exception:
        logger.exception("Failed to delete kos %s", kos_id)
        return internal_server_error("Failed to delete kos")
