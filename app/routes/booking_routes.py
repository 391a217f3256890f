import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from config import DEFAULT_PAGE_SIZE
from database.init import get_db
from database.models.user_model import User
from enums.booking_status import BookingStatus
from schemas.booking_schema import BookingCreate, BookingStatusUpdate
from services.booking_service import BookingService
from services.errors import ServiceError
from utils.dependencies import get_current_user

from responses.success import success_response
from responses.error import internal_server_error, service_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["Bookings"])
booking_service = BookingService()


@router.post("")
def create_booking(
    payload: BookingCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Request a booking for a kos.

    An overlap with an existing booking is not an error: the response is a
    success envelope with available=false and conflict=true, and nothing is stored.
    """
    try:
        result = booking_service.create_booking(
            db, payload, current_user, today=date.today()
        )
        if result["conflict"]:
            return success_response("Kos is not available for the selected dates", result)
        return success_response("Booking created successfully", result)
    except ServiceError as e:
        return service_error(e)
    except Exception:
        logger.exception("Failed to create booking for user %s", current_user.id)
        return internal_server_error("Failed to create booking")


@router.get("")
def list_bookings(
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
    status: Optional[BookingStatus] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Returns bookings visible to the caller:
    - admins see every booking
    - sellers see bookings on the kos they own
    - renters see their own bookings
    """
    try:
        bookings, pagination = booking_service.list_bookings(
            db, current_user, page=page, limit=limit, status=status
        )
        return success_response(
            "Bookings retrieved successfully",
            {"bookings": bookings, "pagination": pagination},
        )
    except Exception:
        logger.exception("Failed to list bookings for user %s", current_user.id)
        return internal_server_error("Failed to retrieve bookings")


@router.get("/{booking_id}")
def get_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        booking = booking_service.get_booking_for_user(db, booking_id, current_user)
        return success_response(
            "Booking retrieved successfully",
            {"booking": booking_service.format_booking_detail(booking)},
        )
    except ServiceError as e:
        return service_error(e)
    except Exception:
        logger.exception("Failed to fetch booking %s", booking_id)
        return internal_server_error("Failed to retrieve booking")


@router.put("/{booking_id}")
def update_booking(
    booking_id: int,
    payload: BookingStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        booking = booking_service.update_status(
            db, booking_id, payload.status, current_user, notes=payload.notes
        )
        return success_response(
            "Booking updated successfully",
            {"booking": booking_service.format_booking_detail(booking)},
        )
    except ServiceError as e:
        return service_error(e)
    except Exception:
        logger.exception("Failed to update booking %s", booking_id)
        return internal_server_error("Failed to update booking")
