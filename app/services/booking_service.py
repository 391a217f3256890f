import logging
from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from config import MAX_BOOKING_DURATION_MONTHS
from database.init import lock_for_write
from database.models import Booking, Kos
from database.models.user_model import User
from enums.booking_status import ALLOWED_TRANSITIONS, BookingStatus
from enums.user_role import UserRole
from schemas.auth_schema import UserMinimumResponse
from schemas.booking_schema import (
    BookingCreate,
    BookingDetailResponse,
    BookingPeriod,
    BookingResponse,
)
from schemas.kos_schema import KosMinimumResponse
from services.errors import ForbiddenError, NotFoundError, ValidationFailed
from utils.date_utils import add_months
from utils.id_generator import generate_booking_code
from utils.pagination import paginate
from utils.permissions import (
    BookingActor,
    BookingScope,
    booking_scope,
    can_create_booking,
    can_set_status,
    can_view_booking,
    resolve_booking_actor,
)

logger = logging.getLogger(__name__)

# How far ahead the availability check lists upcoming bookings
UPCOMING_WINDOW_MONTHS = 3


def calculate_total_price(monthly_price: int, duration: int) -> int:
    """Total rent for a stay: whole currency units, no rounding involved."""
    if monthly_price <= 0:
        raise ValueError("Monthly price must be positive")
    if duration <= 0:
        raise ValueError("Duration must be positive")
    return monthly_price * duration


class BookingService:
    def get(self, db: Session, booking_id: int) -> Optional[Booking]:
        return (
            db.query(Booking)
            .options(joinedload(Booking.kos), joinedload(Booking.user))
            .filter(Booking.id == booking_id)
            .first()
        )

    def validate_check_in(self, check_in_date: date, today: date) -> None:
        if check_in_date < today:
            raise ValidationFailed(
                "Check-in date cannot be in the past",
                details=[{"field": "checkInDate", "message": "Check-in date cannot be in the past"}],
            )

    def validate_duration(self, duration: int) -> None:
        if duration < 1 or duration > MAX_BOOKING_DURATION_MONTHS:
            raise ValidationFailed(
                f"Duration must be between 1 and {MAX_BOOKING_DURATION_MONTHS} months",
                details=[{"field": "duration", "message": "Duration out of range"}],
            )

    def find_conflicts(
        self,
        db: Session,
        kos_id: int,
        check_in_date: date,
        check_out_date: date,
        exclude_booking_id: Optional[int] = None,
        for_update: bool = False,
    ) -> List[Booking]:
        """
        Non-cancelled bookings on the kos whose [check-in, check-out) overlaps the given range.

        With ``for_update`` the rows are read with a locking read, which sees
        the latest committed bookings rather than the transaction's snapshot.
        """
        query = db.query(Booking).filter(
            Booking.kos_id == kos_id,
            Booking.status != BookingStatus.CANCELLED.value,
            Booking.check_in_date < check_out_date,
            Booking.check_out_date > check_in_date,
        )
        if exclude_booking_id is not None:
            query = query.filter(Booking.id != exclude_booking_id)
        if for_update:
            query = query.with_for_update()
        return query.order_by(Booking.check_in_date).all()

    def get_upcoming(self, db: Session, kos_id: int, today: date) -> List[Booking]:
        horizon = add_months(today, UPCOMING_WINDOW_MONTHS)
        return (
            db.query(Booking)
            .filter(
                Booking.kos_id == kos_id,
                Booking.status.in_(
                    [BookingStatus.PENDING.value, BookingStatus.CONFIRMED.value]
                ),
                Booking.check_in_date >= today,
                Booking.check_in_date <= horizon,
            )
            .order_by(Booking.check_in_date)
            .all()
        )

    def check_availability(
        self, db: Session, kos_id: int, check_in_date: date, duration: int, today: date
    ) -> dict:
        self.validate_duration(duration)
        if not db.query(Kos.id).filter(Kos.id == kos_id, Kos.deleted_at.is_(None)).first():
            raise NotFoundError("Kos not found")

        check_out_date = add_months(check_in_date, duration)
        conflicts = self.find_conflicts(db, kos_id, check_in_date, check_out_date)
        upcoming = self.get_upcoming(db, kos_id, today)

        return {
            "available": not conflicts,
            "requestedPeriod": {
                "checkInDate": check_in_date,
                "checkOutDate": check_out_date,
                "duration": duration,
            },
            "conflicts": [BookingPeriod.model_validate(b) for b in conflicts],
            "upcomingBookings": [BookingPeriod.model_validate(b) for b in upcoming],
        }

    def create_booking(
        self, db: Session, booking_in: BookingCreate, user: User, today: date
    ) -> dict:
        """
        Validate, conflict-check and persist a booking in one transaction.

        The kos row is locked (SELECT ... FOR UPDATE, or the database write
        lock on SQLite) before the conflict query, and the conflict query is
        itself a locking read, so two concurrent requests for the same kos
        cannot both pass the check. Returns {"available", "conflict", "booking"?}.
        """
        self.validate_check_in(booking_in.check_in_date, today)
        self.validate_duration(booking_in.duration)

        try:
            lock_for_write(db)
            kos = (
                db.query(Kos)
                .filter(Kos.id == booking_in.kos_id, Kos.deleted_at.is_(None))
                .with_for_update()
                .first()
            )
            if not kos:
                raise NotFoundError("Kos not found")

            if kos.owner_id == user.id:
                raise ForbiddenError("You cannot book your own kos", status_code=400)

            if not can_create_booking(UserRole(user.role)):
                raise ForbiddenError("Only renters can create bookings")

            check_in_date = booking_in.check_in_date
            check_out_date = add_months(check_in_date, booking_in.duration)

            conflicts = self.find_conflicts(
                db, kos.id, check_in_date, check_out_date, for_update=True
            )
            if conflicts:
                logger.info(
                    "Booking request by user %s for kos %s [%s, %s) conflicts with %s",
                    user.id,
                    kos.id,
                    check_in_date,
                    check_out_date,
                    [b.id for b in conflicts],
                )
                db.rollback()
                return {"available": False, "conflict": True}

            booking = Booking(
                kos_id=kos.id,
                user_id=user.id,
                check_in_date=check_in_date,
                check_out_date=check_out_date,
                duration=booking_in.duration,
                total_price=calculate_total_price(kos.price, booking_in.duration),
                status=BookingStatus.PENDING.value,
                notes=booking_in.notes,
            )
            db.add(booking)
            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(booking)
        logger.info(
            "Booking %s created for kos %s by user %s (total %s)",
            booking.id,
            booking.kos_id,
            user.id,
            booking.total_price,
        )
        return {
            "available": True,
            "conflict": False,
            "booking": self.format_booking_response(booking),
        }

    def resolve_actor(self, booking: Booking, user: User) -> BookingActor:
        return resolve_booking_actor(
            UserRole(user.role), user.id, booking.user_id, booking.kos.owner_id
        )

    def get_booking_for_user(self, db: Session, booking_id: int, user: User) -> Booking:
        booking = self.get(db, booking_id)
        if not booking:
            raise NotFoundError("Booking not found")
        if not can_view_booking(self.resolve_actor(booking, user)):
            raise ForbiddenError("Access denied")
        return booking

    def update_status(
        self,
        db: Session,
        booking_id: int,
        new_status: BookingStatus,
        user: User,
        notes: Optional[str] = None,
    ) -> Booking:
        """
        Apply a status change on behalf of ``user``.

        Renters may only cancel their own live bookings; the kos owner and
        admins may move a booking along the status graph. Requesting the
        current status is a no-op so repeated submissions are harmless.
        """
        booking = self.get(db, booking_id)
        if not booking:
            raise NotFoundError("Booking not found")

        actor = self.resolve_actor(booking, user)
        current = BookingStatus(booking.status)

        if not can_set_status(actor, current, new_status):
            raise ForbiddenError("You cannot perform this action")

        if new_status is not current and new_status not in ALLOWED_TRANSITIONS[current]:
            raise ValidationFailed(
                f"Booking is already {current}" if current.is_terminal else "Invalid status transition",
                details={"from": current.value, "to": new_status.value},
            )

        changed = False
        if new_status is not current:
            booking.status = new_status.value
            changed = True
        if notes is not None and notes != booking.notes:
            booking.notes = notes
            changed = True

        if changed:
            db.commit()
            db.refresh(booking)
            logger.info(
                "Booking %s moved %s -> %s by %s %s",
                booking.id,
                current.value,
                booking.status,
                actor.value,
                user.id,
            )
        return booking

    def list_bookings(
        self,
        db: Session,
        user: User,
        page: int = 1,
        limit: int = 10,
        status: Optional[BookingStatus] = None,
    ):
        query = db.query(Booking).options(
            joinedload(Booking.kos), joinedload(Booking.user)
        )

        scope = booking_scope(UserRole(user.role))
        if scope is BookingScope.OWNED_LISTINGS:
            query = query.join(Kos, Booking.kos_id == Kos.id).filter(Kos.owner_id == user.id)
        elif scope is BookingScope.OWN:
            query = query.filter(Booking.user_id == user.id)

        if status is not None:
            query = query.filter(Booking.status == status.value)

        query = query.order_by(Booking.created_at.desc(), Booking.id.desc())
        bookings, meta = paginate(query, page, limit)
        return [self.format_booking_detail(b) for b in bookings], meta

    def format_booking_response(self, booking: Booking) -> BookingResponse:
        response = BookingResponse.model_validate(booking)
        response.code = generate_booking_code(booking.id)
        return response

    def format_booking_detail(self, booking: Booking) -> BookingDetailResponse:
        response = BookingDetailResponse(
            **self.format_booking_response(booking).model_dump(),
            kos=KosMinimumResponse.model_validate(booking.kos),
            user=UserMinimumResponse.model_validate(booking.user),
        )
        return response
