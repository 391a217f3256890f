"""
Tests for the booking rules that do not need HTTP: calendar arithmetic,
overlap detection, pricing, the permission policy and the service layer.
"""

import threading
import time
from datetime import date

import pytest

from conftest import make_booking, make_kos, make_user
from database.init import SessionLocal
from database.models import Booking, User
from enums.booking_status import ALLOWED_TRANSITIONS, BookingStatus
from enums.user_role import UserRole
from schemas.booking_schema import BookingCreate
from services.booking_service import BookingService, calculate_total_price
from services.errors import ForbiddenError, NotFoundError, ValidationFailed
from utils.date_utils import add_months, parse_iso_date, ranges_overlap
from utils.permissions import (
    BookingActor,
    BookingScope,
    booking_scope,
    can_create_booking,
    can_manage_listings,
    can_set_status,
    resolve_booking_actor,
)

service = BookingService()
BEFORE_2025_SEASON = date(2025, 1, 1)


class TestCalendarArithmetic:
    def test_add_months_keeps_day_of_month(self):
        assert add_months(date(2025, 3, 10), 2) == date(2025, 5, 10)

    def test_add_months_rolls_over_year(self):
        assert add_months(date(2025, 11, 15), 3) == date(2026, 2, 15)

    def test_add_months_clamps_to_month_end(self):
        assert add_months(date(2025, 1, 31), 1) == date(2025, 2, 28)
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)

    def test_twelve_months_is_one_year(self):
        assert add_months(date(2025, 6, 1), 12) == date(2026, 6, 1)


class TestRangesOverlap:
    def test_partial_overlap(self):
        assert ranges_overlap(
            date(2025, 3, 10), date(2025, 5, 10), date(2025, 4, 1), date(2025, 4, 15)
        )

    def test_back_to_back_ranges_do_not_overlap(self):
        assert not ranges_overlap(
            date(2025, 3, 10), date(2025, 5, 10), date(2025, 5, 10), date(2025, 7, 10)
        )
        assert not ranges_overlap(
            date(2025, 5, 10), date(2025, 7, 10), date(2025, 3, 10), date(2025, 5, 10)
        )

    def test_containment_overlaps(self):
        assert ranges_overlap(
            date(2025, 1, 1), date(2025, 12, 1), date(2025, 3, 1), date(2025, 4, 1)
        )

    def test_disjoint_ranges(self):
        assert not ranges_overlap(
            date(2025, 1, 1), date(2025, 2, 1), date(2025, 3, 1), date(2025, 4, 1)
        )


class TestPricing:
    def test_total_is_price_times_duration(self):
        assert calculate_total_price(500000, 2) == 1000000

    def test_single_month(self):
        assert calculate_total_price(750000, 1) == 750000

    @pytest.mark.parametrize("price,duration", [(0, 1), (-1, 2), (500000, 0)])
    def test_rejects_non_positive_inputs(self, price, duration):
        with pytest.raises(ValueError):
            calculate_total_price(price, duration)


class TestParseIsoDate:
    def test_plain_date(self):
        assert parse_iso_date("2025-03-10") == date(2025, 3, 10)

    def test_datetime_with_zulu_suffix(self):
        assert parse_iso_date("2025-03-10T00:00:00.000Z") == date(2025, 3, 10)

    def test_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_iso_date("next tuesday")

    def test_rejects_non_strings(self):
        with pytest.raises(ValueError):
            parse_iso_date(20250310)


class TestBookingCreateSchema:
    def test_accepts_camel_case_payload(self):
        booking_in = BookingCreate.model_validate(
            {"kosId": 3, "checkInDate": "2025-03-10", "duration": 2}
        )
        assert booking_in.kos_id == 3
        assert booking_in.check_in_date == date(2025, 3, 10)
        assert booking_in.notes is None

    @pytest.mark.parametrize(
        "payload",
        [
            {"checkInDate": "2025-03-10", "duration": 2},
            {"kosId": 0, "checkInDate": "2025-03-10", "duration": 2},
            {"kosId": 1, "checkInDate": "not-a-date", "duration": 2},
            {"kosId": 1, "checkInDate": "2025-03-10", "duration": 13},
            {"kosId": 1, "checkInDate": "2025-03-10", "duration": 0},
            {"kosId": 1, "checkInDate": "2025-03-10", "duration": 1.5},
            {"kosId": 1, "checkInDate": "2025-03-10", "duration": "2"},
        ],
    )
    def test_rejects_malformed_payloads(self, payload):
        with pytest.raises(ValueError):
            BookingCreate.model_validate(payload)


class TestPermissions:
    def test_listing_management_by_role(self):
        assert can_manage_listings(UserRole.ADMIN)
        assert can_manage_listings(UserRole.SELLER)
        assert not can_manage_listings(UserRole.RENTER)

    def test_only_renters_book(self):
        assert can_create_booking(UserRole.RENTER)
        assert not can_create_booking(UserRole.SELLER)
        assert not can_create_booking(UserRole.ADMIN)

    def test_booking_scope(self):
        assert booking_scope(UserRole.ADMIN) is BookingScope.ALL
        assert booking_scope(UserRole.SELLER) is BookingScope.OWNED_LISTINGS
        assert booking_scope(UserRole.RENTER) is BookingScope.OWN

    def test_actor_resolution(self):
        assert resolve_booking_actor(UserRole.ADMIN, 9, 1, 2) is BookingActor.ADMIN
        assert resolve_booking_actor(UserRole.SELLER, 2, 1, 2) is BookingActor.OWNER
        assert resolve_booking_actor(UserRole.RENTER, 1, 1, 2) is BookingActor.RENTER
        assert resolve_booking_actor(UserRole.RENTER, 5, 1, 2) is BookingActor.NONE

    def test_renter_may_only_cancel(self):
        assert can_set_status(BookingActor.RENTER, BookingStatus.PENDING, BookingStatus.CANCELLED)
        assert can_set_status(BookingActor.RENTER, BookingStatus.CANCELLED, BookingStatus.CANCELLED)
        assert can_set_status(BookingActor.RENTER, BookingStatus.CONFIRMED, BookingStatus.CANCELLED)
        assert not can_set_status(BookingActor.RENTER, BookingStatus.PENDING, BookingStatus.CONFIRMED)
        assert not can_set_status(BookingActor.RENTER, BookingStatus.COMPLETED, BookingStatus.CANCELLED)

    def test_owner_and_admin_may_request_any_status(self):
        for actor in (BookingActor.OWNER, BookingActor.ADMIN):
            assert can_set_status(actor, BookingStatus.PENDING, BookingStatus.CONFIRMED)
            assert can_set_status(actor, BookingStatus.CONFIRMED, BookingStatus.COMPLETED)

    def test_strangers_may_not_touch_bookings(self):
        assert not can_set_status(BookingActor.NONE, BookingStatus.PENDING, BookingStatus.CANCELLED)

    def test_terminal_states_have_no_exits(self):
        assert ALLOWED_TRANSITIONS[BookingStatus.CANCELLED] == set()
        assert ALLOWED_TRANSITIONS[BookingStatus.COMPLETED] == set()
        assert BookingStatus.CANCELLED.is_terminal
        assert not BookingStatus.CONFIRMED.is_terminal


class TestBookingServiceCreate:
    def _request(self, kos, check_in, duration, notes=None):
        return BookingCreate(kos_id=kos.id, check_in_date=check_in, duration=duration, notes=notes)

    def test_price_and_checkout_are_derived(self, db, kos, renter):
        result = service.create_booking(
            db, self._request(kos, date(2025, 3, 10), 2), renter, today=BEFORE_2025_SEASON
        )

        assert result["available"] is True
        assert result["conflict"] is False
        booking = result["booking"]
        assert booking.total_price == 1000000
        assert booking.check_out_date == date(2025, 5, 10)
        assert booking.status is BookingStatus.PENDING
        assert booking.code == f"BKG-{booking.id:04d}"

    def test_overlapping_request_is_reported_and_not_persisted(self, db, kos, renter, other_renter):
        service.create_booking(
            db, self._request(kos, date(2025, 3, 10), 2), renter, today=BEFORE_2025_SEASON
        )

        result = service.create_booking(
            db, self._request(kos, date(2025, 4, 1), 1), other_renter, today=BEFORE_2025_SEASON
        )

        assert result == {"available": False, "conflict": True}
        assert len(service.find_conflicts(db, kos.id, date(2025, 1, 1), date(2026, 1, 1))) == 1

    def test_back_to_back_request_is_accepted(self, db, kos, renter, other_renter):
        service.create_booking(
            db, self._request(kos, date(2025, 3, 10), 2), renter, today=BEFORE_2025_SEASON
        )

        result = service.create_booking(
            db, self._request(kos, date(2025, 5, 10), 2), other_renter, today=BEFORE_2025_SEASON
        )

        assert result["conflict"] is False
        assert result["booking"].check_out_date == date(2025, 7, 10)

    def test_cancelled_bookings_do_not_block(self, db, kos, renter, other_renter):
        make_booking(db, kos, renter, date(2025, 3, 10), 2, status=BookingStatus.CANCELLED)

        result = service.create_booking(
            db, self._request(kos, date(2025, 3, 10), 2), other_renter, today=BEFORE_2025_SEASON
        )

        assert result["available"] is True

    def test_completed_bookings_still_block(self, db, kos, renter, other_renter):
        make_booking(db, kos, renter, date(2025, 3, 10), 2, status=BookingStatus.COMPLETED)

        result = service.create_booking(
            db, self._request(kos, date(2025, 4, 10), 1), other_renter, today=BEFORE_2025_SEASON
        )

        assert result["conflict"] is True

    def test_bookings_on_other_kos_are_ignored(self, db, kos, seller, renter, other_renter):
        other_kos = make_kos(db, seller, name="Kos Mawar")
        make_booking(db, other_kos, renter, date(2025, 3, 10), 2)

        result = service.create_booking(
            db, self._request(kos, date(2025, 3, 10), 2), other_renter, today=BEFORE_2025_SEASON
        )

        assert result["available"] is True

    def test_past_check_in_is_rejected(self, db, kos, renter):
        with pytest.raises(ValidationFailed):
            service.create_booking(
                db, self._request(kos, date(2025, 3, 9), 1), renter, today=date(2025, 3, 10)
            )

    def test_check_in_today_is_allowed(self, db, kos, renter):
        result = service.create_booking(
            db, self._request(kos, date(2025, 3, 10), 1), renter, today=date(2025, 3, 10)
        )
        assert result["available"] is True

    def test_owner_cannot_book_own_kos(self, db, kos, seller):
        with pytest.raises(ForbiddenError) as excinfo:
            service.create_booking(
                db, self._request(kos, date(2025, 3, 10), 1), seller, today=BEFORE_2025_SEASON
            )
        assert excinfo.value.status_code == 400

    def test_unknown_kos(self, db, renter):
        request = BookingCreate(kos_id=999, check_in_date=date(2025, 3, 10), duration=1)
        with pytest.raises(NotFoundError):
            service.create_booking(db, request, renter, today=BEFORE_2025_SEASON)

    def test_total_price_is_frozen_at_creation(self, db, kos, renter):
        result = service.create_booking(
            db, self._request(kos, date(2025, 3, 10), 3), renter, today=BEFORE_2025_SEASON
        )

        kos.price = 900000
        db.commit()
        db.expire_all()

        stored = service.get(db, result["booking"].id)
        assert stored.total_price == 1500000


class TestConcurrentBookings:
    def test_simultaneous_overlapping_requests_store_one_booking(
        self, db, kos, renter, other_renter, monkeypatch
    ):
        real_find_conflicts = BookingService.find_conflicts

        def slow_find_conflicts(self, *args, **kwargs):
            conflicts = real_find_conflicts(self, *args, **kwargs)
            # Keep the gap between the conflict check and the insert open
            time.sleep(0.3)
            return conflicts

        monkeypatch.setattr(BookingService, "find_conflicts", slow_find_conflicts)

        kos_id = kos.id
        start = threading.Barrier(2)
        conflicts, errors = [], []

        def request_booking(user_id):
            session = SessionLocal()
            try:
                user = session.get(User, user_id)
                request = BookingCreate(kos_id=kos_id, check_in_date=date(2025, 3, 10), duration=2)
                start.wait(timeout=5)
                result = service.create_booking(session, request, user, today=BEFORE_2025_SEASON)
                conflicts.append(result["conflict"])
            except Exception as exc:
                errors.append(exc)
            finally:
                session.close()

        threads = [
            threading.Thread(target=request_booking, args=(user_id,))
            for user_id in (renter.id, other_renter.id)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)

        assert errors == []
        assert sorted(conflicts) == [False, True]
        assert db.query(Booking).filter(Booking.kos_id == kos_id).count() == 1


class TestBookingServiceStatus:
    def test_full_lifecycle(self, db, kos, seller, renter):
        booking = make_booking(db, kos, renter, date(2025, 3, 10), 2)

        booking = service.update_status(db, booking.id, BookingStatus.CONFIRMED, seller)
        assert booking.status == BookingStatus.CONFIRMED.value

        booking = service.update_status(db, booking.id, BookingStatus.COMPLETED, seller)
        assert booking.status == BookingStatus.COMPLETED.value

    def test_skipping_confirmation_is_invalid(self, db, kos, seller, renter):
        booking = make_booking(db, kos, renter, date(2025, 3, 10), 2)

        with pytest.raises(ValidationFailed):
            service.update_status(db, booking.id, BookingStatus.COMPLETED, seller)

    def test_terminal_state_cannot_be_left(self, db, kos, admin, renter):
        booking = make_booking(db, kos, renter, date(2025, 3, 10), 2, status=BookingStatus.CANCELLED)

        with pytest.raises(ValidationFailed):
            service.update_status(db, booking.id, BookingStatus.CONFIRMED, admin)

    def test_repeated_cancel_is_idempotent(self, db, kos, renter):
        booking = make_booking(db, kos, renter, date(2025, 3, 10), 2)

        first = service.update_status(db, booking.id, BookingStatus.CANCELLED, renter)
        first_updated_at = first.updated_at
        second = service.update_status(db, booking.id, BookingStatus.CANCELLED, renter)

        assert second.status == BookingStatus.CANCELLED.value
        assert second.updated_at == first_updated_at

    def test_stranger_is_forbidden(self, db, kos, renter, other_renter):
        booking = make_booking(db, kos, renter, date(2025, 3, 10), 2)

        with pytest.raises(ForbiddenError):
            service.update_status(db, booking.id, BookingStatus.CANCELLED, other_renter)

    def test_other_seller_is_forbidden(self, db, kos, renter):
        stranger = make_user(db, "stranger", UserRole.SELLER)
        booking = make_booking(db, kos, renter, date(2025, 3, 10), 2)

        with pytest.raises(ForbiddenError):
            service.update_status(db, booking.id, BookingStatus.CONFIRMED, stranger)

    def test_missing_booking(self, db, admin):
        with pytest.raises(NotFoundError):
            service.update_status(db, 404, BookingStatus.CONFIRMED, admin)
