"""
Authorization policy for listings and bookings.

Every decision branches on the closed ``UserRole`` / ``BookingActor`` enums
so that adding a role fails loudly instead of silently granting access.
"""

from enum import Enum

from enums.booking_status import BookingStatus
from enums.user_role import UserRole


class BookingActor(str, Enum):
    """How a user relates to a particular booking"""

    ADMIN = "admin"
    OWNER = "owner"
    RENTER = "renter"
    NONE = "none"


class BookingScope(str, Enum):
    """Which bookings a role may list"""

    ALL = "all"
    OWNED_LISTINGS = "owned_listings"
    OWN = "own"


def can_manage_listings(role: UserRole) -> bool:
    if role is UserRole.ADMIN:
        return True
    if role is UserRole.SELLER:
        return True
    if role is UserRole.RENTER:
        return False
    raise ValueError(f"Unknown role: {role}")


def can_create_booking(role: UserRole) -> bool:
    if role is UserRole.RENTER:
        return True
    if role is UserRole.SELLER:
        return False
    if role is UserRole.ADMIN:
        return False
    raise ValueError(f"Unknown role: {role}")


def booking_scope(role: UserRole) -> BookingScope:
    if role is UserRole.ADMIN:
        return BookingScope.ALL
    if role is UserRole.SELLER:
        return BookingScope.OWNED_LISTINGS
    if role is UserRole.RENTER:
        return BookingScope.OWN
    raise ValueError(f"Unknown role: {role}")


def resolve_booking_actor(
    role: UserRole, user_id: int, booking_user_id: int, kos_owner_id: int
) -> BookingActor:
    """Admin wins over listing owner, listing owner over the requester."""
    if role is UserRole.ADMIN:
        return BookingActor.ADMIN
    if role is UserRole.SELLER or role is UserRole.RENTER:
        if kos_owner_id == user_id:
            return BookingActor.OWNER
        if booking_user_id == user_id:
            return BookingActor.RENTER
        return BookingActor.NONE
    raise ValueError(f"Unknown role: {role}")


def can_view_booking(actor: BookingActor) -> bool:
    return actor is not BookingActor.NONE


def can_set_status(
    actor: BookingActor, current: BookingStatus, target: BookingStatus
) -> bool:
    """Whether ``actor`` may ask for ``target``; the status graph is checked separately."""
    if actor is BookingActor.ADMIN or actor is BookingActor.OWNER:
        return True
    if actor is BookingActor.RENTER:
        # Renters may only cancel; asking again for an already cancelled booking is allowed
        return target is BookingStatus.CANCELLED and current in (
            BookingStatus.PENDING,
            BookingStatus.CONFIRMED,
            BookingStatus.CANCELLED,
        )
    if actor is BookingActor.NONE:
        return False
    raise ValueError(f"Unknown booking actor: {actor}")
