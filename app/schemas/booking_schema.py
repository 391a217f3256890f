from pydantic import Field, field_validator
from typing import Optional
from datetime import date, datetime

from config import MAX_BOOKING_DURATION_MONTHS
from enums.booking_status import BookingStatus
from utils.date_utils import parse_iso_date
from .auth_schema import UserMinimumResponse
from .base_schema import CamelModel
from .kos_schema import KosMinimumResponse


class BookingCreate(CamelModel):
    kos_id: int = Field(gt=0, strict=True)
    check_in_date: date
    duration: int = Field(ge=1, le=MAX_BOOKING_DURATION_MONTHS, strict=True)
    notes: Optional[str] = Field(default=None, max_length=1000)

    @field_validator("check_in_date", mode="before")
    @classmethod
    def parse_check_in_date(cls, value):
        return parse_iso_date(value)


class BookingStatusUpdate(CamelModel):
    status: BookingStatus
    notes: Optional[str] = Field(default=None, max_length=1000)


class BookingResponse(CamelModel):
    id: int
    code: Optional[str] = None
    kos_id: int
    user_id: int
    check_in_date: date
    check_out_date: date
    duration: int
    total_price: int
    status: BookingStatus
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BookingDetailResponse(BookingResponse):
    kos: KosMinimumResponse
    user: UserMinimumResponse


class BookingPeriod(CamelModel):
    check_in_date: date
    check_out_date: date
    status: BookingStatus
