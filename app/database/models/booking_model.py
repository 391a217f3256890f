from sqlalchemy import Column, Integer, String, Text, Date, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..init import Base
from enums.booking_status import BookingStatus


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        Index("ix_bookings_kos_dates", "kos_id", "check_in_date", "check_out_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    kos_id = Column(Integer, ForeignKey("kos.id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    check_in_date = Column(Date, nullable=False)
    check_out_date = Column(Date, nullable=False)
    duration = Column(Integer, nullable=False)
    # Frozen at creation: kos price x duration
    total_price = Column(Integer, nullable=False)
    status = Column(String(20), default=BookingStatus.PENDING.value, nullable=False)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    kos = relationship("Kos", back_populates="bookings")
    user = relationship("User", back_populates="bookings")
