from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from database.init import Base


class Kos(Base):
    __tablename__ = "kos"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String(150), index=True, nullable=False)
    address = Column(String(255), nullable=False)
    city = Column(String(100), index=True, nullable=False)
    description = Column(String(2000), nullable=True)
    facilities = Column(Text, nullable=True)
    # Monthly rent in whole currency units
    price = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    # Set when the listing is withdrawn; bookings keep pointing at the row
    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)

    owner = relationship("User", back_populates="kos_listings")
    bookings = relationship("Booking", back_populates="kos")
    reviews = relationship("Review", back_populates="kos", cascade="all, delete-orphan")
    favorites = relationship("Favorite", back_populates="kos", cascade="all, delete-orphan")
