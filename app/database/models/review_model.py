from sqlalchemy import Column, Integer, Text, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..init import Base


class Review(Base):
    __tablename__ = "reviews"
    __table_args__ = (UniqueConstraint("kos_id", "user_id", name="uq_reviews_kos_user"),)

    id = Column(Integer, primary_key=True, index=True)
    kos_id = Column(Integer, ForeignKey("kos.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    kos = relationship("Kos", back_populates="reviews")
    user = relationship("User")
