from sqlalchemy import Column, Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from ..init import Base


class Favorite(Base):
    __tablename__ = "favorites"
    __table_args__ = (UniqueConstraint("user_id", "kos_id", name="uq_favorites_user_kos"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    kos_id = Column(Integer, ForeignKey("kos.id"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    kos = relationship("Kos", back_populates="favorites")
