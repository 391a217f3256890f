import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, joinedload

from database.models import Kos
from database.models.user_model import User
from enums.user_role import UserRole
from schemas.kos_schema import KosCreate, KosUpdate, KosResponse
from services.base_service import BaseService
from services.errors import ForbiddenError, NotFoundError
from utils.id_generator import generate_kos_code
from utils.pagination import paginate

logger = logging.getLogger(__name__)


class KosService(BaseService):
    def __init__(self):
        super().__init__(Kos)

    def active(self, db: Session):
        """Listings that have not been withdrawn."""
        return db.query(self.model).filter(self.model.deleted_at.is_(None))

    def create_kos(self, db: Session, owner: User, kos_in: KosCreate) -> Kos:
        kos = self.create(db, kos_in, owner_id=owner.id)
        logger.info("Kos %s created by user %s", kos.id, owner.id)
        return kos

    def get_kos(self, db: Session, kos_id: int) -> Kos:
        kos = (
            self.active(db)
            .options(joinedload(self.model.owner))
            .filter(self.model.id == kos_id)
            .first()
        )
        if not kos:
            raise NotFoundError(f"No kos found with id {kos_id}")
        return kos

    def search_kos(
        self,
        db: Session,
        page: int = 1,
        limit: int = 10,
        city: Optional[str] = None,
        search: Optional[str] = None,
        min_price: Optional[int] = None,
        max_price: Optional[int] = None,
        owner_id: Optional[int] = None,
    ):
        query = self.active(db).options(joinedload(self.model.owner))
        if city:
            query = query.filter(func.lower(self.model.city).like(f"%{city.lower()}%"))
        if search:
            pattern = f"%{search.lower()}%"
            query = query.filter(
                or_(
                    func.lower(self.model.name).like(pattern),
                    func.lower(self.model.address).like(pattern),
                    func.lower(self.model.description).like(pattern),
                )
            )
        if min_price is not None:
            query = query.filter(self.model.price >= min_price)
        if max_price is not None:
            query = query.filter(self.model.price <= max_price)
        if owner_id is not None:
            query = query.filter(self.model.owner_id == owner_id)

        query = query.order_by(self.model.created_at.desc(), self.model.id.desc())
        return paginate(query, page, limit)

    def get_owned_kos(self, db: Session, kos_id: int, user: User) -> Kos:
        kos = self.get_kos(db, kos_id)
        if UserRole(user.role) is not UserRole.ADMIN and kos.owner_id != user.id:
            raise ForbiddenError("Not authorized to manage this kos")
        return kos

    def update_kos(self, db: Session, kos_id: int, kos_in: KosUpdate, user: User) -> Kos:
        """Partial update; price changes never touch existing bookings."""
        kos = self.get_owned_kos(db, kos_id, user)
        kos = self.update(db, kos, kos_in)
        logger.info("Kos %s updated by user %s", kos.id, user.id)
        return kos

    def delete_kos(self, db: Session, kos_id: int, user: User) -> Kos:
        """
        Withdraw a listing.

        The row stays so existing bookings keep their kos; it simply stops
        showing up in listings, availability checks and new bookings.
        """
        kos = self.get_owned_kos(db, kos_id, user)
        kos.deleted_at = datetime.now(timezone.utc)
        db.commit()
        logger.info("Kos %s withdrawn by user %s", kos.id, user.id)
        return kos

    def format_kos_response(self, kos: Kos) -> KosResponse:
        response = KosResponse.model_validate(kos)
        response.code = generate_kos_code(kos.id)
        return response
