import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from database.models import Favorite, Kos
from database.models.user_model import User
from schemas.favorite_schema import FavoriteResponse
from services.errors import ConflictError, NotFoundError
from utils.pagination import paginate

logger = logging.getLogger(__name__)


class FavoriteService:
    def list_favorites(self, db: Session, user: User, page: int = 1, limit: int = 10):
        query = (
            db.query(Favorite)
            .join(Kos, Favorite.kos_id == Kos.id)
            .options(joinedload(Favorite.kos))
            .filter(Favorite.user_id == user.id, Kos.deleted_at.is_(None))
            .order_by(Favorite.created_at.desc(), Favorite.id.desc())
        )
        favorites, meta = paginate(query, page, limit)
        return [FavoriteResponse.model_validate(f) for f in favorites], meta

    def add_favorite(self, db: Session, kos_id: int, user: User) -> Favorite:
        if not db.query(Kos.id).filter(Kos.id == kos_id, Kos.deleted_at.is_(None)).first():
            raise NotFoundError("Kos not found")

        existing = (
            db.query(Favorite.id)
            .filter(Favorite.user_id == user.id, Favorite.kos_id == kos_id)
            .first()
        )
        if existing:
            raise ConflictError("Kos is already in favorites")

        favorite = Favorite(user_id=user.id, kos_id=kos_id)
        db.add(favorite)
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ConflictError("Kos is already in favorites")
        db.refresh(favorite)
        logger.info("User %s saved kos %s", user.id, kos_id)
        return favorite

    def remove_favorite(self, db: Session, kos_id: int, user: User) -> None:
        deleted = (
            db.query(Favorite)
            .filter(Favorite.user_id == user.id, Favorite.kos_id == kos_id)
            .delete(synchronize_session=False)
        )
        if not deleted:
            db.rollback()
            raise NotFoundError("Favorite not found")
        db.commit()
        logger.info("User %s removed kos %s from favorites", user.id, kos_id)
