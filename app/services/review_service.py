import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from database.models import Kos, Review
from database.models.user_model import User
from schemas.review_schema import ReviewCreate, ReviewResponse, ReviewStatistics
from services.base_service import BaseService
from services.errors import ConflictError, ForbiddenError, NotFoundError
from utils.pagination import paginate

logger = logging.getLogger(__name__)


class ReviewService(BaseService):
    def __init__(self):
        super().__init__(Review)

    def _get_active_kos(self, db: Session, kos_id: int) -> Kos:
        kos = db.query(Kos).filter(Kos.id == kos_id, Kos.deleted_at.is_(None)).first()
        if not kos:
            raise NotFoundError("Kos not found")
        return kos

    def create_review(self, db: Session, kos_id: int, review_in: ReviewCreate, user: User) -> Review:
        """One review per user and kos; owners cannot review their own listing."""
        kos = self._get_active_kos(db, kos_id)
        if kos.owner_id == user.id:
            raise ForbiddenError("You cannot review your own kos")

        existing = (
            db.query(Review.id)
            .filter(Review.kos_id == kos_id, Review.user_id == user.id)
            .first()
        )
        if existing:
            raise ConflictError("You have already reviewed this kos")

        try:
            review = self.create(db, review_in, kos_id=kos_id, user_id=user.id)
        except IntegrityError:
            db.rollback()
            raise ConflictError("You have already reviewed this kos")

        logger.info("Review %s (%s stars) added to kos %s by user %s", review.id, review.rating, kos_id, user.id)
        return review

    def get_statistics(self, db: Session, kos_id: int) -> ReviewStatistics:
        rows = (
            db.query(Review.rating, func.count(Review.id))
            .filter(Review.kos_id == kos_id)
            .group_by(Review.rating)
            .all()
        )
        distribution = {str(star): 0 for star in range(5, 0, -1)}
        total = 0
        rating_sum = 0
        for rating, count in rows:
            distribution[str(rating)] = count
            total += count
            rating_sum += rating * count

        return ReviewStatistics(
            average_rating=round(rating_sum / total, 1) if total else 0.0,
            total_reviews=total,
            rating_distribution=distribution,
        )

    def list_reviews(self, db: Session, kos_id: int, page: int = 1, limit: int = 10):
        self._get_active_kos(db, kos_id)
        query = (
            db.query(Review)
            .options(joinedload(Review.user))
            .filter(Review.kos_id == kos_id)
            .order_by(Review.created_at.desc(), Review.id.desc())
        )
        reviews, meta = paginate(query, page, limit)
        return (
            [ReviewResponse.model_validate(r) for r in reviews],
            self.get_statistics(db, kos_id),
            meta,
        )
