import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from config import DEFAULT_PAGE_SIZE
from database.init import get_db
from database.models.user_model import User
from schemas.review_schema import ReviewCreate, ReviewResponse
from services.errors import ServiceError
from services.review_service import ReviewService
from utils.dependencies import get_current_user

from responses.success import success_response
from responses.error import internal_server_error, service_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/kos", tags=["Reviews"])
review_service = ReviewService()


@router.get("/{kos_id}/reviews")
def list_reviews(
    kos_id: int,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
    db: Session = Depends(get_db),
):
    try:
        reviews, statistics, pagination = review_service.list_reviews(db, kos_id, page, limit)
        return success_response(
            "Reviews retrieved successfully",
            {"reviews": reviews, "statistics": statistics, "pagination": pagination},
        )
    except ServiceError as e:
        return service_error(e)
    except Exception:
        logger.exception("Failed to list reviews of kos %s", kos_id)
        return internal_server_error("Failed to retrieve reviews")


@router.post("/{kos_id}/reviews")
def create_review(
    kos_id: int,
    payload: ReviewCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        review = review_service.create_review(db, kos_id, payload, current_user)
        return success_response(
            "Review created successfully", {"review": ReviewResponse.model_validate(review)}
        )
    except ServiceError as e:
        return service_error(e)
    except Exception:
        logger.exception("Failed to create review on kos %s", kos_id)
        return internal_server_error("Failed to create review")
