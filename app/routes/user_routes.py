import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from config import DEFAULT_PAGE_SIZE
from database.init import get_db
from database.models.user_model import User
from schemas.auth_schema import PasswordUpdate, UserResponse
from schemas.favorite_schema import FavoriteRequest, FavoriteResponse
from services.auth_service import change_password
from services.errors import ServiceError
from services.favorite_service import FavoriteService
from utils.dependencies import get_current_user

from responses.success import success_response
from responses.error import internal_server_error, service_error

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/user", tags=["User"])
favorite_service = FavoriteService()


@router.get("/profile")
def get_profile(current_user: User = Depends(get_current_user)):
    return success_response(
        "Profile retrieved successfully", {"user": UserResponse.model_validate(current_user)}
    )


@router.put("/password")
def update_password(
    payload: PasswordUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        change_password(current_user, payload.current_password, payload.new_password, db)
        logger.info("User %s changed their password", current_user.id)
        return success_response("Password updated successfully")
    except ServiceError as e:
        return service_error(e)
    except Exception:
        logger.exception("Failed to update password for user %s", current_user.id)
        return internal_server_error("Failed to update password")


@router.get("/favorites")
def list_favorites(
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        favorites, pagination = favorite_service.list_favorites(db, current_user, page, limit)
        return success_response(
            "Favorites retrieved successfully",
            {"favorites": favorites, "pagination": pagination},
        )
    except Exception:
        logger.exception("Failed to list favorites of user %s", current_user.id)
        return internal_server_error("Failed to retrieve favorites")


@router.post("/favorites")
def add_favorite(
    payload: FavoriteRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        favorite = favorite_service.add_favorite(db, payload.kos_id, current_user)
        return success_response(
            "Kos added to favorites successfully",
            {"favorite": FavoriteResponse.model_validate(favorite)},
        )
    except ServiceError as e:
        return service_error(e)
    except Exception:
        logger.exception("Failed to add kos %s to favorites", payload.kos_id)
        return internal_server_error("Failed to add to favorites")


@router.delete("/favorites")
def remove_favorite(
    payload: FavoriteRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    try:
        favorite_service.remove_favorite(db, payload.kos_id, current_user)
        return success_response("Kos removed from favorites successfully")
    except ServiceError as e:
        return service_error(e)
    except Exception:
        logger.exception("Failed to remove kos %s from favorites", payload.kos_id)
        return internal_server_error("Failed to remove from favorites")
