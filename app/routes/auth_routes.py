import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database.init import get_db
from database.models.user_model import User
from schemas.auth_schema import LoginRequest, RegisterRequest, UserResponse
from services.auth_service import authenticate, create_user, find_taken_identity
from utils.dependencies import create_access_token, get_current_user

from responses.success import success_response
from responses.error import (
    conflict_error,
    internal_server_error,
    invalid_credentials_error,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/register")
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    taken = find_taken_identity(payload, db)
    if taken:
        return conflict_error(f"An account with this {taken} already exists")

    try:
        user = create_user(payload, db)
        logger.info("Registered user %s as %s", user.id, user.role)
        return success_response(
            "Registration successful",
            {
                "token": create_access_token(user),
                "tokenType": "bearer",
                "user": UserResponse.model_validate(user),
            },
        )
    except Exception:
        logger.exception("Failed to register user %s", payload.username)
        return internal_server_error("Failed to register user")


@router.post("/login")
def login(credentials: LoginRequest, db: Session = Depends(get_db)):
    try:
        user = authenticate(credentials.username, credentials.password, db)
        if not user:
            return invalid_credentials_error("Invalid credentials")

        return success_response(
            "Login successful",
            {
                "token": create_access_token(user),
                "tokenType": "bearer",
                "user": UserResponse.model_validate(user),
            },
        )
    except Exception:
        logger.exception("Login failed")
        return internal_server_error("Unexpected server error")


@router.get("/verify")
def verify(current_user: User = Depends(get_current_user)):
    """Route for any authenticated user to confirm their token and get their own information"""
    return success_response(
        "Token is valid", {"user": UserResponse.model_validate(current_user)}
    )
