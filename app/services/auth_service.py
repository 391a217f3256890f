from sqlalchemy import or_
from sqlalchemy.orm import Session

from database.models import User
from schemas.auth_schema import RegisterRequest
from services.errors import ValidationFailed
from utils.dependencies import hash_password, verify_password


def create_user(payload: RegisterRequest, db: Session) -> User:
    user = User(
        name=payload.name,
        username=payload.username,
        contact=payload.contact,
        role=payload.role,
        hashed_password=hash_password(payload.password),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def get_user_by_login(login: str, db: Session):
    """Look a user up by username first, then by contact."""
    user = db.query(User).filter(User.username == login).first()
    if user:
        return user
    return db.query(User).filter(User.contact == login).first()


def find_taken_identity(payload: RegisterRequest, db: Session):
    """Return the field name ('username' or 'contact') already in use, if any."""
    existing = (
        db.query(User)
        .filter(or_(User.username == payload.username, User.contact == payload.contact))
        .first()
    )
    if existing is None:
        return None
    return "username" if existing.username == payload.username else "contact"


def authenticate(login: str, password: str, db: Session):
    user = get_user_by_login(login, db)
    if not user or not verify_password(password, user.hashed_password):
        return None
    return user


def change_password(user: User, current_password: str, new_password: str, db: Session) -> User:
    if not verify_password(current_password, user.hashed_password):
        raise ValidationFailed(
            "Current password is incorrect",
            details=[{"field": "currentPassword", "message": "Current password is incorrect"}],
        )
    user.hashed_password = hash_password(new_password)
    db.commit()
    db.refresh(user)
    return user
