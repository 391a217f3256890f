from pydantic import Field, field_validator
from typing import Optional
from datetime import datetime

from enums.user_role import UserRole
from .base_schema import CamelModel


class RegisterRequest(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    username: str = Field(min_length=3, max_length=100)
    contact: str = Field(min_length=3, max_length=100)
    password: str = Field(min_length=6, max_length=72)
    role: UserRole = UserRole.RENTER

    @field_validator("role")
    @classmethod
    def no_self_service_admin(cls, value: UserRole) -> UserRole:
        if value is UserRole.ADMIN:
            raise ValueError("Admin accounts cannot be self-registered")
        return value


class LoginRequest(CamelModel):
    # Either the username or the contact the account was registered with
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class PasswordUpdate(CamelModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=6, max_length=72)


class UserResponse(CamelModel):
    id: int
    name: str
    username: str
    contact: str
    role: UserRole
    created_at: Optional[datetime] = None


class UserMinimumResponse(CamelModel):
    id: int
    name: str
    username: str
    contact: str
