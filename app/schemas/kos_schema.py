from pydantic import Field, field_validator
from typing import Optional
from datetime import datetime

from .auth_schema import UserMinimumResponse
from .base_schema import CamelModel


class KosBase(CamelModel):
    name: str = Field(min_length=1, max_length=150)
    address: str = Field(min_length=1, max_length=255)
    city: str = Field(min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=2000)
    facilities: Optional[str] = None
    price: int = Field(gt=0, strict=True)


class KosCreate(KosBase):
    pass


class KosUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=150)
    address: Optional[str] = Field(default=None, min_length=1, max_length=255)
    city: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=2000)
    facilities: Optional[str] = None
    price: Optional[int] = Field(default=None, gt=0, strict=True)

    @field_validator("name", "address", "city", "price", mode="before")
    @classmethod
    def required_columns_not_null(cls, value):
        # Omit a field to leave it unchanged; these columns cannot be cleared
        if value is None:
            raise ValueError("Field cannot be null")
        return value


class KosMinimumResponse(CamelModel):
    id: int
    name: str
    address: str
    city: str
    price: int
    owner_id: int


class KosResponse(KosBase):
    id: int
    code: Optional[str] = None
    owner_id: int
    owner: Optional[UserMinimumResponse] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
