from pydantic import Field
from typing import Optional
from datetime import datetime

from .base_schema import CamelModel
from .kos_schema import KosMinimumResponse


class FavoriteRequest(CamelModel):
    kos_id: int = Field(gt=0, strict=True)


class FavoriteResponse(CamelModel):
    id: int
    kos_id: int
    created_at: Optional[datetime] = None
    kos: Optional[KosMinimumResponse] = None
