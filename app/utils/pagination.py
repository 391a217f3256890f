import math
from typing import Any, Dict, List, Tuple

from sqlalchemy.orm import Query

from config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE


def normalize_page_params(page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> Tuple[int, int]:
    """Clamp page to >= 1 and limit to [1, MAX_PAGE_SIZE]."""
    page = max(1, page or 1)
    limit = min(MAX_PAGE_SIZE, max(1, limit or DEFAULT_PAGE_SIZE))
    return page, limit


def pagination_meta(page: int, limit: int, total: int) -> Dict[str, Any]:
    total_pages = math.ceil(total / limit) if total else 0
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "totalPages": total_pages,
        "hasNext": page < total_pages,
        "hasPrev": page > 1,
    }


def paginate(query: Query, page: int, limit: int) -> Tuple[List[Any], Dict[str, Any]]:
    page, limit = normalize_page_params(page, limit)
    total = query.order_by(None).count()
    items = query.offset((page - 1) * limit).limit(limit).all()
    return items, pagination_meta(page, limit, total)
