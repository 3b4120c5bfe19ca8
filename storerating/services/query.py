import math
import re
from typing import Dict, Iterable, Optional, Tuple

from pymongo import ASCENDING, DESCENDING

from storerating.core.errors import ValidationError
from storerating.models.common import Pagination

def text_filter(**fields: Optional[str]) -> Dict:
    """Case-insensitive substring match for every non-empty field"""
    query = {}
    for field, value in fields.items():
        if value:
            query[field] = {"$regex": re.escape(value.strip()), "$options": "i"}
    return query

def sort_spec(sort_by: str, sort_order: str, allowed: Iterable[str]) -> Tuple[str, int]:
    if sort_by not in allowed:
        raise ValidationError(f"Cannot sort by '{sort_by}'")
    if sort_order not in ("asc", "desc"):
        raise ValidationError("Sort order must be 'asc' or 'desc'")
    return sort_by, DESCENDING if sort_order == "desc" else ASCENDING

async def paginate(collection, query: Dict, sort: Tuple[str, int], page: int, limit: int):
    """Return one page of documents plus the pagination block"""
    skip = (page - 1) * limit
    docs = await collection.find(query, {"_id": 0}).sort([sort, ("id", ASCENDING)]).skip(skip).limit(limit).to_list(limit)
    total = await collection.count_documents(query)
    pagination = Pagination(current=page, pages=math.ceil(total / limit), total=total)
    return docs, pagination
