import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from storerating.models.store import StoreAggregate

logger = logging.getLogger(__name__)

def round_rating(value: float) -> float:
    """Round to one decimal place, halves away from zero (4.25 -> 4.3)"""
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))

async def recompute_store_rating(db, store_id: str) -> Optional[StoreAggregate]:
    """Update store's average rating and count from its current ratings"""
    store = await db.stores.find_one({"id": store_id}, {"_id": 0, "id": 1})
    if not store:
        logger.debug(f"Skipping rating recompute for missing store {store_id}")
        return None

    ratings = await db.ratings.find({"store_id": store_id}, {"_id": 0, "rating": 1}).to_list(None)
    if ratings:
        total_rating = sum(r["rating"] for r in ratings)
        average_rating = round_rating(total_rating / len(ratings))
        rating_count = len(ratings)
    else:
        average_rating = 0.0
        rating_count = 0

    await db.stores.update_one(
        {"id": store_id},
        {"$set": {"average_rating": average_rating, "total_ratings": rating_count}}
    )
    logger.debug(f"Store {store_id} rating recomputed: {average_rating} over {rating_count}")
    return StoreAggregate(average_rating=average_rating, total_ratings=rating_count)
