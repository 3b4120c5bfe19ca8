import logging
from datetime import datetime

from fastapi import APIRouter, Depends, Request, Response
from pymongo.errors import DuplicateKeyError

from storerating.core.errors import NotFound
from storerating.db.session import get_db
from storerating.models.common import Message
from storerating.models.log import AuditAction
from storerating.models.rating import Rating, RatingResponse, RatingSubmit, UserRatingResponse
from storerating.models.user import User
from storerating.services.auth import get_normal_user
from storerating.services.log import record_activity
from storerating.services.rating import recompute_store_rating

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ratings", tags=["ratings"])

async def update_rating_value(db, user_id: str, store_id: str, value: int) -> Rating:
    await db.ratings.update_one(
        {"user_id": user_id, "store_id": store_id},
        {"$set": {"rating": value, "updated_at": datetime.utcnow()}}
    )
    updated_rating = await db.ratings.find_one({"user_id": user_id, "store_id": store_id})
    return Rating(**updated_rating)

@router.post("/submit", response_model=RatingResponse)
async def submit_rating(
    request: Request,
    response: Response,
    rating_data: RatingSubmit,
    current_user: User = Depends(get_normal_user),
    db=Depends(get_db)
):
    store = await db.stores.find_one({"id": rating_data.store_id})
    if not store:
        raise NotFound("Store not found")

    existing_rating = await db.ratings.find_one({
        "user_id": current_user.id,
        "store_id": rating_data.store_id
    })

    if existing_rating:
        rating_obj = await update_rating_value(db, current_user.id, rating_data.store_id, rating_data.rating)
        created = False
    else:
        rating_obj = Rating(user_id=current_user.id, store_id=rating_data.store_id, rating=rating_data.rating)
        try:
            await db.ratings.insert_one(rating_obj.model_dump())
            created = True
        except DuplicateKeyError:
            # A concurrent submission for the same pair got there first
            logger.info(f"Duplicate rating insert for user {current_user.id} on store {rating_data.store_id}, updating instead")
            rating_obj = await update_rating_value(db, current_user.id, rating_data.store_id, rating_data.rating)
            created = False

    aggregate = await recompute_store_rating(db, rating_data.store_id)

    await record_activity(
        db,
        actor=current_user,
        action=AuditAction.RATING_SUBMITTED,
        details=f"Rated store {store['name']} {rating_data.rating}/5",
        target_id=rating_obj.id,
        request=request
    )

    response.status_code = 201 if created else 200
    return RatingResponse(
        message="Rating submitted successfully" if created else "Rating updated successfully",
        rating=rating_obj,
        store=aggregate,
    )

@router.get("/user-rating/{store_id}", response_model=UserRatingResponse)
async def get_user_rating(store_id: str, current_user: User = Depends(get_normal_user), db=Depends(get_db)):
    rating = await db.ratings.find_one({"user_id": current_user.id, "store_id": store_id})
    return UserRatingResponse(rating=rating["rating"] if rating else None)

@router.delete("/{store_id}", response_model=Message)
async def delete_rating(
    request: Request,
    store_id: str,
    current_user: User = Depends(get_normal_user),
    db=Depends(get_db)
):
    rating = await db.ratings.find_one_and_delete({"user_id": current_user.id, "store_id": store_id})
    if not rating:
        raise NotFound("Rating not found")

    await recompute_store_rating(db, store_id)

    await record_activity(
        db,
        actor=current_user,
        action=AuditAction.RATING_DELETED,
        details=f"Removed {rating['rating']}/5 rating for store {store_id}",
        target_id=rating["id"],
        request=request
    )
    return {"message": "Rating deleted successfully"}
