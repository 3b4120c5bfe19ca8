import logging

from pymongo.errors import DuplicateKeyError

from storerating.core.errors import Conflict
from storerating.models.user import User, UserCreate
from storerating.services.auth import hash_password
from storerating.services.rating import recompute_store_rating

logger = logging.getLogger(__name__)

async def create_user_account(db, user_data: UserCreate, role: str) -> User:
    """Persist a new account; the unique email index backs the pre-check"""
    existing_user = await db.users.find_one({"email": user_data.email})
    if existing_user:
        raise Conflict("User already exists with this email")

    user_obj = User(name=user_data.name, email=user_data.email, address=user_data.address, role=role)
    user_doc = user_obj.model_dump()
    user_doc["hashed_password"] = hash_password(user_data.password)
    try:
        await db.users.insert_one(user_doc)
    except DuplicateKeyError:
        raise Conflict("User already exists with this email")

    logger.info(f"Created {role} account {user_obj.id}")
    return user_obj

async def delete_user_account(db, user_id: str) -> int:
    """Remove a user and their ratings, refreshing every store they had rated.

    Returns the number of ratings removed. Callers must make sure the user
    does not own a store first.
    """
    ratings = await db.ratings.find({"user_id": user_id}, {"_id": 0, "store_id": 1}).to_list(None)
    await db.ratings.delete_many({"user_id": user_id})
    for store_id in {r["store_id"] for r in ratings}:
        await recompute_store_rating(db, store_id)

    await db.users.delete_one({"id": user_id})
    logger.info(f"Deleted user {user_id} and {len(ratings)} rating(s)")
    return len(ratings)
