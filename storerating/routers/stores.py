from fastapi import APIRouter, Depends, Query, Request
from pymongo.errors import DuplicateKeyError
from typing import Optional

from storerating.core.errors import Conflict, NotFound, ValidationError
from storerating.db.session import get_db
from storerating.models.common import Message, StorePage
from storerating.models.log import AuditAction
from storerating.models.store import (
    STORE_SORT_FIELDS,
    OwnerDashboard,
    OwnerDashboardRating,
    OwnerStoreSummary,
    Store,
    StoreCreate,
    StoreListItem,
)
from storerating.models.user import User, UserSummary
from storerating.services.auth import get_admin_user, get_current_user, get_store_owner
from storerating.services.log import record_activity
from storerating.services.query import paginate, sort_spec, text_filter

router = APIRouter(prefix="/stores", tags=["stores"])

async def user_summaries(db, user_ids):
    users = await db.users.find(
        {"id": {"$in": list(set(user_ids))}},
        {"_id": 0, "id": 1, "name": 1, "email": 1}
    ).to_list(None)
    return {u["id"]: UserSummary(**u) for u in users}

@router.post("/create", status_code=201)
async def create_store(
    request: Request,
    store_data: StoreCreate,
    admin_user: User = Depends(get_admin_user),
    db=Depends(get_db)
):
    if await db.stores.find_one({"email": store_data.email}):
        raise Conflict("Store already exists with this email")

    # Verify owner exists and is a store owner
    owner = await db.users.find_one({"id": store_data.owner_id})
    if not owner or owner["role"] != "storeOwner":
        raise ValidationError("Invalid store owner")

    if await db.stores.find_one({"owner_id": store_data.owner_id}):
        raise Conflict("This user already owns a store")

    store_obj = Store(**store_data.model_dump())
    try:
        await db.stores.insert_one(store_obj.model_dump())
    except DuplicateKeyError:
        raise Conflict("Store email or owner is already taken")

    await record_activity(
        db,
        actor=admin_user,
        action=AuditAction.STORE_CREATED,
        details=f"Created store {store_obj.name} for {owner['email']}",
        target_id=store_obj.id,
        request=request
    )

    store_item = StoreListItem(
        **store_obj.model_dump(),
        owner=UserSummary(id=owner["id"], name=owner["name"], email=owner["email"])
    )
    return {"message": "Store created successfully", "store": store_item}

@router.get("/all", response_model=StorePage)
async def get_all_stores(
    name: Optional[str] = None,
    email: Optional[str] = None,
    address: Optional[str] = None,
    sort_by: str = "name",
    sort_order: str = "asc",
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    db=Depends(get_db)
):
    query = text_filter(name=name, email=email, address=address)
    stores, pagination = await paginate(
        db.stores, query, sort_spec(sort_by, sort_order, STORE_SORT_FIELDS), page, limit
    )

    owners = await user_summaries(db, [s["owner_id"] for s in stores])

    # Normal users see their own rating next to each store
    user_ratings = {}
    if current_user.role == "user" and stores:
        ratings = await db.ratings.find(
            {"user_id": current_user.id, "store_id": {"$in": [s["id"] for s in stores]}},
            {"_id": 0, "store_id": 1, "rating": 1}
        ).to_list(None)
        user_ratings = {r["store_id"]: r["rating"] for r in ratings}

    items = [
        StoreListItem(**store, owner=owners.get(store["owner_id"]), user_rating=user_ratings.get(store["id"]))
        for store in stores
    ]
    return StorePage(items=items, pagination=pagination)

@router.get("/owner-dashboard", response_model=OwnerDashboard)
async def get_owner_dashboard(current_user: User = Depends(get_store_owner), db=Depends(get_db)):
    store = await db.stores.find_one({"owner_id": current_user.id})
    if not store:
        raise NotFound("Store not found for this owner")

    ratings = await db.ratings.find({"store_id": store["id"]}, {"_id": 0}).sort("created_at", -1).to_list(None)
    raters = await user_summaries(db, [r["user_id"] for r in ratings])

    return OwnerDashboard(
        store=OwnerStoreSummary(**store),
        ratings=[OwnerDashboardRating(**r, user=raters.get(r["user_id"])) for r in ratings],
    )

@router.delete("/{store_id}", response_model=Message)
async def delete_store(
    request: Request,
    store_id: str,
    admin_user: User = Depends(get_admin_user),
    db=Depends(get_db)
):
    """Delete a store together with all of its ratings"""
    store = await db.stores.find_one({"id": store_id})
    if not store:
        raise NotFound("Store not found")

    # Ratings first, a store is never removed while ratings still reference it
    result = await db.ratings.delete_many({"store_id": store_id})
    await db.stores.delete_one({"id": store_id})

    await record_activity(
        db,
        actor=admin_user,
        action=AuditAction.STORE_DELETED,
        details=f"Deleted store {store['name']} and {result.deleted_count} rating(s)",
        target_id=store_id,
        request=request
    )
    return {"message": "Store deleted successfully"}
