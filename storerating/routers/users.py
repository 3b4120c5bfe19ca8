from fastapi import APIRouter, Depends, Query, Request
from typing import List, Optional

from storerating.core.errors import Conflict, NotFound, ValidationError
from storerating.db.session import get_db
from storerating.models.common import Message, UserPage
from storerating.models.log import AuditAction
from storerating.models.user import (
    USER_SORT_FIELDS,
    AdminUserCreate,
    DashboardStats,
    Role,
    User,
    UserDetails,
    UserSummary,
)
from storerating.services.auth import get_admin_user
from storerating.services.log import record_activity
from storerating.services.query import paginate, sort_spec, text_filter
from storerating.services.user import create_user_account, delete_user_account

router = APIRouter(prefix="/users", tags=["users"])

@router.get("/dashboard-stats", response_model=DashboardStats)
async def get_dashboard_stats(admin_user: User = Depends(get_admin_user), db=Depends(get_db)):
    return DashboardStats(
        total_users=await db.users.count_documents({}),
        total_stores=await db.stores.count_documents({}),
        total_ratings=await db.ratings.count_documents({}),
    )

@router.post("/create", status_code=201)
async def create_user(
    request: Request,
    user_data: AdminUserCreate,
    admin_user: User = Depends(get_admin_user),
    db=Depends(get_db)
):
    user_obj = await create_user_account(db, user_data, role=user_data.role)

    await record_activity(
        db,
        actor=admin_user,
        action=AuditAction.USER_CREATED,
        details=f"Created {user_obj.role} account {user_obj.email}",
        target_id=user_obj.id,
        request=request
    )
    return {"message": "User created successfully", "user": user_obj}

@router.get("/all", response_model=UserPage)
async def get_all_users(
    name: Optional[str] = None,
    email: Optional[str] = None,
    address: Optional[str] = None,
    role: Optional[Role] = None,
    sort_by: str = "name",
    sort_order: str = "asc",
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    admin_user: User = Depends(get_admin_user),
    db=Depends(get_db)
):
    query = text_filter(name=name, email=email, address=address)
    if role:
        query["role"] = role

    users, pagination = await paginate(
        db.users, query, sort_spec(sort_by, sort_order, USER_SORT_FIELDS), page, limit
    )
    return UserPage(items=[User(**user) for user in users], pagination=pagination)

@router.get("/details/{user_id}", response_model=UserDetails)
async def get_user_details(user_id: str, admin_user: User = Depends(get_admin_user), db=Depends(get_db)):
    user = await db.users.find_one({"id": user_id}, {"_id": 0, "hashed_password": 0})
    if not user:
        raise NotFound("User not found")

    rating = None
    if user["role"] == "storeOwner":
        store = await db.stores.find_one({"owner_id": user_id})
        if store:
            rating = store["average_rating"]

    return UserDetails(**user, rating=rating)

@router.get("/store-owners", response_model=List[UserSummary])
async def get_store_owners(admin_user: User = Depends(get_admin_user), db=Depends(get_db)):
    owners = await db.users.find({"role": "storeOwner"}, {"_id": 0}).sort("name", 1).to_list(None)
    return [UserSummary(**owner) for owner in owners]

@router.delete("/{user_id}", response_model=Message)
async def delete_user(
    request: Request,
    user_id: str,
    admin_user: User = Depends(get_admin_user),
    db=Depends(get_db)
):
    """Delete an account; store owners must have their store removed first"""
    if user_id == admin_user.id:
        raise ValidationError("You cannot delete your own account")

    user = await db.users.find_one({"id": user_id})
    if not user:
        raise NotFound("User not found")

    if await db.stores.find_one({"owner_id": user_id}):
        raise Conflict("This user owns a store; delete the store first")

    removed = await delete_user_account(db, user_id)

    await record_activity(
        db,
        actor=admin_user,
        action=AuditAction.USER_DELETED,
        details=f"Deleted account {user['email']} and {removed} rating(s)",
        target_id=user_id,
        request=request
    )
    return {"message": "User deleted successfully"}
