from fastapi import APIRouter, Depends, Request

from storerating.core.errors import ValidationError
from storerating.db.session import get_db
from storerating.models.common import Message
from storerating.models.log import AuditAction
from storerating.models.user import PasswordChangeRequest, Token, User, UserCreate, UserLogin
from storerating.services.auth import (
    create_user_token,
    get_current_user,
    hash_password,
    verify_password,
)
from storerating.services.log import record_activity
from storerating.services.user import create_user_account

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/register", response_model=Token, status_code=201)
async def register(request: Request, user_data: UserCreate, db=Depends(get_db)):
    user_obj = await create_user_account(db, user_data, role="user")

    await record_activity(
        db,
        actor=user_obj,
        action=AuditAction.USER_REGISTERED,
        details=f"Registered account {user_obj.email}",
        target_id=user_obj.id,
        request=request
    )
    return Token(access_token=create_user_token(user_obj.id), user=user_obj)


@router.post("/login", response_model=Token)
async def login(request: Request, user_data: UserLogin, db=Depends(get_db)):
    user = await db.users.find_one({"email": user_data.email})
    if not user or not verify_password(user_data.password, user["hashed_password"]):
        raise ValidationError("Invalid credentials")

    user_obj = User(**user)
    await record_activity(
        db,
        actor=user_obj,
        action=AuditAction.USER_LOGIN,
        details="Logged in",
        request=request
    )
    return Token(access_token=create_user_token(user_obj.id), user=user_obj)


@router.get("/profile", response_model=User)
async def get_profile(current_user: User = Depends(get_current_user)):
    return current_user


@router.put("/change-password", response_model=Message)
async def change_password(
    request: Request,
    password_data: PasswordChangeRequest,
    current_user: User = Depends(get_current_user),
    db=Depends(get_db)
):
    user = await db.users.find_one({"id": current_user.id})
    if not verify_password(password_data.current_password, user["hashed_password"]):
        raise ValidationError("Current password is incorrect")

    await db.users.update_one(
        {"id": current_user.id},
        {"$set": {"hashed_password": hash_password(password_data.new_password)}}
    )

    await record_activity(
        db,
        actor=current_user,
        action=AuditAction.PASSWORD_CHANGED,
        details="Changed account password",
        target_id=current_user.id,
        request=request
    )
    return {"message": "Password updated successfully"}
