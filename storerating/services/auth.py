import bcrypt
from jose import JWTError, jwt
from datetime import datetime, timedelta
from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from storerating.core.config import settings
from storerating.core.errors import Forbidden, Unauthenticated
from storerating.db.session import get_db
from storerating.models.user import User

security = HTTPBearer(auto_error=False)

def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode('utf-8')[:72], bcrypt.gensalt()).decode('utf-8')

def verify_password(password: str, hashed: str) -> bool:
    # bcrypt only looks at the first 72 bytes
    return bcrypt.checkpw(password.encode('utf-8')[:72], hashed.encode('utf-8'))

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.ALGORITHM)
    return encoded_jwt

def create_user_token(user_id: str) -> str:
    return create_access_token(
        data={"sub": user_id},
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )

async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db=Depends(get_db),
) -> User:
    if credentials is None:
        raise Unauthenticated("No token, authorization denied")
    try:
        payload = jwt.decode(credentials.credentials, settings.JWT_SECRET, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise Unauthenticated("Token is not valid")

    user_id = payload.get("sub")
    if user_id is None:
        raise Unauthenticated("Token is not valid")

    user = await db.users.find_one({"id": user_id})
    if user is None:
        raise Unauthenticated("User not found")

    return User(**user)

def require_roles(*roles: str):
    """Dependency factory admitting only principals whose role is in `roles`"""
    async def checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            raise Forbidden(f"Access denied. Required role: {', '.join(roles)}")
        return current_user
    return checker

get_admin_user = require_roles("admin")
get_normal_user = require_roles("user")
get_store_owner = require_roles("storeOwner")
