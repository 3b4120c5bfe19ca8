from pydantic import BaseModel, Field, StringConstraints, field_validator
from typing import Annotated, Literal, Optional
import uuid
from datetime import datetime

USER_SORT_FIELDS = ("name", "email", "address", "role", "created_at")
Role = Literal["admin", "user", "storeOwner"]

EMAIL_PATTERN = r"^\w+([.-]?\w+)*@\w+([.-]?\w+)*(\.\w{2,3})+$"
PASSWORD_SPECIAL_CHARS = set("!@#$%^&*()_+-=[]{};':\"\\|,.<>/?")

Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=20, max_length=60)]
Email = Annotated[str, StringConstraints(strip_whitespace=True, to_lower=True, pattern=EMAIL_PATTERN)]
Address = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=400)]
Password = Annotated[str, Field(min_length=8, max_length=16)]


def check_password_strength(password: str) -> str:
    if not any(c.isupper() for c in password):
        raise ValueError("Password must contain at least one uppercase letter")
    if not any(c in PASSWORD_SPECIAL_CHARS for c in password):
        raise ValueError("Password must contain at least one special character")
    return password


# Authentication models
class UserCreate(BaseModel):
    name: Name
    email: Email
    password: Password
    address: Address

    @field_validator("password")
    @classmethod
    def password_strength(cls, v):
        return check_password_strength(v)

class AdminUserCreate(UserCreate):
    role: Role

class UserLogin(BaseModel):
    email: Annotated[str, StringConstraints(strip_whitespace=True, to_lower=True)]
    password: str

class PasswordChangeRequest(BaseModel):
    current_password: str
    new_password: Password

    @field_validator("new_password")
    @classmethod
    def password_strength(cls, v):
        return check_password_strength(v)

class User(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    email: str
    address: str
    role: Role = "user"
    created_at: datetime = Field(default_factory=datetime.utcnow)

class UserSummary(BaseModel):
    id: str
    name: str
    email: str

class UserDetails(User):
    rating: Optional[float] = None  # Average rating of the owned store, storeOwner only

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: User

class DashboardStats(BaseModel):
    total_users: int
    total_stores: int
    total_ratings: int
