from pydantic import BaseModel, Field
from typing import List, Optional
import uuid
from datetime import datetime

from storerating.models.user import Address, Email, Name, UserSummary

STORE_SORT_FIELDS = ("name", "email", "address", "average_rating", "total_ratings", "created_at")

class Store(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    email: str
    address: str
    owner_id: str
    average_rating: float = Field(0.0, ge=0, le=5)  # Maintained by the rating aggregator only
    total_ratings: int = Field(0, ge=0)
    created_at: datetime = Field(default_factory=datetime.utcnow)

class StoreCreate(BaseModel):
    name: Name
    email: Email
    address: Address
    owner_id: str = Field(..., min_length=1)

class StoreListItem(Store):
    owner: Optional[UserSummary] = None
    user_rating: Optional[int] = None  # The caller's own rating, user role only

class StoreAggregate(BaseModel):
    average_rating: float
    total_ratings: int

class OwnerStoreSummary(BaseModel):
    id: str
    name: str
    average_rating: float
    total_ratings: int

class OwnerDashboardRating(BaseModel):
    id: str
    rating: int
    user: Optional[UserSummary] = None
    created_at: datetime
    updated_at: datetime

class OwnerDashboard(BaseModel):
    store: OwnerStoreSummary
    ratings: List[OwnerDashboardRating]
