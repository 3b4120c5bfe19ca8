from pydantic import BaseModel, Field, field_validator
from typing import Optional
import uuid
from datetime import datetime

from storerating.models.store import StoreAggregate

class Rating(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str
    store_id: str
    rating: int = Field(..., ge=1, le=5)  # 1-5 stars
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

class RatingSubmit(BaseModel):
    store_id: str = Field(..., min_length=1)
    rating: int = Field(..., ge=1, le=5)

    @field_validator("rating", mode="before")
    @classmethod
    def reject_booleans(cls, v):
        # JSON true/false are not star values
        if isinstance(v, bool):
            raise ValueError("Rating must be an integer between 1 and 5")
        return v

class RatingResponse(BaseModel):
    message: str
    rating: Rating
    store: Optional[StoreAggregate] = None

class UserRatingResponse(BaseModel):
    rating: Optional[int] = None
