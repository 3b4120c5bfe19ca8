from pydantic import BaseModel
from typing import List

from storerating.models.store import StoreListItem
from storerating.models.user import User

class Pagination(BaseModel):
    current: int
    pages: int
    total: int

class UserPage(BaseModel):
    items: List[User]
    pagination: Pagination

class StorePage(BaseModel):
    items: List[StoreListItem]
    pagination: Pagination

class Message(BaseModel):
    message: str
