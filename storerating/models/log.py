from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
import uuid
from datetime import datetime


class AuditAction(str, Enum):
    USER_REGISTERED = "user_registered"
    USER_LOGIN = "user_login"
    PASSWORD_CHANGED = "password_changed"
    USER_CREATED = "user_created"
    USER_DELETED = "user_deleted"
    STORE_CREATED = "store_created"
    STORE_DELETED = "store_deleted"
    RATING_SUBMITTED = "rating_submitted"
    RATING_DELETED = "rating_deleted"

    @property
    def target_type(self) -> str:
        # Logins and password changes act on the caller's own account
        prefix = self.value.split("_", 1)[0]
        return prefix if prefix in ("user", "store", "rating") else "user"


class ActivityLog(BaseModel):
    """One audit entry: who did what to which record."""
    model_config = ConfigDict(use_enum_values=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    actor_id: str
    actor_name: str
    actor_role: str
    action: AuditAction
    details: str
    target_id: Optional[str] = None
    target_type: str
    client_ip: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
