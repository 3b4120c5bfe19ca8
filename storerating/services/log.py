import logging
from typing import Optional

from fastapi import Request

from storerating.models.log import ActivityLog, AuditAction
from storerating.models.user import User

logger = logging.getLogger(__name__)


def client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


async def record_activity(
    db,
    actor: User,
    action: AuditAction,
    details: str,
    target_id: Optional[str] = None,
    request: Optional[Request] = None,
) -> Optional[ActivityLog]:
    """Append an audit entry for a write performed by `actor`.

    The audit trail is best effort: a failed insert is logged and None is
    returned, the request that triggered it carries on.
    """
    entry = ActivityLog(
        actor_id=actor.id,
        actor_name=actor.name,
        actor_role=actor.role,
        action=action,
        details=details,
        target_id=target_id,
        target_type=action.target_type,
        client_ip=client_ip(request) if request else None,
        user_agent=request.headers.get("user-agent") if request else None,
    )
    try:
        await db.activity_logs.insert_one(entry.model_dump())
    except Exception:
        logger.error(f"Could not record {action.value} by {actor.id}", exc_info=True)
        return None
    return entry
