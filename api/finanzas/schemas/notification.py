import uuid
from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel


@dataclass(frozen=True)
class NotificationQuery:
    """Filters for listing notifications.

    is_read  – None lists everything, True/False filters on read state
    limit    – page size, defaults to 50
    offset   – rows to skip, defaults to 0
    """
    is_read: bool | None = None
    limit: int = 50
    offset: int = 0


class NotificationResponse(BaseModel):
    id: uuid.UUID
    type: str
    title: str
    message: str
    data: dict | None
    is_read: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class MarkReadRequest(BaseModel):
    """Empty or missing ``ids`` marks every notification as read."""
    ids: list[uuid.UUID] | None = None


class UnreadCountResponse(BaseModel):
    count: int
