import uuid

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from finanzas.core.database import get_db
from finanzas.core.deps import get_current_user
from finanzas.core.messages import t
from finanzas.models.user import User
from finanzas.schemas.notification import (
    MarkReadRequest,
    NotificationQuery,
    NotificationResponse,
    UnreadCountResponse,
)
from finanzas.services import notifications

router = APIRouter(prefix="/notifications", tags=["notifications"])


def notification_query(
    is_read: bool | None = Query(default=None),
    limit: int = Query(default=50, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
) -> NotificationQuery:
    return NotificationQuery(is_read=is_read, limit=limit, offset=offset)


@router.get("/", response_model=list[NotificationResponse])
async def list_notifications(
    query: NotificationQuery = Depends(notification_query),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Prune old notifications, refresh recurring and card reminders, then list newest first."""
    await notifications.clean_old_notifications(db, user.id)
    await notifications.generate_recurring_notifications(db, user)
    await notifications.generate_card_notifications(db, user)
    return await notifications.list_notifications(db, user.id, query)


@router.get("/count", response_model=UnreadCountResponse)
async def count_unread(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return {"count": await notifications.unread_count(db, user.id)}


@router.post("/mark-read", status_code=204)
async def mark_read(
    payload: MarkReadRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await notifications.mark_read(db, user.id, payload.ids)


@router.delete("/", status_code=204)
async def delete_read(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Remove every notification already marked as read."""
    await notifications.delete_read(db, user.id)


@router.delete("/{notification_id}", status_code=204)
async def delete_notification(
    notification_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if not await notifications.delete_notification(db, user.id, notification_id):
        raise HTTPException(status_code=404, detail=t("notification_not_found", user.locale))
