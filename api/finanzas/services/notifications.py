"""In-app notifications for upcoming recurring payments and card dates.

Every notification day is a UTC day: ``today`` defaults to the UTC date and
the once-per-day check starts at UTC midnight of that same date.
"""
import calendar
import logging
import uuid
from datetime import date, datetime, time, timedelta, timezone

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from finanzas.core.config import settings
from finanzas.core.messages import days_until_text, t
from finanzas.models.account import CreditCard
from finanzas.models.notification import Notification
from finanzas.models.recurring import RecurringTransaction
from finanzas.models.user import User
from finanzas.schemas.notification import NotificationQuery
from finanzas.services.formatting import format_currency

logger = logging.getLogger(__name__)

RECURRING_UPCOMING = "recurring_upcoming"
CARD_CUTOFF = "card_cutoff"
CARD_PAYMENT = "card_payment"


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def _start_of_day(today: date) -> datetime:
    return datetime.combine(today, time.min, tzinfo=timezone.utc)


async def _notified_today(
    db: AsyncSession, user_id: uuid.UUID, type_: str, key: str, value: str, today: date
) -> bool:
    """True if a ``type_`` notification with ``data[key] == value`` exists since UTC midnight."""
    rows = (await db.execute(
        select(Notification.data).where(
            Notification.user_id == user_id,
            Notification.type == type_,
            Notification.created_at >= _start_of_day(today),
        )
    )).scalars().all()
    return any((data or {}).get(key) == value for data in rows)


def days_until_day_of_month(day: int, today: date) -> int:
    """Days from ``today`` to the next ``day`` of the month, wrapping by the current month's length."""
    days = day - today.day
    if days < 0:
        days += calendar.monthrange(today.year, today.month)[1]
    return days


# ─── Generators ───────────────────────────────────────────────────────────────

async def generate_recurring_notifications(
    db: AsyncSession, user: User, today: date | None = None
) -> int:
    """Notify about active rules due within ``recurring_notify_days``. Returns how many were created."""
    today = today or utc_today()
    horizon = today + timedelta(days=settings.recurring_notify_days)

    rules = (await db.execute(
        select(RecurringTransaction).where(
            RecurringTransaction.user_id == user.id,
            RecurringTransaction.is_active == True,  # noqa: E712
            RecurringTransaction.next_due_date >= today,
            RecurringTransaction.next_due_date <= horizon,
        )
    )).scalars().all()

    created = 0
    for rule in rules:
        if await _notified_today(db, user.id, RECURRING_UPCOMING, "recurring_id", str(rule.id), today):
            continue

        days = (rule.next_due_date - today).days
        amount = format_currency(rule.amount, rule.currency, user.locale)
        kind = t("income" if rule.type == "income" else "expense", user.locale)
        label = rule.description or rule.category

        db.add(Notification(
            user_id=user.id,
            type=RECURRING_UPCOMING,
            title=t("recurring_upcoming_title", user.locale),
            message=f"{days_until_text(days, user.locale)}: {label} - {kind} {amount}",
            data={
                "recurring_id": str(rule.id),
                "category": rule.category,
                "days_until": days,
            },
            created_at=datetime.now(timezone.utc),
        ))
        created += 1

    if created:
        await db.flush()
        logger.debug("Created %d recurring notification(s) for user %s", created, user.id)
    return created


async def generate_card_notifications(
    db: AsyncSession, user: User, today: date | None = None
) -> int:
    """
    Notify about cut-off and payment days of active cards that fall within
    ``card_notify_days``. One notification per card, kind and day.
    """
    today = today or utc_today()

    cards = (await db.execute(
        select(CreditCard).where(
            CreditCard.user_id == user.id,
            CreditCard.is_active == True,  # noqa: E712
        )
    )).scalars().all()

    created = 0
    for card in cards:
        for type_, day in ((CARD_CUTOFF, card.cut_off_day), (CARD_PAYMENT, card.payment_due_day)):
            days = days_until_day_of_month(day, today)
            if days > settings.card_notify_days:
                continue
            if await _notified_today(db, user.id, type_, "card_id", str(card.id), today):
                continue

            db.add(Notification(
                user_id=user.id,
                type=type_,
                title=t(f"{type_}_title", user.locale),
                message=t(
                    f"{type_}_message", user.locale,
                    when=days_until_text(days, user.locale), card=card.name,
                ),
                data={"card_id": str(card.id), "card_name": card.name, "days_until": days},
                created_at=datetime.now(timezone.utc),
            ))
            created += 1

    if created:
        await db.flush()
        logger.debug("Created %d card notification(s) for user %s", created, user.id)
    return created


# ─── Inbox ────────────────────────────────────────────────────────────────────

async def list_notifications(
    db: AsyncSession, user_id: uuid.UUID, query: NotificationQuery | None = None
) -> list[Notification]:
    query = query or NotificationQuery()
    stmt = select(Notification).where(Notification.user_id == user_id)
    if query.is_read is not None:
        stmt = stmt.where(Notification.is_read == query.is_read)
    stmt = (
        stmt.order_by(Notification.created_at.desc())
        .limit(query.limit)
        .offset(query.offset)
    )
    return list((await db.execute(stmt)).scalars().all())


async def unread_count(db: AsyncSession, user_id: uuid.UUID) -> int:
    result = await db.execute(
        select(func.count()).select_from(Notification).where(
            Notification.user_id == user_id,
            Notification.is_read == False,  # noqa: E712
        )
    )
    return result.scalar_one()


async def mark_read(
    db: AsyncSession, user_id: uuid.UUID, ids: list[uuid.UUID] | None = None
) -> None:
    stmt = update(Notification).where(Notification.user_id == user_id).values(is_read=True)
    if ids:
        stmt = stmt.where(Notification.id.in_(ids))
    await db.execute(stmt)


async def delete_read(db: AsyncSession, user_id: uuid.UUID) -> None:
    await db.execute(
        delete(Notification).where(
            Notification.user_id == user_id,
            Notification.is_read == True,  # noqa: E712
        )
    )


async def clean_old_notifications(db: AsyncSession, user_id: uuid.UUID) -> None:
    cutoff = datetime.now(timezone.utc) - timedelta(days=settings.notification_retention_days)
    await db.execute(
        delete(Notification).where(
            Notification.user_id == user_id,
            Notification.created_at < cutoff,
        )
    )


async def delete_notification(db: AsyncSession, user_id: uuid.UUID, notification_id: uuid.UUID) -> bool:
    """Delete one of the user's notifications. False if it does not exist or belongs to someone else."""
    result = await db.execute(
        delete(Notification).where(
            Notification.id == notification_id,
            Notification.user_id == user_id,
        )
    )
    return result.rowcount > 0
