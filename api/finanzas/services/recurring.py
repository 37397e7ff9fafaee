"""Recurring rule management: listing, validation, create/update, toggle, upcoming."""
import logging
import uuid
from datetime import date, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from finanzas.models.account import BankAccount, CreditCard
from finanzas.models.recurring import RecurringTransaction
from finanzas.schemas.recurring import RecurringTransactionBase

logger = logging.getLogger(__name__)

_RELATIONS = (
    selectinload(RecurringTransaction.bank_account),
    selectinload(RecurringTransaction.credit_card),
    selectinload(RecurringTransaction.target_card),
)


class RuleValidationError(Exception):
    """Rejected rule payload. ``message_key`` indexes finanzas.core.messages."""

    def __init__(self, message_key: str, status_code: int = 422):
        super().__init__(message_key)
        self.message_key = message_key
        self.status_code = status_code


# ─── Queries ─────────────────────────────────────────────────────────────────

async def list_rules(
    db: AsyncSession, user_id: uuid.UUID, is_active: bool | None = None
) -> list[RecurringTransaction]:
    stmt = (
        select(RecurringTransaction)
        .options(*_RELATIONS)
        .where(RecurringTransaction.user_id == user_id)
        .order_by(RecurringTransaction.next_due_date)
    )
    if is_active is not None:
        stmt = stmt.where(RecurringTransaction.is_active == is_active)
    return list((await db.execute(stmt)).scalars().all())


async def get_rule(
    db: AsyncSession, user_id: uuid.UUID, rule_id: uuid.UUID
) -> RecurringTransaction | None:
    result = await db.execute(
        select(RecurringTransaction)
        .options(*_RELATIONS)
        .where(
            RecurringTransaction.id == rule_id,
            RecurringTransaction.user_id == user_id,
        )
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def upcoming_rules(
    db: AsyncSession,
    user_id: uuid.UUID,
    days: int = 7,
    limit: int = 5,
    today: date | None = None,
) -> list[RecurringTransaction]:
    """Active rules whose next occurrence falls within the next ``days`` days."""
    today = today or date.today()
    result = await db.execute(
        select(RecurringTransaction)
        .options(*_RELATIONS)
        .where(
            RecurringTransaction.user_id == user_id,
            RecurringTransaction.is_active == True,  # noqa: E712
            RecurringTransaction.next_due_date >= today,
            RecurringTransaction.next_due_date <= today + timedelta(days=days),
        )
        .order_by(RecurringTransaction.next_due_date)
        .limit(limit)
    )
    return list(result.scalars().all())


# ─── Validation ──────────────────────────────────────────────────────────────

async def _validate(db: AsyncSession, user_id: uuid.UUID, payload: RecurringTransactionBase) -> None:
    if payload.bank_account_id and payload.credit_card_id:
        raise RuleValidationError("account_and_card")

    if payload.end_date is not None and payload.end_date < payload.start_date:
        raise RuleValidationError("end_before_start")

    if payload.is_card_payment:
        has_source = payload.bank_account_id or payload.credit_card_id
        if not has_source or not payload.target_card_id:
            raise RuleValidationError("card_payment_requirements")
        if payload.credit_card_id == payload.target_card_id:
            raise RuleValidationError("card_payment_same_card")
        if payload.type != "expense":
            raise RuleValidationError("card_payment_expense")

    if payload.bank_account_id:
        account = (await db.execute(
            select(BankAccount).where(
                BankAccount.id == payload.bank_account_id,
                BankAccount.user_id == user_id,
                BankAccount.is_active == True,  # noqa: E712
            )
        )).scalar_one_or_none()
        if account is None:
            raise RuleValidationError("account_not_found", status_code=404)
        if account.currency != payload.currency:
            raise RuleValidationError("currency_mismatch")

    for card_id, key in (
        (payload.credit_card_id, "card_not_found"),
        (payload.target_card_id if payload.is_card_payment else None, "target_card_not_found"),
    ):
        if card_id is None:
            continue
        card = (await db.execute(
            select(CreditCard.id).where(
                CreditCard.id == card_id,
                CreditCard.user_id == user_id,
                CreditCard.is_active == True,  # noqa: E712
            )
        )).scalar_one_or_none()
        if card is None:
            raise RuleValidationError(key, status_code=404)


def _apply_payload(rule: RecurringTransaction, payload: RecurringTransactionBase) -> None:
    rule.type = payload.type
    rule.amount = payload.amount
    rule.currency = payload.currency
    rule.category = payload.category
    rule.description = payload.description
    rule.bank_account_id = payload.bank_account_id
    rule.credit_card_id = payload.credit_card_id
    rule.is_card_payment = payload.is_card_payment
    rule.target_card_id = payload.target_card_id if payload.is_card_payment else None
    rule.frequency = payload.frequency.value
    rule.start_date = payload.start_date
    rule.end_date = payload.end_date


# ─── Mutations ───────────────────────────────────────────────────────────────

async def create_rule(
    db: AsyncSession, user_id: uuid.UUID, payload: RecurringTransactionBase
) -> RecurringTransaction:
    await _validate(db, user_id, payload)

    rule = RecurringTransaction(user_id=user_id, is_active=True)
    _apply_payload(rule, payload)
    # First occurrence is the start date itself
    rule.next_due_date = payload.start_date
    rule.last_generated_date = None

    db.add(rule)
    await db.flush()
    logger.info("Created recurring rule %s (%s) for user %s", rule.id, rule.frequency, user_id)
    return await get_rule(db, user_id, rule.id)


async def update_rule(
    db: AsyncSession, rule: RecurringTransaction, payload: RecurringTransactionBase
) -> RecurringTransaction:
    await _validate(db, rule.user_id, payload)

    _apply_payload(rule, payload)
    if rule.last_generated_date is None:
        rule.next_due_date = payload.start_date
    elif rule.next_due_date < payload.start_date:
        rule.next_due_date = payload.start_date

    await db.flush()
    return await get_rule(db, rule.user_id, rule.id)


async def toggle_rule(db: AsyncSession, rule: RecurringTransaction) -> RecurringTransaction:
    rule.is_active = not rule.is_active
    await db.flush()
    logger.info("Recurring rule %s is now %s", rule.id, "active" if rule.is_active else "paused")
    return await get_rule(db, rule.user_id, rule.id)


async def delete_rule(db: AsyncSession, rule: RecurringTransaction) -> None:
    await db.delete(rule)
    await db.flush()
