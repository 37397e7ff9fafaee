"""
Recurring transaction generator.

Walks every active rule of a user, materialises each occurrence that is due
on or before ``today`` as a Transaction, applies its balance effects and
advances the rule's schedule pointer.

Each rule is its own unit of work: the rule row is re-read under a row lock,
every occurrence is written and the unit commits. A failing rule is rolled
back and logged; the remaining rules still run. Two overlapping calls for the
same user serialise on the row lock, and the second one sees the advanced
``next_due_date`` and generates nothing.
"""
import logging
import uuid
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from finanzas.core.config import settings
from finanzas.models.account import Transaction
from finanzas.models.recurring import RecurringTransaction
from finanzas.services.balances import BalanceRef, apply_balance_delta
from finanzas.services.schedule import InvalidFrequency, due_dates, next_due_date, parse_frequency

logger = logging.getLogger(__name__)


# ─── Balance effects ──────────────────────────────────────────────────────────

def balance_effects(rule: RecurringTransaction) -> list[tuple[BalanceRef, Decimal]]:
    """
    Signed deltas applied once per occurrence.

    Regular rules move the source account (+income / -expense) or the source
    card debt (+expense / -income). A card payment always moves money out of
    its source and the same amount off the target card's debt, so assets and
    liabilities drop together and net worth does not change.
    """
    amount = Decimal(rule.amount)
    effects: list[tuple[BalanceRef, Decimal]] = []

    if rule.is_card_payment and rule.target_card_id:
        if rule.bank_account_id:
            effects.append((BalanceRef.account(rule.bank_account_id, rule.currency), -amount))
        if rule.credit_card_id:
            effects.append((BalanceRef.card(rule.credit_card_id, rule.currency), amount))
        effects.append((BalanceRef.card(rule.target_card_id, rule.currency), -amount))
        return effects

    is_income = rule.type == "income"
    if rule.bank_account_id:
        effects.append(
            (BalanceRef.account(rule.bank_account_id, rule.currency), amount if is_income else -amount)
        )
    if rule.credit_card_id:
        effects.append(
            (BalanceRef.card(rule.credit_card_id, rule.currency), -amount if is_income else amount)
        )
    return effects


def _occurrence(rule: RecurringTransaction, due: date) -> Transaction:
    return Transaction(
        user_id=rule.user_id,
        type=rule.type,
        amount=rule.amount,
        currency=rule.currency,
        category=rule.category,
        description=rule.description,
        date=due,
        bank_account_id=rule.bank_account_id,
        credit_card_id=rule.credit_card_id,
        is_card_payment=rule.is_card_payment,
        target_card_id=rule.target_card_id,
        recurring_transaction_id=rule.id,
    )


# ─── Per-rule unit of work ────────────────────────────────────────────────────

async def _generate_for_rule(
    db: AsyncSession, rule_id: uuid.UUID, user_id: uuid.UUID, today: date
) -> int:
    rule = (await db.execute(
        select(RecurringTransaction)
        .where(
            RecurringTransaction.id == rule_id,
            RecurringTransaction.user_id == user_id,
            RecurringTransaction.is_active == True,  # noqa: E712
        )
        .with_for_update()
        .execution_options(populate_existing=True)
    )).scalar_one_or_none()

    if rule is None:
        # Deleted or paused between listing and locking
        return 0

    frequency = parse_frequency(rule.frequency)
    anchor_day = rule.start_date.day
    pending = due_dates(
        frequency,
        rule.next_due_date,
        until=today,
        end_date=rule.end_date,
        anchor_day=anchor_day,
        limit=settings.recurring_max_catchup,
    )
    if not pending:
        return 0

    effects = balance_effects(rule)
    for due in pending:
        db.add(_occurrence(rule, due))
        for ref, delta in effects:
            await apply_balance_delta(db, ref, delta)
        rule.last_generated_date = due
        rule.next_due_date = next_due_date(frequency, due, anchor_day)

    await db.flush()
    return len(pending)


# ─── Entry point ──────────────────────────────────────────────────────────────

async def generate_pending_transactions(
    db: AsyncSession, user_id: uuid.UUID, today: date | None = None
) -> int:
    """
    Generate every due occurrence for ``user_id`` and return how many were
    created by rules that committed. The caller must have authenticated the
    user. This function owns the session's transaction boundaries.

    Errors while listing the rules propagate; errors inside a rule do not.
    """
    today = today or date.today()

    rule_ids = (await db.execute(
        select(RecurringTransaction.id)
        .where(
            RecurringTransaction.user_id == user_id,
            RecurringTransaction.is_active == True,  # noqa: E712
            RecurringTransaction.next_due_date <= today,
        )
        .order_by(RecurringTransaction.next_due_date)
    )).scalars().all()
    await db.commit()

    generated = 0
    for rule_id in rule_ids:
        try:
            count = await _generate_for_rule(db, rule_id, user_id, today)
            await db.commit()
        except InvalidFrequency as exc:
            await db.rollback()
            logger.error("Skipping recurring rule %s: %s", rule_id, exc)
            continue
        except Exception:
            await db.rollback()
            logger.exception("Failed to generate occurrences for recurring rule %s", rule_id)
            continue
        generated += count

    logger.info(
        "Recurring generation for user %s: %d transaction(s) from %d due rule(s)",
        user_id, generated, len(rule_ids),
    )
    return generated
