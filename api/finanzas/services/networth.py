"""Net worth service.

Converts every balance into the user's primary currency with the approximate
USD-pivot rates, then upserts today's snapshot:

    total_assets       – active bank-account balances
    total_liabilities  – outstanding debt on active cards, every currency
    net_worth          – total_assets − total_liabilities
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from finanzas.models.account import BankAccount, CreditCard
from finanzas.models.networth import NetWorthSnapshot
from finanzas.models.user import User
from finanzas.services.currencies import convert, usd_rate

logger = logging.getLogger(__name__)

_CENT = Decimal("0.01")


@dataclass
class NetWorthTotals:
    primary_currency: str
    total_assets: Decimal = Decimal(0)
    total_liabilities: Decimal = Decimal(0)
    accounts: list[dict] = field(default_factory=list)
    cards: list[dict] = field(default_factory=list)

    @property
    def net_worth(self) -> Decimal:
        return self.total_assets - self.total_liabilities


def _money(value: Decimal) -> Decimal:
    return value.quantize(_CENT)


# ─── Core computation ───────────────────────────────────────────────────────────

async def compute_net_worth(db: AsyncSession, user: User) -> NetWorthTotals:
    primary = user.primary_currency or "USD"
    totals = NetWorthTotals(primary_currency=primary)

    accounts = (await db.execute(
        select(BankAccount)
        .where(BankAccount.user_id == user.id, BankAccount.is_active == True)  # noqa: E712
        .order_by(BankAccount.created_at)
        .execution_options(populate_existing=True)
    )).scalars().all()

    for acc in accounts:
        balance = acc.balance or Decimal(0)
        converted = _money(convert(balance, acc.currency, primary))
        totals.total_assets += converted
        totals.accounts.append({
            "id": str(acc.id),
            "name": acc.name,
            "bank_name": acc.bank_name,
            "currency": acc.currency,
            "balance": str(balance),
            "balance_converted": str(converted),
        })

    cards = (await db.execute(
        select(CreditCard)
        .options(selectinload(CreditCard.balances))
        .where(CreditCard.user_id == user.id, CreditCard.is_active == True)  # noqa: E712
        .order_by(CreditCard.created_at)
        .execution_options(populate_existing=True)
    )).scalars().all()

    for card in cards:
        balances = []
        card_debt = Decimal(0)
        for b in card.balances:
            converted = _money(convert(b.balance or Decimal(0), b.currency, primary))
            card_debt += converted
            balances.append({
                "currency": b.currency,
                "balance": str(b.balance),
                "balance_converted": str(converted),
            })
        totals.total_liabilities += card_debt
        totals.cards.append({
            "id": str(card.id),
            "name": card.name,
            "bank_name": card.bank_name,
            "total_debt": str(card_debt),
            "balances": balances,
        })

    return totals


async def upsert_snapshot(
    db: AsyncSession, user: User, totals: NetWorthTotals, today: date | None = None
) -> NetWorthSnapshot:
    """Create today's snapshot or refresh it in place."""
    today = today or date.today()

    existing = (await db.execute(
        select(NetWorthSnapshot).where(
            NetWorthSnapshot.user_id == user.id,
            NetWorthSnapshot.snapshot_date == today,
        )
    )).scalar_one_or_none()

    values = {
        "total_assets": totals.total_assets,
        "total_liabilities": totals.total_liabilities,
        "net_worth": totals.net_worth,
        "exchange_rate": usd_rate(totals.primary_currency),
        "breakdown": {"accounts": totals.accounts, "cards": totals.cards},
    }

    if existing:
        for key, value in values.items():
            setattr(existing, key, value)
        snapshot = existing
    else:
        snapshot = NetWorthSnapshot(user_id=user.id, snapshot_date=today, **values)
        db.add(snapshot)

    await db.flush()
    logger.debug("Net worth snapshot for user %s on %s: %s", user.id, today, totals.net_worth)
    return snapshot


async def snapshot_history(db: AsyncSession, user_id: uuid.UUID) -> list[NetWorthSnapshot]:
    result = await db.execute(
        select(NetWorthSnapshot)
        .where(NetWorthSnapshot.user_id == user_id)
        .order_by(NetWorthSnapshot.snapshot_date)
    )
    return list(result.scalars().all())
