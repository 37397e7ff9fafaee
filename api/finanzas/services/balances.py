"""Signed balance adjustments on bank accounts and per-currency card balances.

Card balances hold outstanding debt: a positive delta means more owed.
"""
import enum
import logging
import uuid
from dataclasses import dataclass
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from finanzas.models.account import BankAccount, CreditCard, CreditCardBalance

logger = logging.getLogger(__name__)


class BalanceKind(str, enum.Enum):
    BANK_ACCOUNT = "bank_account"
    CREDIT_CARD = "credit_card"


class BalanceNotFound(LookupError):
    pass


@dataclass(frozen=True)
class BalanceRef:
    kind: BalanceKind
    id: uuid.UUID
    currency: str  # ignored for bank accounts, which hold a single currency

    @classmethod
    def account(cls, account_id: uuid.UUID, currency: str) -> "BalanceRef":
        return cls(BalanceKind.BANK_ACCOUNT, account_id, currency)

    @classmethod
    def card(cls, card_id: uuid.UUID, currency: str) -> "BalanceRef":
        return cls(BalanceKind.CREDIT_CARD, card_id, currency)


async def apply_balance_delta(db: AsyncSession, ref: BalanceRef, delta: Decimal) -> Decimal:
    """Apply ``delta`` to the balance named by ``ref`` and return the new balance."""
    if ref.kind is BalanceKind.BANK_ACCOUNT:
        account = (await db.execute(
            select(BankAccount).where(BankAccount.id == ref.id).with_for_update()
        )).scalar_one_or_none()
        if account is None:
            raise BalanceNotFound(f"Bank account {ref.id} not found")
        account.balance = (account.balance or Decimal(0)) + delta
        return account.balance

    row = (await db.execute(
        select(CreditCardBalance)
        .where(
            CreditCardBalance.card_id == ref.id,
            CreditCardBalance.currency == ref.currency,
        )
        .with_for_update()
    )).scalar_one_or_none()

    if row is None:
        card = await db.get(CreditCard, ref.id)
        if card is None:
            raise BalanceNotFound(f"Credit card {ref.id} not found")
        logger.debug("Opening %s balance on card %s", ref.currency, ref.id)
        row = CreditCardBalance(
            card_id=ref.id,
            currency=ref.currency,
            credit_limit=Decimal(0),
            balance=Decimal(0),
        )
        db.add(row)

    row.balance = (row.balance or Decimal(0)) + delta
    return row.balance
