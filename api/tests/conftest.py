"""
Shared fixtures: a throwaway SQLite database per test and row factories.

Run with:
    pytest -v
"""
import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("API_SECRET_KEY", "test-secret-key-that-is-long-enough-0123456789")
os.environ.setdefault("DEFAULT_LOCALE", "es")

import uuid
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from finanzas.core.database import Base
from finanzas.models import (
    BankAccount,
    CreditCard,
    CreditCardBalance,
    RecurringTransaction,
    User,
)


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


# ── Row factories ────────────────────────────────────────────────────────────

class Factory:
    """Inserts committed rows with sensible defaults; keyword arguments override."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _save(self, obj):
        self.db.add(obj)
        await self.db.commit()
        return obj

    async def user(self, **overrides) -> User:
        fields = {
            "email": f"{uuid.uuid4().hex[:8]}@example.com",
            "full_name": "Ana Pérez",
            "primary_currency": "MXN",
            "locale": "es",
            "has_completed_onboarding": True,
            "is_active": True,
        }
        fields.update(overrides)
        return await self._save(User(**fields))

    async def account(self, user: User, **overrides) -> BankAccount:
        fields = {
            "user_id": user.id,
            "name": "Nómina",
            "bank_name": "BBVA",
            "account_type": "checking",
            "currency": "MXN",
            "balance": Decimal("10000.00"),
            "is_active": True,
        }
        fields.update(overrides)
        return await self._save(BankAccount(**fields))

    async def card(self, user: User, balances: dict[str, str] | None = None, **overrides) -> CreditCard:
        fields = {
            "user_id": user.id,
            "name": "Oro",
            "bank_name": "Banorte",
            "cut_off_day": 5,
            "payment_due_day": 25,
            "is_active": True,
        }
        fields.update(overrides)
        card = CreditCard(**fields)
        self.db.add(card)
        await self.db.flush()
        for currency, balance in (balances or {"MXN": "0"}).items():
            self.db.add(CreditCardBalance(
                card_id=card.id,
                currency=currency,
                credit_limit=Decimal("50000"),
                balance=Decimal(balance),
            ))
        await self.db.commit()
        return card

    async def rule(self, user: User, **overrides) -> RecurringTransaction:
        start = overrides.pop("start_date", date(2024, 1, 15))
        fields = {
            "user_id": user.id,
            "type": "expense",
            "amount": Decimal("500.00"),
            "currency": "MXN",
            "category": "housing",
            "description": "Renta",
            "frequency": "monthly",
            "start_date": start,
            "next_due_date": start,
            "is_active": True,
            "is_card_payment": False,
        }
        fields.update(overrides)
        return await self._save(RecurringTransaction(**fields))


@pytest.fixture
def factory(db):
    return Factory(db)
