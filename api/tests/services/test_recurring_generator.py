"""
Recurring generator against a real (SQLite) database.
"""
import uuid
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from finanzas.models import BankAccount, CreditCardBalance, RecurringTransaction, Transaction
from finanzas.services.networth import compute_net_worth
from finanzas.services.recurring_generator import (
    _generate_for_rule,
    balance_effects,
    generate_pending_transactions,
)

pytestmark = pytest.mark.anyio

TODAY = date(2024, 3, 20)


async def _transactions(db, rule_id):
    result = await db.execute(
        select(Transaction)
        .where(Transaction.recurring_transaction_id == rule_id)
        .order_by(Transaction.date)
    )
    return result.scalars().all()


async def _card_balance(db, card_id, currency="MXN"):
    row = (await db.execute(
        select(CreditCardBalance)
        .where(CreditCardBalance.card_id == card_id, CreditCardBalance.currency == currency)
        .execution_options(populate_existing=True)
    )).scalar_one()
    return row.balance


# ── Catch-up and idempotence ─────────────────────────────────────────────────

class TestCatchUp:
    async def test_monthly_rule_three_months_behind(self, db, factory):
        user = await factory.user()
        account = await factory.account(user)
        rule = await factory.rule(user, bank_account_id=account.id)

        generated = await generate_pending_transactions(db, user.id, today=TODAY)

        assert generated == 3
        txns = await _transactions(db, rule.id)
        assert [t.date for t in txns] == [date(2024, 1, 15), date(2024, 2, 15), date(2024, 3, 15)]
        assert all(t.amount == Decimal("500") and t.currency == "MXN" for t in txns)

        await db.refresh(rule)
        assert rule.next_due_date == date(2024, 4, 15)
        assert rule.last_generated_date == date(2024, 3, 15)

    async def test_expense_debits_source_account_per_occurrence(self, db, factory):
        user = await factory.user()
        account = await factory.account(user, balance=Decimal("10000"))
        await factory.rule(user, bank_account_id=account.id)

        await generate_pending_transactions(db, user.id, today=TODAY)

        await db.refresh(account)
        assert account.balance == Decimal("8500")

    async def test_second_run_generates_nothing(self, db, factory):
        user = await factory.user()
        rule = await factory.rule(user)

        assert await generate_pending_transactions(db, user.id, today=TODAY) == 3
        assert await generate_pending_transactions(db, user.id, today=TODAY) == 0

        assert len(await _transactions(db, rule.id)) == 3
        await db.refresh(rule)
        assert rule.next_due_date > TODAY

    async def test_never_run_rule_starts_at_start_date(self, db, factory):
        user = await factory.user()
        rule = await factory.rule(user, start_date=TODAY, frequency="weekly")

        assert await generate_pending_transactions(db, user.id, today=TODAY) == 1
        txns = await _transactions(db, rule.id)
        assert txns[0].date == TODAY

        await db.refresh(rule)
        assert rule.next_due_date == date(2024, 3, 27)

    async def test_month_end_rule_keeps_its_anchor(self, db, factory):
        user = await factory.user()
        rule = await factory.rule(user, start_date=date(2024, 1, 31))

        await generate_pending_transactions(db, user.id, today=date(2024, 4, 30))

        txns = await _transactions(db, rule.id)
        assert [t.date for t in txns] == [
            date(2024, 1, 31), date(2024, 2, 29), date(2024, 3, 31), date(2024, 4, 30),
        ]
        await db.refresh(rule)
        assert rule.next_due_date == date(2024, 5, 31)

    async def test_final_pointer_is_whole_steps_from_start(self, db, factory):
        user = await factory.user()
        rule = await factory.rule(user, start_date=date(2024, 1, 1), frequency="biweekly")

        await generate_pending_transactions(db, user.id, today=TODAY)

        await db.refresh(rule)
        assert rule.next_due_date > TODAY
        assert (rule.next_due_date - date(2024, 1, 1)).days % 14 == 0


# ── End dates and status ─────────────────────────────────────────────────────

class TestDormancy:
    async def test_rule_past_end_date_is_untouched(self, db, factory):
        user = await factory.user()
        rule = await factory.rule(
            user,
            start_date=date(2023, 11, 15),
            next_due_date=date(2024, 2, 15),
            last_generated_date=date(2024, 1, 15),
            end_date=date(2024, 1, 31),
        )

        assert await generate_pending_transactions(db, user.id, today=TODAY) == 0

        await db.refresh(rule)
        assert rule.next_due_date == date(2024, 2, 15)
        assert rule.last_generated_date == date(2024, 1, 15)
        assert rule.is_active is True

    async def test_end_date_stops_catch_up_without_deactivating(self, db, factory):
        user = await factory.user()
        rule = await factory.rule(user, end_date=date(2024, 2, 20))

        assert await generate_pending_transactions(db, user.id, today=TODAY) == 2

        await db.refresh(rule)
        assert rule.last_generated_date == date(2024, 2, 15)
        assert rule.next_due_date == date(2024, 3, 15)
        assert rule.is_active is True

    async def test_inactive_rule_is_skipped(self, db, factory):
        user = await factory.user()
        rule = await factory.rule(user, is_active=False)

        assert await generate_pending_transactions(db, user.id, today=TODAY) == 0
        assert await _transactions(db, rule.id) == []

    async def test_other_users_rules_are_ignored(self, db, factory):
        owner = await factory.user()
        other = await factory.user()
        await factory.rule(other)

        assert await generate_pending_transactions(db, owner.id, today=TODAY) == 0


# ── Card payments ────────────────────────────────────────────────────────────

class TestCardPayment:
    async def test_payment_from_account_moves_both_sides(self, db, factory):
        user = await factory.user()
        account = await factory.account(user, balance=Decimal("10000"))
        card = await factory.card(user, balances={"MXN": "3000"})
        await factory.rule(
            user,
            start_date=TODAY,
            category="card_payment",
            bank_account_id=account.id,
            is_card_payment=True,
            target_card_id=card.id,
        )

        assert await generate_pending_transactions(db, user.id, today=TODAY) == 1

        await db.refresh(account)
        assert account.balance == Decimal("9500")
        assert await _card_balance(db, card.id) == Decimal("2500")

    async def test_payment_leaves_net_worth_unchanged(self, db, factory):
        user = await factory.user(primary_currency="MXN")
        account = await factory.account(user, balance=Decimal("10000"))
        card = await factory.card(user, balances={"MXN": "3000"})
        await factory.rule(
            user,
            bank_account_id=account.id,
            is_card_payment=True,
            target_card_id=card.id,
        )

        before = await compute_net_worth(db, user)
        await generate_pending_transactions(db, user.id, today=TODAY)
        after = await compute_net_worth(db, user)

        assert after.total_assets == before.total_assets - Decimal("1500")
        assert after.total_liabilities == before.total_liabilities - Decimal("1500")
        assert after.net_worth == before.net_worth

    async def test_card_expense_increases_card_debt(self, db, factory):
        user = await factory.user()
        card = await factory.card(user, balances={"MXN": "100"})
        await factory.rule(user, start_date=TODAY, credit_card_id=card.id)

        await generate_pending_transactions(db, user.id, today=TODAY)

        assert await _card_balance(db, card.id) == Decimal("600")

    async def test_card_balance_opened_for_new_currency(self, db, factory):
        user = await factory.user()
        card = await factory.card(user, balances={"MXN": "0"})
        await factory.rule(user, start_date=TODAY, currency="USD", credit_card_id=card.id)

        await generate_pending_transactions(db, user.id, today=TODAY)

        assert await _card_balance(db, card.id, "USD") == Decimal("500")

    def test_card_payment_effects_net_to_zero(self):
        account_id, card_id = uuid.uuid4(), uuid.uuid4()

        class Rule:
            type = "expense"
            amount = Decimal("250")
            currency = "MXN"
            bank_account_id = account_id
            credit_card_id = None
            is_card_payment = True
            target_card_id = card_id

        effects = balance_effects(Rule())
        assert [delta for _, delta in effects] == [Decimal("-250"), Decimal("-250")]


# ── Failure isolation ────────────────────────────────────────────────────────

class TestFailures:
    async def test_malformed_frequency_is_skipped(self, db, factory):
        user = await factory.user()
        bad = await factory.rule(user, frequency="fortnightly")
        good = await factory.rule(user, start_date=TODAY)
        good_id = good.id

        assert await generate_pending_transactions(db, user.id, today=TODAY) == 1

        await db.refresh(bad)
        assert bad.next_due_date == date(2024, 1, 15)
        assert bad.last_generated_date is None
        assert len(await _transactions(db, good_id)) == 1

    async def test_failing_rule_rolls_back_alone(self, db, factory):
        user = await factory.user()
        account = await factory.account(user, balance=Decimal("1000"))
        # Source account that does not exist: the balance update fails mid-rule
        broken = await factory.rule(user, bank_account_id=uuid.uuid4())
        healthy = await factory.rule(user, start_date=TODAY, bank_account_id=account.id)
        # Rolled-back sessions expire loaded objects
        broken_id, healthy_id, account_id = broken.id, healthy.id, account.id

        assert await generate_pending_transactions(db, user.id, today=TODAY) == 1

        await db.refresh(broken)
        assert broken.next_due_date == date(2024, 1, 15)
        assert broken.last_generated_date is None
        assert await _transactions(db, broken_id) == []

        assert len(await _transactions(db, healthy_id)) == 1
        balance = (await db.execute(
            select(BankAccount.balance).where(BankAccount.id == account_id)
        )).scalar_one()
        assert balance == Decimal("500")


# ── Overlapping runs ─────────────────────────────────────────────────────────

class TestOverlappingRuns:
    async def test_stale_session_rereads_rule_under_lock(self, session_factory, factory):
        user = await factory.user()
        rule = await factory.rule(user)
        user_id, rule_id = user.id, rule.id

        async with session_factory() as first, session_factory() as second:
            stale = await first.get(RecurringTransaction, rule_id)
            assert stale.next_due_date == date(2024, 1, 15)

            assert await generate_pending_transactions(second, user_id, today=TODAY) == 3

            assert await _generate_for_rule(first, rule_id, user_id, TODAY) == 0
            await first.commit()
            assert stale.next_due_date == date(2024, 4, 15)

            total = (await first.execute(
                select(func.count()).select_from(Transaction)
                .where(Transaction.recurring_transaction_id == rule_id)
            )).scalar_one()
            assert total == 3
