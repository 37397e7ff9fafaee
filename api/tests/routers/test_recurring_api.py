"""
HTTP tests for the recurring, net worth and notification endpoints.

The app runs in-process through httpx's ASGI transport; every request gets
its own session on the per-test SQLite file.
"""
from datetime import date, timedelta
from decimal import Decimal

import httpx
import pytest
from sqlalchemy import func, select

from finanzas.core.database import get_db
from finanzas.core.security import create_access_token
from finanzas.main import app
from finanzas.models import BankAccount, Transaction
from finanzas.routers import recurring as recurring_router
from finanzas.services import recurring_generator
from finanzas.services.notifications import utc_today

pytestmark = pytest.mark.anyio


class FixedDate(date):
    @classmethod
    def today(cls):
        return cls(2024, 3, 20)


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def _auth(user) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token({'sub': str(user.id)})}"}


def _rule_payload(**overrides) -> dict:
    payload = {
        "type": "expense",
        "amount": "500.00",
        "currency": "MXN",
        "category": "housing",
        "description": "Renta",
        "frequency": "monthly",
        "start_date": "2024-01-15",
    }
    payload.update(overrides)
    return payload


# ── Authentication ───────────────────────────────────────────────────────────

class TestAuth:
    async def test_generate_requires_session(self, client):
        resp = await client.post("/api/v1/recurring/generate")
        assert resp.status_code == 401
        assert resp.json() == {"error": "No autorizado"}

    async def test_invalid_token(self, client):
        resp = await client.get("/api/v1/recurring/", headers={"Authorization": "Bearer nope"})
        assert resp.status_code == 401

    async def test_cookie_session(self, client, factory):
        user = await factory.user()
        token = create_access_token({"sub": str(user.id)})
        client.cookies.set("access_token", token)

        resp = await client.get("/api/v1/recurring/")
        assert resp.status_code == 200
        assert resp.json() == []

    async def test_inactive_user_is_rejected(self, client, factory):
        user = await factory.user(is_active=False)
        resp = await client.get("/api/v1/recurring/", headers=_auth(user))
        assert resp.status_code == 401


# ── POST /recurring/generate ─────────────────────────────────────────────────

class TestGenerateEndpoint:
    async def test_generates_three_months(self, client, factory, db, monkeypatch):
        monkeypatch.setattr(recurring_generator, "date", FixedDate)
        user = await factory.user()
        account = await factory.account(user, balance=Decimal("10000"))
        await factory.rule(user, bank_account_id=account.id)

        resp = await client.post("/api/v1/recurring/generate", headers=_auth(user))

        assert resp.status_code == 200
        assert resp.json() == {
            "success": True,
            "generated": 3,
            "message": "Se generaron 3 transacciones",
        }
        balance = (await db.execute(
            select(BankAccount.balance).where(BankAccount.id == account.id)
        )).scalar_one()
        assert balance == Decimal("8500")

    async def test_second_call_generates_nothing(self, client, factory, db, monkeypatch):
        monkeypatch.setattr(recurring_generator, "date", FixedDate)
        user = await factory.user()
        await factory.rule(user)

        await client.post("/api/v1/recurring/generate", headers=_auth(user))
        resp = await client.post("/api/v1/recurring/generate", headers=_auth(user))

        assert resp.json()["generated"] == 0
        assert resp.json()["message"] == "No hay transacciones pendientes por generar"
        count = (await db.execute(select(func.count()).select_from(Transaction))).scalar_one()
        assert count == 3

    async def test_engine_failure_returns_generic_error(self, client, factory, monkeypatch):
        async def failing_generator(db, user_id, today=None):
            raise RuntimeError("connection to db-internal:5432 refused")

        monkeypatch.setattr(recurring_router, "generate_pending_transactions", failing_generator)
        user = await factory.user()

        resp = await client.post("/api/v1/recurring/generate", headers=_auth(user))

        assert resp.status_code == 500
        assert resp.json() == {"error": "Error al generar transacciones recurrentes"}
        assert "db-internal" not in resp.text

    async def test_english_user(self, client, factory, monkeypatch):
        monkeypatch.setattr(recurring_generator, "date", FixedDate)
        user = await factory.user(locale="en")
        await factory.rule(user, start_date=date(2024, 3, 20))

        resp = await client.post("/api/v1/recurring/generate", headers=_auth(user))
        assert resp.json()["message"] == "Generated 1 transaction"


# ── CRUD ─────────────────────────────────────────────────────────────────────

class TestRuleCrud:
    async def test_create_sets_pointer_to_start_date(self, client, factory):
        user = await factory.user()
        account = await factory.account(user)

        resp = await client.post(
            "/api/v1/recurring/",
            json=_rule_payload(bank_account_id=str(account.id)),
            headers=_auth(user),
        )

        assert resp.status_code == 201
        body = resp.json()
        assert body["next_due_date"] == "2024-01-15"
        assert body["last_generated_date"] is None
        assert body["is_active"] is True
        assert body["bank_account"]["name"] == "Nómina"

    async def test_invalid_payload_uses_error_body(self, client, factory):
        user = await factory.user()
        resp = await client.post(
            "/api/v1/recurring/", json=_rule_payload(amount="0"), headers=_auth(user)
        )
        assert resp.status_code == 422
        assert resp.json()["error"] == "Datos inválidos"

    async def test_unknown_frequency_rejected(self, client, factory):
        user = await factory.user()
        resp = await client.post(
            "/api/v1/recurring/", json=_rule_payload(frequency="quarterly"), headers=_auth(user)
        )
        assert resp.status_code == 422

    async def test_currency_must_match_account(self, client, factory):
        user = await factory.user()
        account = await factory.account(user, currency="USD")
        resp = await client.post(
            "/api/v1/recurring/",
            json=_rule_payload(bank_account_id=str(account.id)),
            headers=_auth(user),
        )
        assert resp.status_code == 422
        assert resp.json() == {"error": "La moneda no coincide con la de la cuenta"}

    async def test_foreign_account_is_not_found(self, client, factory):
        user = await factory.user()
        other = await factory.user()
        account = await factory.account(other)
        resp = await client.post(
            "/api/v1/recurring/",
            json=_rule_payload(bank_account_id=str(account.id)),
            headers=_auth(user),
        )
        assert resp.status_code == 404
        assert resp.json() == {"error": "Cuenta no encontrada"}

    async def test_card_payment_needs_target(self, client, factory):
        user = await factory.user()
        account = await factory.account(user)
        resp = await client.post(
            "/api/v1/recurring/",
            json=_rule_payload(bank_account_id=str(account.id), is_card_payment=True),
            headers=_auth(user),
        )
        assert resp.status_code == 422

    async def test_end_before_start(self, client, factory):
        user = await factory.user()
        resp = await client.post(
            "/api/v1/recurring/",
            json=_rule_payload(end_date="2024-01-01"),
            headers=_auth(user),
        )
        assert resp.status_code == 422

    async def test_toggle_and_delete(self, client, factory):
        user = await factory.user()
        rule = await factory.rule(user)
        url = f"/api/v1/recurring/{rule.id}"

        resp = await client.post(f"{url}/toggle", headers=_auth(user))
        assert resp.json()["is_active"] is False

        resp = await client.delete(url, headers=_auth(user))
        assert resp.status_code == 204

        resp = await client.get(url, headers=_auth(user))
        assert resp.status_code == 404
        assert resp.json() == {"error": "Transacción recurrente no encontrada"}

    async def test_other_users_rule_is_hidden(self, client, factory):
        owner = await factory.user()
        intruder = await factory.user()
        rule = await factory.rule(owner)

        resp = await client.get(f"/api/v1/recurring/{rule.id}", headers=_auth(intruder))
        assert resp.status_code == 404

    async def test_update_resets_pointer_of_never_run_rule(self, client, factory):
        user = await factory.user()
        rule = await factory.rule(user)

        resp = await client.put(
            f"/api/v1/recurring/{rule.id}",
            json=_rule_payload(start_date="2024-02-01", frequency="weekly"),
            headers=_auth(user),
        )
        assert resp.status_code == 200
        assert resp.json()["next_due_date"] == "2024-02-01"
        assert resp.json()["frequency"] == "weekly"

    async def test_upcoming_window(self, client, factory):
        user = await factory.user()
        today = date.today()
        soon = await factory.rule(user, start_date=today + timedelta(days=2))
        await factory.rule(user, start_date=today + timedelta(days=30))

        resp = await client.get("/api/v1/recurring/upcoming", headers=_auth(user))
        assert [r["id"] for r in resp.json()] == [str(soon.id)]

    async def test_list_filters_active(self, client, factory):
        user = await factory.user()
        await factory.rule(user)
        await factory.rule(user, is_active=False)

        resp = await client.get("/api/v1/recurring/?is_active=true", headers=_auth(user))
        assert len(resp.json()) == 1


# ── Net worth and notifications ──────────────────────────────────────────────

class TestOtherEndpoints:
    async def test_net_worth(self, client, factory):
        user = await factory.user(primary_currency="MXN")
        await factory.account(user, balance=Decimal("1000"))
        await factory.card(user, balances={"MXN": "400"})

        resp = await client.get("/api/v1/networth/", headers=_auth(user))

        assert resp.status_code == 200
        body = resp.json()
        assert body["primary_currency"] == "MXN"
        assert Decimal(body["current"]["net_worth"]) == Decimal("600")
        assert len(body["history"]) == 1

    async def test_notifications_flow(self, client, factory):
        user = await factory.user()
        await factory.rule(user, start_date=utc_today() + timedelta(days=1))

        resp = await client.get("/api/v1/notifications/", headers=_auth(user))
        assert len(resp.json()) == 1

        resp = await client.get("/api/v1/notifications/count", headers=_auth(user))
        assert resp.json() == {"count": 1}

        resp = await client.post("/api/v1/notifications/mark-read", json={}, headers=_auth(user))
        assert resp.status_code == 204

        resp = await client.get("/api/v1/notifications/count", headers=_auth(user))
        assert resp.json() == {"count": 0}

    async def test_delete_single_notification(self, client, factory):
        owner = await factory.user()
        intruder = await factory.user()
        await factory.rule(owner, start_date=utc_today() + timedelta(days=1))
        [note] = (await client.get("/api/v1/notifications/", headers=_auth(owner))).json()
        url = f"/api/v1/notifications/{note['id']}"

        resp = await client.delete(url, headers=_auth(intruder))
        assert resp.status_code == 404
        assert resp.json() == {"error": "Notificación no encontrada"}

        resp = await client.delete(url, headers=_auth(owner))
        assert resp.status_code == 204

        resp = await client.delete(url, headers=_auth(owner))
        assert resp.status_code == 404

    async def test_card_reminders_are_listed(self, client, factory):
        user = await factory.user()
        today = utc_today()
        await factory.card(user, cut_off_day=today.day, payment_due_day=today.day)

        resp = await client.get("/api/v1/notifications/", headers=_auth(user))
        assert {n["type"] for n in resp.json()} == {"card_cutoff", "card_payment"}

    async def test_health(self, client):
        resp = await client.get("/health")
        assert resp.json() == {"status": "ok", "environment": "test"}
