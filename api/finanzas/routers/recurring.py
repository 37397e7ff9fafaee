import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from finanzas.core.database import get_db
from finanzas.core.deps import get_current_user
from finanzas.core.messages import generated_message, t
from finanzas.models.recurring import RecurringTransaction
from finanzas.models.user import User
from finanzas.schemas.recurring import (
    GenerateResponse,
    RecurringTransactionCreate,
    RecurringTransactionResponse,
    RecurringTransactionUpdate,
)
from finanzas.services import recurring as rules
from finanzas.services.recurring_generator import generate_pending_transactions

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/recurring", tags=["recurring"])


async def _get_owned_rule(
    recurring_id: uuid.UUID, user: User, db: AsyncSession
) -> RecurringTransaction:
    rule = await rules.get_rule(db, user.id, recurring_id)
    if rule is None:
        raise HTTPException(status_code=404, detail=t("recurring_not_found", user.locale))
    return rule


def _validation_error(exc: rules.RuleValidationError, user: User) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=t(exc.message_key, user.locale))


@router.post("/generate", response_model=GenerateResponse)
async def generate_recurring(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Materialise every due occurrence of the user's active rules."""
    # The generator commits and rolls back per rule, which expires loaded objects
    user_id, locale = user.id, user.locale
    try:
        generated = await generate_pending_transactions(db, user_id)
    except Exception:
        logger.exception("Error generating recurring transactions for user %s", user_id)
        raise HTTPException(status_code=500, detail=t("generate_error", locale))

    return GenerateResponse(
        generated=generated,
        message=generated_message(generated, locale),
    )


@router.get("/", response_model=list[RecurringTransactionResponse])
async def list_recurring(
    is_active: bool | None = Query(default=None),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List the user's rules, soonest next occurrence first."""
    return await rules.list_rules(db, user.id, is_active=is_active)


@router.get("/upcoming", response_model=list[RecurringTransactionResponse])
async def upcoming_recurring(
    days: int = Query(default=7, ge=0, le=365),
    limit: int = Query(default=5, ge=1, le=100),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await rules.upcoming_rules(db, user.id, days=days, limit=limit)


@router.post("/", response_model=RecurringTransactionResponse, status_code=201)
async def create_recurring(
    payload: RecurringTransactionCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    try:
        return await rules.create_rule(db, user.id, payload)
    except rules.RuleValidationError as exc:
        raise _validation_error(exc, user)


@router.get("/{recurring_id}", response_model=RecurringTransactionResponse)
async def get_recurring(
    recurring_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await _get_owned_rule(recurring_id, user, db)


@router.put("/{recurring_id}", response_model=RecurringTransactionResponse)
async def update_recurring(
    recurring_id: uuid.UUID,
    payload: RecurringTransactionUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    rule = await _get_owned_rule(recurring_id, user, db)
    try:
        return await rules.update_rule(db, rule, payload)
    except rules.RuleValidationError as exc:
        raise _validation_error(exc, user)


@router.post("/{recurring_id}/toggle", response_model=RecurringTransactionResponse)
async def toggle_recurring(
    recurring_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Pause or resume a rule."""
    rule = await _get_owned_rule(recurring_id, user, db)
    return await rules.toggle_rule(db, rule)


@router.delete("/{recurring_id}", status_code=204)
async def delete_recurring(
    recurring_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    rule = await _get_owned_rule(recurring_id, user, db)
    await rules.delete_rule(db, rule)
