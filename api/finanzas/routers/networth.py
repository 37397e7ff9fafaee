"""Net worth API endpoint."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from finanzas.core.database import get_db
from finanzas.core.deps import get_current_user
from finanzas.core.messages import t
from finanzas.models.user import User
from finanzas.schemas.networth import NetWorthResponse
from finanzas.services.networth import compute_net_worth, snapshot_history, upsert_snapshot

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/networth", tags=["networth"])


@router.get("/", response_model=NetWorthResponse)
async def get_net_worth(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Current totals in the primary currency, refreshing today's snapshot, plus history oldest first."""
    try:
        totals = await compute_net_worth(db, user)
        await upsert_snapshot(db, user, totals)
        history = await snapshot_history(db, user.id)
    except Exception:
        logger.exception("Error computing net worth for user %s", user.id)
        raise HTTPException(status_code=500, detail=t("networth_error", user.locale))

    return {
        "primary_currency": totals.primary_currency,
        "current": {
            "total_assets": totals.total_assets,
            "total_liabilities": totals.total_liabilities,
            "net_worth": totals.net_worth,
            "accounts": totals.accounts,
            "cards": totals.cards,
        },
        "history": history,
    }
