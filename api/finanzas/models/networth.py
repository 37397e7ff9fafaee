import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import JSON, Date, DateTime, ForeignKey, Numeric, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from finanzas.core.database import Base


class NetWorthSnapshot(Base):
    """One row per user per day, refreshed in place on later requests that day."""
    __tablename__ = "net_worth_snapshots"
    __table_args__ = (UniqueConstraint("user_id", "snapshot_date"),)

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    snapshot_date: Mapped[date] = mapped_column(Date, index=True)
    total_assets: Mapped[Decimal] = mapped_column(Numeric(16, 2))
    total_liabilities: Mapped[Decimal] = mapped_column(Numeric(16, 2))
    net_worth: Mapped[Decimal] = mapped_column(Numeric(16, 2))
    exchange_rate: Mapped[Decimal] = mapped_column(Numeric(14, 4))  # USD → primary currency
    breakdown: Mapped[dict] = mapped_column(JSON, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
