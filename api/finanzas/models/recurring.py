import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Boolean, CheckConstraint, Date, DateTime, ForeignKey, Numeric, String, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from finanzas.core.database import Base
from finanzas.models.account import BankAccount, CreditCard


class RecurringTransaction(Base):
    """A recurring rule. The generator is the only writer of the schedule pointers."""
    __tablename__ = "recurring_transactions"
    __table_args__ = (
        CheckConstraint("next_due_date >= start_date", name="ck_recurring_next_due_after_start"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), index=True
    )

    # Payload copied into each generated transaction
    type: Mapped[str] = mapped_column(String(10))  # income | expense
    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2))
    currency: Mapped[str] = mapped_column(String(3))
    category: Mapped[str] = mapped_column(String(30))
    description: Mapped[str | None] = mapped_column(String(100))
    bank_account_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("bank_accounts.id", ondelete="SET NULL"), nullable=True
    )
    credit_card_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("credit_cards.id", ondelete="SET NULL"), nullable=True
    )
    is_card_payment: Mapped[bool] = mapped_column(Boolean, default=False)
    target_card_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("credit_cards.id", ondelete="SET NULL"), nullable=True
    )

    # Schedule
    frequency: Mapped[str] = mapped_column(String(20))  # daily | weekly | biweekly | monthly | yearly
    start_date: Mapped[date] = mapped_column(Date)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    next_due_date: Mapped[date] = mapped_column(Date, index=True)
    last_generated_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    bank_account: Mapped["BankAccount | None"] = relationship(foreign_keys=[bank_account_id])
    credit_card: Mapped["CreditCard | None"] = relationship(foreign_keys=[credit_card_id])
    target_card: Mapped["CreditCard | None"] = relationship(foreign_keys=[target_card_id])
