import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from finanzas.services.currencies import SUPPORTED_CURRENCIES
from finanzas.services.schedule import Frequency


class LinkedEntity(BaseModel):
    """Short form of an account or card shown next to a rule."""
    id: uuid.UUID
    name: str
    color: str | None

    model_config = {"from_attributes": True}


class RecurringTransactionBase(BaseModel):
    type: Literal["income", "expense"]
    amount: Decimal = Field(gt=0, max_digits=14, decimal_places=2)
    currency: str
    category: str = Field(min_length=1, max_length=30)
    description: str | None = Field(default=None, max_length=100)
    bank_account_id: uuid.UUID | None = None
    credit_card_id: uuid.UUID | None = None
    is_card_payment: bool = False
    target_card_id: uuid.UUID | None = None
    frequency: Frequency
    start_date: date
    end_date: date | None = None

    @field_validator("currency")
    @classmethod
    def _supported_currency(cls, v: str) -> str:
        v = v.upper()
        if v not in SUPPORTED_CURRENCIES:
            raise ValueError(f"Unsupported currency: {v}")
        return v


class RecurringTransactionCreate(RecurringTransactionBase):
    pass


class RecurringTransactionUpdate(RecurringTransactionBase):
    """Full replacement of payload and schedule; pointers are managed server-side."""


class RecurringTransactionResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    type: str
    amount: Decimal
    currency: str
    category: str
    description: str | None
    bank_account_id: uuid.UUID | None
    credit_card_id: uuid.UUID | None
    is_card_payment: bool
    target_card_id: uuid.UUID | None
    frequency: str
    start_date: date
    end_date: date | None
    next_due_date: date
    last_generated_date: date | None
    is_active: bool
    created_at: datetime
    bank_account: LinkedEntity | None = None
    credit_card: LinkedEntity | None = None
    target_card: LinkedEntity | None = None

    model_config = {"from_attributes": True}


class GenerateResponse(BaseModel):
    success: bool = True
    generated: int
    message: str
