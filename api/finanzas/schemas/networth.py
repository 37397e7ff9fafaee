from datetime import date
from decimal import Decimal

from pydantic import BaseModel


class AccountWorth(BaseModel):
    id: str
    name: str
    bank_name: str
    currency: str
    balance: Decimal
    balance_converted: Decimal


class CardBalanceWorth(BaseModel):
    currency: str
    balance: Decimal
    balance_converted: Decimal


class CardWorth(BaseModel):
    id: str
    name: str
    bank_name: str
    total_debt: Decimal
    balances: list[CardBalanceWorth]


class NetWorthCurrent(BaseModel):
    total_assets: Decimal
    total_liabilities: Decimal
    net_worth: Decimal
    accounts: list[AccountWorth]
    cards: list[CardWorth]


class NetWorthHistoryPoint(BaseModel):
    snapshot_date: date
    total_assets: Decimal
    total_liabilities: Decimal
    net_worth: Decimal

    model_config = {"from_attributes": True}


class NetWorthResponse(BaseModel):
    primary_currency: str
    current: NetWorthCurrent
    history: list[NetWorthHistoryPoint]
