from finanzas.models.user import User
from finanzas.models.account import BankAccount, CreditCard, CreditCardBalance, Transaction
from finanzas.models.recurring import RecurringTransaction
from finanzas.models.networth import NetWorthSnapshot
from finanzas.models.notification import Notification

__all__ = [
    "BankAccount",
    "CreditCard",
    "CreditCardBalance",
    "NetWorthSnapshot",
    "Notification",
    "RecurringTransaction",
    "Transaction",
    "User",
]
