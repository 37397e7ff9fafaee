"""User-facing strings, keyed by locale.

Only ``es`` and ``en`` are shipped. Unknown locales fall back to
``settings.default_locale``.
"""
from finanzas.core.config import settings

_MESSAGES: dict[str, dict[str, str]] = {
    "es": {
        "unauthorized": "No autorizado",
        "internal_error": "Ocurrió un error inesperado",
        "invalid_data": "Datos inválidos",
        "generate_error": "Error al generar transacciones recurrentes",
        "generate_none": "No hay transacciones pendientes por generar",
        "generate_one": "Se generó {count} transacción",
        "generate_many": "Se generaron {count} transacciones",
        "recurring_not_found": "Transacción recurrente no encontrada",
        "account_not_found": "Cuenta no encontrada",
        "card_not_found": "Tarjeta no encontrada",
        "target_card_not_found": "Tarjeta destino no encontrada",
        "account_and_card": "No puedes especificar cuenta y tarjeta al mismo tiempo",
        "card_payment_requirements": "El pago de tarjeta requiere cuenta origen y tarjeta destino",
        "card_payment_same_card": "La tarjeta destino debe ser distinta de la tarjeta origen",
        "card_payment_expense": "El pago de tarjeta debe registrarse como gasto",
        "currency_mismatch": "La moneda no coincide con la de la cuenta",
        "end_before_start": "La fecha de fin no puede ser anterior a la de inicio",
        "networth_error": "Error al obtener patrimonio neto",
        "notification_not_found": "Notificación no encontrada",
        "recurring_upcoming_title": "Pago recurrente próximo",
        "card_cutoff_title": "Fecha de corte próxima",
        "card_cutoff_message": "{when} es la fecha de corte de {card}",
        "card_payment_title": "Fecha de pago próxima",
        "card_payment_message": "{when} vence el pago de {card}",
        "today": "Hoy",
        "tomorrow": "Mañana",
        "in_days": "En {days} días",
        "income": "ingreso",
        "expense": "gasto",
    },
    "en": {
        "unauthorized": "Not authorized",
        "internal_error": "An unexpected error occurred",
        "invalid_data": "Invalid data",
        "generate_error": "Error generating recurring transactions",
        "generate_none": "No pending transactions to generate",
        "generate_one": "Generated {count} transaction",
        "generate_many": "Generated {count} transactions",
        "recurring_not_found": "Recurring transaction not found",
        "account_not_found": "Account not found",
        "card_not_found": "Card not found",
        "target_card_not_found": "Target card not found",
        "account_and_card": "You cannot set both an account and a card",
        "card_payment_requirements": "A card payment needs a source and a target card",
        "card_payment_same_card": "The target card must differ from the source card",
        "card_payment_expense": "A card payment must be an expense",
        "currency_mismatch": "Currency does not match the account currency",
        "end_before_start": "End date cannot be before start date",
        "networth_error": "Error fetching net worth",
        "notification_not_found": "Notification not found",
        "recurring_upcoming_title": "Upcoming recurring payment",
        "card_cutoff_title": "Upcoming cut-off date",
        "card_cutoff_message": "{when}: cut-off date for {card}",
        "card_payment_title": "Upcoming payment date",
        "card_payment_message": "{when}: payment due for {card}",
        "today": "Today",
        "tomorrow": "Tomorrow",
        "in_days": "In {days} days",
        "income": "income",
        "expense": "expense",
    },
}


def resolve_locale(locale: str | None) -> str:
    if locale:
        lang = locale.split("-")[0].split("_")[0].lower()
        if lang in _MESSAGES:
            return lang
    return settings.default_locale if settings.default_locale in _MESSAGES else "es"


def t(key: str, locale: str | None = None, **kwargs) -> str:
    text = _MESSAGES[resolve_locale(locale)][key]
    return text.format(**kwargs) if kwargs else text


def generated_message(count: int, locale: str | None = None) -> str:
    """Pluralised summary for a generation run."""
    if count == 0:
        return t("generate_none", locale)
    if count == 1:
        return t("generate_one", locale, count=count)
    return t("generate_many", locale, count=count)


def days_until_text(days: int, locale: str | None = None) -> str:
    if days == 0:
        return t("today", locale)
    if days == 1:
        return t("tomorrow", locale)
    return t("in_days", locale, days=days)
