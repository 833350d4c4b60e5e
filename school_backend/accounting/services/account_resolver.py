# PATH: accounting/services/account_resolver.py

"""
ACCOUNT RESOLVER (AUTHORITATIVE)

This module answers ONE question:
"Which account should be used for this purpose?"

Semantic keys (CASH, TUITION_REVENUE, ...) map to account codes. The map
can be overridden per deployment with the ACCOUNTING_WELL_KNOWN_ACCOUNTS
setting (partial dicts are merged over the defaults).

Design goals:
- deterministic
- hard-fail on missing setup (so we don't post to wrong accounts)
- missing setup is logged at CRITICAL: it is never transient
"""

from __future__ import annotations

import logging

from django.conf import settings

from accounting.models.account import Account
from accounting.services.exceptions import AccountConfigurationError

logger = logging.getLogger(__name__)

# ------------------------------------------------------------
# SEMANTIC CODES
# ------------------------------------------------------------

DEFAULT_CODES = {
    "CASH": "1000",
    "ACCRUED_PAYROLL_TAXES": "2100",
    "TUITION_REVENUE": "4000",
    "SALARIES_EXPENSE": "5000",
    "OTHER_EXPENSES": "5100",
    "UTILITIES_EXPENSE": "5200",
    "SUPPLIES_EXPENSE": "5300",
    "RENT_EXPENSE": "5400",
    "MAINTENANCE_EXPENSE": "5500",
    "OFFICE_EXPENSE": "5600",
}

# Ordered: first keyword hit wins.
EXPENSE_CATEGORY_KEYWORDS = [
    (("salary", "wage", "payroll"), "SALARIES_EXPENSE"),
    (("utility", "utilities", "electric", "water"), "UTILITIES_EXPENSE"),
    (("supply", "supplies", "material"), "SUPPLIES_EXPENSE"),
    (("rent", "lease"), "RENT_EXPENSE"),
    (("maintenance", "repair"), "MAINTENANCE_EXPENSE"),
    (("office",), "OFFICE_EXPENSE"),
]


def well_known_codes() -> dict[str, str]:
    overrides = getattr(settings, "ACCOUNTING_WELL_KNOWN_ACCOUNTS", None) or {}
    codes = dict(DEFAULT_CODES)
    codes.update({str(k).upper(): str(v).strip() for k, v in overrides.items()})
    return codes


def _resolve_code(semantic_key: str) -> str:
    key = (semantic_key or "").strip().upper()
    if not key:
        raise AccountConfigurationError("semantic_key is required")

    code = well_known_codes().get(key)
    if not code:
        logger.critical(
            "No account code configured for semantic key",
            extra={"semantic_key": key},
        )
        raise AccountConfigurationError(
            f"No account code configured for {key}. "
            "Check ACCOUNTING_WELL_KNOWN_ACCOUNTS."
        )
    return code


def get_account_for(semantic_key: str) -> Account:
    code = _resolve_code(semantic_key)

    account = Account.objects.filter(code=code, is_active=True).first()
    if account is None:
        logger.critical(
            "Well-known account missing or inactive",
            extra={"semantic_key": semantic_key, "account_code": code},
        )
        raise AccountConfigurationError(
            f"{semantic_key} account (code={code}) not found or inactive. "
            "Run the seed_school_chart command."
        )
    return account


def get_cash_account() -> Account:
    return get_account_for("CASH")


def get_tuition_revenue_account() -> Account:
    return get_account_for("TUITION_REVENUE")


def get_salaries_expense_account() -> Account:
    return get_account_for("SALARIES_EXPENSE")


def get_accrued_payroll_taxes_account() -> Account:
    return get_account_for("ACCRUED_PAYROLL_TAXES")


def get_other_expenses_account() -> Account:
    return get_account_for("OTHER_EXPENSES")


def semantic_key_for_expense_category(category: str) -> str:
    text = (category or "").strip().lower()
    for keywords, key in EXPENSE_CATEGORY_KEYWORDS:
        if any(word in text for word in keywords):
            return key
    return "OTHER_EXPENSES"


def get_expense_account_for_category(category: str) -> Account:
    """
    Map a free-text expense category to an expense account.

    A mapped account that is not set up falls back to Other Expenses;
    only a missing Other Expenses account is a configuration error.
    """
    key = semantic_key_for_expense_category(category)
    if key == "OTHER_EXPENSES":
        return get_other_expenses_account()

    code = well_known_codes().get(key)
    account = Account.objects.filter(code=code, is_active=True).first() if code else None
    if account is not None:
        return account

    logger.warning(
        "Expense category account missing; using Other Expenses",
        extra={"category": category, "semantic_key": key, "account_code": code},
    )
    return get_other_expenses_account()
