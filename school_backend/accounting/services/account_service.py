# accounting/services/account_service.py

"""
ACCOUNT REGISTRY

Read access to the school's Chart of Accounts.

RULES:
- READ-ONLY
- Inactive accounts are hidden unless explicitly requested
- Lookups that find nothing raise AccountNotFoundError
"""

from __future__ import annotations

import logging

from accounting.models.account import Account
from accounting.services.exceptions import AccountNotFoundError

logger = logging.getLogger(__name__)


def list_accounts(*, include_inactive: bool = False):
    qs = Account.objects.select_related("parent").order_by("code")
    if not include_inactive:
        qs = qs.filter(is_active=True)
    return qs


def list_accounts_by_type(account_type: str, *, include_inactive: bool = False):
    return list_accounts(include_inactive=include_inactive).filter(
        account_type=account_type
    )


def get_account_by_code(code: str) -> Account:
    code = (code or "").strip()
    try:
        return Account.objects.get(code=code)
    except Account.DoesNotExist as exc:
        logger.info("Account lookup by code failed", extra={"account_code": code})
        raise AccountNotFoundError(f"Account with code={code!r} not found") from exc


def get_account_by_id(account_id: int) -> Account:
    try:
        return Account.objects.get(pk=account_id)
    except (Account.DoesNotExist, ValueError, TypeError) as exc:
        logger.info("Account lookup by id failed", extra={"account_id": account_id})
        raise AccountNotFoundError(f"Account with id={account_id!r} not found") from exc


def get_children(account: Account, *, include_inactive: bool = False):
    qs = account.children.order_by("code")
    if not include_inactive:
        qs = qs.filter(is_active=True)
    return qs
