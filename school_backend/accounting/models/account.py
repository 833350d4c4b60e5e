# accounting/models/account.py

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q


class Account(models.Model):
    """
    A single account in the school's Chart of Accounts.

    Guarantees:
    - Account codes are globally unique and normalized (trimmed)
    - normal_balance defaults from account_type and is frozen once
      any journal line references the account
    - Referenced accounts are never hard-deleted (deactivate instead)
    - The parent chain never loops back onto itself
    """

    ASSET = "ASSET"
    LIABILITY = "LIABILITY"
    EQUITY = "EQUITY"
    REVENUE = "REVENUE"
    EXPENSE = "EXPENSE"

    ACCOUNT_TYPES = [
        (ASSET, "Asset"),
        (LIABILITY, "Liability"),
        (EQUITY, "Equity"),
        (REVENUE, "Revenue"),
        (EXPENSE, "Expense"),
    ]

    DEBIT = "DEBIT"
    CREDIT = "CREDIT"

    NORMAL_BALANCES = [
        (DEBIT, "Debit"),
        (CREDIT, "Credit"),
    ]

    DEBIT_NORMAL_TYPES = frozenset({ASSET, EXPENSE})

    code = models.CharField(max_length=20, unique=True)
    name = models.CharField(max_length=150)

    account_type = models.CharField(
        max_length=20,
        choices=ACCOUNT_TYPES,
    )

    normal_balance = models.CharField(
        max_length=6,
        choices=NORMAL_BALANCES,
        blank=True,
        help_text="Defaults from account_type when left blank",
    )

    parent = models.ForeignKey(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="children",
    )

    description = models.TextField(blank=True, default="")
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["code"]
        verbose_name = "Account"
        verbose_name_plural = "Accounts"
        indexes = [
            models.Index(fields=["account_type"]),
            models.Index(fields=["is_active"]),
            models.Index(fields=["parent"]),
        ]
        constraints = [
            models.CheckConstraint(
                condition=~Q(code=""),
                name="chk_account_code_not_blank",
            ),
            models.CheckConstraint(
                condition=~Q(name=""),
                name="chk_account_name_not_blank",
            ),
        ]

    def __str__(self):
        return f"{self.code} – {self.name}"

    @classmethod
    def default_normal_balance(cls, account_type: str) -> str:
        return cls.DEBIT if account_type in cls.DEBIT_NORMAL_TYPES else cls.CREDIT

    @property
    def is_debit_normal(self) -> bool:
        return self.normal_balance == self.DEBIT

    def _ancestor_ids(self) -> set[int]:
        seen: set[int] = set()
        node = self.parent
        while node is not None and node.pk not in seen:
            seen.add(node.pk)
            node = node.parent
        return seen

    def clean(self):
        self.code = (self.code or "").strip()
        self.name = (self.name or "").strip()

        if not self.code:
            raise ValidationError("Account code is required")
        if not self.name:
            raise ValidationError("Account name is required")

        if not self.normal_balance and self.account_type:
            self.normal_balance = self.default_normal_balance(self.account_type)

        if self.parent_id is not None and self.pk is not None:
            if self.parent_id == self.pk or self.pk in self._ancestor_ids():
                raise ValidationError(
                    {"parent": "An account cannot be its own ancestor."}
                )

        if self.pk is not None:
            previous = (
                type(self)
                .objects.filter(pk=self.pk)
                .values_list("normal_balance", flat=True)
                .first()
            )
            if (
                previous
                and previous != self.normal_balance
                and self.journal_lines.exists()
            ):
                raise ValidationError(
                    {
                        "normal_balance": (
                            "Normal balance cannot change once journal lines "
                            "reference this account."
                        )
                    }
                )

    def save(self, *args, **kwargs):
        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        if self.pk and self.journal_lines.exists():
            raise ValidationError(
                "Accounts referenced by journal lines cannot be deleted; deactivate instead"
            )
        return super().delete(*args, **kwargs)
