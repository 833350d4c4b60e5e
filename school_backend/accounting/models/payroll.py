# accounting/models/payroll.py

from __future__ import annotations

from decimal import Decimal

from django.db import models
from django.db.models import Q


class PayrollTransaction(models.Model):
    """
    One employee's pay for one pay period.

    Only PAID transactions are posted. Amount fields come from the payroll
    module already computed.
    """

    STATUS_PENDING = "PENDING"
    STATUS_APPROVED = "APPROVED"
    STATUS_PAID = "PAID"
    STATUS_CANCELLED = "CANCELLED"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_APPROVED, "Approved"),
        (STATUS_PAID, "Paid"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    transaction_code = models.CharField(max_length=40, unique=True)
    employee_id = models.CharField(max_length=64)
    pay_period = models.CharField(max_length=50, blank=True, default="")

    gross_salary = models.DecimalField(max_digits=14, decimal_places=2)
    total_deductions = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )
    net_salary = models.DecimalField(max_digits=14, decimal_places=2)
    total_company_contribution = models.DecimalField(
        max_digits=14, decimal_places=2, default=Decimal("0.00")
    )

    status = models.CharField(
        max_length=10,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING,
    )

    payment_date = models.DateField(blank=True, null=True)
    batch_timestamp = models.CharField(max_length=40, blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Payroll Transaction"
        verbose_name_plural = "Payroll Transactions"
        indexes = [
            models.Index(fields=["status"]),
            models.Index(fields=["batch_timestamp"]),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(gross_salary__gte=0)
                & Q(total_deductions__gte=0)
                & Q(total_company_contribution__gte=0),
                name="chk_payroll_amounts_non_negative",
            ),
        ]

    def __str__(self):
        return f"{self.transaction_code} ({self.employee_id}) {self.status}"
