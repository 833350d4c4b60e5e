# billing/apps.py

"""
BILLING APP CONFIG

Student billing module:
- School years, fee schedules and discount configuration
- One ledger per (student, school year): charges, discounts, payments
- Receipt (OR) numbers shared with the legacy payment log
"""

from django.apps import AppConfig


class BillingConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "billing"
    verbose_name = "Student Billing"
