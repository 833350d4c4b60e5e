# accounting/admin.py

from django.contrib import admin

from accounting.models import (
    Account,
    AccountingPeriod,
    AuditEvent,
    Expense,
    JournalEntry,
    JournalEntryLine,
    PayrollTransaction,
)

# ============================================================
# ACCOUNT
# ============================================================


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    list_display = (
        "code",
        "name",
        "account_type",
        "normal_balance",
        "parent",
        "is_active",
    )
    list_filter = ("account_type", "is_active")
    search_fields = ("code", "name")
    ordering = ("code",)
    readonly_fields = ("created_at", "updated_at")

    fieldsets = (
        ("Account Identity", {"fields": ("code", "name", "account_type", "normal_balance", "parent")}),
        ("Status", {"fields": ("is_active", "description")}),
        ("System Fields", {"fields": ("created_at", "updated_at")}),
    )

    def has_delete_permission(self, request, obj=None):
        # Referenced accounts refuse deletion at the model level; deactivate instead.
        return False


# ============================================================
# JOURNAL ENTRY (READ-ONLY; approve/reject through the API)
# ============================================================


class JournalEntryLineInline(admin.TabularInline):
    model = JournalEntryLine
    extra = 0
    fields = ("line_number", "account", "debit", "credit", "description")
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(JournalEntry)
class JournalEntryAdmin(admin.ModelAdmin):
    list_display = (
        "entry_number",
        "entry_date",
        "description",
        "reference_type",
        "reference_id",
        "status",
        "total_debit",
        "total_credit",
    )
    list_filter = ("status", "reference_type", "entry_date")
    search_fields = ("entry_number", "description", "reference_id")
    ordering = ("-entry_date", "-id")
    inlines = [JournalEntryLineInline]

    readonly_fields = (
        "entry_number",
        "entry_date",
        "description",
        "reference_type",
        "reference_id",
        "status",
        "total_debit",
        "total_credit",
        "created_by",
        "approved_by",
        "approved_at",
        "created_at",
    )

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# ============================================================
# PERIODS
# ============================================================


@admin.register(AccountingPeriod)
class AccountingPeriodAdmin(admin.ModelAdmin):
    list_display = ("name", "start_date", "end_date", "is_closed", "closed_by", "closed_at")
    list_filter = ("is_closed", "year")
    ordering = ("-year", "-month")
    readonly_fields = (
        "name",
        "start_date",
        "end_date",
        "is_closed",
        "closed_by",
        "closed_at",
        "closing_notes",
        "reopened_by",
        "reopened_at",
    )

    def has_change_permission(self, request, obj=None):
        return False


# ============================================================
# SOURCE DOCUMENTS
# ============================================================


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    list_display = ("expense_code", "category", "amount", "expense_date", "status")
    list_filter = ("status", "category")
    search_fields = ("expense_code", "description")


@admin.register(PayrollTransaction)
class PayrollTransactionAdmin(admin.ModelAdmin):
    list_display = (
        "transaction_code",
        "employee_id",
        "pay_period",
        "gross_salary",
        "net_salary",
        "status",
        "payment_date",
    )
    list_filter = ("status", "pay_period")
    search_fields = ("transaction_code", "employee_id")


# ============================================================
# AUDIT (STRICTLY IMMUTABLE)
# ============================================================


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ("created_at", "action", "entity_type", "entity_id", "actor_id", "severity", "dispatched_at")
    list_filter = ("severity", "action", "entity_type")
    search_fields = ("action", "entity_id", "actor_id")
    ordering = ("-created_at",)

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
