# billing/admin.py

from django.contrib import admin

from billing.models import (
    Discount,
    FeeSchedule,
    LedgerCharge,
    LedgerPayment,
    LegacyPayment,
    ReceiptNumber,
    SchoolYear,
    StudentLedger,
)

# ============================================================
# MASTER DATA
# ============================================================


@admin.register(SchoolYear)
class SchoolYearAdmin(admin.ModelAdmin):
    list_display = ("name", "is_active", "is_open", "created_at")
    list_filter = ("is_active", "is_open")
    search_fields = ("name",)
    ordering = ("-name",)


@admin.register(FeeSchedule)
class FeeScheduleAdmin(admin.ModelAdmin):
    list_display = ("grade_level", "tuition_fee", "misc_fee", "other_fee", "total_fee", "is_active")
    list_filter = ("is_active",)
    ordering = ("grade_level",)
    readonly_fields = ("created_at", "updated_at")


@admin.register(Discount)
class DiscountAdmin(admin.ModelAdmin):
    list_display = ("discount_name", "discount_type", "rate_or_value", "is_percentage", "is_active")
    list_filter = ("discount_type", "is_percentage", "is_active")
    search_fields = ("discount_name", "discount_type")
    readonly_fields = ("created_at", "updated_at")


# ============================================================
# STUDENT LEDGER (TOTALS ARE DERIVED, NEVER EDITED)
# ============================================================


class LedgerChargeInline(admin.TabularInline):
    model = LedgerCharge
    extra = 0
    fields = ("charge_type", "description", "amount", "discount", "created_at")
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


class LedgerPaymentInline(admin.TabularInline):
    model = LedgerPayment
    extra = 0
    fields = ("or_number", "amount", "payment_method", "processed_by", "created_at")
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(StudentLedger)
class StudentLedgerAdmin(admin.ModelAdmin):
    list_display = (
        "student_id",
        "school_year",
        "grade_level",
        "total_charges",
        "total_payments",
        "balance",
        "status",
    )
    list_filter = ("school_year", "status", "grade_level")
    search_fields = ("student_id",)
    ordering = ("-school_year", "student_id")
    inlines = [LedgerChargeInline, LedgerPaymentInline]

    readonly_fields = (
        "student_id",
        "school_year",
        "grade_level",
        "total_charges",
        "total_payments",
        "balance",
        "status",
        "created_at",
        "updated_at",
    )

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# ============================================================
# RECEIPTS (STRICTLY IMMUTABLE)
# ============================================================


@admin.register(LegacyPayment)
class LegacyPaymentAdmin(admin.ModelAdmin):
    list_display = ("or_number", "student_id", "amount", "payment_method", "school_year", "created_at")
    search_fields = ("or_number", "student_id")
    list_filter = ("payment_method", "school_year")
    ordering = ("-created_at",)

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(ReceiptNumber)
class ReceiptNumberAdmin(admin.ModelAdmin):
    list_display = ("or_number", "source", "created_at")
    list_filter = ("source",)
    search_fields = ("or_number",)

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
