# billing/services/providers.py

"""
BILLING COLLABORATORS

The ledger engine consumes four collaborators through small interfaces:

- FeeScheduleProvider     : grade level -> tuition / misc / other amounts
- DiscountStore           : discount id -> discount configuration
- SchoolYearResolver      : the single school year open for billing
- StudentGradeResolver    : student id -> current grade level (optional)

Each has a database-backed default. Deployments swap them with dotted
paths in settings (BILLING_FEE_SCHEDULE_PROVIDER, BILLING_DISCOUNT_STORE,
BILLING_SCHOOL_YEAR_RESOLVER, BILLING_STUDENT_GRADE_RESOLVER).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

from django.conf import settings
from django.utils.module_loading import import_string

from billing.models.discount import Discount
from billing.models.fee_schedule import FeeSchedule
from billing.models.school_year import SchoolYear

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FeeBreakdown:
    grade_level: int
    tuition: Decimal
    misc: Decimal
    other: Decimal

    @property
    def total(self) -> Decimal:
        return self.tuition + self.misc + self.other


class FeeScheduleProvider:
    def get_fees(self, grade_level: int) -> FeeBreakdown | None:
        raise NotImplementedError


class DiscountStore:
    def get_discount(self, discount_id) -> Discount | None:
        raise NotImplementedError


class SchoolYearResolver:
    def get_active_school_year(self) -> str | None:
        raise NotImplementedError


class StudentGradeResolver:
    def get_grade_level(self, student_id: str) -> int | None:
        raise NotImplementedError


class ModelFeeScheduleProvider(FeeScheduleProvider):
    def get_fees(self, grade_level: int) -> FeeBreakdown | None:
        schedule = FeeSchedule.objects.filter(grade_level=grade_level, is_active=True).first()
        if schedule is None:
            return None
        return FeeBreakdown(
            grade_level=schedule.grade_level,
            tuition=schedule.tuition_fee,
            misc=schedule.misc_fee,
            other=schedule.other_fee,
        )


class ModelDiscountStore(DiscountStore):
    def get_discount(self, discount_id) -> Discount | None:
        try:
            return Discount.objects.filter(pk=discount_id).first()
        except (ValueError, TypeError):
            return None


class ModelSchoolYearResolver(SchoolYearResolver):
    def get_active_school_year(self) -> str | None:
        names = list(
            SchoolYear.objects.filter(is_active=True, is_open=True)
            .order_by("-name")
            .values_list("name", flat=True)[:2]
        )
        if not names:
            return None
        if len(names) > 1:
            logger.warning(
                "More than one school year is active and open; using the latest",
                extra={"school_years": names},
            )
        return names[0]


class NullStudentGradeResolver(StudentGradeResolver):
    def get_grade_level(self, student_id: str) -> int | None:
        return None


DEFAULTS = {
    "BILLING_FEE_SCHEDULE_PROVIDER": "billing.services.providers.ModelFeeScheduleProvider",
    "BILLING_DISCOUNT_STORE": "billing.services.providers.ModelDiscountStore",
    "BILLING_SCHOOL_YEAR_RESOLVER": "billing.services.providers.ModelSchoolYearResolver",
    "BILLING_STUDENT_GRADE_RESOLVER": "billing.services.providers.NullStudentGradeResolver",
}


def _load(setting_name: str):
    path = getattr(settings, setting_name, "") or DEFAULTS[setting_name]
    return import_string(path)()


def get_fee_schedule_provider() -> FeeScheduleProvider:
    return _load("BILLING_FEE_SCHEDULE_PROVIDER")


def get_discount_store() -> DiscountStore:
    return _load("BILLING_DISCOUNT_STORE")


def get_school_year_resolver() -> SchoolYearResolver:
    return _load("BILLING_SCHOOL_YEAR_RESOLVER")


def get_student_grade_resolver() -> StudentGradeResolver:
    return _load("BILLING_STUDENT_GRADE_RESOLVER")
