# accounting/api/filters.py

import django_filters

from accounting.models.journal import JournalEntry


class JournalEntryFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=JournalEntry.STATUS_CHOICES)
    reference_type = django_filters.ChoiceFilter(choices=JournalEntry.REFERENCE_TYPES)
    reference_id = django_filters.CharFilter()
    date_from = django_filters.DateFilter(field_name="entry_date", lookup_expr="gte")
    date_to = django_filters.DateFilter(field_name="entry_date", lookup_expr="lte")

    class Meta:
        model = JournalEntry
        fields = ["status", "reference_type", "reference_id", "date_from", "date_to"]
