# accounting/api/views/journal_entries.py

"""
PATH: accounting/api/views/journal_entries.py

JOURNAL ENTRY API

GET  /api/accounting/journal-entries/                 list (filters: status, reference_type, dates)
GET  /api/accounting/journal-entries/<id>/            one entry with lines
GET  /api/accounting/journal-entries/pending/         drafts awaiting review
POST /api/accounting/journal-entries/manual/          create a DRAFT manual entry
POST /api/accounting/journal-entries/<id>/approve/    DRAFT -> POSTED
POST /api/accounting/journal-entries/<id>/reject/     DRAFT -> REJECTED (reason required)

Security:
- viewing requires accounting.view_journalentry
- creating requires accounting.add_journalentry
- approving / rejecting requires accounting.change_journalentry
"""

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.errors import service_error_response
from accounting.api.filters import JournalEntryFilter
from accounting.api.serializers import (
    ApproveEntrySerializer,
    JournalEntrySerializer,
    ManualEntryCreateSerializer,
    RejectEntrySerializer,
)
from accounting.services.exceptions import AccountingServiceError
from accounting.services.journal_entry_service import get_entry, list_entries
from accounting.services.manual_entry_service import (
    approve_entry,
    create_manual_entry,
    list_pending_entries,
    reject_entry,
)

JOURNAL_VIEW_PERMISSION = "accounting.view_journalentry"
JOURNAL_CREATE_PERMISSION = "accounting.add_journalentry"
JOURNAL_APPROVE_PERMISSION = "accounting.change_journalentry"


def _forbidden(message: str) -> Response:
    return Response({"detail": message}, status=status.HTTP_403_FORBIDDEN)


class JournalEntryListView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = JournalEntrySerializer
    filterset_class = JournalEntryFilter

    def get_queryset(self):
        return list_entries().order_by("-entry_date", "-id")

    @extend_schema(tags=["accounting"], responses=JournalEntrySerializer(many=True))
    def get(self, request, *args, **kwargs):
        if not request.user.has_perm(JOURNAL_VIEW_PERMISSION):
            return _forbidden("You do not have permission to view journal entries.")

        qs = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(JournalEntrySerializer(page, many=True).data)
        return Response(JournalEntrySerializer(qs, many=True).data, status=status.HTTP_200_OK)


class JournalEntryDetailView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = JournalEntrySerializer

    @extend_schema(tags=["accounting"], responses={200: JournalEntrySerializer, 404: dict})
    def get(self, request, pk, *args, **kwargs):
        if not request.user.has_perm(JOURNAL_VIEW_PERMISSION):
            return _forbidden("You do not have permission to view journal entries.")

        try:
            entry = get_entry(pk)
        except AccountingServiceError as exc:
            return service_error_response(exc)
        return Response(JournalEntrySerializer(entry).data, status=status.HTTP_200_OK)


class PendingJournalEntriesView(GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["accounting"], responses={200: dict})
    def get(self, request, *args, **kwargs):
        if not request.user.has_perm(JOURNAL_VIEW_PERMISSION):
            return _forbidden("You do not have permission to view journal entries.")

        pending = list_pending_entries()
        return Response({"count": len(pending), "results": pending}, status=status.HTTP_200_OK)


class ManualJournalEntryCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = ManualEntryCreateSerializer

    @extend_schema(
        tags=["accounting"],
        request=ManualEntryCreateSerializer,
        responses={201: JournalEntrySerializer, 400: dict, 403: dict, 409: dict},
    )
    def post(self, request, *args, **kwargs):
        if not request.user.has_perm(JOURNAL_CREATE_PERMISSION):
            return _forbidden("You do not have permission to create journal entries.")

        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            entry = create_manual_entry(
                entry_date=data["entry_date"],
                description=data["description"],
                lines=[dict(line) for line in data["lines"]],
                actor_id=request.user.pk,
                notes=data.get("notes"),
            )
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(
            JournalEntrySerializer(get_entry(entry.pk)).data,
            status=status.HTTP_201_CREATED,
        )


class ApproveJournalEntryView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = ApproveEntrySerializer

    @extend_schema(
        tags=["accounting"],
        request=ApproveEntrySerializer,
        responses={200: JournalEntrySerializer, 400: dict, 403: dict, 404: dict, 409: dict},
    )
    def post(self, request, pk, *args, **kwargs):
        if not request.user.has_perm(JOURNAL_APPROVE_PERMISSION):
            return _forbidden("You do not have permission to approve journal entries.")

        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            entry = approve_entry(
                pk,
                approver_id=request.user.pk,
                notes=s.validated_data.get("notes"),
            )
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(JournalEntrySerializer(get_entry(entry.pk)).data, status=status.HTTP_200_OK)


class RejectJournalEntryView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = RejectEntrySerializer

    @extend_schema(
        tags=["accounting"],
        request=RejectEntrySerializer,
        responses={200: JournalEntrySerializer, 400: dict, 403: dict, 404: dict},
    )
    def post(self, request, pk, *args, **kwargs):
        if not request.user.has_perm(JOURNAL_APPROVE_PERMISSION):
            return _forbidden("You do not have permission to reject journal entries.")

        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            entry = reject_entry(
                pk,
                rejecter_id=request.user.pk,
                reason=s.validated_data["reason"],
            )
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(JournalEntrySerializer(get_entry(entry.pk)).data, status=status.HTTP_200_OK)
