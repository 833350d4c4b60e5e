# accounting/management/commands/dispatch_pending_audit_events.py

from django.core.management.base import BaseCommand

from accounting.models.audit import AuditEvent
from accounting.services.audit_service import dispatch_pending_events


class Command(BaseCommand):
    help = (
        "Re-deliver audit events that never reached the audit sink "
        "(sink outage, process crash between commit and dispatch)."
    )

    def add_arguments(self, parser):
        parser.add_argument(
            "--limit",
            type=int,
            default=500,
            help="Maximum number of events to deliver in this run (default 500).",
        )

    def handle(self, *args, **options):
        pending = AuditEvent.objects.filter(dispatched_at__isnull=True).count()
        self.stdout.write(f"{pending} audit event(s) awaiting delivery")

        delivered = dispatch_pending_events(limit=options["limit"])

        self.stdout.write(self.style.SUCCESS(f"Delivered {delivered} audit event(s)."))
