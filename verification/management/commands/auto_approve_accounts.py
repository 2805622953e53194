"""
Django management command to batch-approve eligible account verifications.

An account is eligible when its NIK has 16 digits and a KTP document is attached.

Usage:
    python manage.py auto_approve_accounts
    python manage.py auto_approve_accounts --dry-run
"""

from django.core.management.base import BaseCommand
from verification.services.auto_approval import AutoApprovalService


class Command(BaseCommand):
    help = "Approve every pending account verification that meets the auto-approval policy"

    def add_arguments(self, parser):
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="List eligible accounts without approving them",
        )
        parser.add_argument(
            "--role",
            default="Super Admin",
            help="Role recorded as the acting administrator",
        )

    def handle(self, *args, **options):
        service = AutoApprovalService()

        if options["dry_run"]:
            tasks = service.eligible_tasks()
            self.stdout.write(f"{len(tasks)} eligible account(s)")
            for task in tasks:
                self.stdout.write(f"  - account {task.source_id}: {task.description}")
            return

        results = service.run(actor_role=options["role"])
        if not results:
            self.stdout.write(self.style.WARNING("No accounts meet the auto-approval criteria"))
            return

        for result in results:
            if result.success:
                self.stdout.write(self.style.SUCCESS(f"✓ account {result.source_id} verified"))
            else:
                self.stdout.write(
                    self.style.ERROR(
                        f"✗ account {result.source_id}: {result.error_code} - {result.error_message}"
                    )
                )

        approved = sum(1 for result in results if result.success)
        self.stdout.write(f"{approved}/{len(results)} account(s) verified")
