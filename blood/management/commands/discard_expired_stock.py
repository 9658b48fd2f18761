from __future__ import annotations

from datetime import date

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from django.utils import timezone

from blood.models import BagStatus, InventoryBag


class Command(BaseCommand):
    help = (
        "Mark expired inventory bags that still hold units as DISCARDED. "
        "Defaults to dry-run; pass --apply to write changes."
    )

    def add_arguments(self, parser):
        parser.add_argument(
            "--as-of",
            type=str,
            default="",
            help="Treat this ISO date as today (default: the local date).",
        )
        parser.add_argument(
            "--apply",
            action="store_true",
            help="Actually write changes to DB (default is dry-run).",
        )

    def handle(self, *args, **options):
        apply_changes = bool(options.get("apply"))
        as_of = (options.get("as_of") or "").strip()
        if as_of:
            try:
                today = date.fromisoformat(as_of)
            except ValueError:
                raise CommandError("--as-of must be an ISO date (YYYY-MM-DD)")
        else:
            today = timezone.localdate()

        qs = (
            InventoryBag.objects.filter(expiry_date__lt=today, quantity__gt=0)
            .exclude(status__in=[BagStatus.USED, BagStatus.DISCARDED])
            .order_by("expiry_date", "id")
        )
        expired = list(qs)

        if not expired:
            self.stdout.write(self.style.WARNING(f"No expired stock as of {today.isoformat()}."))
            return

        units = sum(bag.quantity for bag in expired)
        self.stdout.write(f"Found {len(expired)} expired bags ({units} units) as of {today.isoformat()}.")
        self.stdout.write("\nPreview (showing up to 10):")
        for bag in expired[:10]:
            self.stdout.write(
                f"- id={bag.id} type={bag.blood_type} qty={bag.quantity} expiry={bag.expiry_date} status={bag.status}"
            )

        if not apply_changes:
            self.stdout.write(self.style.WARNING("DRY-RUN: no changes written. Re-run with --apply to commit."))
            return

        for bag in expired:
            bag.status = BagStatus.DISCARDED
        with transaction.atomic():
            InventoryBag.objects.bulk_update(expired, ["status"], batch_size=500)

        self.stdout.write(self.style.SUCCESS(f"Discarded {len(expired)} expired bags."))
