from django.core.management.base import BaseCommand
from django.db import transaction

from apps.inventory.services import AlertService


class Command(BaseCommand):
    help = "Derive expiry and low-stock alerts from current batch stock."

    @transaction.atomic
    def handle(self, *args, **options):
        created = AlertService.refresh_all()
        self.stdout.write(
            self.style.SUCCESS(
                f"Alerts refreshed: {len(created['expiry'])} expiry, {len(created['low_stock'])} low stock."
            )
        )
