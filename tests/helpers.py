from datetime import datetime, time, timedelta
from decimal import Decimal

from django.utils import timezone

from apps.inventory.models import Batch
from apps.medicines.models import Medicine


def local_noon(days_from_today=0):
    """Aware datetime at 12:00 local time, away from any day boundary."""
    day = timezone.localdate() + timedelta(days=days_from_today)
    return timezone.make_aware(datetime.combine(day, time(12, 0)), timezone.get_current_timezone())


def make_medicine(name="Panadol", **fields):
    fields.setdefault("generic_name", "Paracetamol")
    fields.setdefault("strength", "500mg")
    return Medicine.objects.create(name=name, **fields)


def make_batch(medicine, expires_in=200, quantity=10, sale_price="25.00", purchase_price="18.00", **fields):
    return Batch.objects.create(
        medicine=medicine,
        batch_number=fields.pop("batch_number", f"B-{expires_in}-{quantity}"),
        expiry_date=timezone.localdate() + timedelta(days=expires_in),
        quantity=quantity,
        sale_price=Decimal(sale_price),
        purchase_price=Decimal(purchase_price),
        **fields,
    )
