import logging
from datetime import timedelta
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from apps.inventory.models import Batch
from apps.inventory.services import AlertService
from apps.sales.cart import calculate_totals, money, to_decimal

from .models import Purchase, PurchaseItem, Supplier

logger = logging.getLogger(__name__)


class PurchaseService:
    OPEN_STATUSES = {Purchase.STATUS_DRAFT, Purchase.STATUS_ORDERED, Purchase.STATUS_PARTIAL}

    @staticmethod
    def generate_purchase_number():
        count = Purchase.objects.count()
        while True:
            count += 1
            number = f"PO-{count:05d}"
            if not Purchase.objects.filter(purchase_number=number).exists():
                return number

    @staticmethod
    def _apply_totals(purchase):
        totals = calculate_totals(list(purchase.items.all()))
        purchase.subtotal = money(totals["subtotal"])
        purchase.discount_amount = money(totals["discount_amount"])
        purchase.tax_amount = money(totals["tax_amount"])
        purchase.total_amount = money(totals["total"])
        purchase.balance_amount = purchase.total_amount - purchase.paid_amount

    @staticmethod
    def create_purchase(supplier, items, status=Purchase.STATUS_DRAFT, notes="", user=None, purchase_date=None):
        """
        Raise a purchase order. ``items`` is a list of dicts with at least
        ``medicine`` and ``quantity``.
        """
        if not items:
            raise ValidationError({"items": "A purchase order needs at least one item."})
        if status not in {Purchase.STATUS_DRAFT, Purchase.STATUS_ORDERED}:
            raise ValidationError({"status": "New purchase orders must be draft or ordered."})

        purchase_date = purchase_date or timezone.localdate()
        with transaction.atomic():
            purchase = Purchase.objects.create(
                purchase_number=PurchaseService.generate_purchase_number(),
                supplier=supplier,
                purchase_date=purchase_date,
                due_date=purchase_date + timedelta(days=supplier.payment_terms),
                status=status,
                notes=notes,
                created_by=user if user is not None and user.is_authenticated else None,
            )
            for item in items:
                PurchaseItem.objects.create(purchase=purchase, **item)
            PurchaseService._apply_totals(purchase)
            purchase.save()

        logger.info("Purchase %s created for supplier %s", purchase.purchase_number, supplier.pk)
        return purchase

    @staticmethod
    def receive_purchase(purchase, received_items):
        """
        Receive a purchase order into stock.

        ``received_items`` maps purchase item id to batch details
        (``batch_number``, ``expiry_date``, ``purchase_price``, ``sale_price``
        and optionally ``mrp``, ``manufacturing_date``, ``quantity``). Every
        line must carry a batch number, an expiry date and a positive cost.
        """
        if purchase.status not in PurchaseService.OPEN_STATUSES:
            raise ValidationError({"status": f"Cannot receive a {purchase.get_status_display().lower()} purchase."})

        items = list(purchase.items.select_related("medicine"))
        errors = {}
        for item in items:
            details = received_items.get(item.id) or received_items.get(str(item.id))
            if not details:
                errors[str(item.id)] = "Missing receiving details."
                continue
            if not details.get("batch_number") or not details.get("expiry_date"):
                errors[str(item.id)] = "Batch number and expiry date are required."
            elif to_decimal(details.get("purchase_price")) <= 0:
                errors[str(item.id)] = "Purchase price must be greater than zero."
        if errors:
            raise ValidationError(errors)

        with transaction.atomic():
            for item in items:
                details = received_items.get(item.id) or received_items.get(str(item.id))
                item.batch_number = details["batch_number"]
                item.expiry_date = details["expiry_date"]
                item.manufacturing_date = details.get("manufacturing_date")
                item.quantity = int(details.get("quantity") or item.quantity)
                item.purchase_price = to_decimal(details["purchase_price"])
                item.sale_price = to_decimal(details.get("sale_price"))
                item.mrp = to_decimal(details.get("mrp"))
                item.save()

                Batch.objects.create(
                    medicine=item.medicine,
                    batch_number=item.batch_number,
                    expiry_date=item.expiry_date,
                    manufacturing_date=item.manufacturing_date,
                    quantity=item.quantity,
                    purchase_price=item.purchase_price,
                    sale_price=item.sale_price,
                    mrp=item.mrp or None,
                    supplier=purchase.supplier,
                    purchase=purchase,
                )

            PurchaseService._apply_totals(purchase)
            purchase.status = Purchase.STATUS_RECEIVED
            purchase.received_at = timezone.now()
            purchase.save()
            AlertService.derive_low_stock_alerts(medicine_ids=[item.medicine_id for item in items])
            AlertService.derive_expiry_alerts()

        logger.info("Purchase %s received: %s batches", purchase.purchase_number, len(items))
        return purchase

    @staticmethod
    def cancel_purchase(purchase):
        if purchase.status == Purchase.STATUS_RECEIVED:
            raise ValidationError({"status": "Received purchases cannot be cancelled."})
        purchase.status = Purchase.STATUS_CANCELLED
        purchase.save(update_fields=["status", "updated_at"])
        return purchase

    @staticmethod
    def record_payment(purchase, amount):
        amount = money(amount)
        if amount <= 0:
            raise ValidationError({"amount": "Payment must be greater than zero."})
        if amount > purchase.balance_amount:
            raise ValidationError({"amount": "Payment exceeds the outstanding balance."})
        purchase.paid_amount += amount
        purchase.balance_amount = purchase.total_amount - purchase.paid_amount
        purchase.save(update_fields=["paid_amount", "balance_amount", "updated_at"])
        return purchase


class SupplierService:
    @staticmethod
    def get_balance(supplier):
        """Outstanding balance over the supplier's non-cancelled purchases."""
        total = (
            supplier.purchases.exclude(status=Purchase.STATUS_CANCELLED)
            .aggregate(total=Sum("balance_amount"))["total"]
        )
        return total or Decimal("0")

    @staticmethod
    def get_total_balance():
        total = Purchase.objects.exclude(status=Purchase.STATUS_CANCELLED).aggregate(total=Sum("balance_amount"))["total"]
        return total or Decimal("0")

    @staticmethod
    def active_suppliers():
        return Supplier.objects.filter(is_active=True)
