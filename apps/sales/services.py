"""
Sales services: putting stock into the POS cart and committing sales.
"""
import logging
from datetime import timedelta
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Q, Sum
from django.utils import timezone
from django.utils.crypto import get_random_string

from apps.core.exceptions import EmptyCartError, FefoViolationError, InsufficientStockError
from apps.inventory.models import Batch
from apps.inventory.services import AlertService, StockService
from apps.medicines.models import Medicine
from apps.system.models import AppSettings
from apps.system.services import SettingsService

from .cart import CartItem, money, to_decimal
from .models import Customer, Sale, SaleItem

logger = logging.getLogger(__name__)


class CartService:
    @staticmethod
    def _line_for(batch, quantity, discount_percent, tax_percent, fefo_override=False):
        return CartItem(
            medicine_id=batch.medicine_id,
            batch_id=batch.id,
            quantity=quantity,
            unit_price=batch.sale_price,
            purchase_price=batch.purchase_price,
            discount_percent=discount_percent,
            tax_percent=tax_percent,
            medicine_name=batch.medicine.name,
            batch_number=batch.batch_number,
            expiry_date=batch.expiry_date,
            fefo_override=fefo_override,
        )

    @staticmethod
    def add_medicine(cart, medicine_id, quantity, batch_id=None, discount_percent=0, tax_percent=None):
        """
        Put ``quantity`` units of a medicine into the cart.

        Without ``batch_id`` the units are allocated FEFO, possibly over
        several batches. With a manual batch pick the line is flagged as a
        FEFO override when an earlier-expiring batch still has free units;
        strict mode refuses such a pick.
        """
        quantity = int(quantity)
        if quantity < 1:
            raise ValidationError({"quantity": "Quantity must be at least 1."})

        medicine = Medicine.objects.filter(pk=medicine_id, is_active=True).first()
        if medicine is None:
            raise ValidationError({"medicine_id": "Medicine not found."})

        settings_obj = SettingsService.get_settings()
        if tax_percent is None:
            tax_percent = settings_obj.default_tax_rate
        reserved = cart.reserved_quantities()

        if batch_id is None:
            lines = []
            for batch, take in StockService.allocate_fefo(medicine.id, quantity, reserved=reserved):
                lines.append(cart.add(CartService._line_for(batch, take, discount_percent, tax_percent)))
            return lines

        batch = (
            Batch.objects.select_related("medicine")
            .filter(pk=batch_id, medicine=medicine, is_active=True)
            .first()
        )
        if batch is None:
            raise ValidationError({"batch_id": "Batch not found for this medicine."})

        free = batch.quantity - reserved.get(batch.id, 0)
        if quantity > free:
            raise InsufficientStockError(
                "Not enough stock in the selected batch.",
                batch=batch.id,
                requested=quantity,
                available=max(free, 0),
            )

        override = StockService.is_fefo_override(batch, reserved=reserved)
        if override:
            if settings_obj.fefo_mode == AppSettings.FefoMode.STRICT:
                suggested = StockService.get_fefo_suggested_batch(medicine.id)
                raise FefoViolationError(
                    "An earlier-expiring batch must be sold first.",
                    batch=batch.id,
                    suggested_batch=suggested.id if suggested else None,
                )
            logger.warning(
                "FEFO override: batch %s of medicine %s picked while an earlier batch has stock",
                batch.id,
                medicine.id,
            )

        line = CartService._line_for(batch, quantity, discount_percent, tax_percent, fefo_override=override)
        return [cart.add(line)]

    @staticmethod
    def update_quantity(cart, medicine_id, batch_id, quantity):
        """Set a line's quantity; anything below 1 removes the line."""
        quantity = int(quantity)
        if quantity >= 1:
            batch = Batch.objects.filter(pk=batch_id, is_active=True).first()
            reserved = cart.reserved_quantities(exclude=(medicine_id, batch_id))
            available = (batch.quantity if batch else 0) - reserved.get(batch_id, 0)
            if quantity > available:
                raise InsufficientStockError(
                    "Not enough stock in the selected batch.",
                    batch=batch_id,
                    requested=quantity,
                    available=max(available, 0),
                )
        line = cart.update_quantity(medicine_id, batch_id, quantity)
        CartService.refresh_fefo_flags(cart)
        return line

    @staticmethod
    def remove_line(cart, medicine_id, batch_id):
        cart.remove(medicine_id, batch_id)
        CartService.refresh_fefo_flags(cart)

    @staticmethod
    def refresh_fefo_flags(cart, strict=False):
        """
        Recompute every line's FEFO override against the cart as it stands.

        Lowering or removing a line can leave units free in an earlier batch,
        which turns a later-batch line into an override. With ``strict`` such
        a line raises ``FefoViolationError``.
        """
        reserved = cart.reserved_quantities()
        batches = Batch.objects.in_bulk({item.batch_id for item in cart})
        for item in cart:
            batch = batches.get(item.batch_id)
            override = batch is not None and StockService.is_fefo_override(batch, reserved=reserved)
            if override and strict:
                suggested = StockService.get_fefo_suggested_batch(item.medicine_id)
                raise FefoViolationError(
                    "An earlier-expiring batch must be sold first.",
                    batch=item.batch_id,
                    suggested_batch=suggested.id if suggested else None,
                )
            if override and not item.fefo_override:
                logger.warning(
                    "FEFO override: batch %s of medicine %s left ahead of an earlier batch after a cart edit",
                    item.batch_id,
                    item.medicine_id,
                )
            item.fefo_override = override
        return cart


class SaleService:
    INVOICE_PREFIX = "INV-"

    @staticmethod
    def generate_invoice_number():
        while True:
            number = f"{SaleService.INVOICE_PREFIX}{get_random_string(6, allowed_chars='0123456789')}"
            if not Sale.objects.filter(invoice_number=number).exists():
                return number

    @staticmethod
    def generate_payment_reference():
        return "REF" + get_random_string(8, allowed_chars="0123456789")

    @staticmethod
    def complete_sale(
        cart,
        cashier=None,
        payment_method=Sale.PAYMENT_CASH,
        cash_received=None,
        customer=None,
        notes="",
        is_prescription=False,
        doctor_name="",
        prescription_number="",
    ):
        """
        Commit the cart as a Sale.

        Batch quantities are re-checked and decremented inside the same
        transaction that writes the sale, so a sale either takes all of its
        stock or none.
        """
        if cart.is_empty:
            raise EmptyCartError("Cart is empty.")

        valid_methods = {value for value, _ in Sale.PAYMENT_CHOICES}
        if payment_method not in valid_methods:
            raise ValidationError({"payment_method": "Invalid payment method."})

        totals = cart.totals()
        total = money(totals["total"])

        if payment_method == Sale.PAYMENT_CASH:
            paid_amount = money(cash_received) if cash_received not in (None, "") else total
            if paid_amount < total:
                raise ValidationError({"cash_received": "Cash received is less than the total."})
            balance_amount = paid_amount - total
            reference = ""
        else:
            paid_amount = total
            balance_amount = Decimal("0.00")
            reference = SaleService.generate_payment_reference()

        settings_obj = SettingsService.get_settings()
        CartService.refresh_fefo_flags(cart, strict=settings_obj.fefo_mode == AppSettings.FefoMode.STRICT)

        with transaction.atomic():
            sale = Sale.objects.create(
                invoice_number=SaleService.generate_invoice_number(),
                customer=customer,
                customer_name=customer.name if customer else "",
                customer_phone=customer.phone if customer else "",
                cashier=cashier if cashier is not None and cashier.is_authenticated else None,
                subtotal=money(totals["subtotal"]),
                discount_amount=money(totals["discount_amount"]),
                tax_amount=money(totals["tax_amount"]),
                total_amount=total,
                gross_profit=money(totals["gross_profit"]),
                paid_amount=paid_amount,
                balance_amount=balance_amount,
                payment_method=payment_method,
                payment_reference=reference,
                is_prescription=is_prescription,
                doctor_name=doctor_name,
                prescription_number=prescription_number,
                notes=notes,
            )

            touched_medicines = set()
            for item in cart:
                batch = Batch.objects.select_for_update().select_related("medicine").get(pk=item.batch_id)
                if not batch.is_active or batch.quantity < item.quantity:
                    raise InsufficientStockError(
                        "Batch stock changed before the sale was completed.",
                        batch=batch.id,
                        requested=item.quantity,
                        available=batch.quantity if batch.is_active else 0,
                    )
                batch.quantity -= item.quantity
                batch.save(update_fields=["quantity", "updated_at"])

                SaleItem.objects.create(
                    sale=sale,
                    medicine_id=batch.medicine_id,
                    batch=batch,
                    medicine_name=batch.medicine.name,
                    batch_number=batch.batch_number,
                    expiry_date=batch.expiry_date,
                    quantity=item.quantity,
                    unit_price=money(item.unit_price),
                    purchase_price=batch.purchase_price,
                    discount_percent=item.discount_percent,
                    tax_percent=item.tax_percent,
                    total=money(item.total),
                    profit=money((item.unit_price - batch.purchase_price) * item.quantity),
                    fefo_override=item.fefo_override,
                )
                touched_medicines.add(batch.medicine_id)

            profit = sum((line.profit for line in sale.items.all()), Decimal("0"))
            if profit != sale.gross_profit:
                sale.gross_profit = profit
                sale.save(update_fields=["gross_profit", "updated_at"])

            if customer is not None:
                CustomerService.record_purchase(customer, total)

            AlertService.derive_low_stock_alerts(medicine_ids=touched_medicines)

        cart.clear()
        logger.info(
            "Sale %s completed: %s items, total %s, paid by %s",
            sale.invoice_number,
            len(touched_medicines),
            sale.total_amount,
            sale.payment_method,
        )
        return sale

    @staticmethod
    def void_sale(sale, reason=""):
        """
        Cancel a completed sale: every line goes back to its batch and the
        customer's purchase total and loyalty points are reversed.
        """
        if sale.status != Sale.STATUS_COMPLETED:
            raise ValidationError({"status": f"Sale {sale.invoice_number} is already {sale.status}."})

        with transaction.atomic():
            touched_medicines = set()
            for item in sale.items.all():
                batch = Batch.objects.select_for_update().get(pk=item.batch_id)
                batch.quantity += item.quantity
                batch.save(update_fields=["quantity", "updated_at"])
                touched_medicines.add(batch.medicine_id)

            if sale.customer is not None:
                CustomerService.reverse_purchase(sale.customer, sale.total_amount)

            sale.status = Sale.STATUS_CANCELLED
            if reason:
                sale.notes = f"{sale.notes}\nVoided: {reason}".strip()
            sale.save(update_fields=["status", "notes", "updated_at"])
            AlertService.derive_low_stock_alerts(medicine_ids=touched_medicines)

        logger.info("Sale %s voided", sale.invoice_number)
        return sale


class CustomerService:
    @staticmethod
    def search(query):
        query = (query or "").strip()
        queryset = Customer.objects.filter(is_active=True)
        if not query:
            return queryset
        return queryset.filter(
            Q(name__icontains=query) | Q(phone__contains=query) | Q(cnic__contains=query)
        )

    @staticmethod
    def record_purchase(customer, amount):
        settings_obj = SettingsService.get_settings()
        amount = to_decimal(amount)
        customer.total_purchases = customer.total_purchases + amount
        if settings_obj.enable_loyalty:
            customer.loyalty_points += int(amount * settings_obj.loyalty_points_per_rupee)
        customer.save(update_fields=["total_purchases", "loyalty_points", "updated_at"])
        return customer

    @staticmethod
    def reverse_purchase(customer, amount):
        settings_obj = SettingsService.get_settings()
        amount = to_decimal(amount)
        customer.total_purchases = max(customer.total_purchases - amount, Decimal("0"))
        if settings_obj.enable_loyalty:
            points = int(amount * settings_obj.loyalty_points_per_rupee)
            customer.loyalty_points = max(customer.loyalty_points - points, 0)
        customer.save(update_fields=["total_purchases", "loyalty_points", "updated_at"])
        return customer


class SalesQueryService:
    @staticmethod
    def completed_sales():
        return Sale.objects.filter(status=Sale.STATUS_COMPLETED)

    @staticmethod
    def get_today_sales(now=None):
        today = timezone.localtime(now or timezone.now()).date()
        return SalesQueryService.completed_sales().filter(created_at__date=today)

    @staticmethod
    def get_total_sales(start=None, end=None):
        queryset = SalesQueryService.completed_sales()
        if start:
            queryset = queryset.filter(created_at__gte=start)
        if end:
            queryset = queryset.filter(created_at__lte=end)
        return queryset.aggregate(total=Sum("total_amount"))["total"] or Decimal("0")

    @staticmethod
    def get_total_profit(start=None, end=None):
        queryset = SaleItem.objects.filter(sale__status=Sale.STATUS_COMPLETED)
        if start:
            queryset = queryset.filter(sale__created_at__gte=start)
        if end:
            queryset = queryset.filter(sale__created_at__lte=end)
        return queryset.aggregate(total=Sum("profit"))["total"] or Decimal("0")

    @staticmethod
    def get_recently_sold_medicine_ids(days=90, now=None):
        cutoff = (now or timezone.now()) - timedelta(days=days)
        return set(
            SaleItem.objects.filter(sale__status=Sale.STATUS_COMPLETED, sale__created_at__gte=cutoff)
            .values_list("medicine_id", flat=True)
            .distinct()
        )
