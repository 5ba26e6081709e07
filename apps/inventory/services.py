"""
Stock and alert services.

StockService answers stock questions from batch rows (aggregate stock,
FEFO ordering and allocation, expiring batches, expiry risk, slow movers).
AlertService derives expiry and low-stock alerts from that state.

FEFO (First-Expiry-First-Out): among active batches with stock, the one that
expires first is sold first. Allocation spills to the next batch only when
the current one is exhausted.
"""
import logging
import math
from collections import defaultdict
from datetime import datetime, time, timedelta
from decimal import Decimal

from django.db.models import Sum
from django.utils import timezone

from apps.core.exceptions import InsufficientStockError
from apps.medicines.models import Medicine
from apps.sales.models import SaleItem
from apps.system.services import SettingsService

from .models import Batch, ExpiryAlert, LowStockAlert

logger = logging.getLogger(__name__)


class StockService:
    SHELF_LIFE_DAYS = 730

    RECOMMEND_WRITE_OFF = "write_off"
    RECOMMEND_SELL_URGENTLY = "sell_urgently"
    RECOMMEND_RETURN = "return_to_supplier"
    RECOMMEND_PROMOTE = "promote"

    @staticmethod
    def available_batches():
        return Batch.objects.filter(is_active=True, quantity__gt=0)

    @staticmethod
    def get_medicine_stock(medicine_id):
        total = StockService.available_batches().filter(medicine_id=medicine_id).aggregate(total=Sum("quantity"))["total"]
        return int(total or 0)

    @staticmethod
    def get_stock_map(medicine_ids=None):
        """Aggregate stock for many medicines in one query."""
        queryset = StockService.available_batches()
        if medicine_ids is not None:
            queryset = queryset.filter(medicine_id__in=medicine_ids)
        rows = queryset.values("medicine_id").annotate(total=Sum("quantity"))
        return {row["medicine_id"]: int(row["total"] or 0) for row in rows}

    @staticmethod
    def get_batches_by_medicine(medicine_id):
        return StockService.available_batches().filter(medicine_id=medicine_id)

    @staticmethod
    def get_fefo_batches(medicine_id):
        return list(StockService.get_batches_by_medicine(medicine_id).order_by("expiry_date", "id"))

    @staticmethod
    def get_fefo_suggested_batch(medicine_id):
        batches = StockService.get_fefo_batches(medicine_id)
        return batches[0] if batches else None

    @staticmethod
    def allocate_fefo(medicine_id, quantity, reserved=None):
        """
        Split ``quantity`` over the FEFO batches of a medicine.

        ``reserved`` maps batch id to units already committed elsewhere (for
        example, lines already in the cart). Returns ``[(batch, qty), ...]``
        in expiry order. Raises ``InsufficientStockError`` when the batches
        cannot cover the request.
        """
        if quantity <= 0:
            return []

        reserved = reserved or {}
        allocations = []
        remaining = quantity
        for batch in StockService.get_fefo_batches(medicine_id):
            free = batch.quantity - reserved.get(batch.id, 0)
            if free <= 0:
                continue
            take = min(free, remaining)
            allocations.append((batch, take))
            remaining -= take
            if remaining == 0:
                return allocations

        raise InsufficientStockError(
            "Not enough stock to fulfil the requested quantity.",
            medicine=medicine_id,
            requested=quantity,
            available=quantity - remaining,
        )

    @staticmethod
    def is_fefo_override(batch, reserved=None):
        """
        True when an earlier-expiring batch of the same medicine still has
        units left after ``reserved`` is taken out.
        """
        reserved = reserved or {}
        earlier = StockService.get_batches_by_medicine(batch.medicine_id).filter(
            expiry_date__lt=batch.expiry_date
        )
        return any(candidate.quantity - reserved.get(candidate.id, 0) > 0 for candidate in earlier)

    @staticmethod
    def get_expiring_batches(days, now=None):
        today = timezone.localtime(now or timezone.now()).date()
        threshold = today + timedelta(days=days)
        return (
            StockService.available_batches()
            .filter(expiry_date__lte=threshold)
            .select_related("medicine")
            .order_by("expiry_date", "id")
        )

    @staticmethod
    def risk_percent(days_left):
        shelf = StockService.SHELF_LIFE_DAYS
        percent = round((shelf - days_left) / shelf * 100)
        return max(0, min(100, percent))

    @staticmethod
    def recommendation(days_left, thresholds):
        if days_left <= 0:
            return StockService.RECOMMEND_WRITE_OFF
        if days_left <= thresholds["critical"]:
            return StockService.RECOMMEND_SELL_URGENTLY
        if days_left <= thresholds["warning"]:
            return StockService.RECOMMEND_RETURN
        return StockService.RECOMMEND_PROMOTE

    @staticmethod
    def get_expiry_risk_report(now=None):
        thresholds = SettingsService.get_settings().expiry_alert_days
        rows = []
        batches = StockService.available_batches().select_related("medicine").filter(medicine__is_active=True)
        for batch in batches:
            days_left = AlertService.days_until_expiry(batch.expiry_date, now=now)
            rows.append({
                "batch_id": batch.id,
                "batch_number": batch.batch_number,
                "medicine_id": batch.medicine_id,
                "medicine_name": batch.medicine.name,
                "expiry_date": batch.expiry_date,
                "quantity": batch.quantity,
                "days_until_expiry": days_left,
                "risk_percent": StockService.risk_percent(days_left),
                "potential_loss": batch.quantity * batch.purchase_price,
                "recommendation": StockService.recommendation(days_left, thresholds),
            })
        rows.sort(key=lambda row: (row["days_until_expiry"], row["batch_id"]))
        return rows

    @staticmethod
    def get_slow_moving_items(days=90, now=None):
        """
        Active medicines with stock that have not been sold in ``days`` days,
        with their stock quantity and stock value at cost.
        """
        since = (now or timezone.now()) - timedelta(days=days)
        recently_sold = set(
            SaleItem.objects.filter(sale__created_at__gte=since).values_list("medicine_id", flat=True)
        )

        quantities = defaultdict(int)
        values = defaultdict(lambda: Decimal("0"))
        batches = StockService.available_batches().filter(medicine__is_active=True).exclude(
            medicine_id__in=recently_sold
        )
        for batch in batches:
            quantities[batch.medicine_id] += batch.quantity
            values[batch.medicine_id] += batch.quantity * batch.purchase_price

        medicines = Medicine.objects.filter(id__in=quantities.keys()).order_by("name")
        return [
            {
                "medicine_id": medicine.id,
                "medicine_name": medicine.name,
                "stock_quantity": quantities[medicine.id],
                "stock_value": values[medicine.id],
            }
            for medicine in medicines
        ]


class AlertService:
    @staticmethod
    def days_until_expiry(expiry_date, now=None):
        """Whole days from ``now`` to the start of the expiry date, floored."""
        now = now or timezone.now()
        tz = timezone.get_current_timezone()
        expiry_start = timezone.make_aware(datetime.combine(expiry_date, time.min), tz)
        return math.floor((expiry_start - now).total_seconds() / 86400)

    @staticmethod
    def classify(days_left, thresholds):
        if days_left <= thresholds["critical"]:
            return ExpiryAlert.LEVEL_CRITICAL
        if days_left <= thresholds["warning"]:
            return ExpiryAlert.LEVEL_WARNING
        if days_left <= thresholds["notice"]:
            return ExpiryAlert.LEVEL_NOTICE
        return None

    @staticmethod
    def derive_expiry_alerts(now=None):
        """
        Bring expiry alerts in line with the current batches.

        Re-running is idempotent. An open alert is refreshed in place and can
        only escalate. A resolved alert keeps the batch quiet until its level
        is exceeded. Returns the newly created alerts.
        """
        settings_obj = SettingsService.get_settings()
        if not settings_obj.enable_expiry_alerts:
            return []

        thresholds = settings_obj.expiry_alert_days
        created = []
        batches = StockService.available_batches().filter(medicine__is_active=True).select_related("medicine")
        for batch in batches:
            days_left = AlertService.days_until_expiry(batch.expiry_date, now=now)
            level = AlertService.classify(days_left, thresholds)
            if level is None:
                continue

            open_alert = batch.expiry_alerts.filter(is_resolved=False).order_by("-created_at").first()
            if open_alert is not None:
                open_alert.days_until_expiry = days_left
                open_alert.quantity = batch.quantity
                if ExpiryAlert.SEVERITY[level] > open_alert.severity:
                    open_alert.alert_level = level
                open_alert.save(update_fields=["days_until_expiry", "quantity", "alert_level", "updated_at"])
                continue

            resolved_levels = batch.expiry_alerts.filter(is_resolved=True).values_list("alert_level", flat=True)
            if any(ExpiryAlert.SEVERITY[level] <= ExpiryAlert.SEVERITY[resolved] for resolved in resolved_levels):
                continue

            alert = ExpiryAlert.objects.create(
                batch=batch,
                medicine=batch.medicine,
                alert_level=level,
                days_until_expiry=days_left,
                quantity=batch.quantity,
            )
            logger.info("Expiry alert %s raised for batch %s (%s days)", level, batch.pk, days_left)
            created.append(alert)
        return created

    @staticmethod
    def derive_low_stock_alerts(medicine_ids=None):
        """
        Raise or refresh low-stock alerts. A resolved alert stays closed until
        a batch is received for the medicine after it was raised.
        """
        settings_obj = SettingsService.get_settings()
        if not settings_obj.enable_low_stock_alerts:
            return []

        medicines = Medicine.objects.filter(is_active=True, reorder_level__gt=0)
        if medicine_ids is not None:
            medicines = medicines.filter(id__in=medicine_ids)

        stock_map = StockService.get_stock_map([medicine.id for medicine in medicines])
        created = []
        for medicine in medicines:
            stock = stock_map.get(medicine.id, 0)
            if stock > medicine.reorder_level:
                continue

            open_alert = medicine.low_stock_alerts.filter(is_resolved=False).order_by("-created_at").first()
            if open_alert is not None:
                open_alert.current_stock = stock
                open_alert.reorder_level = medicine.reorder_level
                open_alert.reorder_quantity = medicine.reorder_quantity
                open_alert.save(update_fields=["current_stock", "reorder_level", "reorder_quantity", "updated_at"])
                continue

            last_resolved = medicine.low_stock_alerts.filter(is_resolved=True).order_by("-created_at").first()
            if last_resolved is not None and not medicine.batches.filter(received_at__gt=last_resolved.created_at).exists():
                continue

            alert = LowStockAlert.objects.create(
                medicine=medicine,
                current_stock=stock,
                reorder_level=medicine.reorder_level,
                reorder_quantity=medicine.reorder_quantity,
            )
            logger.info("Low stock alert raised for medicine %s (stock %s)", medicine.pk, stock)
            created.append(alert)
        return created

    @staticmethod
    def refresh_all(now=None):
        return {
            "expiry": AlertService.derive_expiry_alerts(now=now),
            "low_stock": AlertService.derive_low_stock_alerts(),
        }

    @staticmethod
    def resolve(alert, user=None):
        """Mark an alert resolved. Resolving twice changes nothing."""
        if alert.is_resolved:
            return alert
        alert.is_resolved = True
        alert.resolved_at = timezone.now()
        if user is not None and getattr(user, "is_authenticated", False):
            alert.resolved_by = user
        alert.save(update_fields=["is_resolved", "resolved_at", "resolved_by", "updated_at"])
        logger.info("%s %s resolved", alert.__class__.__name__, alert.pk)
        return alert

    @staticmethod
    def active_expiry_alerts():
        return ExpiryAlert.objects.filter(is_resolved=False).select_related("batch", "medicine")

    @staticmethod
    def active_low_stock_alerts():
        return LowStockAlert.objects.filter(is_resolved=False).select_related("medicine")
