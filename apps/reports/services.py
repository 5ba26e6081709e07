"""
Reporting aggregation over sales, purchases and batches.

Only completed sales count towards revenue figures. Daily reports are
grouped by the local calendar date of the sale.
"""
from datetime import timedelta
from decimal import Decimal

from django.db.models import Count, Min, Sum
from django.db.models.functions import TruncDate
from django.utils import timezone

from apps.inventory.models import Batch
from apps.inventory.services import AlertService, StockService
from apps.purchases.models import Purchase
from apps.purchases.services import PurchaseService, SupplierService
from apps.sales.cart import money
from apps.sales.models import Sale, SaleItem
from apps.sales.services import SalesQueryService

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def _ratio(numerator, denominator):
    if not denominator:
        return ZERO
    return (Decimal(numerator) / Decimal(denominator)).quantize(Decimal("0.01"))


class ReportingService:
    KPI_PERIOD_DAYS = 60

    @staticmethod
    def _sales_between(start=None, end=None):
        queryset = SalesQueryService.completed_sales()
        if start:
            queryset = queryset.filter(created_at__date__gte=start)
        if end:
            queryset = queryset.filter(created_at__date__lte=end)
        return queryset

    @staticmethod
    def dashboard_stats(now=None):
        now = timezone.localtime(now or timezone.now())
        sales = SalesQueryService.completed_sales()
        today = sales.filter(created_at__date=now.date())
        month = sales.filter(created_at__date__gte=now.date().replace(day=1))
        year = sales.filter(created_at__date__gte=now.date().replace(month=1, day=1))

        today_totals = today.aggregate(total=Sum("total_amount"), profit=Sum("gross_profit"), count=Count("id"))
        return {
            "today_sales": money(today_totals["total"] or ZERO),
            "today_transactions": today_totals["count"],
            "today_profit": money(today_totals["profit"] or ZERO),
            "month_sales": money(month.aggregate(total=Sum("total_amount"))["total"] or ZERO),
            "year_sales": money(year.aggregate(total=Sum("total_amount"))["total"] or ZERO),
            "low_stock_count": AlertService.active_low_stock_alerts().count(),
            "expiry_alerts_count": AlertService.active_expiry_alerts().count(),
            "pending_purchases": Purchase.objects.filter(status__in=PurchaseService.OPEN_STATUSES).count(),
            "supplier_payables": money(SupplierService.get_total_balance()),
        }

    @staticmethod
    def compute_kpis(now=None):
        """
        KPIs over the last 60 days of completed sales.

        Inventory turnover is cost of goods sold over current stock value at
        cost. Every non-cash payment counts as credit in the cash/credit ratio.
        """
        now = now or timezone.now()
        sales = SalesQueryService.completed_sales().filter(
            created_at__gte=now - timedelta(days=ReportingService.KPI_PERIOD_DAYS)
        )
        totals = sales.aggregate(revenue=Sum("total_amount"), profit=Sum("gross_profit"), count=Count("id"))
        revenue = totals["revenue"] or ZERO
        profit = totals["profit"] or ZERO
        cost = revenue - profit

        stock_value = sum(
            (batch.quantity * batch.purchase_price for batch in StockService.available_batches()),
            ZERO,
        )
        cash_sales = sales.filter(payment_method=Sale.PAYMENT_CASH).aggregate(total=Sum("total_amount"))["total"] or ZERO
        credit_sales = revenue - cash_sales

        return {
            "period_days": ReportingService.KPI_PERIOD_DAYS,
            "inventory_turnover_rate": _ratio(cost, stock_value),
            "gross_profit_margin_percent": _ratio(profit * HUNDRED, revenue),
            "avg_transaction_value": _ratio(revenue, totals["count"]),
            "cash_credit_ratio": _ratio(cash_sales, credit_sales),
        }

    @staticmethod
    def _daily(start=None, end=None):
        return (
            ReportingService._sales_between(start, end)
            .annotate(day=TruncDate("created_at"))
            .values("day")
            .order_by("day")
        )

    @staticmethod
    def sales_report(start=None, end=None):
        rows = ReportingService._daily(start, end).annotate(
            total_sales=Sum("total_amount"),
            total_transactions=Count("id", distinct=True),
            total_profit=Sum("gross_profit"),
        )
        items = dict(
            SaleItem.objects.filter(sale__in=ReportingService._sales_between(start, end))
            .annotate(day=TruncDate("sale__created_at"))
            .values("day")
            .annotate(quantity=Sum("quantity"))
            .values_list("day", "quantity")
        )
        return [
            {
                "date": row["day"],
                "total_sales": money(row["total_sales"]),
                "total_transactions": row["total_transactions"],
                "average_ticket": money(_ratio(row["total_sales"], row["total_transactions"])),
                "total_items": int(items.get(row["day"]) or 0),
                "total_profit": money(row["total_profit"] or ZERO),
            }
            for row in rows
        ]

    @staticmethod
    def profit_report(start=None, end=None):
        rows = ReportingService._daily(start, end).annotate(
            total_sales=Sum("total_amount"),
            gross_profit=Sum("gross_profit"),
        )
        report = []
        for row in rows:
            total_sales = row["total_sales"] or ZERO
            gross_profit = row["gross_profit"] or ZERO
            report.append({
                "date": row["day"],
                "total_sales": money(total_sales),
                "total_cost": money(total_sales - gross_profit),
                "gross_profit": money(gross_profit),
                "profit_margin": _ratio(gross_profit * HUNDRED, total_sales),
            })
        return report

    @staticmethod
    def tax_report(start=None, end=None):
        rows = ReportingService._daily(start, end).annotate(
            total_sales=Sum("total_amount"),
            taxable_amount=Sum("subtotal"),
            tax_amount=Sum("tax_amount"),
        )
        return [
            {
                "date": row["day"],
                "total_sales": money(row["total_sales"]),
                "taxable_amount": money(row["taxable_amount"]),
                "tax_amount": money(row["tax_amount"]),
                "tax_rate": _ratio(row["tax_amount"] * HUNDRED, row["taxable_amount"]),
            }
            for row in rows
        ]

    @staticmethod
    def inventory_report():
        rows = (
            Batch.objects.filter(is_active=True, quantity__gt=0, medicine__is_active=True)
            .values("medicine_id", "medicine__name", "medicine__category")
            .annotate(
                total_quantity=Sum("quantity"),
                batches=Count("id"),
                nearest_expiry=Min("expiry_date"),
            )
            .order_by("medicine__name")
        )
        values = {}
        for batch in StockService.available_batches().filter(medicine__is_active=True):
            values[batch.medicine_id] = values.get(batch.medicine_id, ZERO) + batch.quantity * batch.purchase_price
        return [
            {
                "medicine_id": row["medicine_id"],
                "medicine_name": row["medicine__name"],
                "category": row["medicine__category"],
                "total_quantity": row["total_quantity"],
                "stock_value": money(values.get(row["medicine_id"], ZERO)),
                "batches": row["batches"],
                "nearest_expiry": row["nearest_expiry"],
            }
            for row in rows
        ]

    @staticmethod
    def expiry_risk(now=None):
        return StockService.get_expiry_risk_report(now=now)

    @staticmethod
    def slow_movers(days=90, now=None):
        return StockService.get_slow_moving_items(days=days, now=now)
