from decimal import Decimal

from django.test import TestCase

from apps.accounts.models import User
from apps.reports.services import ReportingService
from apps.sales.cart import PosCart
from apps.sales.models import Sale
from apps.sales.services import CartService, SaleService
from apps.system.services import SettingsService

from .helpers import make_batch, make_medicine


class ReportingTests(TestCase):
    def setUp(self):
        self.medicine = make_medicine(reorder_level=3)
        make_batch(self.medicine, quantity=20, sale_price="100.00", purchase_price="60.00")
        self.sell(2, Sale.PAYMENT_CASH)
        self.sell(1, Sale.PAYMENT_CARD)

    def sell(self, quantity, payment_method):
        cart = PosCart()
        CartService.add_medicine(cart, self.medicine.id, quantity, tax_percent=0)
        return SaleService.complete_sale(cart, payment_method=payment_method)

    def test_dashboard_counts_today(self):
        stats = ReportingService.dashboard_stats()
        self.assertEqual(stats["today_sales"], Decimal("300.00"))
        self.assertEqual(stats["today_transactions"], 2)
        self.assertEqual(stats["today_profit"], Decimal("120.00"))
        self.assertEqual(stats["month_sales"], Decimal("300.00"))
        self.assertEqual(stats["low_stock_count"], 0)

    def test_kpis(self):
        kpis = ReportingService.compute_kpis()
        self.assertEqual(kpis["gross_profit_margin_percent"], Decimal("40.00"))
        self.assertEqual(kpis["avg_transaction_value"], Decimal("150.00"))
        self.assertEqual(kpis["cash_credit_ratio"], Decimal("2.00"))
        # cost 180 over 17 units in stock at 60
        self.assertEqual(kpis["inventory_turnover_rate"], Decimal("0.18"))

    def test_daily_reports(self):
        sales_rows = ReportingService.sales_report()
        self.assertEqual(len(sales_rows), 1)
        self.assertEqual(sales_rows[0]["total_items"], 3)
        self.assertEqual(sales_rows[0]["average_ticket"], Decimal("150.00"))

        profit_rows = ReportingService.profit_report()
        self.assertEqual(profit_rows[0]["total_cost"], Decimal("180.00"))
        self.assertEqual(profit_rows[0]["profit_margin"], Decimal("40.00"))

        tax_rows = ReportingService.tax_report()
        self.assertEqual(tax_rows[0]["tax_amount"], Decimal("0.00"))

    def test_inventory_report(self):
        row = ReportingService.inventory_report()[0]
        self.assertEqual(row["total_quantity"], 17)
        self.assertEqual(row["stock_value"], Decimal("1020.00"))
        self.assertEqual(row["batches"], 1)


class ReportApiTests(TestCase):
    def setUp(self):
        self.manager = User.objects.create_user(username="rep_manager", password="pass12345", role=User.ROLE_MANAGER)
        self.owner = User.objects.create_user(username="rep_owner", password="pass12345", role=User.ROLE_OWNER)

    def test_profit_hidden_from_manager_until_allowed(self):
        self.client.force_login(self.manager)
        self.assertEqual(self.client.get("/api/reports/profit/").status_code, 403)

        SettingsService.update_settings(manager_can_see_profit=True)
        self.assertEqual(self.client.get("/api/reports/profit/").status_code, 200)

    def test_owner_reads_dashboard(self):
        self.client.force_login(self.owner)
        response = self.client.get("/api/reports/dashboard/")
        self.assertEqual(response.status_code, 200)
        self.assertIn("supplier_payables", response.json())

    def test_reports_disappear_with_management_module(self):
        SettingsService.toggle_module(SettingsService.MODULE_MANAGEMENT)
        self.client.force_login(self.owner)
        self.assertEqual(self.client.get("/api/reports/dashboard/").status_code, 404)
