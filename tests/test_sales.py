import json
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase

from apps.accounts.models import User
from apps.core.exceptions import EmptyCartError, FefoViolationError, InsufficientStockError
from apps.inventory.models import LowStockAlert
from apps.sales.cart import CartItem, PosCart
from apps.sales.models import Customer, Sale
from apps.sales.services import CartService, CustomerService, SaleService
from apps.system.models import AppSettings
from apps.system.services import SettingsService

from .helpers import make_batch, make_medicine


class CartTotalsTests(TestCase):
    def test_discount_and_tax_on_gross(self):
        cart = PosCart()
        cart.add(CartItem(medicine_id=1, batch_id=1, quantity=2, unit_price=100, discount_percent=10, tax_percent=18))

        totals = cart.totals()

        self.assertEqual(totals["subtotal"], Decimal("200"))
        self.assertEqual(totals["discount_amount"], Decimal("20"))
        self.assertEqual(totals["tax_amount"], Decimal("36"))
        self.assertEqual(totals["total"], Decimal("216"))

    def test_lines_merge_on_medicine_and_batch(self):
        cart = PosCart()
        cart.add(CartItem(medicine_id=1, batch_id=1, quantity=2, unit_price=10))
        cart.add(CartItem(medicine_id=1, batch_id=1, quantity=3, unit_price=10))
        cart.add(CartItem(medicine_id=1, batch_id=2, quantity=1, unit_price=10))

        self.assertEqual(len(cart), 2)
        self.assertEqual(cart.find(1, 1).quantity, 5)

    def test_quantity_below_one_removes_line(self):
        cart = PosCart()
        cart.add(CartItem(medicine_id=1, batch_id=1, quantity=2, unit_price=10))
        cart.update_quantity(1, 1, 0)
        self.assertTrue(cart.is_empty)

    def test_line_profit_uses_purchase_price(self):
        item = CartItem(medicine_id=1, batch_id=1, quantity=3, unit_price=25, purchase_price=18)
        self.assertEqual(item.line_profit, Decimal("21"))


class FefoCartTests(TestCase):
    def setUp(self):
        self.medicine = make_medicine()
        self.batch1 = make_batch(self.medicine, expires_in=30, quantity=2)
        self.batch2 = make_batch(self.medicine, expires_in=60, quantity=5)
        self.batch3 = make_batch(self.medicine, expires_in=90, quantity=3)
        self.cart = PosCart()

    def test_sale_of_four_units_takes_two_from_each_of_the_first_batches(self):
        CartService.add_medicine(self.cart, self.medicine.id, 4, tax_percent=0)
        SaleService.complete_sale(self.cart)

        for batch in (self.batch1, self.batch2, self.batch3):
            batch.refresh_from_db()
        self.assertEqual(self.batch1.quantity, 0)
        self.assertEqual(self.batch2.quantity, 3)
        self.assertEqual(self.batch3.quantity, 3)

    def test_second_add_continues_after_units_already_in_cart(self):
        CartService.add_medicine(self.cart, self.medicine.id, 2)
        CartService.add_medicine(self.cart, self.medicine.id, 1)

        self.assertEqual(self.cart.find(self.medicine.id, self.batch2.id).quantity, 1)

    def test_default_tax_comes_from_settings(self):
        lines = CartService.add_medicine(self.cart, self.medicine.id, 1)
        self.assertEqual(lines[0].tax_percent, Decimal("18.00"))

    def test_manual_pick_in_suggest_mode_flags_override(self):
        lines = CartService.add_medicine(self.cart, self.medicine.id, 1, batch_id=self.batch2.id)
        self.assertTrue(lines[0].fefo_override)

    def test_manual_pick_in_strict_mode_is_rejected(self):
        SettingsService.update_settings(fefo_mode=AppSettings.FefoMode.STRICT)
        with self.assertRaises(FefoViolationError):
            CartService.add_medicine(self.cart, self.medicine.id, 1, batch_id=self.batch2.id)

    def test_manual_pick_is_not_override_once_earlier_batch_is_in_cart(self):
        SettingsService.update_settings(fefo_mode=AppSettings.FefoMode.STRICT)
        CartService.add_medicine(self.cart, self.medicine.id, 2, batch_id=self.batch1.id)
        lines = CartService.add_medicine(self.cart, self.medicine.id, 1, batch_id=self.batch2.id)
        self.assertFalse(lines[0].fefo_override)

    def test_more_than_stock_is_rejected(self):
        with self.assertRaises(InsufficientStockError):
            CartService.add_medicine(self.cart, self.medicine.id, 11)
        self.assertTrue(self.cart.is_empty)

    def pick(self, batch, quantity):
        return CartService.add_medicine(self.cart, self.medicine.id, quantity, batch_id=batch.id, tax_percent=0)

    def test_strict_checkout_rejects_later_batch_after_earlier_line_removed(self):
        SettingsService.update_settings(fefo_mode=AppSettings.FefoMode.STRICT)
        self.pick(self.batch1, 2)
        self.pick(self.batch2, 1)
        self.cart.remove(self.medicine.id, self.batch1.id)

        with self.assertRaises(FefoViolationError):
            SaleService.complete_sale(self.cart)

        self.batch2.refresh_from_db()
        self.assertEqual(self.batch2.quantity, 5)
        self.assertEqual(Sale.objects.count(), 0)

    def test_strict_checkout_rejects_later_batch_after_earlier_line_lowered(self):
        SettingsService.update_settings(fefo_mode=AppSettings.FefoMode.STRICT)
        self.pick(self.batch1, 2)
        self.pick(self.batch2, 1)
        CartService.update_quantity(self.cart, self.medicine.id, self.batch1.id, 1)

        with self.assertRaises(FefoViolationError):
            SaleService.complete_sale(self.cart)
        self.assertEqual(Sale.objects.count(), 0)

    def test_cart_edits_recompute_override_flags(self):
        self.pick(self.batch1, 2)
        line = self.pick(self.batch2, 1)[0]
        self.assertFalse(line.fefo_override)

        CartService.update_quantity(self.cart, self.medicine.id, self.batch1.id, 1)
        self.assertTrue(self.cart.find(self.medicine.id, self.batch2.id).fefo_override)

        CartService.update_quantity(self.cart, self.medicine.id, self.batch1.id, 2)
        self.assertFalse(self.cart.find(self.medicine.id, self.batch2.id).fefo_override)

        CartService.remove_line(self.cart, self.medicine.id, self.batch1.id)
        self.assertTrue(self.cart.find(self.medicine.id, self.batch2.id).fefo_override)

    def test_suggest_checkout_stores_override_of_edited_cart(self):
        self.pick(self.batch1, 2)
        self.pick(self.batch2, 1)
        self.cart.remove(self.medicine.id, self.batch1.id)

        sale = SaleService.complete_sale(self.cart)

        item = sale.items.get()
        self.assertEqual(item.batch_id, self.batch2.id)
        self.assertTrue(item.fefo_override)

    def test_fefo_allocation_commits_without_override(self):
        CartService.add_medicine(self.cart, self.medicine.id, 4, tax_percent=0)
        SettingsService.update_settings(fefo_mode=AppSettings.FefoMode.STRICT)

        sale = SaleService.complete_sale(self.cart)

        self.assertFalse(sale.items.filter(fefo_override=True).exists())


class SaleCommitTests(TestCase):
    def setUp(self):
        self.cashier = User.objects.create_user(username="commit_cashier", password="pass12345")
        self.medicine = make_medicine(reorder_level=5, reorder_quantity=20)
        self.batch = make_batch(self.medicine, quantity=8, sale_price="100.00", purchase_price="60.00")
        self.customer = Customer.objects.create(name="Ayesha Khan", phone="03001234567")
        self.cart = PosCart()

    def test_cash_sale_records_change_profit_and_loyalty(self):
        CartService.add_medicine(self.cart, self.medicine.id, 2, tax_percent=0)

        sale = SaleService.complete_sale(
            self.cart, cashier=self.cashier, cash_received="250", customer=self.customer
        )

        self.assertTrue(sale.invoice_number.startswith("INV-"))
        self.assertEqual(sale.total_amount, Decimal("200.00"))
        self.assertEqual(sale.paid_amount, Decimal("250.00"))
        self.assertEqual(sale.balance_amount, Decimal("50.00"))
        self.assertEqual(sale.gross_profit, Decimal("80.00"))
        self.assertEqual(sale.items.get().purchase_price, Decimal("60.00"))
        self.assertTrue(self.cart.is_empty)

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.loyalty_points, 200)
        self.assertEqual(self.customer.total_purchases, Decimal("200.00"))

    def test_short_cash_is_rejected_and_stock_untouched(self):
        CartService.add_medicine(self.cart, self.medicine.id, 2, tax_percent=0)
        with self.assertRaises(ValidationError):
            SaleService.complete_sale(self.cart, cash_received="150")
        self.batch.refresh_from_db()
        self.assertEqual(self.batch.quantity, 8)
        self.assertEqual(Sale.objects.count(), 0)

    def test_digital_payment_gets_reference(self):
        CartService.add_medicine(self.cart, self.medicine.id, 1)
        sale = SaleService.complete_sale(self.cart, payment_method=Sale.PAYMENT_JAZZCASH)
        self.assertTrue(sale.payment_reference.startswith("REF"))
        self.assertEqual(sale.paid_amount, sale.total_amount)

    def test_empty_cart_is_rejected(self):
        with self.assertRaises(EmptyCartError):
            SaleService.complete_sale(self.cart)

    def test_stock_changed_after_add_rolls_back(self):
        CartService.add_medicine(self.cart, self.medicine.id, 5)
        self.batch.quantity = 3
        self.batch.save()

        with self.assertRaises(InsufficientStockError):
            SaleService.complete_sale(self.cart)
        self.assertEqual(Sale.objects.count(), 0)

    def test_sale_raises_low_stock_alert(self):
        CartService.add_medicine(self.cart, self.medicine.id, 4)
        SaleService.complete_sale(self.cart)

        alert = LowStockAlert.objects.get(medicine=self.medicine)
        self.assertEqual(alert.current_stock, 4)

    def test_customer_search_by_phone(self):
        self.assertEqual(list(CustomerService.search("0300")), [self.customer])

    def test_void_restores_stock_and_customer_totals(self):
        CartService.add_medicine(self.cart, self.medicine.id, 2, tax_percent=0)
        sale = SaleService.complete_sale(self.cart, customer=self.customer)

        SaleService.void_sale(sale, reason="wrong item")

        sale.refresh_from_db()
        self.batch.refresh_from_db()
        self.customer.refresh_from_db()
        self.assertEqual(sale.status, Sale.STATUS_CANCELLED)
        self.assertIn("wrong item", sale.notes)
        self.assertEqual(self.batch.quantity, 8)
        self.assertEqual(self.customer.total_purchases, Decimal("0.00"))
        self.assertEqual(self.customer.loyalty_points, 0)

    def test_void_twice_is_rejected(self):
        CartService.add_medicine(self.cart, self.medicine.id, 1)
        sale = SaleService.complete_sale(self.cart)
        SaleService.void_sale(sale)

        with self.assertRaises(ValidationError):
            SaleService.void_sale(sale)
        self.batch.refresh_from_db()
        self.assertEqual(self.batch.quantity, 8)


class PosApiTests(TestCase):
    def setUp(self):
        self.cashier = User.objects.create_user(username="pos_cashier", password="pass12345", role=User.ROLE_CASHIER)
        self.accountant = User.objects.create_user(username="pos_accountant", password="pass12345", role=User.ROLE_ACCOUNTANT)
        self.medicine = make_medicine()
        self.early = make_batch(self.medicine, expires_in=30, quantity=2, sale_price="50.00")
        self.late = make_batch(self.medicine, expires_in=90, quantity=10, sale_price="50.00")

    def post_json(self, url, payload):
        return self.client.post(url, data=json.dumps(payload), content_type="application/json")

    def test_cart_and_checkout_flow(self):
        self.client.force_login(self.cashier)

        response = self.post_json("/api/pos/cart/items/", {"medicine_id": self.medicine.id, "quantity": 3, "tax_percent": "0"})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(len(response.json()["items"]), 2)
        self.assertEqual(response.json()["total"], "150.00")

        response = self.post_json("/api/pos/checkout/", {"payment_method": "cash", "cash_received": "200"})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["balance_amount"], "50.00")

        self.late.refresh_from_db()
        self.assertEqual(self.late.quantity, 9)
        self.assertEqual(self.client.get("/api/pos/cart/").json()["items"], [])

    def test_manual_pick_reports_override(self):
        self.client.force_login(self.cashier)
        response = self.post_json(
            "/api/pos/cart/items/", {"medicine_id": self.medicine.id, "quantity": 1, "batch_id": self.late.id}
        )
        self.assertEqual(response.status_code, 201)
        self.assertTrue(response.json()["fefo_override"])

    def test_insufficient_stock_is_a_bad_request(self):
        self.client.force_login(self.cashier)
        response = self.post_json("/api/pos/cart/items/", {"medicine_id": self.medicine.id, "quantity": 50})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "insufficient_stock")

    def test_checkout_with_empty_cart_is_a_bad_request(self):
        self.client.force_login(self.cashier)
        response = self.post_json("/api/pos/checkout/", {"payment_method": "cash"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "empty_cart")

    def test_accountant_cannot_use_pos(self):
        self.client.force_login(self.accountant)
        response = self.client.get("/api/pos/cart/")
        self.assertEqual(response.status_code, 403)

    def test_pos_routes_disappear_when_module_disabled(self):
        SettingsService.toggle_module(SettingsService.MODULE_POS)
        self.client.force_login(self.cashier)
        self.assertEqual(self.client.get("/api/pos/cart/").status_code, 404)

    def test_strict_checkout_after_removing_earlier_line_is_rejected(self):
        SettingsService.update_settings(fefo_mode=AppSettings.FefoMode.STRICT)
        self.client.force_login(self.cashier)
        self.post_json("/api/pos/cart/items/", {"medicine_id": self.medicine.id, "quantity": 2, "batch_id": self.early.id})
        self.post_json("/api/pos/cart/items/", {"medicine_id": self.medicine.id, "quantity": 1, "batch_id": self.late.id})

        response = self.client.delete(
            "/api/pos/cart/items/",
            data=json.dumps({"medicine_id": self.medicine.id, "batch_id": self.early.id}),
            content_type="application/json",
        )
        self.assertTrue(response.json()["items"][0]["fefo_override"])

        response = self.post_json("/api/pos/checkout/", {"payment_method": "cash"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "fefo_violation")
        self.late.refresh_from_db()
        self.assertEqual(self.late.quantity, 10)

    def test_owner_voids_sale(self):
        owner = User.objects.create_user(username="pos_owner", password="pass12345", role=User.ROLE_OWNER)
        self.client.force_login(self.cashier)
        self.post_json("/api/pos/cart/items/", {"medicine_id": self.medicine.id, "quantity": 1})
        sale_id = self.post_json("/api/pos/checkout/", {"payment_method": "cash"}).json()["id"]

        self.assertEqual(self.post_json(f"/api/sales/sales/{sale_id}/cancel/", {}).status_code, 403)

        self.client.force_login(owner)
        response = self.post_json(f"/api/sales/sales/{sale_id}/cancel/", {"reason": "duplicate"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], Sale.STATUS_CANCELLED)
        self.early.refresh_from_db()
        self.assertEqual(self.early.quantity, 2)
