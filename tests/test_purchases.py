import json
from datetime import timedelta
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase
from django.utils import timezone

from apps.accounts.models import User
from apps.inventory.models import Batch, ExpiryAlert
from apps.inventory.services import StockService
from apps.purchases.models import Purchase, Supplier
from apps.purchases.services import PurchaseService, SupplierService

from .helpers import make_medicine


class PurchaseReceivingTests(TestCase):
    def setUp(self):
        self.supplier = Supplier.objects.create(name="Muller & Phipps", phone="042-35761234", payment_terms=30)
        self.medicine = make_medicine(reorder_level=5)
        self.purchase = PurchaseService.create_purchase(
            self.supplier,
            [{"medicine": self.medicine, "quantity": 100, "purchase_price": Decimal("18.00")}],
            status=Purchase.STATUS_ORDERED,
        )
        self.item = self.purchase.items.get()
        self.expiry = timezone.localdate() + timedelta(days=365)

    def receive_details(self, **overrides):
        details = {
            "batch_number": "PN-9001",
            "expiry_date": self.expiry,
            "purchase_price": Decimal("18.00"),
            "sale_price": Decimal("25.00"),
        }
        details.update(overrides)
        return {self.item.id: details}

    def test_new_purchase_totals_and_due_date(self):
        self.assertTrue(self.purchase.purchase_number.startswith("PO-"))
        self.assertEqual(self.purchase.total_amount, Decimal("1800.00"))
        self.assertEqual(self.purchase.balance_amount, Decimal("1800.00"))
        self.assertEqual(self.purchase.due_date, self.purchase.purchase_date + timedelta(days=30))

    def test_receiving_creates_batches(self):
        PurchaseService.receive_purchase(self.purchase, self.receive_details())

        batch = Batch.objects.get(purchase=self.purchase)
        self.assertEqual(batch.quantity, 100)
        self.assertEqual(batch.supplier, self.supplier)
        self.assertEqual(batch.expiry_date, self.expiry)
        self.assertEqual(StockService.get_medicine_stock(self.medicine.id), 100)
        self.purchase.refresh_from_db()
        self.assertEqual(self.purchase.status, Purchase.STATUS_RECEIVED)
        self.assertIsNotNone(self.purchase.received_at)

    def test_receiving_requires_batch_details(self):
        with self.assertRaises(ValidationError):
            PurchaseService.receive_purchase(self.purchase, self.receive_details(batch_number=""))
        with self.assertRaises(ValidationError):
            PurchaseService.receive_purchase(self.purchase, self.receive_details(purchase_price=Decimal("0")))
        self.assertFalse(Batch.objects.exists())

    def test_receiving_a_short_dated_batch_raises_expiry_alert(self):
        near_expiry = timezone.localdate() + timedelta(days=10)
        PurchaseService.receive_purchase(self.purchase, self.receive_details(expiry_date=near_expiry))

        alert = ExpiryAlert.objects.get(batch__purchase=self.purchase)
        self.assertEqual(alert.alert_level, ExpiryAlert.LEVEL_CRITICAL)

    def test_receiving_a_long_dated_batch_raises_no_expiry_alert(self):
        PurchaseService.receive_purchase(self.purchase, self.receive_details())
        self.assertFalse(ExpiryAlert.objects.exists())

    def test_received_purchase_cannot_be_cancelled_or_received_again(self):
        PurchaseService.receive_purchase(self.purchase, self.receive_details())
        with self.assertRaises(ValidationError):
            PurchaseService.cancel_purchase(self.purchase)
        with self.assertRaises(ValidationError):
            PurchaseService.receive_purchase(self.purchase, self.receive_details())

    def test_payments_reduce_supplier_balance(self):
        PurchaseService.record_payment(self.purchase, "800")
        self.assertEqual(SupplierService.get_balance(self.supplier), Decimal("1000.00"))

        with self.assertRaises(ValidationError):
            PurchaseService.record_payment(self.purchase, "5000")

    def test_cancelled_purchases_leave_the_balance(self):
        PurchaseService.cancel_purchase(self.purchase)
        self.assertEqual(SupplierService.get_balance(self.supplier), Decimal("0"))


class PurchaseApiTests(TestCase):
    def setUp(self):
        self.manager = User.objects.create_user(username="po_manager", password="pass12345", role=User.ROLE_MANAGER)
        self.cashier = User.objects.create_user(username="po_cashier", password="pass12345", role=User.ROLE_CASHIER)
        self.supplier = Supplier.objects.create(name="United Distributors", phone="021-34567890")
        self.medicine = make_medicine()

    def post_json(self, url, payload):
        return self.client.post(url, data=json.dumps(payload), content_type="application/json")

    def test_manager_orders_and_receives(self):
        self.client.force_login(self.manager)
        response = self.post_json("/api/purchases/orders/", {
            "supplier": self.supplier.id,
            "status": "ordered",
            "items": [{"medicine_id": self.medicine.id, "quantity": 20, "purchase_price": "50.00"}],
        })
        self.assertEqual(response.status_code, 201)
        purchase = response.json()
        item_id = purchase["items"][0]["id"]

        response = self.post_json(f"/api/purchases/orders/{purchase['id']}/receive/", {
            "items": [{
                "item_id": item_id,
                "batch_number": "UD-100",
                "expiry_date": (timezone.localdate() + timedelta(days=400)).isoformat(),
                "purchase_price": "50.00",
                "sale_price": "70.00",
            }],
        })
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "received")
        self.assertEqual(StockService.get_medicine_stock(self.medicine.id), 20)

        response = self.post_json(f"/api/purchases/orders/{purchase['id']}/cancel/", {})
        self.assertEqual(response.status_code, 400)
        self.assertIn("status", response.json())

    def test_cashier_cannot_see_purchases(self):
        self.client.force_login(self.cashier)
        self.assertEqual(self.client.get("/api/purchases/orders/").status_code, 403)
