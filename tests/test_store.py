import json
from decimal import Decimal
from types import SimpleNamespace

from django.core.exceptions import ValidationError
from django.test import TestCase, override_settings

from apps.medicines.models import Medicine
from apps.store.cart import WebCart, delivery_fee_for
from apps.store.models import WebCustomer, WebOrder
from apps.store.services import CheckoutService, OrderTrackingService, StorefrontService, WebAuthService
from apps.system.services import SettingsService

from .helpers import make_batch, make_medicine


class FakeSession(dict):
    modified = False


def valid_checkout(**overrides):
    data = {
        "name": "Ayesha Khan",
        "phone": "0300-1234567",
        "address": "House 12, Johar Town",
        "city": "Lahore",
        "payment_method": "cod",
    }
    data.update(overrides)
    return data


@override_settings(STORE_FREE_DELIVERY_THRESHOLD=5000, STORE_DELIVERY_FEE=200)
class WebCartTests(TestCase):
    def test_free_delivery_from_threshold(self):
        self.assertEqual(delivery_fee_for(Decimal("5000")), Decimal("0"))
        self.assertEqual(delivery_fee_for(Decimal("4999")), Decimal("200"))

    def test_add_merges_and_clamps_to_stock(self):
        cart = WebCart()
        cart.add(1, "Panadol", "25.00", 3, max_quantity=5)
        line = cart.add(1, "Panadol", "25.00", 4, max_quantity=5)
        self.assertEqual(line["quantity"], 5)

    def test_update_clamps_and_zero_removes(self):
        cart = WebCart()
        cart.add(1, "Panadol", "25.00", 1, max_quantity=5)
        self.assertEqual(cart.update(1, 10)["quantity"], 5)
        cart.update(1, 0)
        self.assertTrue(cart.is_empty)

    def test_totals_include_delivery_fee(self):
        cart = WebCart()
        cart.add(1, "Augmentin", "395.00", 2, max_quantity=10)
        totals = cart.totals()
        self.assertEqual(totals["subtotal"], Decimal("790.00"))
        self.assertEqual(totals["delivery_fee"], Decimal("200"))
        self.assertEqual(totals["total"], Decimal("990.00"))

    def test_session_round_trip_keeps_lines(self):
        session = FakeSession()
        cart = WebCart()
        cart.add(7, "Risek", "21.00", 2, max_quantity=4)
        cart.save_to_session(session)

        restored = WebCart.from_session(session)
        self.assertEqual(restored.lines[7]["quantity"], 2)
        self.assertEqual(restored.lines[7]["price"], Decimal("21.00"))


class StorefrontTests(TestCase):
    def setUp(self):
        self.panadol = make_medicine(name="Panadol", category=Medicine.Category.TABLETS)
        make_batch(self.panadol, quantity=5, sale_price="30.00")
        make_batch(self.panadol, quantity=5, sale_price="25.00", expires_in=300)

        self.brufen = make_medicine(name="Brufen", generic_name="Ibuprofen", category=Medicine.Category.SYRUPS)
        make_batch(self.brufen, quantity=2, sale_price="165.00")

        controlled = make_medicine(name="Xanax", classification=Medicine.Classification.CONTROLLED)
        make_batch(controlled, quantity=10)
        hidden = make_medicine(name="Hidden", is_web_live=False)
        make_batch(hidden, quantity=10)
        make_medicine(name="Out of stock")

    def test_only_live_in_stock_non_controlled_products(self):
        names = [product.name for product in StorefrontService.list_products()]
        self.assertEqual(names, ["Brufen", "Panadol"])

    def test_price_is_lowest_batch_price(self):
        product = StorefrontService.get_product(self.panadol.id)
        self.assertEqual(product.price, Decimal("25.00"))
        self.assertEqual(product.stock, 10)

    def test_search_category_and_price_sort(self):
        self.assertEqual([p.name for p in StorefrontService.list_products(query="ibupro")], ["Brufen"])
        self.assertEqual([p.name for p in StorefrontService.list_products(category="syrups")], ["Brufen"])
        self.assertEqual(
            [p.name for p in StorefrontService.list_products(sort=StorefrontService.SORT_PRICE_DESC)],
            ["Brufen", "Panadol"],
        )


class CheckoutTests(TestCase):
    def setUp(self):
        self.medicine = make_medicine()
        make_batch(self.medicine, quantity=10, sale_price="100.00")
        self.cart = WebCart()
        self.cart.add(self.medicine.id, self.medicine.name, "100.00", 2, max_quantity=10)

    def test_validation_messages(self):
        errors = CheckoutService.validate(valid_checkout(name=" ", phone="12345", city=""))
        self.assertEqual(errors["phone"], "Enter a valid Pakistani phone number")
        self.assertIn("name", errors)
        self.assertIn("city", errors)
        self.assertNotIn("address", errors)

    def test_accepted_phone_formats(self):
        for phone in ("03001234567", "+923001234567", "0300 123 4567", "3001234567"):
            self.assertNotIn("phone", CheckoutService.validate(valid_checkout(phone=phone)))

    def test_cash_on_delivery_order_is_pending(self):
        order = CheckoutService.place_order(self.cart, valid_checkout())

        self.assertTrue(order.order_id.startswith("WEB-"))
        self.assertEqual(order.payment_status, WebOrder.PAYMENT_PENDING)
        self.assertEqual(order.order_status, WebOrder.STATUS_PENDING)
        self.assertEqual(order.customer_phone, "03001234567")
        self.assertEqual(order.items.get().total, Decimal("200.00"))
        self.assertTrue(self.cart.is_empty)

    def test_prepaid_order_is_paid(self):
        order = CheckoutService.place_order(self.cart, valid_checkout(payment_method="jazzcash"))
        self.assertEqual(order.payment_status, WebOrder.PAYMENT_PAID)

    def test_disabled_payment_method_is_rejected(self):
        SettingsService.update_settings(enable_card_payments=False)
        with self.assertRaises(ValidationError):
            CheckoutService.place_order(self.cart, valid_checkout(payment_method="card"))
        self.assertFalse(self.cart.is_empty)

    def test_tracking_by_id_or_phone(self):
        order = CheckoutService.place_order(self.cart, valid_checkout())

        self.assertEqual(list(OrderTrackingService.track(order.order_id.lower())), [order])
        self.assertEqual(list(OrderTrackingService.track("1234567")), [order])
        self.assertEqual(list(OrderTrackingService.track("WEB-NOPE")), [])

    def test_delivered_cash_order_becomes_paid(self):
        order = CheckoutService.place_order(self.cart, valid_checkout())
        OrderTrackingService.update_status(order, WebOrder.STATUS_DELIVERED)
        self.assertEqual(order.payment_status, WebOrder.PAYMENT_PAID)
        with self.assertRaises(ValidationError):
            OrderTrackingService.update_status(order, WebOrder.STATUS_SHIPPED)


class WebAuthTests(TestCase):
    def request(self):
        return SimpleNamespace(session={})

    def test_signup_then_duplicate_email(self):
        self.assertTrue(WebAuthService.signup(self.request(), "Ayesha", "ayesha@example.pk", "secret1"))
        self.assertFalse(WebAuthService.signup(self.request(), "Other", "AYESHA@example.pk", "secret2"))
        self.assertEqual(WebCustomer.objects.count(), 1)

    def test_login_returns_false_on_bad_password(self):
        WebAuthService.signup(self.request(), "Ayesha", "ayesha@example.pk", "secret1")
        request = self.request()

        self.assertFalse(WebAuthService.login(request, "ayesha@example.pk", "wrong"))
        self.assertFalse(WebAuthService.login(request, "nobody@example.pk", "secret1"))
        self.assertTrue(WebAuthService.login(request, "ayesha@example.pk", "secret1"))
        self.assertEqual(WebAuthService.current_customer(request).email, "ayesha@example.pk")

    def test_validation_messages(self):
        errors = WebAuthService.validate("not-an-email", "123", confirm_password="1234", name="A", signup=True)
        self.assertEqual(errors, {
            "email": "Invalid email",
            "password": "Minimum 6 characters",
            "confirm_password": "Passwords do not match",
        })


class StoreApiTests(TestCase):
    def setUp(self):
        self.medicine = make_medicine()
        make_batch(self.medicine, quantity=3, sale_price="100.00")

    def post_json(self, url, payload):
        return self.client.post(url, data=json.dumps(payload), content_type="application/json")

    def test_anonymous_visitor_places_and_tracks_order(self):
        self.assertEqual(self.client.get("/api/store/products/").json()[0]["price"], "100.00")

        response = self.post_json("/api/store/cart/items/", {"medicine_id": self.medicine.id, "quantity": 5})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["items"][0]["quantity"], 3)

        response = self.post_json("/api/store/checkout/", valid_checkout())
        self.assertEqual(response.status_code, 201)
        order_id = response.json()["order_id"]
        self.assertEqual(response.json()["delivery_fee"], "200.00")

        self.assertEqual(self.client.get("/api/store/cart/").json()["items"], [])
        tracked = self.client.get("/api/store/orders/track/", {"q": order_id.lower()}).json()
        self.assertEqual(tracked[0]["order_id"], order_id)

    def test_checkout_errors_are_returned_inline(self):
        self.post_json("/api/store/cart/items/", {"medicine_id": self.medicine.id, "quantity": 1})
        response = self.post_json("/api/store/checkout/", valid_checkout(phone="555"))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["phone"], ["Enter a valid Pakistani phone number"])

    def test_signup_duplicate_email_is_reported(self):
        payload = {"name": "Ayesha", "email": "ayesha@example.pk", "password": "secret1", "confirm_password": "secret1"}
        self.assertEqual(self.post_json("/api/store/auth/signup/", payload).status_code, 201)
        response = self.post_json("/api/store/auth/signup/", payload)
        self.assertEqual(response.status_code, 400)
        self.assertIn("email", response.json()["errors"])

    def test_store_disappears_when_module_disabled(self):
        SettingsService.toggle_module(SettingsService.MODULE_WEB_STORE)
        self.assertEqual(self.client.get("/api/store/products/").status_code, 404)
