import json
from datetime import timedelta

from django.core.exceptions import ValidationError
from django.test import TestCase

from apps.accounts.models import User
from apps.core.exceptions import InsufficientStockError
from apps.inventory.models import Batch, ExpiryAlert, LowStockAlert
from apps.inventory.services import AlertService, StockService
from apps.system.services import SettingsService

from .helpers import local_noon, make_batch, make_medicine


class StockServiceTests(TestCase):
    def setUp(self):
        self.medicine = make_medicine()

    def test_stock_counts_only_active_batches_with_quantity(self):
        make_batch(self.medicine, quantity=3)
        make_batch(self.medicine, quantity=4, expires_in=300)
        make_batch(self.medicine, quantity=10, is_active=False)
        make_batch(self.medicine, quantity=0)

        self.assertEqual(StockService.get_medicine_stock(self.medicine.id), 7)
        self.assertEqual(len(StockService.get_batches_by_medicine(self.medicine.id)), 2)

    def test_fefo_batches_sorted_by_expiry(self):
        late = make_batch(self.medicine, expires_in=300)
        early = make_batch(self.medicine, expires_in=40)
        middle = make_batch(self.medicine, expires_in=120)

        self.assertEqual(StockService.get_fefo_batches(self.medicine.id), [early, middle, late])
        self.assertEqual(StockService.get_fefo_suggested_batch(self.medicine.id), early)

    def test_suggested_batch_is_none_without_stock(self):
        self.assertIsNone(StockService.get_fefo_suggested_batch(self.medicine.id))

    def test_allocation_spills_into_next_batch(self):
        first = make_batch(self.medicine, expires_in=30, quantity=2)
        second = make_batch(self.medicine, expires_in=60, quantity=5)
        make_batch(self.medicine, expires_in=90, quantity=3)

        allocations = StockService.allocate_fefo(self.medicine.id, 4)

        self.assertEqual([(batch.id, qty) for batch, qty in allocations], [(first.id, 2), (second.id, 2)])

    def test_allocation_respects_reserved_units(self):
        first = make_batch(self.medicine, expires_in=30, quantity=2)
        second = make_batch(self.medicine, expires_in=60, quantity=5)

        allocations = StockService.allocate_fefo(self.medicine.id, 3, reserved={first.id: 2})

        self.assertEqual([(batch.id, qty) for batch, qty in allocations], [(second.id, 3)])

    def test_allocation_beyond_stock_raises(self):
        make_batch(self.medicine, quantity=2)
        with self.assertRaises(InsufficientStockError):
            StockService.allocate_fefo(self.medicine.id, 3)

    def test_expiring_batches_within_window(self):
        soon = make_batch(self.medicine, expires_in=10)
        make_batch(self.medicine, expires_in=100)

        self.assertEqual(list(StockService.get_expiring_batches(30)), [soon])

    def test_expiry_risk_report_recommendations(self):
        make_batch(self.medicine, expires_in=10, quantity=4, purchase_price="50.00")
        make_batch(self.medicine, expires_in=500)

        rows = StockService.get_expiry_risk_report(now=local_noon())

        self.assertEqual(rows[0]["days_until_expiry"], 9)
        self.assertEqual(rows[0]["recommendation"], StockService.RECOMMEND_SELL_URGENTLY)
        self.assertEqual(rows[0]["potential_loss"], 200)
        self.assertEqual(rows[1]["recommendation"], StockService.RECOMMEND_PROMOTE)
        self.assertLess(rows[1]["risk_percent"], rows[0]["risk_percent"])

    def test_slow_moving_items_include_unsold_stock(self):
        make_batch(self.medicine, quantity=6, purchase_price="10.00")

        rows = StockService.get_slow_moving_items(days=90)

        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]["stock_quantity"], 6)
        self.assertEqual(rows[0]["stock_value"], 60)

    def test_expiry_date_cannot_change(self):
        batch = make_batch(self.medicine, expires_in=100)
        batch.expiry_date = batch.expiry_date + timedelta(days=1)
        with self.assertRaises(ValidationError):
            batch.save()


class ExpiryAlertTests(TestCase):
    def setUp(self):
        self.medicine = make_medicine()
        self.now = local_noon()

    def test_levels_follow_thresholds(self):
        critical = make_batch(self.medicine, expires_in=10)
        warning = make_batch(self.medicine, expires_in=45)
        notice = make_batch(self.medicine, expires_in=75)
        make_batch(self.medicine, expires_in=200)

        AlertService.derive_expiry_alerts(now=self.now)

        levels = dict(ExpiryAlert.objects.values_list("batch_id", "alert_level"))
        self.assertEqual(levels, {
            critical.id: ExpiryAlert.LEVEL_CRITICAL,
            warning.id: ExpiryAlert.LEVEL_WARNING,
            notice.id: ExpiryAlert.LEVEL_NOTICE,
        })

    def test_days_until_expiry_is_floored(self):
        batch = make_batch(self.medicine, expires_in=10)
        self.assertEqual(AlertService.days_until_expiry(batch.expiry_date, now=self.now), 9)

    def test_derivation_is_idempotent(self):
        make_batch(self.medicine, expires_in=10)

        first = AlertService.derive_expiry_alerts(now=self.now)
        second = AlertService.derive_expiry_alerts(now=self.now)

        self.assertEqual(len(first), 1)
        self.assertEqual(second, [])
        self.assertEqual(ExpiryAlert.objects.count(), 1)

    def test_open_alert_escalates_and_never_regresses(self):
        batch = make_batch(self.medicine, expires_in=75)

        AlertService.derive_expiry_alerts(now=self.now)
        AlertService.derive_expiry_alerts(now=local_noon(40))
        alert = ExpiryAlert.objects.get(batch=batch)
        self.assertEqual(alert.alert_level, ExpiryAlert.LEVEL_WARNING)

        AlertService.derive_expiry_alerts(now=self.now)
        alert.refresh_from_db()
        self.assertEqual(alert.alert_level, ExpiryAlert.LEVEL_WARNING)
        self.assertEqual(ExpiryAlert.objects.filter(batch=batch).count(), 1)

    def test_resolved_alert_suppresses_until_escalation(self):
        batch = make_batch(self.medicine, expires_in=45)
        AlertService.derive_expiry_alerts(now=self.now)
        AlertService.resolve(ExpiryAlert.objects.get(batch=batch))

        self.assertEqual(AlertService.derive_expiry_alerts(now=self.now), [])

        created = AlertService.derive_expiry_alerts(now=local_noon(30))
        self.assertEqual(len(created), 1)
        self.assertEqual(created[0].alert_level, ExpiryAlert.LEVEL_CRITICAL)

    def test_resolving_twice_is_harmless(self):
        make_batch(self.medicine, expires_in=10)
        AlertService.derive_expiry_alerts(now=self.now)
        alert = ExpiryAlert.objects.get()

        AlertService.resolve(alert)
        resolved_at = alert.resolved_at
        AlertService.resolve(alert)

        alert.refresh_from_db()
        self.assertTrue(alert.is_resolved)
        self.assertEqual(alert.resolved_at, resolved_at)

    def test_disabled_expiry_alerts_derive_nothing(self):
        SettingsService.update_settings(enable_expiry_alerts=False)
        make_batch(self.medicine, expires_in=10)
        self.assertEqual(AlertService.derive_expiry_alerts(now=self.now), [])

    def test_inactive_and_empty_batches_are_ignored(self):
        make_batch(self.medicine, expires_in=10, quantity=0)
        make_batch(self.medicine, expires_in=10, is_active=False)
        self.assertEqual(AlertService.derive_expiry_alerts(now=self.now), [])


class LowStockAlertTests(TestCase):
    def setUp(self):
        self.medicine = make_medicine(reorder_level=10, reorder_quantity=50)

    def test_alert_raised_at_or_below_reorder_level(self):
        make_batch(self.medicine, quantity=10)

        created = AlertService.derive_low_stock_alerts()

        self.assertEqual(len(created), 1)
        self.assertEqual(created[0].current_stock, 10)
        self.assertEqual(created[0].reorder_quantity, 50)

    def test_no_alert_above_reorder_level_or_without_level(self):
        make_batch(self.medicine, quantity=11)
        make_medicine(name="No level", reorder_level=0)
        self.assertEqual(AlertService.derive_low_stock_alerts(), [])

    def test_open_alert_refreshed_with_current_stock(self):
        batch = make_batch(self.medicine, quantity=8)
        AlertService.derive_low_stock_alerts()
        Batch.objects.filter(pk=batch.pk).update(quantity=3)

        self.assertEqual(AlertService.derive_low_stock_alerts(), [])
        self.assertEqual(LowStockAlert.objects.get().current_stock, 3)

    def test_resolved_alert_returns_only_after_new_batch(self):
        make_batch(self.medicine, quantity=5)
        AlertService.derive_low_stock_alerts()
        AlertService.resolve(LowStockAlert.objects.get())

        self.assertEqual(AlertService.derive_low_stock_alerts(), [])

        make_batch(self.medicine, quantity=2, expires_in=300)
        created = AlertService.derive_low_stock_alerts()
        self.assertEqual(len(created), 1)
        self.assertEqual(created[0].current_stock, 7)


class AlertApiTests(TestCase):
    def setUp(self):
        self.manager = User.objects.create_user(username="alert_manager", password="pass12345", role=User.ROLE_MANAGER)
        self.cashier = User.objects.create_user(username="alert_cashier", password="pass12345", role=User.ROLE_CASHIER)
        medicine = make_medicine()
        make_batch(medicine, expires_in=10)
        AlertService.derive_expiry_alerts()
        self.alert = ExpiryAlert.objects.get()

    def test_manager_resolves_alert_twice(self):
        self.client.force_login(self.manager)
        url = f"/api/inventory/expiry-alerts/{self.alert.id}/resolve/"

        self.assertEqual(self.client.post(url).status_code, 200)
        response = self.client.post(url)

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["is_resolved"])
        self.assertEqual(self.client.get("/api/inventory/expiry-alerts/").json()["count"], 0)

    def test_cashier_cannot_read_inventory(self):
        self.client.force_login(self.cashier)
        response = self.client.get("/api/inventory/expiry-alerts/")
        self.assertEqual(response.status_code, 403)

    def test_batch_expiry_is_read_only_on_update(self):
        self.client.force_login(self.manager)
        batch = self.alert.batch
        response = self.client.patch(
            f"/api/inventory/batches/{batch.id}/",
            data=json.dumps({"expiry_date": "2040-01-01", "location": "Rack 4"}),
            content_type="application/json",
        )
        self.assertEqual(response.status_code, 200)
        batch.refresh_from_db()
        self.assertEqual(batch.location, "Rack 4")
        self.assertNotEqual(str(batch.expiry_date), "2040-01-01")
