from django.test import RequestFactory, TestCase

from apps.accounts.models import User
from apps.accounts.services import AuthService
from apps.system.services import SettingsService


class AuthServiceTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(
            username="cashier1", email="cashier@example.com", password="pass12345", role=User.ROLE_CASHIER
        )

    def test_resolves_by_username_or_email(self):
        self.assertEqual(AuthService.resolve_user("cashier1", "pass12345"), self.user)
        self.assertEqual(AuthService.resolve_user("CASHIER@example.com", "pass12345"), self.user)

    def test_rejects_bad_or_inactive_credentials(self):
        self.assertIsNone(AuthService.resolve_user("cashier1", "wrong"))
        self.assertIsNone(AuthService.resolve_user("", ""))
        self.user.is_active = False
        self.user.save()
        self.assertIsNone(AuthService.resolve_user("cashier1", "pass12345"))

    def test_login_returns_false_on_failure(self):
        request = RequestFactory().post("/api/auth/login/")
        self.assertFalse(AuthService.login(request, "cashier1", "nope"))


class AuthApiTests(TestCase):
    def setUp(self):
        User.objects.create_user(username="owner1", password="pass12345", role=User.ROLE_OWNER)

    def test_login_returns_token(self):
        response = self.client.post(
            "/api/auth/login/", {"username": "owner1", "password": "pass12345"}, content_type="application/json"
        )
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["token"])
        self.assertEqual(response.json()["user"]["username"], "owner1")

    def test_login_failure_is_generic(self):
        response = self.client.post(
            "/api/auth/login/", {"username": "owner1", "password": "bad"}, content_type="application/json"
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Invalid credentials"})

    def test_current_user_requires_login(self):
        self.assertIn(self.client.get("/api/auth/me/").status_code, (401, 403))


class SystemApiTests(TestCase):
    def setUp(self):
        self.superadmin = User.objects.create_user(username="root", password="pass12345", role=User.ROLE_SUPERADMIN)
        self.owner = User.objects.create_user(username="owner2", password="pass12345", role=User.ROLE_OWNER)
        self.manager = User.objects.create_user(username="manager2", password="pass12345", role=User.ROLE_MANAGER)

    def test_superadmin_toggles_modules(self):
        self.client.force_login(self.superadmin)

        response = self.client.post("/api/superadmin/modules/management_enabled/toggle/")

        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.json()["management_enabled"])
        self.assertEqual(self.client.get("/api/medicines/").status_code, 404)

        self.client.post("/api/superadmin/modules/management_enabled/toggle/")
        self.assertTrue(SettingsService.is_module_enabled(SettingsService.MODULE_MANAGEMENT))

    def test_unknown_module(self):
        self.client.force_login(self.superadmin)
        self.assertEqual(self.client.post("/api/superadmin/modules/everything/toggle/").status_code, 400)

    def test_only_superadmin_toggles(self):
        self.client.force_login(self.owner)
        self.assertEqual(self.client.post("/api/superadmin/modules/pos_enabled/toggle/").status_code, 403)
        self.assertTrue(SettingsService.is_module_enabled(SettingsService.MODULE_POS))

    def test_settings_changes_need_owner(self):
        self.client.force_login(self.manager)
        response = self.client.patch(
            "/api/superadmin/settings/", {"manager_can_see_profit": True}, content_type="application/json"
        )
        self.assertEqual(response.status_code, 403)

        self.client.force_login(self.owner)
        response = self.client.patch(
            "/api/superadmin/settings/", {"manager_can_see_profit": True}, content_type="application/json"
        )
        self.assertEqual(response.status_code, 200)
        self.assertTrue(SettingsService.get_settings().manager_can_see_profit)

    def test_expiry_thresholds_must_be_ordered(self):
        self.client.force_login(self.owner)
        response = self.client.patch(
            "/api/superadmin/settings/", {"expiry_critical_days": 100}, content_type="application/json"
        )
        self.assertEqual(response.status_code, 400)


class UserManagementApiTests(TestCase):
    def setUp(self):
        self.owner = User.objects.create_user(username="owner3", password="pass12345", role=User.ROLE_OWNER)
        self.cashier = User.objects.create_user(username="cashier3", password="pass12345", role=User.ROLE_CASHIER)

    def payload(self, **overrides):
        data = {
            "username": "newpharmacist",
            "password": "secret123",
            "password_confirm": "secret123",
            "role": User.ROLE_PHARMACIST,
        }
        data.update(overrides)
        return data

    def test_owner_creates_staff(self):
        self.client.force_login(self.owner)

        response = self.client.post("/api/auth/users/", self.payload(), content_type="application/json")

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["role"], User.ROLE_PHARMACIST)
        self.assertTrue(User.objects.get(username="newpharmacist").check_password("secret123"))

    def test_owner_cannot_create_superadmin(self):
        self.client.force_login(self.owner)
        response = self.client.post(
            "/api/auth/users/", self.payload(role=User.ROLE_SUPERADMIN), content_type="application/json"
        )
        self.assertEqual(response.status_code, 400)

    def test_mismatched_passwords(self):
        self.client.force_login(self.owner)
        response = self.client.post(
            "/api/auth/users/", self.payload(password_confirm="other123"), content_type="application/json"
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("password_confirm", response.json())

    def test_cashier_cannot_list_users(self):
        self.client.force_login(self.cashier)
        self.assertEqual(self.client.get("/api/auth/users/").status_code, 403)
