from django.test import TestCase

from apps.accounts.models import User
from apps.medicines.models import Medicine
from apps.medicines.services import MedicineService

from .helpers import make_batch, make_medicine


class MedicineSearchTests(TestCase):
    def setUp(self):
        self.panadol = make_medicine(name="Panadol", generic_name="Paracetamol", barcode="8964000100011")
        self.brufen = make_medicine(name="Brufen", generic_name="Ibuprofen", barcode="8964000200022")
        make_medicine(name="Panadol Extra", is_active=False)

    def test_matches_name_and_generic_case_insensitively(self):
        self.assertEqual(list(MedicineService.search_medicines("panad")), [self.panadol])
        self.assertEqual(list(MedicineService.search_medicines("IBUPRO")), [self.brufen])

    def test_matches_barcode_substring(self):
        self.assertEqual(list(MedicineService.search_medicines("0200")), [self.brufen])

    def test_blank_query_lists_active_catalogue(self):
        self.assertEqual(set(MedicineService.search_medicines("  ")), {self.panadol, self.brufen})


class MedicineApiTests(TestCase):
    def setUp(self):
        self.owner = User.objects.create_user(username="med_owner", password="pass12345", role=User.ROLE_OWNER)
        self.cashier = User.objects.create_user(username="med_cashier", password="pass12345", role=User.ROLE_CASHIER)
        self.medicine = make_medicine(name="Augmentin", generic_name="Amoxicillin", barcode="5000")

    def test_delete_deactivates(self):
        self.client.force_login(self.owner)

        response = self.client.delete(f"/api/medicines/{self.medicine.id}/")

        self.assertEqual(response.status_code, 204)
        self.medicine.refresh_from_db()
        self.assertFalse(self.medicine.is_active)
        names = [row["name"] for row in self.client.get("/api/medicines/").json()["results"]]
        self.assertNotIn("Augmentin", names)

    def test_batches_listed_in_fefo_order(self):
        late = make_batch(self.medicine, expires_in=300, batch_number="LATE")
        early = make_batch(self.medicine, expires_in=40, batch_number="EARLY")
        self.client.force_login(self.owner)

        body = self.client.get(f"/api/medicines/{self.medicine.id}/batches/").json()

        self.assertEqual(body["suggested_batch"], early.id)
        self.assertEqual([row["id"] for row in body["batches"]], [early.id, late.id])

    def test_lookup_by_barcode(self):
        self.client.force_login(self.owner)
        self.assertEqual(self.client.get("/api/medicines/barcode/5000/").json()["name"], "Augmentin")
        self.assertEqual(self.client.get("/api/medicines/barcode/9999/").status_code, 404)

    def test_cashier_cannot_edit_catalogue(self):
        self.client.force_login(self.cashier)
        response = self.client.post("/api/medicines/", {"name": "Risek"}, content_type="application/json")
        self.assertEqual(response.status_code, 403)
        self.assertFalse(Medicine.objects.filter(name="Risek").exists())
