from datetime import datetime, time, timedelta

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from django.utils import timezone

from apps.accounts.models import User
from apps.inventory.models import Batch, ExpiryAlert, LowStockAlert
from apps.inventory.services import AlertService
from apps.medicines.models import Medicine
from apps.purchases.models import Purchase, PurchaseItem, Supplier
from apps.purchases.services import PurchaseService
from apps.sales.cart import PosCart
from apps.sales.models import Customer, Sale, SaleItem
from apps.sales.services import CartService, SaleService
from apps.system.mock_data import build_mock_data


class Command(BaseCommand):
    help = "Seed the sample pharmacy dataset (users, catalogue, batches, purchases and sales)."

    DEFAULT_PASSWORD = "DemoPass123!"

    USERS = (
        ("superadmin", User.ROLE_SUPERADMIN, "Super", "Admin"),
        ("owner", User.ROLE_OWNER, "Shop", "Owner"),
        ("manager", User.ROLE_MANAGER, "Store", "Manager"),
        ("cashier", User.ROLE_CASHIER, "Counter", "Cashier"),
    )

    def add_arguments(self, parser):
        parser.add_argument(
            "--reset",
            action="store_true",
            help="Delete existing sales, purchases, batches, alerts and catalogue first.",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        if options["reset"]:
            self._reset()
        elif Medicine.objects.exists():
            raise CommandError("Catalogue is not empty; run with --reset to replace it.")

        self.stdout.write(self.style.WARNING("Seeding sample data..."))
        data = build_mock_data()
        users = self._ensure_users()
        suppliers = self._create_suppliers(data["suppliers"])
        medicines = self._create_medicines(data["medicines"])
        customers = self._create_customers(data["customers"])
        self._create_batches(data["batches"], medicines, suppliers)
        self._create_purchases(data["purchases"], data["batches"], medicines, suppliers, users["owner"])
        self._create_sales(data["sales"], medicines, customers, users["cashier"])

        created = AlertService.refresh_all()
        self.stdout.write(
            f"Alerts raised: {len(created['expiry'])} expiry, {len(created['low_stock'])} low stock"
        )
        self.stdout.write(self.style.SUCCESS("Sample data seeded successfully."))
        self._print_credentials()

    def _reset(self):
        SaleItem.objects.all().delete()
        Sale.objects.all().delete()
        ExpiryAlert.objects.all().delete()
        LowStockAlert.objects.all().delete()
        Batch.objects.all().delete()
        PurchaseItem.objects.all().delete()
        Purchase.objects.all().delete()
        Medicine.objects.all().delete()
        Supplier.objects.all().delete()
        Customer.objects.all().delete()
        self.stdout.write(self.style.WARNING("Removed existing catalogue, stock and transactions."))

    def _ensure_users(self):
        users = {}
        for username, role, first_name, last_name in self.USERS:
            user, _ = User.objects.get_or_create(username=username)
            user.email = f"{username}@pharmapos.pk"
            user.first_name = first_name
            user.last_name = last_name
            user.role = role
            user.is_staff = role in User.FULL_ACCESS_ROLES
            user.is_superuser = role == User.ROLE_SUPERADMIN
            user.set_password(self.DEFAULT_PASSWORD)
            user.save()
            users[username] = user
        self.stdout.write("Users created/updated: " + ", ".join(users))
        return users

    def _create_suppliers(self, rows):
        suppliers = {}
        for row in rows:
            fields = {key: value for key, value in row.items() if key != "key"}
            suppliers[row["key"]], _ = Supplier.objects.update_or_create(name=fields.pop("name"), defaults=fields)
        return suppliers

    def _create_medicines(self, rows):
        medicines = {}
        for row in rows:
            fields = {key: value for key, value in row.items() if key != "key"}
            medicines[row["key"]], _ = Medicine.objects.update_or_create(barcode=fields.pop("barcode"), defaults=fields)
        return medicines

    def _create_customers(self, rows):
        customers = {}
        for row in rows:
            fields = {key: value for key, value in row.items() if key != "key"}
            customers[row["key"]], _ = Customer.objects.update_or_create(phone=fields.pop("phone"), defaults=fields)
        return customers

    def _create_batches(self, rows, medicines, suppliers):
        for row in rows:
            if row.get("purchase"):
                continue
            Batch.objects.create(
                medicine=medicines[row["medicine"]],
                batch_number=row["batch_number"],
                expiry_date=row["expiry_date"],
                manufacturing_date=row["manufacturing_date"],
                quantity=row["quantity"],
                purchase_price=row["purchase_price"],
                sale_price=row["sale_price"],
                mrp=row["mrp"],
                supplier=suppliers[row["supplier"]],
            )

    def _create_purchases(self, rows, batch_rows, medicines, suppliers, user):
        for row in rows:
            items = [
                {"medicine": medicines[medicine_key], "quantity": quantity, "purchase_price": price}
                for medicine_key, quantity, price in row["items"]
            ]
            purchase = PurchaseService.create_purchase(
                suppliers[row["supplier"]],
                items,
                status=Purchase.STATUS_ORDERED,
                user=user,
                purchase_date=datetime.fromisoformat(row["date"]).date(),
            )
            if row["status"] != Purchase.STATUS_RECEIVED:
                continue

            arriving = {batch["medicine"]: batch for batch in batch_rows if batch.get("purchase") == row["key"]}
            received = {}
            for item in purchase.items.all():
                medicine_key = next(key for key, medicine in medicines.items() if medicine.pk == item.medicine_id)
                batch = arriving[medicine_key]
                received[item.id] = {
                    "batch_number": batch["batch_number"],
                    "expiry_date": batch["expiry_date"],
                    "manufacturing_date": batch["manufacturing_date"],
                    "quantity": batch["quantity"],
                    "purchase_price": batch["purchase_price"],
                    "sale_price": batch["sale_price"],
                    "mrp": batch["mrp"],
                }
            PurchaseService.receive_purchase(purchase, received)
        self.stdout.write(f"Purchases created: {len(rows)}")

    def _create_sales(self, rows, medicines, customers, cashier):
        for index, row in enumerate(rows, start=1):
            cart = PosCart()
            for medicine_key, quantity in row["items"]:
                CartService.add_medicine(cart, medicines[medicine_key].pk, quantity)
            sale = SaleService.complete_sale(
                cart,
                cashier=cashier,
                payment_method=row["payment_method"],
                customer=customers.get(row["customer"]),
            )
            sold_at = timezone.make_aware(
                datetime.combine(
                    timezone.localdate() - timedelta(days=row["days_ago"]),
                    time(hour=9 + index, minute=30),
                ),
                timezone.get_current_timezone(),
            )
            Sale.objects.filter(pk=sale.pk).update(created_at=sold_at)
        self.stdout.write(f"Sales created: {len(rows)}")

    def _print_credentials(self):
        self.stdout.write("")
        self.stdout.write(self.style.SUCCESS("Sample login credentials:"))
        for username, role, _, _ in self.USERS:
            self.stdout.write(f"  {username} / {self.DEFAULT_PASSWORD}  ({role})")
