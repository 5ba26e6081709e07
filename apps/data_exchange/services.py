"""
Per-entity CSV definitions and the import/export service built on them.
"""
import logging

from django.utils import timezone

from apps.inventory.models import Batch
from apps.medicines.models import Medicine
from apps.medicines.serializers import MedicineSerializer
from apps.purchases.models import Supplier
from apps.purchases.serializers import SupplierSerializer
from apps.sales.models import Customer, Sale
from apps.sales.serializers import CustomerSerializer

from .csv_utils import build_csv_template, export_to_csv, import_from_csv

logger = logging.getLogger(__name__)


MEDICINE_COLUMNS = [
    ("name", "Name"),
    ("generic_name", "Generic Name"),
    ("brand_name", "Brand Name"),
    ("manufacturer", "Manufacturer"),
    ("category", "Category"),
    ("dosage_form", "Dosage Form"),
    ("strength", "Strength"),
    ("unit", "Unit"),
    ("barcode", "Barcode"),
    ("classification", "Classification"),
    ("reorder_level", "Reorder Level"),
    ("reorder_quantity", "Reorder Quantity"),
    ("is_web_live", "Web Live"),
]

BATCH_COLUMNS = [
    ("medicine_name", "Medicine"),
    ("batch_number", "Batch Number"),
    ("expiry_date", "Expiry Date"),
    ("manufacturing_date", "Manufacturing Date"),
    ("quantity", "Quantity"),
    ("purchase_price", "Purchase Price"),
    ("sale_price", "Sale Price"),
    ("mrp", "MRP"),
    ("location", "Location"),
]

CUSTOMER_COLUMNS = [
    ("name", "Name"),
    ("phone", "Phone"),
    ("email", "Email"),
    ("cnic", "CNIC"),
    ("address", "Address"),
    ("loyalty_points", "Loyalty Points"),
    ("total_purchases", "Total Purchases"),
]

SUPPLIER_COLUMNS = [
    ("name", "Name"),
    ("contact_person", "Contact Person"),
    ("phone", "Phone"),
    ("email", "Email"),
    ("address", "Address"),
    ("city", "City"),
    ("ntn", "NTN"),
    ("gst_number", "GST Number"),
    ("credit_limit", "Credit Limit"),
    ("payment_terms", "Payment Terms"),
]

SALE_COLUMNS = [
    ("invoice_number", "Invoice"),
    ("created_at", "Date"),
    ("customer_name", "Customer"),
    ("payment_method", "Payment Method"),
    ("subtotal", "Subtotal"),
    ("discount_amount", "Discount"),
    ("tax_amount", "Tax"),
    ("total_amount", "Total"),
    ("status", "Status"),
]


def _batch_rows():
    for batch in Batch.objects.filter(is_active=True).select_related("medicine").order_by("medicine__name", "expiry_date"):
        batch.medicine_name = batch.medicine.name
        yield batch


EXPORTS = {
    "medicines": (MEDICINE_COLUMNS, lambda: Medicine.objects.filter(is_active=True).order_by("name")),
    "batches": (BATCH_COLUMNS, _batch_rows),
    "customers": (CUSTOMER_COLUMNS, lambda: Customer.objects.filter(is_active=True).order_by("name")),
    "suppliers": (SUPPLIER_COLUMNS, lambda: Supplier.objects.filter(is_active=True).order_by("name")),
    "sales": (SALE_COLUMNS, lambda: Sale.objects.order_by("-created_at")),
}


def _find_medicine(data):
    if data.get("barcode"):
        return Medicine.objects.filter(barcode=data["barcode"]).first()
    return Medicine.objects.filter(name__iexact=data.get("name", ""), strength=data.get("strength", "")).first()


def _find_customer(data):
    return Customer.objects.filter(phone=data.get("phone", "")).first() if data.get("phone") else None


def _find_supplier(data):
    return Supplier.objects.filter(name__iexact=data.get("name", "")).first()


IMPORTS = {
    "medicines": (MEDICINE_COLUMNS, MedicineSerializer, _find_medicine),
    "customers": (CUSTOMER_COLUMNS, CustomerSerializer, _find_customer),
    "suppliers": (SUPPLIER_COLUMNS, SupplierSerializer, _find_supplier),
}


class UnknownEntityError(LookupError):
    pass


class DataExchangeService:
    @staticmethod
    def export_filename(entity, now=None):
        return f"{entity}_{timezone.localdate(now or timezone.now()).isoformat()}.csv"

    @staticmethod
    def export(entity):
        if entity not in EXPORTS:
            raise UnknownEntityError(entity)
        columns, rows = EXPORTS[entity]
        return export_to_csv(rows(), columns)

    @staticmethod
    def template(entity):
        if entity not in IMPORTS:
            raise UnknownEntityError(entity)
        return build_csv_template(IMPORTS[entity][0])

    @staticmethod
    def _row_to_data(row, columns):
        """Map a label-keyed CSV row to model fields; blank cells are left out."""
        data = {}
        for key, label in columns:
            value = row.get(label, row.get(key, ""))
            if value != "":
                data[key] = value
        return data

    @staticmethod
    def import_rows(entity, content):
        """
        Create or update records from CSV ``content``.

        Returns ``{"created": n, "updated": n, "errors": [...]}``. A bad row is
        reported and skipped; it never aborts the rest of the file.
        """
        if entity not in IMPORTS:
            raise UnknownEntityError(entity)
        columns, serializer_class, find_existing = IMPORTS[entity]
        result = {"created": 0, "updated": 0, "errors": []}

        def on_data(rows):
            for row_number, row in enumerate(rows, start=2):
                data = DataExchangeService._row_to_data(row, columns)
                instance = find_existing(data)
                serializer = serializer_class(instance, data=data, partial=instance is not None)
                if not serializer.is_valid():
                    messages = "; ".join(
                        f"{field}: {' '.join(str(error) for error in errors)}"
                        for field, errors in serializer.errors.items()
                    )
                    result["errors"].append(f"Row {row_number}: {messages}")
                    continue
                serializer.save()
                result["updated" if instance is not None else "created"] += 1

        import_from_csv(content, on_data, on_error=result["errors"].append)
        logger.info(
            "CSV import of %s: %s created, %s updated, %s errors",
            entity,
            result["created"],
            result["updated"],
            len(result["errors"]),
        )
        return result
