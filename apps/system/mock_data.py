"""
Static sample dataset: a small Lahore pharmacy.

Dates are relative to ``today`` so the dataset always contains batches in
every expiry band. Records use string keys (``"med-1"``) to link to each
other; the seeding command maps them onto database rows.
"""
from datetime import timedelta
from decimal import Decimal

from django.utils import timezone

MEDICINES = [
    {"key": "med-1", "name": "Panadol", "generic_name": "Paracetamol", "brand_name": "GSK", "manufacturer": "GSK Pakistan",
     "category": "tablets", "dosage_form": "Tablet", "strength": "500mg", "barcode": "8964000100011",
     "classification": "otc", "reorder_level": 50, "reorder_quantity": 200},
    {"key": "med-2", "name": "Augmentin", "generic_name": "Amoxicillin + Clavulanic acid", "brand_name": "GSK",
     "manufacturer": "GSK Pakistan", "category": "tablets", "dosage_form": "Tablet", "strength": "625mg",
     "barcode": "8964000100028", "classification": "prescription", "reorder_level": 20, "reorder_quantity": 60},
    {"key": "med-3", "name": "Brufen", "generic_name": "Ibuprofen", "brand_name": "Abbott", "manufacturer": "Abbott Laboratories",
     "category": "syrups", "dosage_form": "Syrup", "strength": "100mg/5ml", "barcode": "8964000100035",
     "classification": "otc", "reorder_level": 15, "reorder_quantity": 40},
    {"key": "med-4", "name": "Risek", "generic_name": "Omeprazole", "brand_name": "Getz", "manufacturer": "Getz Pharma",
     "category": "capsules", "dosage_form": "Capsule", "strength": "20mg", "barcode": "8964000100042",
     "classification": "prescription", "reorder_level": 30, "reorder_quantity": 100},
    {"key": "med-5", "name": "Xanax", "generic_name": "Alprazolam", "brand_name": "Pfizer", "manufacturer": "Pfizer Pakistan",
     "category": "tablets", "dosage_form": "Tablet", "strength": "0.5mg", "barcode": "8964000100059",
     "classification": "controlled", "reorder_level": 10, "reorder_quantity": 30},
    {"key": "med-6", "name": "Ventolin Inhaler", "generic_name": "Salbutamol", "brand_name": "GSK", "manufacturer": "GSK Pakistan",
     "category": "inhalers", "dosage_form": "Inhaler", "strength": "100mcg", "barcode": "8964000100066",
     "classification": "prescription", "reorder_level": 5, "reorder_quantity": 20},
    {"key": "med-7", "name": "Surbex-Z", "generic_name": "Multivitamin with Zinc", "brand_name": "Abbott",
     "manufacturer": "Abbott Laboratories", "category": "supplements", "dosage_form": "Tablet", "strength": "",
     "barcode": "8964000100073", "classification": "otc", "reorder_level": 25, "reorder_quantity": 80},
    {"key": "med-8", "name": "Polyfax", "generic_name": "Polymyxin B + Bacitracin", "brand_name": "GSK",
     "manufacturer": "GSK Pakistan", "category": "ointments", "dosage_form": "Ointment", "strength": "20g",
     "barcode": "8964000100080", "classification": "otc", "reorder_level": 10, "reorder_quantity": 30},
]

SUPPLIERS = [
    {"key": "sup-1", "name": "Muller & Phipps Pakistan", "contact_person": "Imran Qureshi", "phone": "042-35761234",
     "email": "orders@mullerphipps.pk", "city": "Lahore", "ntn": "0712345-6", "credit_limit": Decimal("500000"), "payment_terms": 30},
    {"key": "sup-2", "name": "United Distributors", "contact_person": "Sana Malik", "phone": "021-34567890",
     "email": "sales@udpl.pk", "city": "Karachi", "ntn": "0723456-7", "credit_limit": Decimal("300000"), "payment_terms": 45},
    {"key": "sup-3", "name": "Premier Agencies", "contact_person": "Bilal Ahmed", "phone": "051-2345678",
     "email": "info@premieragencies.pk", "city": "Islamabad", "ntn": "", "credit_limit": Decimal("150000"), "payment_terms": 15},
]

CUSTOMERS = [
    {"key": "cus-1", "name": "Ayesha Khan", "phone": "03001234567", "email": "ayesha.khan@example.pk", "cnic": "35202-1234567-8",
     "address": "House 12, Block F, Johar Town, Lahore"},
    {"key": "cus-2", "name": "Muhammad Usman", "phone": "03219876543", "email": "", "cnic": "35201-7654321-9",
     "address": "Street 5, Model Town, Lahore"},
    {"key": "cus-3", "name": "Fatima Raza", "phone": "03335551234", "email": "fatima.raza@example.pk", "cnic": "",
     "address": "DHA Phase 5, Lahore"},
]

# expires_in: days from today; several batches per medicine to exercise FEFO.
# Batches with a "purchase" key arrive by receiving that purchase order.
BATCHES = [
    {"key": "bat-1", "medicine": "med-1", "batch_number": "PN-2301", "expires_in": 20, "quantity": 40,
     "purchase_price": Decimal("18.00"), "sale_price": Decimal("25.00"), "mrp": Decimal("28.00"), "supplier": "sup-1"},
    {"key": "bat-2", "medicine": "med-1", "batch_number": "PN-2305", "expires_in": 210, "quantity": 300,
     "purchase_price": Decimal("18.50"), "sale_price": Decimal("25.00"), "mrp": Decimal("28.00"), "supplier": "sup-1", "purchase": "pur-1"},
    {"key": "bat-3", "medicine": "med-2", "batch_number": "AG-0912", "expires_in": 55, "quantity": 18,
     "purchase_price": Decimal("310.00"), "sale_price": Decimal("395.00"), "mrp": Decimal("410.00"), "supplier": "sup-1"},
    {"key": "bat-4", "medicine": "med-2", "batch_number": "AG-1004", "expires_in": 400, "quantity": 60,
     "purchase_price": Decimal("315.00"), "sale_price": Decimal("395.00"), "mrp": Decimal("410.00"), "supplier": "sup-2"},
    {"key": "bat-5", "medicine": "med-3", "batch_number": "BR-5521", "expires_in": 85, "quantity": 12,
     "purchase_price": Decimal("120.00"), "sale_price": Decimal("165.00"), "mrp": Decimal("170.00"), "supplier": "sup-2"},
    {"key": "bat-6", "medicine": "med-4", "batch_number": "RS-7781", "expires_in": 150, "quantity": 140,
     "purchase_price": Decimal("14.00"), "sale_price": Decimal("21.00"), "mrp": Decimal("22.00"), "supplier": "sup-2"},
    {"key": "bat-7", "medicine": "med-5", "batch_number": "XN-0042", "expires_in": 300, "quantity": 25,
     "purchase_price": Decimal("9.00"), "sale_price": Decimal("14.00"), "mrp": Decimal("15.00"), "supplier": "sup-3"},
    {"key": "bat-8", "medicine": "med-6", "batch_number": "VT-3310", "expires_in": 5, "quantity": 4,
     "purchase_price": Decimal("480.00"), "sale_price": Decimal("590.00"), "mrp": Decimal("610.00"), "supplier": "sup-3"},
    {"key": "bat-9", "medicine": "med-7", "batch_number": "SZ-1207", "expires_in": 365, "quantity": 90,
     "purchase_price": Decimal("260.00"), "sale_price": Decimal("340.00"), "mrp": Decimal("350.00"), "supplier": "sup-1", "purchase": "pur-1"},
    {"key": "bat-10", "medicine": "med-8", "batch_number": "PF-8890", "expires_in": 240, "quantity": 35,
     "purchase_price": Decimal("150.00"), "sale_price": Decimal("210.00"), "mrp": Decimal("220.00"), "supplier": "sup-3"},
]

# items: (medicine key, quantity); sold FEFO when seeded.
SALES = [
    {"key": "sal-1", "days_ago": 3, "customer": "cus-1", "payment_method": "cash", "items": [("med-1", 4), ("med-7", 1)]},
    {"key": "sal-2", "days_ago": 2, "customer": None, "payment_method": "jazzcash", "items": [("med-2", 2)]},
    {"key": "sal-3", "days_ago": 1, "customer": "cus-2", "payment_method": "card", "items": [("med-4", 10), ("med-8", 1)]},
    {"key": "sal-4", "days_ago": 0, "customer": None, "payment_method": "cash", "items": [("med-1", 2), ("med-3", 1)]},
]

PURCHASES = [
    {"key": "pur-1", "supplier": "sup-1", "days_ago": 10, "status": "received",
     "items": [("med-1", 300, Decimal("18.50")), ("med-7", 90, Decimal("260.00"))]},
    {"key": "pur-2", "supplier": "sup-2", "days_ago": 2, "status": "ordered",
     "items": [("med-4", 100, Decimal("14.00")), ("med-3", 40, Decimal("120.00"))]},
]


def build_mock_data(today=None):
    """
    Return the dataset as plain dicts, with expiry, sale and purchase
    dates resolved against ``today``.
    """
    today = today or timezone.localdate()
    batches = []
    for batch in BATCHES:
        row = dict(batch)
        row["expiry_date"] = (today + timedelta(days=row.pop("expires_in"))).isoformat()
        row["manufacturing_date"] = (today - timedelta(days=365)).isoformat()
        batches.append(row)

    sales = [dict(sale, date=(today - timedelta(days=sale["days_ago"])).isoformat()) for sale in SALES]
    purchases = [dict(purchase, date=(today - timedelta(days=purchase["days_ago"])).isoformat()) for purchase in PURCHASES]

    return {
        "medicines": [dict(medicine) for medicine in MEDICINES],
        "batches": batches,
        "suppliers": [dict(supplier) for supplier in SUPPLIERS],
        "customers": [dict(customer) for customer in CUSTOMERS],
        "sales": sales,
        "purchases": purchases,
    }
