"""
POS cart.

The cart is a plain in-memory object that lives in the session between
requests. Lines merge on (medicine, batch). Totals:

    item.total      = quantity * unit_price
    subtotal        = sum(item.total)
    discount_amount = sum(item.total * discount_percent / 100)
    tax_amount      = sum(item.total * tax_percent / 100)
    total           = subtotal - discount_amount + tax_amount

Tax is charged on the gross line total, before discount.
"""
from decimal import ROUND_HALF_UP, Decimal

HUNDRED = Decimal("100")
CENT = Decimal("0.01")


def to_decimal(value):
    if isinstance(value, Decimal):
        return value
    if value is None or value == "":
        return Decimal("0")
    return Decimal(str(value))


def money(value):
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_totals(items):
    """Totals for POS cart lines and purchase order lines alike."""
    subtotal = sum((item.total for item in items), Decimal("0"))
    discount_amount = sum((item.discount_amount for item in items), Decimal("0"))
    tax_amount = sum((item.tax_amount for item in items), Decimal("0"))
    gross_profit = sum((getattr(item, "line_profit", 0) for item in items), Decimal("0"))
    return {
        "subtotal": subtotal,
        "discount_amount": discount_amount,
        "tax_amount": tax_amount,
        "total": subtotal - discount_amount + tax_amount,
        "gross_profit": gross_profit,
    }


class CartItem:
    def __init__(
        self,
        medicine_id,
        batch_id,
        quantity,
        unit_price,
        purchase_price=0,
        discount_percent=0,
        tax_percent=0,
        medicine_name="",
        batch_number="",
        expiry_date=None,
        fefo_override=False,
    ):
        self.medicine_id = medicine_id
        self.batch_id = batch_id
        self.quantity = int(quantity)
        self.unit_price = to_decimal(unit_price)
        self.purchase_price = to_decimal(purchase_price)
        self.discount_percent = to_decimal(discount_percent)
        self.tax_percent = to_decimal(tax_percent)
        self.medicine_name = medicine_name
        self.batch_number = batch_number
        self.expiry_date = expiry_date
        self.fefo_override = bool(fefo_override)

    @property
    def key(self):
        return (self.medicine_id, self.batch_id)

    @property
    def total(self):
        return self.quantity * self.unit_price

    @property
    def discount_amount(self):
        return self.total * self.discount_percent / HUNDRED

    @property
    def tax_amount(self):
        return self.total * self.tax_percent / HUNDRED

    @property
    def line_profit(self):
        return (self.unit_price - self.purchase_price) * self.quantity

    def to_dict(self):
        return {
            "medicine_id": self.medicine_id,
            "batch_id": self.batch_id,
            "quantity": self.quantity,
            "unit_price": str(self.unit_price),
            "purchase_price": str(self.purchase_price),
            "discount_percent": str(self.discount_percent),
            "tax_percent": str(self.tax_percent),
            "medicine_name": self.medicine_name,
            "batch_number": self.batch_number,
            "expiry_date": self.expiry_date.isoformat() if hasattr(self.expiry_date, "isoformat") else self.expiry_date,
            "fefo_override": self.fefo_override,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(**data)


class PosCart:
    SESSION_KEY = "pos_cart"

    def __init__(self, items=None):
        self.items = list(items or [])

    def __len__(self):
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    @property
    def is_empty(self):
        return not self.items

    def find(self, medicine_id, batch_id):
        for item in self.items:
            if item.key == (medicine_id, batch_id):
                return item
        return None

    def add(self, item):
        """Add a line, merging quantities with an existing (medicine, batch) line."""
        existing = self.find(item.medicine_id, item.batch_id)
        if existing is None:
            self.items.append(item)
            return item
        existing.quantity += item.quantity
        existing.fefo_override = existing.fefo_override or item.fefo_override
        return existing

    def update_quantity(self, medicine_id, batch_id, quantity):
        item = self.find(medicine_id, batch_id)
        if item is None:
            return None
        if quantity < 1:
            self.remove(medicine_id, batch_id)
            return None
        item.quantity = int(quantity)
        return item

    def remove(self, medicine_id, batch_id):
        self.items = [item for item in self.items if item.key != (medicine_id, batch_id)]

    def clear(self):
        self.items = []

    def reserved_quantities(self, exclude=None):
        """Units held per batch id, optionally ignoring one (medicine, batch) line."""
        reserved = {}
        for item in self.items:
            if exclude is not None and item.key == exclude:
                continue
            reserved[item.batch_id] = reserved.get(item.batch_id, 0) + item.quantity
        return reserved

    def totals(self):
        return calculate_totals(self.items)

    def to_dict(self):
        totals = self.totals()
        return {
            "items": [dict(item.to_dict(), total=str(money(item.total))) for item in self.items],
            "subtotal": str(money(totals["subtotal"])),
            "discount_amount": str(money(totals["discount_amount"])),
            "tax_amount": str(money(totals["tax_amount"])),
            "total": str(money(totals["total"])),
            "item_count": sum(item.quantity for item in self.items),
        }

    def save_to_session(self, session):
        session[self.SESSION_KEY] = [item.to_dict() for item in self.items]
        session.modified = True

    @classmethod
    def from_session(cls, session):
        return cls(CartItem.from_dict(data) for data in session.get(cls.SESSION_KEY, []))
