"""
Storefront cart kept in the visitor's session.

One line per medicine. ``max_quantity`` is the stock seen when the item was
added; every quantity change is clamped to it.
"""
from decimal import Decimal

from django.conf import settings

from apps.sales.cart import money, to_decimal


def delivery_fee_for(subtotal):
    """Flat delivery fee, waived from the free-delivery threshold upwards."""
    threshold = to_decimal(settings.STORE_FREE_DELIVERY_THRESHOLD)
    if to_decimal(subtotal) >= threshold:
        return Decimal("0")
    return to_decimal(settings.STORE_DELIVERY_FEE)


class WebCart:
    SESSION_KEY = "web_cart"

    def __init__(self, lines=None):
        self.lines = {}
        for line in lines or []:
            self.lines[int(line["medicine_id"])] = dict(line, price=to_decimal(line["price"]))

    @classmethod
    def from_session(cls, session):
        return cls(session.get(cls.SESSION_KEY, []))

    def save_to_session(self, session):
        session[self.SESSION_KEY] = [dict(line, price=str(line["price"])) for line in self.lines.values()]
        session.modified = True

    @property
    def is_empty(self):
        return not self.lines

    def add(self, medicine_id, name, price, quantity, max_quantity):
        medicine_id = int(medicine_id)
        line = self.lines.get(medicine_id)
        if line is None:
            self.lines[medicine_id] = {
                "medicine_id": medicine_id,
                "name": name,
                "price": to_decimal(price),
                "quantity": min(int(quantity), int(max_quantity)),
                "max_quantity": int(max_quantity),
            }
        else:
            line["quantity"] = min(line["quantity"] + int(quantity), line["max_quantity"])
        return self.lines[medicine_id]

    def update(self, medicine_id, quantity):
        medicine_id = int(medicine_id)
        line = self.lines.get(medicine_id)
        if line is None:
            return None
        if int(quantity) < 1:
            self.remove(medicine_id)
            return None
        line["quantity"] = min(int(quantity), line["max_quantity"])
        return line

    def remove(self, medicine_id):
        self.lines.pop(int(medicine_id), None)

    def clear(self):
        self.lines = {}

    def item_count(self):
        return sum(line["quantity"] for line in self.lines.values())

    def totals(self):
        subtotal = sum((line["price"] * line["quantity"] for line in self.lines.values()), Decimal("0"))
        delivery_fee = delivery_fee_for(subtotal)
        return {
            "subtotal": subtotal,
            "delivery_fee": delivery_fee,
            "total": subtotal + delivery_fee,
        }

    def to_dict(self):
        totals = self.totals()
        return {
            "items": [
                dict(line, price=str(money(line["price"])), total=str(money(line["price"] * line["quantity"])))
                for line in self.lines.values()
            ],
            "item_count": self.item_count(),
            "subtotal": str(money(totals["subtotal"])),
            "delivery_fee": str(money(totals["delivery_fee"])),
            "total": str(money(totals["total"])),
        }
