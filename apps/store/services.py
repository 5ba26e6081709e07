"""
Web store services: the public catalogue, session cart, checkout, order
tracking and web customer accounts.
"""
import logging
import re

from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Min, Q, Sum
from django.utils.crypto import get_random_string

from apps.core.exceptions import EmptyCartError
from apps.medicines.models import Medicine
from apps.sales.cart import money
from apps.system.services import SettingsService

from .cart import WebCart
from .models import WebCustomer, WebOrder, WebOrderItem

logger = logging.getLogger(__name__)

PHONE_RE = re.compile(r"^(\+92|0)?3\d{9}$")
EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PASSWORD_MIN_LENGTH = 6

SESSION_CUSTOMER_KEY = "web_customer_id"


def normalize_phone(phone):
    return re.sub(r"[\s-]", "", phone or "")


class StorefrontService:
    SORT_NAME = "name"
    SORT_PRICE_ASC = "price-asc"
    SORT_PRICE_DESC = "price-desc"
    SORT_CHOICES = (SORT_NAME, SORT_PRICE_ASC, SORT_PRICE_DESC)

    @staticmethod
    def live_medicines():
        """Active, web-live, non-controlled medicines that have stock."""
        return (
            Medicine.objects.filter(is_active=True, is_web_live=True)
            .exclude(classification=Medicine.Classification.CONTROLLED)
            .annotate(
                stock=Sum("batches__quantity", filter=Q(batches__is_active=True, batches__quantity__gt=0)),
                price=Min("batches__sale_price", filter=Q(batches__is_active=True, batches__quantity__gt=0)),
            )
            .filter(stock__gt=0)
        )

    @staticmethod
    def list_products(query="", category="", sort=SORT_NAME):
        queryset = StorefrontService.live_medicines()

        query = (query or "").strip()
        if query:
            queryset = queryset.filter(
                Q(name__icontains=query) | Q(generic_name__icontains=query) | Q(brand_name__icontains=query)
            )
        if category and category != "all":
            queryset = queryset.filter(category=category)

        if sort == StorefrontService.SORT_PRICE_ASC:
            queryset = queryset.order_by("price", "name")
        elif sort == StorefrontService.SORT_PRICE_DESC:
            queryset = queryset.order_by("-price", "name")
        else:
            queryset = queryset.order_by("name")
        return queryset

    @staticmethod
    def get_product(medicine_id):
        return StorefrontService.live_medicines().filter(pk=medicine_id).first()

    @staticmethod
    def categories():
        values = StorefrontService.live_medicines().values_list("category", flat=True).distinct()
        labels = dict(Medicine.Category.choices)
        return [{"value": value, "label": labels.get(value, value)} for value in sorted(set(values))]


class WebCartService:
    @staticmethod
    def add(cart, medicine_id, quantity=1):
        product = StorefrontService.get_product(medicine_id)
        if product is None:
            raise ValidationError({"medicine_id": "Product is not available."})
        if int(quantity) < 1:
            raise ValidationError({"quantity": "Quantity must be at least 1."})
        return cart.add(
            medicine_id=product.id,
            name=product.name,
            price=product.price,
            quantity=quantity,
            max_quantity=product.stock,
        )


class CheckoutService:
    @staticmethod
    def available_payment_methods(settings_obj=None):
        settings_obj = settings_obj or SettingsService.get_settings()
        methods = [WebOrder.PAYMENT_COD]
        if settings_obj.enable_jazzcash:
            methods.append(WebOrder.PAYMENT_JAZZCASH)
        if settings_obj.enable_easypaisa:
            methods.append(WebOrder.PAYMENT_EASYPAISA)
        if settings_obj.enable_card_payments:
            methods.append(WebOrder.PAYMENT_CARD)
        return methods

    @staticmethod
    def validate(data):
        """Return a field -> message dict; empty when the form is valid."""
        errors = {}
        if not (data.get("name") or "").strip():
            errors["name"] = "Name is required"

        phone = normalize_phone(data.get("phone"))
        if not phone:
            errors["phone"] = "Phone is required"
        elif not PHONE_RE.match(phone):
            errors["phone"] = "Enter a valid Pakistani phone number"

        if not (data.get("address") or "").strip():
            errors["address"] = "Address is required"
        if not (data.get("city") or "").strip():
            errors["city"] = "City is required"

        payment_method = data.get("payment_method") or WebOrder.PAYMENT_COD
        if payment_method not in CheckoutService.available_payment_methods():
            errors["payment_method"] = "Payment method is not available"
        return errors

    @staticmethod
    def generate_order_id():
        while True:
            order_id = "WEB-" + get_random_string(8, allowed_chars="ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789")
            if not WebOrder.objects.filter(order_id=order_id).exists():
                return order_id

    @staticmethod
    def place_order(cart, data, customer=None):
        if cart.is_empty:
            raise EmptyCartError("Cart is empty.")

        errors = CheckoutService.validate(data)
        if errors:
            raise ValidationError(errors)

        payment_method = data.get("payment_method") or WebOrder.PAYMENT_COD
        totals = cart.totals()

        with transaction.atomic():
            order = WebOrder.objects.create(
                order_id=CheckoutService.generate_order_id(),
                customer=customer,
                customer_name=data["name"].strip(),
                customer_phone=normalize_phone(data["phone"]),
                customer_email=(data.get("email") or "").strip(),
                customer_address=data["address"].strip(),
                customer_city=data["city"].strip(),
                subtotal=money(totals["subtotal"]),
                delivery_fee=money(totals["delivery_fee"]),
                total=money(totals["total"]),
                payment_method=payment_method,
                payment_status=(
                    WebOrder.PAYMENT_PENDING if payment_method == WebOrder.PAYMENT_COD else WebOrder.PAYMENT_PAID
                ),
                notes=(data.get("notes") or "").strip(),
            )
            WebOrderItem.objects.bulk_create([
                WebOrderItem(
                    order=order,
                    medicine_id=line["medicine_id"],
                    name=line["name"],
                    quantity=line["quantity"],
                    price=money(line["price"]),
                    total=money(line["price"] * line["quantity"]),
                )
                for line in cart.lines.values()
            ])

        cart.clear()
        logger.info("Web order %s placed: total %s via %s", order.order_id, order.total, payment_method)
        return order


class OrderTrackingService:
    @staticmethod
    def track(query):
        """Orders whose id matches ``query`` (any case) or whose phone contains it."""
        query = (query or "").strip()
        if not query:
            return WebOrder.objects.none()
        return WebOrder.objects.filter(
            Q(order_id=query.upper()) | Q(customer_phone__contains=normalize_phone(query))
        ).prefetch_related("items")

    @staticmethod
    def update_status(order, status):
        valid = {value for value, _ in WebOrder.STATUS_CHOICES}
        if status not in valid:
            raise ValidationError({"order_status": "Invalid order status."})
        if order.order_status in (WebOrder.STATUS_DELIVERED, WebOrder.STATUS_CANCELLED):
            raise ValidationError({"order_status": "Order is already closed."})
        order.order_status = status
        update_fields = ["order_status", "updated_at"]
        if status == WebOrder.STATUS_DELIVERED and order.payment_method == WebOrder.PAYMENT_COD:
            order.payment_status = WebOrder.PAYMENT_PAID
            update_fields.append("payment_status")
        order.save(update_fields=update_fields)
        logger.info("Web order %s moved to %s", order.order_id, status)
        return order


class WebAuthService:
    @staticmethod
    def validate(email, password, confirm_password=None, name=None, signup=False):
        errors = {}
        if signup and not (name or "").strip():
            errors["name"] = "Name is required"
        if not EMAIL_RE.match(email or ""):
            errors["email"] = "Invalid email"
        if len(password or "") < PASSWORD_MIN_LENGTH:
            errors["password"] = "Minimum 6 characters"
        if signup and password != confirm_password:
            errors["confirm_password"] = "Passwords do not match"
        return errors

    @staticmethod
    def signup(request, name, email, password, phone=""):
        """Create the account and sign it in. Returns False for a taken email."""
        email = email.strip().lower()
        if WebCustomer.objects.filter(email__iexact=email).exists():
            return False
        customer = WebCustomer(name=name.strip(), email=email, phone=normalize_phone(phone))
        customer.set_password(password)
        customer.save()
        request.session[SESSION_CUSTOMER_KEY] = customer.pk
        logger.info("Web customer %s signed up", customer.pk)
        return True

    @staticmethod
    def login(request, email, password):
        customer = WebCustomer.objects.filter(email__iexact=(email or "").strip()).first()
        if customer is None or not customer.check_password(password):
            logger.info("Failed storefront login for %s", email)
            return False
        request.session[SESSION_CUSTOMER_KEY] = customer.pk
        return True

    @staticmethod
    def logout(request):
        request.session.pop(SESSION_CUSTOMER_KEY, None)

    @staticmethod
    def current_customer(request):
        customer_id = request.session.get(SESSION_CUSTOMER_KEY)
        if customer_id is None:
            return None
        return WebCustomer.objects.filter(pk=customer_id).first()
