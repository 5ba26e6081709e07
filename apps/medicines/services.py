import logging

from django.db.models import Q

from .models import Medicine

logger = logging.getLogger(__name__)


class MedicineService:
    @staticmethod
    def search_medicines(query):
        """
        Active medicines whose name or generic name contains ``query``
        (case-insensitive) or whose barcode contains it.
        """
        query = (query or "").strip()
        queryset = Medicine.objects.filter(is_active=True)
        if not query:
            return queryset
        return queryset.filter(
            Q(name__icontains=query)
            | Q(generic_name__icontains=query)
            | Q(barcode__contains=query)
        )

    @staticmethod
    def get_by_barcode(barcode):
        return Medicine.objects.filter(is_active=True, barcode=barcode).first()

    @staticmethod
    def deactivate(medicine):
        if not medicine.is_active:
            return medicine
        medicine.is_active = False
        medicine.save(update_fields=["is_active", "updated_at"])
        logger.info("Medicine %s deactivated", medicine.pk)
        return medicine
