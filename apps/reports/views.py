"""
API views for reports app.

Date-ranged reports accept ``?start=YYYY-MM-DD&end=YYYY-MM-DD`` and default
to the last 30 days.
"""
from datetime import timedelta

from django.utils import timezone
from django.utils.dateparse import parse_date
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.accounts.models import User
from apps.accounts.permissions import ModulePermission
from apps.system.services import SettingsService

from .services import ReportingService

DEFAULT_RANGE_DAYS = 30


def _date_range(request):
    end = parse_date(request.query_params.get("end", "") or "") or timezone.localdate()
    start = parse_date(request.query_params.get("start", "") or "") or end - timedelta(days=DEFAULT_RANGE_DAYS)
    return start, end


class ReportView(APIView):
    permission_classes = [ModulePermission]
    permission_module = "reports"


class DashboardStatsView(ReportView):
    def get(self, request):
        return Response(ReportingService.dashboard_stats())


class KpiView(ReportView):
    def get(self, request):
        return Response(ReportingService.compute_kpis())


class SalesReportView(ReportView):
    def get(self, request):
        start, end = _date_range(request)
        return Response({"start": start, "end": end, "rows": ReportingService.sales_report(start, end)})


class ProfitReportView(ReportView):
    def get(self, request):
        user = request.user
        if user.role == User.ROLE_MANAGER and not SettingsService.get_settings().manager_can_see_profit:
            return Response(
                {"detail": "Profit figures are not available for your role."},
                status=status.HTTP_403_FORBIDDEN,
            )
        start, end = _date_range(request)
        return Response({"start": start, "end": end, "rows": ReportingService.profit_report(start, end)})


class TaxReportView(ReportView):
    def get(self, request):
        start, end = _date_range(request)
        return Response({"start": start, "end": end, "rows": ReportingService.tax_report(start, end)})


class InventoryReportView(ReportView):
    def get(self, request):
        return Response(ReportingService.inventory_report())


class ExpiryRiskView(ReportView):
    def get(self, request):
        return Response(ReportingService.expiry_risk())


class SlowMoversView(ReportView):
    def get(self, request):
        try:
            days = int(request.query_params.get("days", 90))
        except ValueError:
            return Response({"days": "Must be a whole number."}, status=status.HTTP_400_BAD_REQUEST)
        return Response(ReportingService.slow_movers(days=days))
