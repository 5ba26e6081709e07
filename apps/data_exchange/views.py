"""
CSV import/export endpoints under ``api/data/``.
"""
from django.http import HttpResponse
from rest_framework import status
from rest_framework.parsers import JSONParser, MultiPartParser
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.accounts.permissions import ModulePermission

from .services import DataExchangeService, UnknownEntityError

CSV_CONTENT_TYPE = "text/csv; charset=utf-8"


def _csv_response(content, filename):
    response = HttpResponse(content, content_type=CSV_CONTENT_TYPE)
    response["Content-Disposition"] = f'attachment; filename="{filename}"'
    return response


def _unknown_entity(entity):
    return Response({"error": f"Unknown entity '{entity}'"}, status=status.HTTP_404_NOT_FOUND)


class DataView(APIView):
    permission_classes = [ModulePermission]
    permission_module = "data"


class ExportView(DataView):
    def get(self, request, entity):
        try:
            content = DataExchangeService.export(entity)
        except UnknownEntityError:
            return _unknown_entity(entity)
        return _csv_response(content, DataExchangeService.export_filename(entity))


class TemplateView(DataView):
    def get(self, request, entity):
        try:
            content = DataExchangeService.template(entity)
        except UnknownEntityError:
            return _unknown_entity(entity)
        return _csv_response(content, f"{entity}_template.csv")


class ImportView(DataView):
    """
    Upload a CSV as multipart ``file`` or as JSON ``{"content": "..."}``.
    """

    parser_classes = [MultiPartParser, JSONParser]

    def post(self, request, entity):
        upload = request.FILES.get("file")
        content = upload.read() if upload is not None else request.data.get("content", "")
        if not content:
            return Response({"error": "CSV file is required"}, status=status.HTTP_400_BAD_REQUEST)
        try:
            result = DataExchangeService.import_rows(entity, content)
        except UnknownEntityError:
            return _unknown_entity(entity)

        imported = result["created"] + result["updated"]
        result["message"] = f"Imported {imported} rows"
        return Response(result, status=status.HTTP_201_CREATED if imported else status.HTTP_400_BAD_REQUEST)
