"""
WSGI config for the PharmaPOS project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "pharmapos.settings")

application = get_wsgi_application()
