"""WSGI entrypoint for the Assura Cash backend."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "assura_cash.settings")

application = get_wsgi_application()
