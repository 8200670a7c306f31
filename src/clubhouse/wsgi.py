"""WSGI config for the clubhouse project."""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "clubhouse.settings")

application = get_wsgi_application()
