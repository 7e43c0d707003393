"""
PATH: backend/asgi.py

ASGI entrypoint for the ERP backend.
The service layer is synchronous; ASGI is offered for deployment parity only.
"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "backend.settings.dev")

application = get_asgi_application()
