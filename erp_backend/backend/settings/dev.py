# backend/settings/dev.py
"""
PATH: backend/settings/dev.py

LOCAL DEVELOPMENT SETTINGS

- SQLite by default (DATABASE_URL overrides)
- Vite dev server allowed for CORS/CSRF
- Warehouse fallback and repair decisions visible at DEBUG
"""

from __future__ import annotations

from .base import *  # noqa: F403
from .base import LOGGING, env

DEBUG = True

ALLOWED_HOSTS = env.list("ALLOWED_HOSTS", default=["localhost", "127.0.0.1"])

CORS_ALLOWED_ORIGINS = env.list("CORS_ALLOWED_ORIGINS", default=["http://localhost:5173"])
CSRF_TRUSTED_ORIGINS = env.list("CSRF_TRUSTED_ORIGINS", default=["http://localhost:5173"])
CORS_ALLOW_CREDENTIALS = True

for _channel in ("stock", "repair"):
    LOGGING["loggers"][_channel]["level"] = env("LOG_LEVEL_DEV", default="DEBUG")
