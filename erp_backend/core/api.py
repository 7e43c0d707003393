# core/api.py

"""
ERROR -> RESPONSE MAPPING

Views catch ERPServiceError explicitly and hand it here so every endpoint
answers with the same {"detail": ...} body and the error's status code.
"""

from __future__ import annotations

import logging

from rest_framework.response import Response

from core.exceptions import ERPServiceError

logger = logging.getLogger(__name__)


def service_error_response(exc: ERPServiceError) -> Response:
    logger.warning(
        "Service rejected request",
        extra={"error": exc.__class__.__name__, "detail": exc.message},
    )
    return Response(exc.as_dict(), status=exc.status_code)
