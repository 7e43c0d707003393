# core/services/numbering.py

"""
======================================================
PATH: core/services/numbering.py
======================================================
DOCUMENT NUMBERING

Purpose:
- Produce sequential document numbers scoped per prefix per year:
    {PREFIX}-{YEAR}-{SEQ:04d}   e.g. INV-2026-0007

Rules:
- Counter row is locked with select_for_update and incremented inside the
  caller's transaction. If the caller rolls back, the number is reused.
- Prefix must be one of DocumentCounter.Prefix.
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.utils import timezone

from core.exceptions import ERPValidationError
from core.models import DocumentCounter

logger = logging.getLogger(__name__)


def format_document_no(prefix: str, year: int, seq: int) -> str:
    return f"{prefix}-{year}-{seq:04d}"


@transaction.atomic
def generate_document_no(prefix: str, *, year: int | None = None) -> str:
    p = (prefix or "").strip().upper()
    if p not in DocumentCounter.Prefix.values:
        raise ERPValidationError(f"Unknown document prefix: {prefix!r}")

    y = int(year or timezone.localdate().year)

    counter = (
        DocumentCounter.objects.select_for_update()
        .filter(prefix=p, year=y)
        .first()
    )
    if counter is None:
        counter = DocumentCounter.objects.create(prefix=p, year=y, last_no=0)

    counter.last_no += 1
    counter.save(update_fields=["last_no", "updated_at"])

    number = format_document_no(p, y, counter.last_no)
    logger.debug("Document number issued", extra={"document_no": number})
    return number


def next_movement_no() -> str:
    return generate_document_no(DocumentCounter.Prefix.STOCK_MOVEMENT)


def next_invoice_no() -> str:
    return generate_document_no(DocumentCounter.Prefix.INVOICE)


def next_payment_no() -> str:
    return generate_document_no(DocumentCounter.Prefix.PAYMENT)
