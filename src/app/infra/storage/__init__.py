"""Armazenamento durável dos PDFs de boleto."""

from __future__ import annotations

from app.infra.storage.gcs_receipt_storage import GCSReceiptStorage
from app.infra.storage.memory_storage import MemoryReceiptStorage

__all__ = [
    "GCSReceiptStorage",
    "MemoryReceiptStorage",
]
