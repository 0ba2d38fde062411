"""Contrato do armazenamento durável dos PDFs de boleto."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ReceiptStorageProtocol(Protocol):
    """Grava bytes e devolve uma URL estável de recuperação.

    Raises:
        StorageUnavailableError: Se a gravação falhar.
    """

    async def save(self, *, data: bytes, filename: str, content_type: str) -> str: ...
