"""Armazenamento de PDFs em memória — apenas para desenvolvimento e testes."""

from __future__ import annotations

from app.protocols.receipt_storage import ReceiptStorageProtocol


class MemoryReceiptStorage(ReceiptStorageProtocol):
    """Guarda os bytes num dict e devolve URLs `memory://`."""

    def __init__(self, prefix: str = "boletos") -> None:
        self._prefix = prefix.strip("/")
        self.objects: dict[str, tuple[bytes, str]] = {}

    async def save(self, *, data: bytes, filename: str, content_type: str) -> str:
        key = f"{self._prefix}/{filename}" if self._prefix else filename
        self.objects[key] = (data, content_type)
        return f"memory://{key}"
