"""Armazenamento durável de PDFs no Google Cloud Storage."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from app.protocols.receipt_storage import ReceiptStorageProtocol
from utils.errors import StorageUnavailableError

if TYPE_CHECKING:
    from google.cloud.storage import Client as StorageClient

logger = logging.getLogger(__name__)


class GCSReceiptStorage(ReceiptStorageProtocol):
    """Grava PDFs em `gs://{bucket}/{prefix}/{filename}`.

    A URL devolvida é a URL pública estável do objeto; o acesso de leitura
    é controlado pela política do bucket.
    """

    def __init__(self, storage_client: StorageClient, bucket_name: str, prefix: str = "boletos") -> None:
        self._client = storage_client
        self._bucket_name = bucket_name
        self._prefix = prefix.strip("/")

    def _object_name(self, filename: str) -> str:
        return f"{self._prefix}/{filename}" if self._prefix else filename

    async def save(self, *, data: bytes, filename: str, content_type: str) -> str:
        return await asyncio.to_thread(self._save_sync, data, filename, content_type)

    def _save_sync(self, data: bytes, filename: str, content_type: str) -> str:
        object_name = self._object_name(filename)
        try:
            blob = self._client.bucket(self._bucket_name).blob(object_name)
            blob.upload_from_string(data, content_type=content_type)
        except Exception as exc:
            logger.error(
                "receipt_upload_failed",
                extra={"object_name": object_name, "error_type": type(exc).__name__},
            )
            raise StorageUnavailableError(f"Erro ao gravar {object_name}: {exc}") from exc

        logger.info(
            "receipt_uploaded",
            extra={"object_name": object_name, "size_bytes": len(data)},
        )
        return blob.public_url
