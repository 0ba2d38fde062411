"""Settings do Google Cloud Storage (arquivo durável dos PDFs)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True)
class GCSSettings:
    """Configurações do Google Cloud Storage.

    Attributes:
        bucket_receipts: Bucket onde os PDFs de boleto são arquivados
        receipts_prefix: Prefixo dos objetos dentro do bucket
    """

    bucket_receipts: str = ""
    receipts_prefix: str = "boletos"

    def validate(self, store_backend: str) -> list[str]:
        """Bucket é obrigatório quando a persistência não é em memória."""
        if store_backend != "memory" and not self.bucket_receipts:
            return ["GCS_BUCKET_RECEIPTS não configurado"]
        return []


def _load_gcs_from_env() -> GCSSettings:
    """Carrega GCSSettings de variáveis de ambiente."""
    return GCSSettings(
        bucket_receipts=os.getenv("GCS_BUCKET_RECEIPTS", ""),
        receipts_prefix=os.getenv("GCS_RECEIPTS_PREFIX", "boletos").strip("/"),
    )


@lru_cache(maxsize=1)
def get_gcs_settings() -> GCSSettings:
    """Retorna instância cacheada de GCSSettings."""
    return _load_gcs_from_env()
