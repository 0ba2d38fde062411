"""Settings de emissão de boletos (regras de negócio configuráveis)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Literal

ArchiveModeName = Literal["sync", "background", "skip"]


@dataclass(frozen=True)
class BoletoSettings:
    """Configurações de emissão.

    Attributes:
        due_date_business_days: N-ésimo dia útil do mês seguinte usado como vencimento
        business_timezone: Timezone das datas de emissão e do NSU
        bank_number_width: Largura (zero-padded) do nosso número
        document_kind: Espécie do documento enviada ao banco
        nsu_fallback_enabled: Permite NSU degradado quando o contador falha
        archive_mode: Arquivamento do PDF após o registro (sync|background|skip)
        receipt_upload_attempts: Tentativas de gravação do PDF (1 + retry)
    """

    due_date_business_days: int = 5
    business_timezone: str = "America/Sao_Paulo"
    bank_number_width: int = 13
    document_kind: str = "DUPLICATA_MERCANTIL"
    nsu_fallback_enabled: bool = True
    archive_mode: ArchiveModeName = "sync"
    receipt_upload_attempts: int = 2

    def validate(self) -> list[str]:
        errors: list[str] = []
        if self.due_date_business_days < 1:
            errors.append("BOLETO_DUE_DATE_BUSINESS_DAYS deve ser >= 1")
        if not 1 <= self.bank_number_width <= 13:
            errors.append("BOLETO_BANK_NUMBER_WIDTH deve estar entre 1 e 13")
        if self.archive_mode not in {"sync", "background", "skip"}:
            errors.append(f"BOLETO_ARCHIVE_MODE inválido: {self.archive_mode}")
        if not 1 <= self.receipt_upload_attempts <= 2:
            errors.append("BOLETO_RECEIPT_UPLOAD_ATTEMPTS deve ser 1 ou 2")
        return errors


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _load_boleto_from_env() -> BoletoSettings:
    """Carrega BoletoSettings de variáveis de ambiente."""
    return BoletoSettings(
        due_date_business_days=int(os.getenv("BOLETO_DUE_DATE_BUSINESS_DAYS", "5")),
        business_timezone=os.getenv("BOLETO_BUSINESS_TIMEZONE", "America/Sao_Paulo"),
        bank_number_width=int(os.getenv("BOLETO_BANK_NUMBER_WIDTH", "13")),
        document_kind=os.getenv("BOLETO_DOCUMENT_KIND", "DUPLICATA_MERCANTIL"),
        nsu_fallback_enabled=_parse_bool(os.getenv("BOLETO_NSU_FALLBACK_ENABLED", "true")),
        archive_mode=os.getenv("BOLETO_ARCHIVE_MODE", "sync").lower(),  # type: ignore[arg-type]
        receipt_upload_attempts=int(os.getenv("BOLETO_RECEIPT_UPLOAD_ATTEMPTS", "2")),
    )


@lru_cache(maxsize=1)
def get_boleto_settings() -> BoletoSettings:
    """Retorna instância cacheada de BoletoSettings."""
    return _load_boleto_from_env()
