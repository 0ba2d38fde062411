"""Contrato de persistência dos registros de boleto.

Implementações: Firestore (produção) e memória (dev/testes).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

    from app.domain.boleto import ArchiveStatus, BoletoRecord


class BankSlipStoreProtocol(ABC):
    """Armazena BoletoRecords por nsu_code.

    Invariantes:
        - `create` recusa nsu_code já existente (nsu é único).
        - `update` é um read-modify-write transacional de um único documento;
          a função `mutate` aplica a transição (que valida o sentido).
    """

    @abstractmethod
    async def create(self, record: BoletoRecord) -> None:
        """Persiste um registro novo.

        Raises:
            InvalidTransitionError: Se já existir registro com o mesmo nsu_code.
            FirestoreUnavailableError: Se a persistência falhar.
        """

    @abstractmethod
    async def get(self, nsu_code: str) -> BoletoRecord | None:
        """Retorna o registro ou None."""

    @abstractmethod
    async def update(
        self,
        nsu_code: str,
        mutate: Callable[[BoletoRecord], BoletoRecord],
    ) -> BoletoRecord:
        """Aplica `mutate` ao registro atual e grava o resultado.

        Raises:
            BankSlipNotFoundError: Se o registro não existir.
            InvalidTransitionError: Se `mutate` recusar a transição.
        """

    @abstractmethod
    async def list_by_archive_status(
        self,
        archive_status: ArchiveStatus,
        *,
        limit: int = 100,
    ) -> list[BoletoRecord]:
        """Lista registros por estado de arquivamento (reconciliação)."""

    async def mark_registered(
        self,
        nsu_code: str,
        *,
        digitable_line: str | None,
        barcode: str | None,
    ) -> BoletoRecord:
        return await self.update(
            nsu_code,
            lambda record: record.mark_registered(digitable_line=digitable_line, barcode=barcode),
        )

    async def mark_error(self, nsu_code: str, detail: dict[str, Any]) -> BoletoRecord:
        return await self.update(nsu_code, lambda record: record.mark_error(detail))

    async def mark_archived(self, nsu_code: str, pdf_url: str) -> BoletoRecord:
        return await self.update(nsu_code, lambda record: record.mark_archived(pdf_url))

    async def mark_archive_failed(
        self,
        nsu_code: str,
        detail: dict[str, Any],
        *,
        temporary_pdf_link: str | None = None,
    ) -> BoletoRecord:
        return await self.update(
            nsu_code,
            lambda record: record.mark_archive_failed(
                detail,
                temporary_pdf_link=temporary_pdf_link,
            ),
        )
