"""Stores em memória — apenas para desenvolvimento e testes.

ATENÇÃO: Não usar em staging/production. Sem persistência entre reinícios
e sem atomicidade entre processos.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from app.protocols.bank_slip_store import BankSlipStoreProtocol
from app.protocols.sequence_store import SequenceStoreProtocol
from utils.errors import BankSlipNotFoundError, InvalidTransitionError

if TYPE_CHECKING:
    from collections.abc import Callable

    from app.domain.boleto import ArchiveStatus, BoletoRecord


class MemorySequenceStore(SequenceStoreProtocol):
    """Contadores em memória — apenas para dev/test.

    O lock faz o papel da transação: leitura, incremento e escrita formam
    uma unidade.
    """

    def __init__(self, initial: dict[str, int] | None = None) -> None:
        self._values: dict[str, int] = dict(initial or {})
        self._lock = threading.Lock()

    async def increment(self, name: str) -> int:
        with self._lock:
            next_value = self._values.get(name, 0) + 1
            self._values[name] = next_value
            return next_value

    def current(self, name: str) -> int:
        """Valor atual do contador (apenas para testes)."""
        return self._values.get(name, 0)


class MemoryBankSlipStore(BankSlipStoreProtocol):
    """Store de BoletoRecord em memória — apenas para dev/test."""

    def __init__(self) -> None:
        self._records: dict[str, BoletoRecord] = {}
        self._lock = threading.Lock()

    async def create(self, record: BoletoRecord) -> None:
        with self._lock:
            if record.nsu_code in self._records:
                raise InvalidTransitionError(
                    "nsu_code já registrado",
                    details={"nsu_code": record.nsu_code},
                )
            self._records[record.nsu_code] = record

    async def get(self, nsu_code: str) -> BoletoRecord | None:
        return self._records.get(nsu_code)

    async def update(
        self,
        nsu_code: str,
        mutate: Callable[[BoletoRecord], BoletoRecord],
    ) -> BoletoRecord:
        with self._lock:
            current = self._records.get(nsu_code)
            if current is None:
                raise BankSlipNotFoundError(
                    "Registro de boleto inexistente",
                    details={"nsu_code": nsu_code},
                )
            updated = mutate(current)
            self._records[nsu_code] = updated
            return updated

    async def list_by_archive_status(
        self,
        archive_status: ArchiveStatus,
        *,
        limit: int = 100,
    ) -> list[BoletoRecord]:
        matches = [r for r in self._records.values() if r.archive_status == archive_status]
        return matches[:limit]

    def all_records(self) -> list[BoletoRecord]:
        """Retorna todos os registros (apenas para testes)."""
        return list(self._records.values())
