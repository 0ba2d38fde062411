"""Alocação de identificadores do boleto: nosso número e NSU.

Ambos saem de contadores persistentes com incremento atômico, então pedidos
concorrentes (inclusive em instâncias diferentes) nunca recebem o mesmo
valor. O NSU tem um caminho degradado opcional quando o contador está
indisponível; o nosso número não tem.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo

from config.logging import log_fallback
from utils.errors import InfrastructureError, SequenceUnavailableError

if TYPE_CHECKING:
    from app.protocols.sequence_store import SequenceStoreProtocol

logger = logging.getLogger(__name__)

BANK_NUMBER_COUNTER = "bank_number"
NSU_COUNTER = "nsu_sequence"

NSU_TIMESTAMP_FORMAT = "%y%m%d%H%M%S"
NSU_SUFFIX_WIDTH = 3
NSU_LENGTH = 12 + NSU_SUFFIX_WIDTH


@dataclass(frozen=True, slots=True)
class NsuAllocation:
    """NSU alocado; `degraded` indica que o contador não foi usado."""

    value: str
    degraded: bool = False


def _default_now() -> datetime:
    return datetime.now(UTC)


def _client_suffix(client_number: str) -> str:
    digits = "".join(ch for ch in client_number if ch in "0123456789")
    return digits[-NSU_SUFFIX_WIDTH:].zfill(NSU_SUFFIX_WIDTH)


class SequenceAllocator:
    """Aloca nosso número e NSU a partir do SequenceStore.

    Args:
        store: Contadores com incremento atômico
        bank_number_width: Largura do nosso número (zero-padded)
        timezone: Timezone do timestamp do NSU
        now: Relógio (injetável em testes)
        allow_degraded_nsu: Usa o NSU degradado quando o contador falha
    """

    def __init__(
        self,
        store: SequenceStoreProtocol,
        *,
        bank_number_width: int = 13,
        timezone: str = "America/Sao_Paulo",
        now: Callable[[], datetime] = _default_now,
        allow_degraded_nsu: bool = True,
    ) -> None:
        self._store = store
        self._width = bank_number_width
        self._tz = ZoneInfo(timezone)
        self._now = now
        self._allow_degraded_nsu = allow_degraded_nsu

    def local_now(self) -> datetime:
        """Agora no timezone de negócio."""
        return self._now().astimezone(self._tz)

    async def next_bank_number(self) -> str:
        """Próximo nosso número, zero-padded.

        Raises:
            SequenceUnavailableError: Contador indisponível ou largura estourada.
        """
        try:
            value = await self._store.increment(BANK_NUMBER_COUNTER)
        except InfrastructureError as exc:
            logger.error("bank_number_allocation_failed", extra={"error_type": type(exc).__name__})
            raise SequenceUnavailableError(
                "Contador de nosso número indisponível",
                details={"counter": BANK_NUMBER_COUNTER},
            ) from exc

        bank_number = str(value).zfill(self._width)
        if len(bank_number) > self._width:
            logger.error(
                "bank_number_overflow",
                extra={"value": value, "width": self._width},
            )
            raise SequenceUnavailableError(
                "Nosso número excedeu a largura configurada",
                details={"counter": BANK_NUMBER_COUNTER, "width": self._width},
            )
        return bank_number

    async def allocate_nsu(self, client_number: str) -> NsuAllocation:
        """Aloca um NSU de 15 caracteres: YYMMDDHHMMSS + sequência de 3 dígitos.

        Raises:
            SequenceUnavailableError: Contador indisponível e NSU degradado desativado.
        """
        timestamp = self.local_now().strftime(NSU_TIMESTAMP_FORMAT)
        started = time.perf_counter()
        try:
            value = await self._store.increment(NSU_COUNTER)
        except InfrastructureError as exc:
            if not self._allow_degraded_nsu:
                logger.error("nsu_allocation_failed", extra={"error_type": type(exc).__name__})
                raise SequenceUnavailableError(
                    "Contador de NSU indisponível",
                    details={"counter": NSU_COUNTER},
                ) from exc
            log_fallback(
                logger,
                "nsu_allocation",
                reason=f"sequence_store_unavailable:{type(exc).__name__}",
                elapsed_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            return NsuAllocation(value=timestamp + _client_suffix(client_number), degraded=True)

        suffix = str(value % 10**NSU_SUFFIX_WIDTH).zfill(NSU_SUFFIX_WIDTH)
        return NsuAllocation(value=timestamp + suffix)

    async def next_nsu(self, client_number: str) -> str:
        allocation = await self.allocate_nsu(client_number)
        return allocation.value
