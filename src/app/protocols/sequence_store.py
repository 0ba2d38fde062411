"""Contrato do contador persistente usado na alocação de identificadores."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class SequenceStoreProtocol(Protocol):
    """Incremento atômico de contadores nomeados.

    Invariantes:
        - Cada chamada lê o valor atual, grava `atual + 1` e retorna o novo
          valor numa única unidade transacional.
        - Nunca decrementa; duas chamadas nunca retornam o mesmo valor.

    Raises:
        InfrastructureError: Se a persistência estiver indisponível.
    """

    async def increment(self, name: str) -> int: ...
