"""Filters de logging para contexto e mascaramento.

- CorrelationIdFilter: injeta correlation_id e service em todo record.
- SensitiveDataFilter: mascara campos de `extra` com nome de segredo
  (client_secret, access_token, private_key, ...).
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

MASK = "***"

# Trechos de nome de atributo tratados como segredo
SENSITIVE_KEY_MARKERS = (
    "secret",
    "password",
    "passphrase",
    "private_key",
    "access_token",
    "authorization",
    "certificate",
)


class CorrelationIdFilter(logging.Filter):
    """Injeta correlation_id e service em cada record de log.

    Args:
        service_name: Nome do serviço para identificação nos logs.
        correlation_id_getter: Função que retorna o correlation_id atual.
            Se não fornecida, usa string vazia.
    """

    def __init__(
        self,
        service_name: str,
        correlation_id_getter: Callable[[], str] | None = None,
    ) -> None:
        super().__init__()
        self._service_name = service_name
        self._get_correlation_id = correlation_id_getter or (lambda: "")

    def filter(self, record: logging.LogRecord) -> bool:
        # correlation_id explícito via `extra` tem precedência
        existing = getattr(record, "correlation_id", None)
        record.correlation_id = existing if existing else self._get_correlation_id()
        record.service = self._service_name
        return True


def is_sensitive_key(key: str) -> bool:
    """Retorna True se o nome do campo indica conteúdo sensível."""
    lowered = key.lower()
    return any(marker in lowered for marker in SENSITIVE_KEY_MARKERS)


class SensitiveDataFilter(logging.Filter):
    """Mascara atributos sensíveis adicionados via `extra`.

    Não altera a mensagem: eventos são nomes fixos, dados vão em `extra`.
    """

    _STANDARD_ATTRS = frozenset(
        logging.LogRecord("", 0, "", 0, "", None, None).__dict__.keys()
    ) | {"message", "asctime"}

    def filter(self, record: logging.LogRecord) -> bool:
        for key in list(record.__dict__):
            if key in self._STANDARD_ATTRS:
                continue
            if is_sensitive_key(key) and record.__dict__[key]:
                record.__dict__[key] = MASK
        return True
