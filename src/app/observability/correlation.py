"""correlation_id por execução de emissão/arquivamento.

Guardado numa ContextVar: cada request (ou task de arquivamento em background,
que herda o contexto) enxerga o próprio valor, e o CorrelationIdFilter o
injeta em todos os logs.
"""

from __future__ import annotations

import uuid
from contextvars import ContextVar, Token

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


def get_correlation_id() -> str:
    """correlation_id atual ou string vazia."""
    return _correlation_id.get()


def generate_correlation_id() -> str:
    return uuid.uuid4().hex


def set_correlation_id(correlation_id: str | None = None) -> Token[str]:
    """Define o correlation_id (gera um novo se None).

    Returns:
        Token para reset_correlation_id().
    """
    return _correlation_id.set(correlation_id or generate_correlation_id())


def reset_correlation_id(token: Token[str]) -> None:
    _correlation_id.reset(token)
