"""Contrato do verificador de identidade do usuário final.

A verificação do bearer token do usuário é feita pela camada de rotas; o
emissor só recebe a identidade já verificada.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True, slots=True)
class CallerIdentity:
    uid: str
    email: str | None = None


class IdentityVerifierProtocol(Protocol):
    async def verify(self, bearer_token: str) -> CallerIdentity: ...
