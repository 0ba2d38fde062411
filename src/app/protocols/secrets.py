"""Contrato dos provedores de secrets (env ou Secret Manager)."""

from __future__ import annotations

from typing import Protocol


class SecretProviderProtocol(Protocol):
    def get(self, key: str, default: str | None = None) -> str | None: ...

    def require(self, key: str) -> str: ...
