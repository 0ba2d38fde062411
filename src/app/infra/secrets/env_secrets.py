"""Environment Secrets — credenciais do banco via variáveis de ambiente.

Fallback para desenvolvimento local. Em staging/production use
GCPSecretProvider.
"""

from __future__ import annotations

import logging
import os

logger = logging.getLogger(__name__)


class EnvSecretProvider:
    """Provedor de secrets usando variáveis de ambiente.

    `santander-client-secret` é lido de `SANTANDER_CLIENT_SECRET`
    (com `prefix`, de `{PREFIX}_SANTANDER_CLIENT_SECRET`).
    """

    def __init__(self, prefix: str = "") -> None:
        self._prefix = prefix.upper().rstrip("_") + "_" if prefix else ""

    def _env_key(self, key: str) -> str:
        return f"{self._prefix}{key.upper().replace('-', '_')}"

    def get(self, key: str, default: str | None = None) -> str | None:
        env_key = self._env_key(key)
        value = os.getenv(env_key)
        if value is None or not value.strip():
            logger.debug("env_secret_not_found", extra={"key": key, "env_key": env_key})
            return default
        return value

    def require(self, key: str) -> str:
        """Raises ValueError se a variável não estiver definida."""
        value = self.get(key)
        if value is None:
            msg = f"Variável de ambiente obrigatória não definida: {self._env_key(key)}"
            raise ValueError(msg)
        return value
