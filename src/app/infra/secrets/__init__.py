"""Secrets — provedores das credenciais do banco.

Módulos disponíveis:
    - gcp_secrets: Google Cloud Secret Manager (staging/production)
    - env_secrets: Variáveis de ambiente (dev only)
"""

from __future__ import annotations

from app.infra.secrets.env_secrets import EnvSecretProvider
from app.infra.secrets.gcp_secrets import (
    GCPSecretProvider,
    get_secret,
)

__all__ = [
    "EnvSecretProvider",
    "GCPSecretProvider",
    "get_secret",
]
