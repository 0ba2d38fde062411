"""GCP Secret Manager — credenciais do banco em staging/production.

Valores ficam em cache por processo (lru_cache); o CredentialStore lê uma
única vez por processo de qualquer forma.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from google.cloud.secretmanager import SecretManagerServiceClient

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _get_client() -> SecretManagerServiceClient:
    """Obtém cliente do Secret Manager (singleton via lru_cache)."""
    from google.cloud import secretmanager

    return secretmanager.SecretManagerServiceClient()


@lru_cache(maxsize=64)
def get_secret(
    secret_id: str,
    project_id: str | None = None,
    version: str = "latest",
) -> str:
    """Obtém valor de secret do GCP Secret Manager.

    Raises:
        ValueError: Se project_id não fornecido e GCP_PROJECT não definido
        google.api_core.exceptions.NotFound: Se secret não existe
    """
    if project_id is None:
        project_id = os.getenv("GCP_PROJECT")
        if not project_id:
            msg = "GCP_PROJECT não definido e project_id não fornecido"
            raise ValueError(msg)

    name = f"projects/{project_id}/secrets/{secret_id}/versions/{version}"
    try:
        response = _get_client().access_secret_version(request={"name": name})
    except Exception as exc:
        logger.error(
            "secret_load_error",
            extra={"secret_id": secret_id, "error_type": type(exc).__name__},
        )
        raise
    logger.debug("secret_loaded", extra={"secret_id": secret_id})
    return response.payload.data.decode("UTF-8")


class GCPSecretProvider:
    """Provedor de secrets usando GCP Secret Manager.

    Ex.: key="santander-client-secret", environment="production"
    -> secret "santander-client-secret-production".
    """

    def __init__(
        self,
        project_id: str | None = None,
        environment: str = "staging",
    ) -> None:
        self._project_id = project_id or os.getenv("GCP_PROJECT", "")
        self._suffix = f"-{environment}" if environment else ""

    def get(self, key: str, default: str | None = None) -> str | None:
        secret_id = f"{key}{self._suffix}"
        try:
            return get_secret(secret_id, self._project_id or None)
        except Exception as exc:
            logger.warning(
                "secret_fallback_to_default",
                extra={"key": key, "secret_id": secret_id, "error_type": type(exc).__name__},
            )
            return default

    def require(self, key: str) -> str:
        """Raises ValueError se o secret não for encontrado."""
        value = self.get(key)
        if value is None:
            msg = f"Secret obrigatório não encontrado: {key}{self._suffix}"
            raise ValueError(msg)
        return value
