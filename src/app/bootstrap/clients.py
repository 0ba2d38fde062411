"""Factories de clientes externos: Firestore, Cloud Storage e secrets."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import TYPE_CHECKING

from config.settings import get_base_settings, get_firestore_settings

if TYPE_CHECKING:
    from google.cloud.firestore import Client as FirestoreClient
    from google.cloud.storage import Client as StorageClient

    from app.protocols.secrets import SecretProviderProtocol

logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────────────────────────────────────
# Google Cloud
# ──────────────────────────────────────────────────────────────────────────────


def _project_id() -> str | None:
    return get_firestore_settings().project_id or get_base_settings().gcp_project or None


@lru_cache(maxsize=1)
def create_firestore_client() -> FirestoreClient:
    """Cria cliente Firestore (singleton)."""
    from google.cloud import firestore

    project_id = _project_id()
    client = firestore.Client(project=project_id)
    logger.info("firestore_client_created", extra={"project": project_id})
    return client


@lru_cache(maxsize=1)
def create_storage_client() -> StorageClient:
    """Cria cliente Cloud Storage (singleton)."""
    from google.cloud import storage

    project_id = _project_id()
    client = storage.Client(project=project_id)
    logger.info("storage_client_created", extra={"project": project_id})
    return client


# ──────────────────────────────────────────────────────────────────────────────
# Secrets
# ──────────────────────────────────────────────────────────────────────────────


@lru_cache(maxsize=1)
def create_secret_provider() -> SecretProviderProtocol:
    """Provedor das credenciais do banco conforme SECRETS_BACKEND."""
    from app.infra.secrets import EnvSecretProvider, GCPSecretProvider

    base = get_base_settings()
    if base.secrets_backend == "gcp":
        logger.info("secret_provider_selected", extra={"backend": "gcp"})
        return GCPSecretProvider(project_id=base.gcp_project, environment=base.environment)

    logger.info("secret_provider_selected", extra={"backend": "env"})
    return EnvSecretProvider()
