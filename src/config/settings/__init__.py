"""Agregador de settings do emissor de boletos.

Re-exporta as settings de cada domínio.
"""

from __future__ import annotations

from config.settings.base import (
    BaseSettings,
    Environment,
    SecretsBackend,
    StoreBackend,
    get_base_settings,
)
from config.settings.boleto import (
    BoletoSettings,
    get_boleto_settings,
)
from config.settings.infra import (
    FirestoreSettings,
    GCSSettings,
    get_firestore_settings,
    get_gcs_settings,
)
from config.settings.santander import (
    COLLECTION_API_PREFIX,
    PRODUCTION_BASE_URL,
    SANDBOX_BASE_URL,
    SantanderSettings,
    get_santander_settings,
)

__all__ = [
    # Constants
    "COLLECTION_API_PREFIX",
    "PRODUCTION_BASE_URL",
    "SANDBOX_BASE_URL",
    # Base
    "BaseSettings",
    "BoletoSettings",
    "Environment",
    # Infrastructure
    "FirestoreSettings",
    "GCSSettings",
    # Bank
    "SantanderSettings",
    "SecretsBackend",
    "StoreBackend",
    "get_base_settings",
    "get_boleto_settings",
    "get_firestore_settings",
    "get_gcs_settings",
    "get_santander_settings",
]
