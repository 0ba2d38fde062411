"""Agregador de settings de infraestrutura GCP."""

from __future__ import annotations

from config.settings.infra.firestore import (
    FirestoreSettings,
    get_firestore_settings,
)
from config.settings.infra.gcs import (
    GCSSettings,
    get_gcs_settings,
)

__all__ = [
    "FirestoreSettings",
    "GCSSettings",
    "get_firestore_settings",
    "get_gcs_settings",
]
