"""Settings do Firestore.

Coleções usadas como contadores atômicos e registros de boletos.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True)
class FirestoreSettings:
    """Configurações do Firestore.

    Attributes:
        project_id: ID do projeto GCP (usa GCP_PROJECT se não definido)
        collection_counters: Collection dos contadores sequenciais
        collection_bank_slips: Collection dos registros de boleto
        transaction_max_attempts: Tentativas de transação em conflito de escrita
    """

    project_id: str = ""
    collection_counters: str = "counters"
    collection_bank_slips: str = "bank_slips"
    transaction_max_attempts: int = 5

    def validate(self, gcp_project: str) -> list[str]:
        """Valida configurações do Firestore.

        Args:
            gcp_project: Projeto GCP padrão para fallback.

        Returns:
            Lista de erros de validação.
        """
        errors: list[str] = []
        if not (self.project_id or gcp_project):
            errors.append("FIRESTORE_PROJECT_ID ou GCP_PROJECT deve estar configurado")
        if self.transaction_max_attempts < 1:
            errors.append("FIRESTORE_TRANSACTION_MAX_ATTEMPTS deve ser >= 1")
        return errors


def _load_firestore_from_env() -> FirestoreSettings:
    """Carrega FirestoreSettings de variáveis de ambiente."""
    return FirestoreSettings(
        project_id=os.getenv("FIRESTORE_PROJECT_ID", ""),
        collection_counters=os.getenv("FIRESTORE_COLLECTION_COUNTERS", "counters"),
        collection_bank_slips=os.getenv("FIRESTORE_COLLECTION_BANK_SLIPS", "bank_slips"),
        transaction_max_attempts=int(os.getenv("FIRESTORE_TRANSACTION_MAX_ATTEMPTS", "5")),
    )


@lru_cache(maxsize=1)
def get_firestore_settings() -> FirestoreSettings:
    """Retorna instância cacheada de FirestoreSettings."""
    return _load_firestore_from_env()
