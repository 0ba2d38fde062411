"""Stores — implementações concretas de persistência.

Módulos disponíveis:
    - firestore_sequence_store: Contadores atômicos (nosso número, NSU)
    - firestore_bank_slip_store: Registros de boleto por nsu_code
    - memory_stores: Stores em memória para desenvolvimento/testes
"""

from __future__ import annotations

from app.infra.stores.firestore_bank_slip_store import FirestoreBankSlipStore
from app.infra.stores.firestore_sequence_store import FirestoreSequenceStore
from app.infra.stores.memory_stores import MemoryBankSlipStore, MemorySequenceStore

__all__ = [
    # Firestore
    "FirestoreBankSlipStore",
    "FirestoreSequenceStore",
    # Memory (dev/test)
    "MemoryBankSlipStore",
    "MemorySequenceStore",
]
