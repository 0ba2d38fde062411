"""Firestore Sequence Store — contadores atômicos.

Cada contador é um documento `{collection}/{name}` com `last_value`. O
incremento roda numa transação do Firestore: em conflito de escrita o SDK
reexecuta a função (até `max_attempts`), então nenhum valor é emitido duas
vezes.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from google.cloud import firestore

from app.protocols.sequence_store import SequenceStoreProtocol
from utils.errors import FirestoreUnavailableError

if TYPE_CHECKING:
    from google.cloud.firestore import Client as FirestoreClient

logger = logging.getLogger(__name__)

COUNTERS_COLLECTION = "counters"


@firestore.transactional
def _increment_in_transaction(transaction: Any, counter_ref: Any) -> int:
    snapshot = counter_ref.get(transaction=transaction)
    current = 0
    if snapshot.exists:
        current = int((snapshot.to_dict() or {}).get("last_value", 0))
    next_value = current + 1
    transaction.set(
        counter_ref,
        {"name": counter_ref.id, "last_value": next_value, "updated_at": firestore.SERVER_TIMESTAMP},
        merge=True,
    )
    return next_value


class FirestoreSequenceStore(SequenceStoreProtocol):
    """Contadores sequenciais com incremento transacional.

    Args:
        firestore_client: Cliente Firestore
        collection_name: Collection dos contadores
        max_attempts: Tentativas da transação em caso de contenção
    """

    def __init__(
        self,
        firestore_client: FirestoreClient,
        collection_name: str = COUNTERS_COLLECTION,
        max_attempts: int = 5,
    ) -> None:
        self._db = firestore_client
        self._collection = collection_name
        self._max_attempts = max_attempts

    async def increment(self, name: str) -> int:
        return await asyncio.to_thread(self._increment_sync, name)

    def _increment_sync(self, name: str) -> int:
        counter_ref = self._db.collection(self._collection).document(name)
        try:
            transaction = self._db.transaction(max_attempts=self._max_attempts)
            value = _increment_in_transaction(transaction, counter_ref)
        except Exception as exc:
            logger.error(
                "sequence_increment_failed",
                extra={"counter": name, "error_type": type(exc).__name__},
            )
            raise FirestoreUnavailableError(f"Falha ao incrementar contador {name}: {exc}") from exc

        logger.debug("sequence_incremented", extra={"counter": name, "value": value})
        return value
