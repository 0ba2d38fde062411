"""Firestore Bank Slip Store — registros de boleto por nsu_code."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from google.api_core.exceptions import AlreadyExists
from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter

from app.domain.boleto import ArchiveStatus, BoletoRecord
from app.protocols.bank_slip_store import BankSlipStoreProtocol
from utils.errors import (
    BankSlipNotFoundError,
    BoletoError,
    FirestoreUnavailableError,
    InvalidTransitionError,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from google.cloud.firestore import Client as FirestoreClient

logger = logging.getLogger(__name__)

BANK_SLIPS_COLLECTION = "bank_slips"


@firestore.transactional
def _update_in_transaction(
    transaction: Any,
    ref: Any,
    nsu_code: str,
    mutate: Callable[[BoletoRecord], BoletoRecord],
) -> BoletoRecord:
    snapshot = ref.get(transaction=transaction)
    if not snapshot.exists:
        raise BankSlipNotFoundError(
            "Registro de boleto inexistente",
            details={"nsu_code": nsu_code},
        )
    updated = mutate(BoletoRecord.from_firestore_dict(snapshot.to_dict() or {}))
    transaction.set(ref, updated.to_firestore_dict())
    return updated


class FirestoreBankSlipStore(BankSlipStoreProtocol):
    """Store de BoletoRecord usando Firestore (um documento por nsu_code)."""

    def __init__(
        self,
        firestore_client: FirestoreClient,
        collection_name: str = BANK_SLIPS_COLLECTION,
        max_attempts: int = 5,
    ) -> None:
        self._db = firestore_client
        self._collection = collection_name
        self._max_attempts = max_attempts

    def _ref(self, nsu_code: str) -> Any:
        return self._db.collection(self._collection).document(nsu_code)

    async def create(self, record: BoletoRecord) -> None:
        await asyncio.to_thread(self._create_sync, record)

    def _create_sync(self, record: BoletoRecord) -> None:
        try:
            self._ref(record.nsu_code).create(record.to_firestore_dict())
        except AlreadyExists as exc:
            raise InvalidTransitionError(
                "nsu_code já registrado",
                details={"nsu_code": record.nsu_code},
            ) from exc
        except Exception as exc:
            logger.error(
                "bank_slip_create_failed",
                extra={"nsu_code": record.nsu_code, "error_type": type(exc).__name__},
            )
            raise FirestoreUnavailableError(f"Erro ao criar registro do boleto: {exc}") from exc
        logger.debug("bank_slip_created", extra={"nsu_code": record.nsu_code})

    async def get(self, nsu_code: str) -> BoletoRecord | None:
        return await asyncio.to_thread(self._get_sync, nsu_code)

    def _get_sync(self, nsu_code: str) -> BoletoRecord | None:
        try:
            doc = self._ref(nsu_code).get()
        except Exception as exc:
            logger.error(
                "bank_slip_get_failed",
                extra={"nsu_code": nsu_code, "error_type": type(exc).__name__},
            )
            raise FirestoreUnavailableError(f"Erro ao ler registro do boleto: {exc}") from exc
        if not doc.exists:
            return None
        return BoletoRecord.from_firestore_dict(doc.to_dict() or {})

    async def update(
        self,
        nsu_code: str,
        mutate: Callable[[BoletoRecord], BoletoRecord],
    ) -> BoletoRecord:
        return await asyncio.to_thread(self._update_sync, nsu_code, mutate)

    def _update_sync(
        self,
        nsu_code: str,
        mutate: Callable[[BoletoRecord], BoletoRecord],
    ) -> BoletoRecord:
        try:
            transaction = self._db.transaction(max_attempts=self._max_attempts)
            updated = _update_in_transaction(transaction, self._ref(nsu_code), nsu_code, mutate)
        except BoletoError:
            raise
        except Exception as exc:
            logger.error(
                "bank_slip_update_failed",
                extra={"nsu_code": nsu_code, "error_type": type(exc).__name__},
            )
            raise FirestoreUnavailableError(f"Erro ao atualizar registro do boleto: {exc}") from exc

        logger.debug(
            "bank_slip_updated",
            extra={
                "nsu_code": nsu_code,
                "status": updated.status.value,
                "archive_status": updated.archive_status.value,
            },
        )
        return updated

    async def list_by_archive_status(
        self,
        archive_status: ArchiveStatus,
        *,
        limit: int = 100,
    ) -> list[BoletoRecord]:
        return await asyncio.to_thread(self._list_sync, archive_status, limit)

    def _list_sync(self, archive_status: ArchiveStatus, limit: int) -> list[BoletoRecord]:
        try:
            docs = (
                self._db.collection(self._collection)
                .where(filter=FieldFilter("archive_status", "==", archive_status.value))
                .limit(limit)
                .stream()
            )
            return [BoletoRecord.from_firestore_dict(doc.to_dict() or {}) for doc in docs]
        except Exception as exc:
            logger.error(
                "bank_slip_list_failed",
                extra={"archive_status": archive_status.value, "error_type": type(exc).__name__},
            )
            raise FirestoreUnavailableError(f"Erro ao listar boletos: {exc}") from exc
