"""Factories de componentes: stores, armazenamento, gateway e use case.

Escolhe implementações concretas conforme settings (STORE_BACKEND,
SECRETS_BACKEND) e monta o grafo do emissor.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from app.bootstrap.clients import (
    create_firestore_client,
    create_secret_provider,
    create_storage_client,
)
from app.infra.santander import (
    CredentialStore,
    SantanderGatewayClient,
    TokenCache,
    TransportFactory,
    WorkspaceResolver,
)
from app.infra.storage import GCSReceiptStorage, MemoryReceiptStorage
from app.infra.stores import (
    FirestoreBankSlipStore,
    FirestoreSequenceStore,
    MemoryBankSlipStore,
    MemorySequenceStore,
)
from app.services.boleto_issuer import BoletoIssuer
from app.services.receipt_archive import ReceiptArchivePipeline
from app.services.sequence_allocator import SequenceAllocator
from app.use_cases.boleto import ArchiveMode, ArchiveTaskRunner, IssueAndArchiveUseCase
from config.settings import (
    get_base_settings,
    get_boleto_settings,
    get_firestore_settings,
    get_gcs_settings,
    get_santander_settings,
)

if TYPE_CHECKING:
    from app.protocols.bank_slip_store import BankSlipStoreProtocol
    from app.protocols.receipt_storage import ReceiptStorageProtocol
    from app.protocols.sequence_store import SequenceStoreProtocol

logger = logging.getLogger(__name__)


def _use_firestore() -> bool:
    return get_base_settings().store_backend == "firestore"


def create_sequence_store() -> SequenceStoreProtocol:
    if _use_firestore():
        settings = get_firestore_settings()
        logger.info("sequence_store_created", extra={"backend": "firestore"})
        return FirestoreSequenceStore(
            create_firestore_client(),
            collection_name=settings.collection_counters,
            max_attempts=settings.transaction_max_attempts,
        )
    logger.warning("sequence_store_created", extra={"backend": "memory"})
    return MemorySequenceStore()


def create_bank_slip_store() -> BankSlipStoreProtocol:
    if _use_firestore():
        settings = get_firestore_settings()
        logger.info("bank_slip_store_created", extra={"backend": "firestore"})
        return FirestoreBankSlipStore(
            create_firestore_client(),
            collection_name=settings.collection_bank_slips,
            max_attempts=settings.transaction_max_attempts,
        )
    logger.warning("bank_slip_store_created", extra={"backend": "memory"})
    return MemoryBankSlipStore()


def create_receipt_storage() -> ReceiptStorageProtocol:
    gcs = get_gcs_settings()
    if gcs.bucket_receipts:
        logger.info(
            "receipt_storage_created",
            extra={"backend": "gcs", "bucket": gcs.bucket_receipts},
        )
        return GCSReceiptStorage(create_storage_client(), gcs.bucket_receipts, gcs.receipts_prefix)
    logger.warning("receipt_storage_created", extra={"backend": "memory"})
    return MemoryReceiptStorage(gcs.receipts_prefix)


@dataclass(frozen=True)
class BoletoComponents:
    """Grafo montado do emissor (use case + recursos a fechar no shutdown)."""

    use_case: IssueAndArchiveUseCase
    bank_slip_store: BankSlipStoreProtocol
    transport: TransportFactory


def create_boleto_components() -> BoletoComponents:
    """Monta o use case com todas as dependências de produção."""
    bank = get_santander_settings()
    boleto = get_boleto_settings()

    credentials = CredentialStore(create_secret_provider())
    transport = TransportFactory(
        credentials,
        base_url=bank.api_base_url,
        timeout_seconds=bank.request_timeout_seconds,
    )
    token_cache = TokenCache(
        transport,
        credentials,
        auth_path=bank.auth_path,
        safety_margin_seconds=bank.token_safety_margin_seconds,
    )
    gateway = SantanderGatewayClient(transport, token_cache, credentials)
    bank_slip_store = create_bank_slip_store()

    issuer = BoletoIssuer(
        token_cache=token_cache,
        workspace_resolver=WorkspaceResolver(gateway, description=bank.workspace_description),
        allocator=SequenceAllocator(
            create_sequence_store(),
            bank_number_width=boleto.bank_number_width,
            timezone=boleto.business_timezone,
            allow_degraded_nsu=boleto.nsu_fallback_enabled,
        ),
        gateway=gateway,
        bank_slip_store=bank_slip_store,
        bank_settings=bank,
        boleto_settings=boleto,
    )
    pipeline = ReceiptArchivePipeline(
        gateway=gateway,
        storage=create_receipt_storage(),
        bank_slip_store=bank_slip_store,
        timeout_seconds=bank.request_timeout_seconds,
        upload_attempts=boleto.receipt_upload_attempts,
    )
    use_case = IssueAndArchiveUseCase(
        issuer=issuer,
        archive_pipeline=pipeline,
        bank_slip_store=bank_slip_store,
        task_runner=ArchiveTaskRunner(),
        default_archive_mode=ArchiveMode(boleto.archive_mode),
    )
    return BoletoComponents(
        use_case=use_case,
        bank_slip_store=bank_slip_store,
        transport=transport,
    )
