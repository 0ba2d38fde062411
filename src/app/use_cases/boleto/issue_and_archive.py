"""Use case de emissão de boleto com arquivamento do PDF."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from app.domain.boleto import ArchiveStatus, BoletoRecord
from app.domain.boleto_input import BoletoPayerInput, parse_payer_input
from app.observability import reset_correlation_id, set_correlation_id
from utils.errors import BankSlipNotFoundError, ValidationError

if TYPE_CHECKING:
    from app.protocols.bank_slip_store import BankSlipStoreProtocol
    from app.protocols.identity import CallerIdentity
    from app.services.boleto_issuer import BoletoIssuer
    from app.services.receipt_archive import ReceiptArchivePipeline
    from app.use_cases.boleto.archive_tasks import ArchiveTaskRunner

logger = logging.getLogger(__name__)


class ArchiveMode(StrEnum):
    SYNC = "sync"
    BACKGROUND = "background"
    SKIP = "skip"


@dataclass(frozen=True, slots=True)
class IssueAndArchiveResult:
    status: str
    record: BoletoRecord
    archived_pdf_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "record": self.record.to_dict(),
            "archived_pdf_url": self.archived_pdf_url,
        }


class IssueAndArchiveUseCase:
    """Orquestra emissão e arquivamento.

    O arquivamento roda em linha (SYNC), como task rastreada (BACKGROUND) ou
    não roda (SKIP). Falha no arquivamento nunca desfaz o registro.
    """

    def __init__(
        self,
        *,
        issuer: BoletoIssuer,
        archive_pipeline: ReceiptArchivePipeline,
        bank_slip_store: BankSlipStoreProtocol,
        task_runner: ArchiveTaskRunner,
        default_archive_mode: ArchiveMode = ArchiveMode.SYNC,
    ) -> None:
        self._issuer = issuer
        self._archive = archive_pipeline
        self._store = bank_slip_store
        self._tasks = task_runner
        self._default_mode = default_archive_mode

    @property
    def default_archive_mode(self) -> ArchiveMode:
        return self._default_mode

    async def execute(
        self,
        payer_input: BoletoPayerInput | Mapping[str, Any],
        *,
        caller: CallerIdentity | None = None,
        archive_mode: ArchiveMode | None = None,
        correlation_id: str | None = None,
    ) -> IssueAndArchiveResult:
        """Emite o boleto e arquiva o PDF conforme o modo.

        Raises:
            BoletoError: Qualquer falha de emissão; em modo SYNC também
                RetrievalError/ArchiveError (registro permanece `registered`).
        """
        mode = ArchiveMode(archive_mode or self._default_mode)
        token = set_correlation_id(correlation_id)
        try:
            request = parse_payer_input(payer_input)
            record = await self._issuer.issue(request, caller=caller)

            if mode is ArchiveMode.SKIP:
                return IssueAndArchiveResult(status=record.status.value, record=record)

            if mode is ArchiveMode.BACKGROUND:
                self._tasks.schedule(
                    nsu_code=record.nsu_code,
                    coroutine=self._archive.archive(record, request.document_number),
                )
                return IssueAndArchiveResult(status=record.status.value, record=record)

            receipt = await self._archive.archive(record, request.document_number)
            archived = await self._store.get(record.nsu_code) or record
            logger.info(
                "issue_and_archive_completed",
                extra={"nsu_code": record.nsu_code, "archive_mode": mode.value},
            )
            return IssueAndArchiveResult(
                status=ArchiveStatus.ARCHIVED.value,
                record=archived,
                archived_pdf_url=receipt.url,
            )
        finally:
            reset_correlation_id(token)

    async def retry_archive(
        self,
        nsu_code: str,
        payer_document_number: str | None = None,
    ) -> IssueAndArchiveResult:
        """Refaz apenas o arquivamento de um boleto já registrado.

        Raises:
            BankSlipNotFoundError: nsu_code inexistente.
            ValidationError: Documento do pagador indisponível.
            RetrievalError | ArchiveError: Nova falha (registro segue `archive_failed`).
        """
        token = set_correlation_id(None)
        try:
            record = await self._store.get(nsu_code)
            if record is None:
                raise BankSlipNotFoundError(
                    "Registro de boleto inexistente",
                    details={"nsu_code": nsu_code},
                )
            if record.archive_status is ArchiveStatus.ARCHIVED:
                return IssueAndArchiveResult(
                    status=ArchiveStatus.ARCHIVED.value,
                    record=record,
                    archived_pdf_url=record.pdf_url,
                )

            document_number = payer_document_number or record.payer_document_number
            if not document_number:
                raise ValidationError(
                    "Documento do pagador necessário para o arquivamento",
                    fields=["payerDocumentNumber"],
                )

            logger.info("archive_retry_started", extra={"nsu_code": nsu_code})
            receipt = await self._archive.archive(record, document_number)
            archived = await self._store.get(nsu_code) or record
            return IssueAndArchiveResult(
                status=ArchiveStatus.ARCHIVED.value,
                record=archived,
                archived_pdf_url=receipt.url,
            )
        finally:
            reset_correlation_id(token)

    async def shutdown(self, timeout_seconds: float = 30.0) -> None:
        await self._tasks.drain(timeout_seconds)
