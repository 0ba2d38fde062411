"""Arquivamento do PDF de um boleto registrado.

Pede ao banco o link temporário do PDF, baixa os bytes e grava no
armazenamento durável. Qualquer falha marca o registro como
`archive_failed` (guardando o link temporário quando houver) sem mexer no
status do registro: o boleto continua registrado e o arquivamento pode ser
refeito sozinho.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

import httpx

from app.domain.boleto import ArchivedReceipt, BoletoStatus
from utils.errors import (
    ArchiveError,
    BoletoError,
    GatewayError,
    InfrastructureError,
    InvalidTransitionError,
    RetrievalError,
    StorageUnavailableError,
)

if TYPE_CHECKING:
    from app.domain.boleto import BoletoRecord
    from app.infra.santander.gateway_client import SantanderGatewayClient
    from app.protocols.bank_slip_store import BankSlipStoreProtocol
    from app.protocols.receipt_storage import ReceiptStorageProtocol

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"
MAX_UPLOAD_ATTEMPTS = 2


class ReceiptArchivePipeline:
    """Link do banco -> download -> armazenamento durável.

    Args:
        gateway: Cliente da API de cobrança (pedido do link)
        storage: Armazenamento durável dos PDFs
        bank_slip_store: Store dos registros de boleto
        http_client: Cliente HTTP do download (sem mTLS); criado por chamada se None
        timeout_seconds: Timeout do download
        upload_attempts: Tentativas de gravação (1 + retry)
    """

    def __init__(
        self,
        *,
        gateway: SantanderGatewayClient,
        storage: ReceiptStorageProtocol,
        bank_slip_store: BankSlipStoreProtocol,
        http_client: httpx.AsyncClient | None = None,
        timeout_seconds: float = 30.0,
        upload_attempts: int = 2,
    ) -> None:
        self._gateway = gateway
        self._storage = storage
        self._store = bank_slip_store
        self._http_client = http_client
        self._timeout = timeout_seconds
        self._upload_attempts = min(MAX_UPLOAD_ATTEMPTS, max(1, upload_attempts))

    async def archive(self, record: BoletoRecord, payer_document_number: str) -> ArchivedReceipt:
        """Arquiva o PDF do boleto.

        Raises:
            InvalidTransitionError: Registro não está `registered`.
            RetrievalError: Link ausente ou download falhou.
            ArchiveError: Gravação falhou após as tentativas.
        """
        if record.status is not BoletoStatus.REGISTERED:
            raise InvalidTransitionError(
                f"Arquivamento exige boleto registrado (status={record.status})",
                details={"nsu_code": record.nsu_code},
            )

        started = time.perf_counter()
        link: str | None = None
        try:
            if not record.digitable_line:
                raise RetrievalError(
                    "Boleto sem linha digitável",
                    details={"nsu_code": record.nsu_code},
                )
            link = await self._request_link(record, payer_document_number)
            data = await self._download(record, link)
            filename = f"{record.nsu_code}.pdf"
            url = await self._upload(record, data, filename)
        except (RetrievalError, ArchiveError) as exc:
            await self._mark_failed(record, exc, link)
            raise

        await self._store.mark_archived(record.nsu_code, url)
        logger.info(
            "receipt_archived",
            extra={
                "nsu_code": record.nsu_code,
                "size_bytes": len(data),
                "elapsed_ms": round((time.perf_counter() - started) * 1000, 2),
            },
        )
        return ArchivedReceipt(
            nsu_code=record.nsu_code,
            url=url,
            filename=filename,
            size_bytes=len(data),
        )

    async def _request_link(self, record: BoletoRecord, payer_document_number: str) -> str:
        try:
            body = await self._gateway.request_pdf_link(
                record.digitable_line or "", payer_document_number
            )
        except GatewayError as exc:
            raise RetrievalError(
                f"Banco recusou o pedido do PDF: {exc.message}",
                status_code=exc.status_code,
                upstream_body=exc.upstream_body,
                details={"nsu_code": record.nsu_code},
            ) from exc

        link = body.get("link") if isinstance(body, dict) else None
        if not link:
            raise RetrievalError(
                "Resposta do banco sem link do PDF",
                upstream_body=body,
                details={"nsu_code": record.nsu_code},
            )
        return str(link)

    async def _download(self, record: BoletoRecord, link: str) -> bytes:
        try:
            if self._http_client is not None:
                response = await self._http_client.get(link, timeout=self._timeout)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.get(link)
        except httpx.HTTPError as exc:
            logger.error(
                "receipt_download_failed",
                extra={"nsu_code": record.nsu_code, "error_type": type(exc).__name__},
            )
            raise RetrievalError(
                f"Falha ao baixar o PDF: {type(exc).__name__}",
                details={"nsu_code": record.nsu_code},
            ) from exc

        if not response.is_success:
            raise RetrievalError(
                f"Download do PDF respondeu HTTP {response.status_code}",
                status_code=response.status_code,
                details={"nsu_code": record.nsu_code},
            )
        if not response.content:
            raise RetrievalError(
                "PDF baixado está vazio",
                details={"nsu_code": record.nsu_code},
            )
        return response.content

    async def _upload(self, record: BoletoRecord, data: bytes, filename: str) -> str:
        last_error: StorageUnavailableError | None = None
        for attempt in range(1, self._upload_attempts + 1):
            try:
                return await self._storage.save(
                    data=data,
                    filename=filename,
                    content_type=PDF_CONTENT_TYPE,
                )
            except StorageUnavailableError as exc:
                last_error = exc
                logger.warning(
                    "receipt_upload_retry",
                    extra={"nsu_code": record.nsu_code, "attempt": attempt},
                )
        raise ArchiveError(
            f"Falha ao gravar o PDF após {self._upload_attempts} tentativa(s)",
            details={"nsu_code": record.nsu_code},
        ) from last_error

    async def _mark_failed(
        self,
        record: BoletoRecord,
        exc: BoletoError,
        link: str | None,
    ) -> None:
        logger.warning(
            "receipt_archive_failed",
            extra={"nsu_code": record.nsu_code, "kind": exc.kind, "error": exc.message},
        )
        try:
            await self._store.mark_archive_failed(
                record.nsu_code,
                {"kind": exc.kind, "message": exc.message, "status_code": exc.status_code},
                temporary_pdf_link=link,
            )
        except (InfrastructureError, BoletoError) as persist_exc:
            logger.error(
                "receipt_archive_failure_persist_failed",
                extra={"nsu_code": record.nsu_code, "error_type": type(persist_exc).__name__},
            )
