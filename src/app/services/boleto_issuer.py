"""Emissão (registro) do boleto no banco.

Fluxo:
    1. valida a entrada (nenhuma chamada de rede antes disso)
    2. garante o bearer token
    3. resolve a workspace do convênio
    4. aloca nosso número e NSU
    5. calcula emissão/vencimento no timezone de negócio
    6. persiste o registro `pending`
    7. envia ao banco e grava `registered` ou `error`

Não há retentativa automática do registro: um NSU enviado ao banco não é
reaproveitado.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from app.domain.boleto import BoletoRecord
from app.domain.boleto_input import BoletoPayerInput, parse_payer_input
from app.domain.due_date import nth_business_day_of_next_month
from app.services.payload_builder import build_bank_slip_payload
from utils.errors import (
    BoletoError,
    GatewayError,
    InfrastructureError,
    InvalidTransitionError,
    SequenceUnavailableError,
)

if TYPE_CHECKING:
    from app.infra.santander.gateway_client import SantanderGatewayClient
    from app.infra.santander.token_cache import TokenCache
    from app.infra.santander.workspace_resolver import WorkspaceResolver
    from app.protocols.bank_slip_store import BankSlipStoreProtocol
    from app.protocols.identity import CallerIdentity
    from app.services.sequence_allocator import SequenceAllocator
    from config.settings.boleto import BoletoSettings
    from config.settings.santander import SantanderSettings

logger = logging.getLogger(__name__)


def _pick_str(body: Any, *keys: str) -> str | None:
    if not isinstance(body, dict):
        return None
    for key in keys:
        value = body.get(key)
        if value:
            return str(value)
    return None


class BoletoIssuer:
    """Registra boletos no banco e mantém o BoletoRecord correspondente."""

    def __init__(
        self,
        *,
        token_cache: TokenCache,
        workspace_resolver: WorkspaceResolver,
        allocator: SequenceAllocator,
        gateway: SantanderGatewayClient,
        bank_slip_store: BankSlipStoreProtocol,
        bank_settings: SantanderSettings,
        boleto_settings: BoletoSettings,
    ) -> None:
        self._token_cache = token_cache
        self._workspace_resolver = workspace_resolver
        self._allocator = allocator
        self._gateway = gateway
        self._store = bank_slip_store
        self._bank_settings = bank_settings
        self._boleto_settings = boleto_settings

    async def issue(
        self,
        request: BoletoPayerInput | Mapping[str, Any],
        *,
        caller: CallerIdentity | None = None,
    ) -> BoletoRecord:
        """Emite um boleto.

        Raises:
            ValidationError: Entrada inválida (nenhuma chamada de rede feita).
            AuthError: Credenciais ou token rejeitados.
            WorkspaceError: Workspace não pôde ser obtida/criada.
            SequenceUnavailableError: Contador indisponível.
            GatewayError: Banco rejeitou o registro (registro fica `error`).
        """
        payer_input = parse_payer_input(request)
        started = time.perf_counter()

        await self._token_cache.get_token()
        workspace_id = await self._workspace_resolver.resolve_workspace(
            self._bank_settings.covenant_code
        )

        bank_number = await self._allocator.next_bank_number()
        nsu = await self._allocator.allocate_nsu(payer_input.client_number)

        today = self._allocator.local_now().date()
        due_date = nth_business_day_of_next_month(
            today, self._boleto_settings.due_date_business_days
        )
        payload = build_bank_slip_payload(
            payer_input,
            nsu_code=nsu.value,
            bank_number=bank_number,
            issue_date=today,
            due_date=due_date,
            bank_settings=self._bank_settings,
            boleto_settings=self._boleto_settings,
        )

        record = BoletoRecord.pending(
            payload,
            workspace_id=workspace_id,
            created_at=datetime.now(UTC),
            nsu_degraded=nsu.degraded,
            created_by=caller.uid if caller else None,
        )
        try:
            await self._store.create(record)
        except InvalidTransitionError as exc:
            logger.error(
                "bank_slip_nsu_collision",
                extra={"nsu_code": record.nsu_code, "nsu_degraded": nsu.degraded},
            )
            raise SequenceUnavailableError(
                "NSU já utilizado por outro boleto",
                details={"nsu_code": record.nsu_code, "nsu_degraded": nsu.degraded},
            ) from exc
        logger.info(
            "bank_slip_pending",
            extra={
                "nsu_code": record.nsu_code,
                "bank_number": bank_number,
                "workspace_id": workspace_id,
                "nsu_degraded": nsu.degraded,
            },
        )

        try:
            response = await self._gateway.register_bank_slip(
                workspace_id, payload.to_gateway_dict()
            )
        except GatewayError as exc:
            await self._record_error(record.nsu_code, exc)
            logger.warning(
                "bank_slip_rejected",
                extra={
                    "nsu_code": record.nsu_code,
                    "status_code": exc.status_code,
                    "is_validation": exc.is_validation,
                },
            )
            exc.details.setdefault("nsu_code", record.nsu_code)
            raise

        registered = await self._store.mark_registered(
            record.nsu_code,
            digitable_line=_pick_str(response, "digitableLine", "digitable_line"),
            barcode=_pick_str(response, "barCode", "barcode", "barcodeNumber"),
        )
        logger.info(
            "bank_slip_registered",
            extra={
                "nsu_code": registered.nsu_code,
                "due_date": registered.due_date.isoformat(),
                "elapsed_ms": round((time.perf_counter() - started) * 1000, 2),
            },
        )
        return registered

    async def _record_error(self, nsu_code: str, exc: GatewayError) -> None:
        """Grava `error`; se a persistência falhar o registro fica `pending`."""
        try:
            await self._store.mark_error(
                nsu_code,
                {
                    "kind": exc.kind,
                    "message": exc.message,
                    "status_code": exc.status_code,
                    "errors": [item.to_dict() for item in exc.errors],
                    "upstream_body": exc.upstream_body,
                },
            )
        except (InfrastructureError, BoletoError) as persist_exc:
            logger.error(
                "bank_slip_error_persist_failed",
                extra={"nsu_code": nsu_code, "error_type": type(persist_exc).__name__},
            )
