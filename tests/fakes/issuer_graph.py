"""Monta o grafo do emissor sobre o banco falso e stores em memória."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from app.infra.santander.workspace_resolver import WorkspaceResolver
from app.infra.storage import MemoryReceiptStorage
from app.infra.stores import MemoryBankSlipStore, MemorySequenceStore
from app.services.boleto_issuer import BoletoIssuer
from app.services.receipt_archive import ReceiptArchivePipeline
from app.services.sequence_allocator import SequenceAllocator
from app.use_cases.boleto import ArchiveMode, ArchiveTaskRunner, IssueAndArchiveUseCase
from config.settings.boleto import BoletoSettings
from config.settings.santander import SantanderSettings
from tests.fakes.fake_bank_gateway import BankStack, FakeBankGateway

COVENANT = "3567206"
FIXED_NOW = datetime(2026, 7, 3, 13, 15, 30, tzinfo=UTC)


def payer_input(**overrides: Any) -> dict[str, Any]:
    data: dict[str, Any] = {
        "name": "Maria Silva",
        "documentType": "CPF",
        "documentNumber": "123.456.789-09",
        "address": "Rua A, 10",
        "neighborhood": "Centro",
        "city": "Curitiba",
        "state": "PR",
        "zipCode": "80010-000",
        "nominalValue": "150.50",
        "clientNumber": "PED123",
    }
    data.update(overrides)
    return data


@dataclass
class IssuerGraph:
    fake: FakeBankGateway
    bank: BankStack
    sequence_store: Any
    bank_slip_store: MemoryBankSlipStore
    storage: Any
    issuer: BoletoIssuer
    pipeline: ReceiptArchivePipeline
    use_case: IssueAndArchiveUseCase
    tasks: ArchiveTaskRunner = field(default_factory=ArchiveTaskRunner)

    async def aclose(self) -> None:
        await self.tasks.drain(timeout_seconds=5)
        await self.bank.aclose()


def build_graph(
    fake: FakeBankGateway | None = None,
    *,
    sequence_store: Any = None,
    storage: Any = None,
    bank_settings: SantanderSettings | None = None,
    boleto_settings: BoletoSettings | None = None,
    archive_mode: ArchiveMode = ArchiveMode.SYNC,
) -> IssuerGraph:
    fake = fake or FakeBankGateway(workspaces=[{"id": "ws-1", "covenants": [{"code": COVENANT}]}])
    bank = BankStack(fake)
    bank_settings = bank_settings or SantanderSettings(
        covenant_code=COVENANT,
        participant_code="REG-01",
    )
    boleto_settings = boleto_settings or BoletoSettings()
    sequence_store = sequence_store or MemorySequenceStore({"bank_number": 41})
    bank_slip_store = MemoryBankSlipStore()
    storage = storage or MemoryReceiptStorage("boletos")

    issuer = BoletoIssuer(
        token_cache=bank.token_cache,
        workspace_resolver=WorkspaceResolver(bank.gateway, description="Cobranca"),
        allocator=SequenceAllocator(
            sequence_store,
            now=lambda: FIXED_NOW,
            allow_degraded_nsu=boleto_settings.nsu_fallback_enabled,
        ),
        gateway=bank.gateway,
        bank_slip_store=bank_slip_store,
        bank_settings=bank_settings,
        boleto_settings=boleto_settings,
    )
    pipeline = ReceiptArchivePipeline(
        gateway=bank.gateway,
        storage=storage,
        bank_slip_store=bank_slip_store,
        http_client=bank.download_client,
        upload_attempts=boleto_settings.receipt_upload_attempts,
    )
    tasks = ArchiveTaskRunner()
    use_case = IssueAndArchiveUseCase(
        issuer=issuer,
        archive_pipeline=pipeline,
        bank_slip_store=bank_slip_store,
        task_runner=tasks,
        default_archive_mode=archive_mode,
    )
    return IssuerGraph(
        fake=fake,
        bank=bank,
        sequence_store=sequence_store,
        bank_slip_store=bank_slip_store,
        storage=storage,
        issuer=issuer,
        pipeline=pipeline,
        use_case=use_case,
        tasks=tasks,
    )
