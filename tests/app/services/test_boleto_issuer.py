"""Testes do BoletoIssuer."""

from __future__ import annotations

from datetime import date

import httpx
import pytest

from app.domain.boleto import BoletoStatus
from app.protocols.identity import CallerIdentity
from config.settings.santander import SantanderSettings
from tests.fakes.fake_bank_gateway import FakeBankGateway
from tests.fakes.issuer_graph import COVENANT, build_graph, payer_input
from utils.errors import (
    AuthError,
    FirestoreUnavailableError,
    GatewayError,
    SequenceUnavailableError,
    ValidationError,
    WorkspaceError,
)


class UnavailableSequenceStore:
    async def increment(self, name: str) -> int:
        raise FirestoreUnavailableError("down")


class TestIssueSuccess:
    @pytest.mark.asyncio
    async def test_registers_bank_slip(self) -> None:
        graph = build_graph()

        record = await graph.issuer.issue(payer_input())

        assert record.status is BoletoStatus.REGISTERED
        assert record.nsu_code == "260703101530001"
        assert record.bank_number == "0000000000042"
        assert record.workspace_id == "ws-1"
        assert record.due_date == date(2026, 8, 7)
        assert record.digitable_line.endswith("0000000000042")
        assert record.barcode is not None
        stored = await graph.bank_slip_store.get(record.nsu_code)
        assert stored == record
        await graph.aclose()

    @pytest.mark.asyncio
    async def test_sends_allow_listed_payload(self) -> None:
        graph = build_graph()

        await graph.issuer.issue(payer_input(bankNumber="9999", paymentType="PIX"))

        payload = graph.fake.json_body("register")
        assert graph.fake.requests[-1].url.path.endswith("/workspaces/ws-1/bank_slips")
        assert payload["environment"] == "TESTE"
        assert payload["nsuCode"] == "260703101530001"
        assert payload["nsuDate"] == "2026-07-03"
        assert payload["issueDate"] == "2026-07-03"
        assert payload["dueDate"] == "2026-08-07"
        assert payload["covenantCode"] == COVENANT
        assert payload["participantCode"] == "REG-01"
        assert payload["bankNumber"] == "0000000000042"
        assert payload["clientNumber"] == "PED123"
        assert payload["nominalValue"] == "150.50"
        assert payload["paymentType"] == "REGISTRO"
        assert payload["documentKind"] == "DUPLICATA_MERCANTIL"
        assert payload["payer"]["documentNumber"] == "12345678909"
        assert "key" not in payload
        await graph.aclose()

    @pytest.mark.asyncio
    async def test_includes_pix_key_when_configured(self) -> None:
        graph = build_graph(
            bank_settings=SantanderSettings(
                covenant_code=COVENANT,
                participant_code="REG-01",
                dict_key="12345678000199",
            )
        )

        await graph.issuer.issue(payer_input())

        assert graph.fake.json_body("register")["key"] == {
            "type": "CNPJ",
            "dictKey": "12345678000199",
        }
        await graph.aclose()

    @pytest.mark.asyncio
    async def test_records_caller_and_degraded_nsu(self) -> None:
        graph = build_graph(sequence_store=_BankOnlySequenceStore())

        record = await graph.issuer.issue(payer_input(), caller=CallerIdentity(uid="user-1"))

        assert record.created_by == "user-1"
        assert record.nsu_degraded is True
        assert record.nsu_code == "260703101530123"
        await graph.aclose()


class _BankOnlySequenceStore:
    """Contador de nosso número ok, contador de NSU indisponível."""

    def __init__(self) -> None:
        self.value = 0

    async def increment(self, name: str) -> int:
        if name == "nsu_sequence":
            raise FirestoreUnavailableError("down")
        self.value += 1
        return self.value


class TestIssueFailures:
    @pytest.mark.asyncio
    async def test_invalid_input_makes_no_network_calls(self) -> None:
        graph = build_graph()
        data = payer_input()
        del data["zipCode"]

        with pytest.raises(ValidationError):
            await graph.issuer.issue(data)

        assert graph.fake.requests == []
        assert graph.bank_slip_store.all_records() == []
        assert graph.sequence_store.current("bank_number") == 41
        await graph.aclose()

    @pytest.mark.asyncio
    async def test_gateway_rejection_marks_record_error(self) -> None:
        graph = build_graph()
        graph.fake.queue(
            "register",
            httpx.Response(
                400,
                json={"_errors": [{"_code": "400", "_field": "payer.zipCode", "_message": "CEP"}]},
            ),
        )

        with pytest.raises(GatewayError) as exc_info:
            await graph.issuer.issue(payer_input())

        assert exc_info.value.status_code == 400
        assert exc_info.value.is_validation is True
        [record] = graph.bank_slip_store.all_records()
        assert record.status is BoletoStatus.ERROR
        assert record.error_detail["status_code"] == 400
        assert record.error_detail["errors"][0]["field"] == "payer.zipCode"
        assert exc_info.value.details["nsu_code"] == record.nsu_code
        await graph.aclose()

    @pytest.mark.asyncio
    async def test_auth_failure_creates_no_record(self) -> None:
        graph = build_graph()
        graph.fake.queue("token", httpx.Response(401, json={"error": "invalid_client"}))

        with pytest.raises(AuthError):
            await graph.issuer.issue(payer_input())

        assert graph.bank_slip_store.all_records() == []
        await graph.aclose()

    @pytest.mark.asyncio
    async def test_workspace_failure_creates_no_record(self) -> None:
        graph = build_graph(FakeBankGateway())
        graph.fake.queue("create_workspace", httpx.Response(500, text="boom"))

        with pytest.raises(WorkspaceError):
            await graph.issuer.issue(payer_input())

        assert graph.bank_slip_store.all_records() == []
        assert graph.fake.hits["register"] == 0
        await graph.aclose()

    @pytest.mark.asyncio
    async def test_unavailable_counter_blocks_issue(self) -> None:
        graph = build_graph(sequence_store=UnavailableSequenceStore())

        with pytest.raises(SequenceUnavailableError):
            await graph.issuer.issue(payer_input())

        assert graph.fake.hits["register"] == 0
        await graph.aclose()

    @pytest.mark.asyncio
    async def test_gateway_error_survives_store_failure(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        graph = build_graph()
        graph.fake.queue(
            "register",
            httpx.Response(
                400,
                json={"_errors": [{"_code": "400", "_field": "payer.name", "_message": "nome"}]},
            ),
        )

        async def failing_mark_error(nsu_code: str, detail: dict) -> None:
            raise FirestoreUnavailableError("store down")

        monkeypatch.setattr(graph.bank_slip_store, "mark_error", failing_mark_error)

        with pytest.raises(GatewayError) as exc_info:
            await graph.issuer.issue(payer_input())

        assert exc_info.value.kind == "gateway"
        assert exc_info.value.status_code == 400
        assert exc_info.value.upstream_body["_errors"][0]["_field"] == "payer.name"
        [record] = graph.bank_slip_store.all_records()
        assert record.status is BoletoStatus.PENDING
        await graph.aclose()

    @pytest.mark.asyncio
    async def test_degraded_nsu_collision_is_sequence_error(self) -> None:
        graph = build_graph(sequence_store=_BankOnlySequenceStore())
        first = await graph.issuer.issue(payer_input())

        with pytest.raises(SequenceUnavailableError) as exc_info:
            await graph.issuer.issue(payer_input())

        assert exc_info.value.kind == "sequence_unavailable"
        assert exc_info.value.details["nsu_code"] == first.nsu_code
        assert graph.fake.hits["register"] == 1
        await graph.aclose()
