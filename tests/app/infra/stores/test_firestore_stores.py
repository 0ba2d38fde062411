"""Testes dos stores Firestore com cliente mockado."""

from __future__ import annotations

from datetime import UTC, date, datetime
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from google.api_core.exceptions import AlreadyExists, ServiceUnavailable

from app.domain.boleto import ArchiveStatus, BoletoRecord, BoletoStatus
from app.infra.stores import firestore_bank_slip_store, firestore_sequence_store
from app.infra.stores.firestore_bank_slip_store import FirestoreBankSlipStore
from app.infra.stores.firestore_sequence_store import FirestoreSequenceStore
from utils.errors import (
    BankSlipNotFoundError,
    FirestoreUnavailableError,
    InvalidTransitionError,
)


def _record() -> BoletoRecord:
    return BoletoRecord(
        nsu_code="260703101530001",
        workspace_id="ws-1",
        client_number="PED1",
        bank_number="0000000000001",
        nominal_value=Decimal("10.00"),
        due_date=date(2026, 8, 7),
        created_at=datetime(2026, 7, 3, tzinfo=UTC),
    )


def _snapshot(data: dict | None) -> MagicMock:
    snapshot = MagicMock()
    snapshot.exists = data is not None
    snapshot.to_dict.return_value = data
    return snapshot


class TestFirestoreBankSlipStore:
    @pytest.mark.asyncio
    async def test_create_uses_document_per_nsu(self) -> None:
        client = MagicMock()
        store = FirestoreBankSlipStore(client, collection_name="bank_slips")

        await store.create(_record())

        client.collection.assert_called_with("bank_slips")
        client.collection.return_value.document.assert_called_with("260703101530001")
        doc_ref = client.collection.return_value.document.return_value
        created = doc_ref.create.call_args[0][0]
        assert created["status"] == "pending"
        assert created["nominal_value"] == "10.00"

    @pytest.mark.asyncio
    async def test_create_existing_nsu_raises_invalid_transition(self) -> None:
        client = MagicMock()
        doc_ref = client.collection.return_value.document.return_value
        doc_ref.create.side_effect = AlreadyExists("exists")

        with pytest.raises(InvalidTransitionError):
            await FirestoreBankSlipStore(client).create(_record())

    @pytest.mark.asyncio
    async def test_create_failure_raises_unavailable(self) -> None:
        client = MagicMock()
        doc_ref = client.collection.return_value.document.return_value
        doc_ref.create.side_effect = ServiceUnavailable("down")

        with pytest.raises(FirestoreUnavailableError):
            await FirestoreBankSlipStore(client).create(_record())

    @pytest.mark.asyncio
    async def test_get_round_trips_record(self) -> None:
        client = MagicMock()
        doc_ref = client.collection.return_value.document.return_value
        doc_ref.get.return_value = _snapshot(_record().to_firestore_dict())

        loaded = await FirestoreBankSlipStore(client).get("260703101530001")

        assert loaded == _record()

    @pytest.mark.asyncio
    async def test_get_missing_returns_none(self) -> None:
        client = MagicMock()
        doc_ref = client.collection.return_value.document.return_value
        doc_ref.get.return_value = _snapshot(None)

        assert await FirestoreBankSlipStore(client).get("x") is None

    @pytest.mark.asyncio
    async def test_list_by_archive_status_queries_field(self) -> None:
        client = MagicMock()
        query = client.collection.return_value.where.return_value.limit.return_value
        doc = MagicMock()
        doc.to_dict.return_value = _record().to_firestore_dict()
        query.stream.return_value = [doc]

        records = await FirestoreBankSlipStore(client).list_by_archive_status(
            ArchiveStatus.ARCHIVE_FAILED, limit=10
        )

        assert [r.nsu_code for r in records] == ["260703101530001"]
        client.collection.return_value.where.return_value.limit.assert_called_with(10)


class TestFirestoreBankSlipStoreUpdate:
    @pytest.fixture(autouse=True)
    def _plain_transaction(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(
            firestore_bank_slip_store,
            "_update_in_transaction",
            firestore_bank_slip_store._update_in_transaction.to_wrap,
        )

    @pytest.mark.asyncio
    async def test_update_reads_and_writes_in_transaction(self) -> None:
        client = MagicMock()
        doc_ref = client.collection.return_value.document.return_value
        doc_ref.get.return_value = _snapshot(_record().to_firestore_dict())
        transaction = client.transaction.return_value
        store = FirestoreBankSlipStore(client, max_attempts=4)

        updated = await store.mark_registered(
            "260703101530001", digitable_line="0339912345", barcode="0339912"
        )

        assert updated.status is BoletoStatus.REGISTERED
        client.transaction.assert_called_with(max_attempts=4)
        doc_ref.get.assert_called_with(transaction=transaction)
        written_ref, written = transaction.set.call_args[0]
        assert written_ref is doc_ref
        assert written["status"] == "registered"
        assert written["digitable_line"] == "0339912345"

    @pytest.mark.asyncio
    async def test_update_missing_record_raises_not_found(self) -> None:
        client = MagicMock()
        doc_ref = client.collection.return_value.document.return_value
        doc_ref.get.return_value = _snapshot(None)

        with pytest.raises(BankSlipNotFoundError):
            await FirestoreBankSlipStore(client).mark_error("260703101530001", {"kind": "gateway"})

        client.transaction.return_value.set.assert_not_called()

    @pytest.mark.asyncio
    async def test_update_rejected_transition_writes_nothing(self) -> None:
        client = MagicMock()
        doc_ref = client.collection.return_value.document.return_value
        doc_ref.get.return_value = _snapshot(
            _record().mark_error({"kind": "gateway"}).to_firestore_dict()
        )

        with pytest.raises(InvalidTransitionError):
            await FirestoreBankSlipStore(client).mark_registered(
                "260703101530001", digitable_line="x", barcode=None
            )

        client.transaction.return_value.set.assert_not_called()

    @pytest.mark.asyncio
    async def test_update_failure_raises_unavailable(self) -> None:
        client = MagicMock()
        doc_ref = client.collection.return_value.document.return_value
        doc_ref.get.side_effect = ServiceUnavailable("down")

        with pytest.raises(FirestoreUnavailableError):
            await FirestoreBankSlipStore(client).mark_error("260703101530001", {})


class TestFirestoreSequenceStore:
    @pytest.mark.asyncio
    async def test_transaction_failure_raises_unavailable(self) -> None:
        client = MagicMock()
        client.transaction.side_effect = ServiceUnavailable("down")
        store = FirestoreSequenceStore(client, collection_name="counters", max_attempts=3)

        with pytest.raises(FirestoreUnavailableError, match="bank_number"):
            await store.increment("bank_number")

        client.collection.assert_called_with("counters")
        client.transaction.assert_called_with(max_attempts=3)

    def test_increment_starts_missing_counter_at_one(self) -> None:
        transaction = MagicMock()
        counter_ref = MagicMock()
        counter_ref.id = "bank_number"
        counter_ref.get.return_value = _snapshot(None)

        value = firestore_sequence_store._increment_in_transaction.to_wrap(
            transaction, counter_ref
        )

        assert value == 1
        counter_ref.get.assert_called_once_with(transaction=transaction)
        written_ref, written = transaction.set.call_args[0]
        assert written_ref is counter_ref
        assert written["name"] == "bank_number"
        assert written["last_value"] == 1
        assert transaction.set.call_args[1] == {"merge": True}

    def test_increment_adds_one_to_last_value(self) -> None:
        transaction = MagicMock()
        counter_ref = MagicMock()
        counter_ref.get.return_value = _snapshot({"name": "nsu_sequence", "last_value": 41})

        value = firestore_sequence_store._increment_in_transaction.to_wrap(
            transaction, counter_ref
        )

        assert value == 42
        assert transaction.set.call_args[0][1]["last_value"] == 42

    @pytest.mark.asyncio
    async def test_increment_runs_counter_transaction(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(
            firestore_sequence_store,
            "_increment_in_transaction",
            firestore_sequence_store._increment_in_transaction.to_wrap,
        )
        client = MagicMock()
        counter_ref = client.collection.return_value.document.return_value
        counter_ref.get.return_value = _snapshot({"last_value": 7})
        store = FirestoreSequenceStore(client, collection_name="counters", max_attempts=3)

        assert await store.increment("bank_number") == 8

        client.collection.return_value.document.assert_called_with("bank_number")
        client.transaction.assert_called_with(max_attempts=3)
        counter_ref.get.assert_called_once_with(transaction=client.transaction.return_value)
