"""Testes do BoletoRecord: máquina de estados e serialização."""

from __future__ import annotations

from datetime import UTC, date, datetime
from decimal import Decimal

import pytest

from app.domain.boleto import (
    AccessToken,
    ArchiveStatus,
    BoletoPayload,
    BoletoRecord,
    BoletoStatus,
    PayerData,
)
from utils.errors import InvalidTransitionError


def _payload(**overrides: object) -> BoletoPayload:
    data: dict[str, object] = {
        "nsu_code": "260703101530001",
        "nsu_date": date(2026, 7, 3),
        "bank_number": "0000000000042",
        "client_number": "PED123",
        "due_date": date(2026, 8, 7),
        "issue_date": date(2026, 7, 3),
        "payer": PayerData(
            name="Maria Silva",
            document_type="CPF",
            document_number="12345678909",
            address="Rua A, 10",
            neighborhood="Centro",
            city="Curitiba",
            state="PR",
            zip_code="80010000",
        ),
        "nominal_value": Decimal("150.5"),
        "covenant_code": "3567206",
        "participant_code": "REG-01",
        "environment": "TESTE",
        "document_kind": "DUPLICATA_MERCANTIL",
    }
    data.update(overrides)
    return BoletoPayload(**data)  # type: ignore[arg-type]


def _pending() -> BoletoRecord:
    return BoletoRecord.pending(
        _payload(),
        workspace_id="ws-1",
        created_at=datetime(2026, 7, 3, 13, 15, tzinfo=UTC),
        created_by="uid-1",
    )


class TestBoletoPayload:
    def test_gateway_dict_uses_api_field_names(self) -> None:
        data = _payload().to_gateway_dict()

        assert data["nsuCode"] == "260703101530001"
        assert data["nsuDate"] == "2026-07-03"
        assert data["dueDate"] == "2026-08-07"
        assert data["bankNumber"] == "0000000000042"
        assert data["nominalValue"] == "150.50"
        assert data["environment"] == "TESTE"
        assert data["paymentType"] == "REGISTRO"
        assert data["payer"]["documentNumber"] == "12345678909"
        assert data["payer"]["zipCode"] == "80010000"
        assert "key" not in data

    def test_gateway_dict_with_pix_key(self) -> None:
        data = _payload(dict_key="12345678000199").to_gateway_dict()
        assert data["key"] == {"type": "CNPJ", "dictKey": "12345678000199"}


class TestBoletoRecordTransitions:
    def test_pending_record(self) -> None:
        record = _pending()
        assert record.status is BoletoStatus.PENDING
        assert record.archive_status is ArchiveStatus.NOT_ARCHIVED
        assert record.payer_document_number == "12345678909"
        assert record.created_by == "uid-1"

    def test_pending_to_registered(self) -> None:
        record = _pending().mark_registered(digitable_line="0339", barcode="0339b")
        assert record.status is BoletoStatus.REGISTERED
        assert record.digitable_line == "0339"
        assert record.barcode == "0339b"

    def test_pending_to_error(self) -> None:
        record = _pending().mark_error({"status_code": 400})
        assert record.status is BoletoStatus.ERROR
        assert record.error_detail == {"status_code": 400}

    def test_registered_is_final(self) -> None:
        record = _pending().mark_registered(digitable_line="1", barcode=None)
        with pytest.raises(InvalidTransitionError):
            record.mark_error({})
        with pytest.raises(InvalidTransitionError):
            record.mark_registered(digitable_line="2", barcode=None)

    def test_error_cannot_be_registered(self) -> None:
        record = _pending().mark_error({})
        with pytest.raises(InvalidTransitionError):
            record.mark_registered(digitable_line="1", barcode=None)

    def test_archive_requires_registered(self) -> None:
        with pytest.raises(InvalidTransitionError):
            _pending().mark_archived("gs://bucket/x.pdf")

    def test_archive_failed_then_archived(self) -> None:
        registered = _pending().mark_registered(digitable_line="1", barcode=None)
        failed = registered.mark_archive_failed(
            {"kind": "retrieval"}, temporary_pdf_link="https://tmp/x.pdf"
        )
        assert failed.status is BoletoStatus.REGISTERED
        assert failed.archive_status is ArchiveStatus.ARCHIVE_FAILED
        assert failed.temporary_pdf_link == "https://tmp/x.pdf"

        failed_again = failed.mark_archive_failed({"kind": "archive"})
        assert failed_again.temporary_pdf_link == "https://tmp/x.pdf"

        archived = failed_again.mark_archived("https://storage/x.pdf")
        assert archived.archive_status is ArchiveStatus.ARCHIVED
        assert archived.pdf_url == "https://storage/x.pdf"

    def test_archived_is_final(self) -> None:
        archived = (
            _pending()
            .mark_registered(digitable_line="1", barcode=None)
            .mark_archived("https://storage/x.pdf")
        )
        with pytest.raises(InvalidTransitionError):
            archived.mark_archive_failed({})


class TestBoletoRecordSerialization:
    def test_firestore_round_trip(self) -> None:
        record = (
            _pending()
            .mark_registered(digitable_line="0339", barcode="b")
            .mark_archive_failed({"kind": "retrieval"}, temporary_pdf_link="https://tmp")
        )
        restored = BoletoRecord.from_firestore_dict(record.to_firestore_dict())
        assert restored == record

    def test_firestore_dict_is_plain_types(self) -> None:
        data = _pending().to_firestore_dict()
        assert data["nominal_value"] == "150.5"
        assert data["due_date"] == "2026-08-07"
        assert data["status"] == "pending"

    def test_public_dict_hides_error_detail(self) -> None:
        data = _pending().mark_error({"upstream_body": "x"}).to_dict()
        assert "error_detail" not in data
        assert data["status"] == "error"


class TestAccessToken:
    def test_fresh_until_margin(self) -> None:
        token = AccessToken(value="abc", expires_at=1000.0)
        assert token.is_fresh(939.0, 60.0) is True
        assert token.is_fresh(940.0, 60.0) is False

    def test_repr_hides_value(self) -> None:
        assert "abc" not in repr(AccessToken(value="abc", expires_at=1.0))
