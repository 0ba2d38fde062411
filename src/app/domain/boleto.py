"""Entidades de domínio do boleto e máquina de estados do registro.

Estados do registro (status):
    pending -> registered | error

Estados do arquivamento do PDF (archive_status), só após `registered`:
    not_archived -> archived | archive_failed
    archive_failed -> archived | archive_failed

Transições são sempre para frente; qualquer outra levanta
InvalidTransitionError.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import StrEnum
from typing import Any

from utils.errors import InvalidTransitionError


class BoletoStatus(StrEnum):
    PENDING = "pending"
    REGISTERED = "registered"
    ERROR = "error"


class ArchiveStatus(StrEnum):
    NOT_ARCHIVED = "not_archived"
    ARCHIVED = "archived"
    ARCHIVE_FAILED = "archive_failed"


_STATUS_TRANSITIONS: dict[BoletoStatus, frozenset[BoletoStatus]] = {
    BoletoStatus.PENDING: frozenset({BoletoStatus.REGISTERED, BoletoStatus.ERROR}),
    BoletoStatus.REGISTERED: frozenset(),
    BoletoStatus.ERROR: frozenset(),
}

_ARCHIVE_TRANSITIONS: dict[ArchiveStatus, frozenset[ArchiveStatus]] = {
    ArchiveStatus.NOT_ARCHIVED: frozenset({ArchiveStatus.ARCHIVED, ArchiveStatus.ARCHIVE_FAILED}),
    ArchiveStatus.ARCHIVE_FAILED: frozenset({ArchiveStatus.ARCHIVED, ArchiveStatus.ARCHIVE_FAILED}),
    ArchiveStatus.ARCHIVED: frozenset(),
}


def can_transition(current: BoletoStatus, target: BoletoStatus) -> bool:
    return target in _STATUS_TRANSITIONS[current]


def can_transition_archive(current: ArchiveStatus, target: ArchiveStatus) -> bool:
    return target in _ARCHIVE_TRANSITIONS[current]


@dataclass(frozen=True, slots=True)
class AccessToken:
    """Bearer token do banco. `expires_at` usa o relógio monotônico do TokenCache."""

    value: str = field(repr=False)
    expires_at: float

    def is_fresh(self, now: float, safety_margin: float) -> bool:
        return now < self.expires_at - safety_margin


@dataclass(frozen=True, slots=True)
class Workspace:
    id: str
    covenant_code: str


@dataclass(frozen=True, slots=True)
class PayerData:
    """Pagador já validado."""

    name: str
    document_type: str
    document_number: str
    address: str
    neighborhood: str
    city: str
    state: str
    zip_code: str

    def to_gateway_dict(self) -> dict[str, str]:
        return {
            "name": self.name,
            "documentType": self.document_type,
            "documentNumber": self.document_number,
            "address": self.address,
            "neighborhood": self.neighborhood,
            "city": self.city,
            "state": self.state,
            "zipCode": self.zip_code,
        }


@dataclass(frozen=True, slots=True)
class BoletoPayload:
    """Payload de registro do boleto, montado só com campos documentados."""

    nsu_code: str
    nsu_date: date
    bank_number: str
    client_number: str
    due_date: date
    issue_date: date
    payer: PayerData
    nominal_value: Decimal
    covenant_code: str
    participant_code: str
    environment: str
    document_kind: str
    dict_key: str | None = None
    dict_key_type: str = "CNPJ"

    def to_gateway_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "environment": self.environment,
            "nsuCode": self.nsu_code,
            "nsuDate": self.nsu_date.isoformat(),
            "covenantCode": self.covenant_code,
            "bankNumber": self.bank_number,
            "clientNumber": self.client_number,
            "dueDate": self.due_date.isoformat(),
            "issueDate": self.issue_date.isoformat(),
            "participantCode": self.participant_code,
            "nominalValue": f"{self.nominal_value:.2f}",
            "payer": self.payer.to_gateway_dict(),
            "documentKind": self.document_kind,
            "paymentType": "REGISTRO",
        }
        if self.dict_key:
            payload["key"] = {"type": self.dict_key_type, "dictKey": self.dict_key}
        return payload


@dataclass(frozen=True, slots=True)
class BoletoRecord:
    """Registro persistido de um boleto.

    Criado em `pending` antes do envio ao banco; `pdf_url` é a URL durável
    do PDF arquivado.
    """

    nsu_code: str
    workspace_id: str
    client_number: str
    bank_number: str
    nominal_value: Decimal
    due_date: date
    created_at: datetime
    payer_document_number: str | None = None
    status: BoletoStatus = BoletoStatus.PENDING
    archive_status: ArchiveStatus = ArchiveStatus.NOT_ARCHIVED
    digitable_line: str | None = None
    barcode: str | None = None
    pdf_url: str | None = None
    temporary_pdf_link: str | None = None
    error_detail: dict[str, Any] | None = None
    nsu_degraded: bool = False
    created_by: str | None = None
    updated_at: datetime | None = None

    @classmethod
    def pending(
        cls,
        payload: BoletoPayload,
        *,
        workspace_id: str,
        created_at: datetime,
        nsu_degraded: bool = False,
        created_by: str | None = None,
    ) -> BoletoRecord:
        return cls(
            nsu_code=payload.nsu_code,
            workspace_id=workspace_id,
            client_number=payload.client_number,
            bank_number=payload.bank_number,
            nominal_value=payload.nominal_value,
            due_date=payload.due_date,
            created_at=created_at,
            payer_document_number=payload.payer.document_number,
            nsu_degraded=nsu_degraded,
            created_by=created_by,
            updated_at=created_at,
        )

    def _with_status(self, target: BoletoStatus, **changes: Any) -> BoletoRecord:
        if not can_transition(self.status, target):
            raise InvalidTransitionError(
                f"Transição inválida: {self.status} -> {target}",
                details={"nsu_code": self.nsu_code},
            )
        return replace(self, status=target, updated_at=_utcnow(), **changes)

    def _with_archive_status(self, target: ArchiveStatus, **changes: Any) -> BoletoRecord:
        if self.status is not BoletoStatus.REGISTERED:
            raise InvalidTransitionError(
                f"Arquivamento exige boleto registrado (status={self.status})",
                details={"nsu_code": self.nsu_code},
            )
        if not can_transition_archive(self.archive_status, target):
            raise InvalidTransitionError(
                f"Transição inválida: {self.archive_status} -> {target}",
                details={"nsu_code": self.nsu_code},
            )
        return replace(self, archive_status=target, updated_at=_utcnow(), **changes)

    def mark_registered(self, *, digitable_line: str | None, barcode: str | None) -> BoletoRecord:
        return self._with_status(
            BoletoStatus.REGISTERED,
            digitable_line=digitable_line,
            barcode=barcode,
        )

    def mark_error(self, detail: dict[str, Any]) -> BoletoRecord:
        return self._with_status(BoletoStatus.ERROR, error_detail=detail)

    def mark_archived(self, pdf_url: str) -> BoletoRecord:
        return self._with_archive_status(ArchiveStatus.ARCHIVED, pdf_url=pdf_url)

    def mark_archive_failed(
        self,
        detail: dict[str, Any],
        *,
        temporary_pdf_link: str | None = None,
    ) -> BoletoRecord:
        return self._with_archive_status(
            ArchiveStatus.ARCHIVE_FAILED,
            error_detail=detail,
            temporary_pdf_link=temporary_pdf_link or self.temporary_pdf_link,
        )

    def to_firestore_dict(self) -> dict[str, Any]:
        return {
            "nsu_code": self.nsu_code,
            "workspace_id": self.workspace_id,
            "client_number": self.client_number,
            "bank_number": self.bank_number,
            "nominal_value": str(self.nominal_value),
            "due_date": self.due_date.isoformat(),
            "created_at": self.created_at.isoformat(),
            "payer_document_number": self.payer_document_number,
            "status": self.status.value,
            "archive_status": self.archive_status.value,
            "digitable_line": self.digitable_line,
            "barcode": self.barcode,
            "pdf_url": self.pdf_url,
            "temporary_pdf_link": self.temporary_pdf_link,
            "error_detail": self.error_detail,
            "nsu_degraded": self.nsu_degraded,
            "created_by": self.created_by,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    @classmethod
    def from_firestore_dict(cls, data: dict[str, Any]) -> BoletoRecord:
        updated_at = data.get("updated_at")
        return cls(
            nsu_code=data["nsu_code"],
            workspace_id=data.get("workspace_id", ""),
            client_number=data.get("client_number", ""),
            bank_number=data.get("bank_number", ""),
            nominal_value=Decimal(data.get("nominal_value", "0")),
            due_date=date.fromisoformat(data["due_date"]),
            created_at=datetime.fromisoformat(data["created_at"]),
            payer_document_number=data.get("payer_document_number"),
            status=BoletoStatus(data.get("status", BoletoStatus.PENDING)),
            archive_status=ArchiveStatus(data.get("archive_status", ArchiveStatus.NOT_ARCHIVED)),
            digitable_line=data.get("digitable_line"),
            barcode=data.get("barcode"),
            pdf_url=data.get("pdf_url"),
            temporary_pdf_link=data.get("temporary_pdf_link"),
            error_detail=data.get("error_detail"),
            nsu_degraded=bool(data.get("nsu_degraded", False)),
            created_by=data.get("created_by"),
            updated_at=datetime.fromisoformat(updated_at) if updated_at else None,
        )

    def to_dict(self) -> dict[str, Any]:
        """Visão pública para a camada de rotas (sem detalhes internos de erro)."""
        data = self.to_firestore_dict()
        data.pop("error_detail", None)
        return data


@dataclass(frozen=True, slots=True)
class ArchivedReceipt:
    nsu_code: str
    url: str
    filename: str
    size_bytes: int


def _utcnow() -> datetime:
    return datetime.now(UTC)
