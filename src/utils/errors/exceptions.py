"""Exceções de domínio e de infraestrutura do emissor de boletos.

Toda falha visível ao chamador deriva de ``BoletoError`` e expõe um ``kind``
legível por máquina. Corpos de resposta do banco podem ser anexados para
diagnóstico, sempre já sem credenciais.
"""

from __future__ import annotations

from typing import Any, ClassVar


class InfrastructureError(RuntimeError):
    """Base para falhas de infraestrutura transitórias."""


class FirestoreUnavailableError(InfrastructureError):
    """Falha de indisponibilidade ao acessar Firestore."""


class StorageUnavailableError(InfrastructureError):
    """Falha ao gravar no armazenamento durável de comprovantes."""


class BoletoError(Exception):
    """Base das falhas de emissão/arquivamento de boletos."""

    kind: ClassVar[str] = "boleto_error"

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        upstream_body: Any = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.upstream_body = upstream_body
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Representação estruturada para a camada de rotas."""
        return {
            "kind": self.kind,
            "message": self.message,
            "status_code": self.status_code,
            "upstream_body": self.upstream_body,
            "details": self.details,
        }


class ValidationError(BoletoError):
    """Dados do pagador inválidos (falha antes de qualquer chamada de rede)."""

    kind = "validation"

    def __init__(self, message: str, *, fields: list[str] | None = None) -> None:
        super().__init__(message, details={"fields": list(fields or [])})
        self.fields = list(fields or [])


class AuthError(BoletoError):
    """Falha de credenciais, mTLS ou troca de token."""

    kind = "auth"


class WorkspaceError(BoletoError):
    """Falha ao localizar ou criar a workspace de cobrança."""

    kind = "workspace"


class GatewayError(BoletoError):
    """Registro rejeitado pelo banco ou falha de rede durante o registro."""

    kind = "gateway"

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        upstream_body: Any = None,
        errors: tuple[Any, ...] = (),
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message,
            status_code=status_code,
            upstream_body=upstream_body,
            details=details,
        )
        self.errors = errors

    @property
    def is_validation(self) -> bool:
        """True quando o banco rejeitou o conteúdo (4xx com erros estruturados)."""
        return self.status_code is not None and 400 <= self.status_code < 500 and bool(self.errors)


class SequenceUnavailableError(BoletoError):
    """Contador persistente indisponível para alocar identificadores."""

    kind = "sequence_unavailable"


class RetrievalError(BoletoError):
    """Falha ao obter o link ou os bytes do PDF do boleto."""

    kind = "retrieval"


class ArchiveError(BoletoError):
    """Falha ao gravar o PDF no armazenamento durável."""

    kind = "archive"


class InvalidTransitionError(BoletoError):
    """Transição de estado não permitida para o registro do boleto."""

    kind = "invalid_transition"


class BankSlipNotFoundError(BoletoError):
    """Registro de boleto inexistente."""

    kind = "not_found"
