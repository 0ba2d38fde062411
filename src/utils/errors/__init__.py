"""Exceções utilitárias compartilhadas."""

from .exceptions import (
    ArchiveError,
    AuthError,
    BankSlipNotFoundError,
    BoletoError,
    FirestoreUnavailableError,
    GatewayError,
    InfrastructureError,
    InvalidTransitionError,
    RetrievalError,
    SequenceUnavailableError,
    StorageUnavailableError,
    ValidationError,
    WorkspaceError,
)

__all__ = [
    "ArchiveError",
    "AuthError",
    "BankSlipNotFoundError",
    "BoletoError",
    "FirestoreUnavailableError",
    "GatewayError",
    "InfrastructureError",
    "InvalidTransitionError",
    "RetrievalError",
    "SequenceUnavailableError",
    "StorageUnavailableError",
    "ValidationError",
    "WorkspaceError",
]
