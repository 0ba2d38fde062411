"""Protocolos e contratos do core da aplicação."""

from .bank_slip_store import BankSlipStoreProtocol
from .identity import CallerIdentity, IdentityVerifierProtocol
from .receipt_storage import ReceiptStorageProtocol
from .secrets import SecretProviderProtocol
from .sequence_store import SequenceStoreProtocol

__all__ = [
    "BankSlipStoreProtocol",
    "CallerIdentity",
    "IdentityVerifierProtocol",
    "ReceiptStorageProtocol",
    "SecretProviderProtocol",
    "SequenceStoreProtocol",
]
