"""Serviços de aplicação.

Unidades de orquestração da emissão: alocação de identificadores, montagem
do payload, registro no banco e arquivamento do PDF.
Implementações concretas de IO ficam em app/infra/.
"""

from app.services.boleto_issuer import BoletoIssuer
from app.services.payload_builder import build_bank_slip_payload
from app.services.receipt_archive import ReceiptArchivePipeline
from app.services.sequence_allocator import NsuAllocation, SequenceAllocator

__all__ = [
    "BoletoIssuer",
    "NsuAllocation",
    "ReceiptArchivePipeline",
    "SequenceAllocator",
    "build_bank_slip_payload",
]
