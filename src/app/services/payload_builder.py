"""Montagem do payload de registro do boleto.

Só os campos documentados pela API são copiados da entrada validada; nenhum
campo extra do chamador chega ao banco.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from app.domain.boleto import BoletoPayload

if TYPE_CHECKING:
    from datetime import date

    from app.domain.boleto_input import BoletoPayerInput
    from config.settings.boleto import BoletoSettings
    from config.settings.santander import SantanderSettings


def build_bank_slip_payload(
    request: BoletoPayerInput,
    *,
    nsu_code: str,
    bank_number: str,
    issue_date: date,
    due_date: date,
    bank_settings: SantanderSettings,
    boleto_settings: BoletoSettings,
) -> BoletoPayload:
    return BoletoPayload(
        nsu_code=nsu_code,
        nsu_date=issue_date,
        bank_number=bank_number,
        client_number=request.client_number,
        due_date=due_date,
        issue_date=issue_date,
        payer=request.to_payer(),
        nominal_value=request.nominal_value,
        covenant_code=bank_settings.covenant_code,
        participant_code=bank_settings.participant_code,
        environment=bank_settings.bank_slip_environment,
        document_kind=boleto_settings.document_kind,
        dict_key=bank_settings.dict_key,
        dict_key_type=bank_settings.dict_key_type,
    )
