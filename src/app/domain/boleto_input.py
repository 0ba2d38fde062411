"""Entrada do chamador para emissão de boleto.

Aceita nomes camelCase (como chegam do frontend) ou snake_case. Campos não
documentados são descartados: nada do input é repassado ao banco sem passar
por este modelo.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from app.domain.boleto import PayerData
from utils.errors import ValidationError

_NON_DIGITS = re.compile(r"[\s.\-/]")
_ASCII_DIGITS = re.compile(r"[0-9]+")
_DOCUMENT_LENGTHS = {"CPF": 11, "CNPJ": 14}


class BoletoPayerInput(BaseModel):
    """Dados do pagador e do título informados pelo chamador."""

    model_config = ConfigDict(
        extra="ignore",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    name: str = Field(min_length=1, max_length=40)
    document_type: Literal["CPF", "CNPJ"]
    document_number: str = Field(min_length=1)
    address: str = Field(min_length=1, max_length=40)
    neighborhood: str = Field(default="", max_length=30)
    city: str = Field(min_length=1, max_length=20)
    state: str = Field(min_length=2, max_length=2)
    zip_code: str = Field(min_length=1)
    nominal_value: Decimal = Field(gt=0, max_digits=15, decimal_places=2)
    client_number: str = Field(min_length=1, max_length=15, pattern=r"^[A-Za-z0-9]+$")

    @field_validator("document_type", mode="before")
    @classmethod
    def _upper_document_type(cls, value: Any) -> Any:
        return value.strip().upper() if isinstance(value, str) else value

    @field_validator("state")
    @classmethod
    def _upper_state(cls, value: str) -> str:
        if not (value.isascii() and value.isalpha()):
            raise ValueError("UF deve conter apenas letras")
        return value.upper()

    @field_validator("document_number")
    @classmethod
    def _digits_only_document(cls, value: str, info: ValidationInfo) -> str:
        digits = _NON_DIGITS.sub("", value)
        if not _ASCII_DIGITS.fullmatch(digits):
            raise ValueError("documento deve conter apenas dígitos")
        document_type = info.data.get("document_type")
        expected = _DOCUMENT_LENGTHS.get(document_type or "")
        if expected and len(digits) != expected:
            raise ValueError(f"{document_type} deve ter {expected} dígitos")
        return digits

    @field_validator("zip_code")
    @classmethod
    def _digits_only_zip(cls, value: str) -> str:
        digits = _NON_DIGITS.sub("", value)
        if not (_ASCII_DIGITS.fullmatch(digits) and len(digits) == 8):
            raise ValueError("CEP deve ter 8 dígitos")
        return digits

    def to_payer(self) -> PayerData:
        return PayerData(
            name=self.name,
            document_type=self.document_type,
            document_number=self.document_number,
            address=self.address,
            neighborhood=self.neighborhood,
            city=self.city,
            state=self.state,
            zip_code=self.zip_code,
        )


def parse_payer_input(data: BoletoPayerInput | Mapping[str, Any]) -> BoletoPayerInput:
    """Valida a entrada do chamador.

    Raises:
        ValidationError: Com a lista de campos inválidos.
    """
    if isinstance(data, BoletoPayerInput):
        return data
    try:
        return BoletoPayerInput.model_validate(dict(data))
    except PydanticValidationError as exc:
        fields = sorted({".".join(str(part) for part in err["loc"]) for err in exc.errors()})
        raise ValidationError(
            "Dados do pagador inválidos",
            fields=fields,
        ) from exc
