"""Settings da integração com a API de cobrança do Santander.

Credenciais (client id/secret, certificado e chave) não ficam aqui: são
carregadas pelo CredentialStore a partir do provedor de secrets.
"""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

SANDBOX_BASE_URL = "https://trust-sandbox.api.santander.com.br"
PRODUCTION_BASE_URL = "https://trust-open.api.santander.com.br"
DEFAULT_AUTH_PATH = "/auth/oauth/v2/token"
COLLECTION_API_PREFIX = "/collection_bill_management/v2"

SantanderEnvironment = Literal["sandbox", "production"]


class SantanderSettings(BaseModel):
    """Configurações do gateway bancário."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    environment: SantanderEnvironment = Field(
        default="sandbox",
        description="Ambiente do banco; define URL base e o campo environment do boleto.",
    )
    api_base_url_override: str | None = Field(
        default=None,
        description="URL base explícita (sobrepõe a derivada do ambiente).",
    )
    auth_path: str = DEFAULT_AUTH_PATH
    covenant_code: str = Field(default="", description="Código do convênio de cobrança.")
    participant_code: str = Field(
        default="",
        description="Código do participante enviado em cada boleto.",
    )
    dict_key: str | None = Field(
        default=None,
        description="Chave PIX (DICT) para boleto híbrido com QR code.",
    )
    dict_key_type: str = "CNPJ"
    workspace_description: str = "Cobranca boletos"
    request_timeout_seconds: float = Field(default=30.0, gt=0)
    token_safety_margin_seconds: float = Field(default=60.0, ge=0)

    @property
    def api_base_url(self) -> str:
        if self.api_base_url_override:
            return self.api_base_url_override.rstrip("/")
        return PRODUCTION_BASE_URL if self.environment == "production" else SANDBOX_BASE_URL

    @property
    def bank_slip_environment(self) -> str:
        """Valor do campo `environment` exigido no payload do boleto."""
        return "PRODUCAO" if self.environment == "production" else "TESTE"

    def validate_settings(self) -> list[str]:
        """Valida configurações obrigatórias.

        Returns:
            Lista de erros de validação.
        """
        errors: list[str] = []
        if not self.covenant_code:
            errors.append("SANTANDER_COVENANT_CODE não configurado")
        elif not (self.covenant_code.isascii() and self.covenant_code.isdigit()):
            errors.append("SANTANDER_COVENANT_CODE deve conter apenas dígitos")
        if not self.participant_code:
            errors.append("SANTANDER_PARTICIPANT_CODE não configurado")
        if not self.auth_path.startswith("/"):
            errors.append("SANTANDER_AUTH_PATH deve começar com '/'")
        return errors


def _read_optional_env(key: str) -> str | None:
    """Retorna valor opcional da env sem propagar string vazia."""
    raw_value = os.getenv(key)
    if raw_value is None:
        return None
    return raw_value.strip() or None


def _parse_environment(value: str) -> SantanderEnvironment:
    return "production" if value.strip().lower() in {"production", "prod", "producao"} else "sandbox"


def _load_santander_from_env() -> SantanderSettings:
    """Carrega SantanderSettings de variáveis de ambiente."""
    return SantanderSettings(
        environment=_parse_environment(os.getenv("SANTANDER_ENVIRONMENT", "sandbox")),
        api_base_url_override=_read_optional_env("SANTANDER_API_BASE_URL"),
        auth_path=os.getenv("SANTANDER_AUTH_PATH", DEFAULT_AUTH_PATH),
        covenant_code=os.getenv("SANTANDER_COVENANT_CODE", ""),
        participant_code=os.getenv("SANTANDER_PARTICIPANT_CODE", ""),
        dict_key=_read_optional_env("SANTANDER_DICT_KEY"),
        dict_key_type=os.getenv("SANTANDER_DICT_KEY_TYPE", "CNPJ"),
        workspace_description=os.getenv("SANTANDER_WORKSPACE_DESCRIPTION", "Cobranca boletos"),
        request_timeout_seconds=float(os.getenv("SANTANDER_REQUEST_TIMEOUT_SECONDS", "30")),
        token_safety_margin_seconds=float(
            os.getenv("SANTANDER_TOKEN_SAFETY_MARGIN_SECONDS", "60")
        ),
    )


@lru_cache(maxsize=1)
def get_santander_settings() -> SantanderSettings:
    """Retorna instância cacheada de SantanderSettings."""
    return _load_santander_from_env()
