"""Settings base do emissor de boletos.

Configurações comuns a todos os componentes.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Literal

Environment = Literal["development", "staging", "production"]
StoreBackend = Literal["firestore", "memory"]
SecretsBackend = Literal["env", "gcp"]


@dataclass(frozen=True)
class BaseSettings:
    """Configurações base do sistema.

    Attributes:
        environment: Ambiente de execução (development|staging|production)
        service_name: Nome do serviço para logs
        debug: Modo debug ativo
        gcp_project: ID do projeto GCP
        store_backend: Persistência de contadores e boletos (firestore|memory)
        secrets_backend: Origem das credenciais do banco (env|gcp)
    """

    environment: Environment = "development"
    service_name: str = "emissor-boletos"
    debug: bool = False
    gcp_project: str = ""
    store_backend: StoreBackend = "memory"
    secrets_backend: SecretsBackend = "env"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    def validate(self) -> list[str]:
        """Valida configurações base.

        Returns:
            Lista de erros (vazia = OK).
        """
        errors: list[str] = []

        if self.environment not in {"development", "staging", "production"}:
            errors.append(f"ENVIRONMENT inválido: {self.environment}")

        if not self.service_name:
            errors.append("SERVICE_NAME não pode ser vazio")

        if self.store_backend not in {"firestore", "memory"}:
            errors.append(f"STORE_BACKEND inválido: {self.store_backend}")
        elif self.store_backend == "memory" and not self.is_development:
            errors.append("STORE_BACKEND=memory só é permitido em development")

        if self.secrets_backend not in {"env", "gcp"}:
            errors.append(f"SECRETS_BACKEND inválido: {self.secrets_backend}")

        return errors


def _parse_environment(env_str: str) -> Environment:
    """Converte string de ambiente para tipo Environment."""
    env_lower = env_str.lower()
    if env_lower in ("production", "prod"):
        return "production"
    if env_lower in ("staging", "stage"):
        return "staging"
    return "development"


def _default_store_backend(environment: Environment) -> str:
    return "memory" if environment == "development" else "firestore"


def _default_secrets_backend(environment: Environment) -> str:
    return "env" if environment == "development" else "gcp"


def _load_base_from_env() -> BaseSettings:
    """Carrega BaseSettings de variáveis de ambiente."""
    environment = _parse_environment(os.getenv("ENVIRONMENT", "development"))
    return BaseSettings(
        environment=environment,
        service_name=os.getenv("SERVICE_NAME", "emissor-boletos"),
        debug=os.getenv("DEBUG", "").lower() in ("true", "1", "yes"),
        gcp_project=os.getenv("GCP_PROJECT", os.getenv("GOOGLE_CLOUD_PROJECT", "")),
        store_backend=os.getenv(  # type: ignore[arg-type]
            "STORE_BACKEND", _default_store_backend(environment)
        ).lower(),
        secrets_backend=os.getenv(  # type: ignore[arg-type]
            "SECRETS_BACKEND", _default_secrets_backend(environment)
        ).lower(),
    )


@lru_cache(maxsize=1)
def get_base_settings() -> BaseSettings:
    """Retorna instância cacheada de BaseSettings."""
    return _load_base_from_env()
