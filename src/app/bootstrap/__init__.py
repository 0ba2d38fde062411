"""Bootstrap da aplicação: inicialização e wiring.

Composition root: configura logging, valida settings e conecta
implementações concretas aos protocolos.

Uso:
    from app.bootstrap import initialize_app, get_issue_and_archive_use_case

    initialize_app()
    use_case = get_issue_and_archive_use_case()
    result = await use_case.execute(payload, caller=identity)
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import TYPE_CHECKING

from app.observability import get_correlation_id
from config.logging import configure_logging
from config.settings import (
    get_base_settings,
    get_boleto_settings,
    get_firestore_settings,
    get_gcs_settings,
    get_santander_settings,
)

if TYPE_CHECKING:
    from app.bootstrap.dependencies import BoletoComponents
    from app.use_cases.boleto import IssueAndArchiveUseCase

SERVICE_NAME = "emissor_boletos"

DEFAULT_LOG_LEVEL = "INFO"
STRICT_VALIDATION_ENVS = {"staging", "production"}

logger = logging.getLogger(__name__)


def initialize_app() -> None:
    """Inicializa logging estruturado JSON com correlation_id.

    Deve ser chamada uma vez no início do serviço.
    """
    log_level = os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()

    configure_logging(
        level=log_level,
        service_name=SERVICE_NAME,
        correlation_id_getter=get_correlation_id,
    )


def collect_settings_errors() -> list[str]:
    """Erros de configuração de todos os componentes, prefixados pela origem."""
    base = get_base_settings()
    errors: list[str] = []
    errors.extend(f"base: {error}" for error in base.validate())
    errors.extend(f"santander: {error}" for error in get_santander_settings().validate_settings())
    errors.extend(f"boleto: {error}" for error in get_boleto_settings().validate())
    if base.store_backend == "firestore":
        errors.extend(
            f"firestore: {error}" for error in get_firestore_settings().validate(base.gcp_project)
        )
    errors.extend(f"gcs: {error}" for error in get_gcs_settings().validate(base.store_backend))
    return errors


def validate_runtime_settings() -> None:
    """Valida settings obrigatórias no startup.

    Em `staging`/`production` falha rápido para impedir boot inválido.
    Em `development` apenas registra o alerta.

    Raises:
        RuntimeError: Configuração inválida em ambiente estrito.
    """
    environment = get_base_settings().environment
    errors = collect_settings_errors()

    if not errors:
        logger.info(
            "settings_validated",
            extra={"component": "bootstrap", "result": "ok", "environment": environment},
        )
        return

    logger.warning(
        "settings_validation_failed",
        extra={
            "component": "bootstrap",
            "result": "failed",
            "environment": environment,
            "error_count": len(errors),
            "errors": errors,
        },
    )
    if environment in STRICT_VALIDATION_ENVS:
        details = "\n".join(f"- {error}" for error in errors)
        raise RuntimeError(f"Configuração inválida para {environment}:\n{details}")


@lru_cache(maxsize=1)
def get_boleto_components() -> BoletoComponents:
    """Grafo do emissor (singleton)."""
    from app.bootstrap.dependencies import create_boleto_components

    return create_boleto_components()


def get_issue_and_archive_use_case() -> IssueAndArchiveUseCase:
    return get_boleto_components().use_case


async def shutdown(timeout_seconds: float = 30.0) -> None:
    """Drena arquivamentos em background e fecha o cliente mTLS."""
    if get_boleto_components.cache_info().currsize == 0:
        return
    components = get_boleto_components()
    await components.use_case.shutdown(timeout_seconds)
    await components.transport.aclose()
    get_boleto_components.cache_clear()
    logger.info("app_shutdown_completed")
