"""Logging estruturado (JSON) do emissor de boletos.

Uso:
    from config.logging import configure_logging, get_logger

    configure_logging(level="INFO", service_name="emissor_boletos")
    logger = get_logger(__name__)

Campos em todo log: asctime, level, logger, message, correlation_id, service.
Credenciais, tokens e material PEM nunca são logados.
"""

from config.logging.config import configure_logging, get_logger, log_fallback
from config.logging.filters import CorrelationIdFilter, SensitiveDataFilter
from config.logging.formatters import (
    FIELD_RENAME_MAP,
    REQUIRED_LOG_FIELDS,
    create_json_formatter,
)

__all__ = [
    "FIELD_RENAME_MAP",
    "REQUIRED_LOG_FIELDS",
    "CorrelationIdFilter",
    "SensitiveDataFilter",
    "configure_logging",
    "create_json_formatter",
    "get_logger",
    "log_fallback",
]
