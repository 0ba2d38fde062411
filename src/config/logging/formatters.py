"""Formatter JSON dos logs do emissor.

Todo log sai como um objeto JSON com os campos de REQUIRED_LOG_FIELDS
(levelname/name renomeados para level/logger) mais o que vier em `extra`.
"""

from __future__ import annotations

from pythonjsonlogger.json import JsonFormatter

REQUIRED_LOG_FIELDS = (
    "asctime",
    "levelname",
    "name",
    "message",
    "correlation_id",
    "service",
)

FIELD_RENAME_MAP = {
    "levelname": "level",
    "name": "logger",
}


def create_json_formatter() -> JsonFormatter:
    """Cria formatter JSON com campos padronizados.

    Exemplo de output:
        {"asctime": "2026-10-18 10:30:00,120", "level": "INFO",
         "logger": "app.services.boleto_issuer", "message": "bank_slip_registered",
         "correlation_id": "3f0c...", "service": "emissor_boletos", "nsu_code": "..."}
    """
    format_string = " ".join(f"%({field})s" for field in REQUIRED_LOG_FIELDS)
    return JsonFormatter(format_string, rename_fields=FIELD_RENAME_MAP)
