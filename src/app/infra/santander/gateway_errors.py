"""Leitura tolerante dos corpos de erro do banco.

O formato documentado é ``{"_errors": [{"_code", "_field", "_message"}]}``,
mas a API também devolve variações (``errors``, ``error_description``,
``_message`` no topo ou texto puro). Tudo vira uma tupla de GatewayErrorItem.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

REDACTED = "[REDACTED]"


@dataclass(frozen=True, slots=True)
class GatewayErrorItem:
    code: str | None
    field: str | None
    message: str

    def to_dict(self) -> dict[str, str | None]:
        return {"code": self.code, "field": self.field, "message": self.message}


def _pick(item: dict[str, Any], *keys: str) -> str | None:
    for key in keys:
        value = item.get(key)
        if value not in (None, ""):
            return str(value)
    return None


def _item_from(entry: Any) -> GatewayErrorItem | None:
    if isinstance(entry, str):
        return GatewayErrorItem(code=None, field=None, message=entry) if entry.strip() else None
    if not isinstance(entry, dict):
        return None
    message = _pick(entry, "_message", "message", "description", "error_description")
    code = _pick(entry, "_code", "code", "error")
    field = _pick(entry, "_field", "field")
    if message is None and code is None:
        return None
    return GatewayErrorItem(code=code, field=field, message=message or code or "")


def parse_gateway_errors(body: Any) -> tuple[GatewayErrorItem, ...]:
    """Extrai os itens de erro de qualquer corpo de resposta do banco.

    Corpos vazios ou irreconhecíveis resultam em tupla vazia.
    """
    if body is None:
        return ()
    if isinstance(body, (str, bytes)):
        text = body.decode("utf-8", errors="replace") if isinstance(body, bytes) else body
        text = text.strip()
        return (GatewayErrorItem(code=None, field=None, message=text[:500]),) if text else ()
    if isinstance(body, list):
        return tuple(item for item in map(_item_from, body) if item is not None)
    if not isinstance(body, dict):
        return ()

    for key in ("_errors", "errors"):
        entries = body.get(key)
        if isinstance(entries, list):
            items = tuple(item for item in map(_item_from, entries) if item is not None)
            if items:
                return items

    single = _item_from(body)
    return (single,) if single is not None else ()


def summarize_errors(items: Iterable[GatewayErrorItem]) -> str:
    """Mensagem curta para logs e exceções."""
    parts = []
    for item in items:
        prefix = f"{item.field}: " if item.field else ""
        parts.append(f"{prefix}{item.message}")
    return "; ".join(parts)


def redact_secrets(value: Any, secrets: Iterable[str]) -> Any:
    """Substitui recursivamente qualquer ocorrência de segredo por [REDACTED]."""
    needles = [secret for secret in secrets if secret]
    if not needles:
        return value

    def _redact(item: Any) -> Any:
        if isinstance(item, str):
            for needle in needles:
                item = item.replace(needle, REDACTED)
            return item
        if isinstance(item, dict):
            return {key: _redact(val) for key, val in item.items()}
        if isinstance(item, list):
            return [_redact(val) for val in item]
        return item

    return _redact(value)


def read_body(response: Any) -> Any:
    """Corpo JSON da resposta, ou texto quando não for JSON."""
    try:
        return response.json()
    except ValueError:
        return response.text
