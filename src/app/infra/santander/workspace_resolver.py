"""Resolução da workspace de cobrança do convênio.

Procura uma workspace existente que contenha o convênio; se não houver, cria
uma. O resultado fica em cache pelo tempo de vida do processo.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from app.domain.boleto import Workspace
from utils.errors import GatewayError, WorkspaceError

if TYPE_CHECKING:
    from app.infra.santander.gateway_client import SantanderGatewayClient

logger = logging.getLogger(__name__)


def _workspace_items(body: Any) -> list[dict[str, Any]]:
    """Lista de workspaces em `_content`, `content` ou lista pura."""
    if isinstance(body, list):
        items = body
    elif isinstance(body, dict):
        items = body.get("_content") or body.get("content") or []
    else:
        items = []
    return [item for item in items if isinstance(item, dict)]


def find_workspace_id(body: Any, covenant_code: str) -> str | None:
    """ID da primeira workspace cujo `covenants[].code` bate com o convênio."""
    wanted = str(covenant_code).strip()
    for item in _workspace_items(body):
        for covenant in item.get("covenants") or []:
            if isinstance(covenant, dict) and str(covenant.get("code", "")).strip() == wanted:
                workspace_id = item.get("id")
                if workspace_id:
                    return str(workspace_id)
    return None


def _covenant_value(covenant_code: str) -> int | str:
    if covenant_code.isascii() and covenant_code.isdigit():
        return int(covenant_code)
    return covenant_code


def full_workspace_payload(covenant_code: str, description: str) -> dict[str, Any]:
    return {
        "type": "BILLING",
        "description": description,
        "covenants": [{"code": _covenant_value(covenant_code)}],
        "bankSlipBillingWebhookActive": False,
        "pixBillingWebhookActive": False,
    }


def minimal_workspace_payload(covenant_code: str) -> dict[str, Any]:
    return {"type": "BILLING", "covenants": [{"code": _covenant_value(covenant_code)}]}


class WorkspaceResolver:
    """Resolve (e cacheia) o ID da workspace por convênio.

    Args:
        gateway: Cliente da API de cobrança
        description: Descrição usada ao criar a workspace
    """

    def __init__(self, gateway: SantanderGatewayClient, *, description: str) -> None:
        self._gateway = gateway
        self._description = description
        self._cache: dict[str, Workspace] = {}
        self._lock = asyncio.Lock()

    def cached(self, covenant_code: str) -> Workspace | None:
        return self._cache.get(str(covenant_code))

    async def resolve_workspace(self, covenant_code: str) -> str:
        """Retorna o ID da workspace do convênio.

        Raises:
            WorkspaceError: Listagem e criação falharam.
        """
        key = str(covenant_code).strip()
        cached = self._cache.get(key)
        if cached is not None:
            return cached.id

        async with self._lock:
            cached = self._cache.get(key)
            if cached is not None:
                return cached.id
            workspace_id = await self._resolve_uncached(key)
            self._cache[key] = Workspace(id=workspace_id, covenant_code=key)
            return workspace_id

    async def _resolve_uncached(self, covenant_code: str) -> str:
        try:
            listing = await self._gateway.list_workspaces()
        except GatewayError as exc:
            raise _workspace_error("Falha ao listar workspaces", exc) from exc

        existing = find_workspace_id(listing, covenant_code)
        if existing:
            logger.info("workspace_found", extra={"workspace_id": existing})
            return existing

        try:
            created = await self._gateway.create_workspace(
                full_workspace_payload(covenant_code, self._description)
            )
        except GatewayError as exc:
            if not exc.is_validation:
                raise _workspace_error("Falha ao criar workspace", exc) from exc
            logger.warning(
                "workspace_create_retry_minimal",
                extra={"status_code": exc.status_code, "errors": exc.message},
            )
            try:
                created = await self._gateway.create_workspace(
                    minimal_workspace_payload(covenant_code)
                )
            except GatewayError as retry_exc:
                raise _workspace_error("Falha ao criar workspace", retry_exc) from retry_exc

        workspace_id = created.get("id") if isinstance(created, dict) else None
        if not workspace_id:
            raise WorkspaceError("Resposta de criação de workspace sem id", upstream_body=created)

        logger.info("workspace_created", extra={"workspace_id": str(workspace_id)})
        return str(workspace_id)


def _workspace_error(message: str, cause: GatewayError) -> WorkspaceError:
    return WorkspaceError(
        f"{message}: {cause.message}",
        status_code=cause.status_code,
        upstream_body=cause.upstream_body,
    )
