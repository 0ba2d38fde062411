"""Cliente da API de cobrança (collection bill management v2).

Cada chamada obtém o bearer token do TokenCache e envia `X-Application-Key`.
Respostas não-2xx viram GatewayError com status e corpo preservados (sem
credenciais); 401 invalida o token para a próxima chamada.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import httpx

from app.infra.santander.gateway_errors import (
    parse_gateway_errors,
    read_body,
    redact_secrets,
    summarize_errors,
)
from config.settings.santander import COLLECTION_API_PREFIX
from utils.errors import GatewayError

if TYPE_CHECKING:
    from app.infra.santander.credentials import CredentialStore
    from app.infra.santander.token_cache import TokenCache
    from app.infra.santander.transport import TransportFactory

logger = logging.getLogger(__name__)


class SantanderGatewayClient:
    """Operações da API usadas pelo emissor.

    Args:
        transport: Fábrica do cliente mTLS
        token_cache: Cache do bearer token
        credentials: Store das credenciais (client_id para X-Application-Key)
        api_prefix: Prefixo da API de cobrança
    """

    def __init__(
        self,
        transport: TransportFactory,
        token_cache: TokenCache,
        credentials: CredentialStore,
        *,
        api_prefix: str = COLLECTION_API_PREFIX,
    ) -> None:
        self._transport = transport
        self._token_cache = token_cache
        self._credentials = credentials
        self._prefix = api_prefix.rstrip("/")

    async def list_workspaces(self) -> Any:
        return await self._request("GET", "/workspaces", operation="list_workspaces")

    async def create_workspace(self, payload: dict[str, Any]) -> Any:
        return await self._request(
            "POST", "/workspaces", json=payload, operation="create_workspace"
        )

    async def register_bank_slip(self, workspace_id: str, payload: dict[str, Any]) -> Any:
        return await self._request(
            "POST",
            f"/workspaces/{quote(workspace_id, safe='')}/bank_slips",
            json=payload,
            operation="register_bank_slip",
        )

    async def request_pdf_link(self, digitable_line: str, payer_document_number: str) -> Any:
        return await self._request(
            "POST",
            f"/bills/{quote(digitable_line, safe='')}/bank_slips",
            json={"payerDocumentNumber": payer_document_number},
            operation="request_pdf_link",
        )

    async def _request(
        self,
        method: str,
        path: str,
        *,
        operation: str,
        json: dict[str, Any] | None = None,
    ) -> Any:
        token = await self._token_cache.get_token()
        bundle = self._credentials.load()
        secrets = (*bundle.secret_values(), token.value)
        headers = {
            "Authorization": f"Bearer {token.value}",
            "X-Application-Key": bundle.client_id,
            "Accept": "application/json",
        }

        started = time.perf_counter()
        try:
            response = await self._transport.get_client().request(
                method,
                f"{self._prefix}{path}",
                json=json,
                headers=headers,
            )
        except httpx.TimeoutException as exc:
            logger.error("bank_request_timeout", extra={"operation": operation})
            raise GatewayError(
                "Tempo esgotado aguardando o banco",
                details={"operation": operation},
            ) from exc
        except httpx.HTTPError as exc:
            logger.error(
                "bank_request_failed",
                extra={"operation": operation, "error_type": type(exc).__name__},
            )
            raise GatewayError(
                redact_secrets(f"Falha de rede ao chamar o banco: {exc}", secrets),
                details={"operation": operation},
            ) from exc

        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
        body = redact_secrets(read_body(response), secrets)

        if response.status_code == 401:
            self._token_cache.invalidate()

        if not response.is_success:
            errors = parse_gateway_errors(body)
            summary = summarize_errors(errors)
            logger.warning(
                "bank_request_rejected",
                extra={
                    "operation": operation,
                    "status_code": response.status_code,
                    "errors": summary,
                    "elapsed_ms": elapsed_ms,
                },
            )
            raise GatewayError(
                summary or f"Banco respondeu HTTP {response.status_code}",
                status_code=response.status_code,
                upstream_body=body,
                errors=errors,
                details={"operation": operation},
            )

        logger.info(
            "bank_request_completed",
            extra={
                "operation": operation,
                "status_code": response.status_code,
                "elapsed_ms": elapsed_ms,
            },
        )
        return body
