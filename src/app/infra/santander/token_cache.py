"""Cache do bearer token do banco (OAuth2 client_credentials).

Um único token é compartilhado pelo processo. Chamadas concorrentes com o
token vencido (ou perto de vencer) disparam uma única troca no endpoint de
autenticação; as demais aguardam o lock e reutilizam o resultado.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

import httpx

from app.domain.boleto import AccessToken
from app.infra.santander.gateway_errors import (
    parse_gateway_errors,
    read_body,
    redact_secrets,
    summarize_errors,
)
from utils.errors import AuthError

if TYPE_CHECKING:
    from app.infra.santander.credentials import CredentialStore
    from app.infra.santander.transport import TransportFactory

logger = logging.getLogger(__name__)

DEFAULT_EXPIRES_IN_SECONDS = 900


class TokenCache:
    """Mantém o AccessToken vigente e renova sob demanda.

    Args:
        transport: Fábrica do cliente mTLS
        credentials: Store das credenciais (client_id/client_secret)
        auth_path: Caminho do endpoint de token
        safety_margin_seconds: Antecedência para renovar antes do vencimento
        clock: Relógio monotônico (injetável em testes)
    """

    def __init__(
        self,
        transport: TransportFactory,
        credentials: CredentialStore,
        *,
        auth_path: str,
        safety_margin_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._transport = transport
        self._credentials = credentials
        self._auth_path = auth_path
        self._margin = safety_margin_seconds
        self._clock = clock
        self._token: AccessToken | None = None
        self._lock = asyncio.Lock()

    async def get_token(self) -> AccessToken:
        """Retorna um token válido, renovando se necessário.

        Raises:
            AuthError: Troca de token rejeitada ou sem `access_token`.
        """
        token = self._token
        if token is not None and token.is_fresh(self._clock(), self._margin):
            return token

        async with self._lock:
            token = self._token
            if token is not None and token.is_fresh(self._clock(), self._margin):
                return token
            self._token = await self._fetch_token()
            return self._token

    def invalidate(self) -> None:
        """Descarta o token atual (ex.: após 401 da API)."""
        if self._token is not None:
            logger.info("bank_token_invalidated")
        self._token = None

    async def _fetch_token(self) -> AccessToken:
        bundle = self._credentials.load()
        secrets = bundle.secret_values()
        form = {
            "client_id": bundle.client_id,
            "client_secret": bundle.client_secret,
            "grant_type": "client_credentials",
        }
        started = self._clock()
        try:
            response = await self._transport.get_client().post(
                self._auth_path,
                data=form,
                headers={"Accept": "application/json"},
            )
        except httpx.HTTPError as exc:
            logger.error("bank_token_request_failed", extra={"error_type": type(exc).__name__})
            raise AuthError(
                redact_secrets(f"Falha de rede na autenticação: {exc}", secrets),
            ) from exc

        body = redact_secrets(read_body(response), secrets)
        if not response.is_success:
            errors = parse_gateway_errors(body)
            logger.error(
                "bank_token_rejected",
                extra={"status_code": response.status_code, "errors": summarize_errors(errors)},
            )
            raise AuthError(
                summarize_errors(errors) or "Autenticação rejeitada pelo banco",
                status_code=response.status_code,
                upstream_body=body,
            )

        access_token = body.get("access_token") if isinstance(body, dict) else None
        if not access_token:
            raise AuthError(
                "Resposta de autenticação sem access_token",
                status_code=response.status_code,
                upstream_body=body,
            )

        try:
            expires_in = float(body.get("expires_in") or DEFAULT_EXPIRES_IN_SECONDS)
        except (TypeError, ValueError):
            expires_in = float(DEFAULT_EXPIRES_IN_SECONDS)

        logger.info(
            "bank_token_refreshed",
            extra={
                "expires_in": expires_in,
                "elapsed_ms": round((self._clock() - started) * 1000, 2),
            },
        )
        return AccessToken(value=str(access_token), expires_at=started + expires_in)
