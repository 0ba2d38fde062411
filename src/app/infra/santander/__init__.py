"""Integração com a API de cobrança do Santander.

Módulos disponíveis:
    - credentials: CredentialBundle e carga a partir do provedor de secrets
    - transport: SSLContext mTLS e httpx.AsyncClient compartilhado
    - token_cache: Bearer token OAuth2 com renovação coalescida
    - gateway_client: Chamadas da API (workspaces, boletos, PDF)
    - gateway_errors: Leitura tolerante dos corpos de erro
    - workspace_resolver: Workspace de cobrança por convênio
"""

from __future__ import annotations

from app.infra.santander.credentials import CredentialBundle, CredentialStore
from app.infra.santander.gateway_client import SantanderGatewayClient
from app.infra.santander.gateway_errors import GatewayErrorItem, parse_gateway_errors
from app.infra.santander.token_cache import TokenCache
from app.infra.santander.transport import TransportFactory
from app.infra.santander.workspace_resolver import WorkspaceResolver

__all__ = [
    "CredentialBundle",
    "CredentialStore",
    "GatewayErrorItem",
    "SantanderGatewayClient",
    "TokenCache",
    "TransportFactory",
    "WorkspaceResolver",
    "parse_gateway_errors",
]
