"""Transporte mTLS para a API do banco.

Monta um ``ssl.SSLContext`` a partir do certificado e da chave privada do
CredentialBundle e entrega ``httpx.AsyncClient`` reutilizáveis. O certificado
é validado (formato, validade e par com a chave) antes do primeiro uso.
"""

from __future__ import annotations

import logging
import os
import ssl
import tempfile
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

import httpx
from cryptography import x509
from cryptography.hazmat.primitives import serialization

from utils.errors import AuthError

if TYPE_CHECKING:
    from app.infra.santander.credentials import CredentialStore

logger = logging.getLogger(__name__)

CERT_EXPIRY_WARNING_DAYS = 30


def load_private_key(private_key_pem: str, passphrase: str | None = None) -> Any:
    """Carrega a chave privada PEM, com ou sem passphrase.

    Raises:
        AuthError: Se a chave for inválida ou a passphrase não confere.
    """
    passphrase_bytes = passphrase.encode() if passphrase and passphrase.strip() else None

    def _load(password: bytes | None) -> Any:
        return serialization.load_pem_private_key(private_key_pem.encode("utf-8"), password=password)

    try:
        return _load(passphrase_bytes)
    except (TypeError, ValueError) as exc:
        # Passphrase configurada para uma chave que não é criptografada.
        if passphrase_bytes and "not encrypted" in str(exc).lower():
            try:
                return _load(None)
            except (TypeError, ValueError) as retry_exc:
                raise AuthError("Chave privada inválida") from retry_exc
        raise AuthError("Chave privada inválida ou passphrase incorreta") from exc


def load_certificate(certificate_pem: str, *, now: datetime | None = None) -> x509.Certificate:
    """Carrega e valida o certificado do cliente.

    Raises:
        AuthError: Se o certificado for inválido, ainda não válido ou expirado.
    """
    try:
        certificate = x509.load_pem_x509_certificate(certificate_pem.encode("utf-8"))
    except ValueError as exc:
        raise AuthError("Certificado inválido") from exc

    current = now or datetime.now(UTC)
    not_after = certificate.not_valid_after_utc
    if current < certificate.not_valid_before_utc:
        raise AuthError(
            "Certificado ainda não é válido",
            details={"not_before": certificate.not_valid_before_utc.isoformat()},
        )
    if current >= not_after:
        raise AuthError("Certificado expirado", details={"not_after": not_after.isoformat()})
    if not_after - current < timedelta(days=CERT_EXPIRY_WARNING_DAYS):
        logger.warning(
            "bank_certificate_expiring",
            extra={"not_after": not_after.isoformat(), "days_left": (not_after - current).days},
        )
    return certificate


def _public_bytes(key: Any) -> bytes:
    return key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )


class TransportFactory:
    """Fábrica de clientes HTTP autenticados por mTLS.

    Args:
        credentials: Store das credenciais do banco
        base_url: URL base da API (sandbox ou produção)
        timeout_seconds: Timeout por requisição
        transport: Transporte httpx alternativo (testes); dispensa o mTLS
    """

    def __init__(
        self,
        credentials: CredentialStore,
        *,
        base_url: str,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._credentials = credentials
        self._base_url = base_url
        self._timeout = httpx.Timeout(timeout_seconds)
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def base_url(self) -> str:
        return self._base_url

    def build_ssl_context(self) -> ssl.SSLContext:
        """Cria o SSLContext com o certificado de cliente.

        Raises:
            AuthError: Certificado/chave inválidos, expirados ou sem par.
        """
        bundle = self._credentials.load()
        certificate = load_certificate(bundle.certificate_pem)
        private_key = load_private_key(bundle.private_key_pem, bundle.passphrase)
        if _public_bytes(certificate.public_key()) != _public_bytes(private_key.public_key()):
            raise AuthError("Chave privada não corresponde ao certificado")

        context = ssl.create_default_context()
        # load_cert_chain só aceita caminhos; arquivos vivem apenas neste bloco.
        with tempfile.TemporaryDirectory(prefix="bank-mtls-") as tmp_dir:
            cert_path = os.path.join(tmp_dir, "client.crt")
            key_path = os.path.join(tmp_dir, "client.key")
            with open(cert_path, "wb") as cert_file:
                cert_file.write(certificate.public_bytes(serialization.Encoding.PEM))
            with open(key_path, "wb") as key_file:
                key_file.write(
                    private_key.private_bytes(
                        encoding=serialization.Encoding.PEM,
                        format=serialization.PrivateFormat.PKCS8,
                        encryption_algorithm=serialization.NoEncryption(),
                    )
                )
            os.chmod(key_path, 0o600)
            try:
                context.load_cert_chain(certfile=cert_path, keyfile=key_path)
            except ssl.SSLError as exc:
                raise AuthError("Falha ao carregar certificado mTLS") from exc

        logger.info(
            "bank_mtls_context_ready",
            extra={"not_after": certificate.not_valid_after_utc.isoformat()},
        )
        return context

    def create_client(self) -> httpx.AsyncClient:
        """Cria um novo AsyncClient (mTLS, ou o transporte injetado)."""
        if self._transport is not None:
            return httpx.AsyncClient(
                base_url=self._base_url,
                transport=self._transport,
                timeout=self._timeout,
            )
        return httpx.AsyncClient(
            base_url=self._base_url,
            verify=self.build_ssl_context(),
            timeout=self._timeout,
        )

    def get_client(self) -> httpx.AsyncClient:
        """Cliente compartilhado do processo (criado sob demanda)."""
        if self._client is None or self._client.is_closed:
            self._client = self.create_client()
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None
