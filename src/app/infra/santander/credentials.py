"""Credenciais do banco: client credentials + certificado/chave do mTLS.

O bundle é carregado uma vez por processo a partir do provedor de secrets.
Certificado e chave podem vir em base64 (forma usual em env/Secret Manager)
ou como PEM puro.
"""

from __future__ import annotations

import base64
import binascii
import logging
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from utils.errors import AuthError

if TYPE_CHECKING:
    from app.protocols.secrets import SecretProviderProtocol

logger = logging.getLogger(__name__)

CLIENT_ID_KEY = "santander-client-id"
CLIENT_SECRET_KEY = "santander-client-secret"
CERTIFICATE_KEY = "santander-certificate"
PRIVATE_KEY_KEY = "santander-private-key"
PASSPHRASE_KEY = "santander-key-passphrase"

_PEM_MARKER = "-----BEGIN"


@dataclass(frozen=True, slots=True)
class CredentialBundle:
    """Material de autenticação imutável. Segredos ficam fora do repr."""

    client_id: str
    client_secret: str = field(repr=False)
    certificate_pem: str = field(repr=False)
    private_key_pem: str = field(repr=False)
    passphrase: str | None = field(default=None, repr=False)

    def secret_values(self) -> tuple[str, ...]:
        """Valores que nunca podem aparecer em erros ou logs."""
        values = [self.client_secret, self.private_key_pem]
        if self.passphrase:
            values.append(self.passphrase)
        return tuple(value for value in values if value)


def decode_pem(value: str, *, label: str) -> str:
    """Aceita PEM puro ou PEM codificado em base64.

    Raises:
        AuthError: Se o valor não for PEM nem base64 de um PEM.
    """
    stripped = value.strip()
    if stripped.startswith(_PEM_MARKER):
        return stripped + "\n"
    try:
        decoded = base64.b64decode("".join(stripped.split()), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError) as exc:
        raise AuthError(f"{label} inválido: esperado PEM ou base64 de PEM") from exc
    if _PEM_MARKER not in decoded:
        raise AuthError(f"{label} inválido: conteúdo decodificado não é PEM")
    return decoded.strip() + "\n"


class CredentialStore:
    """Carrega e guarda o CredentialBundle do processo.

    Args:
        provider: Provedor de secrets (env ou Secret Manager)
    """

    def __init__(self, provider: SecretProviderProtocol) -> None:
        self._provider = provider
        self._bundle: CredentialBundle | None = None
        self._lock = threading.Lock()

    def load(self) -> CredentialBundle:
        """Retorna o bundle, lendo os secrets na primeira chamada.

        Raises:
            AuthError: Se algum secret obrigatório estiver ausente ou inválido.
        """
        if self._bundle is not None:
            return self._bundle
        with self._lock:
            if self._bundle is None:
                self._bundle = self._read_bundle()
        return self._bundle

    def _read_bundle(self) -> CredentialBundle:
        try:
            client_id = self._provider.require(CLIENT_ID_KEY)
            client_secret = self._provider.require(CLIENT_SECRET_KEY)
            certificate = self._provider.require(CERTIFICATE_KEY)
            private_key = self._provider.require(PRIVATE_KEY_KEY)
        except ValueError as exc:
            logger.error("bank_credentials_missing", extra={"error": str(exc)})
            raise AuthError(str(exc)) from exc

        bundle = CredentialBundle(
            client_id=client_id.strip(),
            client_secret=client_secret.strip(),
            certificate_pem=decode_pem(certificate, label="Certificado"),
            private_key_pem=decode_pem(private_key, label="Chave privada"),
            passphrase=self._provider.get(PASSPHRASE_KEY),
        )
        logger.info("bank_credentials_loaded", extra={"client_id": bundle.client_id})
        return bundle
