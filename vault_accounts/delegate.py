"""
Vault Client Delegate — narrow capability interface over the vault client.

The session service only talks to the vault through ``ClientDelegate``:

- ``set_address(url)`` — configure the target vault endpoint
- ``set_token(token)`` / ``clear_token()`` — session token lifecycle
- ``logical()`` — KV reads (``read_with_data``) and writes (``write``)
- ``sys()`` — the health check

``HvacClientDelegate`` is the production implementation on top of
``hvac.Client``; tests substitute an in-memory implementation.

Security Note:
    Never log tokens or secret payloads. Only log request paths.
"""
import ssl
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, Optional
from urllib.parse import urlsplit

import hvac
from pydantic import BaseModel

from .config import ClientConfig
from .exceptions import ConfigError

logger = logging.getLogger("vault_accounts")

# Health check status codes for standby, sealed and uninitialised vaults.
# Any 2xx keeps hvac from raising so the body can be inspected.
_HEALTH_CODE = 299


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------

class SecretAuth(BaseModel):
    """Authentication block of a vault response."""

    client_token: str = ""
    accessor: str = ""
    policies: Optional[list[str]] = None
    lease_duration: int = 0
    renewable: bool = False


class Secret(BaseModel):
    """Body of a vault logical read/write response."""

    request_id: str = ""
    lease_id: str = ""
    lease_duration: int = 0
    renewable: bool = False
    data: Optional[dict[str, Any]] = None
    warnings: Optional[list[str]] = None
    auth: Optional[SecretAuth] = None


class HealthResponse(BaseModel):
    """Body of ``GET /v1/sys/health``."""

    initialized: bool
    sealed: bool
    standby: bool = False
    version: str = ""
    cluster_name: str = ""


# ---------------------------------------------------------------------------
# Delegate interfaces
# ---------------------------------------------------------------------------

class LogicalDelegate(ABC):
    """Logical (secret engine) operations."""

    @abstractmethod
    def write(self, path: str, data: dict[str, Any]) -> Optional[Secret]:
        """Write data to a vault path.

        Returns:
            The response secret, or None if the vault returned no body.
        """
        ...

    @abstractmethod
    def read_with_data(
        self, path: str, data: dict[str, list[str]],
    ) -> Optional[Secret]:
        """Read a vault path with query parameters.

        Returns:
            The response secret, or None if the vault returned no body.
        """
        ...


class SysDelegate(ABC):
    """System backend operations."""

    @abstractmethod
    def health(self) -> HealthResponse:
        ...


class ClientDelegate(ABC):
    """Vault client capabilities used by the session service."""

    @abstractmethod
    def logical(self) -> LogicalDelegate:
        ...

    @abstractmethod
    def sys(self) -> SysDelegate:
        ...

    @abstractmethod
    def set_address(self, url: str) -> None:
        """Configure the target vault endpoint.

        Raises:
            ConfigError: If the url cannot be used as a vault address.
        """
        ...

    @abstractmethod
    def set_token(self, token: str) -> None:
        ...

    @abstractmethod
    def clear_token(self) -> None:
        ...


ClientDelegateFactory = Callable[[ClientConfig], ClientDelegate]


# ---------------------------------------------------------------------------
# hvac implementation
# ---------------------------------------------------------------------------

def _json_body(response: Any) -> Optional[dict[str, Any]]:
    """hvac's JSON adapter returns a dict, or the raw response when empty."""
    if response is None or isinstance(response, dict):
        return response
    try:
        return response.json()
    except ValueError:
        return None


def _to_secret(response: Any) -> Optional[Secret]:
    body = _json_body(response)
    if body is None:
        return None
    return Secret.model_validate(body)


class _HvacLogical(LogicalDelegate):
    def __init__(self, client: hvac.Client):
        self._client = client

    def write(self, path: str, data: dict[str, Any]) -> Optional[Secret]:
        logger.debug("Vault write: path=%s", path)
        return _to_secret(self._client.adapter.post(f"/v1/{path}", json=data))

    def read_with_data(
        self, path: str, data: dict[str, list[str]],
    ) -> Optional[Secret]:
        logger.debug("Vault read: path=%s", path)
        return _to_secret(self._client.adapter.get(f"/v1/{path}", params=data))


class _HvacSys(SysDelegate):
    def __init__(self, client: hvac.Client):
        self._client = client

    def health(self) -> HealthResponse:
        response = self._client.sys.read_health_status(
            method="GET",
            standby_code=_HEALTH_CODE,
            sealed_code=_HEALTH_CODE,
            uninit_code=_HEALTH_CODE,
            dr_secondary_code=_HEALTH_CODE,
            performance_standby_code=_HEALTH_CODE,
        )
        return HealthResponse.model_validate(_json_body(response))


class HvacClientDelegate(ClientDelegate):
    """ClientDelegate backed by an ``hvac.Client``."""

    def __init__(self, client: hvac.Client):
        self._client = client
        self._logical = _HvacLogical(client)
        self._sys = _HvacSys(client)

    @property
    def client(self) -> hvac.Client:
        return self._client

    @property
    def token(self) -> Optional[str]:
        return self._client.token

    @property
    def address(self) -> str:
        return self._client.url

    def logical(self) -> LogicalDelegate:
        return self._logical

    def sys(self) -> SysDelegate:
        return self._sys

    def set_address(self, url: str) -> None:
        if not url:
            raise ConfigError("Vault address is not set")
        parts = urlsplit(url)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ConfigError(f"Invalid vault address: {url!r}")
        self._client.url = url

    def set_token(self, token: str) -> None:
        self._client.token = token

    def clear_token(self) -> None:
        self._client.token = None


def _check_tls_files(config: ClientConfig) -> None:
    """Load the configured TLS material so bad paths fail on construction.

    Raises:
        FileNotFoundError: If a certificate or key file does not exist.
        ssl.SSLError: If a file exists but cannot be loaded.
    """
    context = ssl.create_default_context()
    if config.client_cert:
        context.load_cert_chain(config.client_cert, config.client_key or None)
    if config.ca_cert:
        context.load_verify_locations(cafile=config.ca_cert)


def default_client_delegate_factory(config: ClientConfig) -> HvacClientDelegate:
    """Build an hvac-backed ClientDelegate from connection settings.

    Mutual TLS is configured when a client certificate is given and a
    custom CA is trusted when ``ca_cert`` is given. The vault address is
    applied separately through ``set_address``.

    Args:
        config: Client connection settings.

    Returns:
        A delegate with no token set.

    Raises:
        FileNotFoundError: If a TLS file does not exist.
        ssl.SSLError: If TLS material is invalid.
    """
    _check_tls_files(config)
    cert: Any = None
    if config.client_cert:
        cert = (
            (config.client_cert, config.client_key)
            if config.client_key else config.client_cert
        )
    client = hvac.Client(
        cert=cert,
        verify=config.ca_cert or True,
        timeout=config.timeout,
    )
    # hvac picks VAULT_TOKEN up on its own; the resolver decides the token
    client.token = None
    return HvacClientDelegate(client)
