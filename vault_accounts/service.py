"""
VaultAccountService — accounts backed by secrets held in a HashiCorp Vault.

Provides the session API used by a wallet:

- ``open()`` / ``close()`` / ``is_open()`` — session lifecycle
- ``status()`` — vault health probe
- ``get_accounts()`` — read every configured secret and map addresses
- ``get_private_key(account)`` — fetch the key backing an account
- ``store(key)`` — write a new key to the first configured secret

The service is not thread-safe: one instance must be used from one caller
at a time.

Security Note:
    Private keys are only held in memory for the duration of a call and
    are never cached by the service. Never log key values or tokens.
"""
import logging
from collections.abc import Iterable, Mapping
from typing import Any, NamedTuple, Optional
from urllib.parse import urlencode

from cryptography.hazmat.primitives.asymmetric import ec
from pydantic import BaseModel, field_validator

from .config import ClientConfig, SecretConfig
from .credentials import resolve_token
from .crypto import (
    hex_to_private_key,
    is_hex_address,
    private_key_to_hex,
    public_key_to_address,
    to_checksum_address,
)
from .delegate import (
    ClientDelegate,
    ClientDelegateFactory,
    Secret,
    default_client_delegate_factory,
)
from .exceptions import (
    ConfigError,
    HealthcheckFailedError,
    SecretDataError,
    UnknownAccountError,
    VaultSealedError,
    VaultUninitialisedError,
    WalletClosedError,
)
from .status import WalletStatus

logger = logging.getLogger("vault_accounts")


class Account(BaseModel):
    """An account address and the vault locator of the secret backing it.

    ``url`` may be left empty when looking an account up by address only.
    """

    address: str
    url: str = ""

    model_config = {"frozen": True}

    @field_validator("address")
    @classmethod
    def checksum_address(cls, v: str) -> str:
        return to_checksum_address(v)


class AccountSecret(NamedTuple):
    account: Account
    secret: SecretConfig


def _secret_field(resp: Optional[Secret], field: str, path: str) -> str:
    """Extract a string field from a KV v2 response (``data.data.<field>``)."""
    if resp is None or not resp.data:
        raise SecretDataError(f"No data found in vault secret: {path}")
    payload = resp.data.get("data")
    if not isinstance(payload, dict):
        raise SecretDataError(f"No data found in vault secret: {path}")
    value = payload.get(field)
    if not isinstance(value, str) or not value:
        raise SecretDataError(
            f"Field {field!r} not found in vault secret: {path}"
        )
    return value


class VaultAccountService:
    """Vault session exposing the configured secrets as accounts.

    State is only held in memory: ``open()`` creates the authenticated
    client, ``get_accounts()`` builds the address mapping and ``close()``
    discards both.
    """

    def __init__(
        self,
        client_config: ClientConfig,
        secrets: Iterable[SecretConfig],
        client_factory: ClientDelegateFactory = default_client_delegate_factory,
        environ: Optional[Mapping[str, str]] = None,
    ):
        self._client_config = client_config
        self._secrets = tuple(secrets)
        self._client_factory = client_factory
        self._environ = environ
        self._client: Optional[ClientDelegate] = None
        self._accounts_by_address: dict[str, list[AccountSecret]] = {}
        self._accounts: list[Account] = []

    def __repr__(self) -> str:
        return (
            f"<VaultAccountService url={self._client_config.url!r} "
            f"secrets={len(self._secrets)} open={self.is_open()}>"
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def client_config(self) -> ClientConfig:
        return self._client_config

    @property
    def secrets(self) -> tuple[SecretConfig, ...]:
        return self._secrets

    @property
    def accounts(self) -> list[Account]:
        """Accounts loaded by the last ``get_accounts()`` call."""
        return list(self._accounts)

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    def open(self) -> None:
        """Create an authenticated vault client.

        Address mapping is deferred to ``get_accounts()``.

        Raises:
            FileNotFoundError: If configured TLS files do not exist.
            ConfigError: If the vault address is invalid.
            VaultAuthenticationError: If no credential can be resolved.
            hvac.exceptions.VaultError: If the vault rejects an AppRole login.
        """
        client = self._client_factory(self._client_config)
        client.set_address(self._client_config.url)
        client.set_token(
            resolve_token(client, self._client_config, self._environ)
        )
        self._client = client
        logger.info("Vault session opened: url=%s", self._client_config.url)

    def is_open(self) -> bool:
        return self._client is not None

    def status(self) -> WalletStatus:
        """Probe the vault health endpoint.

        Returns:
            ``WalletStatus.CLOSED`` if no session is open, otherwise
            ``WalletStatus.OPEN`` for a usable vault.

        Raises:
            HealthcheckFailedError: If the health check itself failed.
            VaultUninitialisedError: If the vault is not initialised.
            VaultSealedError: If the vault is sealed.
        """
        if self._client is None:
            return WalletStatus.CLOSED
        try:
            health = self._client.sys().health()
        except Exception as err:
            raise HealthcheckFailedError(
                f"Vault healthcheck failed: {err}"
            ) from err
        if not health.initialized:
            raise VaultUninitialisedError()
        if health.sealed:
            raise VaultSealedError()
        return WalletStatus.OPEN

    def close(self) -> None:
        """Clear the token and drop the client and all loaded accounts."""
        if self._client is not None:
            self._client.clear_token()
            logger.info(
                "Vault session closed: url=%s", self._client_config.url,
            )
        self._client = None
        self._accounts_by_address = {}
        self._accounts = []

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    def get_account_url(self, secret: SecretConfig) -> str:
        """Build the locator for a secret.

        Returns:
            ``{url}/v1/{secret_engine}/data/{name}?version={version}``

        Raises:
            InvalidSecretVersionError: If the secret version is negative.
        """
        path, query = secret.to_request_data()
        return (
            f"{self._client_config.url}/v1/{path}?"
            f"{urlencode(query, doseq=True)}"
        )

    def _read_account(self, client: ClientDelegate, secret: SecretConfig) -> Account:
        path, query = secret.to_request_data()
        url = self.get_account_url(secret)
        resp = client.logical().read_with_data(path, query)
        address = _secret_field(resp, secret.account_id, path)
        if not is_hex_address(address):
            raise SecretDataError(
                f"Field {secret.account_id!r} in vault secret {path} "
                "is not a hex address"
            )
        return Account(address=address, url=url)

    def get_accounts(self) -> tuple[list[Account], list[Exception]]:
        """Read every configured secret and rebuild the address mapping.

        Secrets are read one at a time in configured order. A secret that
        cannot be read does not stop the others from being loaded; its
        error is collected instead.

        Returns:
            Tuple of (accounts loaded, in secret order; errors collected).
            When the session is closed: ``([], [WalletClosedError()])``.
        """
        client = self._client
        if client is None:
            return [], [WalletClosedError()]

        accounts: list[Account] = []
        errs: list[Exception] = []
        by_address: dict[str, list[AccountSecret]] = {}
        for secret in self._secrets:
            try:
                account = self._read_account(client, secret)
            except Exception as err:
                logger.warning(
                    "Unable to load account from vault secret=%s version=%s: %s",
                    secret.name, secret.version, err,
                )
                errs.append(err)
                continue
            accounts.append(account)
            by_address.setdefault(account.address, []).append(
                AccountSecret(account, secret)
            )

        self._accounts_by_address = by_address
        self._accounts = accounts
        logger.info(
            "Vault accounts loaded: %d account(s), %d error(s)",
            len(accounts), len(errs),
        )
        return list(accounts), errs

    def _find(self, account: Account) -> AccountSecret:
        entries = self._accounts_by_address.get(account.address)
        if not entries:
            raise UnknownAccountError()
        if not account.url:
            return entries[0]
        for entry in entries:
            if entry.account.url == account.url:
                return entry
        raise UnknownAccountError()

    # ------------------------------------------------------------------
    # Keys
    # ------------------------------------------------------------------

    def get_private_key(self, account: Account) -> ec.EllipticCurvePrivateKey:
        """Fetch the private key of a loaded account from the vault.

        If the account has no url, the first secret loaded for its address
        is used; otherwise the secret whose locator matches exactly.

        Raises:
            UnknownAccountError: If the account was not loaded.
            WalletClosedError: If the session is closed.
            SecretDataError: If the secret has no key field.
            ValueError: If the stored key is not a valid hex key.
        """
        entry = self._find(account)
        if self._client is None:
            raise WalletClosedError()
        path, query = entry.secret.to_request_data()
        resp = self._client.logical().read_with_data(path, query)
        return hex_to_private_key(_secret_field(resp, entry.secret.key_id, path))

    def store(self, key: ec.EllipticCurvePrivateKey) -> str:
        """Write a private key and its address to the first configured secret.

        Any further configured secrets are ignored.

        Returns:
            The checksummed address derived from the key.

        Raises:
            ConfigError: If no secret is configured.
            WalletClosedError: If the session is closed.
        """
        if not self._secrets:
            raise ConfigError("No vault secret configured to store the key in")
        if self._client is None:
            raise WalletClosedError()
        secret = self._secrets[0]
        path, _ = secret.to_request_data()
        address = public_key_to_address(key.public_key())
        data: dict[str, Any] = {
            "data": {
                secret.account_id: address[2:],
                secret.key_id: private_key_to_hex(key),
            },
        }
        self._client.logical().write(path, data)
        logger.info("Vault account stored: address=%s path=%s", address, path)
        return address
