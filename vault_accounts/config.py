"""
Vault Accounts Configuration — client connection and secret descriptors.

A wallet is configured with one ``ClientConfig`` (how to reach and
authenticate against the vault) and an ordered sequence of ``SecretConfig``
entries, each naming one KV v2 secret that holds a single account key.

Security Note:
    Never log key material or credentials. Only log secret names,
    engines and versions.
"""
import os
import logging
from collections.abc import Mapping
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .exceptions import ConfigError, InvalidSecretVersionError

logger = logging.getLogger("vault_accounts")

DEFAULT_APPROLE_PATH = "approle"

# Standard Vault client env vars, used by ClientConfig.from_env()
ENV_VAULT_ADDR = "VAULT_ADDR"
ENV_VAULT_CACERT = "VAULT_CACERT"
ENV_VAULT_CLIENT_CERT = "VAULT_CLIENT_CERT"
ENV_VAULT_CLIENT_KEY = "VAULT_CLIENT_KEY"


class ClientConfig(BaseModel):
    """Connection settings for the vault client."""

    url: str = ""
    approle: str = ""
    ca_cert: str = ""
    client_cert: str = ""
    client_key: str = ""
    env_var_prefix: str = ""
    timeout: int = Field(default=30, ge=1)

    model_config = {"frozen": True}

    @field_validator("url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Locators are built as ``{url}/v1/...``; avoid a double slash."""
        return v.rstrip("/")

    @property
    def approle_path(self) -> str:
        """AppRole auth mount path, ``approle`` unless overridden."""
        return self.approle or DEFAULT_APPROLE_PATH

    @classmethod
    def from_env(
        cls,
        env_var_prefix: str = "",
        environ: Optional[Mapping[str, str]] = None,
    ) -> "ClientConfig":
        """Create a ClientConfig from the standard Vault env vars.

        Reads ``VAULT_ADDR``, ``VAULT_CACERT``, ``VAULT_CLIENT_CERT`` and
        ``VAULT_CLIENT_KEY``. Credentials are not read here; they are
        resolved from the environment when the session is opened.

        Args:
            env_var_prefix: Optional prefix for the credential env vars.
            environ: Mapping to read instead of ``os.environ``.

        Returns:
            Populated ClientConfig instance.
        """
        env = os.environ if environ is None else environ
        return cls(
            url=env.get(ENV_VAULT_ADDR, ""),
            ca_cert=env.get(ENV_VAULT_CACERT, ""),
            client_cert=env.get(ENV_VAULT_CLIENT_CERT, ""),
            client_key=env.get(ENV_VAULT_CLIENT_KEY, ""),
            env_var_prefix=env_var_prefix,
        )


class SecretConfig(BaseModel):
    """One KV v2 secret holding an account address and its private key."""

    name: str = ""
    secret_engine: str = ""
    version: int = 0
    account_id: str = ""
    key_id: str = ""

    model_config = {"frozen": True}

    @property
    def path(self) -> str:
        return f"{self.secret_engine}/data/{self.name}"

    def to_request_data(self) -> tuple[str, dict[str, list[str]]]:
        """Build the request path and query parameters for this secret.

        Returns:
            Tuple of (``{secret_engine}/data/{name}``, ``{"version": [v]}``).

        Raises:
            InvalidSecretVersionError: If the version is negative.
        """
        if self.version < 0:
            raise InvalidSecretVersionError(
                "Hashicorp Vault secret version must be integer >= 0"
            )
        return self.path, {"version": [str(self.version)]}


class WalletConfig(BaseModel):
    """Full configuration of a vault-backed wallet."""

    client: ClientConfig = Field(default_factory=ClientConfig)
    secrets: tuple[SecretConfig, ...] = ()

    model_config = {"frozen": True}

    def verify(self, skip_version: bool = False) -> None:
        """Check the configuration has everything needed to use the vault.

        Wallets that read accounts should pin every secret to a version
        greater than zero; otherwise an update to the secret would replace
        the account the wallet was configured with. Wallets that only write
        new keys can pass ``skip_version``.

        Args:
            skip_version: Do not require a positive secret version.

        Raises:
            ConfigError: Listing every problem found.
        """
        url = self.client.url
        errs: list[str] = []
        if not url:
            errs.append(
                "Invalid vault client config: Vault url must be provided"
            )
        for secret in self.secrets:
            if not secret.name:
                errs.append(
                    f"Invalid vault secret config, vault={url}: "
                    "Name must be provided"
                )
            if not secret.secret_engine:
                errs.append(
                    f"Invalid vault secret config, vault={url}, "
                    f"secret={secret.name}: SecretEngine must be provided"
                )
            if not secret.key_id or not secret.account_id:
                errs.append(
                    f"Invalid vault secret config, vault={url}, "
                    f"secret={secret.name}: KeyID and AccountID must be provided"
                )
            if secret.version <= 0 and not skip_version:
                errs.append(
                    f"Invalid vault secret config, vault={url}, "
                    f"secret={secret.name}: Version must be specified for "
                    "vault secret and must be greater than zero"
                )
        if errs:
            raise ConfigError("\n" + "\n".join(errs))
        logger.debug(
            "Vault wallet config valid: url=%s secrets=%d",
            url, len(self.secrets),
        )
