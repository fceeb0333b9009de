"""
Vault Accounts Exceptions.

Every error raised by this package derives from ``VaultAccountError``.
Transport errors coming from ``hvac`` / ``requests`` are never wrapped,
except by the health probe which chains them into ``HealthcheckFailedError``.
"""
from enum import Enum
from typing import Optional

from .status import WalletStatus


class VaultAccountError(Exception):
    """Base exception for vault account operations."""


class ConfigError(VaultAccountError, ValueError):
    """Wallet configuration is incomplete or invalid."""


class InvalidSecretVersionError(VaultAccountError, ValueError):
    """A secret version cannot be used to build a vault request."""


class WalletClosedError(VaultAccountError):
    """Operation requires an open vault session."""

    def __init__(self, message: str = "Wallet closed"):
        super().__init__(message)


class UnknownAccountError(VaultAccountError):
    """Account is not backed by any secret read from the vault."""

    def __init__(self, message: str = "unknown account"):
        super().__init__(message)


class SecretDataError(VaultAccountError):
    """Secret payload does not hold the expected field."""


class AuthErrorKind(Enum):
    """Reasons a vault session could not be authenticated."""

    CANNOT_AUTHENTICATE = (
        "Unable to authenticate client with Vault: "
        "set approle or token env vars"
    )
    CANNOT_AUTHENTICATE_PREFIXED = (
        "Unable to authenticate client with Vault: "
        "set prefixed approle or token env vars"
    )
    APPROLE_FAILED = (
        "AppRole authentication failed: "
        "both role id and secret id env vars must be set"
    )
    APPROLE_FAILED_PREFIXED = (
        "AppRole authentication failed: "
        "both prefixed role id and secret id env vars must be set"
    )

    @property
    def prefixed(self) -> bool:
        return self in (
            AuthErrorKind.CANNOT_AUTHENTICATE_PREFIXED,
            AuthErrorKind.APPROLE_FAILED_PREFIXED,
        )


class VaultAuthenticationError(VaultAccountError):
    """No usable credential could be resolved for the vault session."""

    def __init__(self, kind: AuthErrorKind, detail: Optional[str] = None):
        self.kind = kind
        message = kind.value if detail is None else f"{kind.value} ({detail})"
        super().__init__(message)


class VaultStatusError(VaultAccountError):
    """Vault health probe reported an unusable vault.

    ``status`` holds the ``WalletStatus`` matching the failure; subclasses
    narrow it down.
    """

    status: WalletStatus = WalletStatus.HEALTHCHECK_FAILED

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.status.value)


class HealthcheckFailedError(VaultStatusError):
    status = WalletStatus.HEALTHCHECK_FAILED


class VaultUninitialisedError(VaultStatusError):
    status = WalletStatus.VAULT_UNINITIALISED


class VaultSealedError(VaultStatusError):
    status = WalletStatus.VAULT_SEALED
