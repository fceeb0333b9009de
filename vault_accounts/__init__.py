"""Vault Accounts — account keys held in a HashiCorp Vault.

Security Note (Threat Model):
    Private keys are fetched from the vault on demand and exist in process
    memory while a signing call uses them. Python cannot reliably zero key
    objects; callers should drop references as soon as they are done.
"""

from .config import ClientConfig, SecretConfig, WalletConfig
from .delegate import (
    ClientDelegate,
    HealthResponse,
    LogicalDelegate,
    Secret,
    SecretAuth,
    SysDelegate,
    default_client_delegate_factory,
)
from .exceptions import (
    AuthErrorKind,
    ConfigError,
    HealthcheckFailedError,
    InvalidSecretVersionError,
    SecretDataError,
    UnknownAccountError,
    VaultAccountError,
    VaultAuthenticationError,
    VaultSealedError,
    VaultStatusError,
    VaultUninitialisedError,
    WalletClosedError,
)
from .generate import generate_and_store
from .service import Account, VaultAccountService
from .status import WalletStatus
from .version import __version__

__all__ = [
    "ClientConfig",
    "SecretConfig",
    "WalletConfig",
    "ClientDelegate",
    "LogicalDelegate",
    "SysDelegate",
    "Secret",
    "SecretAuth",
    "HealthResponse",
    "default_client_delegate_factory",
    "AuthErrorKind",
    "VaultAccountError",
    "ConfigError",
    "InvalidSecretVersionError",
    "VaultAuthenticationError",
    "WalletClosedError",
    "UnknownAccountError",
    "SecretDataError",
    "VaultStatusError",
    "HealthcheckFailedError",
    "VaultUninitialisedError",
    "VaultSealedError",
    "Account",
    "VaultAccountService",
    "WalletStatus",
    "generate_and_store",
    "__version__",
]
