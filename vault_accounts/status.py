"""Wallet status values reported by the vault health probe."""
from enum import Enum


class WalletStatus(str, Enum):
    CLOSED = "Closed"
    OPEN = "Open"
    HEALTHCHECK_FAILED = "Vault healthcheck failed"
    VAULT_UNINITIALISED = "Vault uninitialised"
    VAULT_SEALED = "Vault sealed"

    def __str__(self) -> str:
        return self.value
