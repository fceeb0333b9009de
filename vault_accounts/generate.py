"""Create a new account key directly in the vault."""
import logging
from collections.abc import Mapping
from typing import Optional

from .config import WalletConfig
from .crypto import generate_private_key
from .delegate import ClientDelegateFactory, default_client_delegate_factory
from .exceptions import VaultAccountError
from .service import VaultAccountService
from .status import WalletStatus

logger = logging.getLogger("vault_accounts")


def generate_and_store(
    config: WalletConfig,
    client_factory: ClientDelegateFactory = default_client_delegate_factory,
    environ: Optional[Mapping[str, str]] = None,
) -> str:
    """Generate a secp256k1 key and store it in the vault.

    The key is written to the first secret of the config only, so the
    config should hold exactly one secret. The secret version is not
    required since writing always creates a new version.

    Args:
        config: Wallet config describing the vault and target secret.
        client_factory: Builds the vault client delegate.
        environ: Mapping to read credentials from instead of ``os.environ``.

    Returns:
        The checksummed address of the new account.

    Raises:
        ConfigError: If the config is invalid.
        VaultStatusError: If the vault is not usable.
    """
    config.verify(skip_version=True)
    service = VaultAccountService(
        config.client, config.secrets,
        client_factory=client_factory, environ=environ,
    )
    service.open()
    try:
        status = service.status()
        if status is not WalletStatus.OPEN:
            raise VaultAccountError(f"error creating Vault client, {status}")
        key = generate_private_key()
        address = service.store(key)
        # drop our reference; the key object cannot be zeroed in place
        del key
    finally:
        service.close()
    logger.info("Generated and stored new vault account: %s", address)
    return address
