"""
Vault Credentials — resolve the session token from environment variables.

Four credential sources are tried in strict precedence order:

1. ``{PREFIX}_VAULT_ROLE_ID`` + ``{PREFIX}_VAULT_SECRET_ID`` (AppRole login)
2. ``{PREFIX}_VAULT_TOKEN``
3. ``VAULT_ROLE_ID`` + ``VAULT_SECRET_ID`` (AppRole login)
4. ``VAULT_TOKEN``

When the client config sets an ``env_var_prefix`` only sources 1 and 2 are
considered, and without one only sources 3 and 4. A wallet meant for one
vault never silently authenticates with another vault's credentials.

Security Note:
    Never log env var values. Only log env var names and the tier used.
"""
import os
import logging
from collections.abc import Mapping
from typing import Optional

from .config import ClientConfig
from .delegate import ClientDelegate
from .exceptions import AuthErrorKind, VaultAuthenticationError

logger = logging.getLogger("vault_accounts")

VAULT_ROLE_ID = "VAULT_ROLE_ID"
VAULT_SECRET_ID = "VAULT_SECRET_ID"
VAULT_TOKEN = "VAULT_TOKEN"


def env_var_name(name: str, prefix: str = "") -> str:
    """Return ``{prefix}_{name}``, or name itself when prefix is empty."""
    return f"{prefix}_{name}" if prefix else name


def approle_login(
    client: ClientDelegate,
    approle_path: str,
    role_id: str,
    secret_id: str,
    failure: AuthErrorKind = AuthErrorKind.APPROLE_FAILED,
) -> str:
    """Exchange an AppRole role id and secret id for a client token.

    Args:
        client: Delegate used to make the login request.
        approle_path: Mount path of the AppRole auth method.
        role_id: AppRole role id.
        secret_id: AppRole secret id.
        failure: Error kind raised if the response holds no token.

    Returns:
        The client token from the response's auth block.

    Raises:
        VaultAuthenticationError: If the response has no client token.
    """
    path = f"auth/{approle_path}/login"
    logger.debug("AppRole login: path=%s", path)
    resp = client.logical().write(
        path, {"role_id": role_id, "secret_id": secret_id},
    )
    if resp is None or resp.auth is None or not resp.auth.client_token:
        raise VaultAuthenticationError(failure, "no client token in response")
    return resp.auth.client_token


def _tier_token(
    client: ClientDelegate,
    config: ClientConfig,
    env: Mapping[str, str],
    prefix: str = "",
) -> Optional[str]:
    """Try the AppRole then token source of one tier (prefixed or global).

    Returns:
        The token, or None if this tier holds no credential at all.

    Raises:
        VaultAuthenticationError: If only half of the AppRole pair is set
            and the tier has no token to fall back on.
    """
    role_id = env.get(env_var_name(VAULT_ROLE_ID, prefix), "")
    secret_id = env.get(env_var_name(VAULT_SECRET_ID, prefix), "")
    token = env.get(env_var_name(VAULT_TOKEN, prefix), "")
    tier = "prefixed" if prefix else "global"
    failure = (
        AuthErrorKind.APPROLE_FAILED_PREFIXED if prefix
        else AuthErrorKind.APPROLE_FAILED
    )

    if role_id and secret_id:
        logger.debug("Authenticating with %s AppRole credentials", tier)
        return approle_login(
            client, config.approle_path, role_id, secret_id, failure,
        )
    if token:
        logger.debug("Authenticating with %s token", tier)
        return token
    if role_id or secret_id:
        raise VaultAuthenticationError(failure)
    return None


def resolve_token(
    client: ClientDelegate,
    config: ClientConfig,
    environ: Optional[Mapping[str, str]] = None,
) -> str:
    """Resolve the vault session token from the environment.

    Args:
        client: Delegate used for AppRole logins.
        config: Client config (AppRole mount path and env var prefix).
        environ: Mapping to read instead of ``os.environ``.

    Returns:
        The token to install on the delegate.

    Raises:
        VaultAuthenticationError: If no usable credential is found or an
            AppRole pair is only partly configured.
    """
    env = os.environ if environ is None else environ
    prefix = config.env_var_prefix

    if prefix:
        # a configured prefix confines resolution to the prefixed tiers
        token = _tier_token(client, config, env, prefix)
        if token:
            return token
        raise VaultAuthenticationError(
            AuthErrorKind.CANNOT_AUTHENTICATE_PREFIXED
        )

    token = _tier_token(client, config, env)
    if token:
        return token
    raise VaultAuthenticationError(AuthErrorKind.CANNOT_AUTHENTICATE)
