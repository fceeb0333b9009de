"""Shared fixtures: an in-memory vault client delegate."""
import pytest

from vault_accounts.config import ClientConfig, SecretConfig
from vault_accounts.delegate import (
    ClientDelegate,
    HealthResponse,
    LogicalDelegate,
    Secret,
    SysDelegate,
)
from vault_accounts.service import VaultAccountService


class InMemoryVault(ClientDelegate, LogicalDelegate, SysDelegate):
    """ClientDelegate serving reads from a dict and recording every call.

    ``secrets`` maps a request path to its ``data`` payload. Paths listed in
    ``failing_paths`` raise ``read_error`` instead.
    """

    def __init__(self, secrets=None, health=None, health_error=None):
        self.secrets = dict(secrets or {})
        self.health_response = health or HealthResponse(
            initialized=True, sealed=False,
        )
        self.health_error = health_error
        self.failing_paths = set()
        self.read_error = RuntimeError("some error")
        self.login_tokens = {}
        self.address = None
        self.address_error = None
        self.token = None
        self.token_cleared = False
        self.reads = []
        self.writes = []

    # ClientDelegate
    def logical(self):
        return self

    def sys(self):
        return self

    def set_address(self, url):
        if self.address_error is not None:
            raise self.address_error
        self.address = url

    def set_token(self, token):
        self.token = token

    def clear_token(self):
        self.token = None
        self.token_cleared = True

    # LogicalDelegate
    def write(self, path, data):
        self.writes.append((path, data))
        if path.startswith("auth/") and path.endswith("/login"):
            token = self.login_tokens.get((data["role_id"], data["secret_id"]))
            if token is None:
                return None
            return Secret(auth={"client_token": token})
        return None

    def read_with_data(self, path, data):
        self.reads.append((path, data))
        if path in self.failing_paths:
            raise self.read_error
        payload = self.secrets.get(path)
        if payload is None:
            return None
        return Secret(data={"data": payload})

    # SysDelegate
    def health(self):
        if self.health_error is not None:
            raise self.health_error
        return self.health_response


@pytest.fixture
def vault():
    """A fresh in-memory vault delegate."""
    return InMemoryVault()


@pytest.fixture
def client_config():
    return ClientConfig(url="http://vault.local:8200")


@pytest.fixture
def make_service(vault, client_config):
    """Build a service whose factory always returns the in-memory vault."""
    def _make(secrets=(), config=None, environ=None):
        return VaultAccountService(
            config or client_config,
            secrets,
            client_factory=lambda cfg: vault,
            environ=environ if environ is not None else {"VAULT_TOKEN": "tok"},
        )
    return _make


@pytest.fixture
def secret():
    return SecretConfig(
        name="secret", secret_engine="kv", version=1,
        account_id="acct", key_id="key",
    )
