"""Vault Accounts Meta information.
   Vault Accounts keeps account private keys in a HashiCorp Vault
   instead of local key files.
"""
__title__ = 'vault_accounts'
__description__ = (
   'Vault Accounts keeps account private keys in a HashiCorp Vault '
   'instead of local key files.'
)
__version__ = '0.1.0'
__license__ = 'Apache-2.0'
