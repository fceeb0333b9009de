"""
Vault Accounts Crypto — secp256k1 keys, hex codec and address derivation.

Account keys are stored in the vault as 64-character hex strings. The
account address is the last 20 bytes of the Keccak-256 hash of the
uncompressed public key (without its 0x04 prefix), rendered with the
EIP-55 mixed-case checksum.

Security Note:
    Never log private key values. Only log addresses.
"""
import re
import logging

from Crypto.Hash import keccak
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

logger = logging.getLogger("vault_accounts")

KEY_LENGTH = 32  # secp256k1 private scalar
ADDRESS_LENGTH = 20

_HEX_ADDRESS = re.compile(r"^(0[xX])?[0-9a-fA-F]{40}$")


def keccak256(data: bytes) -> bytes:
    """Return the Keccak-256 digest (pre-standard SHA-3 padding)."""
    h = keccak.new(digest_bits=256)
    h.update(data)
    return h.digest()


# ---------------------------------------------------------------------------
# Private keys
# ---------------------------------------------------------------------------

def generate_private_key() -> ec.EllipticCurvePrivateKey:
    """Generate a new random secp256k1 private key."""
    return ec.generate_private_key(ec.SECP256K1())


def hex_to_private_key(hex_key: str) -> ec.EllipticCurvePrivateKey:
    """Decode a hex-encoded secp256k1 private key.

    Args:
        hex_key: 64 hex characters, without a ``0x`` prefix.

    Returns:
        The private key object.

    Raises:
        ValueError: If the string is not valid hex, has the wrong length
            or is not a valid scalar for the curve.
    """
    raw = bytes.fromhex(hex_key)
    if len(raw) != KEY_LENGTH:
        raise ValueError(
            f"invalid private key length: {len(raw)} bytes "
            f"(need {KEY_LENGTH})"
        )
    return ec.derive_private_key(int.from_bytes(raw, "big"), ec.SECP256K1())


def private_key_to_hex(key: ec.EllipticCurvePrivateKey) -> str:
    """Encode a private key as 64 lowercase hex characters."""
    value = key.private_numbers().private_value
    return value.to_bytes(KEY_LENGTH, "big").hex()


# ---------------------------------------------------------------------------
# Addresses
# ---------------------------------------------------------------------------

def is_hex_address(value: str) -> bool:
    """True if value is 40 hex characters with an optional 0x prefix."""
    return bool(_HEX_ADDRESS.match(value))


def to_checksum_address(value: str | bytes) -> str:
    """Render an address with the EIP-55 mixed-case checksum.

    Args:
        value: 20 raw bytes, or a hex string with or without ``0x``.

    Returns:
        ``0x``-prefixed checksummed address.

    Raises:
        ValueError: If value is not a 20 byte address.
    """
    if isinstance(value, bytes):
        if len(value) != ADDRESS_LENGTH:
            raise ValueError(
                f"address must be {ADDRESS_LENGTH} bytes, got {len(value)}"
            )
        lowered = value.hex()
    else:
        if not is_hex_address(value):
            raise ValueError(f"invalid hex address: {value!r}")
        lowered = value[2:].lower() if value[:2] in ("0x", "0X") else value.lower()
    digest = keccak256(lowered.encode("ascii")).hex()
    checksummed = "".join(
        c.upper() if c.isalpha() and int(digest[i], 16) >= 8 else c
        for i, c in enumerate(lowered)
    )
    return "0x" + checksummed


def public_key_to_address(public_key: ec.EllipticCurvePublicKey) -> str:
    """Derive the checksummed account address for a public key."""
    point = public_key.public_bytes(
        serialization.Encoding.X962,
        serialization.PublicFormat.UncompressedPoint,
    )
    # drop the 0x04 uncompressed point marker
    return to_checksum_address(keccak256(point[1:])[-ADDRESS_LENGTH:])
