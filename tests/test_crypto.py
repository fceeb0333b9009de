"""
Tests for key codec and address derivation.
"""
import pytest
from cryptography.hazmat.primitives.asymmetric import ec

from vault_accounts.crypto import (
    generate_private_key,
    hex_to_private_key,
    is_hex_address,
    keccak256,
    private_key_to_hex,
    public_key_to_address,
    to_checksum_address,
)

KEY_HEX = "9676bda387bf2ae687a78afdaaad6f3af8b490b599f42b498b91d5c4c83d1b19"
KEY_ADDRESS = "0xB9F4Dd50d705DE54B89492b0A5eeC2817Fe2b390"


class TestKeccak:
    """Tests for the Keccak-256 helper."""

    def test_empty_input(self):
        """Test the well-known Keccak-256 digest of empty input."""
        assert keccak256(b"").hex() == (
            "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470"
        )


class TestPrivateKeyCodec:
    """Tests for hex <-> private key conversion."""

    def test_hex_to_private_key(self):
        """Test decoding gives a secp256k1 key with the same scalar."""
        key = hex_to_private_key(KEY_HEX)
        assert isinstance(key, ec.EllipticCurvePrivateKey)
        assert isinstance(key.curve, ec.SECP256K1)
        assert key.private_numbers().private_value == int(KEY_HEX, 16)

    def test_private_key_to_hex(self):
        """Test encoding is 64 lowercase hex characters."""
        key = hex_to_private_key(KEY_HEX)
        assert private_key_to_hex(key) == KEY_HEX

    def test_small_scalar_is_zero_padded(self):
        """Test keys with leading zero bytes keep their full length."""
        hex_key = "00" * 31 + "01"
        assert private_key_to_hex(hex_to_private_key(hex_key)) == hex_key

    def test_invalid_hex(self):
        """Test malformed hex is rejected."""
        with pytest.raises(ValueError):
            hex_to_private_key("not-hex")

    def test_wrong_length(self):
        """Test keys that are not 32 bytes are rejected."""
        with pytest.raises(ValueError, match="invalid private key length"):
            hex_to_private_key("abcd")

    def test_zero_key(self):
        """Test the zero scalar is rejected by the curve."""
        with pytest.raises(ValueError):
            hex_to_private_key("00" * 32)

    def test_generate_private_key(self):
        """Test generated keys are on secp256k1 and differ."""
        k1 = generate_private_key()
        k2 = generate_private_key()
        assert isinstance(k1.curve, ec.SECP256K1)
        assert private_key_to_hex(k1) != private_key_to_hex(k2)


class TestAddresses:
    """Tests for address derivation and checksumming."""

    def test_public_key_to_address(self):
        """Test the known key maps to its known address."""
        key = hex_to_private_key(KEY_HEX)
        assert public_key_to_address(key.public_key()) == KEY_ADDRESS

    @pytest.mark.parametrize("address", [
        "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed",
        "0xfB6916095ca1df60bB79Ce92cE3Ea74c37c5d359",
        "0xdbF03B407c01E7cD3CBea99509d93f8DDDC8C6FB",
        "0xD1220A0cf47c7B9Be7A2E6BA89F429762e7b9aDb",
    ])
    def test_checksum_vectors(self, address):
        """Test EIP-55 reference vectors from lowercase and uppercase."""
        assert to_checksum_address(address.lower()) == address
        assert to_checksum_address("0x" + address[2:].upper()) == address

    def test_checksum_without_prefix(self):
        """Test addresses without 0x are accepted."""
        assert to_checksum_address(KEY_ADDRESS[2:].lower()) == KEY_ADDRESS

    def test_checksum_from_bytes(self):
        """Test raw 20 byte addresses are accepted."""
        raw = bytes.fromhex(KEY_ADDRESS[2:])
        assert to_checksum_address(raw) == KEY_ADDRESS

    def test_checksum_rejects_bad_input(self):
        """Test wrong lengths and non-hex input are rejected."""
        with pytest.raises(ValueError):
            to_checksum_address("0x1234")
        with pytest.raises(ValueError):
            to_checksum_address(b"\x00" * 19)
        with pytest.raises(ValueError):
            to_checksum_address("zz" * 20)

    def test_is_hex_address(self):
        """Test hex address detection."""
        assert is_hex_address(KEY_ADDRESS)
        assert is_hex_address(KEY_ADDRESS[2:])
        assert not is_hex_address("")
        assert not is_hex_address("0x" + "g" * 40)
        assert not is_hex_address(KEY_ADDRESS + "00")
