"""
Mock confidentiality service.

Stands in for FHE-encrypted balances. Handles are opaque hex strings that
only this service (holding the configured secret) can turn back into
numbers. This is a reversible value encoding, not real encryption: it
offers no semantic confidentiality guarantee and must not be relied upon
as one.

Handle layout (hex, ``0x``-prefixed)::

    nonce (8 bytes) | payload XOR keystream | tag (8 bytes)

The keystream is SHA-256 over (secret, nonce, block counter); the tag is a
truncated HMAC-SHA256 over nonce and payload so foreign or corrupted
handles are rejected instead of decoding to garbage.
"""

import hashlib
import hmac
import secrets
from decimal import Decimal, InvalidOperation
from typing import Union

from cipher_dex.core.errors import ValidationError

NONCE_SIZE = 8
TAG_SIZE = 8
TX_HASH_BYTES = 32

Number = Union[Decimal, int, float, str]


def to_decimal(value: Number) -> Decimal:
    """Convert a ledger amount to Decimal without float artefacts."""
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Invalid numeric value: {value!r}")


class MockConfidentialService:
    """Encrypt/decrypt balances for storage and generate transaction hashes."""

    def __init__(self, secret: str):
        """
        Args:
            secret: Key material; handles only decrypt under the same secret
        """
        if not secret:
            raise ValueError("secret must be a non-empty string")
        self._key = secret.encode('utf-8')

    def encrypt(self, value: Number) -> str:
        """
        Encode a non-negative amount as an opaque handle.

        Two calls with the same value return different handles (random
        nonce); both decrypt to the value.

        Raises:
            ValidationError: If the value is negative or not a finite number
        """
        amount = to_decimal(value)
        if not amount.is_finite() or amount < 0:
            raise ValidationError(f"Cannot encrypt value: {value!r}")

        nonce = secrets.token_bytes(NONCE_SIZE)
        payload = str(amount).encode('ascii')
        body = self._xor(payload, nonce)
        tag = self._tag(nonce, body)
        return '0x' + (nonce + body + tag).hex()

    def decrypt(self, handle: str) -> Decimal:
        """
        Recover the amount behind a handle produced by ``encrypt``.

        Raises:
            ValidationError: If the handle is malformed or was not produced under this secret
        """
        if not isinstance(handle, str) or not handle.startswith('0x'):
            raise ValidationError("Encrypted value must be a 0x-prefixed hex string")

        try:
            raw = bytes.fromhex(handle[2:])
        except ValueError:
            raise ValidationError("Encrypted value is not valid hex")

        if len(raw) <= NONCE_SIZE + TAG_SIZE:
            raise ValidationError("Encrypted value is too short")

        nonce = raw[:NONCE_SIZE]
        body = raw[NONCE_SIZE:-TAG_SIZE]
        tag = raw[-TAG_SIZE:]
        if not hmac.compare_digest(tag, self._tag(nonce, body)):
            raise ValidationError("Encrypted value failed integrity check")

        try:
            return Decimal(self._xor(body, nonce).decode('ascii'))
        except (InvalidOperation, UnicodeDecodeError):
            raise ValidationError("Encrypted value does not hold a number")

    @staticmethod
    def generate_tx_hash() -> str:
        """Random stand-in for an on-chain transaction hash."""
        return '0x' + secrets.token_hex(TX_HASH_BYTES)

    def _xor(self, data: bytes, nonce: bytes) -> bytes:
        stream = bytearray()
        counter = 0
        while len(stream) < len(data):
            block = hashlib.sha256(self._key + nonce + counter.to_bytes(4, 'big')).digest()
            stream.extend(block)
            counter += 1
        return bytes(a ^ b for a, b in zip(data, stream))

    def _tag(self, nonce: bytes, body: bytes) -> bytes:
        return hmac.new(self._key, nonce + body, hashlib.sha256).digest()[:TAG_SIZE]
