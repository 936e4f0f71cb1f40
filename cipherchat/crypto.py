"""AES-256-GCM message encryption and the base64 line encoding used on the wire."""

from __future__ import annotations

import base64
import binascii

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

SHARED_KEY = b"anexampleverysecurekey123456780!"
NONCE = b"unique_nonce"

_CIPHER = AESGCM(SHARED_KEY)


class DecryptionError(ValueError):
    """Raised when a ciphertext cannot be authenticated or is not UTF-8."""


def encrypt_message(text: str) -> bytes:
    """Encrypt *text* with the shared key; returns ciphertext followed by the tag."""
    return _CIPHER.encrypt(NONCE, text.encode("utf-8"), None)


def decrypt_message(data: bytes) -> str:
    """Decrypt and authenticate *data*, returning the UTF-8 plaintext."""
    try:
        plain = _CIPHER.decrypt(NONCE, bytes(data), None)
    except InvalidTag as exc:
        raise DecryptionError("decryption failure") from exc
    try:
        return plain.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DecryptionError("invalid UTF-8") from exc


def encode_line(text: str) -> str:
    """Encrypt *text* and return it as standard base64, ready to send as a line."""
    return base64.b64encode(encrypt_message(text)).decode("ascii")


def decode_line(line: str) -> str | None:
    """Return the plaintext carried by a wire line, or None if it is not a valid one."""
    try:
        raw = base64.b64decode(line, validate=True)
    except (binascii.Error, ValueError):
        return None
    try:
        return decrypt_message(raw)
    except DecryptionError:
        return None