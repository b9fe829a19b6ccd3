"""Symmetric encryption of identifiers carried in outbound events.

AES-256-CBC with PKCS7 padding. The key is the SHA-256 digest of the
configured secret and every value gets a fresh random IV. Output format
is ``<iv hex>:<ciphertext hex>``.
"""

import hashlib
import os

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

_IV_SIZE = 16


def _derive_key(secret: str) -> bytes:
    return hashlib.sha256(secret.encode("utf-8")).digest()


def encrypt_string(value: str, secret: str) -> str:
    """Encrypt ``value`` with a key derived from ``secret``."""
    iv = os.urandom(_IV_SIZE)
    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    padded = padder.update(value.encode("utf-8")) + padder.finalize()

    encryptor = Cipher(algorithms.AES(_derive_key(secret)), modes.CBC(iv)).encryptor()
    ciphertext = encryptor.update(padded) + encryptor.finalize()
    return f"{iv.hex()}:{ciphertext.hex()}"


def decrypt_string(token: str, secret: str) -> str:
    """Inverse of :func:`encrypt_string`.

    Raises:
        ValueError: If the token is malformed or the secret is wrong.
    """
    try:
        iv_hex, ciphertext_hex = token.split(":", 1)
        iv = bytes.fromhex(iv_hex)
        ciphertext = bytes.fromhex(ciphertext_hex)
    except ValueError as e:
        raise ValueError(f"Malformed encrypted token: {e}") from e

    decryptor = Cipher(algorithms.AES(_derive_key(secret)), modes.CBC(iv)).decryptor()
    padded = decryptor.update(ciphertext) + decryptor.finalize()
    unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
    return (unpadder.update(padded) + unpadder.finalize()).decode("utf-8")
