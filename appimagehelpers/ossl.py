"""Encryption compatible with ``openssl enc -aes-256-cbc`` using an MD5-derived key."""

from __future__ import annotations

import base64
import binascii
import hashlib
import os

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

BLOCK_SIZE = 16

# OpenSSL output always begins with this header followed by 8 bytes of salt.
SALT_HEADER = b"Salted__"


class OpenSSLFormatError(ValueError):
    """Raised when data is not valid OpenSSL AES-256-CBC output."""


def _as_bytes(value: str | bytes) -> bytes:
    return value.encode() if isinstance(value, str) else bytes(value)


def evp_bytes_to_key(password: str | bytes, salt: bytes) -> tuple[bytes, bytes]:
    """Derive a 32-byte key and a 16-byte IV as OpenSSL's EVP_BytesToKey does with MD5."""
    password = _as_bytes(password)
    derived = b""
    previous = b""
    for _ in range(3):
        previous = hashlib.md5(previous + password + salt).digest()
        derived += previous
    return derived[:32], derived[32:]


def _pkcs7_pad(data: bytes) -> bytes:
    # Data that is already block-aligned is left as it is.
    remainder = len(data) % BLOCK_SIZE
    if remainder == 0:
        return data
    padlen = BLOCK_SIZE - remainder
    return data + bytes([padlen]) * padlen


def _pkcs7_unpad(data: bytes) -> bytes:
    if not data or len(data) % BLOCK_SIZE != 0:
        raise OpenSSLFormatError(f"invalid data len {len(data)}")
    padlen = data[-1]
    if padlen == 0 or padlen > BLOCK_SIZE:
        raise OpenSSLFormatError("invalid padding")
    if data[-padlen:] != bytes([padlen]) * padlen:
        raise OpenSSLFormatError("invalid padding")
    return data[:-padlen]


def decrypt(passphrase: str | bytes, encrypted: bytes) -> bytes:
    """Decrypt OpenSSL AES-256-CBC output (salt header included)."""
    encrypted = bytes(encrypted)
    if len(encrypted) < BLOCK_SIZE:
        raise OpenSSLFormatError("Cipher data Length less than aes block size")
    salt_header = encrypted[:BLOCK_SIZE]
    if salt_header[:8] != SALT_HEADER:
        raise OpenSSLFormatError("Does not appear to have been encrypted with OpenSSL, salt header missing.")
    key, iv = evp_bytes_to_key(passphrase, salt_header[8:])
    if len(encrypted) % BLOCK_SIZE != 0:
        raise OpenSSLFormatError(f"bad blocksize({len(encrypted)}), aes.BlockSize = {BLOCK_SIZE}")
    decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
    plain = decryptor.update(encrypted[BLOCK_SIZE:]) + decryptor.finalize()
    return _pkcs7_unpad(plain)


def decrypt_base64(passphrase: str | bytes, encrypted_base64: str | bytes) -> bytes:
    """Decrypt base64-encoded OpenSSL AES-256-CBC output."""
    try:
        encrypted = base64.b64decode(_as_bytes(encrypted_base64), validate=True)
    except binascii.Error as e:
        raise OpenSSLFormatError(f"invalid base64 data: {e}") from e
    return decrypt(passphrase, encrypted)


def decrypt_string(passphrase: str, encrypted_base64_string: str) -> str:
    """Decrypt a base64 string produced by :func:`encrypt_string` or OpenSSL."""
    return decrypt_base64(passphrase, encrypted_base64_string).decode(errors="replace")


def encrypt(passphrase: str | bytes, plaintext: str | bytes) -> bytes:
    """Encrypt ``plaintext`` with a random salt, in OpenSSL's AES-256-CBC format."""
    salt = os.urandom(8)
    data = SALT_HEADER + salt + _as_bytes(plaintext)
    padded = _pkcs7_pad(data)
    key, iv = evp_bytes_to_key(passphrase, salt)
    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    body = encryptor.update(padded[BLOCK_SIZE:]) + encryptor.finalize()
    return padded[:BLOCK_SIZE] + body


def encrypt_base64(passphrase: str | bytes, plaintext: str | bytes) -> bytes:
    """Like :func:`encrypt`, with the result base64-encoded."""
    return base64.b64encode(encrypt(passphrase, plaintext))


def encrypt_string(passphrase: str, plaintext_string: str) -> str:
    """Like :func:`encrypt_base64`, taking and returning ``str``."""
    return encrypt_base64(passphrase, plaintext_string).decode("ascii")