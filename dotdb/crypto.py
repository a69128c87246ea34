"""
AES-256-CTR envelopes for string values.

An envelope is "<iv hex>:<ciphertext hex>" with a random 16-byte IV. There is
no integrity tag; envelopes written by earlier releases stay readable.
"""

from __future__ import annotations

import os
from typing import Any

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .errors import DecryptionError, EncryptionError

IV_SIZE = 16
KEY_SIZE = 32


def _key_bytes(key: str) -> bytes:
    raw = key.encode("utf-8")
    if len(raw) != KEY_SIZE:
        raise ValueError(f"encryption key must be {KEY_SIZE} bytes, got {len(raw)}")
    return raw


def is_envelope(value: Any) -> bool:
    if not isinstance(value, str) or " " in value:
        return False
    parts = value.split(":")
    if len(parts) != 2:
        return False
    try:
        iv = bytes.fromhex(parts[0])
        bytes.fromhex(parts[1])
    except ValueError:
        return False
    return len(iv) == IV_SIZE


def encrypt(key: str, plaintext: Any) -> str:
    if not isinstance(plaintext, str):
        raise EncryptionError("The provided value has to be a string to be encrypted.")
    try:
        iv = os.urandom(IV_SIZE)
        encryptor = Cipher(algorithms.AES(_key_bytes(key)), modes.CTR(iv)).encryptor()
        encrypted = encryptor.update(plaintext.encode("utf-8")) + encryptor.finalize()
    except (ValueError, TypeError) as exc:
        raise EncryptionError("An error has occurred while encrypting a value.") from exc
    return f"{iv.hex()}:{encrypted.hex()}"


def decrypt(key: str, envelope: Any) -> str:
    if not is_envelope(envelope):
        raise DecryptionError("The provided value cannot be decrypted as it was not encrypted before.")
    iv_hex, data_hex = envelope.split(":")
    try:
        decryptor = Cipher(algorithms.AES(_key_bytes(key)), modes.CTR(bytes.fromhex(iv_hex))).decryptor()
        decrypted = decryptor.update(bytes.fromhex(data_hex)) + decryptor.finalize()
        return decrypted.decode("utf-8")
    except (ValueError, TypeError) as exc:
        raise DecryptionError("An error has occurred while decrypting a value.") from exc
