"""
Password-based envelope encryption.

A 32-byte key is derived from the password with Argon2id and a fresh random
salt, then the plaintext is sealed with ChaCha20-Poly1305 under a fresh random
nonce. The key is derived again on every call and never stored.
"""

import logging
import os
import typing

from argon2.low_level import Type, hash_secret_raw
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import ChaCha20Poly1305

from .metadata import NONCE_LENGTH, SALT_LENGTH, VERSION, KdfParams, Metadata
from .utils import DecryptionError, FormatError

log = logging.getLogger(__name__)

KEY_LENGTH = 32

# 64 MiB, 3 passes, 1 lane.
DEFAULT_PARAMS = KdfParams(m_cost=65536, t_cost=3, p_cost=1)


def derive_key(
        password: typing.Union[str, bytes],
        salt: bytes,
        params: KdfParams) -> bytes:
    if isinstance(password, str):
        password = password.encode('utf-8')

    log.debug(f"Deriving key with argon2id {params}")
    return hash_secret_raw(
        secret=password,
        salt=salt,
        time_cost=params.t_cost,
        memory_cost=params.m_cost,
        parallelism=params.p_cost,
        hash_len=KEY_LENGTH,
        type=Type.ID)


def seal(
        plaintext: bytes,
        password: str,
        params: typing.Optional[KdfParams] = None) -> typing.Tuple[bytes, Metadata]:
    """Encrypt plaintext, returning the ciphertext and its metadata."""
    if params is None:
        params = DEFAULT_PARAMS
    params.validate()

    salt = os.urandom(SALT_LENGTH)
    nonce = os.urandom(NONCE_LENGTH)

    key = derive_key(password, salt, params)
    ciphertext = ChaCha20Poly1305(key).encrypt(nonce, plaintext, None)

    return ciphertext, Metadata(version=VERSION, salt=salt, nonce=nonce, kdf=params)


def unseal(ciphertext: bytes, password: str, metadata: Metadata) -> bytes:
    """
    Decrypt a ciphertext produced by seal() and return the plaintext bytes.

    A wrong password and a modified ciphertext, nonce or salt all fail the
    same way, with a DecryptionError.
    """
    if metadata.version != VERSION:
        raise FormatError(f"Unsupported metadata version {metadata.version}")
    metadata.kdf.validate()

    key = derive_key(password, metadata.salt, metadata.kdf)
    try:
        plaintext = ChaCha20Poly1305(key).decrypt(metadata.nonce, ciphertext, None)
    except InvalidTag:
        raise DecryptionError() from None

    try:
        plaintext.decode('utf-8')
    except UnicodeDecodeError as error:
        raise FormatError("Decrypted data is not valid UTF-8 text") from error

    return plaintext
