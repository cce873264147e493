"""Digest, HMAC and AES primitives over raw byte buffers.

Digests and MACs come from hashlib/hmac; block ciphers from the
``cryptography`` package. Every function takes its algorithm or mode
explicitly so callers thread configuration through rather than relying on
module state.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from vsslib.enums import DEFAULT_ALGORITHM, DEFAULT_BLOCK_MODE, Algorithm, BlockMode
from vsslib.errors import SymmetricCipherError

AES_KEY_LENGTH = 32
GCM_TAG_LENGTH = 16


def digest(data: bytes, algorithm: Algorithm | str = DEFAULT_ALGORITHM) -> bytes:
    algorithm = Algorithm.parse(algorithm)
    return hashlib.new(algorithm.hashlib_name, data).digest()


def hmac_digest(key: bytes, data: bytes, algorithm: Algorithm | str = DEFAULT_ALGORITHM) -> bytes:
    algorithm = Algorithm.parse(algorithm)
    return hmac.new(key, data, algorithm.hashlib_name).digest()


def ct_equal(a: bytes, b: bytes) -> bool:
    """Constant-time comparison over the full length of both inputs."""
    return hmac.compare_digest(a, b)


def _mode_for(mode: BlockMode, iv: bytes) -> modes.Mode:
    if mode is BlockMode.AES_256_CBC:
        return modes.CBC(iv)
    if mode is BlockMode.AES_256_CFB:
        return modes.CFB(iv)
    if mode is BlockMode.AES_256_OFB:
        return modes.OFB(iv)
    return modes.CTR(iv)


def aes_encrypt(
    key: bytes,
    message: bytes,
    mode: BlockMode | str = DEFAULT_BLOCK_MODE,
    iv: bytes | None = None,
) -> tuple[bytes, bytes, bytes | None]:
    """Encrypt ``message`` under a 32-byte key.

    Returns:
        (ciphered, iv, tag) where tag is only set for GCM.
    """
    mode = BlockMode.parse(mode)
    if len(key) != AES_KEY_LENGTH:
        raise SymmetricCipherError("Invalid key length")
    if iv is None:
        iv = secrets.token_bytes(mode.iv_length)
    if len(iv) != mode.iv_length:
        raise SymmetricCipherError("Invalid IV length")

    if mode is BlockMode.AES_256_GCM:
        sealed = AESGCM(key).encrypt(iv, message, None)
        return sealed[:-GCM_TAG_LENGTH], iv, sealed[-GCM_TAG_LENGTH:]

    if mode is BlockMode.AES_256_CBC:
        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        message = padder.update(message) + padder.finalize()
    encryptor = Cipher(algorithms.AES(key), _mode_for(mode, iv)).encryptor()
    return encryptor.update(message) + encryptor.finalize(), iv, None


def aes_decrypt(
    key: bytes,
    ciphered: bytes,
    iv: bytes,
    mode: BlockMode | str = DEFAULT_BLOCK_MODE,
    tag: bytes | None = None,
) -> bytes:
    mode = BlockMode.parse(mode)
    if len(key) != AES_KEY_LENGTH:
        raise SymmetricCipherError("Invalid key length")
    if len(iv) != mode.iv_length:
        raise SymmetricCipherError("Invalid IV length")

    if mode is BlockMode.AES_256_GCM:
        if tag is None:
            raise SymmetricCipherError("Missing authentication tag")
        try:
            return AESGCM(key).decrypt(iv, ciphered + tag, None)
        except InvalidTag as e:
            raise SymmetricCipherError("AES decryption failure") from e

    decryptor = Cipher(algorithms.AES(key), _mode_for(mode, iv)).decryptor()
    try:
        plain = decryptor.update(ciphered) + decryptor.finalize()
        if mode is BlockMode.AES_256_CBC:
            unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
            plain = unpadder.update(plain) + unpadder.finalize()
    except ValueError as e:
        raise SymmetricCipherError("AES decryption failure") from e
    return plain
