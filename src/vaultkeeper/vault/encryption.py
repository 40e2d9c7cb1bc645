# Vault - Encryption Service
#
# Secret phrase -> AES-256 key (truncate or zero-pad to 32 bytes)
# Field encryption (AES-256-GCM, fresh 96-bit nonce per call)
# Secret phrase generation from the user's password hash

import os
import base64
import binascii
import hashlib

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..core.exceptions import AuthenticationFailed, InvalidCiphertext


class EncryptionService:
    """
    Encrypts and decrypts record fields under a caller-supplied secret phrase.

    Token layout: nonce (12 bytes) || ciphertext || GCM tag (16 bytes)
    - text fields: the layout above, standard base64 encoded
    - binary fields: the layout above as raw bytes

    The service holds no state. Every call takes the key.
    """

    KEY_LENGTH = 32  # 256 bits for AES-256
    NONCE_LENGTH = 12  # 96-bit nonce for GCM
    SECRET_PHRASE_LENGTH = 14

    @staticmethod
    def derive_key(secret: str) -> bytes:
        """
        Turn a secret phrase into AES key material.

        The UTF-8 bytes of the phrase are truncated, or right-padded with
        zero bytes, to KEY_LENGTH. Short phrases therefore yield weak keys
        and anything past 32 bytes is ignored. Existing ciphertext depends
        on this exact layout, so it cannot change without a scheme version.
        """
        raw = secret.encode("utf-8")[:EncryptionService.KEY_LENGTH]
        return raw.ljust(EncryptionService.KEY_LENGTH, b"\x00")

    @staticmethod
    def encrypt_binary(plaintext: bytes, key: str) -> bytes:
        """
        Encrypt bytes with AES-256-GCM, no associated data.

        Args:
            plaintext: Data to encrypt
            key: Secret phrase

        Returns:
            nonce || ciphertext+tag
        """
        nonce = os.urandom(EncryptionService.NONCE_LENGTH)
        aesgcm = AESGCM(EncryptionService.derive_key(key))
        return nonce + aesgcm.encrypt(nonce, bytes(plaintext), None)

    @staticmethod
    def decrypt_binary(token: bytes, key: str) -> bytes:
        """
        Decrypt a nonce-prefixed AES-256-GCM payload.

        Raises:
            InvalidCiphertext: If the payload is shorter than a nonce
            AuthenticationFailed: If the tag check fails (wrong key or tampered data)
        """
        if len(token) < EncryptionService.NONCE_LENGTH:
            raise InvalidCiphertext(
                f"ciphertext too short: {len(token)} bytes "
                f"(minimum {EncryptionService.NONCE_LENGTH})"
            )
        nonce = token[:EncryptionService.NONCE_LENGTH]
        ciphertext = token[EncryptionService.NONCE_LENGTH:]
        aesgcm = AESGCM(EncryptionService.derive_key(key))
        try:
            return aesgcm.decrypt(nonce, bytes(ciphertext), None)
        except InvalidTag as e:
            raise AuthenticationFailed("cipher: message authentication failed") from e

    @staticmethod
    def encrypt(plaintext: str, key: str) -> str:
        """Encrypt a text field and return the base64 token."""
        token = EncryptionService.encrypt_binary(plaintext.encode("utf-8"), key)
        return base64.b64encode(token).decode("ascii")

    @staticmethod
    def decrypt(token: str, key: str) -> str:
        """
        Decrypt a base64 token produced by encrypt().

        Raises:
            InvalidCiphertext: Not valid base64, shorter than a nonce, or not UTF-8
            AuthenticationFailed: If the tag check fails
        """
        try:
            raw = base64.b64decode(token.encode("ascii"), validate=True)
        except (binascii.Error, UnicodeEncodeError) as e:
            raise InvalidCiphertext(f"ciphertext is not valid base64: {e}") from e

        plaintext = EncryptionService.decrypt_binary(raw, key)
        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidCiphertext("decrypted field is not UTF-8 text") from e

    @staticmethod
    def generate_secret_phrase(seed: str) -> str:
        """
        Derive the 14-character secret phrase from a seed (the password hash).

        base64(sha256(seed))[:14]. Deterministic, so the same password hash
        always yields the same phrase and therefore the same key.
        """
        digest = hashlib.sha256(seed.encode("utf-8")).digest()
        encoded = base64.b64encode(digest).decode("ascii")
        return encoded[:EncryptionService.SECRET_PHRASE_LENGTH]
