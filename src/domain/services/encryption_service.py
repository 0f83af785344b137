"""Per-group symmetric encryption of message bodies."""

import base64
import binascii
import secrets
from dataclasses import dataclass

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from core.exceptions import CryptoError

KEY_BYTES = 32  # AES-256
IV_BYTES = 12  # 96-bit GCM nonce


@dataclass(frozen=True)
class EncryptedPayload:
    """Hex-encoded ciphertext (with GCM tag) and the IV needed to reverse it."""

    ciphertext: str
    iv: str


class EncryptionService:
    """AES-256-GCM encryption with keys stored alongside each group.

    Stateless: keys are passed in on every call. Because GCM authenticates the
    ciphertext, a wrong key, altered IV or tampered body raises CryptoError
    instead of producing plausible garbage.
    """

    def generate_key(self) -> str:
        """Generate a random 256-bit key, base64-encoded for storage."""
        return base64.b64encode(secrets.token_bytes(KEY_BYTES)).decode("ascii")

    def encrypt(self, plaintext: str, key: str) -> EncryptedPayload:
        """Encrypt ``plaintext`` under ``key`` with a fresh random IV."""
        cipher = AESGCM(self._decode_key(key))
        iv = secrets.token_bytes(IV_BYTES)
        ciphertext = cipher.encrypt(iv, plaintext.encode("utf-8"), None)
        return EncryptedPayload(ciphertext=ciphertext.hex(), iv=iv.hex())

    def decrypt(self, ciphertext: str, key: str, iv: str) -> str:
        """Reverse :meth:`encrypt`.

        Raises:
            CryptoError: If the key, IV or ciphertext is malformed or does not
                authenticate.
        """
        cipher = AESGCM(self._decode_key(key))
        try:
            iv_bytes = bytes.fromhex(iv)
            body = bytes.fromhex(ciphertext)
        except ValueError as exc:
            raise CryptoError("Encrypted content is not valid hex") from exc

        if len(iv_bytes) != IV_BYTES:
            raise CryptoError("Initialization vector has the wrong length")

        try:
            plaintext = cipher.decrypt(iv_bytes, body, None)
        except InvalidTag as exc:
            raise CryptoError("Encrypted content failed authentication") from exc

        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise CryptoError("Decrypted content is not valid UTF-8") from exc

    @staticmethod
    def _decode_key(key: str) -> bytes:
        try:
            raw = base64.b64decode(key, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise CryptoError("Encryption key is not valid base64") from exc
        if len(raw) != KEY_BYTES:
            raise CryptoError("Encryption key must be 256 bits")
        return raw
