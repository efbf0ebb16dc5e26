"""
Encrypted Cookie Store
AES-256-CBC encryption on top of a SignedCookieStore. Values are only
decrypted after the signed layer has checked them.
"""

import base64
import binascii
import logging
import os
from typing import List, Optional

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from getclaps.core.keys import DerivedKey, KeyPurpose
from getclaps.models.cookies import Cookie
from getclaps.utils.cookie_jar import CookieStore
from getclaps.utils.errors import DecryptionError
from getclaps.utils.signed_cookies import SignedCookieStore, b64url

logger = logging.getLogger(__name__)

IV_LENGTH = 16  # bytes
BLOCK_SIZE = algorithms.AES.block_size  # bits


def b64url_decode(text: str) -> bytes:
    return base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))


class EncryptedCookieStore(CookieStore):
    """
    Confidentiality for cookie values.

    The wire value is base64url(IV || AES-CBC(key, IV, value)) with a fresh
    IV for every `set`, passed on to the signed store underneath.
    """

    def __init__(self, store: SignedCookieStore, key: DerivedKey):
        if not isinstance(store, SignedCookieStore):
            raise TypeError("EncryptedCookieStore must wrap a SignedCookieStore")
        if key.purpose is not KeyPurpose.ENCRYPTION:
            raise ValueError(f"Encrypted store needs an encryption key, got {key.purpose.value}")
        self._store = store
        self._key = key

    @property
    def backing_store(self) -> SignedCookieStore:
        return self._store

    def _encrypt(self, plaintext: str) -> str:
        iv = os.urandom(IV_LENGTH)
        padder = padding.PKCS7(BLOCK_SIZE).padder()
        padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()
        encryptor = Cipher(algorithms.AES(self._key.material), modes.CBC(iv)).encryptor()
        return b64url(iv + encryptor.update(padded) + encryptor.finalize())

    def _decrypt(self, cookie: Cookie) -> Cookie:
        try:
            data = b64url_decode(cookie.value)
        except (binascii.Error, ValueError):
            raise DecryptionError()

        iv, ciphertext = data[:IV_LENGTH], data[IV_LENGTH:]
        if len(iv) != IV_LENGTH or not ciphertext or len(ciphertext) % (BLOCK_SIZE // 8):
            raise DecryptionError()

        decryptor = Cipher(algorithms.AES(self._key.material), modes.CBC(iv)).decryptor()
        padded = decryptor.update(ciphertext) + decryptor.finalize()
        try:
            unpadder = padding.PKCS7(BLOCK_SIZE).unpadder()
            plaintext = (unpadder.update(padded) + unpadder.finalize()).decode("utf-8")
        except ValueError:
            # UnicodeDecodeError is a ValueError too
            raise DecryptionError()

        return Cookie(name=cookie.name, value=plaintext)

    def get(self, name: str) -> Optional[Cookie]:
        cookie = self._store.get(name)
        if cookie is None:
            return None
        try:
            return self._decrypt(cookie)
        except DecryptionError:
            logger.error(f"Cookie '{name}' passed signature check but failed to decrypt")
            raise

    def get_all(self) -> List[Cookie]:
        cookies = []
        for cookie in self._store.get_all():
            try:
                cookies.append(self._decrypt(cookie))
            except DecryptionError:
                logger.debug(f"Skipping cookie '{cookie.name}' that is not encrypted with this key")
        return cookies

    def set(self, cookie: Cookie) -> None:
        self._store.set(cookie.model_copy(update={"value": self._encrypt(cookie.value)}))

    def delete(self, name: str, domain: Optional[str] = None, path: str = "/") -> None:
        self._store.delete(name, domain=domain, path=path)
