"""
Cookie Key Derivation
Derives purpose-bound keys from the application secret with PBKDF2 and keeps
them for the lifetime of the process.
"""

import logging
import threading
import uuid
from concurrent.futures import Future
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple, Union

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from getclaps.core.config import settings
from getclaps.utils.errors import KeyDerivationError

logger = logging.getLogger(__name__)

DEFAULT_ITERATIONS = 999
DEFAULT_HASH = "SHA-256"
KEY_LENGTH = 32  # bytes; HMAC-SHA-256 and AES-256 both take 256-bit keys

_HASHES = {
    "SHA-1": hashes.SHA1,
    "SHA-256": hashes.SHA256,
    "SHA-384": hashes.SHA384,
    "SHA-512": hashes.SHA512,
}


class KeyPurpose(str, Enum):
    """What a derived key may be used for."""
    SIGNING = "HMAC-SHA-256"
    ENCRYPTION = "AES-256-CBC"


# Fixed per-purpose salts. Deployments sharing a secret derive the same keys
# unless they configure their own salt.
DEFAULT_SALTS: Dict[KeyPurpose, bytes] = {
    KeyPurpose.SIGNING: uuid.UUID("a3491c45-b769-447f-87fd-64333c8d36f0").bytes,
    KeyPurpose.ENCRYPTION: uuid.UUID("19fc3989-ce6a-4b4e-b626-fa2e6ef3be0c").bytes,
}

SecretLike = Union[str, bytes, bytearray, memoryview]


@dataclass(frozen=True)
class DerivedKey:
    """Key material bound to a single algorithm. Never mutated after creation."""
    purpose: KeyPurpose
    material: bytes = field(repr=False)

    def __len__(self) -> int:
        return len(self.material)


def _secret_bytes(secret: Optional[SecretLike]) -> bytes:
    if secret is None:
        raise KeyDerivationError()
    data = secret.encode("utf-8") if isinstance(secret, str) else bytes(secret)
    if not data:
        raise KeyDerivationError()
    return data


def _hash_algorithm(hash_name: str) -> hashes.HashAlgorithm:
    try:
        return _HASHES[hash_name.upper()]()
    except KeyError:
        raise KeyDerivationError(f"Unsupported hash: {hash_name}")


def derive_key(
    secret: Optional[SecretLike],
    purpose: KeyPurpose,
    salt: Optional[bytes] = None,
    iterations: Optional[int] = None,
    hash_name: Optional[str] = None,
) -> DerivedKey:
    """
    Derive a key for `purpose` from a passphrase.

    Args:
        secret: Passphrase, str (UTF-8 encoded) or bytes
        purpose: Signing (HMAC-SHA-256) or encryption (AES-256-CBC)
        salt: Optional salt; defaults to the fixed per-purpose salt
        iterations: PBKDF2 iterations, defaults to 999
        hash_name: PBKDF2 hash, defaults to SHA-256

    Returns:
        DerivedKey holding 32 bytes of key material

    Raises:
        KeyDerivationError: If the secret is empty or the parameters are unusable
    """
    secret_bytes = _secret_bytes(secret)
    iterations = DEFAULT_ITERATIONS if iterations is None else iterations
    if iterations < 1:
        raise KeyDerivationError(f"Invalid iteration count: {iterations}")

    kdf = PBKDF2HMAC(
        algorithm=_hash_algorithm(hash_name or DEFAULT_HASH),
        length=KEY_LENGTH,
        salt=DEFAULT_SALTS[purpose] if salt is None else bytes(salt),
        iterations=iterations,
    )
    return DerivedKey(purpose=purpose, material=kdf.derive(secret_bytes))


CacheKey = Tuple[KeyPurpose, bytes, Optional[bytes], Optional[int], Optional[str]]


class KeyCache:
    """
    Memoizes derived keys for the lifetime of the process.

    The first caller for a parameter set derives the key; callers arriving
    while that derivation is in flight wait on the same future. A failed
    derivation is dropped so the next call can try again.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._futures: Dict[CacheKey, "Future[DerivedKey]"] = {}

    def get(
        self,
        secret: Optional[SecretLike],
        purpose: KeyPurpose,
        salt: Optional[bytes] = None,
        iterations: Optional[int] = None,
        hash_name: Optional[str] = None,
    ) -> DerivedKey:
        cache_key: CacheKey = (
            purpose,
            _secret_bytes(secret),
            None if salt is None else bytes(salt),
            iterations,
            hash_name,
        )

        with self._lock:
            future = self._futures.get(cache_key)
            owner = future is None
            if owner:
                future = Future()
                self._futures[cache_key] = future

        if owner:
            try:
                key = derive_key(secret, purpose, salt, iterations, hash_name)
            except BaseException as e:
                with self._lock:
                    self._futures.pop(cache_key, None)
                future.set_exception(e)
                raise
            logger.info(f"Derived {purpose.value} cookie key")
            future.set_result(key)

        return future.result()

    def __len__(self) -> int:
        with self._lock:
            return len(self._futures)


# Process-wide cache
key_cache = KeyCache()


def purpose_salt(salt: Optional[bytes], purpose: KeyPurpose) -> Optional[bytes]:
    """The configured salt suffixed with the purpose name. `None` keeps the per-purpose default."""
    if salt is None:
        return None
    return salt + b":" + purpose.value.encode("ascii")


def signing_key() -> DerivedKey:
    """Signing key for the configured application secret."""
    return key_cache.get(
        settings.secret_key,
        KeyPurpose.SIGNING,
        salt=purpose_salt(settings.cookie_salt_bytes(), KeyPurpose.SIGNING),
        iterations=settings.cookie_iterations,
        hash_name=settings.cookie_hash,
    )


def encryption_key() -> DerivedKey:
    """Encryption key for the configured application secret."""
    return key_cache.get(
        settings.secret_key,
        KeyPurpose.ENCRYPTION,
        salt=purpose_salt(settings.cookie_salt_bytes(), KeyPurpose.ENCRYPTION),
        iterations=settings.cookie_iterations,
        hash_name=settings.cookie_hash,
    )
