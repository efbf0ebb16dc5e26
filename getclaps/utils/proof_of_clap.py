"""
Proof of Clap
A SHA-256 proof-of-work that binds a page URL, a clapper id and a clap count.
Clients brute-force a nonce with `solve`; the server checks it with a single
hash in `verify`.
"""

import hashlib
import math
import re
import struct
import uuid
from typing import Union

from getclaps.utils.errors import ErrorMessages, MalformedPoWInputError

BASE_DIFFICULTY = 8
BASE_CLAPS = 15

MAX_SAFE_INTEGER = 2 ** 53 - 1
MAX_UINT32 = 2 ** 32 - 1

RE_UUID = re.compile(r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}", re.IGNORECASE)

IdLike = Union[str, uuid.UUID]


def difficulty(claps: int) -> int:
    """Required leading zero bits for `claps` claps."""
    # round half up, not Python's banker's rounding
    return BASE_DIFFICULTY + math.floor(math.log2(BASE_CLAPS + claps) + 0.5)


def _uint32(n: int) -> bytes:
    return struct.pack("<I", n & MAX_UINT32)


def _key_prefix(url: str, id: IdLike, claps: int) -> bytes:
    return (
        hashlib.sha256(str(url).encode("utf-8")).digest()
        + uuid.UUID(str(id)).bytes
        + _uint32(claps)
    )


def challenge_key(url: str, id: IdLike, claps: int, nonce: int) -> bytes:
    """
    SHA256(url) || id (16 bytes) || claps (uint32 LE) || nonce (uint32 LE).

    `url` must already be canonical (see `getclaps.utils.urls.canonical_url`).
    """
    return _key_prefix(url, id, claps) + _uint32(nonce)


def leading_zero_bits(digest: bytes, n: int) -> bool:
    """True if the first `n` bits of `digest` are all zero."""
    for i in range(n):
        if (digest[i // 8] >> (7 - i % 8)) & 1:
            return False
    return True


def solve(url: str, id: IdLike, claps: int) -> int:
    """
    Find the smallest nonce satisfying the difficulty for `claps`.

    Unbounded CPU work meant for clients; the server only ever calls `verify`.
    """
    bits = difficulty(claps)
    prefix = _key_prefix(url, id, claps)
    nonce = 0
    while not leading_zero_bits(hashlib.sha256(prefix + _uint32(nonce)).digest(), bits):
        nonce += 1
    return nonce


def verify(url: str, claps: int, id: IdLike, nonce: int) -> bool:
    """Check a submitted nonce. Validate the inputs with `validate_pow_input` first."""
    digest = hashlib.sha256(challenge_key(url, id, claps, nonce)).digest()
    return leading_zero_bits(digest, difficulty(claps))


def _is_int(value) -> bool:
    # JSON numbers such as 5.0 count as integers
    if isinstance(value, bool):
        return False
    if isinstance(value, float):
        return value.is_integer()
    return isinstance(value, int)


def validate_pow_input(id, nonce, claps) -> None:
    """
    Reject malformed submissions before any hash is computed.

    Raises:
        MalformedPoWInputError: Bad id format, nonce outside [0, 2^53-1],
            or claps that are not a uint32
    """
    if not isinstance(id, str) or len(id) != 36 or not RE_UUID.fullmatch(id):
        raise MalformedPoWInputError(ErrorMessages.MALFORMED_ID)
    if not _is_int(nonce) or nonce < 0 or nonce > MAX_SAFE_INTEGER:
        raise MalformedPoWInputError(ErrorMessages.MALFORMED_NONCE)
    if not _is_int(claps) or claps < 0 or claps > MAX_UINT32:
        raise MalformedPoWInputError(ErrorMessages.MALFORMED_CLAPS)
