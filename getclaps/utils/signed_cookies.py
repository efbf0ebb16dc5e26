"""
Signed Cookie Store
Adds HMAC integrity to any cookie store through a companion signature cookie.
"""

import base64
import hashlib
import hmac
import logging
from typing import Dict, List, Optional

from getclaps.core.keys import DerivedKey, KeyPurpose
from getclaps.models.cookies import Cookie
from getclaps.utils.cookie_jar import CookieStore
from getclaps.utils.errors import IllegalNameError, SignatureVerificationError

logger = logging.getLogger(__name__)

# Reserved prefix for signature cookies; the `~` sorts them last in a web inspector.
PREFIX = "~s."


def b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


class SignedCookieStore(CookieStore):
    """
    Tamper detection without confidentiality.

    For a cookie `N=V` the store also writes `~s.N=<HMAC-SHA-256("N=V")>`
    with the same attributes. Reading a cookie without its signature gives
    `None`; reading one whose signature does not match raises
    `SignatureVerificationError`.
    """

    def __init__(self, store: CookieStore, key: DerivedKey):
        if key.purpose is not KeyPurpose.SIGNING:
            raise ValueError(f"Signing store needs a signing key, got {key.purpose.value}")
        self._store = store
        self._key = key

    @property
    def backing_store(self) -> CookieStore:
        return self._store

    def _sign(self, name: str, value: str) -> str:
        message = f"{name}={value}".encode("utf-8")
        return b64url(hmac.new(self._key.material, message, hashlib.sha256).digest())

    def _verify(self, cookie: Cookie, sig_cookie: Cookie) -> None:
        expected = self._sign(cookie.name, cookie.value).encode("ascii")
        if not hmac.compare_digest(expected, sig_cookie.value.encode("utf-8")):
            raise SignatureVerificationError()

    @staticmethod
    def _check_name(name: str) -> None:
        if name.startswith(PREFIX):
            raise IllegalNameError(name)

    def get(self, name: str) -> Optional[Cookie]:
        self._check_name(name)

        cookie = self._store.get(name)
        sig_cookie = self._store.get(f"{PREFIX}{name}")
        if cookie is None or sig_cookie is None:
            return None

        try:
            self._verify(cookie, sig_cookie)
        except SignatureVerificationError:
            logger.warning(f"Signature mismatch for cookie '{name}'")
            raise
        return cookie

    def get_all(self) -> List[Cookie]:
        """Signed cookies with a valid signature; everything else is left out."""
        everything = self._store.get_all()
        sig_cookies: Dict[str, Cookie] = {
            c.name[len(PREFIX):]: c for c in everything if c.name.startswith(PREFIX)
        }

        cookies = []
        for cookie in everything:
            if cookie.name.startswith(PREFIX):
                continue
            sig_cookie = sig_cookies.get(cookie.name)
            if sig_cookie is None:
                continue
            try:
                self._verify(cookie, sig_cookie)
            except SignatureVerificationError:
                logger.debug(f"Skipping cookie '{cookie.name}' with invalid signature")
                continue
            cookies.append(cookie)
        return cookies

    def set(self, cookie: Cookie) -> None:
        self._check_name(cookie.name)

        signature = self._sign(cookie.name, cookie.value)
        self._store.set(cookie)
        self._store.set(cookie.model_copy(update={"name": f"{PREFIX}{cookie.name}", "value": signature}))

    def delete(self, name: str, domain: Optional[str] = None, path: str = "/") -> None:
        self._store.delete(name, domain=domain, path=path)
        self._store.delete(f"{PREFIX}{name}", domain=domain, path=path)
