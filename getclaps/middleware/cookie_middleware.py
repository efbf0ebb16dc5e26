"""
Cookie Store Middleware
Gives every request its own cookie jar and turns the jar's mutations into
Set-Cookie response headers.
"""

import logging
from fastapi import Depends, Request
from starlette.middleware.base import BaseHTTPMiddleware

from getclaps.core.keys import encryption_key, signing_key
from getclaps.utils.cookie_jar import RequestCookieStore
from getclaps.utils.encrypted_cookies import EncryptedCookieStore
from getclaps.utils.signed_cookies import SignedCookieStore

logger = logging.getLogger(__name__)


class CookieStoreMiddleware(BaseHTTPMiddleware):
    """
    Parses the Cookie header once per request into `request.state.cookie_store`.
    Each rendered mutation becomes its own Set-Cookie header; they are never
    folded into one comma-joined value.
    """

    async def dispatch(self, request: Request, call_next):
        cookie_store = RequestCookieStore.from_headers(request.headers)
        request.state.cookie_store = cookie_store

        response = await call_next(request)

        set_cookies = cookie_store.render_set_cookie_headers()
        for value in set_cookies:
            response.headers.append("set-cookie", value)
        if set_cookies:
            logger.debug(f"{request.method} {request.url.path} set {len(set_cookies)} cookie(s)")
        return response


def get_cookie_store(request: Request) -> RequestCookieStore:
    """Dependency: the plain jar for this request."""
    cookie_store = getattr(request.state, "cookie_store", None)
    if cookie_store is None:
        raise RuntimeError("CookieStoreMiddleware is not installed")
    return cookie_store


def get_signed_cookie_store(
    cookie_store: RequestCookieStore = Depends(get_cookie_store),
) -> SignedCookieStore:
    """Dependency: the jar wrapped in the signing layer."""
    return SignedCookieStore(cookie_store, signing_key())


def get_encrypted_cookie_store(
    signed_store: SignedCookieStore = Depends(get_signed_cookie_store),
) -> EncryptedCookieStore:
    """Dependency: signed jar wrapped in the encryption layer."""
    return EncryptedCookieStore(signed_store, encryption_key())
