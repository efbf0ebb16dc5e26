"""
Request Cookie Store
Parses a request's Cookie header once and collects the mutations made while
handling the request so they can be rendered as Set-Cookie header values.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from email.utils import format_datetime
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple
import logging
import re

from getclaps.models.cookies import Cookie, SameSite
from getclaps.utils.errors import InvalidCookieError

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Printable ASCII without ';', inner spaces allowed. Names also exclude '='.
_VALUE_CHARS = r"\x21-\x3A\x3C-\x7E"
_NAME_CHARS = r"\x21-\x3A\x3C\x3E-\x7E"
RE_COOKIE_VALUE = re.compile(f"[{_VALUE_CHARS}](?:[{_VALUE_CHARS} ]*[{_VALUE_CHARS}])?")
RE_COOKIE_NAME = re.compile(f"[{_NAME_CHARS}](?:[{_NAME_CHARS} ]*[{_NAME_CHARS}])?")


class CookieStore(ABC):
    """
    Capability set shared by the jar and the layers that decorate it.
    """

    @abstractmethod
    def get(self, name: str) -> Optional[Cookie]:
        ...

    @abstractmethod
    def get_all(self) -> List[Cookie]:
        ...

    @abstractmethod
    def set(self, cookie: Cookie) -> None:
        ...

    @abstractmethod
    def delete(self, name: str, domain: Optional[str] = None, path: str = "/") -> None:
        ...

    def set_value(self, name: str, value: str, **attrs) -> None:
        """Shortcut for `set(Cookie(name=name, value=value, **attrs))`."""
        self.set(Cookie(name=name, value=value, **attrs))


def parse_cookie_header(cookie_header: Optional[str]) -> Dict[str, str]:
    """
    Parse a `Cookie` request header into a name -> value dict.

    Pairs are split on the first `=`; empty names are dropped and later
    duplicates win.
    """
    if not cookie_header:
        return {}
    parsed: Dict[str, str] = {}
    for item in cookie_header.split(";"):
        name, _, value = item.strip().partition("=")
        name = name.strip()
        if not name:
            continue
        parsed[name] = value.strip()
    return parsed


def _hostname(host: Optional[str]) -> Optional[str]:
    """Strip the port from a Host header value."""
    if not host:
        return None
    host = host.strip().lower()
    if host.startswith("["):
        return host[: host.find("]") + 1] or None
    return host.rsplit(":", 1)[0] if host.count(":") == 1 else host


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def build_set_cookie(cookie: Cookie, host: Optional[str] = None) -> List[List[str]]:
    """
    Validate `cookie` and build its Set-Cookie attribute list.

    Raises:
        InvalidCookieError: If name/value/domain break the cookie rules, or a
            field holds characters a Cookie header cannot carry back (';',
            control or non-ASCII characters, surrounding whitespace)
    """
    name, value = cookie.name, cookie.value

    if not name and not value:
        raise InvalidCookieError("Cookie name and value cannot both be empty.")
    if not name and "=" in value:
        raise InvalidCookieError("A nameless cookie cannot contain '=' in its value.")
    if name and not RE_COOKIE_NAME.fullmatch(name):
        raise InvalidCookieError(f"Malformed cookie name: {name!r}")
    if value and not RE_COOKIE_VALUE.fullmatch(value):
        raise InvalidCookieError(f"Malformed value for cookie {name!r}")
    if not RE_COOKIE_VALUE.fullmatch(cookie.path):
        raise InvalidCookieError(f"Malformed cookie path: {cookie.path!r}")

    hostname = _hostname(host)
    attrs = [[name, value]]

    if cookie.domain:
        domain = cookie.domain.lower()
        if domain.startswith(".") or not RE_COOKIE_VALUE.fullmatch(domain):
            raise InvalidCookieError(f"Invalid cookie domain: {cookie.domain!r}")
        if hostname and hostname != domain and not hostname.endswith(f".{domain}"):
            raise InvalidCookieError(f"Cookie domain {cookie.domain} does not match host {hostname}")
        attrs.append(["Domain", cookie.domain])

    if cookie.expires is not None:
        attrs.append(["Expires", format_datetime(_as_utc(cookie.expires), usegmt=True)])

    attrs.append(["Path", cookie.path])

    if cookie.secure or (hostname and hostname != "localhost"):
        attrs.append(["Secure"])

    if cookie.http_only:
        attrs.append(["HttpOnly"])

    if cookie.same_site is not None:
        attrs.append(["SameSite", SameSite(cookie.same_site).value])

    return attrs


def attrs_to_set_cookie(attrs: List[List[str]]) -> str:
    return "; ".join("=".join(attr) for attr in attrs)


def to_set_cookie(cookie: Cookie, host: Optional[str] = None) -> str:
    """Format a single cookie as a Set-Cookie header value."""
    return attrs_to_set_cookie(build_set_cookie(cookie, host))


class RequestCookieStore(CookieStore):
    """
    The base, unsigned cookie jar for a single request.

    The parsed header is kept as a read-only snapshot; `set` and `delete`
    record one pending attribute list per name (last write wins), and
    `get`/`get_all` read the snapshot merged with those pending writes.
    """

    def __init__(self, cookie_header: Optional[str] = None, host: Optional[str] = None):
        self.host = host
        self._snapshot: Mapping[str, str] = MappingProxyType(parse_cookie_header(cookie_header))
        self._pending: Dict[str, Tuple[Cookie, List[List[str]]]] = {}

    @classmethod
    def parse(cls, cookie_header: Optional[str], host: Optional[str] = None) -> "RequestCookieStore":
        return cls(cookie_header, host)

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> "RequestCookieStore":
        """Build a jar from a case-insensitive header mapping (e.g. Starlette Headers)."""
        return cls(headers.get("cookie"), headers.get("host"))

    @property
    def snapshot(self) -> Mapping[str, str]:
        return self._snapshot

    def _merged(self) -> Dict[str, str]:
        merged = dict(self._snapshot)
        now = datetime.now(timezone.utc)
        for name, (cookie, _) in self._pending.items():
            if cookie.expires is not None and _as_utc(cookie.expires) < now:
                merged.pop(name, None)
            else:
                merged[name] = cookie.value
        return merged

    def get(self, name: str) -> Optional[Cookie]:
        merged = self._merged()
        if name not in merged:
            return None
        return Cookie(name=name, value=merged[name])

    def get_all(self) -> List[Cookie]:
        return [Cookie(name=name, value=value) for name, value in self._merged().items()]

    def set(self, cookie: Cookie) -> None:
        attrs = build_set_cookie(cookie, self.host)
        self._pending[cookie.name] = (cookie, attrs)

    def delete(self, name: str, domain: Optional[str] = None, path: str = "/") -> None:
        self.set(Cookie(
            name=name,
            value="",
            domain=domain,
            path=path,
            expires=EPOCH,
            same_site=SameSite.STRICT,
        ))

    def render_set_cookie_headers(self) -> List[str]:
        """One Set-Cookie value per mutated name, in first-mutation order."""
        return [attrs_to_set_cookie(attrs) for _, attrs in self._pending.values()]

    def cookie_header(self) -> str:
        """The merged view serialised as a Cookie request header."""
        return "; ".join(f"{name}={value}" for name, value in self._merged().items())

    def __repr__(self) -> str:
        return f"RequestCookieStore(host={self.host!r}, cookies={len(self._snapshot)}, pending={len(self._pending)})"
