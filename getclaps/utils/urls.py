"""URL validation and the canonical form hashed into proofs of clap."""
import re
from urllib.parse import urlsplit, SplitResult

from getclaps.utils.errors import BadRequestError

MAX_URL_LENGTH = 4096
DEFAULT_PORTS = {"http": 80, "https": 443}

# A scheme: a letter followed by letters, digits, '+', '.' or '-', then ':'
RE_PROTOCOL = re.compile(r"^[a-z][a-z0-9.+-]*:", re.IGNORECASE)


def validate_url(url: str) -> SplitResult:
    """
    Parse a user-supplied URL, defaulting the scheme to https and dropping
    the query string. The fragment is kept.

    Raises:
        BadRequestError: If the URL is missing, too long or unparsable
    """
    if not url:
        raise BadRequestError("No url provided")
    if len(url) > MAX_URL_LENGTH:
        raise BadRequestError(f"URL too long. {MAX_URL_LENGTH} characters max.")

    with_protocol = url if RE_PROTOCOL.match(url) else f"https://{url}"
    try:
        parts = urlsplit(with_protocol)
        hostname = parts.hostname
        parts.port  # raises ValueError on a bad port
    except ValueError:
        raise BadRequestError("Invalid or missing URL")
    if not hostname:
        raise BadRequestError("Invalid or missing URL")

    return parts._replace(
        scheme=parts.scheme.lower(),
        netloc=parts.netloc.lower(),
        path=parts.path or "/",
        query="",
    )


def canonical_url(url: str) -> str:
    """
    scheme://host/path of `url`; the exact string clients hash for a proof.

    Credentials and the scheme's default port are dropped, as a browser's
    URL serialisation does.
    """
    parts = validate_url(url)
    host = f"[{parts.hostname}]" if ":" in parts.hostname else parts.hostname
    if parts.port is not None and parts.port != DEFAULT_PORTS.get(parts.scheme):
        host = f"{host}:{parts.port}"
    return f"{parts.scheme}://{host}{parts.path}"
