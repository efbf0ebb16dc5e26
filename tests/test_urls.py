import pytest

from getclaps.utils.errors import BadRequestError
from getclaps.utils.urls import canonical_url, validate_url


@pytest.mark.parametrize("raw, expected", [
    ("https://example.com/post?utm=1#top", "https://example.com/post"),
    ("example.com/post", "https://example.com/post"),
    ("HTTP://Example.COM", "http://example.com/"),
    ("http://localhost:8080/a/b/", "http://localhost:8080/a/b/"),
    ("https://example.com:443/post", "https://example.com/post"),
    ("http://Example.com:80", "http://example.com/"),
    ("https://example.com:80/post", "https://example.com:80/post"),
    ("https://user:pw@example.com/post", "https://example.com/post"),
    ("http://[::1]:8080/", "http://[::1]:8080/"),
])
def test_canonical_url(raw, expected):
    assert canonical_url(raw) == expected


def test_validate_url_keeps_fragment_and_drops_query():
    parts = validate_url("https://example.com/post?x=1#top")

    assert parts.hostname == "example.com"
    assert parts.query == ""
    assert parts.fragment == "top"


@pytest.mark.parametrize("raw", [None, "", "https://", "http://example.com:notaport/", "x" * 4097])
def test_validate_url_rejects(raw):
    with pytest.raises(BadRequestError):
        validate_url(raw)
