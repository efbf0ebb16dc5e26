from datetime import datetime, timedelta, timezone

import pytest

from getclaps.models.cookies import Cookie, SameSite
from getclaps.utils.cookie_jar import RequestCookieStore, parse_cookie_header, to_set_cookie
from getclaps.utils.errors import InvalidCookieError


def test_parse_cookie_header_skips_empty_names_and_last_wins():
    parsed = parse_cookie_header("a=1; ; =foo; b=x=y; a=2; flag")

    assert parsed == {"a": "2", "b": "x=y", "flag": ""}


def test_get_reads_snapshot_and_pending_writes():
    jar = RequestCookieStore.parse("a=1; b=2", host="localhost")

    assert jar.get("a") == Cookie(name="a", value="1")
    assert jar.get("missing") is None

    jar.set_value("a", "changed")
    jar.delete("b")

    assert jar.get("a").value == "changed"
    assert jar.get("b") is None
    assert jar.snapshot["b"] == "2"
    assert {c.name for c in jar.get_all()} == {"a"}


def test_render_emits_one_header_per_name():
    jar = RequestCookieStore.parse("", host="localhost")
    jar.set_value("a", "1")
    jar.set_value("a", "2")
    jar.set_value("b", "3")

    assert jar.render_set_cookie_headers() == ["a=2; Path=/", "b=3; Path=/"]


def test_render_attribute_order():
    jar = RequestCookieStore.parse("", host="www.example.com")
    jar.set(Cookie(
        name="sid",
        value="abc",
        domain="example.com",
        path="/app",
        expires=datetime(2030, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
        http_only=True,
        same_site=SameSite.LAX,
    ))

    assert jar.render_set_cookie_headers() == [
        "sid=abc; Domain=example.com; Expires=Wed, 02 Jan 2030 03:04:05 GMT; "
        "Path=/app; Secure; HttpOnly; SameSite=Lax"
    ]


def test_secure_only_added_off_localhost():
    assert to_set_cookie(Cookie(name="a", value="1"), host="localhost:8000") == "a=1; Path=/"
    assert to_set_cookie(Cookie(name="a", value="1"), host="example.com") == "a=1; Path=/; Secure"
    assert to_set_cookie(Cookie(name="a", value="1", secure=True)) == "a=1; Path=/; Secure"


def test_delete_renders_expired_strict_cookie():
    jar = RequestCookieStore.parse("a=1", host="localhost")
    jar.delete("a")

    assert jar.render_set_cookie_headers() == [
        "a=; Expires=Thu, 01 Jan 1970 00:00:00 GMT; Path=/; SameSite=Strict"
    ]


def test_past_expiry_hides_cookie():
    jar = RequestCookieStore.parse("a=1", host="localhost")
    jar.set(Cookie(name="a", value="1", expires=datetime.now(timezone.utc) - timedelta(days=1)))

    assert jar.get("a") is None


@pytest.mark.parametrize("cookie", [
    Cookie(name="", value=""),
    Cookie(name="", value="a=b"),
    Cookie(name="a", value="1", domain=".example.com"),
    Cookie(name="a", value="1", domain="evil.com"),
])
def test_set_rejects_invalid_cookies(cookie):
    jar = RequestCookieStore.parse("", host="example.com")

    with pytest.raises(InvalidCookieError):
        jar.set(cookie)

    assert jar.render_set_cookie_headers() == []


def test_domain_may_equal_host():
    jar = RequestCookieStore.parse("", host="example.com:8443")
    jar.set(Cookie(name="a", value="1", domain="example.com"))

    assert jar.render_set_cookie_headers() == ["a=1; Domain=example.com; Path=/; Secure"]


def test_nameless_cookie_allowed_without_equals():
    jar = RequestCookieStore.parse("", host="localhost")
    jar.set(Cookie(name="", value="token"))

    assert jar.render_set_cookie_headers() == ["=token; Path=/"]


def test_cookie_header_round_trip():
    jar = RequestCookieStore.parse("a=1", host="localhost")
    jar.set_value("b", "2")

    again = RequestCookieStore.parse(jar.cookie_header())
    assert {c.name: c.value for c in again.get_all()} == {"a": "1", "b": "2"}


@pytest.mark.parametrize("cookie", [
    Cookie(name="a", value="x; y"),
    Cookie(name="a", value=" padded"),
    Cookie(name="a", value="padded "),
    Cookie(name="a", value="Zoë ✓"),
    Cookie(name="a", value="line\nbreak"),
    Cookie(name="a b ", value="1"),
    Cookie(name="a;b", value="1"),
    Cookie(name="a=b", value="1"),
    Cookie(name="a", value="1", path="/; Domain=evil.com"),
])
def test_set_rejects_values_a_cookie_header_cannot_carry(cookie):
    jar = RequestCookieStore.parse("", host="localhost")

    with pytest.raises(InvalidCookieError):
        jar.set(cookie)

    assert jar.render_set_cookie_headers() == []


@pytest.mark.parametrize("value", ["a,b,c", "two words", '"quoted"', "x=y", "%C3%AB"])
def test_accepted_values_survive_the_header_round_trip(value):
    jar = RequestCookieStore.parse("", host="localhost")
    jar.set_value("a", value)

    [set_cookie] = jar.render_set_cookie_headers()
    again = RequestCookieStore.parse(set_cookie.split("; Path=", 1)[0])
    assert again.get("a").value == value
