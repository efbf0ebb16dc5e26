import pytest

from getclaps.models.cookies import Cookie
from getclaps.utils.cookie_jar import RequestCookieStore
from getclaps.utils.encrypted_cookies import EncryptedCookieStore, b64url_decode
from getclaps.utils.errors import DecryptionError, SignatureVerificationError
from getclaps.utils.signed_cookies import PREFIX, SignedCookieStore, b64url


def _replay(jar):
    pairs = [header.split(";", 1)[0] for header in jar.render_set_cookie_headers()]
    return RequestCookieStore.parse("; ".join(pairs), host="localhost")


@pytest.fixture
def make_store(signing_key, encryption_key):
    def make(jar):
        return EncryptedCookieStore(SignedCookieStore(jar, signing_key), encryption_key)
    return make


@pytest.mark.parametrize("value", ["b", "", "ünïcødé ✓", "x" * 500])
def test_round_trip_through_headers(make_store, value):
    jar = RequestCookieStore.parse("", host="localhost")
    make_store(jar).set_value("a", value)

    assert make_store(_replay(jar)).get("a") == Cookie(name="a", value=value)


def test_wire_value_hides_plaintext_and_uses_fresh_iv(make_store):
    plaintext = "very secret value"
    wire_values = []
    for _ in range(2):
        jar = RequestCookieStore.parse("", host="localhost")
        make_store(jar).set_value("a", plaintext)
        wire_values.append(_replay(jar).snapshot["a"])

    assert all(plaintext not in v for v in wire_values)
    assert wire_values[0] != wire_values[1]
    assert len(b64url_decode(wire_values[0])) == 16 + 32


def test_tampered_ciphertext_fails_signature(make_store):
    jar = RequestCookieStore.parse("", host="localhost")
    make_store(jar).set_value("a", "b")
    cookies = dict(_replay(jar).snapshot)
    raw = bytearray(b64url_decode(cookies["a"]))
    raw[-1] ^= 1
    cookies["a"] = b64url(bytes(raw))
    header = "; ".join(f"{k}={v}" for k, v in cookies.items())

    with pytest.raises(SignatureVerificationError):
        make_store(RequestCookieStore.parse(header)).get("a")


def test_validly_signed_garbage_raises_decryption_error(signing_key, make_store):
    jar = RequestCookieStore.parse("", host="localhost")
    # signed with the right key but never encrypted
    SignedCookieStore(jar, signing_key).set_value("a", b64url(b"\x00" * 40))

    with pytest.raises(DecryptionError):
        make_store(_replay(jar)).get("a")


def test_get_all_decrypts_and_skips_foreign_values(signing_key, make_store):
    jar = RequestCookieStore.parse("", host="localhost")
    make_store(jar).set_value("secret", "1")
    SignedCookieStore(jar, signing_key).set_value("plain", "not encrypted")

    assert make_store(_replay(jar)).get_all() == [Cookie(name="secret", value="1")]


def test_missing_cookie_is_none(make_store):
    assert make_store(RequestCookieStore.parse("")).get("a") is None


def test_delete_removes_value_and_signature(make_store):
    jar = RequestCookieStore.parse("", host="localhost")
    make_store(jar).set_value("a", "b")
    incoming = _replay(jar)

    store = make_store(incoming)
    store.delete("a")

    assert store.get("a") is None
    assert len(incoming.render_set_cookie_headers()) == 2
    assert incoming.render_set_cookie_headers()[1].startswith(f"{PREFIX}a=;")


def test_requires_signed_store(encryption_key):
    with pytest.raises(TypeError):
        EncryptedCookieStore(RequestCookieStore.parse(""), encryption_key)
