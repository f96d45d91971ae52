"""Test encode / decode URI otpauth://."""

import random

import pytest

from twofa.account import OtpAccount, random_account
from twofa.errors import InvalidUrl
from twofa.otp_core import Algorithm, CounterBased, OtpConfig, TimeBased
from twofa.otpauth import ParsedQuery, decode, encode, is_valid_url, parse_query, split_label, split_query

RFC_SECRET_B64 = "MTIzNDU2Nzg5MDEyMzQ1Njc4OTA="


def make_account(**kwargs):
    otp = kwargs.pop("otp", OtpConfig(secret=b"Hello"))
    generator_type = kwargs.pop("generator_type", TimeBased())
    return OtpAccount(otp=otp, generator_type=generator_type, **kwargs)


# --- decode ----------------------------------------------------------------
def test_decode_full_totp_uri():
    account = decode(
        "otpauth://totp/ACME%20Co:john@example.com?secret=" + RFC_SECRET_B64
        + "&issuer=ACME%20Co&algorithm=sha256&digits=8&period=60"
    )
    assert account.name == "john@example.com"
    assert account.issuer == "ACME Co"
    assert account.image_url is None
    assert account.generator_type == TimeBased()
    assert account.otp.secret == b"12345678901234567890"
    assert account.otp.algorithm is Algorithm.SHA256
    assert account.otp.digits == 8
    assert account.otp.period == 60.0


def test_decode_defaults():
    account = decode("otpauth://totp/alice?secret=AA==")
    assert account.name == "alice"
    assert account.issuer is None
    assert account.otp.secret == b"\x00"
    assert account.otp.algorithm is Algorithm.SHA1
    assert account.otp.digits == 6
    assert account.otp.period == 30.0


def test_decode_hotp_defaults_to_counter_zero():
    assert decode("otpauth://hotp/alice?secret=AA==").generator_type == CounterBased(0)


def test_counter_item_overrides_host():
    assert decode("otpauth://hotp/alice?secret=AA==&counter=7").generator_type == CounterBased(7)
    assert decode("otpauth://totp/alice?secret=AA==&counter=5").generator_type == CounterBased(5)


def test_query_issuer_wins_over_label():
    account = decode("otpauth://totp/Label:bob?secret=AA==&issuer=Query")
    assert account.issuer == "Query"
    assert account.name == "bob"


def test_only_label_issuer_is_trimmed():
    account = decode("otpauth://totp/%20ACME%20:%20bob%20?secret=AA==")
    assert account.issuer == "ACME"
    assert account.name == " bob "


def test_escaped_colon_and_slash_are_not_separators():
    account = decode("otpauth://totp/a%3Ab:c%2Fd?secret=AA==")
    assert account.issuer == "a:b"
    assert account.name == "c/d"
    assert decode("otpauth://totp/x%3Ay?secret=AA==").issuer is None


def test_plus_in_secret_is_not_a_space():
    assert decode("otpauth://totp/a?secret=+/8=").otp.secret == b"\xfb\xff"


def test_decode_image():
    account = decode("otpauth://totp/a?secret=AA==&image=https://example.com/logo.png")
    assert account.image_url == "https://example.com/logo.png"


def test_unknown_and_unparseable_items_are_ignored():
    account = decode(
        "otpauth://totp/a?secret=AA==&foo=bar&algorithm=MD5&period=abc&counter=x&digits=six"
    )
    assert account.otp.algorithm is Algorithm.SHA1
    assert account.otp.period == 30.0
    assert account.otp.digits == 6
    assert account.generator_type == TimeBased()


@pytest.mark.parametrize("uri, reason", [
    ("otpauth://foo/test?secret=AA==", "incorrect host"),
    ("http://totp/test?secret=AA==", "incorrect scheme"),
    ("otpauth://totp/test", "no query items"),
    ("otpauth://totp/test?", "no query items"),
    ("otpauth://totp/test?secret=AA==&digits=20", "Digit out of bound"),
    ("otpauth://totp/test?secret=AA==&digits=9", "Digit out of bound"),
    ("otpauth://totp/test?secret=AA==&digits=5", "Digit out of bound"),
    ("otpauth://totp/test?secret=AA==&period=0.5", "Period less than 1"),
    ("otpauth://totp/test?secret=AA==&image=not%20a%20url", "Image url invalid"),
    ("otpauth://totp/test?secret=AA==&image=logo.png", "Image url invalid"),
    ("otpauth://totp/test?secret=", "Doesn't have secret"),
    ("otpauth://totp/test?issuer=ACME", "Doesn't have secret"),
    ("otpauth://totp/test?secret=***", "Doesn't have secret"),
])
def test_decode_failures(uri, reason):
    with pytest.raises(InvalidUrl) as exc_info:
        decode(uri)
    assert reason in exc_info.value.reason
    assert str(exc_info.value) == exc_info.value.reason


# --- helpers ---------------------------------------------------------------
def test_split_label():
    assert split_label("/ACME%20Co:alice@example.com") == ("ACME Co", "alice@example.com")
    assert split_label("/alice") == (None, "alice")
    assert split_label("/") == (None, None)
    assert split_label("/ACME:") == ("ACME", None)
    assert split_label("/x%3Ay") == (None, "x:y")
    assert split_label("/alice%2F") == (None, "alice/")


def test_split_query_keeps_plus_and_first_equals():
    assert split_query("secret=ab+c==&issuer=A%20B&&flag") == [
        ("secret", "ab+c=="),
        ("issuer", "A B"),
        ("flag", ""),
    ]


def test_parse_query_is_order_independent():
    items = [("digits", "8"), ("secret", "AA=="), ("algorithm", "sha512")]
    assert parse_query(items) == parse_query(list(reversed(items)))
    assert parse_query([]) == ParsedQuery()


@pytest.mark.parametrize("value, expected", [
    ("https://example.com/a.png", True),
    ("data:image/png;base64,AAAA", True),
    ("example.com", False),
    ("", False),
    ("https://exa mple.com", False),
])
def test_is_valid_url(value, expected):
    assert is_valid_url(value) is expected


# --- encode ----------------------------------------------------------------
def test_encode_totp():
    account = make_account(name="john doe", issuer="ACME Co")
    assert encode(account) == (
        "otpauth://totp/ACME%20Co:john%20doe?secret=SGVsbG8=&algorithm=SHA1"
        "&digits=6&period=30.0&issuer=ACME%20Co"
    )


def test_encode_hotp_without_label():
    account = make_account(
        otp=OtpConfig(secret=b"Hello", digits=8, algorithm=Algorithm.SHA512),
        generator_type=CounterBased(7),
    )
    assert encode(account) == "otpauth://hotp/?secret=SGVsbG8=&algorithm=SHA512&digits=8&counter=7"


def test_encode_image_is_escaped():
    account = make_account(name="a", image_url="https://example.com/a.png?size=2&x=1")
    uri = encode(account)
    assert uri.endswith("&image=https://example.com/a.png%3Fsize=2%26x=1")
    assert decode(uri).image_url == "https://example.com/a.png?size=2&x=1"


def test_encode_escapes_base64_plus():
    uri = encode(make_account(otp=OtpConfig(secret=b"\xfb\xff")))
    assert "secret=%2B/8=" in uri
    assert decode(uri).otp.secret == b"\xfb\xff"


# --- round trip ------------------------------------------------------------
@pytest.mark.parametrize("account", [
    make_account(name="alice@example.com", issuer="Example Inc"),
    make_account(name="bob", generator_type=CounterBased(2 ** 64 - 1)),
    make_account(issuer="Only Issuer"),
    make_account(name="alice/"),
    make_account(name="/alice", issuer="a/b"),
    make_account(name="x:y"),
    make_account(name="x:y", issuer="p:q"),
    make_account(name=" bob ", issuer=" ACME "),
    make_account(name="100% sure?#", issuer="A&B=C+D"),
    make_account(),
    make_account(
        name="carol",
        image_url="https://example.com/logo.png",
        otp=OtpConfig(secret=b"\x00\x01\x02", period=45.5, digits=7, algorithm=Algorithm.SHA256),
    ),
])
def test_round_trip(account):
    assert decode(encode(account)) == account


def test_round_trip_random_accounts():
    rng = random.Random(4226)
    for i in range(100):
        account = random_account(f"user{i}@example.com", f"Issuer {i}", rng=rng)
        uri = encode(account)
        assert encode(decode(uri)) == uri
        assert decode(uri) == account


def test_encode_escapes_separators_inside_label():
    uri = encode(make_account(name="x:y", issuer="a/b"))
    assert uri.startswith("otpauth://totp/a%2Fb:x%3Ay?")


def test_empty_image_url_round_trips_as_none():
    account = make_account(name="a", image_url="")
    assert account.image_url is None
    assert "image=" not in encode(account)
    assert decode(encode(account)) == account
