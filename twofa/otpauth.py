"""
otpauth.py — Encode / decode URI otpauth:// (định dạng QR-code để đăng ký 2FA).

    otpauth://{totp|hotp}/[{issuer}:]{name}?secret=BASE64&algorithm=SHA1
        &digits=6&{period=30.0|counter=0}[&issuer=...][&image=...]

- ``secret`` là base64 chuẩn có padding (không phải base32).
- ``algorithm`` được ghi in hoa, đọc không phân biệt hoa/thường.
- Query item ``issuer`` thắng issuer ở đầu label.
- Có item ``counter`` -> account là counter-based, bất kể host là gì.
- Trong label chỉ dấu ":" literal là separator; ":" hoặc "/" nằm trong
  issuer / name được ghi thành %3A / %2F.

Khi decode, các query item được gom vào một ParsedQuery bất biến, rồi
OtpConfig / OtpAccount được tạo một lần ở cuối.
"""

import base64
import binascii
import logging
import math
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List, Optional, Tuple
from urllib.parse import quote, unquote, urlsplit

from twofa.account import OtpAccount
from twofa.errors import InvalidDigits, InvalidUrl
from twofa.otp_core import (
    DEFAULT_DIGITS,
    DEFAULT_PERIOD,
    HOTP_HOST,
    TOTP_HOST,
    Algorithm,
    CounterBased,
    GeneratorType,
    OtpConfig,
    generator_type_for_host,
    has_valid_counter,
    has_valid_digits,
)

logger = logging.getLogger(__name__)

URI_SCHEME = "otpauth"
LABEL_SEPARATOR = ":"

# query keys
KEY_SECRET = "secret"
KEY_ALGORITHM = "algorithm"
KEY_DIGITS = "digits"
KEY_ISSUER = "issuer"
KEY_IMAGE = "image"
KEY_COUNTER = "counter"
KEY_PERIOD = "period"

MIN_PERIOD = 1.0

_LABEL_SAFE = "@"
_QUERY_SAFE = ":/@="


@dataclass(frozen=True)
class ParsedQuery:
    """Các field lấy từ query string, trước khi được kiểm tra tổng thể."""

    secret: bytes = field(default=b"", repr=False)
    algorithm: Algorithm = Algorithm.SHA1
    digits: int = DEFAULT_DIGITS
    period: float = DEFAULT_PERIOD
    issuer: Optional[str] = None
    image_url: Optional[str] = None
    counter: Optional[int] = None


# --- Query item handlers ---------------------------------------------------
def _read_secret(parsed: ParsedQuery, value: str) -> ParsedQuery:
    try:
        secret = base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        # để trống: bên dưới sẽ báo "Doesn't have secret"
        logger.warning("Ignoring secret that is not valid base64")
        return parsed
    return replace(parsed, secret=secret)


def _read_algorithm(parsed: ParsedQuery, value: str) -> ParsedQuery:
    return replace(parsed, algorithm=Algorithm.parse(value))


def _read_digits(parsed: ParsedQuery, value: str) -> ParsedQuery:
    try:
        digits = int(value)
    except ValueError:
        logger.warning("Ignoring non-numeric digits: %r", value)
        return parsed
    if not has_valid_digits(digits):
        raise InvalidUrl(f"Digit out of bound: {value}")
    return replace(parsed, digits=digits)


def _read_issuer(parsed: ParsedQuery, value: str) -> ParsedQuery:
    return replace(parsed, issuer=value)


def _read_image(parsed: ParsedQuery, value: str) -> ParsedQuery:
    if not is_valid_url(value):
        raise InvalidUrl(f"Image url invalid: {value}")
    return replace(parsed, image_url=value)


def _read_counter(parsed: ParsedQuery, value: str) -> ParsedQuery:
    try:
        counter = int(value)
    except ValueError:
        logger.warning("Ignoring non-numeric counter: %r", value)
        return parsed
    if not has_valid_counter(counter):
        logger.warning("Ignoring counter outside the 64-bit range: %r", value)
        return parsed
    return replace(parsed, counter=counter)


def _read_period(parsed: ParsedQuery, value: str) -> ParsedQuery:
    try:
        period = float(value)
    except ValueError:
        logger.warning("Ignoring non-numeric period: %r", value)
        return parsed
    if period < MIN_PERIOD:
        raise InvalidUrl(f"Period less than 1: {value}")
    if not math.isfinite(period):
        logger.warning("Ignoring non-finite period: %r", value)
        return parsed
    return replace(parsed, period=period)


_HANDLERS: Dict[str, Callable[[ParsedQuery, str], ParsedQuery]] = {
    KEY_SECRET: _read_secret,
    KEY_ALGORITHM: _read_algorithm,
    KEY_DIGITS: _read_digits,
    KEY_ISSUER: _read_issuer,
    KEY_IMAGE: _read_image,
    KEY_COUNTER: _read_counter,
    KEY_PERIOD: _read_period,
}


# --- Helpers ---------------------------------------------------------------
def is_valid_url(value: str) -> bool:
    """URL tuyệt đối: có scheme và không chứa whitespace."""
    if not value or any(c.isspace() for c in value):
        return False
    try:
        parts = urlsplit(value)
    except ValueError:
        return False
    return bool(parts.scheme) and bool(parts.netloc or parts.path)


def split_query(query: str) -> List[Tuple[str, str]]:
    """
    Tách raw query string thành các cặp (key, value).

    Value được percent-decode nhưng "+" literal vẫn là "+" (secret base64
    hay được ghi không escape), khác với urllib.parse.parse_qsl.
    """
    items = []
    for part in query.split("&"):
        if not part:
            continue
        key, _, value = part.partition("=")
        items.append((unquote(key), unquote(value)))
    return items


def parse_query(items: List[Tuple[str, str]]) -> ParsedQuery:
    """Gom các query item vào ParsedQuery; key lạ bị bỏ qua."""
    parsed = ParsedQuery()
    for key, value in items:
        handler = _HANDLERS.get(key)
        if handler is None:
            logger.debug("Ignoring unknown query item %r", key)
            continue
        parsed = handler(parsed, value)
    return parsed


def split_label(path: str) -> Tuple[Optional[str], Optional[str]]:
    """
    "/ACME%20Co:alice@example.com" -> ("ACME Co", "alice@example.com")
    "/alice"                       -> (None, "alice")
    "/x%3Ay"                       -> (None, "x:y")

    Tách raw path theo ":" trước, rồi mới percent-decode từng phần. Chỉ
    issuer được trim whitespace; phần rỗng trả về None.
    """
    components = path.strip("/").split(LABEL_SEPARATOR)
    name = unquote(components[-1]) or None
    issuer = unquote(components[0]).strip() or None if len(components) > 1 else None
    return issuer, name


def join_label(issuer: Optional[str], name: Optional[str]) -> str:
    """Ngược lại của split_label (chưa có dấu "/" ở đầu)."""
    label = quote(name or "", safe=_LABEL_SAFE)
    if issuer:
        label = quote(issuer, safe=_LABEL_SAFE) + LABEL_SEPARATOR + label
    return label


# --- Public API ------------------------------------------------------------
def decode(uri: str) -> OtpAccount:
    """
    Parse URI otpauth:// thành OtpAccount.

    Raises:
        InvalidUrl: kèm lý do dễ đọc (sai scheme hoặc host, không có query,
            thiếu secret, digits/period/image không hợp lệ)
    """
    try:
        parts = urlsplit(uri)
    except ValueError as e:
        raise InvalidUrl(f"Unable to parse url: {e}") from e

    if parts.scheme != URI_SCHEME:
        raise InvalidUrl(f"incorrect scheme: {parts.scheme!r}")
    host = parts.netloc
    if host not in (TOTP_HOST, HOTP_HOST):
        raise InvalidUrl(f"incorrect host: {host!r}")

    items = split_query(parts.query)
    if not items:
        raise InvalidUrl(f"no query items in url for host {host!r}")

    label_issuer, name = split_label(parts.path)
    parsed = parse_query(items)
    logger.debug("Decoded otpauth label: host=%s issuer=%r name=%r", host, label_issuer, name)

    if not parsed.secret:
        raise InvalidUrl("Doesn't have secret")

    try:
        otp = OtpConfig(
            secret=parsed.secret,
            period=parsed.period,
            digits=parsed.digits,
            algorithm=parsed.algorithm,
        )
    except InvalidDigits as e:
        raise InvalidUrl(f"Digit out of bound: {parsed.digits}") from e

    generator_type: GeneratorType
    if parsed.counter is not None:
        generator_type = CounterBased(parsed.counter)
    else:
        generator_type = generator_type_for_host(host)

    return OtpAccount(
        otp=otp,
        generator_type=generator_type,
        name=name,
        issuer=parsed.issuer or label_issuer,
        image_url=parsed.image_url,
    )


def encode(account: OtpAccount) -> str:
    """
    Tạo URI otpauth:// cho một account.

    Thứ tự query: secret, algorithm, digits, counter|period, issuer, image.
    Space -> %20; "@" giữ nguyên trong label.
    """
    otp = account.otp
    generator_type = account.generator_type
    items = [
        (KEY_SECRET, base64.b64encode(otp.secret).decode("ascii")),
        (KEY_ALGORITHM, otp.algorithm.value.upper()),
        (KEY_DIGITS, str(otp.digits)),
    ]
    if isinstance(generator_type, CounterBased):
        items.append((KEY_COUNTER, str(generator_type.counter)))
    else:
        items.append((KEY_PERIOD, str(otp.period)))

    if account.issuer:
        items.append((KEY_ISSUER, account.issuer))
    if account.image_url is not None:
        items.append((KEY_IMAGE, account.image_url))

    path = "/" + join_label(account.issuer, account.name)
    query = "&".join(f"{key}={quote(value, safe=_QUERY_SAFE)}" for key, value in items)
    return f"{URI_SCHEME}://{generator_type.host}{path}?{query}"
