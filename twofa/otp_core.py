#!/usr/bin/env python3
"""
otp_core.py — Core library cho HOTP (RFC 4226) / TOTP (RFC 6238).

Mục tiêu:
- Chứa các hàm thuần (pure functions) trên một OtpConfig bất biến, dùng trực
  tiếp bởi URI codec, CLI hoặc bất kỳ caller nào tự quản lý counter.
- Không I/O, không global state: gọi từ thread nào cũng an toàn.
- Giải thích từng bước của thuật toán trong docstring.

Lưu ý bảo mật:
- SHA1 là mặc định vì đa số app Authenticator chờ SHA1; SHA256/SHA512 dùng
  khi issuer yêu cầu.
"""

import hashlib
import hmac
import logging
import math
import struct
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Union

from twofa.errors import (
    InvalidAlgorithm,
    InvalidCounter,
    InvalidDigits,
    InvalidPeriod,
    InvalidSecret,
    InvalidTime,
)

logger = logging.getLogger(__name__)

# --- Config / constants ----------------------------------------------------
DEFAULT_DIGITS = 6          # chuẩn: 6 chữ số
MIN_DIGITS = 6
MAX_DIGITS = 8
DEFAULT_PERIOD = 30.0       # TOTP step (giây)
MAX_COUNTER = 2 ** 64 - 1   # counter được gửi dưới dạng 8 byte

TOTP_HOST = "totp"
HOTP_HOST = "hotp"

Instant = Union[datetime, float, int, None]


class Algorithm(str, Enum):
    SHA1 = "SHA1"
    SHA256 = "SHA256"
    SHA512 = "SHA512"

    @property
    def digestmod(self):
        return _DIGESTS[self]

    @classmethod
    def parse(cls, value: Optional[str]) -> "Algorithm":
        """Tra cứu không phân biệt hoa/thường; tên lạ hoặc None -> SHA1."""
        if value is None:
            return cls.SHA1
        try:
            return cls.from_name(value)
        except InvalidAlgorithm:
            return cls.SHA1

    @classmethod
    def from_name(cls, value: str) -> "Algorithm":
        """
        Như ``parse`` nhưng chặt: tên không hỗ trợ -> InvalidAlgorithm.

        Ví dụ: from_name("sha256") -> Algorithm.SHA256
        """
        if not isinstance(value, str):
            raise InvalidAlgorithm(value)
        try:
            return cls(value.upper())
        except ValueError:
            raise InvalidAlgorithm(value) from None


_DIGESTS = {
    Algorithm.SHA1: hashlib.sha1,
    Algorithm.SHA256: hashlib.sha256,
    Algorithm.SHA512: hashlib.sha512,
}


@dataclass(frozen=True)
class OtpConfig:
    """
    Shared key cộng với các tham số hai phía phải thống nhất.

    - secret: raw key bytes (key rỗng vẫn được chấp nhận nhưng mã sẽ yếu);
      kiểu khác bytes-like -> InvalidSecret
    - period: TOTP step (giây), hữu hạn và > 0 (nếu không -> InvalidPeriod)
    - digits: 6..8, ngoài khoảng -> InvalidDigits
    - algorithm: HMAC hash, nhận Algorithm hoặc tên (không phân biệt hoa/thường)
    """

    secret: bytes = field(repr=False)
    period: float = DEFAULT_PERIOD
    digits: int = DEFAULT_DIGITS
    algorithm: Algorithm = Algorithm.SHA1

    def __post_init__(self):
        if not isinstance(self.secret, (bytes, bytearray, memoryview)):
            raise InvalidSecret(self.secret)
        if not has_valid_digits(self.digits):
            raise InvalidDigits(self.digits)
        object.__setattr__(self, "period", _check_period(self.period))
        object.__setattr__(self, "secret", bytes(self.secret))
        object.__setattr__(self, "algorithm", Algorithm.from_name(self.algorithm))


@dataclass(frozen=True)
class TimeBased:
    """TOTP: moving factor lấy từ đồng hồ."""

    @property
    def host(self) -> str:
        return TOTP_HOST

    @property
    def is_time_based(self) -> bool:
        return True


@dataclass(frozen=True)
class CounterBased:
    """HOTP: moving factor là counter do caller tự theo dõi."""

    counter: int = 0

    def __post_init__(self):
        if not has_valid_counter(self.counter):
            raise InvalidCounter(self.counter)

    @property
    def host(self) -> str:
        return HOTP_HOST

    @property
    def is_time_based(self) -> bool:
        return False


GeneratorType = Union[TimeBased, CounterBased]


def generator_type_for_host(host: str) -> GeneratorType:
    """Generator type mặc định theo host token của otpauth ("totp" / "hotp")."""
    if host == TOTP_HOST:
        return TimeBased()
    if host == HOTP_HOST:
        return CounterBased(0)
    raise ValueError(f"Unknown OTP host: {host!r}")


# --- Validation helpers ----------------------------------------------------
def has_valid_digits(digits) -> bool:
    return (
        isinstance(digits, int)
        and not isinstance(digits, bool)
        and MIN_DIGITS <= digits <= MAX_DIGITS
    )


def has_valid_counter(counter) -> bool:
    return (
        isinstance(counter, int)
        and not isinstance(counter, bool)
        and 0 <= counter <= MAX_COUNTER
    )


def has_valid_period(period: float) -> bool:
    return math.isfinite(period) and period > 0


def _check_period(period: float) -> float:
    period = float(period)
    if not has_valid_period(period):
        raise InvalidPeriod(period)
    return period


def to_seconds(when: Instant = None) -> float:
    """
    Số giây kể từ Unix epoch của ``when``.

    - None     -> time.time()
    - datetime -> .timestamp(); datetime naive được hiểu là UTC
    - số       -> dùng nguyên giá trị
    """
    if when is None:
        return time.time()
    if isinstance(when, datetime):
        if when.tzinfo is None:
            when = when.replace(tzinfo=timezone.utc)
        return when.timestamp()
    return float(when)


# --- RFC helpers -----------------------------------------------------------
def int_to_bytes(i: int) -> bytes:
    """
    Chuyển integer (counter) sang 8-byte big-endian như RFC4226 yêu cầu.

    Ví dụ: int_to_bytes(1) -> b'\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x01'
    """
    return struct.pack(">Q", i)


def dynamic_truncate(hmac_digest: bytes) -> int:
    """
    Áp dụng dynamic truncation theo RFC4226.

    - Lấy offset = last_byte & 0x0F
    - Đọc 4 bytes từ offset dạng big-endian
    - Clear MSB, còn lại integer 31-bit

    Digest SHA1/SHA256/SHA512 dài 20/32/64 bytes, nên offset + 4 (tối đa 19)
    luôn nằm trong buffer.
    """
    offset = hmac_digest[-1] & 0x0F
    (value,) = struct.unpack(">I", hmac_digest[offset:offset + 4])
    return value & 0x7FFFFFFF


def generate(config: OtpConfig, counter: int) -> str:
    """
    Sinh mã HOTP theo RFC4226.

    Steps:
    1. Message = 8-byte counter (big-endian)
    2. HMAC(config.algorithm, key=config.secret, message)
    3. Dynamic truncate -> integer 31-bit
    4. otp = value % 10^digits, zero-pad để có đúng "digits" chữ số

    Arguments:
        config: tham số OTP
        counter: moving factor, 0 <= counter < 2^64

    Trả về:
        str: ví dụ "000081" cho giá trị 81 với 6 chữ số

    Raises:
        InvalidCounter: counter không vừa 64 bit unsigned
    """
    if not has_valid_counter(counter):
        raise InvalidCounter(counter)
    msg = int_to_bytes(counter)
    digest = hmac.new(config.secret, msg, config.algorithm.digestmod).digest()
    otp_val = dynamic_truncate(digest) % (10 ** config.digits)
    return str(otp_val).zfill(config.digits)


def generate_at(config: OtpConfig, when: Instant = None) -> str:
    """
    Sinh mã TOTP theo RFC6238 cho một thời điểm, mặc định là "bây giờ".

    counter = floor(seconds_since_epoch / period)

    Raises:
        InvalidTime: thời điểm nằm trước epoch
    """
    period = _check_period(config.period)
    seconds = to_seconds(when)
    if not math.isfinite(seconds) or seconds < 0:
        raise InvalidTime(seconds)
    counter = math.floor(seconds / period)
    logger.debug("TOTP: time=%s, period=%s, counter=%d", seconds, period, counter)
    return generate(config, counter)


def generate_for_seconds(config: OtpConfig, seconds_since_epoch: int) -> str:
    """
    Sinh mã TOTP cho một số giây nguyên kể từ epoch.

    Raises:
        InvalidTime: seconds_since_epoch <= 0
    """
    if seconds_since_epoch <= 0:
        raise InvalidTime(seconds_since_epoch)
    period = _check_period(config.period)
    counter = math.floor(seconds_since_epoch / period)
    logger.debug("TOTP: time=%d, period=%s, counter=%d", seconds_since_epoch, period, counter)
    return generate(config, counter)


def generate_for(config: OtpConfig, generator_type: GeneratorType, when: Instant = None) -> str:
    """Sinh mã theo cách mà ``generator_type`` chọn."""
    if isinstance(generator_type, CounterBased):
        return generate(config, generator_type.counter)
    return generate_at(config, when)


# --- Countdown helpers -----------------------------------------------------
def seconds_remaining(when: Instant, period: float) -> float:
    """Số giây còn lại trước khi mã của ``when`` đổi."""
    period = _check_period(period)
    return period - (to_seconds(when) % period)


def progress_fraction(when: Instant, period: float) -> float:
    """
    Phần đã trôi qua của period hiện tại, trong khoảng [0, 1).

    Countdown display gọi mỗi tick:
        1 - (period - (t mod period)) / period
    """
    period = _check_period(period)
    return 1 - seconds_remaining(when, period) / period
