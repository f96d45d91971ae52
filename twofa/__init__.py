"""
twofa package
=============

Công cụ sinh mã OTP (HOTP/TOTP) theo chuẩn RFC 4226 & RFC 6238, kèm encode /
decode URI otpauth:// mà các app Authenticator dùng để import / export account.

──────────────────────────────────────────────
Giải thuật cốt lõi
──────────────────────────────────────────────
- HOTP (HMAC-based One-Time Password):
  code = Truncate(HMAC-<algo>(key=secret, msg=counter)) mod 10^digits
  → Caller tự quản lý counter; thư viện không tự tăng counter.

- TOTP (Time-based One-Time Password):
  HOTP với counter = floor(timestamp / period)
  → Mặc định period = 30 giây, 6 chữ số, SHA1.

- Dynamic Truncation:
  Lấy 4 byte từ HMAC dựa vào offset (last byte & 0x0F), clear bit cao nhất.

──────────────────────────────────────────────
Ví dụ sử dụng nhanh
──────────────────────────────────────────────
>>> from twofa import OtpConfig, generate, generate_for_seconds
>>> otp = OtpConfig(secret=b"12345678901234567890", digits=8)
>>> generate(otp, 0)
'84755224'
>>> generate_for_seconds(otp, 59)
'94287082'

>>> from twofa import decode
>>> account = decode("otpauth://totp/ACME:alice?secret=MTIzNDU2Nzg5MDEyMzQ1Njc4OTA=")
>>> account.issuer, account.name
('ACME', 'alice')
>>> account.uri
'otpauth://totp/ACME:alice?secret=MTIzNDU2Nzg5MDEyMzQ1Njc4OTA=&algorithm=SHA1&digits=6&period=30.0&issuer=ACME'
"""

from twofa.account import (
    ADVANCE_TITLE,
    INFO_TITLE,
    OtpAccount,
    OtpData,
    account_details,
    new_secret,
    random_account,
)
from twofa.encoding import EncodingType, bytes_from_hex, classify_encoding, hex_from_bytes
from twofa.errors import (
    InvalidAlgorithm,
    InvalidCounter,
    InvalidDigits,
    InvalidPeriod,
    InvalidSecret,
    InvalidTime,
    InvalidUrl,
    OtpError,
)
from twofa.otp_core import (
    DEFAULT_DIGITS,
    DEFAULT_PERIOD,
    MAX_DIGITS,
    MIN_DIGITS,
    Algorithm,
    CounterBased,
    GeneratorType,
    OtpConfig,
    TimeBased,
    generate,
    generate_at,
    generate_for,
    generate_for_seconds,
    progress_fraction,
    seconds_remaining,
)
from twofa.otpauth import decode, encode

__version__ = "0.1.0"
