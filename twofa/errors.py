"""
errors.py — Các kiểu exception của package twofa.

Mọi lỗi đều là subclass của ``OtpError``, nên caller chỉ cần bắt lớp gốc
nếu muốn từ chối input sai:

    try:
        account = decode(uri)
    except OtpError as e:
        print(f"[!] {e}")
"""


class OtpError(Exception):
    """Lớp gốc cho mọi lỗi OTP."""


class InvalidDigits(OtpError):
    """OtpConfig có số chữ số ngoài khoảng MIN_DIGITS..MAX_DIGITS."""

    def __init__(self, digits):
        super().__init__(f"Invalid digit count: {digits} (expected 6-8)")
        self.digits = digits


class InvalidPeriod(OtpError):
    """Period không phải số hữu hạn > 0."""

    def __init__(self, period):
        super().__init__(f"Invalid period: {period}")
        self.period = period


class InvalidSecret(OtpError):
    """Secret không phải bytes-like (bytes / bytearray / memoryview)."""

    def __init__(self, secret):
        super().__init__(f"Secret must be bytes, got {type(secret).__name__}")


class InvalidAlgorithm(OtpError):
    """Tên thuật toán không thuộc SHA1 / SHA256 / SHA512."""

    def __init__(self, algorithm):
        super().__init__(f"Unsupported algorithm: {algorithm!r}")
        self.algorithm = algorithm


class InvalidTime(OtpError):
    """Sinh TOTP với timestamp tại hoặc trước epoch."""

    def __init__(self, seconds):
        super().__init__(f"Invalid time: {seconds}")
        self.seconds = seconds


class InvalidCounter(OtpError):
    # counter phải vừa 8 byte unsigned
    def __init__(self, counter):
        super().__init__(f"Invalid counter: {counter}")
        self.counter = counter


class InvalidUrl(OtpError):
    """Không decode được URI otpauth://. ``reason`` cho biết lý do."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason
