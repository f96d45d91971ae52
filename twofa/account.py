"""
account.py — OtpAccount: đơn vị được export ra / import từ URI otpauth://,
cùng các projection chỉ-đọc để hiển thị từng field.
"""

import base64
import random
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

import pyotp

from twofa.encoding import classify_encoding
from twofa.otp_core import (
    Algorithm,
    CounterBased,
    GeneratorType,
    Instant,
    OtpConfig,
    TimeBased,
    generate_for,
)

RANDOM_SECRET_MIN = 8       # bytes
RANDOM_SECRET_MAX = 16
RANDOM_PERIODS = (30.0, 60.0)
RANDOM_DIGITS = (6, 8)


@dataclass(frozen=True)
class OtpAccount:
    """
    - otp: cấu hình OTP (secret, period, digits, algorithm)
    - generator_type: TimeBased() hoặc CounterBased(n)
    - name / issuer / image_url: metadata tùy chọn; chuỗi rỗng được coi là None
    """

    otp: OtpConfig
    generator_type: GeneratorType
    name: Optional[str] = None
    issuer: Optional[str] = None
    image_url: Optional[str] = None

    def __post_init__(self):
        for attr in ("name", "issuer", "image_url"):
            if getattr(self, attr) == "":
                object.__setattr__(self, attr, None)

    def current_code(self, when: Instant = None) -> str:
        """
        Mã hiện tại của account.

        HOTP dùng counter đã lưu (bỏ qua ``when``), TOTP dùng ``when`` hoặc
        thời điểm hiện tại.
        """
        return generate_for(self.otp, self.generator_type, when)

    @property
    def uri(self) -> str:
        return self.to_uri()

    def to_uri(self) -> str:
        from twofa.otpauth import encode
        return encode(self)

    @classmethod
    def from_uri(cls, uri: str) -> "OtpAccount":
        from twofa.otpauth import decode
        return decode(uri)


# --- Display projections ---------------------------------------------------
class OtpData(Enum):
    NAME = "Name"
    ISSUER = "Issuer"
    SECRET = "Secret"
    ENCODING = "Encoding"
    TYPE = "Type"
    ALGORITHM = "Algorithm"
    DIGITS = "Digits"
    PERIOD = "Period"

    @property
    def title(self) -> str:
        return self.value

    def value_for(self, account: OtpAccount) -> Optional[str]:
        otp = account.otp
        if self is OtpData.NAME:
            return account.name
        if self is OtpData.ISSUER:
            return account.issuer
        if self is OtpData.SECRET:
            return base64.b64encode(otp.secret).decode("ascii")
        if self is OtpData.ENCODING:
            return classify_encoding(otp.secret).value
        if self is OtpData.TYPE:
            return account.generator_type.host
        if self is OtpData.ALGORITHM:
            return otp.algorithm.value.upper()
        if self is OtpData.DIGITS:
            return str(otp.digits)
        return str(otp.period)


INFO_TITLE = "Info"
ADVANCE_TITLE = "Advance"


def account_details(account: OtpAccount) -> List[Tuple[str, Optional[str]]]:
    """(title, value) cho mọi field OtpData, theo thứ tự hiển thị."""
    return [(data.title, data.value_for(account)) for data in OtpData]


# --- Secrets / random accounts ---------------------------------------------
def new_secret() -> bytes:
    """Secret 160-bit mới, sinh giống cách luồng đăng ký user làm."""
    return base64.b32decode(pyotp.random_base32())


def random_account(name: str, issuer: str, rng: Optional[random.Random] = None) -> OtpAccount:
    """
    Account ngẫu nhiên nhưng hợp lệ, dùng cho kiểm tra round-trip hàng loạt.

    - secret: 8..16 bytes ngẫu nhiên
    - period: 30 hoặc 60 giây
    - algorithm: bất kỳ
    - digits: 6 hoặc 8
    - generator: TOTP, hoặc HOTP với counter 1
    """
    rng = rng or random.SystemRandom()
    length = rng.randint(RANDOM_SECRET_MIN, RANDOM_SECRET_MAX)
    secret = bytes(rng.getrandbits(8) for _ in range(length))
    otp = OtpConfig(
        secret=secret,
        period=rng.choice(RANDOM_PERIODS),
        digits=rng.choice(RANDOM_DIGITS),
        algorithm=rng.choice(list(Algorithm)),
    )
    generator_type = TimeBased() if rng.random() < 0.5 else CounterBased(1)
    return OtpAccount(otp=otp, generator_type=generator_type, name=name, issuer=issuer)
