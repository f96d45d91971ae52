"""
encoding.py — Helper hex và đoán (best-effort) kiểu encoding của secret.

Chỉ dùng để hiển thị secret (xem ``OtpData.ENCODING``); OTP engine và URI
codec không dựa vào kết quả đoán này để quyết định gì cả.
"""

import base64
import binascii
import string
from enum import Enum

HEX_PREFIX = "0x"

_HEX_DIGITS = frozenset(string.hexdigits)


class EncodingType(str, Enum):
    ASCII = "ascii"
    HEX = "hex"
    BASE64 = "base64"


def bytes_from_hex(hex_string: str) -> bytes:
    """
    Chuyển chuỗi hex sang raw bytes.

    - Bỏ prefix "0x" nếu có.
    - Độ dài lẻ -> coi như có nibble 0 ở đầu: "123" -> b"\\x01\\x23".
    - Có ký tự không phải hex -> cả chuỗi không hợp lệ, trả về b"".

    Arguments:
        hex_string: ví dụ "48656c6c6f" hoặc "0x48656c6c6f"
    """
    if hex_string.startswith(HEX_PREFIX):
        hex_string = hex_string[len(HEX_PREFIX):]
    if not all(c in _HEX_DIGITS for c in hex_string):
        return b""
    if len(hex_string) % 2:
        hex_string = "0" + hex_string
    return bytes.fromhex(hex_string)


def hex_from_bytes(data: bytes) -> str:
    return bytes(data).hex()


def is_base64(text: str) -> bool:
    """True nếu ``text`` là base64 chuẩn, kiểm tra chặt (alphabet + padding)."""
    try:
        base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError):
        return False
    return True


def classify_encoding(data: bytes) -> EncodingType:
    """
    Đoán ``data`` là text base64, text hex hay ascii thường.

    Chỉ là heuristic: bytes không phải UTF-8 hợp lệ -> HEX (tức "hiển thị
    dạng hex"); text base64 hợp lệ được ưu tiên hơn text hex.
    """
    try:
        text = bytes(data).decode("utf-8")
    except UnicodeDecodeError:
        return EncodingType.HEX
    if is_base64(text):
        return EncodingType.BASE64
    if all(c in _HEX_DIGITS for c in text):
        return EncodingType.HEX
    return EncodingType.ASCII
