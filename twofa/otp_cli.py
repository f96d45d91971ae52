#!/usr/bin/env python3
"""
otp_cli.py — CLI wrapper cho thư viện twofa

Cung cấp các subcommand:
- code    : in mã OTP của một URI otpauth://
- hotp    : sinh mã HOTP cho secret + counter
- totp    : sinh mã TOTP cho secret (một lần, tại thời điểm cho trước, hoặc --watch)
- uri     : tạo URI otpauth:// từ secret và các tham số
- inspect : hiển thị các field của URI otpauth://
- random  : in URI của một account ngẫu nhiên
- hex     : hiển thị secret hex dạng base64, kèm đoán encoding
"""

import argparse
import base64
import binascii
import logging
import sys
import time

from twofa import otp_core, otpauth
from twofa.account import OtpAccount, account_details, random_account
from twofa.encoding import bytes_from_hex, classify_encoding
from twofa.errors import OtpError

logger = logging.getLogger(__name__)


class CliError(OtpError):
    """Input dòng lệnh không hợp lệ (ví dụ secret không decode được)."""


# --- Helpers ---
def read_secret(args) -> bytes:
    if args.hex is not None:
        secret = bytes_from_hex(args.hex)
        if not secret:
            raise CliError(f"Secret is not valid hex: {args.hex}")
        return secret
    try:
        return base64.b64decode(args.secret, validate=True)
    except (binascii.Error, ValueError) as e:
        raise CliError(f"Secret is not valid base64: {e}") from e


def build_config(args) -> otp_core.OtpConfig:
    return otp_core.OtpConfig(
        secret=read_secret(args),
        period=getattr(args, "period", otp_core.DEFAULT_PERIOD),
        digits=args.digits,
        algorithm=otp_core.Algorithm(args.algorithm),
    )


# --- CLI command handlers ---
def cmd_code(args):
    account = otpauth.decode(args.uri)
    code = account.current_code(args.at)
    label = account.name or "-"
    print(f"[{account.generator_type.host}] {label}: {code}")


def cmd_hotp(args):
    otp = build_config(args)
    code = otp_core.generate(otp, args.counter)
    print(f"HOTP({otp.digits}d, counter={args.counter}): {code}")


def cmd_totp(args):
    otp = build_config(args)
    if not args.watch:
        if args.at is not None:
            code = otp_core.generate_for_seconds(otp, args.at)
        else:
            code = otp_core.generate_at(otp)
        print(f"TOTP ({otp.digits}d): {code}")
        return

    print(f"Press Ctrl+C to quit. Generating {otp.digits}-digit TOTP every {otp.period:g}s...\n")
    last_code = None
    try:
        while True:
            now = time.time()
            code = otp_core.generate_at(otp, now)
            remaining = otp_core.seconds_remaining(now, otp.period)
            # mã mới -> in dòng mới; cùng mã -> chỉ cập nhật countdown
            if code != last_code:
                print(f"TOTP ({otp.digits}d): {code}  (valid ~{int(remaining):2d}s)")
                last_code = code
            else:
                progress = otp_core.progress_fraction(now, otp.period)
                print(f".. {int(remaining):2d}s left [{progress:4.0%}]", end='\r', flush=True)
            time.sleep(1)
    except KeyboardInterrupt:
        print("\nBye.")


def cmd_uri(args):
    otp = build_config(args)
    if args.counter is not None:
        generator_type = otp_core.CounterBased(args.counter)
    else:
        generator_type = otp_core.TimeBased()
    account = OtpAccount(
        otp=otp,
        generator_type=generator_type,
        name=args.name,
        issuer=args.issuer,
        image_url=args.image,
    )
    print(otpauth.encode(account))


def cmd_inspect(args):
    account = otpauth.decode(args.uri)
    for title, value in account_details(account):
        print(f"{title:<10} {value if value is not None else '-'}")


def cmd_random(args):
    print(random_account(args.name, args.issuer).uri)


def cmd_hex(args):
    data = bytes_from_hex(args.value)
    if not data:
        raise CliError(f"Not a hex string: {args.value}")
    print("base64  :", base64.b64encode(data).decode("ascii"))
    print("encoding:", classify_encoding(data).value)


def cmd_help(args):
    print("'python -m twofa.otp_cli -h' for help.")


# --- Argparse builder ---
def add_secret_args(p: argparse.ArgumentParser):
    group = p.add_mutually_exclusive_group(required=True)
    group.add_argument("--secret", help="Shared secret, base64")
    group.add_argument("--hex", help="Shared secret, hex (optional 0x prefix)")
    p.add_argument("--digits", type=int, default=otp_core.DEFAULT_DIGITS, help="Number of OTP digits")
    p.add_argument(
        "--algorithm",
        type=str.upper,
        choices=[a.value for a in otp_core.Algorithm],
        default=otp_core.Algorithm.SHA1.value,
        help="HMAC hash (không phân biệt hoa/thường)",
    )


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="TOTP/HOTP generator and otpauth:// URI tool")
    p.add_argument("--verbose", action="store_true", help="Debug logging")
    sub = p.add_subparsers(dest="cmd")
    p.set_defaults(func=cmd_help)

    # code
    pc = sub.add_parser("code", help="Print the code for an otpauth URI")
    pc.add_argument("uri")
    pc.add_argument("--at", type=float, help="Seconds since epoch (default: now)")
    pc.set_defaults(func=cmd_code)

    # hotp
    ph = sub.add_parser("hotp", help="Generate HOTP code for a specific counter")
    add_secret_args(ph)
    ph.add_argument("--counter", type=int, required=True)
    ph.set_defaults(func=cmd_hotp)

    # totp
    pt = sub.add_parser("totp", help="Generate TOTP code")
    add_secret_args(pt)
    pt.add_argument("--period", type=float, default=otp_core.DEFAULT_PERIOD, help="TOTP period (seconds)")
    pt.add_argument("--at", type=int, help="Seconds since epoch (default: now)")
    pt.add_argument("--watch", action="store_true", help="Show the code in real time")
    pt.set_defaults(func=cmd_totp)

    # uri
    pu = sub.add_parser("uri", help="Print the otpauth URI for a secret")
    add_secret_args(pu)
    pu.add_argument("--name", default="user@example")
    pu.add_argument("--issuer")
    pu.add_argument("--image", help="Image URL")
    pu.add_argument("--period", type=float, default=otp_core.DEFAULT_PERIOD, help="TOTP period (seconds)")
    pu.add_argument("--counter", type=int, help="Make a HOTP URI with this counter")
    pu.set_defaults(func=cmd_uri)

    # inspect
    pi = sub.add_parser("inspect", help="Show the fields of an otpauth URI")
    pi.add_argument("uri")
    pi.set_defaults(func=cmd_inspect)

    # random
    pr = sub.add_parser("random", help="Print the URI of a random account")
    pr.add_argument("--name", default="user@example")
    pr.add_argument("--issuer", default="otp-tool")
    pr.set_defaults(func=cmd_random)

    # hex
    px = sub.add_parser("hex", help="Show a hex secret as base64")
    px.add_argument("value")
    px.set_defaults(func=cmd_hex)

    return p


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        args.func(args)
    except OtpError as e:
        logger.debug("Command %s failed", args.cmd, exc_info=True)
        print(f"[!] {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
