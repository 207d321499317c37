#!/usr/bin/env python3
"""
otp_cli.py - CLI wrapper around otp_core.py

Subcommands:
- secret   : generate a new base32 secret
- generate : print the current TOTP code (or HOTP code with --counter)
- validate : check a code against a secret (exit status 0 = valid, 1 = invalid)
- uri      : print the otpauth:// provisioning URI

Bad input (undecodable secret, digits > 9, window > 10, ...) is reported on
stderr with exit status 2.
"""

import argparse
import sys
from typing import List, Optional

from . import otp_core
from .exceptions import OTPError


# --- CLI command handlers ---
def cmd_secret(args) -> int:
    print(otp_core.generate_secret(args.length))
    return 0


def cmd_generate(args) -> int:
    config = otp_core.OTPConfig.from_mapping(vars(args))
    code = otp_core.generate_otp(args.secret, counter=args.counter, config=config)
    if args.counter is None:
        remaining = otp_core.seconds_remaining(config.period)
        print(f"{code}  (valid ~{remaining:2d}s)")
    else:
        print(code)
    return 0


def cmd_validate(args) -> int:
    config = otp_core.OTPConfig.from_mapping(vars(args))
    ok = otp_core.validate_otp(args.token, args.secret, counter=args.counter, config=config)
    if ok:
        print("[+] OTP code is VALID")
        return 0
    print("[-] OTP code is INVALID")
    return 1


def cmd_uri(args) -> int:
    config = otp_core.OTPConfig.from_mapping(vars(args))
    print(otp_core.format_otpauth_uri(
        args.secret, args.account, args.issuer,
        digits=config.digits, period=config.period,
    ))
    return 0


def cmd_help(args) -> int:
    print("'authenticator -h' for help.")
    return 0


# --- Argparse builder ---
def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="authenticator", description="TOTP/HOTP (HMAC-SHA1) generator and verifier")
    sub = p.add_subparsers(dest="cmd")
    p.set_defaults(func=cmd_help)

    # secret
    ps = sub.add_parser("secret", help="Generate a new base32 secret")
    ps.add_argument("--length", type=int, default=otp_core.DEFAULT_SECRET_LENGTH,
                    help="Random characters before base32 encoding")
    ps.set_defaults(func=cmd_secret)

    # generate
    pg = sub.add_parser("generate", help="Generate a TOTP code (or HOTP with --counter)")
    pg.add_argument("--secret", required=True, help="Base32 secret")
    pg.add_argument("--counter", type=int, help="Explicit counter instead of the clock")
    pg.add_argument("--digits", type=int, help="Number of OTP digits")
    pg.add_argument("--period", type=int, help="TOTP time step (seconds)")
    pg.set_defaults(func=cmd_generate)

    # validate
    pv = sub.add_parser("validate", help="Validate an OTP code")
    pv.add_argument("--secret", required=True, help="Base32 secret")
    pv.add_argument("--token", required=True, help="OTP code to verify")
    pv.add_argument("--counter", type=int, help="Explicit counter instead of the clock")
    pv.add_argument("--period", type=int, help="TOTP time step (seconds)")
    pv.add_argument("--window", type=int, help="Allowed +/- step window (max 10)")
    pv.set_defaults(func=cmd_validate)

    # uri
    pu = sub.add_parser("uri", help="Print the otpauth URI for a secret")
    pu.add_argument("--secret", required=True, help="Base32 secret")
    pu.add_argument("--account", default="", help="Account label")
    pu.add_argument("--issuer", default="Authenticator", help="Issuer label")
    pu.add_argument("--digits", type=int)
    pu.add_argument("--period", type=int)
    pu.set_defaults(func=cmd_uri)

    return p


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return args.func(args)
    except OTPError as e:
        print(f"[!] {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
