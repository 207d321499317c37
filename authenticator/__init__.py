"""
authenticator package
=====================

One-time password engine (HOTP/TOTP) following RFC 4226 & RFC 6238.

──────────────────────────────────────────────
Core algorithm
──────────────────────────────────────────────
- HOTP (HMAC-based One-Time Password):
  code = Truncate(HMAC-SHA1(key=secret, msg=counter)) mod 10^digits

- TOTP (Time-based One-Time Password):
  HOTP with counter = floor(timestamp / period)
  → default period = 30 seconds, 6 digits, SHA-1.

- Dynamic Truncation:
  4 bytes are read from the HMAC at offset (last byte & 0x0F),
  the top bit is cleared to get a 31-bit value.

──────────────────────────────────────────────
Notes for integrators
──────────────────────────────────────────────

1. Backend developers
   - validate_otp() returns True/False for match/no-match and raises an
     OTPError subclass for bad input. Keep the two paths separate:
        from authenticator import validate_otp, OTPError
        try:
            ok = validate_otp(user_input, secret)
        except OTPError:
            ...  # malformed request, not a failed login

2. Frontend developers
   - Render format_otpauth_uri(...) as a QR code for the user to scan.

3. Storage
   - Only the base32 secret needs to be kept. Tokens are never stored.

──────────────────────────────────────────────
Quick example
──────────────────────────────────────────────
>>> from authenticator import generate_secret, generate_otp, validate_otp
>>> secret = generate_secret()
>>> token = generate_otp(secret)
>>> validate_otp(token, secret)
True
"""

from .exceptions import (
    InvalidCounter,
    InvalidDigitCount,
    InvalidPeriod,
    InvalidWindow,
    MacConstructionError,
    OTPError,
    SecretDecodeError,
    WindowTooLarge,
)
from .otp_core import (
    DEFAULT_CONFIG,
    OTPConfig,
    decode_secret,
    encode_secret,
    format_otpauth_uri,
    generate_otp,
    generate_secret,
    generate_totp,
    hotp,
    seconds_remaining,
    time_counter,
    validate_otp,
)

__all__ = [
    "DEFAULT_CONFIG",
    "OTPConfig",
    "decode_secret",
    "encode_secret",
    "format_otpauth_uri",
    "generate_otp",
    "generate_secret",
    "generate_totp",
    "hotp",
    "seconds_remaining",
    "time_counter",
    "validate_otp",
    "InvalidCounter",
    "InvalidDigitCount",
    "InvalidPeriod",
    "InvalidWindow",
    "MacConstructionError",
    "OTPError",
    "SecretDecodeError",
    "WindowTooLarge",
]
