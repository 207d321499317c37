#!/usr/bin/env python3
"""
otp_core.py - Core library for HOTP (RFC 4226) / TOTP (RFC 6238).

Goals:
- Pure functions only, consumed directly by the HTTP API and the CLI.
- No argparse, no Flask, no file or database I/O in this module.
- Every call is stateless: nothing is cached between calls, so the functions
  are safe to call from any number of threads at once.

Algorithm summary:
- HOTP: code = Truncate(HMAC-SHA1(key=secret, msg=counter)) mod 10^digits
- TOTP: HOTP with counter = floor(unix_time / period)
- Validation: recompute the code for counter-window..counter+window and
  accept the first candidate equal to the submitted token.

Security notes:
- Secrets are generated with the `secrets` CSPRNG.
- Tokens are compared with hmac.compare_digest.
- Neither secrets nor tokens are ever written to the log.
"""

from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional
import base64
import hashlib
import hmac
import logging
import secrets
import string
import struct
import time
from urllib.parse import quote

from .exceptions import (
    InvalidCounter,
    InvalidDigitCount,
    InvalidPeriod,
    InvalidWindow,
    MacConstructionError,
    SecretDecodeError,
    WindowTooLarge,
)

log = logging.getLogger(__name__)

# --- Config / constants ----------------------------------------------------
DEFAULT_DIGITS = 6          # standard: 6 digits
DEFAULT_TIME_STEP = 30      # TOTP step (seconds)
DEFAULT_WINDOW = 1          # +/- one step of clock drift
DEFAULT_SECRET_LENGTH = 32  # characters of random source material
DEFAULT_ALGORITHM = "SHA1"

MAX_DIGITS = 9              # 10**10 does not fit in 32 bits
MAX_WINDOW = 10
MAX_COUNTER = 2 ** 64 - 1

SECRET_CHARS = string.ascii_letters + string.digits
RFC4648_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ234567"
CROCKFORD_ALPHABET = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"

_CROCKFORD_ALIASES = str.maketrans("OIL", "011")
_CROCKFORD_TO_RFC4648 = str.maketrans(CROCKFORD_ALPHABET, RFC4648_ALPHABET)


# --- Parameter checks ------------------------------------------------------
def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def check_digits(digits: int) -> int:
    """Raise InvalidDigitCount unless 1 <= digits <= 9."""
    if not _is_int(digits) or not 1 <= digits <= MAX_DIGITS:
        raise InvalidDigitCount(
            f"digits must be an integer between 1 and {MAX_DIGITS}, got {digits!r}"
        )
    return digits


def check_period(period: int) -> int:
    """Raise InvalidPeriod unless period is a positive integer."""
    if not _is_int(period) or period <= 0:
        raise InvalidPeriod(f"period must be a positive integer, got {period!r}")
    return period


def check_window(window: int) -> int:
    """Raise WindowTooLarge above MAX_WINDOW, InvalidWindow when negative."""
    if not _is_int(window) or window < 0:
        raise InvalidWindow(f"window must be a non-negative integer, got {window!r}")
    if window > MAX_WINDOW:
        raise WindowTooLarge(f"window {window} exceeds the maximum of {MAX_WINDOW}")
    return window


def check_counter(counter: int) -> int:
    """Raise InvalidCounter unless counter fits in an unsigned 64-bit integer."""
    if not _is_int(counter) or not 0 <= counter <= MAX_COUNTER:
        raise InvalidCounter(f"counter must be between 0 and 2**64-1, got {counter!r}")
    return counter


@dataclass(frozen=True)
class OTPConfig:
    """
    Options shared by generation and validation.

    The fields are checked once, when the object is built, so the functions
    below never see an out-of-range digit count, period or window.

    Attributes:
        digits: token length, 1..9 (default 6)
        period: TOTP step in seconds (default 30)
        window: steps accepted on each side of the current counter, 0..10 (default 1)
    """

    digits: int = DEFAULT_DIGITS
    period: int = DEFAULT_TIME_STEP
    window: int = DEFAULT_WINDOW

    def __post_init__(self):
        check_digits(self.digits)
        check_period(self.period)
        check_window(self.window)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], base: Optional["OTPConfig"] = None) -> "OTPConfig":
        """
        Build a config from a dict-like object (JSON body, argparse namespace vars).

        Keys that are missing or None keep the value from `base`
        (DEFAULT_CONFIG when not given).
        """
        if base is None:
            base = DEFAULT_CONFIG
        overrides = {
            name: data[name]
            for name in ("digits", "period", "window")
            if data.get(name) is not None
        }
        return replace(base, **overrides)


DEFAULT_CONFIG = OTPConfig()


# --- Base32 codec ----------------------------------------------------------
def encode_secret(raw: bytes) -> str:
    """
    Encode raw bytes as RFC 4648 base32 without '=' padding.

    Example: encode_secret(b"hello") -> "NBSWY3DP"
    """
    return base64.b32encode(raw).decode("ascii").rstrip("=")


def _b32decode_unpadded(text: str) -> bytes:
    """
    Decode RFC 4648 base32 of any length, keeping len(text) * 5 // 8 bytes.

    Lengths of 1, 3 or 6 (mod 8) end in a character that carries no full
    byte; it is checked against the alphabet and then dropped so the rest
    can be padded.
    """
    text = text.rstrip("=")
    if len(text) % 8 in (1, 3, 6):
        if text[-1].upper() not in RFC4648_ALPHABET:
            raise ValueError("invalid base32 character")
        text = text[:-1]
    return base64.b32decode(text + "=" * (-len(text) % 8), casefold=True)


def _crockford_decode(text: str) -> bytes:
    normalized = text.upper().translate(_CROCKFORD_ALIASES)
    if any(char not in CROCKFORD_ALPHABET for char in normalized):
        raise ValueError("invalid Crockford base32 character")
    return _b32decode_unpadded(normalized.translate(_CROCKFORD_TO_RFC4648))


def decode_secret(secret: str) -> bytes:
    """
    Decode a base32 secret into the raw HMAC key.

    Authenticator apps disagree on the alphabet, so two are tried in order:
    1. RFC 4648 (case-insensitive, padding optional, any length)
    2. Crockford (case-insensitive, O read as 0, I and L read as 1)

    Raises:
        SecretDecodeError: if the string is valid in neither alphabet
    """
    try:
        return _b32decode_unpadded(secret)
    except ValueError:
        pass

    try:
        key = _crockford_decode(secret)
    except ValueError as e:
        raise SecretDecodeError(
            "Secret is not valid RFC 4648 or Crockford base32"
        ) from e
    log.debug("Secret decoded with the Crockford base32 alphabet")
    return key


# --- Secret generation -----------------------------------------------------
def generate_secret(length: int = DEFAULT_SECRET_LENGTH) -> str:
    """
    Generate a new shared secret, base32-encoded without padding.

    - `length` alphanumeric characters are drawn from the `secrets` CSPRNG.
    - Their ASCII bytes are then base32-encoded, so the result is longer
      than `length` (32 characters -> 52 base32 characters).
    - length=0 returns an empty string.
    """
    text = "".join(secrets.choice(SECRET_CHARS) for _ in range(length))
    return encode_secret(text.encode("ascii"))


# --- RFC helpers -----------------------------------------------------------
def int_to_bytes(i: int) -> bytes:
    """
    Convert the counter to the 8-byte big-endian message required by RFC 4226.

    Example: int_to_bytes(1) -> b'\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x01'

    Raises:
        InvalidCounter: if i is outside 0..2**64-1
    """
    return struct.pack(">Q", check_counter(i))


def dynamic_truncate(hmac_digest: bytes) -> int:
    """
    Apply RFC 4226 dynamic truncation.

    - offset = last_byte & 0x0F
    - take 4 bytes from offset, clear the MSB (0x7F) of the first one
    - return the resulting 31-bit unsigned integer
    """
    offset = hmac_digest[-1] & 0x0F
    return (
        ((hmac_digest[offset] & 0x7F) << 24)
        | ((hmac_digest[offset + 1] & 0xFF) << 16)
        | ((hmac_digest[offset + 2] & 0xFF) << 8)
        | (hmac_digest[offset + 3] & 0xFF)
    )


def truncate(hmac_digest: bytes, digits: int = DEFAULT_DIGITS) -> str:
    """Reduce a digest to a zero-padded token of `digits` characters."""
    check_digits(digits)
    return str(dynamic_truncate(hmac_digest) % (10 ** digits)).zfill(digits)


def hotp(key: bytes, counter: int, digits: int = DEFAULT_DIGITS) -> str:
    """
    Generate an HOTP code (RFC 4226).

    Steps:
    1. Message = 8-byte big-endian counter
    2. HMAC-SHA1(key, message)
    3. Dynamic truncate -> 31-bit value
    4. value % 10^digits, zero-padded to `digits`

    Arguments:
        key: raw secret bytes (already base32-decoded)
        counter: integer counter, 0..2**64-1
        digits: code length, 1..9

    Raises:
        InvalidDigitCount, InvalidCounter, MacConstructionError
    """
    check_digits(digits)
    msg = int_to_bytes(counter)
    try:
        mac = hmac.new(key, msg, hashlib.sha1)
    except (TypeError, ValueError) as e:
        raise MacConstructionError(f"Cannot initialise HMAC-SHA1: {e}") from e
    return truncate(mac.digest(), digits)


# --- TOTP ------------------------------------------------------------------
def time_counter(period: int = DEFAULT_TIME_STEP, timestamp: Optional[float] = None) -> int:
    """
    Return the TOTP step index floor(timestamp / period).

    Arguments:
        period: step length in seconds
        timestamp: unix time in seconds (time.time() when None)
    """
    check_period(period)
    if timestamp is None:
        timestamp = time.time()
    return int(timestamp // period)


def seconds_remaining(period: int = DEFAULT_TIME_STEP, timestamp: Optional[float] = None) -> int:
    """Seconds left before the current TOTP step rolls over."""
    check_period(period)
    if timestamp is None:
        timestamp = time.time()
    return period - int(timestamp) % period


def generate_otp(
    secret: str,
    counter: Optional[int] = None,
    config: OTPConfig = DEFAULT_CONFIG,
    timestamp: Optional[float] = None,
) -> str:
    """
    Generate a TOTP code, or an HOTP code when `counter` is given.

    TOTP adds no cryptographic step to HOTP: it only derives the counter
    from the clock.

    Arguments:
        secret: base32 secret (RFC 4648 or Crockford)
        counter: explicit counter; derived from the clock when None
        config: digits and period to use
        timestamp: unix time used instead of time.time()

    Raises:
        SecretDecodeError, InvalidCounter, MacConstructionError
    """
    key = decode_secret(secret)
    if counter is None:
        counter = time_counter(config.period, timestamp)
    return hotp(key, counter, config.digits)


generate_totp = generate_otp


def validate_otp(
    token: str,
    secret: str,
    counter: Optional[int] = None,
    config: OTPConfig = DEFAULT_CONFIG,
    timestamp: Optional[float] = None,
) -> bool:
    """
    Check `token` against every counter in [counter - window, counter + window].

    The digit count is taken from len(token), so 6- and 8-digit deployments
    share one verifier; a token whose length differs from the issued one
    never matches. Candidates are tried in increasing order and the search
    stops at the first match. Candidate counters below 0 or above 2**64-1
    are skipped.

    Returns:
        True on a match, False when no candidate in the window matches.

    Raises:
        WindowTooLarge: window above 10 (checked before any HMAC work)
        SecretDecodeError: secret is not valid base32
        InvalidDigitCount: token is empty or longer than 9 characters
        InvalidCounter: explicit counter outside 0..2**64-1
    """
    window = check_window(config.window)
    key = decode_secret(secret)
    if counter is None:
        counter = time_counter(config.period, timestamp)
    else:
        check_counter(counter)
    digits = check_digits(len(token))

    submitted = token.encode("utf-8")
    for offset in range(-window, window + 1):
        candidate = counter + offset
        if not 0 <= candidate <= MAX_COUNTER:
            continue
        if hmac.compare_digest(hotp(key, candidate, digits).encode("ascii"), submitted):
            log.debug("OTP matched at offset %+d (window=%d)", offset, window)
            return True

    log.debug("OTP did not match any of %d candidates", 2 * window + 1)
    return False


# --- Provisioning ----------------------------------------------------------
def format_otpauth_uri(
    secret: str,
    account: str,
    issuer: str,
    algo: str = DEFAULT_ALGORITHM,
    digits: int = DEFAULT_DIGITS,
    period: int = DEFAULT_TIME_STEP,
) -> str:
    """
    Build the otpauth:// URI imported by authenticator apps (usually via QR code).

    Shape: otpauth://totp/{issuer}:{account}?secret=...&algorithm=...&digits=...&period=...

    Issuer and account are percent-encoded ('@' is kept as is). With an
    empty account the label is just the issuer: "Issuer:?" becomes "Issuer?".
    """
    label = f"{quote(issuer, safe='@')}:{quote(account, safe='@')}"
    uri = (
        f"otpauth://totp/{label}?secret={secret}"
        f"&algorithm={algo}&digits={digits}&period={period}"
    )
    return uri.replace(":?", "?")
