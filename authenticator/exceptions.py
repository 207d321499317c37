"""
exceptions.py - Error types raised by the OTP core.

Every error derives from OTPError (itself a ValueError), so callers can catch
the whole family at once. A token that simply does not match is NOT an error:
validate_otp() returns False for that case.
"""


class OTPError(ValueError):
    """Base class for every OTP core error."""


class SecretDecodeError(OTPError):
    """Secret is valid in neither the RFC 4648 nor the Crockford base32 alphabet."""


class InvalidDigitCount(OTPError):
    """Requested digit count is outside 1..9."""


class InvalidPeriod(OTPError):
    """TOTP period is not a positive integer."""


class InvalidWindow(OTPError):
    """Tolerance window is negative."""


class WindowTooLarge(InvalidWindow):
    """Tolerance window is above MAX_WINDOW."""


class InvalidCounter(OTPError):
    """Counter does not fit in an unsigned 64-bit integer."""


class MacConstructionError(OTPError):
    """The HMAC-SHA1 primitive could not be initialised with the given key."""
