"""Published RFC test data shared by the test modules."""

# RFC 4226 Appendix D / RFC 6238 Appendix B SHA-1 seed
RFC_SEED = b"12345678901234567890"

RFC4226_HOTP = [
    "755224", "287082", "359152", "969429", "338314",
    "254676", "287922", "162583", "399871", "520489",
]

RFC6238_TOTP_SHA1 = [
    (59, "94287082"),
    (1111111109, "07081804"),
    (1111111111, "14050471"),
    (1234567890, "89005924"),
    (2000000000, "69279037"),
    (20000000000, "65353130"),
]
