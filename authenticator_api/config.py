import os
from dotenv import load_dotenv

# Load .env before the Flask app reads its configuration
load_dotenv()


class Config:
    HOST = os.environ.get("HOST", "0.0.0.0")
    PORT = int(os.environ.get("PORT", "5000"))
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

    # Labels shown by authenticator apps
    OTP_ISSUER = os.environ.get("OTP_ISSUER", "Authenticator")
    OTP_ACCOUNT = os.environ.get("OTP_ACCOUNT", "")

    # Defaults for requests that do not specify them
    OTP_DIGITS = int(os.environ.get("OTP_DIGITS", "6"))
    OTP_PERIOD = int(os.environ.get("OTP_PERIOD", "30"))
    OTP_WINDOW = int(os.environ.get("OTP_WINDOW", "1"))


class TestConfig(Config):
    TESTING = True
    OTP_ISSUER = "TestIssuer"
    OTP_ACCOUNT = "alice@example.com"
    OTP_DIGITS = 6
    OTP_PERIOD = 30
    OTP_WINDOW = 1
