import base64
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from tests.vectors import RFC_SEED  # noqa: E402


@pytest.fixture
def rfc_secret():
    """The RFC test seed as an unpadded RFC 4648 base32 string."""
    return base64.b32encode(RFC_SEED).decode("ascii").rstrip("=")


@pytest.fixture
def app():
    from authenticator_api import create_app
    from authenticator_api.config import TestConfig

    return create_app(TestConfig)


@pytest.fixture
def client(app):
    return app.test_client()
