"""
Integration tests for the Flask OTP API.
"""

from unittest import mock

import pytest

from authenticator import OTPConfig, decode_secret, generate_otp
from authenticator.exceptions import WindowTooLarge


class TestIndex:

    @pytest.mark.parametrize("path", ["/", "/index.html"])
    def test_index(self, client, path):
        response = client.get(path)
        assert response.status_code == 200
        assert response.get_data(as_text=True) == "Authenticator!"

    def test_unknown_route_is_json(self, client):
        response = client.get("/nope")
        assert response.status_code == 404
        assert "error" in response.get_json()


class TestSecretEndpoint:

    def test_create_secret(self, client):
        response = client.get("/api/otp/secret")
        assert response.status_code == 201
        body = response.get_json()
        assert len(decode_secret(body["secret"])) == 32
        assert body["uri"] == (
            f"otpauth://totp/TestIssuer:alice@example.com?secret={body['secret']}"
            "&algorithm=SHA1&digits=6&period=30"
        )
        assert body["qr_code"].startswith("data:image/png;base64,")

    def test_query_overrides(self, client):
        response = client.get("/api/otp/secret?length=20&issuer=ACME&account=")
        body = response.get_json()
        assert len(decode_secret(body["secret"])) == 20
        assert body["uri"].startswith("otpauth://totp/ACME?secret=")

    def test_bad_length(self, client):
        response = client.get("/api/otp/secret?length=abc")
        assert response.status_code == 400
        assert "length" in response.get_json()["error"]

    def test_longest_length(self, client):
        response = client.get("/api/otp/secret?length=256")
        assert response.status_code == 201
        assert len(decode_secret(response.get_json()["secret"])) == 256

    @pytest.mark.parametrize("length", ["257", "5000", "-1"])
    def test_length_out_of_range(self, client, length):
        response = client.get(f"/api/otp/secret?length={length}")
        assert response.status_code == 400
        assert "length" in response.get_json()["error"]

    def test_uri_too_long_for_qr_code(self, client):
        response = client.get("/api/otp/secret", query_string={"issuer": "A" * 4000})
        assert response.status_code == 400
        assert "QR code" in response.get_json()["error"]


class TestGenerateEndpoint:

    def test_generate_with_counter(self, client, rfc_secret):
        response = client.post("/api/otp/generate", json={"secret": rfc_secret, "counter": 1})
        assert response.status_code == 201
        body = response.get_json()
        assert body["token"] == "287082"
        assert body["period"] == 30
        assert 1 <= body["remaining"] <= 30

    def test_generate_from_clock(self, client, rfc_secret):
        with mock.patch("authenticator.otp_core.time.time", return_value=59.0):
            response = client.post(
                "/api/otp/generate",
                json={"secret": rfc_secret, "digits": 8},
            )
        body = response.get_json()
        assert body["token"] == "94287082"
        assert body["remaining"] == 1

    def test_digits_too_large(self, client, rfc_secret):
        response = client.post("/api/otp/generate", json={"secret": rfc_secret, "digits": 10})
        assert response.status_code == 400
        assert "digits" in response.get_json()["error"]

    def test_bad_secret(self, client):
        response = client.post("/api/otp/generate", json={"secret": "not base32!"})
        assert response.status_code == 400

    def test_missing_secret(self, client):
        response = client.post("/api/otp/generate", json={})
        assert response.status_code == 400
        assert "secret" in response.get_json()["error"]

    def test_body_must_be_json(self, client):
        response = client.post("/api/otp/generate", data="secret", content_type="text/plain")
        assert response.status_code == 400

    def test_counter_must_be_integer(self, client, rfc_secret):
        response = client.post("/api/otp/generate", json={"secret": rfc_secret, "counter": 1.5})
        assert response.status_code == 400


class TestValidateEndpoint:

    def test_valid_token(self, client, rfc_secret):
        response = client.post(
            "/api/otp/validate",
            json={"secret": rfc_secret, "token": "287082", "counter": 2},
        )
        assert response.status_code == 200
        assert response.get_json() == {"is_valid": True, "period": 30, "message": "OTP is valid"}

    def test_invalid_token_is_not_an_error(self, client, rfc_secret):
        response = client.post(
            "/api/otp/validate",
            json={"secret": rfc_secret, "token": "287082", "counter": 5},
        )
        assert response.status_code == 200
        assert response.get_json() == {"is_valid": False, "period": 30, "message": "OTP is invalid"}

    def test_current_token(self, client):
        secret = client.get("/api/otp/secret").get_json()["secret"]
        token = generate_otp(secret)
        response = client.post("/api/otp/validate", json={"secret": secret, "token": token})
        assert response.get_json()["is_valid"] is True

    def test_window_too_large(self, client, rfc_secret):
        response = client.post(
            "/api/otp/validate",
            json={"secret": rfc_secret, "token": "287082", "window": 11},
        )
        assert response.status_code == 400
        assert "window" in response.get_json()["error"]

    def test_wider_window(self, client, rfc_secret):
        token = generate_otp(rfc_secret, counter=100)
        response = client.post(
            "/api/otp/validate",
            json={"secret": rfc_secret, "token": token, "counter": 103, "window": 3},
        )
        assert response.get_json()["is_valid"] is True

    def test_missing_token(self, client, rfc_secret):
        response = client.post("/api/otp/validate", json={"secret": rfc_secret})
        assert response.status_code == 400

    def test_mac_failure_is_500(self, client, rfc_secret):
        with mock.patch("authenticator.otp_core.hmac.new", side_effect=TypeError("bad key")):
            response = client.post(
                "/api/otp/validate",
                json={"secret": rfc_secret, "token": "287082", "counter": 1},
            )
        assert response.status_code == 500


class TestAppConfig:

    def test_otp_defaults_are_validated(self):
        from authenticator_api import create_app
        from authenticator_api.config import TestConfig

        class BadConfig(TestConfig):
            OTP_WINDOW = 20

        with pytest.raises(WindowTooLarge):
            create_app(BadConfig)

    def test_otp_config_from_settings(self, app):
        assert app.config["OTP_CONFIG"] == OTPConfig(digits=6, period=30, window=1)
