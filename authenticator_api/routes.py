"""
OTP API ROUTES - FLASK BLUEPRINT

Endpoints:
- GET  /api/otp/secret    : new secret + otpauth URI + QR code
- POST /api/otp/generate  : current token for a secret
- POST /api/otp/validate  : check a token against a secret

Examples:
curl http://localhost:5000/api/otp/secret
curl -X POST http://localhost:5000/api/otp/generate -H "Content-Type: application/json" -d '{"secret": "JBSWY3DPEHPK3PXP"}'
curl -X POST http://localhost:5000/api/otp/validate -H "Content-Type: application/json" -d '{"secret": "JBSWY3DPEHPK3PXP", "token": "123456"}'

OTP core errors (bad secret, digits > 9, window > 10, ...) are turned into
400 responses by the handlers registered in app.py.
"""
import base64
import io
import logging

import qrcode
from qrcode.exceptions import DataOverflowError
from flask import Blueprint, current_app, jsonify, request
from werkzeug.exceptions import BadRequest

from authenticator import (
    OTPConfig,
    format_otpauth_uri,
    generate_otp,
    generate_secret,
    seconds_remaining,
    validate_otp,
)

log = logging.getLogger(__name__)

# Longest secret source accepted by /api/otp/secret; its URI fits a QR code
MAX_SECRET_LENGTH = 256

otp_bp = Blueprint('otp', __name__)


@otp_bp.route('/', methods=['GET'])
@otp_bp.route('/index.html', methods=['GET'])
def index():
    return "Authenticator!"


@otp_bp.route('/api/otp/secret', methods=['GET'])
def create_secret():
    """
    CREATE A NEW SECRET

      curl "http://localhost:5000/api/otp/secret?account=alice@example.com&issuer=MyApp"

    Query parameters (all optional):
      length: random characters before base32 encoding (default 32, 0..256)
      account: account label (default OTP_ACCOUNT)
      issuer: issuer label (default OTP_ISSUER)
    """
    length = _int_value(request.args, 'length')
    if length is not None and not 0 <= length <= MAX_SECRET_LENGTH:
        raise BadRequest(f"'length' must be between 0 and {MAX_SECRET_LENGTH}")
    account = request.args.get('account', current_app.config["OTP_ACCOUNT"])
    issuer = request.args.get('issuer', current_app.config["OTP_ISSUER"])
    config = current_app.config["OTP_CONFIG"]

    secret = generate_secret() if length is None else generate_secret(length)
    uri = format_otpauth_uri(secret, account, issuer, digits=config.digits, period=config.period)
    log.info("Generated secret for issuer=%s", issuer)

    return jsonify({
        "secret": secret,
        "uri": uri,
        "qr_code": _qr_data_uri(uri),
    }), 201


@otp_bp.route('/api/otp/generate', methods=['POST'])
def generate():
    """
    GENERATE A TOKEN

    Input (JSON body):
      {
        "secret": "JBSWY3DPEHPK3PXP",  # required
        "counter": 1,                  # optional, HOTP counter instead of the clock
        "digits": 6,                   # optional
        "period": 30                   # optional
      }

    Output (201):
      {"token": "123456", "period": 30, "remaining": 17}
    """
    data = _json_body()
    secret = _str_value(data, 'secret')
    counter = _int_value(data, 'counter')
    config = _otp_config(data, ('digits', 'period'))

    token = generate_otp(secret, counter=counter, config=config)
    return jsonify({
        "token": token,
        "period": config.period,
        "remaining": seconds_remaining(config.period),
    }), 201


@otp_bp.route('/api/otp/validate', methods=['POST'])
def validate():
    """
    VALIDATE A TOKEN

    Input (JSON body):
      {
        "secret": "JBSWY3DPEHPK3PXP",  # required
        "token": "123456",             # required
        "counter": 1,                  # optional
        "period": 30,                  # optional
        "window": 1                    # optional, max 10
      }

    Output (200):
      {"is_valid": true, "period": 30, "message": "OTP is valid"}
    A token that does not match is still a 200 with is_valid = false.
    """
    data = _json_body()
    secret = _str_value(data, 'secret')
    token = _str_value(data, 'token')
    counter = _int_value(data, 'counter')
    config = _otp_config(data, ('period', 'window'))

    is_valid = validate_otp(token, secret, counter=counter, config=config)
    log.info("OTP validation %s", "succeeded" if is_valid else "failed")
    return jsonify({
        "is_valid": is_valid,
        "period": config.period,
        "message": "OTP is valid" if is_valid else "OTP is invalid",
    })


# --- Request helpers ---
def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise BadRequest("JSON object body is required")
    return data


def _str_value(data, name: str) -> str:
    value = data.get(name)
    if not isinstance(value, str):
        raise BadRequest(f"'{name}' is required and must be a string")
    return value


def _int_value(data, name: str):
    """Return data[name] as int, None when absent. Query strings are parsed."""
    value = data.get(name)
    if value is None:
        return None
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            raise BadRequest(f"'{name}' must be an integer") from None
    if isinstance(value, bool) or not isinstance(value, int):
        raise BadRequest(f"'{name}' must be an integer")
    return value


def _otp_config(data, fields) -> OTPConfig:
    overrides = {name: _int_value(data, name) for name in fields}
    return OTPConfig.from_mapping(overrides, base=current_app.config["OTP_CONFIG"])


def _qr_data_uri(uri: str) -> str:
    """Render the otpauth URI as a base64 PNG data URI."""
    qr = qrcode.QRCode(version=1, box_size=10, border=5)
    qr.add_data(uri)
    try:
        qr.make(fit=True)
    except (ValueError, DataOverflowError):
        raise BadRequest("otpauth URI is too long for a QR code") from None
    img = qr.make_image(fill_color="black", back_color="white")

    buffer = io.BytesIO()
    img.save(buffer, format='PNG')
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode()
