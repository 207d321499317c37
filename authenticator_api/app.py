"""
FLASK APP ENTRY POINT - AUTHENTICATOR OTP SERVER
================================================

Builds the Flask app, enables CORS and registers the OTP routes.

Main features
- Application factory (create_app) so tests can build isolated apps
- CORS enabled for frontend integration
- OTP defaults (digits / period / window) validated once at startup
- JSON error responses for every OTP core error
"""
import logging

from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from authenticator import OTPConfig
from authenticator.exceptions import MacConstructionError, OTPError

from .config import Config
from .routes import otp_bp

log = logging.getLogger(__name__)


def create_app(config_object=None) -> Flask:
    """
    Create and configure the Flask app.

    Arguments:
        config_object: class or object passed to app.config.from_object
            (Config when None)
    """
    app = Flask(__name__)
    app.config.from_object(config_object or Config)

    # Fails fast on a misconfigured environment (e.g. OTP_WINDOW=20)
    app.config["OTP_CONFIG"] = OTPConfig(
        digits=app.config["OTP_DIGITS"],
        period=app.config["OTP_PERIOD"],
        window=app.config["OTP_WINDOW"],
    )

    # Allow a frontend served from another origin to call the API
    CORS(app)

    app.register_blueprint(otp_bp)
    _register_error_handlers(app)
    return app


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(MacConstructionError)
    def handle_mac_error(e):
        log.error("HMAC construction failed: %s", e)
        return jsonify({"error": str(e)}), 500

    @app.errorhandler(OTPError)
    def handle_otp_error(e):
        return jsonify({"error": str(e)}), 400

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({"error": e.description}), e.code


def main():
    """Run the development server on HOST:PORT."""
    logging.basicConfig(
        level=Config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = create_app()
    log.info("starting HTTP server at http://%s:%d", Config.HOST, Config.PORT)
    app.run(host=Config.HOST, port=Config.PORT)


if __name__ == "__main__":
    main()
