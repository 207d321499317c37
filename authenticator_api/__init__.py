"""
Flask HTTP API for the authenticator OTP core.
"""

from .app import create_app

__all__ = ['create_app']
