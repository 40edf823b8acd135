"""
ledger_api -- HTTP surface for the ledger.

Thin FastAPI layer: parses requests into kernel commands, resolves the
acting user from the ``X-User-Id`` header, runs each request in one unit
of work, and wraps every result or error in the response envelope
``{statusCode, success, message, data, errors}``.
"""

from ledger_api.app import create_app

__all__ = ["create_app"]
