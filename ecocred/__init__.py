# ecocred/__init__.py
"""EcoCred carbon-credit ledger and verification service."""

__version__ = "1.0.0"
