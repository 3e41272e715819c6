"""
Exception handlers for the Citadel POW server.

This package renders domain errors, request validation errors, upstream
integration failures and unhandled exceptions as JSON error envelopes.
"""

from .global_handler import setup_exception_handlers

__all__ = ["setup_exception_handlers"]
