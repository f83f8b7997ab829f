"""Checkout wizard service.

A multi-step checkout (account, shipping, payment, completion) with
step validation endpoints and a server-side wizard orchestrator.
"""

__version__ = "0.1.0"
