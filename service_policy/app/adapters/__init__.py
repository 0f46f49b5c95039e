"""
Adapters package for the policy provider.

Contains the HTTP client wrapper for the Crosswire integrations API.
The adapter encapsulates:

- Base URL, endpoint paths and the ``Token`` credential header
- Trace ID extraction from ``X-Request-Id``
- Error handling that maps to shared errors

Keep adapters thin and side-effect free outside of explicit calls.
"""

from .crosswire_client import CrosswireClient

__all__ = [
    "CrosswireClient",
]
