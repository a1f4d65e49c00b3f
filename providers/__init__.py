"""
Filter provider implementations.

This package contains the gateway between the sync engine and a mail
service's filter settings, all implementing the abstract FilterProvider
interface.

Supported Providers:
    - GmailFilterProvider: Gmail API (google-api-python-client)

The Gmail provider is imported from providers.gmail directly so that the
Google client libraries load only when they are needed.
"""

from providers.base import FilterProvider

__all__ = [
    "FilterProvider",
]
