"""Clients for the Polarity REST API."""

from polarity_bot.api.base import LookupClient
from polarity_bot.api.polarity import PolarityClient, sanitize_headers

__all__ = [
    "LookupClient",
    "PolarityClient",
    "sanitize_headers",
]
