"""
HTTP transport for link probes.
"""

from .http_client import HTTPClient, FetchResponse, DEFAULT_USER_AGENT

__all__ = [
    'HTTPClient',
    'FetchResponse',
    'DEFAULT_USER_AGENT'
]
