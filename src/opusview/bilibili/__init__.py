"""Bilibili integration for Opusview.

This package provides the Bilibili web API client and response types.
"""

from .client import BilibiliClient, create_http_client

__all__ = ['BilibiliClient', 'create_http_client']
