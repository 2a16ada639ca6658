"""
Adapters package for the Character Service.

Contains the HTTP client wrapper for the upstream character API. The
adapter owns base URLs, response decoding and the mapping of upstream
failures onto shared errors. It does not retry.
"""

from .character_api_client import CharacterApiClient

__all__ = ["CharacterApiClient"]
