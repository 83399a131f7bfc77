"""
JWKS fetcher package.

Retrieves one publisher's JSON Web Key Set and decodes it into key models.

Key points:
- One GET per call; no retries and no caching here.
- Transport problems raise FetchFailedError, bad payloads DecodeFailedError.
- Key material is never interpreted, only carried.
"""

from .fetcher import JWKSFetcher

__all__ = ["JWKSFetcher"]
