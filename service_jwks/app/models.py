"""
Key set models shared by the fetcher, the snapshot store and the reader.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Iterable, Tuple

from pydantic import BaseModel, ConfigDict, field_validator


# Always emitted, even when empty
IDENTITY_FIELDS = ("kty", "use", "alg", "kid")
# Emitted only when the key type uses them
ALGORITHM_FIELDS = ("n", "e", "crv", "x", "y", "d")


class JWK(BaseModel):
    """One published key. Every member is an opaque string."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    kty: str = ""
    use: str = ""
    alg: str = ""
    kid: str = ""
    n: str = ""
    e: str = ""
    crv: str = ""
    x: str = ""
    y: str = ""
    d: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _null_member(cls, value: Any) -> Any:
        # null members decode like absent ones
        return "" if value is None else value

    def to_dict(self) -> Dict[str, str]:
        """Wire form: identity members plus the non-empty algorithm members."""
        data = {name: getattr(self, name) for name in IDENTITY_FIELDS}
        for name in ALGORITHM_FIELDS:
            value = getattr(self, name)
            if value:
                data[name] = value
        return data


KeySet = Tuple[JWK, ...]


class JWKS(BaseModel):
    """A `{"keys": [...]}` document as published upstream."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    keys: KeySet = ()

    @field_validator("keys", mode="before")
    @classmethod
    def _null_keys(cls, value: Any) -> Any:
        return () if value is None else value


def render_jwks(keys: Iterable[JWK]) -> bytes:
    """Serialize keys to the compact JSON body served on /jwks."""
    payload = {"keys": [key.to_dict() for key in keys]}
    return json.dumps(payload, separators=(",", ":")).encode("utf-8")
