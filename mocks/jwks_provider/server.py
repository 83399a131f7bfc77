"""
Mock key-set publisher serving JWKS documents for several providers.
"""

import copy
from typing import Dict, Any, Literal, Optional
from fastapi import FastAPI, HTTPException, Response
from pydantic import BaseModel

from shared.logging import get_logger


class ProviderBehaviour(BaseModel):
    """How a mock provider answers its certs endpoint."""

    mode: Literal["ok", "error", "malformed"] = "ok"
    status_code: int = 500


class MockJWKSProvider:
    """Mock publisher implementation."""

    def __init__(self, port: int = 8090):
        self.port = port
        self.logger = get_logger("mock.jwks_provider")
        self.app = FastAPI(title="Mock JWKS Provider", version="1.0.0")

        self.providers: Dict[str, Dict[str, Any]] = {
            "alpha": {
                "keys": [
                    {
                        "kty": "RSA",
                        "kid": "alpha-key-1",
                        "use": "sig",
                        "n": "alpha-public-key-n",
                        "e": "AQAB",
                        "alg": "RS256"
                    }
                ]
            },
            "beta": {
                "keys": [
                    {
                        "kty": "EC",
                        "kid": "beta-key-1",
                        "use": "sig",
                        "crv": "P-256",
                        "x": "beta-x",
                        "y": "beta-y",
                        "alg": "ES256"
                    }
                ]
            },
        }
        self.behaviour: Dict[str, ProviderBehaviour] = {}

        self._setup_routes()

    def set_keys(self, provider: str, keys: list) -> None:
        self.providers[provider] = {"keys": copy.deepcopy(keys)}

    def set_behaviour(self, provider: str, mode: str, status_code: int = 500) -> None:
        self.behaviour[provider] = ProviderBehaviour(mode=mode, status_code=status_code)

    def _setup_routes(self):
        """Set up mock provider routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "mock-jwks-provider",
                "providers": sorted(self.providers),
            }

        @self.app.get("/providers/{provider}/certs")
        async def certs(provider: str):
            """JWKS endpoint."""
            if provider not in self.providers:
                raise HTTPException(status_code=404, detail="Provider not found")

            behaviour: Optional[ProviderBehaviour] = self.behaviour.get(provider)
            if behaviour and behaviour.mode == "error":
                self.logger.info("Simulating provider failure", provider=provider)
                raise HTTPException(status_code=behaviour.status_code, detail="Simulated failure")
            if behaviour and behaviour.mode == "malformed":
                self.logger.info("Simulating malformed body", provider=provider)
                return Response(content=b"<html>not a key set</html>", media_type="text/html")

            return self.providers[provider]

        @self.app.put("/providers/{provider}/behaviour")
        async def update_behaviour(provider: str, behaviour: ProviderBehaviour):
            """Switch a provider between ok, error and malformed answers."""
            self.behaviour[provider] = behaviour
            return {"provider": provider, "mode": behaviour.mode}


def create_app():
    """Create mock provider application."""
    server = MockJWKSProvider()
    return server.app


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(create_app(), host="0.0.0.0", port=8090)
