"""
Unit tests for service configuration and error types.
"""

import json

import pytest
from pydantic import ValidationError

from shared.config import get_config
from shared.errors import DecodeFailedError, FetchFailedError, ExternalServiceError
from shared.logging import clear_context, set_request_id


class TestServiceConfig:
    """Test cases for ServiceConfig."""

    def test_defaults(self, monkeypatch):
        """Defaults poll Google and Microsoft every minute."""
        monkeypatch.delenv("JWKS_SOURCES", raising=False)
        monkeypatch.delenv("JWKS_REFRESH_SCHEDULE", raising=False)

        config = get_config("jwks", 8020)

        assert config.service_name == "jwks"
        assert config.port == 8020
        assert config.refresh_schedule == "* * * * *"
        assert config.http_timeout == 10.0
        assert list(config.sources) == ["google", "microsoft"]
        assert config.sources["microsoft"].url == "https://login.microsoftonline.com/common/discovery/v2.0/keys"

    def test_env_overrides(self, monkeypatch):
        """Sources and schedule can be set through JWKS_* variables."""
        monkeypatch.setenv("JWKS_REFRESH_SCHEDULE", "*/5 * * * *")
        monkeypatch.setenv("JWKS_HTTP_TIMEOUT", "2.5")
        monkeypatch.setenv("JWKS_SOURCES", json.dumps({
            "okta": {"name": "okta-jwks-api", "url": "https://okta.test/keys"},
        }))

        config = get_config("jwks", 8020)

        assert config.refresh_schedule == "*/5 * * * *"
        assert config.http_timeout == 2.5
        assert list(config.sources) == ["okta"]
        assert config.sources["okta"].name == "okta-jwks-api"

    def test_invalid_schedule_rejected(self):
        """A malformed crontab fails at load time."""
        with pytest.raises(ValidationError):
            get_config("jwks", 8020, refresh_schedule="every minute")

    def test_non_positive_timeout_rejected(self):
        """HTTP timeout must be positive."""
        with pytest.raises(ValidationError):
            get_config("jwks", 8020, http_timeout=0)


class TestFetchErrors:
    """Test cases for the fetch error taxonomy."""

    def test_fetch_failed(self):
        """FetchFailedError carries source and cause."""
        cause = ConnectionError("refused")
        error = FetchFailedError("google", cause)

        assert isinstance(error, ExternalServiceError)
        assert error.code == "FETCH_FAILED"
        assert error.source == "google"
        assert error.cause is cause
        assert error.message == "google: failed to get jwks: refused"
        assert error.details == {"source": "google", "cause": "ConnectionError"}

    def test_decode_failed_response(self):
        """to_response carries the current request id."""
        set_request_id("req-1")
        try:
            response = DecodeFailedError("microsoft", ValueError("bad json")).to_response()
        finally:
            clear_context()

        assert response.request_id == "req-1"
        assert response.code == "DECODE_FAILED"
        assert response.message.startswith("microsoft: failed to deserialize response")
