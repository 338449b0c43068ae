"""
Backend Credential Tests

Presence and JWT-like shape are the only properties checked for the hosted
backend credentials. Secret values never appear in the report.
"""

import base64
import json

import pytest

from tradejournal.config import Settings
from tradejournal.utils.credentials import (
    check_backend_credentials,
    require_backend_credentials,
    validate_jwt_format,
)
from tradejournal.utils.errors import ConfigurationError


def _segment(data) -> str:
    raw = json.dumps(data).encode()
    return base64.urlsafe_b64encode(raw).decode().rstrip("=")


def _jwt(header=None, payload=None) -> str:
    header = {"alg": "HS256", "typ": "JWT"} if header is None else header
    payload = {"iss": "journal", "exp": 4102444800, "role": "anon"} if payload is None else payload
    return f"{_segment(header)}.{_segment(payload)}.signature"


class TestValidateJWTFormat:
    def test_well_formed(self):
        result = validate_jwt_format(_jwt())

        assert result.valid
        assert result.error is None
        assert result.payload["role"] == "anon"

    @pytest.mark.parametrize("token", [None, ""])
    def test_missing(self, token):
        result = validate_jwt_format(token)

        assert not result.valid
        assert result.error == "Token is missing or not a string"

    def test_wrong_part_count(self):
        assert validate_jwt_format("a.b").error == "JWT must have 3 parts separated by dots"

    def test_undecodable(self):
        result = validate_jwt_format("not-json.still-not-json.sig")

        assert not result.valid
        assert result.error.startswith("JWT parsing failed")

    def test_header_fields_required(self):
        result = validate_jwt_format(_jwt(header={"alg": "HS256"}))

        assert result.error == "JWT header missing required fields"

    def test_payload_fields_required(self):
        result = validate_jwt_format(_jwt(payload={"iss": "journal"}))

        assert result.error == "JWT payload missing required fields"


class TestCredentialReport:
    def test_all_present(self):
        settings = Settings(
            backend_url="https://journal.example.com",
            backend_anon_key=_jwt(),
            backend_service_role_key=_jwt(),
        )
        report = check_backend_credentials(settings)

        assert all(entry["present"] and entry["valid"] for entry in report.values())
        assert _jwt() not in json.dumps(report)

    def test_missing_values_reported(self):
        settings = Settings(backend_url="", backend_anon_key="", backend_service_role_key="abc")
        report = check_backend_credentials(settings)

        assert report["backend_url"]["present"] is False
        assert report["backend_anon_key"]["valid"] is False
        assert report["backend_service_role_key"]["present"] is True
        assert report["backend_service_role_key"]["valid"] is False

    def test_env_names_of_the_web_client(self, monkeypatch):
        monkeypatch.setenv("NEXT_PUBLIC_SUPABASE_URL", "https://journal.example.com")
        monkeypatch.setenv("NEXT_PUBLIC_SUPABASE_ANON_KEY", _jwt())

        settings = Settings()

        assert settings.backend_url == "https://journal.example.com"
        assert validate_jwt_format(settings.backend_anon_key).valid

    def test_require_raises_with_details(self):
        settings = Settings(backend_url="https://journal.example.com", backend_anon_key="", backend_service_role_key="")

        with pytest.raises(ConfigurationError) as exc_info:
            require_backend_credentials(settings)

        assert "backend_anon_key" in exc_info.value.details
        assert "backend_url" not in exc_info.value.details

    def test_require_service_role_optional(self):
        settings = Settings(backend_url="https://journal.example.com", backend_anon_key=_jwt(), backend_service_role_key="")

        require_backend_credentials(settings)
        with pytest.raises(ConfigurationError):
            require_backend_credentials(settings, include_service_role=True)
