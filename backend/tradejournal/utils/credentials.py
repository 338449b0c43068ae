"""
Backend credential checks.

The only properties validated for the hosted backend credentials are presence
and a JWT-like shape: three dot-separated base64url segments whose header
carries ``alg``/``typ`` and whose payload carries ``iss``/``exp``.
"""

import base64
import binascii
import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from loguru import logger

from tradejournal.utils.errors import ConfigurationError


@dataclass
class JWTFormatResult:
    valid: bool
    error: Optional[str] = None
    header: Dict[str, Any] = field(default_factory=dict)
    payload: Dict[str, Any] = field(default_factory=dict)


def _decode_segment(segment: str) -> Dict[str, Any]:
    padded = segment + "=" * (-len(segment) % 4)
    decoded = json.loads(base64.urlsafe_b64decode(padded.encode("ascii")))
    if not isinstance(decoded, dict):
        raise ValueError("segment is not a JSON object")
    return decoded


def validate_jwt_format(token: Optional[str]) -> JWTFormatResult:
    """Check that ``token`` looks like a signed JWT. The signature is not verified."""
    if not token or not isinstance(token, str):
        return JWTFormatResult(valid=False, error="Token is missing or not a string")

    parts = token.split(".")
    if len(parts) != 3:
        return JWTFormatResult(valid=False, error="JWT must have 3 parts separated by dots")

    try:
        header = _decode_segment(parts[0])
        payload = _decode_segment(parts[1])
    except (ValueError, UnicodeError, binascii.Error) as e:
        return JWTFormatResult(valid=False, error=f"JWT parsing failed: {e}")

    if not header.get("alg") or not header.get("typ"):
        return JWTFormatResult(valid=False, error="JWT header missing required fields")
    if not payload.get("iss") or not payload.get("exp"):
        return JWTFormatResult(valid=False, error="JWT payload missing required fields")

    return JWTFormatResult(valid=True, header=header, payload=payload)


def check_backend_credentials(settings) -> Dict[str, Dict[str, Any]]:
    """
    Build a report of the configured backend credentials.

    Returns a mapping of credential name to ``{"present": bool, "valid": bool,
    "error": str | None}``. Secret values are never included.
    """
    report: Dict[str, Dict[str, Any]] = {
        "backend_url": {
            "present": bool(settings.backend_url),
            "valid": bool(settings.backend_url),
            "error": None if settings.backend_url else "Backend URL is not set",
        }
    }

    for name in ("backend_anon_key", "backend_service_role_key"):
        value = getattr(settings, name)
        result = validate_jwt_format(value)
        report[name] = {
            "present": bool(value),
            "valid": result.valid,
            "error": result.error,
        }

    return report


def log_credential_report(settings) -> Dict[str, Dict[str, Any]]:
    """Log the credential report at start-up and return it."""
    report = check_backend_credentials(settings)
    for name, entry in report.items():
        if entry["valid"]:
            logger.info(f"Backend credential {name} OK")
        else:
            logger.warning(f"Backend credential {name} invalid: {entry['error']}")
    return report


def require_backend_credentials(settings, include_service_role: bool = False) -> None:
    """Raise ConfigurationError if the credentials a caller needs are unusable."""
    report = check_backend_credentials(settings)
    required = ["backend_url", "backend_anon_key"]
    if include_service_role:
        required.append("backend_service_role_key")

    problems = {name: report[name]["error"] for name in required if not report[name]["valid"]}
    if problems:
        raise ConfigurationError("Backend credentials are missing or malformed", details=problems)
