"""Logging Configuration Tests"""

import logging

from tradejournal.log_config import InterceptHandler, redact_secrets


class TestRedaction:
    def test_redacts_sensitive_keys(self):
        event = {"event": "login", "email": "trader@example.com", "access_token": "abc", "user_id": 3}

        redacted = redact_secrets(None, "info", event)

        assert redacted["email"] == "[REDACTED]"
        assert redacted["access_token"] == "[REDACTED]"
        assert redacted["user_id"] == 3
        assert redacted["event"] == "login"

    def test_key_match_ignores_case(self):
        assert redact_secrets(None, "info", {"X-ApiKey": "k"})["X-ApiKey"] == "[REDACTED]"


class TestStdlibForwarding:
    def test_root_logger_forwards_to_loguru(self):
        assert any(isinstance(h, InterceptHandler) for h in logging.getLogger().handlers)
