"""Tests for logging helpers."""

import structlog

from catalog_sync.infra.logging import SERVICE_NAME, add_service_context, intent_context


class TestLoggingHelpers:
    def test_service_context_added(self):
        event = add_service_context(None, "info", {"event": "Cache hit"})

        assert event["service"] == SERVICE_NAME
        assert "environment" in event

    def test_service_context_does_not_override(self):
        event = add_service_context(None, "info", {"event": "x", "service": "other"})

        assert event["service"] == "other"

    def test_intent_context_binds_and_clears(self):
        with intent_context("next-page", method="POST"):
            bound = structlog.contextvars.get_contextvars()
            assert bound["intent"] == "next-page"
            assert bound["method"] == "POST"

        assert "intent" not in structlog.contextvars.get_contextvars()
