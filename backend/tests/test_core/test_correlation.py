"""Tests for correlation ID generation and context management."""

import re

from core.correlation import (
    correlation_id_var,
    generate_correlation_id,
    get_correlation_id,
    resolve_correlation_id,
    set_correlation_id,
)


class TestGenerateCorrelationId:
    """Tests for generate_correlation_id function."""

    def test_returns_8_lowercase_hex_characters(self) -> None:
        """Short enough to read out over the phone."""
        correlation_id = generate_correlation_id()
        assert re.match(r"^[0-9a-f]{8}$", correlation_id)

    def test_generates_unique_ids(self) -> None:
        ids = {generate_correlation_id() for _ in range(1000)}
        assert len(ids) == 1000


class TestCorrelationIdContext:
    """Tests for correlation ID context management."""

    def test_set_and_get_correlation_id(self) -> None:
        set_correlation_id("abc12345")
        assert get_correlation_id() == "abc12345"

    def test_get_returns_empty_string_when_not_set(self) -> None:
        correlation_id_var.set("")
        assert get_correlation_id() == ""


class TestResolveCorrelationId:
    """Tests for reusing the frontend's X-Correlation-ID."""

    def test_reuses_sane_incoming_id(self) -> None:
        assert resolve_correlation_id("web-1a2b3c") == "web-1a2b3c"

    def test_generates_when_missing(self) -> None:
        assert re.match(r"^[0-9a-f]{8}$", resolve_correlation_id(None))
        assert re.match(r"^[0-9a-f]{8}$", resolve_correlation_id(""))

    def test_rejects_ids_with_unsafe_characters(self) -> None:
        """Incoming IDs end up in logs and headers."""
        resolved = resolve_correlation_id("abc\nINFO forged line")
        assert resolved != "abc\nINFO forged line"
        assert len(resolved) == 8

    def test_rejects_overlong_ids(self) -> None:
        resolved = resolve_correlation_id("a" * 65)
        assert len(resolved) == 8


class TestCorrelationIdHeader:
    """The API echoes the correlation ID on every response."""

    def test_response_carries_generated_id(self, client) -> None:
        response = client.get("/api/health")
        assert response.status_code == 200
        assert re.match(r"^[0-9a-f]{8}$", response.headers["X-Correlation-ID"])

    def test_response_echoes_incoming_id(self, client) -> None:
        response = client.get("/api/health", headers={"X-Correlation-ID": "req-42"})
        assert response.headers["X-Correlation-ID"] == "req-42"

    def test_error_body_matches_header(self, client) -> None:
        response = client.get(
            "/api/communities/missing", headers={"X-Correlation-ID": "trace-404"}
        )
        assert response.status_code == 404
        assert response.json()["correlation_id"] == "trace-404"
        assert response.headers["X-Correlation-ID"] == "trace-404"
