"""Tests for security headers middleware."""


class TestSecurityHeaders:
    """Security headers are present on every API response."""

    def test_base_headers(self, client) -> None:
        response = client.get("/api/health")
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert "strict-origin" in response.headers["Referrer-Policy"]
        assert "default-src 'none'" in response.headers["Content-Security-Policy"]

    def test_no_store_by_default(self, client) -> None:
        response = client.get("/api/communities")
        assert response.headers["Cache-Control"] == "no-store, max-age=0"

    def test_no_hsts_outside_production(self, client) -> None:
        response = client.get("/api/health")
        assert "Strict-Transport-Security" not in response.headers

    def test_headers_on_error_responses(self, client) -> None:
        response = client.get("/api/communities/unknown")
        assert response.status_code == 404
        assert response.headers["X-Content-Type-Options"] == "nosniff"

    def test_response_time_header(self, client) -> None:
        response = client.get("/api/health")
        assert response.headers["X-Response-Time"].endswith("s")
