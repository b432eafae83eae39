"""Tests for health check endpoints."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

from phare_operator.health import create_combined_wsgi_app


def make_environ(path: str) -> dict:
    return {
        "REQUEST_METHOD": "GET",
        "PATH_INFO": path,
        "SCRIPT_NAME": "",
        "SERVER_NAME": "localhost",
        "SERVER_PORT": "8080",
        "wsgi.url_scheme": "http",
    }


class TestCombinedWsgiApp:
    """Test cases for combined WSGI application."""

    def test_combined_app_healthz(self):
        """Test combined app handles /healthz."""
        app = create_combined_wsgi_app()
        start_response = MagicMock()

        result = app(make_environ("/healthz"), start_response)

        assert b'"status":"ok"' in b"".join(result)
        assert "200" in start_response.call_args[0][0]

    def test_combined_app_readyz(self):
        """Test combined app handles /readyz."""
        app = create_combined_wsgi_app()
        start_response = MagicMock()

        result = app(make_environ("/readyz"), start_response)

        assert b'"status":"ready"' in b"".join(result)

    def test_content_type_is_json(self):
        """Test that content type is application/json."""
        app = create_combined_wsgi_app()
        start_response = MagicMock()

        app(make_environ("/healthz"), start_response)

        headers = start_response.call_args[0][1]
        content_type_header = [h for h in headers if h[0].lower() == "content-type"]
        assert len(content_type_header) > 0
        assert "application/json" in content_type_header[0][1]

    @patch("phare_operator.health.make_wsgi_app")
    def test_combined_app_delegates_to_metrics(self, mock_make_wsgi):
        """Test combined app delegates /metrics to prometheus."""
        mock_metrics_app = MagicMock(return_value=[b"metrics data"])
        mock_make_wsgi.return_value = mock_metrics_app
        app = create_combined_wsgi_app()

        result = app(make_environ("/metrics"), MagicMock())

        assert mock_metrics_app.called
        assert result == [b"metrics data"]

    def test_metrics_endpoint_serves_operator_metrics(self):
        """Test that the real metrics endpoint exposes operator metrics."""
        app = create_combined_wsgi_app()

        result = app(make_environ("/metrics"), MagicMock())

        assert b"phare_operator_reconcile_total" in b"".join(result)
