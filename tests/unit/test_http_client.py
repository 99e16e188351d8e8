"""Tests for the backend HTTP client."""
import pytest
import requests
from unittest.mock import patch

from counsel_booking.circuit_breaker import CircuitBreaker
from counsel_booking.errors import (
    BackendError,
    CircuitOpenError,
    ConflictError,
    NetworkError,
    NotFoundError,
)
from counsel_booking.http_client import BackendClient, create_http_session


class TestReadRetries:
    """GET requests retry on connection-level failures."""

    def test_retries_on_connection_error(self, client):
        with patch("requests.Session.request") as mock_request:
            mock_request.side_effect = requests.exceptions.ConnectionError("Connection failed")

            with pytest.raises(NetworkError) as exc_info:
                client.get("schedules")

            # 1 initial + 3 retries
            assert mock_request.call_count == 4
            assert exc_info.value.message == "Network error - please check your connection"

    def test_retries_on_timeout(self, client):
        with patch("requests.Session.request") as mock_request:
            mock_request.side_effect = requests.exceptions.Timeout("Request timeout")

            with pytest.raises(NetworkError):
                client.get("schedules")

            assert mock_request.call_count == 4

    def test_success_on_second_attempt(self, client, make_response):
        with patch("requests.Session.request") as mock_request:
            mock_request.side_effect = [
                requests.exceptions.ConnectionError("Failed"),
                make_response(200, [{"id": 1}]),
            ]

            assert client.get("schedules") == [{"id": 1}]
            assert mock_request.call_count == 2


class TestWritesAreNotRetried:

    def test_post_attempted_once(self, client):
        with patch("requests.Session.request") as mock_request:
            mock_request.side_effect = requests.exceptions.ConnectionError("Failed")

            with pytest.raises(NetworkError):
                client.post("appointment", json={"slotId": 1})

            assert mock_request.call_count == 1


class TestResponses:
    """Response decoding and error mapping."""

    def test_decodes_json(self, client, backend, make_response):
        backend.add("GET", "slot", make_response(200, [{"id": 1}]))

        assert client.get("slot") == [{"id": 1}]

    def test_empty_body_is_none(self, client, backend, make_response):
        backend.add("DELETE", "blogs/1", make_response(204))

        assert client.delete("blogs/1") is None

    def test_text_body_returned_as_text(self, client, backend, make_response):
        backend.add("PUT", "accounts/1/avatar", make_response(200, text="updated"))

        assert client.put("accounts/1/avatar", data=b"http://img") == "updated"

    def test_conflict_maps_to_conflict_error(self, client, backend, make_response):
        backend.add("POST", "appointment", make_response(409, {"message": "Slot already booked"}))

        with pytest.raises(ConflictError) as exc_info:
            client.post("appointment", json={})

        assert exc_info.value.message == "Slot already booked"
        assert exc_info.value.status_code == 409

    def test_not_found(self, client, backend, make_response):
        backend.add("GET", "blogs/9", make_response(404, {"message": "Blog missing"}))

        with pytest.raises(NotFoundError, match="Blog missing"):
            client.get("blogs/9")

    def test_missing_message_uses_fallback(self, client, backend, make_response):
        backend.add("GET", "schedules", make_response(500, {"error": "boom"}))

        with pytest.raises(BackendError) as exc_info:
            client.get("schedules")

        assert exc_info.value.message == "Server error occurred"

    def test_unexpected_request_failure(self, client):
        with patch("requests.Session.request") as mock_request:
            mock_request.side_effect = requests.exceptions.InvalidURL("bad url")

            with pytest.raises(NetworkError, match="unexpected"):
                client.get("schedules")


class TestRequestDetails:

    def test_url_and_headers(self, client, backend, make_response):
        backend.add("GET", "schedules/consultant/5", make_response(200, []))

        client.get("/schedules/consultant/5")

        call = backend.calls_to("GET", "schedules/consultant/5")[0]
        assert call["headers"]["Authorization"] == "Bearer test-token"
        assert call["headers"]["X-Request-ID"].startswith("req-")
        assert call["timeout"] == client.timeout

    def test_no_auth_header_without_token(self, backend, make_response):
        client = BackendClient(base_url="http://backend.test/api", token="", session=create_http_session())
        backend.add("GET", "slot", make_response(200, []))

        client.get("slot")

        assert "Authorization" not in backend.calls[0]["headers"]


class TestCircuitIntegration:

    def test_server_errors_open_circuit(self, backend, make_response):
        client = BackendClient(
            base_url="http://backend.test/api/",
            session=create_http_session(),
            backoff_multiplier=0,
            circuit_breaker=CircuitBreaker(failure_threshold=2, reset_timeout=60),
        )
        backend.add("GET", "schedules", make_response(503, {"message": "down"}))

        for _ in range(2):
            with pytest.raises(BackendError):
                client.get("schedules")

        with pytest.raises(CircuitOpenError):
            client.get("schedules")
        assert len(backend.calls) == 2

    def test_client_errors_do_not_open_circuit(self, backend, make_response):
        client = BackendClient(
            base_url="http://backend.test/api/",
            session=create_http_session(),
            circuit_breaker=CircuitBreaker(failure_threshold=2, reset_timeout=60),
        )
        backend.add("POST", "appointment", make_response(409, {"message": "taken"}))

        for _ in range(3):
            with pytest.raises(ConflictError):
                client.post("appointment", json={})

        assert client.circuit_breaker.state == "closed"

    def test_failed_trial_call_reopens_circuit(self):
        clock = {"now": 1000.0}
        breaker = CircuitBreaker(failure_threshold=1, reset_timeout=10, clock=lambda: clock["now"])
        client = BackendClient(
            base_url="http://backend.test/api/",
            session=create_http_session(),
            circuit_breaker=breaker,
        )
        breaker.record_failure()
        clock["now"] += 11

        with patch("requests.Session.request") as mock_request:
            mock_request.side_effect = requests.exceptions.InvalidURL("bad url")

            with pytest.raises(NetworkError, match="unexpected"):
                client.get("schedules")
            with pytest.raises(CircuitOpenError):
                client.get("schedules")

        assert breaker.state == "open"
        assert mock_request.call_count == 1
