"""HTTP client for the counseling platform backend.

Purpose: One place for connection pooling, retries, auth headers and the
translation of transport/HTTP failures into typed errors.

Pattern: requests.Session with urllib3 status retries and tenacity
connection-level retries, behind a circuit breaker.

Only reads are retried. Writes (booking, registration, status changes) go out
exactly once so a lost response can never turn into a double booking.
"""
import logging
from typing import Any, Dict, Optional

import requests
from requests.adapters import HTTPAdapter
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from urllib3.util.retry import Retry

from counsel_booking import config
from counsel_booking.circuit_breaker import CircuitBreaker
from counsel_booking.errors import (
    NETWORK_ERROR_MESSAGE,
    UNEXPECTED_ERROR_MESSAGE,
    NetworkError,
    error_for_status,
)
from counsel_booking.logging_config import (
    generate_request_id,
    get_logger,
    request_context,
)

logger = get_logger(__name__)
retry_logger = logging.getLogger(__name__)

TRANSIENT_ERRORS = (
    requests.exceptions.ConnectionError,
    requests.exceptions.Timeout,
)


def create_http_session(
    max_retries: int = config.MAX_RETRIES,
    backoff_factor: float = config.BACKOFF_MULTIPLIER,
    pool_size: int = 10,
) -> requests.Session:
    """
    Create HTTP session with status retries and connection pooling.

    Args:
        max_retries: Retries on 502/503/504 for GET requests
        backoff_factor: urllib3 backoff multiplier between status retries
        pool_size: Connections kept per host

    Returns:
        Configured requests.Session
    """
    session = requests.Session()

    # Connection errors are left to tenacity; urllib3 only replays GETs that
    # got a gateway error. The last response is returned, not raised.
    retry_strategy = Retry(
        total=max_retries,
        connect=0,
        read=0,
        other=0,
        status=max_retries,
        backoff_factor=backoff_factor,
        status_forcelist=config.RETRY_STATUS_CODES,
        allowed_methods=["GET"],
        raise_on_status=False,
    )

    adapter = HTTPAdapter(
        max_retries=retry_strategy,
        pool_connections=pool_size,
        pool_maxsize=pool_size,
    )
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.headers.update({"Accept": "application/json"})

    return session


class BackendClient:
    """Thin REST wrapper returning decoded JSON and raising BookingError."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = config.REQUEST_TIMEOUT,
        max_retries: int = config.MAX_RETRIES,
        backoff_multiplier: float = config.BACKOFF_MULTIPLIER,
        circuit_breaker: Optional[CircuitBreaker] = None,
    ):
        """
        Args:
            base_url: API root, e.g. "http://localhost:8080/api/"
            token: Bearer token sent with every request
            session: Pre-built session (defaults to create_http_session())
            timeout: Per-request timeout in seconds
            max_retries: Extra attempts for GET on connection errors
            backoff_multiplier: Exponential backoff multiplier (0 disables waits)
            circuit_breaker: Shared breaker (defaults to a fresh one)
        """
        self.base_url = (base_url or config.API_BASE_URL).rstrip("/") + "/"
        self.token = token if token is not None else config.API_TOKEN
        self.session = session or create_http_session(max_retries)
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff_multiplier = backoff_multiplier
        self.circuit_breaker = circuit_breaker or CircuitBreaker(
            failure_threshold=config.CIRCUIT_FAILURE_THRESHOLD,
            reset_timeout=config.CIRCUIT_RESET_TIMEOUT,
        )

    def set_token(self, token: Optional[str]) -> None:
        self.token = token

    def url(self, path: str) -> str:
        return self.base_url + path.lstrip("/")

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Any = None, **kwargs) -> Any:
        return self.request("POST", path, json=json, **kwargs)

    def put(self, path: str, json: Any = None, **kwargs) -> Any:
        return self.request("PUT", path, json=json, **kwargs)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)

    def request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        data: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """
        Send one request and decode the answer.

        Returns:
            Decoded JSON, raw text for non-JSON bodies, or None when empty

        Raises:
            CircuitOpenError: Backend calls are suspended
            NetworkError: No response could be obtained
            ConflictError / NotFoundError / BackendError: Error status
        """
        method = method.upper()
        url = self.url(path)
        request_id = generate_request_id()

        self.circuit_breaker.guard()

        with request_context(request_id):
            try:
                response = self._send(
                    method,
                    url,
                    params=params,
                    json=json,
                    data=data,
                    headers=self._headers(request_id, headers),
                )
            except TRANSIENT_ERRORS as exc:
                self.circuit_breaker.record_failure()
                logger.warning(
                    "backend_unreachable", method=method, url=url, error=str(exc)
                )
                raise NetworkError(NETWORK_ERROR_MESSAGE) from exc
            except requests.exceptions.RequestException as exc:
                self.circuit_breaker.record_failure()
                logger.error(
                    "backend_request_failed", method=method, url=url, error=str(exc)
                )
                raise NetworkError(UNEXPECTED_ERROR_MESSAGE) from exc

            if response.status_code >= 500:
                self.circuit_breaker.record_failure()
            else:
                self.circuit_breaker.record_success()

            body = _decode(response)
            if response.status_code >= 400:
                error = error_for_status(response.status_code, body)
                logger.warning(
                    "backend_error",
                    method=method,
                    url=url,
                    status=response.status_code,
                    message=error.message,
                )
                raise error

            logger.debug("backend_ok", method=method, url=url, status=response.status_code)
            return body

    def _headers(self, request_id: str, extra: Optional[Dict[str, str]]) -> Dict[str, str]:
        headers = {"X-Request-ID": request_id}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        if extra:
            headers.update(extra)
        return headers

    def _send(self, method: str, url: str, **kwargs) -> requests.Response:
        kwargs.setdefault("timeout", self.timeout)
        if method != "GET":
            return self.session.request(method, url, **kwargs)

        retrying = Retrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_exponential(multiplier=self.backoff_multiplier, min=0, max=8),
            retry=retry_if_exception_type(TRANSIENT_ERRORS),
            before_sleep=before_sleep_log(retry_logger, logging.WARNING),
            reraise=True,
        )
        for attempt in retrying:
            with attempt:
                return self.session.request(method, url, **kwargs)


def _decode(response: requests.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text
