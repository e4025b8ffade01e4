"""
HTTP transport for the logistics API.

Signed payloads are posted as application/x-www-form-urlencoded. The
provider's stage server drops connections now and then, so connection
failures and 5xx replies are retried with exponential backoff
(1000 ms, 2000 ms, 4000 ms by default).

Example usage:
    client = LogisticsClient("https://logistics-stage.ecpay.com.tw")
    response = client.post("/Express/Create", order.get_content(), encoder=order.encoder)
"""

import time
import urllib.error
import urllib.request
from typing import Any, Mapping, Optional
from urllib.parse import urlencode

import structlog

from shared.checkmac import CheckMacEncoder, mask_sensitive
from shared.constants import Config
from shared.errors import TransportError

from .response import Response

logger = structlog.get_logger(__name__)


class LogisticsClient:
    """
    Logistics API client.

    Usage:
        client = LogisticsClient(server_url, timeout=10)

        response = client.post(path, signed_payload)
        if response.is_success():
            ...
    """

    def __init__(
        self,
        server_url: str = None,
        timeout: float = Config.HTTP_TIMEOUT_SECONDS,
        retries: int = Config.HTTP_RETRY_ATTEMPTS,
        retry_delay_ms: int = Config.HTTP_RETRY_DELAY_MS
    ):
        """
        Initialize the client.

        Args:
            server_url: Provider base URL (default: stage server)
            timeout: Request timeout in seconds
            retries: Retries after the first attempt; 0 disables retrying
            retry_delay_ms: Delay before the first retry, doubled for each one after
        """
        self.server_url = (server_url or Config.DEFAULT_SERVER_URL).rstrip("/")
        self.timeout = timeout
        self.retries = max(0, retries)
        self.retry_delay_ms = max(0, retry_delay_ms)

    @classmethod
    def from_settings(cls, settings) -> "LogisticsClient":
        """Build a client from LogisticsSettings."""
        return cls(
            settings.server_url,
            timeout=settings.timeout,
            retries=settings.retry_attempts,
            retry_delay_ms=settings.retry_delay_ms,
        )

    def backoff_delay(self, retry: int) -> float:
        """Seconds to wait before retry number `retry` (0-based)."""
        return self.retry_delay_ms * (2 ** retry) / 1000.0

    def post(
        self,
        path: str,
        payload: Mapping[str, Any],
        encoder: Optional[CheckMacEncoder] = None
    ) -> Response:
        """
        POST a signed payload.

        Args:
            path: Request path, e.g. "/Express/Create"
            payload: Signed payload (CheckMacValue included)
            encoder: Encoder handed to the Response for verification

        Returns:
            Response wrapping the 2xx reply body

        Raises:
            TransportError on a non-2xx reply, or on connection failure
            and 5xx once retries are exhausted
        """
        url = f"{self.server_url}{path}"
        body = urlencode(payload).encode("utf-8")

        logger.debug("logistics.request", url=url, payload=mask_sensitive(payload))

        retry = 0
        while True:
            try:
                status, text = self._request(url, body)
            except TransportError as e:
                if retry < self.retries and self._should_retry(e):
                    delay = self.backoff_delay(retry)
                    logger.warning(
                        "logistics.request.retry",
                        url=url,
                        retry=retry + 1,
                        max_retries=self.retries,
                        delay=delay,
                        error=e.message,
                        http_status=e.http_status,
                    )
                    time.sleep(delay)
                    retry += 1
                    continue

                logger.error(
                    "logistics.request.failed",
                    url=url,
                    error=e.message,
                    http_status=e.http_status,
                )
                raise

            logger.debug("logistics.response", url=url, status=status, body=text)
            return Response(text, encoder, http_status=status)

    def _should_retry(self, error: TransportError) -> bool:
        # Connection errors carry no status
        return error.http_status is None or error.http_status >= 500

    def _request(self, url: str, body: bytes):
        """
        Make one HTTP request.

        Returns:
            (status, decoded body)
        """
        headers = {
            "Content-Type": "application/x-www-form-urlencoded",
            "Accept": "text/html, application/json",
        }
        request = urllib.request.Request(url, data=body, headers=headers, method="POST")

        try:
            with urllib.request.urlopen(request, timeout=self.timeout) as response:
                return response.status, response.read().decode("utf-8")

        except urllib.error.HTTPError as e:
            self._handle_error(e.code, e.read().decode("utf-8", errors="replace"))

        except urllib.error.URLError as e:
            raise TransportError(f"Connection error: {e.reason}")

        except OSError as e:
            # Socket timeouts surface as OSError, not URLError
            raise TransportError(f"Connection error: {e}")

    def _handle_error(self, status_code: int, body: str):
        """Convert HTTP errors to TransportError."""
        message = body.strip() or f"HTTP {status_code}"
        raise TransportError(message, code=str(status_code), http_status=status_code)
