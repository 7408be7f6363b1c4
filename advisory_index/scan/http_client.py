"""
Download of scan results published over HTTPS.

Scan engines often publish findings from CI jobs, so the first attempt to
fetch them can hit a job that is still uploading (404 is not retried, but
502/503 from the artifact host are) or a rate-limited host (429).

Design decisions:
- Only transient failures are retried: connection errors and
  RETRYABLE_STATUS_CODES; every other 4xx/5xx fails immediately
- Delay doubles per attempt up to a ceiling, plus jitter; a server's
  Retry-After is honoured when it asks for longer
- The whole body is returned as bytes; parsing belongs to scan.input
"""
import logging
import random
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Optional

import requests

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


@dataclass
class RetryConfig:
    """Retry budget for one findings download."""
    max_retries: int = 3
    base_delay_seconds: float = 1.0
    max_delay_seconds: float = 60.0
    jitter_ratio: float = 0.3
    timeout_seconds: float = 30.0


def parse_retry_after(value: Optional[str]) -> Optional[float]:
    """
    Seconds to wait according to a Retry-After header.

    The header is either a number of seconds or an HTTP date. Unparseable
    values are ignored.
    """
    if not value:
        return None
    if value.strip().isdigit():
        return float(value)
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        logger.debug(f"Ignoring unparseable Retry-After header {value!r}")
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return max(0.0, (when - datetime.now(timezone.utc)).total_seconds())


class HttpClient:
    """
    Fetches scan result documents, retrying transient failures.

    Usage:
        client = HttpClient(RetryConfig(max_retries=5))
        content = client.get_bytes("https://ci.example.dev/scans/curl.json")
    """

    def __init__(self, retry_config: Optional[RetryConfig] = None, session: Optional[requests.Session] = None):
        self.retry_config = retry_config or RetryConfig()
        self.session = session or requests.Session()

    def get_bytes(self, url: str) -> bytes:
        """
        Download ``url`` and return the response body.

        Raises:
            requests.HTTPError: On a non-retryable status, or a retryable one
                once the retry budget is spent
            requests.RequestException: On a connection failure once the
                retry budget is spent
        """
        attempts = self.retry_config.max_retries + 1

        for attempt in range(attempts):
            final = attempt == attempts - 1
            try:
                response = self.session.request("GET", url, timeout=self.retry_config.timeout_seconds)
            except requests.RequestException as exc:
                if final:
                    raise
                logger.warning(f"Fetching scan results from {url} failed ({exc}); attempt {attempt + 1} of {attempts}")
                time.sleep(self.backoff_delay(attempt))
                continue

            if response.status_code in RETRYABLE_STATUS_CODES and not final:
                logger.warning(
                    f"Scan results host returned {response.status_code} for {url}; "
                    f"attempt {attempt + 1} of {attempts}"
                )
                time.sleep(self.backoff_delay(attempt, parse_retry_after(response.headers.get("Retry-After"))))
                continue

            response.raise_for_status()
            logger.debug(f"Fetched {len(response.content)} bytes of scan results from {url}")
            return response.content

    def backoff_delay(self, attempt: int, retry_after: Optional[float] = None) -> float:
        """Seconds to wait before retry number ``attempt + 1``."""
        cfg = self.retry_config
        delay = min(cfg.max_delay_seconds, cfg.base_delay_seconds * (2 ** attempt))
        delay *= 1 + random.uniform(0, cfg.jitter_ratio)
        if retry_after is not None and retry_after > delay:
            return retry_after
        return delay
