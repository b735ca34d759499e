"""HTTP client for the Places API and per-session request metrics."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict

import requests

from .errors import UpstreamError

logger = logging.getLogger(__name__)


@dataclass
class RequestMetrics:
    network_calls: int = 0
    cache_reuses: int = 0
    upstream_errors: int = 0

    def inc_network(self) -> None:
        self.network_calls += 1

    def inc_cache_reuse(self) -> None:
        self.cache_reuses += 1

    def inc_upstream_error(self) -> None:
        self.upstream_errors += 1


class HttpClient:
    """Single-attempt JSON POST client.

    Any transport failure, non-2xx status or non-JSON body raises
    UpstreamError; there is no retry.
    """

    def __init__(self, api_key: str, timeout: float = 20) -> None:
        self.api_key = api_key
        self.timeout = timeout
        self.session = requests.Session()

    def post_json(
        self,
        url: str,
        body: Dict[str, Any],
        field_mask: str,
    ) -> Dict[str, Any]:
        headers = {
            "X-Goog-Api-Key": self.api_key,
            "X-Goog-FieldMask": field_mask,
            "Content-Type": "application/json",
        }

        payload = json.dumps(body)
        try:
            resp = self.session.post(url, data=payload, headers=headers, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.error("Request to %s failed: %s", url, exc)
            raise UpstreamError(f"Fetch error: {exc}") from exc

        status = resp.status_code
        if status < 200 or status >= 300:
            logger.warning("HTTP %s from %s", status, url)
            raise UpstreamError(f"Fetch error: HTTP {status}", status_code=status)

        try:
            data = resp.json()
        except ValueError as exc:
            logger.error("Non-JSON response from %s", url)
            raise UpstreamError("Fetch error: response was not JSON", status_code=status) from exc
        if not isinstance(data, dict):
            logger.warning("Unexpected %s body from %s; treating as empty", type(data).__name__, url)
            return {}
        return data
