"""Low-level HTTP client for the session provisioner's identity REST API.

Performs exactly one HTTP call per operation and hands back the raw status
and body. Parsing and error classification happen in the session proxy.
"""
from __future__ import annotations
import http.cookiejar
import logging
import os
from dataclasses import dataclass
from typing import Dict, Optional, Union

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..errors import ProvisionerTransportError
from ..models import ProvisionerOperation

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 5
DEFAULT_POOL_SIZE = 10
USER_AGENT = "APIUS-Session-Gateway/1.0"


@dataclass(frozen=True)
class ProvisionerResponse:
    """Raw provisioner reply: which call, what status, what body."""

    operation: ProvisionerOperation
    status_code: int
    text: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class ProvisionerClient:
    """HTTP client for the provisioner's ``/identity/*`` endpoints.

    The only state held is the pooled ``requests.Session``; it is safe to
    share one client between concurrent requests. Timeout and retry policy
    are supplied by the caller; by default nothing is retried.

    Usage:
        client = ProvisionerClient("http://openam:8080/openam", timeout=3)
        resp = client.is_token_valid(token)
        if resp.ok:
            ...
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Union[float, tuple, None] = REQUEST_TIMEOUT,
        retries: Union[Retry, int, None] = None,
        session: Optional[requests.Session] = None,
        pool_size: int = DEFAULT_POOL_SIZE,
    ):
        """Initialize provisioner client.

        Args:
            base_url: Provisioner base URL (defaults to PROVISIONER_URL env var)
            timeout: Per-request timeout passed to requests (seconds or
                (connect, read) tuple)
            retries: urllib3 Retry policy or retry count; None means no retries
            session: Pre-built session (tests, custom transports); when given,
                ``retries`` and ``pool_size`` are not applied
            pool_size: Connection pool size of the mounted adapter
        """
        self.base_url = (base_url or os.environ.get("PROVISIONER_URL", "http://localhost:8080/openam")).rstrip("/")
        self.timeout = timeout
        self.session = session or self._build_session(retries, pool_size)

    @staticmethod
    def _build_session(retries: Union[Retry, int, None], pool_size: int) -> requests.Session:
        session = requests.Session()
        adapter = HTTPAdapter(
            pool_connections=pool_size,
            pool_maxsize=pool_size,
            max_retries=retries if retries is not None else 0,
        )
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        session.headers["User-Agent"] = USER_AGENT
        # One session serves every user; provisioner cookies must not carry over
        session.cookies.set_policy(http.cookiejar.DefaultCookiePolicy(allowed_domains=[]))
        return session

    # ─────────────────────────────────────────────────────────────────────
    # Provisioner operations
    # ─────────────────────────────────────────────────────────────────────
    def authenticate(self, username: str, password: str) -> ProvisionerResponse:
        """Ask the provisioner to create a session for the credentials.

        Credentials travel in a form-encoded POST body, never in the query
        string, so they stay out of the provisioner's access logs.
        """
        return self._request(
            ProvisionerOperation.AUTHENTICATE,
            "POST",
            data={"username": username, "password": password},
        )

    def is_token_valid(self, token: str) -> ProvisionerResponse:
        """Check the token; the provisioner also resets its idle timer."""
        return self._request(ProvisionerOperation.VALIDATE, "GET", params={"tokenid": token})

    def authorize(self, uri: str, action: str, token: str) -> ProvisionerResponse:
        """Ask whether the token's subject may perform ``action`` on ``uri``."""
        return self._request(
            ProvisionerOperation.AUTHORIZE,
            "GET",
            params={"uri": uri, "action": action, "subjectid": token},
        )

    def attributes(self, token: str) -> ProvisionerResponse:
        return self._request(ProvisionerOperation.ATTRIBUTES, "GET", params={"subjectid": token})

    def logout(self, token: str) -> ProvisionerResponse:
        return self._request(ProvisionerOperation.LOGOUT, "GET", params={"subjectid": token})

    # ─────────────────────────────────────────────────────────────────────
    # Transport
    # ─────────────────────────────────────────────────────────────────────
    def _request(
        self,
        operation: ProvisionerOperation,
        method: str,
        params: Optional[Dict[str, str]] = None,
        data: Optional[Dict[str, str]] = None,
    ) -> ProvisionerResponse:
        """Execute one call and return its status and body verbatim.

        Raises:
            ProvisionerTransportError: Connection failure, timeout, or a
                broken exchange; no HTTP status was obtained
        """
        url = f"{self.base_url}{operation.path}"
        try:
            resp = self.session.request(method, url, params=params, data=data, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("Provisioner %s %s failed: %s", method, operation.path, type(exc).__name__)
            raise ProvisionerTransportError(operation, exc) from exc

        logger.debug("Provisioner %s %s -> %s", method, operation.path, resp.status_code)
        return ProvisionerResponse(operation=operation, status_code=resp.status_code, text=resp.text)

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "ProvisionerClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def client_from_config(cfg) -> ProvisionerClient:
    """Build a client from an :class:`~session_gateway.config.AppConfig`."""
    retries = None
    if cfg.provisioner_retries:
        retries = Retry(
            total=cfg.provisioner_retries,
            backoff_factor=cfg.provisioner_retry_backoff,
            status_forcelist=(502, 503, 504),
            raise_on_status=False,
        )
    return ProvisionerClient(
        cfg.provisioner_url,
        timeout=cfg.provisioner_timeout,
        retries=retries,
        pool_size=cfg.provisioner_pool_size,
    )
