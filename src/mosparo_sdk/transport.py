"""
HTTP transport for mosparo API communication

The client talks to mosparo through the narrow ``Transport`` interface:
one signed request in, the raw response body out. ``RequestsTransport``
is the default implementation built on ``requests``; tests and custom
integrations can supply their own.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Protocol, Tuple
from urllib.parse import urljoin, urlparse

import requests
from requests.exceptions import RequestException, Timeout, ConnectionError as RequestsConnectionError

from .exceptions import TransportError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class SignedRequest:
    """
    Request to be sent to the mosparo API

    Attributes:
        method: HTTP method (GET or POST)
        path: API endpoint path
        public_key: Project public key, sent as basic auth username
        request_signature: Request signature, sent as basic auth password
        body: JSON body for POST requests
        query: Query parameters for GET requests
    """
    method: str
    path: str
    public_key: str
    request_signature: str
    body: Optional[Dict[str, Any]] = None
    query: Optional[Dict[str, Any]] = None
    headers: Dict[str, str] = field(default_factory=lambda: {'Accept': 'application/json'})

    @property
    def auth(self) -> Tuple[str, str]:
        return (self.public_key, self.request_signature)


class Transport(Protocol):
    """Sends a signed request and returns the response body."""

    def send(self, request: SignedRequest) -> str:
        ...


class RequestsTransport:
    """
    Transport based on ``requests``.

    A fresh session is opened for each request so the transport holds no
    mutable state between calls. Requests are never retried.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        verify_ssl: bool = True,
        proxies: Optional[Dict[str, str]] = None,
        **options: Any
    ):
        """
        Initialize the transport.

        Args:
            base_url: Host of the mosparo installation
            timeout: Request timeout in seconds
            verify_ssl: Whether to verify SSL certificates
            proxies: Optional proxy mapping passed to requests
            **options: Additional keyword arguments for ``Session.request``
        """
        if not base_url:
            raise ValidationError("Host cannot be empty")

        parsed = urlparse(base_url)
        if not parsed.scheme or not parsed.netloc:
            raise ValidationError(f"Invalid host URL format: {base_url}")

        if timeout is not None and timeout <= 0:
            raise ValidationError("Timeout must be positive")

        self.base_url = base_url if base_url.endswith('/') else base_url + '/'
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.proxies = dict(proxies) if proxies else None
        self.options = dict(options)

    def _build_url(self, path: str) -> str:
        return urljoin(self.base_url, path.lstrip('/'))

    def send(self, request: SignedRequest) -> str:
        """
        Send the request to mosparo.

        Args:
            request: Signed request

        Returns:
            str: Response body

        Raises:
            TransportError: On network errors or HTTP error status codes
        """
        url = self._build_url(request.path)

        kwargs = dict(self.options)
        headers = dict(kwargs.pop('headers', None) or {})
        headers.update(request.headers)
        kwargs.setdefault('timeout', self.timeout)
        kwargs.setdefault('verify', self.verify_ssl)
        if self.proxies:
            kwargs.setdefault('proxies', self.proxies)
        if request.body is not None:
            kwargs['json'] = request.body
        if request.query:
            kwargs['params'] = request.query

        try:
            logger.debug(f"Making {request.method} request to {url}")
            with requests.Session() as session:
                response = session.request(
                    request.method,
                    url,
                    auth=request.auth,
                    headers=headers,
                    **kwargs
                )
        except Timeout as e:
            raise TransportError(
                "An error occurred while sending the request to mosparo.",
                details={'reason': f"Request timeout after {self.timeout} seconds"}
            ) from e
        except RequestsConnectionError as e:
            raise TransportError(
                "An error occurred while sending the request to mosparo.",
                details={'reason': f"Connection error: {e}"}
            ) from e
        except RequestException as e:
            raise TransportError(
                "An error occurred while sending the request to mosparo.",
                details={'reason': f"Request failed: {e}"}
            ) from e

        if not response.ok:
            logger.warning(f"mosparo answered {request.method} {request.path} with HTTP {response.status_code}")
            raise TransportError(
                "An error occurred while sending the request to mosparo.",
                http_status=response.status_code,
                details={'status_code': response.status_code, 'reason': response.reason, 'body': response.text}
            )

        return response.text


__all__ = ['SignedRequest', 'Transport', 'RequestsTransport', 'DEFAULT_TIMEOUT']
