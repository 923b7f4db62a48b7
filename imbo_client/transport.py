"""
HTTP transport used by the Imbo client.

The client only talks to the network through ``Transport.send``; the
default implementation wraps a ``requests.Session``. Connection pooling,
TLS and socket-level retries are left to requests.
"""

import logging
from typing import Mapping, NamedTuple, Optional, Protocol

import requests
from requests.structures import CaseInsensitiveDict

from .exceptions import CancellationError, TransportError

logger = logging.getLogger(__name__)


class TransportResponse(NamedTuple):
    status_code: int
    headers: Mapping[str, str]
    body: bytes = b""


class Transport(Protocol):
    def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: Optional[bytes] = None,
        timeout: Optional[float] = None,
    ) -> TransportResponse:
        ...


class RequestsTransport:
    """Transport backed by a requests session."""

    def __init__(self, session: Optional[requests.Session] = None, verify: bool = True):
        self.session = session or requests.Session()
        self.verify = verify

    def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: Optional[bytes] = None,
        timeout: Optional[float] = None,
    ) -> TransportResponse:
        """
        Send one request.

        Raises:
            CancellationError: If the request timed out
            TransportError: If the request could not be delivered
        """
        try:
            response = self.session.request(
                method,
                url,
                headers=dict(headers),
                data=body,
                timeout=timeout,
                verify=self.verify,
                allow_redirects=True,
            )
        except requests.Timeout as e:
            raise CancellationError(f"HTTP request timed out: {e}") from e
        except requests.RequestException as e:
            logger.warning("%s request failed: %s", method, e)
            raise TransportError(f"HTTP request failed: {e}") from e

        return TransportResponse(
            response.status_code, CaseInsensitiveDict(response.headers), response.content
        )

    def close(self):
        """Close HTTP session."""
        if self.session:
            self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
