"""
URL construction for Imbo resources.

Resolves the host, fills in path placeholders, appends the encoded query
and, for write requests, the ``signature`` and ``timestamp`` parameters.
"""

import re
from dataclasses import dataclass, field
from typing import Callable, Iterable, Mapping, NamedTuple, Optional, Tuple, Union
from urllib.parse import quote, urlencode

from .constants import MUTATING_METHODS, PARAM_SIGNATURE, PARAM_TIMESTAMP
from .exceptions import ConfigurationError, InvalidIdentifierError
from .hosts import ServerPool
from .query import ImagesQuery
from .signer import RequestSigner, format_timestamp

QueryLike = Union[ImagesQuery, Mapping[str, str], Iterable[Tuple[str, str]], str, None]

_SIGNATURE_RE = re.compile(r'(signature=)[0-9a-f]+')


@dataclass(frozen=True)
class Credentials:
    user: str
    public_key: str
    private_key: str = field(repr=False)

    def __post_init__(self):
        if not self.user:
            raise ConfigurationError("user cannot be empty")
        if not self.public_key:
            raise ConfigurationError("public_key cannot be empty")
        if not self.private_key:
            raise ConfigurationError("private_key cannot be empty")
        if '/' in self.user:
            raise InvalidIdentifierError(f"Invalid user: {self.user}")


class SignedRequestSpec(NamedTuple):
    """A request ready to be sent. Signature fields are None for reads."""
    method: str
    url: str
    host: str
    path: str
    query_string: str
    signature: Optional[str] = None
    timestamp: Optional[str] = None


def escape_segment(value: str, name: str = "identifier") -> str:
    """Percent-encode one path segment. Separators and dot segments are rejected."""
    value = str(value)
    if not value:
        raise InvalidIdentifierError(f"{name} cannot be empty")
    if '/' in value or value in ('.', '..'):
        raise InvalidIdentifierError(f"Invalid {name}: {value}")
    return quote(value, safe='')


def encode_query(query: QueryLike) -> str:
    if query is None:
        return ''
    if isinstance(query, ImagesQuery):
        return query.to_query_string()
    if isinstance(query, str):
        return query.lstrip('?')
    return urlencode(query)


def redact_url(url: str) -> str:
    """Hide the signature value, for log output."""
    return _SIGNATURE_RE.sub(r'\1***', url)


class UrlBuilder:
    """
    Builds absolute URLs for a fixed server pool and set of credentials.

    Image-scoped resources are routed through the pool by identifier,
    everything else goes to the pool's first host.
    """

    def __init__(
        self,
        pool: ServerPool,
        credentials: Credentials,
        signer: Optional[RequestSigner] = None,
        clock: Optional[Callable[[], str]] = None,
    ):
        self.pool = pool
        self.credentials = credentials
        self.signer = signer or RequestSigner(credentials.public_key, credentials.private_key)
        self._clock = clock or format_timestamp

    def prepare(
        self,
        method: str,
        template: str,
        image_identifier: Optional[str] = None,
        query: QueryLike = None,
        **segments: str
    ) -> SignedRequestSpec:
        """
        Assemble a request.

        Args:
            method: HTTP method; PUT, POST and DELETE get signed
            template: Path template such as ``/users/{user}/images/{image_identifier}``
            image_identifier: Image the request is about, used for host selection
            query: Query parameters to append
            **segments: Values for any other placeholders in the template

        Returns:
            SignedRequestSpec with the final URL

        Raises:
            InvalidIdentifierError: If a path value is empty, contains "/" or is a dot segment
        """
        method = method.upper()

        values = {'user': escape_segment(self.credentials.user, "user")}
        if image_identifier is not None:
            values['image_identifier'] = escape_segment(image_identifier, "image identifier")
            host = self.pool.select(image_identifier)
        else:
            host = self.pool.primary
        for name, value in segments.items():
            values[name] = escape_segment(value, name.replace('_', ' '))

        path = template.format(**values)
        query_string = encode_query(query)

        url = host + path
        if query_string:
            url += '?' + query_string

        if method not in MUTATING_METHODS:
            return SignedRequestSpec(method, url, host, path, query_string)

        timestamp = self._clock()
        signature = self.signer.sign(method, url, timestamp)
        auth = urlencode([(PARAM_SIGNATURE, signature), (PARAM_TIMESTAMP, timestamp)])
        signed_url = url + ('&' if query_string else '?') + auth

        return SignedRequestSpec(
            method, signed_url, host, path, query_string, signature, timestamp
        )

    def build(
        self,
        method: str,
        template: str,
        image_identifier: Optional[str] = None,
        query: QueryLike = None,
        **segments: str
    ) -> str:
        """Same as prepare(), returning only the URL."""
        return self.prepare(method, template, image_identifier, query, **segments).url
