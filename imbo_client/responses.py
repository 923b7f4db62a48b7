"""
Typed response records and status-code driven error classification.

Each record is a frozen dataclass parsed from one response shape. All of
them carry the originating ``status_code`` and ``headers``.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

from requests.structures import CaseInsensitiveDict

from .constants import (
    HEADER_IMAGE_IDENTIFIER,
    HEADER_ORIGINAL_EXTENSION,
    HEADER_ORIGINAL_FILESIZE,
    HEADER_ORIGINAL_HEIGHT,
    HEADER_ORIGINAL_MIME_TYPE,
    HEADER_ORIGINAL_WIDTH,
)
from .exceptions import ApiError, ClientError, FetchError, ServerError
from .transport import TransportResponse

logger = logging.getLogger(__name__)


def _headers(response: TransportResponse) -> Mapping[str, str]:
    return CaseInsensitiveDict(response.headers or {})


def response_json(response: TransportResponse) -> Dict[str, Any]:
    """Decode a JSON object body. Raises ApiError if the body is not one."""
    try:
        payload = json.loads(response.body.decode('utf-8') if response.body else '')
    except ValueError as e:
        raise ApiError(
            f"Invalid JSON in response body: {e}",
            response.status_code,
            response.body,
        ) from e

    if not isinstance(payload, dict):
        raise ApiError("Expected a JSON object in response body", response.status_code, response.body)
    return payload


def _int_header(headers: Mapping[str, str], name: str) -> Optional[int]:
    value = headers.get(name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


@dataclass(frozen=True)
class ServerStatus:
    date: str
    database: bool
    storage: bool
    status_code: int = 200
    headers: Mapping[str, str] = field(default_factory=dict, repr=False)

    @classmethod
    def from_response(cls, response: TransportResponse) -> "ServerStatus":
        body = response_json(response)
        return cls(
            date=body.get('date', ''),
            database=bool(body.get('database')),
            storage=bool(body.get('storage')),
            status_code=response.status_code,
            headers=_headers(response),
        )


@dataclass(frozen=True)
class ServerStats:
    num_images: int
    num_users: int
    num_bytes: int
    custom: Mapping[str, Any]
    status_code: int = 200
    headers: Mapping[str, str] = field(default_factory=dict, repr=False)

    @classmethod
    def from_response(cls, response: TransportResponse) -> "ServerStats":
        body = response_json(response)
        return cls(
            num_images=int(body.get('numImages', 0)),
            num_users=int(body.get('numUsers', 0)),
            num_bytes=int(body.get('numBytes', 0)),
            custom=body.get('custom') or {},
            status_code=response.status_code,
            headers=_headers(response),
        )


@dataclass(frozen=True)
class UserInfo:
    user: str
    num_images: int
    last_modified: str
    status_code: int = 200
    headers: Mapping[str, str] = field(default_factory=dict, repr=False)

    @classmethod
    def from_response(cls, response: TransportResponse) -> "UserInfo":
        body = response_json(response)
        return cls(
            user=body.get('user', ''),
            num_images=int(body.get('numImages', 0)),
            last_modified=body.get('lastModified', ''),
            status_code=response.status_code,
            headers=_headers(response),
        )


@dataclass(frozen=True)
class Image:
    """One entry of an image listing."""
    image_identifier: str
    checksum: Optional[str] = None
    original_checksum: Optional[str] = None
    extension: Optional[str] = None
    mime: Optional[str] = None
    added: Optional[str] = None
    updated: Optional[str] = None
    size: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None
    user: Optional[str] = None
    metadata: Optional[Mapping[str, Any]] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Image":
        return cls(
            image_identifier=data['imageIdentifier'],
            checksum=data.get('checksum'),
            original_checksum=data.get('originalChecksum'),
            extension=data.get('extension'),
            mime=data.get('mime'),
            added=data.get('added'),
            updated=data.get('updated'),
            size=data.get('size'),
            width=data.get('width'),
            height=data.get('height'),
            user=data.get('user'),
            metadata=data.get('metadata'),
        )


@dataclass(frozen=True)
class ImageCollection:
    images: Tuple[Image, ...]
    hits: int
    page: int
    limit: int
    count: int
    status_code: int = 200
    headers: Mapping[str, str] = field(default_factory=dict, repr=False)

    @classmethod
    def from_response(cls, response: TransportResponse) -> "ImageCollection":
        body = response_json(response)
        search = body.get('search') or {}
        images = tuple(Image.from_dict(image) for image in body.get('images') or [])
        return cls(
            images=images,
            hits=int(search.get('hits', len(images))),
            page=int(search.get('page', 1)),
            limit=int(search.get('limit', len(images))),
            count=int(search.get('count', len(images))),
            status_code=response.status_code,
            headers=_headers(response),
        )

    def __iter__(self):
        return iter(self.images)

    def __len__(self):
        return len(self.images)


@dataclass(frozen=True)
class AddedImage:
    image_identifier: str
    width: int
    height: int
    extension: str
    status_code: int = 201
    headers: Mapping[str, str] = field(default_factory=dict, repr=False)

    @classmethod
    def from_response(cls, response: TransportResponse) -> "AddedImage":
        body = response_json(response)
        return cls(
            image_identifier=body['imageIdentifier'],
            width=int(body.get('width', 0)),
            height=int(body.get('height', 0)),
            extension=body.get('extension', ''),
            status_code=response.status_code,
            headers=_headers(response),
        )


@dataclass(frozen=True)
class DeletedImage:
    image_identifier: str
    status_code: int = 200
    headers: Mapping[str, str] = field(default_factory=dict, repr=False)

    @classmethod
    def from_response(cls, response: TransportResponse) -> "DeletedImage":
        body = response_json(response)
        return cls(body['imageIdentifier'], response.status_code, _headers(response))


@dataclass(frozen=True)
class DeletedShortUrls:
    image_identifier: str
    status_code: int = 200
    headers: Mapping[str, str] = field(default_factory=dict, repr=False)

    @classmethod
    def from_response(cls, response: TransportResponse) -> "DeletedShortUrls":
        body = response_json(response)
        return cls(body['imageIdentifier'], response.status_code, _headers(response))


@dataclass(frozen=True)
class Metadata:
    data: Mapping[str, Any]
    status_code: int = 200
    headers: Mapping[str, str] = field(default_factory=dict, repr=False)

    @classmethod
    def from_response(cls, response: TransportResponse) -> "Metadata":
        body = response_json(response) if response.body else {}
        return cls(body, response.status_code, _headers(response))

    def __getitem__(self, key):
        return self.data[key]

    def __contains__(self, key):
        return key in self.data


@dataclass(frozen=True)
class ShortUrlInfo:
    id: str
    status_code: int = 200
    headers: Mapping[str, str] = field(default_factory=dict, repr=False)

    @classmethod
    def from_response(cls, response: TransportResponse) -> "ShortUrlInfo":
        body = response_json(response)
        return cls(body['id'], response.status_code, _headers(response))


@dataclass(frozen=True)
class ImageProperties:
    """Read from the headers of a HEAD request; there is no body."""
    image_identifier: Optional[str]
    width: Optional[int]
    height: Optional[int]
    filesize: Optional[int]
    mime_type: Optional[str]
    extension: Optional[str]
    status_code: int = 200
    headers: Mapping[str, str] = field(default_factory=dict, repr=False)

    @classmethod
    def from_response(cls, response: TransportResponse) -> "ImageProperties":
        headers = _headers(response)
        return cls(
            image_identifier=headers.get(HEADER_IMAGE_IDENTIFIER),
            width=_int_header(headers, HEADER_ORIGINAL_WIDTH),
            height=_int_header(headers, HEADER_ORIGINAL_HEIGHT),
            filesize=_int_header(headers, HEADER_ORIGINAL_FILESIZE),
            mime_type=headers.get(HEADER_ORIGINAL_MIME_TYPE),
            extension=headers.get(HEADER_ORIGINAL_EXTENSION),
            status_code=response.status_code,
            headers=headers,
        )


def error_details(response: TransportResponse) -> Tuple[str, Optional[int]]:
    """
    Extract the error message and Imbo error code from a failed response.

    Falls back to the raw body, then to a generic message.
    """
    text = response.body.decode('utf-8', errors='replace').strip() if response.body else ''

    try:
        payload = json.loads(text)
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        error = payload.get('error')
        if isinstance(error, dict) and error.get('message'):
            return str(error['message']), error.get('imboErrorCode')
        if payload.get('message'):
            return str(payload['message']), None

    return text or f"HTTP {response.status_code}", None


class ResponseDecoder:
    """Turns transport responses into records, or raises the matching ApiError."""

    @staticmethod
    def raise_for_status(response: TransportResponse):
        status = response.status_code
        if 200 <= status < 300:
            return

        message, error_code = error_details(response)
        if 400 <= status < 500:
            error_class = ClientError
        elif status >= 500:
            error_class = ServerError
        else:
            error_class = ApiError

        logger.debug("Request failed with status %d: %s", status, message)
        raise error_class(message, status, response.body, error_code)

    def decode(self, shape, response: TransportResponse):
        """
        Decode a response into ``shape``.

        Args:
            shape: Record class with a ``from_response`` constructor
            response: Response returned by the transport

        Raises:
            ClientError: For 4xx responses
            ServerError: For 5xx responses
            ApiError: For any other non-2xx status or a malformed body
        """
        self.raise_for_status(response)
        try:
            return shape.from_response(response)
        except (KeyError, TypeError, ValueError) as e:
            raise ApiError(
                f"Unexpected response body for {shape.__name__}: {e}",
                response.status_code,
                response.body,
            ) from e

    def exists(self, response: TransportResponse) -> bool:
        """Existence checks: 2xx is True, 404 is False, anything else raises."""
        if response.status_code == 404:
            return False
        self.raise_for_status(response)
        return True

    @staticmethod
    def fetched_bytes(response: TransportResponse) -> bytes:
        """Raw byte payloads from URLs that may not be an Imbo server."""
        if not 200 <= response.status_code < 300:
            raise FetchError("Unable to fetch file at URL", response.status_code, response.body)
        return response.body
