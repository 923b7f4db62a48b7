"""
Imbo client library.

This module provides the ImboClient, which builds signed and unsigned
requests for an Imbo image server, sends them through a transport and
decodes the responses into typed records.
"""

import hashlib
import json
import logging
import os
from typing import Any, Dict, Iterable, Mapping, Optional, Union

from .constants import (
    DEFAULT_CONFIG,
    HEADER_IMAGE_IDENTIFIER,
    HEADER_PUBLIC_KEY,
    PATH_GLOBAL_SHORT_URL,
    PATH_IMAGE,
    PATH_IMAGES,
    PATH_IMAGES_JSON,
    PATH_METADATA,
    PATH_METADATA_JSON,
    PATH_SHORT_URL,
    PATH_SHORT_URLS,
    PATH_STATS,
    PATH_STATUS,
    PATH_USER,
)
from .exceptions import ApiError, ConfigurationError, InvalidLocalFileError
from .hosts import ServerPool
from .query import ImagesQuery
from .responses import (
    AddedImage,
    DeletedImage,
    DeletedShortUrls,
    ImageCollection,
    ImageProperties,
    Metadata,
    ResponseDecoder,
    ServerStats,
    ServerStatus,
    ShortUrlInfo,
    UserInfo,
)
from .transport import RequestsTransport, Transport, TransportResponse
from .url import Credentials, SignedRequestSpec, UrlBuilder, redact_url

logger = logging.getLogger(__name__)


class ImboClient:
    """
    Client for the Imbo image server REST API.

    Write requests (PUT, POST, DELETE) are signed with the private key;
    reads are sent unsigned. Every operation is a single pass of
    build, send and decode, so one client can be shared between threads.
    """

    def __init__(
        self,
        server_urls: Union[str, Iterable[str]],
        user: str,
        public_key: str,
        private_key: str,
        transport: Optional[Transport] = None,
        **config
    ):
        """
        Initialize Imbo client.

        Args:
            server_urls: Base URL, or ordered list of base URLs for sharded setups
            user: User owning the images
            public_key: Public key sent with every request
            private_key: Private key used to sign write requests
            transport: Transport to send requests through (defaults to requests)
            **config: Configuration options (timeout, user_agent)
        """
        # Merge default config with user overrides
        self.config = {**DEFAULT_CONFIG, **config}

        # Validate configuration
        self._validate_config()

        self.credentials = Credentials(user, public_key, private_key)
        self.servers = ServerPool(server_urls)
        self.urls = UrlBuilder(self.servers, self.credentials)
        self.decoder = ResponseDecoder()

        self._owns_transport = transport is None
        self.transport = transport if transport is not None else RequestsTransport()

    def _validate_config(self):
        """Validate client configuration."""
        unknown = set(self.config) - set(DEFAULT_CONFIG)
        if unknown:
            raise ConfigurationError(f"Unknown configuration options: {', '.join(sorted(unknown))}")

        timeout = self.config['timeout']
        if timeout is not None and timeout <= 0:
            raise ConfigurationError("timeout must be positive")

    @property
    def user(self) -> str:
        return self.credentials.user

    def _headers(self, content_type: Optional[str] = None) -> Dict[str, str]:
        headers = {
            'User-Agent': self.config['user_agent'],
            'Accept': 'application/json',
            HEADER_PUBLIC_KEY: self.credentials.public_key,
        }
        if content_type:
            headers['Content-Type'] = content_type
        return headers

    def _prepare_request_body(self, json_data=None, data=None) -> Optional[bytes]:
        """Prepare request body."""
        if json_data is not None:
            return json.dumps(json_data, separators=(',', ':')).encode('utf-8')
        elif data is not None:
            if isinstance(data, str):
                return data.encode('utf-8')
            return bytes(data)
        return None

    def _send(self, spec: SignedRequestSpec, json_data=None, data=None) -> TransportResponse:
        """
        Send a prepared request through the transport.

        Raises:
            TransportError: If the request could not be delivered
            CancellationError: If the request timed out or was cancelled
        """
        body = self._prepare_request_body(json_data, data)
        headers = self._headers('application/json' if json_data is not None else None)

        logger.debug("%s %s", spec.method, redact_url(spec.url))
        response = self.transport.send(
            spec.method, spec.url, headers, body, timeout=self.config['timeout']
        )
        logger.debug("%s %s -> %d", spec.method, redact_url(spec.url), response.status_code)
        return response

    def _request(self, shape, method: str, template: str, image_identifier=None,
                 query=None, json_data=None, data=None, **segments):
        spec = self.urls.prepare(method, template, image_identifier, query, **segments)
        response = self._send(spec, json_data=json_data, data=data)
        return self.decoder.decode(shape, response)

    @staticmethod
    def _read_local_file(path: Union[str, os.PathLike]) -> bytes:
        """
        Read a local file, refusing missing and empty ones.

        Raises:
            InvalidLocalFileError: If the file does not exist or is empty
        """
        path = os.fspath(path)
        if not os.path.isfile(path):
            raise InvalidLocalFileError(f"File does not exist: {path}")
        if os.path.getsize(path) == 0:
            raise InvalidLocalFileError(f"File is of zero length: {path}")

        with open(path, 'rb') as f:
            return f.read()

    # Server and user resources

    def get_server_status(self) -> ServerStatus:
        """Fetch the server status. Errors raise, including 500 responses."""
        return self._request(ServerStatus, 'GET', PATH_STATUS)

    def get_server_stats(self) -> ServerStats:
        return self._request(ServerStats, 'GET', PATH_STATS)

    def get_user_info(self) -> UserInfo:
        return self._request(UserInfo, 'GET', PATH_USER)

    def get_images(self, query: Optional[ImagesQuery] = None) -> ImageCollection:
        """
        List the user's images.

        Args:
            query: Pagination, filters and sorting. Defaults to ImagesQuery().
        """
        if query is None:
            query = ImagesQuery()
        return self._request(ImageCollection, 'GET', PATH_IMAGES_JSON, query=query)

    # Images

    def add_image(self, blob: bytes) -> AddedImage:
        """Upload raw image bytes."""
        return self._request(AddedImage, 'POST', PATH_IMAGES, data=blob)

    def add_image_from_path(self, path: Union[str, os.PathLike]) -> AddedImage:
        """
        Upload a local file.

        Raises:
            InvalidLocalFileError: Before any request if the file is missing or empty
        """
        return self.add_image(self._read_local_file(path))

    def add_image_from_url(self, url: str) -> AddedImage:
        """
        Fetch an image from a URL and upload it.

        Raises:
            FetchError: If the image could not be fetched; nothing is uploaded
        """
        return self.add_image(self.get_image_data_from_url(url))

    def delete_image(self, image_identifier: str) -> DeletedImage:
        return self._request(DeletedImage, 'DELETE', PATH_IMAGE, image_identifier)

    def get_image_properties(self, image_identifier: str) -> ImageProperties:
        return self._request(ImageProperties, 'HEAD', PATH_IMAGE, image_identifier)

    def image_identifier_exists(self, image_identifier: str) -> bool:
        """
        Check whether an image exists on the server.

        Returns False on 404; other error statuses raise.
        """
        spec = self.urls.prepare('HEAD', PATH_IMAGE, image_identifier)
        return self.decoder.exists(self._send(spec))

    def image_exists(self, path: Union[str, os.PathLike]) -> bool:
        """
        Check whether a local file has already been uploaded.

        Compares the MD5 checksum of the file against the original checksums
        stored on the server, without uploading anything.
        """
        checksum = hashlib.md5(self._read_local_file(path)).hexdigest()
        query = ImagesQuery().with_original_checksums([checksum]).with_limit(1)

        spec = self.urls.prepare('GET', PATH_IMAGES_JSON, query=query)
        response = self._send(spec)
        if not self.decoder.exists(response):
            return False

        collection = self.decoder.decode(ImageCollection, response)
        return collection.hits > 0

    def get_image_data(self, image_identifier: str) -> bytes:
        """
        Download the stored image bytes.

        Raises:
            FetchError: If the server does not answer with 2xx
        """
        spec = self.urls.prepare('GET', PATH_IMAGE, image_identifier)
        return self.decoder.fetched_bytes(self._send(spec))

    def get_image_data_from_url(self, url: str) -> bytes:
        """
        Download bytes from an arbitrary URL.

        Raises:
            FetchError: If the URL does not answer with 2xx
        """
        logger.debug("GET %s", url)
        response = self.transport.send(
            'GET', url, {'User-Agent': self.config['user_agent']}, None,
            timeout=self.config['timeout']
        )
        return self.decoder.fetched_bytes(response)

    # Metadata

    def get_metadata(self, image_identifier: str) -> Metadata:
        return self._request(Metadata, 'GET', PATH_METADATA_JSON, image_identifier)

    def set_metadata(self, image_identifier: str, metadata: Mapping[str, Any]) -> Metadata:
        """Replace all metadata of an image."""
        return self._request(
            Metadata, 'PUT', PATH_METADATA, image_identifier, json_data=dict(metadata)
        )

    def update_metadata(self, image_identifier: str, metadata: Mapping[str, Any]) -> Metadata:
        """Merge keys into the existing metadata of an image."""
        return self._request(
            Metadata, 'POST', PATH_METADATA, image_identifier, json_data=dict(metadata)
        )

    def delete_metadata(self, image_identifier: str) -> Metadata:
        return self._request(Metadata, 'DELETE', PATH_METADATA, image_identifier)

    # Short URLs

    def create_short_url(
        self,
        image_identifier: str,
        extension: Optional[str] = None,
        query: Optional[str] = None,
    ) -> ShortUrlInfo:
        """
        Create a short URL for an image.

        Args:
            image_identifier: Image the short URL points to
            extension: Optional output format, e.g. "png"
            query: Optional transformation query string, e.g. "?t[]=thumbnail"
        """
        payload = {
            'user': self.user,
            'imageIdentifier': image_identifier,
            'extension': extension,
            'query': query,
        }
        return self._request(
            ShortUrlInfo, 'POST', PATH_SHORT_URLS, image_identifier, json_data=payload
        )

    def delete_image_short_urls(self, image_identifier: str) -> DeletedShortUrls:
        """Remove every short URL of an image."""
        return self._request(DeletedShortUrls, 'DELETE', PATH_SHORT_URLS, image_identifier)

    def delete_short_url(self, short_url_id: str) -> ShortUrlInfo:
        """
        Remove a single short URL.

        The short URL is resolved to its image first; if that lookup fails
        the delete is never sent.
        """
        spec = self.urls.prepare('HEAD', PATH_GLOBAL_SHORT_URL, short_url_id=short_url_id)
        response = self._send(spec)
        self.decoder.raise_for_status(response)

        image_identifier = ImageProperties.from_response(response).image_identifier
        if not image_identifier:
            raise ApiError(
                f"Short URL response is missing the {HEADER_IMAGE_IDENTIFIER} header",
                response.status_code,
            )

        return self._request(
            ShortUrlInfo, 'DELETE', PATH_SHORT_URL, image_identifier, short_url_id=short_url_id
        )

    # URL helpers

    def get_user_url(self) -> str:
        return self.urls.build('GET', PATH_USER)

    def get_images_url(self, query: Optional[ImagesQuery] = None) -> str:
        return self.urls.build('GET', PATH_IMAGES_JSON, query=query)

    def get_image_url(self, image_identifier: str) -> str:
        return self.urls.build('GET', PATH_IMAGE, image_identifier)

    def close(self):
        """Close the transport if this client created it."""
        if self._owns_transport and hasattr(self.transport, 'close'):
            self.transport.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
