"""
Imbo Client Library

A Python client for the Imbo image server REST API. Write requests are
signed with HMAC-SHA256 and image requests are routed across sharded
server pools by a stable hash of the image identifier.

Example usage:
    from imbo_client import ImboClient, ImagesQuery

    client = ImboClient("http://imbo.example.com", "user", "public-key", "private-key")
    added = client.add_image_from_path("/path/to/image.jpg")
    images = client.get_images(ImagesQuery().with_limit(10))
"""

from .client import ImboClient
from .exceptions import (
    ImboClientError,
    ConfigurationError,
    InvalidIdentifierError,
    InvalidQueryError,
    InvalidLocalFileError,
    TransportError,
    CancellationError,
    ApiError,
    ClientError,
    ServerError,
    FetchError
)
from .hosts import ServerPool, select_host
from .query import ImagesQuery
from .responses import (
    AddedImage,
    DeletedImage,
    DeletedShortUrls,
    Image,
    ImageCollection,
    ImageProperties,
    Metadata,
    ResponseDecoder,
    ServerStats,
    ServerStatus,
    ShortUrlInfo,
    UserInfo
)
from .signer import RequestSigner, format_timestamp
from .transport import RequestsTransport, Transport, TransportResponse
from .url import Credentials, SignedRequestSpec, UrlBuilder
from .constants import DEFAULT_CONFIG, VERSION

__version__ = VERSION
__all__ = [
    "ImboClient",
    "ImboClientError",
    "ConfigurationError",
    "InvalidIdentifierError",
    "InvalidQueryError",
    "InvalidLocalFileError",
    "TransportError",
    "CancellationError",
    "ApiError",
    "ClientError",
    "ServerError",
    "FetchError",
    "ServerPool",
    "select_host",
    "ImagesQuery",
    "AddedImage",
    "DeletedImage",
    "DeletedShortUrls",
    "Image",
    "ImageCollection",
    "ImageProperties",
    "Metadata",
    "ResponseDecoder",
    "ServerStats",
    "ServerStatus",
    "ShortUrlInfo",
    "UserInfo",
    "RequestSigner",
    "format_timestamp",
    "RequestsTransport",
    "Transport",
    "TransportResponse",
    "Credentials",
    "SignedRequestSpec",
    "UrlBuilder",
    "DEFAULT_CONFIG"
]
