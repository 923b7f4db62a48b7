"""
Constants for the Imbo client library.
Wire paths, header names and defaults understood by the Imbo REST API.
"""

# Resource path templates
PATH_STATUS = "/status.json"
PATH_STATS = "/stats.json"
PATH_USER = "/users/{user}.json"
PATH_IMAGES = "/users/{user}/images"
PATH_IMAGES_JSON = "/users/{user}/images.json"
PATH_IMAGE = "/users/{user}/images/{image_identifier}"
PATH_METADATA = "/users/{user}/images/{image_identifier}/metadata"
PATH_METADATA_JSON = "/users/{user}/images/{image_identifier}/metadata.json"
PATH_SHORT_URLS = "/users/{user}/images/{image_identifier}/shorturls"
PATH_SHORT_URL = "/users/{user}/images/{image_identifier}/shorturls/{short_url_id}"
PATH_GLOBAL_SHORT_URL = "/s/{short_url_id}"

# HTTP headers
HEADER_PUBLIC_KEY = "X-Imbo-PublicKey"
HEADER_IMAGE_IDENTIFIER = "X-Imbo-ImageIdentifier"
HEADER_ORIGINAL_WIDTH = "X-Imbo-OriginalWidth"
HEADER_ORIGINAL_HEIGHT = "X-Imbo-OriginalHeight"
HEADER_ORIGINAL_FILESIZE = "X-Imbo-OriginalFilesize"
HEADER_ORIGINAL_MIME_TYPE = "X-Imbo-OriginalMimeType"
HEADER_ORIGINAL_EXTENSION = "X-Imbo-OriginalExtension"

# Signed URL query parameters
PARAM_SIGNATURE = "signature"
PARAM_TIMESTAMP = "timestamp"

# UTC, second precision (2021-09-20T20:33:57Z)
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

MUTATING_METHODS = frozenset(["PUT", "POST", "DELETE"])

# Default list query values
DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20

VERSION = "1.0.0"

# Default configuration values
DEFAULT_CONFIG = {
    'timeout': 30,                                  # HTTP timeout in seconds
    'user_agent': f"ImboClient-Python/{VERSION}",
}
