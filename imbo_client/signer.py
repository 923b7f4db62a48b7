"""
HMAC-SHA256 request signing for write operations against an Imbo server.

The server re-derives the signature from the request it receives, so the
message layout below must match it byte for byte:

    HMAC-SHA256(private_key, method + "|" + url + "|" + public_key + "|" + timestamp)
"""

import datetime
import hashlib
import hmac
from typing import Optional

from .constants import TIMESTAMP_FORMAT
from .exceptions import ConfigurationError


def format_timestamp(moment: Optional[datetime.datetime] = None) -> str:
    """
    Format a moment as a UTC timestamp with second precision.

    Args:
        moment: Timezone-aware or naive UTC datetime. Defaults to now.

    Returns:
        Timestamp such as ``2021-09-20T20:33:57Z``
    """
    if moment is None:
        moment = datetime.datetime.now(datetime.timezone.utc)
    elif moment.tzinfo is not None:
        moment = moment.astimezone(datetime.timezone.utc)
    return moment.strftime(TIMESTAMP_FORMAT)


class RequestSigner:
    """
    Computes signatures for mutating requests.

    The output is a pure function of the method, the full URL, the
    timestamp and the key pair.
    """

    def __init__(self, public_key: str, private_key: str):
        if not public_key:
            raise ConfigurationError("public_key cannot be empty")
        if not private_key:
            raise ConfigurationError("private_key cannot be empty")

        self.public_key = public_key
        self._private_key = private_key.encode('utf-8')

    def __repr__(self):
        return f"RequestSigner(public_key={self.public_key!r})"

    def message(self, method: str, url: str, timestamp: str) -> str:
        """Build the string that gets signed."""
        return "|".join([method.upper(), url, self.public_key, timestamp])

    def sign(self, method: str, url: str, timestamp: str) -> str:
        """
        Sign a request.

        Args:
            method: HTTP method
            url: Fully assembled URL, including any query string
            timestamp: Timestamp as produced by format_timestamp()

        Returns:
            Lowercase hex-encoded HMAC-SHA256 signature
        """
        mac = hmac.new(
            self._private_key,
            self.message(method, url, timestamp).encode('utf-8'),
            hashlib.sha256
        )
        return mac.hexdigest()

    def verify(self, method: str, url: str, timestamp: str, signature: str) -> bool:
        """Check a signature against the one derived from the same inputs."""
        expected = self.sign(method, url, timestamp)

        # Use constant-time comparison to prevent timing attacks
        return hmac.compare_digest(expected, signature.lower())
