"""
Integration tests against a running Imbo server.

Skipped unless IMBO_TEST_URL, IMBO_TEST_USER, IMBO_TEST_PUBLIC_KEY and
IMBO_TEST_PRIVATE_KEY are set.
"""

import os
import struct
import threading
import zlib

import pytest

from imbo_client import ClientError, ImagesQuery, ImboClient

ENV_VARS = ["IMBO_TEST_URL", "IMBO_TEST_USER", "IMBO_TEST_PUBLIC_KEY", "IMBO_TEST_PRIVATE_KEY"]

pytestmark = pytest.mark.skipif(
    not all(os.environ.get(name) for name in ENV_VARS),
    reason="Imbo server not configured"
)


def tiny_png(seed: int) -> bytes:
    """Build a valid 1x1 PNG whose pixel value depends on seed."""
    def chunk(kind, data):
        return (struct.pack(">I", len(data)) + kind + data
                + struct.pack(">I", zlib.crc32(kind + data) & 0xffffffff))

    header = struct.pack(">IIBBBBB", 1, 1, 8, 2, 0, 0, 0)
    pixel = zlib.compress(b"\x00" + bytes([seed % 256, (seed >> 8) % 256, 0]))
    return b"\x89PNG\r\n\x1a\n" + chunk(b"IHDR", header) + chunk(b"IDAT", pixel) + chunk(b"IEND", b"")


class TestIntegration:
    """Integration tests with an Imbo server."""

    @pytest.fixture
    def client(self):
        """Create authenticated client."""
        with ImboClient(
            os.environ["IMBO_TEST_URL"].split(","),
            os.environ["IMBO_TEST_USER"],
            os.environ["IMBO_TEST_PUBLIC_KEY"],
            os.environ["IMBO_TEST_PRIVATE_KEY"],
        ) as client:
            yield client

    @pytest.fixture
    def image(self, client):
        """Upload an image and remove it afterwards."""
        added = client.add_image(tiny_png(os.getpid()))
        yield added
        if client.image_identifier_exists(added.image_identifier):
            client.delete_image(added.image_identifier)

    def test_server_status(self, client):
        """Test status endpoint."""
        status = client.get_server_status()

        assert status.database is True
        assert status.storage is True

    def test_user_info(self, client):
        """Test user endpoint."""
        assert client.get_user_info().user == os.environ["IMBO_TEST_USER"]

    def test_image_lifecycle(self, client, image):
        """Test upload, lookup and delete."""
        assert client.image_identifier_exists(image.image_identifier) is True

        images = client.get_images(ImagesQuery().with_ids([image.image_identifier]))
        assert [i.image_identifier for i in images] == [image.image_identifier]

        deleted = client.delete_image(image.image_identifier)
        assert deleted.image_identifier == image.image_identifier
        assert client.image_identifier_exists(image.image_identifier) is False

    def test_metadata(self, client, image):
        """Test metadata round trip."""
        client.set_metadata(image.image_identifier, {"theme": "dark"})
        client.update_metadata(image.image_identifier, {"language": "python"})

        metadata = client.get_metadata(image.image_identifier)
        assert metadata.data == {"theme": "dark", "language": "python"}

        client.delete_metadata(image.image_identifier)
        assert client.get_metadata(image.image_identifier).data == {}

    def test_short_urls(self, client, image):
        """Test short URL creation and removal."""
        info = client.create_short_url(image.image_identifier, extension="png")

        client.delete_short_url(info.id)
        client.delete_image_short_urls(image.image_identifier)

    def test_wrong_private_key(self, image):
        """Test that a wrong private key is rejected."""
        with ImboClient(
            os.environ["IMBO_TEST_URL"].split(","),
            os.environ["IMBO_TEST_USER"],
            os.environ["IMBO_TEST_PUBLIC_KEY"],
            "wrong-private-key",
        ) as wrong_client:
            with pytest.raises(ClientError) as exc_info:
                wrong_client.delete_image(image.image_identifier)

        assert exc_info.value.status_code in (400, 401, 403)

    def test_concurrent_requests(self, client):
        """Test one client shared between threads."""
        results = []

        threads = [
            threading.Thread(target=lambda: results.append(client.get_server_stats().status_code))
            for _ in range(5)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert results == [200] * 5
