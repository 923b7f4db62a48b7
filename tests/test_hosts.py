"""
Unit tests for server pools and host selection.
"""

import zlib

import pytest

from imbo_client import ConfigurationError, InvalidIdentifierError, ServerPool, select_host

HOSTS = ["http://imbo1", "http://imbo2", "http://imbo3"]


class TestSelectHost:
    """Test identifier to host mapping."""

    @pytest.mark.parametrize("identifier", ["a", "some-id", "0" * 32, "ünïcode"])
    def test_single_host_always_selected(self, identifier):
        """Test that a single-host pool returns its host for any identifier."""
        assert select_host(["http://imbo"], identifier) == "http://imbo"

    def test_crc32_modulo_pool_size(self):
        """Test the documented CRC32 mapping."""
        identifier = "The quick brown fox jumps over the lazy dog"

        # crc32 = 0x414fa339 = 1095738169, 1095738169 % 3 == 1
        assert zlib.crc32(identifier.encode('utf-8')) == 0x414fa339
        assert select_host(HOSTS, identifier) == "http://imbo2"

    def test_stable_across_calls(self):
        """Test repeated calls route to the same host."""
        for i in range(50):
            identifier = f"image-{i}"
            assert select_host(HOSTS, identifier) == select_host(list(HOSTS), identifier)

    def test_every_host_is_used(self):
        """Test that identifiers spread over all hosts."""
        hosts = HOSTS + ["http://imbo4"]
        selected = {select_host(hosts, f"image-{i}") for i in range(1000)}

        assert selected == set(hosts)

    def test_order_matters(self):
        """Test that the pool is indexed in the given order."""
        identifier = "The quick brown fox jumps over the lazy dog"
        assert select_host(list(reversed(HOSTS)), identifier) == "http://imbo2"
        assert select_host(["http://a", "http://b"], identifier) == ["http://a", "http://b"][0x414fa339 % 2]

    def test_empty_identifier_rejected_for_sharded_pool(self):
        """Test that sharded pools need an identifier."""
        with pytest.raises(InvalidIdentifierError):
            select_host(HOSTS, "")

    def test_empty_pool_rejected(self):
        """Test that at least one host is required."""
        with pytest.raises(ConfigurationError):
            select_host([], "some-id")


class TestServerPool:
    """Test server pool construction."""

    def test_single_string(self):
        """Test a bare URL becomes a one-host pool."""
        pool = ServerPool("http://imbo/")

        assert pool.hosts == ("http://imbo",)
        assert pool.primary == "http://imbo"
        assert len(pool) == 1

    def test_order_preserved(self):
        """Test hosts keep their order and lose trailing slashes."""
        pool = ServerPool(["http://b/", "http://a", "http://c"])

        assert list(pool) == ["http://b", "http://a", "http://c"]
        assert pool.primary == "http://b"

    def test_select_delegates(self):
        """Test pool selection matches select_host."""
        pool = ServerPool(HOSTS)
        assert pool.select("some-id") == select_host(HOSTS, "some-id")

    def test_equality(self):
        """Test value semantics."""
        assert ServerPool(HOSTS) == ServerPool(list(HOSTS))
        assert ServerPool(HOSTS) != ServerPool(list(reversed(HOSTS)))

    def test_invalid_pools(self):
        """Test empty pools and empty URLs are rejected."""
        with pytest.raises(ConfigurationError):
            ServerPool([])

        with pytest.raises(ConfigurationError):
            ServerPool(["http://imbo", " "])
