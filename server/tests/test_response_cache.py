"""
Tests for request fingerprints and the response cache.
"""

import pytest

from writecoach.shared.services.cache import ResponseCache
from writecoach.shared.utils.hashing import derive_client_identity, normalize_text, request_fingerprint

from helpers import VALID_ANALYSIS


class TestFingerprint:
    """Deterministic, normalized cache keys."""

    def test_normalization_makes_equivalent_requests_equal(self):
        first = request_fingerprint("The Internet  is popular.", "Internet phổ biến.", "IELTS 7.0")
        second = request_fingerprint("  the internet is\npopular. ", "internet  PHỔ BIẾN.", "ielts 7.0")
        assert first == second
        assert len(first) == 32

    def test_fields_do_not_run_together(self):
        assert request_fingerprint("ab", "c", "t") != request_fingerprint("a", "bc", "t")

    def test_different_targets_differ(self):
        assert request_fingerprint("a", "b", "IELTS 6.0") != request_fingerprint("a", "b", "IELTS 7.0")

    def test_normalize_text(self):
        assert normalize_text("  Hello\t WORLD \n") == "hello world"
        assert normalize_text(None) == ""


class TestClientIdentity:
    """Identity used for blocks and rate limits."""

    def test_first_forwarded_hop_wins(self):
        identity = derive_client_identity("198.51.100.1, 10.0.0.1", "10.0.0.2", {"user-agent": "UA"})
        assert identity.startswith("198.51.100.1-")
        assert len(identity.split("-")[-1]) == 16

    def test_falls_back_to_peer_then_unknown(self):
        assert derive_client_identity(None, "10.0.0.2", {}).startswith("10.0.0.2-")
        assert derive_client_identity("", None, {}).startswith("unknown-")

    def test_headers_change_identity(self):
        base = derive_client_identity("1.1.1.1", None, {"user-agent": "Firefox"})
        assert base == derive_client_identity("1.1.1.1", None, {"user-agent": "Firefox"})
        assert base != derive_client_identity("1.1.1.1", None, {"user-agent": "Chrome"})
        assert base != derive_client_identity("1.1.1.1", None, {"user-agent": "Firefox", "accept-language": "vi"})


class TestResponseCache:
    """Cache round trips, TTL and degraded store."""

    @pytest.mark.asyncio
    async def test_round_trip(self, response_cache):
        fingerprint = response_cache.fingerprint("user", "source", "target")
        assert await response_cache.lookup(fingerprint) is None

        assert await response_cache.store(fingerprint, VALID_ANALYSIS)
        assert await response_cache.lookup(fingerprint) == VALID_ANALYSIS

    @pytest.mark.asyncio
    async def test_entries_expire_after_a_day(self, response_cache, clock):
        fingerprint = response_cache.fingerprint("user", "source", "target")
        await response_cache.store(fingerprint, VALID_ANALYSIS)

        clock.advance(86399)
        assert await response_cache.lookup(fingerprint) == VALID_ANALYSIS
        clock.advance(1)
        assert await response_cache.lookup(fingerprint) is None

    @pytest.mark.asyncio
    async def test_key_layout_and_unicode(self, response_cache, store):
        fingerprint = response_cache.fingerprint("user", "source", "target")
        await response_cache.store(fingerprint, VALID_ANALYSIS)

        raw = await store.get(f"essay:{fingerprint}")
        assert "Thiếu động từ" in raw

    @pytest.mark.asyncio
    async def test_undecodable_entry_is_a_miss(self, response_cache, store):
        await store.set("essay:broken", "{not json", ttl=60)
        assert await response_cache.lookup("broken") is None

    @pytest.mark.asyncio
    async def test_unreachable_store_is_a_miss(self, unreachable_store):
        cache = ResponseCache(unreachable_store)
        assert await cache.lookup("abc") is None
        assert await cache.store("abc", VALID_ANALYSIS) is False
