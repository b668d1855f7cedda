"""Tests for the selection and extraction caches."""

from specialist.selection import PromptCache, SelectionResult, TTLCache, fingerprint


class FakeClock:
    """A manually advanced monotonic clock."""

    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class TestFingerprint:
    """Tests for fingerprint."""

    def test_format(self) -> None:
        """Test the key prefix and length."""
        key = fingerprint("Fix the bug")
        assert key.startswith("prompt_")
        assert len(key) == len("prompt_") + 16

    def test_normalizes_whitespace_and_case(self) -> None:
        """Test that trivially different phrasings share a key."""
        assert fingerprint("Fix  the\nBug ") == fingerprint("fix the bug")

    def test_distinct_text_distinct_key(self) -> None:
        """Test that different requests get different keys."""
        assert fingerprint("fix the bug") != fingerprint("fix the build")


class TestTTLCache:
    """Tests for TTLCache."""

    def test_hit_before_expiry(self) -> None:
        """Test that a value is returned within its lifetime."""
        clock = FakeClock()
        cache: TTLCache[str] = TTLCache(ttl_seconds=10, clock=clock)
        cache.set("k", "v")

        clock.advance(9.9)
        assert cache.get("k") == "v"
        assert "k" in cache

    def test_expires_at_ttl(self) -> None:
        """Test that entries expire once the TTL has elapsed."""
        clock = FakeClock()
        cache: TTLCache[str] = TTLCache(ttl_seconds=10, clock=clock)
        cache.set("k", "v")

        clock.advance(10)
        assert cache.get("k") is None
        assert len(cache) == 0

    def test_set_refreshes_expiry(self) -> None:
        """Test that setting a key again restarts its lifetime."""
        clock = FakeClock()
        cache: TTLCache[str] = TTLCache(ttl_seconds=10, clock=clock)
        cache.set("k", "old")
        clock.advance(8)
        cache.set("k", "new")
        clock.advance(8)

        assert cache.get("k") == "new"

    def test_prune_expired(self) -> None:
        """Test that prune_expired drops only stale entries."""
        clock = FakeClock()
        cache: TTLCache[int] = TTLCache(ttl_seconds=5, clock=clock)
        cache.set("a", 1)
        clock.advance(3)
        cache.set("b", 2)
        clock.advance(3)

        assert cache.prune_expired() == 1
        assert "a" not in cache
        assert cache.get("b") == 2

    def test_max_entries_evicts_soonest_expiry(self) -> None:
        """Test eviction when the cache is full."""
        clock = FakeClock()
        cache: TTLCache[int] = TTLCache(ttl_seconds=60, max_entries=2, clock=clock)
        cache.set("a", 1)
        clock.advance(1)
        cache.set("b", 2)
        clock.advance(1)
        cache.set("c", 3)

        assert len(cache) == 2
        assert cache.get("a") is None
        assert cache.get("b") == 2
        assert cache.get("c") == 3

    def test_clear(self) -> None:
        """Test that clear empties the cache."""
        cache: TTLCache[int] = TTLCache()
        cache.set("a", 1)
        cache.clear()
        assert len(cache) == 0


class TestPromptCache:
    """Tests for PromptCache."""

    def test_phases_are_independent(self) -> None:
        """Test that selection and variable entries do not collide."""
        cache = PromptCache(ttl_seconds=60)
        key = fingerprint("Create a new project")
        cache.selection.set(key, SelectionResult("default.systemPrompt", "High"))

        assert cache.variables.get(key) is None
        cache.variables.set(key, {"framework": "Remix"})
        assert cache.stats() == {"selection": 1, "variables": 1}

        cache.clear()
        assert cache.stats() == {"selection": 0, "variables": 0}

    def test_empty_variables_are_cached(self) -> None:
        """Test that an empty extraction result still counts as a hit."""
        cache = PromptCache(ttl_seconds=60)
        cache.variables.set("k", {})
        assert cache.variables.get("k") == {}
        assert "k" in cache.variables

    def test_shared_clock_expiry(self) -> None:
        """Test that both phases expire on the same TTL."""
        clock = FakeClock()
        cache = PromptCache(ttl_seconds=1, clock=clock)
        cache.selection.set("k", SelectionResult("default.systemPrompt", "Low"))
        cache.variables.set("k", {"a": "b"})
        clock.advance(2)

        assert cache.prune_expired() == 2
