"""Property-based tests for fingerprints and the artifact cache."""

import pytest
from hypothesis import assume, given, settings
from hypothesis import strategies as st

from sabre_core.cache import ArtifactCache, compute_fingerprint

file_names = st.from_regex(r"^[a-z]{1,10}\.pyt$", fullmatch=True)


@pytest.mark.property
class TestFingerprint:
    @given(st.text(max_size=500), file_names)
    @settings(max_examples=200)
    def test_deterministic(self, content, file_name):
        first = compute_fingerprint(content, file_name, dict)
        assert first == compute_fingerprint(content, file_name, dict)
        assert len(first) == 44

    @given(st.text(max_size=200), st.text(max_size=200), file_names)
    @settings(max_examples=200)
    def test_differs_on_content(self, left, right, file_name):
        assume(left != right)
        assert compute_fingerprint(left, file_name, object) != compute_fingerprint(
            right, file_name, object
        )


@pytest.mark.property
class TestArtifactCache:
    @given(st.lists(st.sampled_from(["a", "b", "c", "d", "e"]), max_size=40))
    @settings(max_examples=100)
    def test_compiles_once_per_key(self, keys):
        cache: ArtifactCache[str] = ArtifactCache()

        for key in keys:
            assert cache.get_or_compile(key, lambda key=key: key.upper()) == key.upper()

        stats = cache.stats
        assert stats.compilations == len(set(keys))
        assert stats.hits == len(keys) - len(set(keys))
        assert sorted(cache.keys()) == sorted(set(keys))

    @given(
        st.lists(st.sampled_from(["a", "b", "c", "d", "e"]), max_size=40),
        st.integers(min_value=1, max_value=4),
    )
    @settings(max_examples=100)
    def test_bounded_cache_never_exceeds_limit(self, keys, limit):
        cache: ArtifactCache[str] = ArtifactCache(max_entries=limit)

        for key in keys:
            cache.get_or_compile(key, lambda key=key: key)
            assert len(cache) <= limit

        if keys:
            assert keys[-1] in cache
