"""Tests for seed derivation and per-chunk random streams."""

from __future__ import annotations

import zlib

from tilecity.util.rng import (
    HASH_PRIME_X,
    HASH_PRIME_Z,
    ChunkStreams,
    chunk_seed,
    lot_hash,
    lot_seed,
    seed_to_int,
    wrap_int32,
)

# =============================================================================
# Integer helpers
# =============================================================================


class TestWrapInt32:
    """Tests for signed 32-bit wrapping."""

    def test_small_values_unchanged(self) -> None:
        """Values already in range pass through."""
        assert wrap_int32(0) == 0
        assert wrap_int32(12345) == 12345
        assert wrap_int32(-1) == -1

    def test_overflow_wraps(self) -> None:
        """Values past 2^31 wrap around like a C int."""
        assert wrap_int32(2**31) == -(2**31)
        assert wrap_int32(2**32 + 5) == 5
        assert wrap_int32(-(2**31) - 1) == 2**31 - 1


class TestSeedToInt:
    """Tests for seed normalization."""

    def test_none_is_zero(self) -> None:
        assert seed_to_int(None) == 0

    def test_strings_use_crc32(self) -> None:
        """String seeds are stable across interpreter sessions."""
        assert seed_to_int("city") == wrap_int32(zlib.crc32(b"city"))
        assert seed_to_int("city") != seed_to_int("town")

    def test_ints_are_wrapped(self) -> None:
        assert seed_to_int(7) == 7
        assert seed_to_int(2**40 + 3) == 3


# =============================================================================
# Chunk and lot seeds
# =============================================================================


class TestChunkSeed:
    """Tests for chunk seed derivation."""

    def test_crc32_of_seed_and_index(self) -> None:
        """String and int seeds are normalized before the index is mixed in."""
        assert chunk_seed(5, (1, -2)) == wrap_int32(zlib.crc32(b"5:1:-2"))
        assert chunk_seed("city", (0, 0)) == chunk_seed(seed_to_int("city"), (0, 0))

    def test_mirrored_chunks_differ(self) -> None:
        """Chunks mirrored through the origin do not share a seed."""
        for x, z in [(1, 1), (1, -1), (2, 2), (3, -5), (7, 9)]:
            assert chunk_seed(1, (x, z)) != chunk_seed(1, (-x, -z))

    def test_neighbours_differ(self) -> None:
        seeds = {chunk_seed(1, (x, z)) for x in range(-2, 3) for z in range(-2, 3)}
        assert len(seeds) == 25

    def test_repeatable(self) -> None:
        assert chunk_seed("world", (-3, 8)) == chunk_seed("world", (-3, 8))

    def test_result_is_int32(self) -> None:
        value = chunk_seed(2**31 - 1, (10_000, -10_000))
        assert -(2**31) <= value < 2**31


class TestLotSeed:
    """Tests for the per-lot rectangle hash."""

    def test_zero_rect_hashes_to_zero(self) -> None:
        assert lot_hash(0, 0, 0, 0) == 0

    def test_single_axis(self) -> None:
        assert lot_hash(1, 0, 0, 0) == HASH_PRIME_X
        assert lot_hash(0, 1, 0, 0) == HASH_PRIME_Z

    def test_offset_is_xored(self) -> None:
        h = lot_hash(3, 4, 5, 6)
        assert lot_seed(3, 4, 5, 6, 12345) == wrap_int32(h ^ 12345)
        assert lot_seed(3, 4, 5, 6, 0) == h

    def test_size_changes_seed(self) -> None:
        """Same origin, different size gives a different seed."""
        assert lot_seed(3, 4, 5, 6, 1) != lot_seed(3, 4, 6, 5, 1)

    def test_large_coordinates_stay_in_range(self) -> None:
        value = lot_hash(10**9, -(10**9), 500, 700)
        assert -(2**31) <= value < 2**31


# =============================================================================
# ChunkStreams
# =============================================================================


class TestChunkStreams:
    """Tests for isolated per-domain streams."""

    def test_same_domain_same_object(self) -> None:
        streams = ChunkStreams(10)
        assert streams.get("roads") is streams.get("roads")

    def test_domains_are_independent(self) -> None:
        """Consuming one stream does not shift another."""
        a = ChunkStreams(10)
        b = ChunkStreams(10)
        for _ in range(100):
            a.get("roads").random()
        assert a.get("packing").random() == b.get("packing").random()

    def test_domains_differ(self) -> None:
        streams = ChunkStreams(10)
        assert streams.get("roads").random() != streams.get("packing").random()

    def test_same_seed_same_sequence(self) -> None:
        a = ChunkStreams(77).get("roads")
        b = ChunkStreams(77).get("roads")
        assert [a.random() for _ in range(5)] == [b.random() for _ in range(5)]
        assert ChunkStreams(77).seed == 77
