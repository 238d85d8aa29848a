"""Deterministic seed derivation and isolated random streams.

Every chunk is regenerated from nothing but the world seed and its index, so
all randomness in the layout engine flows from the helpers in this module:

1. ``chunk_seed`` mixes the world seed with a chunk index
2. ``ChunkStreams`` splits that chunk seed into one independent ``Random`` per
   generation stage ("roads", "packing", ...), so a stage that starts
   consuming more numbers does not shift the sequences of the others
3. ``lot_seed`` hashes a lot's interior rectangle so the same lot packs the
   same way no matter which order lots are visited in

Usage:
    streams = ChunkStreams(chunk_seed(settings.seed, (3, -2)))
    roads_rng = streams.get("roads")

Nothing here reads the clock or any other ambient entropy. A layout that
cannot be reproduced from (seed, chunk index) is a bug.
"""

from __future__ import annotations

import zlib
from random import Random
from typing import TYPE_CHECKING, TypeAlias

if TYPE_CHECKING:
    from tilecity.types import ChunkIndex, RandomSeed

# Large odd multipliers from the classic spatial-hash paper (Teschner et al.)
HASH_PRIME_X = 73856093
HASH_PRIME_Z = 19349663
HASH_PRIME_W = 83492791
HASH_PRIME_H = 297121507

_MASK_32 = 0xFFFFFFFF

RNG: TypeAlias = Random


def wrap_int32(value: int) -> int:
    """Wrap an arbitrary Python int to a signed 32-bit integer."""
    value &= _MASK_32
    return value - (1 << 32) if value & 0x80000000 else value


def seed_to_int(seed: RandomSeed) -> int:
    """Normalize a user-facing seed to a signed 32-bit integer.

    Strings go through crc32 rather than hash(), which is randomized per
    interpreter session via PYTHONHASHSEED and would break cross-session
    determinism. ``None`` maps to 0.
    """
    if seed is None:
        return 0
    if isinstance(seed, str):
        return wrap_int32(zlib.crc32(seed.encode()))
    return wrap_int32(seed)


def chunk_seed(world_seed: RandomSeed, chunk_index: ChunkIndex) -> int:
    """Derive the seed of one chunk purely from the world seed and its index.

    The index is hashed with crc32, like the stream domains are, so mirrored
    chunks such as (1, 1) and (-1, -1) get different seeds.
    """
    cx, cz = chunk_index
    key = f"{seed_to_int(world_seed)}:{cx}:{cz}"
    return wrap_int32(zlib.crc32(key.encode()))


def lot_hash(x: int, z: int, width: int, height: int) -> int:
    """Hash a cell rectangle (origin and size) to a signed 32-bit integer."""
    return wrap_int32(
        wrap_int32(x * HASH_PRIME_X)
        ^ wrap_int32(z * HASH_PRIME_Z)
        ^ wrap_int32(width * HASH_PRIME_W)
        ^ wrap_int32(height * HASH_PRIME_H)
    )


def lot_seed(x: int, z: int, width: int, height: int, offset: int) -> int:
    """Per-lot packing seed: the rectangle hash XOR a global offset."""
    return wrap_int32(offset ^ lot_hash(x, z, width, height))


class ChunkStreams:
    """Provides isolated RNG streams for the stages of one chunk's generation.

    Each domain gets its own Random instance derived deterministically from
    the chunk seed. Domains are identified by short names such as "roads".
    The provider is owned by exactly one chunk and is never shared.
    """

    def __init__(self, seed: int) -> None:
        self._seed = seed
        self._streams: dict[str, Random] = {}

    @property
    def seed(self) -> int:
        return self._seed

    def get(self, domain: str) -> Random:
        """Get the RNG stream for the named domain, creating it on first use.

        Args:
            domain: Stage name like "roads" or "packing".

        Returns:
            The Random instance for this domain. Repeated calls return the
            same object, so consumption carries over between calls.
        """
        if domain not in self._streams:
            derived = zlib.crc32(f"{self._seed}:{domain}".encode())
            self._streams[domain] = Random(derived)
        return self._streams[domain]
