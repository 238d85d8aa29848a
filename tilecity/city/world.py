"""Chunk lifecycle around a moving point of interest.

The ChunkManager keeps every chunk within ``active_range`` chunks of the
focus (usually the player) generated, and forgets chunks that fall out of
range. Chunks are never persisted: a chunk that comes back into range is
regenerated from the seed and comes out identical.

Generation is sliced. Each pending chunk is a ChunkJob, and ``tick()``
advances the jobs round-robin so a host can bound the time spent per frame.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from tilecity import config

from .factory import create_pipeline
from .grid import world_to_chunk
from .settings import CitySettings, ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Generator

    from tilecity.types import ChunkIndex, WorldCoord

    from .context import ChunkLayout
    from .pipeline import ChunkGenerator

logger = logging.getLogger(__name__)


class ChunkJob:
    """One in-flight, resumable chunk generation."""

    def __init__(self, chunk_index: ChunkIndex, generator: ChunkGenerator) -> None:
        self.chunk_index = chunk_index
        self._steps: Generator[None, None, ChunkLayout] = generator.iter_generate()
        self.result: ChunkLayout | None = None
        self.cancelled = False

    @property
    def done(self) -> bool:
        return self.result is not None or self.cancelled

    def step(self) -> bool:
        """Advance by one slice. Returns True once the job is done."""
        if self.done:
            return True
        try:
            next(self._steps)
        except StopIteration as finished:
            self.result = finished.value
            return True
        return False

    def cancel(self) -> None:
        """Abandon the job. Its partial state is simply dropped."""
        if self.done:
            return
        self._steps.close()
        self.cancelled = True


class ChunkManager:
    """Registry of generated chunks, keyed by chunk index.

    Args:
        settings: World settings, validated here. None uses the defaults.
        active_range: Chunks kept around the focus chunk, per axis.
        pipeline: Pipeline name passed to ``create_pipeline``.

    Raises:
        ConfigurationError: If the settings or the range are invalid.
    """

    def __init__(
        self,
        settings: CitySettings | None = None,
        active_range: int = config.ACTIVE_RANGE,
        pipeline: str = "city",
    ) -> None:
        if active_range < 0:
            raise ConfigurationError(f"active_range={active_range!r} must be >= 0")
        self.settings = settings if settings is not None else CitySettings()
        self.settings.validate()
        self.active_range = active_range
        self.pipeline = pipeline
        self.center: ChunkIndex | None = None
        self._layouts: dict[ChunkIndex, ChunkLayout] = {}
        self._jobs: dict[ChunkIndex, ChunkJob] = {}

    @property
    def loaded(self) -> list[ChunkIndex]:
        return list(self._layouts)

    @property
    def pending(self) -> list[ChunkIndex]:
        return list(self._jobs)

    def required(self, center: ChunkIndex) -> list[ChunkIndex]:
        """Chunks in range of ``center``, nearest first."""
        cx, cz = center
        r = self.active_range
        indices = [
            (cx + dx, cz + dz) for dz in range(-r, r + 1) for dx in range(-r, r + 1)
        ]
        indices.sort(key=lambda i: (max(abs(i[0] - cx), abs(i[1] - cz)), i[1], i[0]))
        return indices

    def update(
        self, world_x: WorldCoord, world_z: WorldCoord
    ) -> tuple[list[ChunkIndex], list[ChunkIndex]]:
        """Move the focus to a world position.

        Unloads chunks that left the range (cancelling their jobs) and queues
        jobs for chunks that entered it.

        Returns:
            A tuple of (queued, unloaded) chunk indices.
        """
        center = world_to_chunk(
            world_x, world_z, self.settings.chunk_tiles, self.settings.cell_size
        )
        self.center = center
        required = self.required(center)
        wanted = set(required)

        unloaded: list[ChunkIndex] = []
        for index in list(self._layouts):
            if index not in wanted:
                del self._layouts[index]
                unloaded.append(index)
                logger.info("Chunk %s unloaded", index)
        for index in list(self._jobs):
            if index not in wanted:
                self._jobs.pop(index).cancel()
                unloaded.append(index)
                logger.info("Chunk %s cancelled while generating", index)

        queued: list[ChunkIndex] = []
        for index in required:
            if index in self._layouts or index in self._jobs:
                continue
            self._jobs[index] = ChunkJob(index, self._generator(index))
            queued.append(index)

        return queued, unloaded

    def tick(self, max_steps: int = 1) -> list[ChunkIndex]:
        """Advance pending jobs round-robin by up to ``max_steps`` slices.

        Returns:
            Chunks that finished during this tick.
        """
        finished: list[ChunkIndex] = []
        steps = 0
        while self._jobs and steps < max_steps:
            index = next(iter(self._jobs))
            job = self._jobs.pop(index)
            steps += 1
            if job.step():
                self._store(index, job)
                finished.append(index)
            else:
                # Back of the queue
                self._jobs[index] = job
        return finished

    def layout(self, chunk_index: ChunkIndex) -> ChunkLayout | None:
        return self._layouts.get(chunk_index)

    def generate_now(self, chunk_index: ChunkIndex) -> ChunkLayout:
        """Generate a chunk synchronously, replacing any in-flight job."""
        existing = self._layouts.get(chunk_index)
        if existing is not None:
            return existing
        job = self._jobs.pop(chunk_index, None)
        if job is not None:
            job.cancel()

        layout = self._generator(chunk_index).generate()
        self._layouts[chunk_index] = layout
        logger.info("Chunk %s loaded", chunk_index)
        return layout

    def _generator(self, chunk_index: ChunkIndex) -> ChunkGenerator:
        return create_pipeline(self.pipeline, self.settings, chunk_index)

    def _store(self, index: ChunkIndex, job: ChunkJob) -> None:
        assert job.result is not None
        self._layouts[index] = job.result
        logger.info("Chunk %s loaded", index)
