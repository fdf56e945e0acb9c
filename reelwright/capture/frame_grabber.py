"""Concurrent frame capture with a single serial writer."""

import asyncio
import hashlib
import logging
from pathlib import Path

from reelwright.common.errors import CollectorStateError, ResourceError
from reelwright.timeline.schemas import FrameEntry, HoldEntry, ManifestEntry

logger = logging.getLogger(__name__)

FRAMES_DIRNAME = "frames"


class FrameGrabber:
    """Accepts screenshots while a scenario runs and writes them in order.

    ``submit`` assigns file names and builds the manifest synchronously, so the
    manifest order is the submission order. The bytes are handed to one writer
    task, so the on-disk order matches too. A screenshot identical to the one
    before it extends the previous entry into a hold instead of being written
    again.
    """

    def __init__(self, directory: Path, extension: str = "png") -> None:
        """Initialize the grabber.

        Args:
            directory: Where frames are written. Created on ``start``.
            extension: File extension of the screenshots.
        """
        self.directory = directory
        self.extension = extension
        self._entries: list[ManifestEntry] = []
        self._last_digest: bytes | None = None
        self._queue: asyncio.Queue[tuple[Path, bytes] | None] = asyncio.Queue()
        self._writer: asyncio.Task[None] | None = None
        self._closed = False
        self._error: OSError | None = None
        self.frames_written = 0

    @property
    def manifest(self) -> tuple[ManifestEntry, ...]:
        """Entries submitted so far, in capture order."""
        return tuple(self._entries)

    def start(self) -> None:
        """Create the frame directory and start the writer task."""
        self.directory.mkdir(parents=True, exist_ok=True)
        self._writer = asyncio.create_task(self._write_loop())

    def submit(self, image: bytes, timestamp_ms: float) -> str:
        """Queue a screenshot and return the manifest file it is shown from.

        Raises:
            CollectorStateError: If the grabber is not running.
        """
        if self._writer is None or self._closed:
            msg = "FrameGrabber is not running"
            raise CollectorStateError(msg)

        digest = hashlib.sha256(image).digest()
        if self._entries and digest == self._last_digest:
            last = self._entries[-1]
            self._entries[-1] = HoldEntry(
                timestamp_ms=last.timestamp_ms,
                file=last.file,
                count=last.frame_count + 1,
            )
            return last.file

        name = f"frame-{len(self._entries) + 1:05d}.{self.extension}"
        file = f"{self.directory.name}/{name}"
        self._entries.append(FrameEntry(timestamp_ms=timestamp_ms, file=file))
        self._last_digest = digest
        self._queue.put_nowait((self.directory / name, image))
        return file

    async def flush(self) -> None:
        """Wait until every queued frame has been written."""
        await self._queue.join()
        self._raise_write_error()

    async def close(self) -> None:
        """Flush, stop the writer and surface any write failure."""
        if self._writer is None or self._closed:
            return
        self._closed = True
        self._queue.put_nowait(None)
        await self._writer
        logger.info(
            "Flushed %d frames (%d manifest entries) to %s",
            self.frames_written,
            len(self._entries),
            self.directory,
        )
        self._raise_write_error()

    def _raise_write_error(self) -> None:
        if self._error is not None:
            msg = f"Failed to write captured frames to {self.directory}"
            raise ResourceError(msg) from self._error

    async def _write_loop(self) -> None:
        while True:
            item = await self._queue.get()
            try:
                if item is None:
                    return
                path, image = item
                # After a failure the remaining frames are drained, not written
                if self._error is None:
                    await asyncio.to_thread(path.write_bytes, image)
                    self.frames_written += 1
            except OSError as e:
                logger.error("Failed to write frame %s: %s", item[0] if item else None, e)
                self._error = e
            finally:
                self._queue.task_done()
