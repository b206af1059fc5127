"""Small I/O helpers."""

from __future__ import annotations

import io
from typing import BinaryIO, Protocol


class Timer(Protocol):
    """Anything that can be stopped to record an observation."""

    def stop(self) -> float:
        """Stop the timer and report the observation."""
        ...


def new_bytes_read_closer(data: bytes) -> io.BytesIO:
    """Return a closeable binary stream over in-memory bytes."""
    return io.BytesIO(bytes(data))


def read_all(reader: BinaryIO, timer: Timer) -> bytes:
    """Read the reader to its end, stopping the timer afterwards."""
    try:
        return reader.read()
    finally:
        timer.stop()