"""A fixed-size ring buffer indexed from its oldest sample."""

from __future__ import annotations

from collections.abc import Iterator


class CircularBuffer:
    """Ring buffer where index 0 is the oldest sample and -1 the newest.

    Appending a sample overwrites the oldest one, so the length never changes
    except through :meth:`resize`.
    """

    def __init__(self, size: int = 0) -> None:
        if size < 0:
            raise ValueError("buffer size must not be negative")
        self._data: list[float] = [0.0] * size
        self._write_index = 0

    def _position(self, index: int) -> int:
        size = len(self._data)
        if not -size <= index < size:
            raise IndexError("circular buffer index out of range")
        return (index % size + self._write_index) % size

    def __getitem__(self, index: int) -> float:
        return self._data[self._position(index)]

    def __setitem__(self, index: int, value: float) -> None:
        self._data[self._position(index)] = float(value)

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[float]:
        yield from self._data[self._write_index:]
        yield from self._data[: self._write_index]

    def __repr__(self) -> str:
        return f"CircularBuffer({list(self)!r})"

    def append(self, value: float) -> None:
        """Add a sample at the end, dropping the oldest one."""
        if not self._data:
            raise IndexError("cannot append to an empty circular buffer")
        self._data[self._write_index] = float(value)
        self._write_index = (self._write_index + 1) % len(self._data)

    def resize(self, size: int) -> None:
        """Change the size, keeping stored cells and padding with zeros.

        The read position is reset to the start of the underlying storage.
        """
        if size < 0:
            raise ValueError("buffer size must not be negative")
        if size <= len(self._data):
            del self._data[size:]
        else:
            self._data.extend([0.0] * (size - len(self._data)))
        self._write_index = 0