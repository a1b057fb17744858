# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""In-memory streams.

Provides :class:`BufferReader`, a seekable read-only view over immutable
bytes, and :class:`Buffer`, a thread-safe growable buffer whose writes
always append while reads advance an independent cursor.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field

from ._protocols import Whence, check_read_size, resolve_seek
from .errors import StreamError

__all__ = [
    "Buffer",
    "BufferReader",
]


@dataclass(slots=True, init=False, eq=False)
class BufferReader:
    """Reader and Seeker over a fixed byte region.

    The region is held by reference through a ``memoryview``; nothing is
    copied until bytes are read. Reads never report EOF: an empty result
    at the end of the region is the only signal, so callers that need a
    definite end should compare :attr:`cursor` with :attr:`size`.

    Not thread-safe. Intended for short-lived, single-owner use.

    Example::

        reader = BufferReader(b"hello world")
        data, _ = reader.read(5)      # b"hello"
        reader.seek(-5, Whence.END)
        data, _ = reader.read(5)      # b"world"
    """

    _view: memoryview
    _cursor: int

    def __init__(self, data: bytes | bytearray | memoryview) -> None:
        self._view = memoryview(data).cast("B")
        self._cursor = 0

    @property
    def cursor(self) -> int:
        """Current read position."""
        return self._cursor

    @property
    def size(self) -> int:
        """Length of the underlying region."""
        return len(self._view)

    def __len__(self) -> int:
        return len(self._view)

    def read(self, size: int) -> tuple[bytes, StreamError | None]:
        """Read up to ``size`` bytes from the cursor."""
        check_read_size(size)
        count = min(size, len(self._view) - self._cursor)
        data = self._view[self._cursor : self._cursor + count].tobytes()
        self._cursor += count
        return data, None

    def seek(
        self, offset: int, whence: Whence = Whence.START
    ) -> tuple[int, StreamError | None]:
        """Move the cursor.

        On an out-of-range target the attempted position is returned with
        the error so it can be inspected; the cursor itself does not move.
        """
        target, err = resolve_seek(self._cursor, len(self._view), offset, whence)
        if err is None:
            self._cursor = target
        return target, err


@dataclass(slots=True, init=False, eq=False)
class Buffer:
    """Growable byte buffer with independent append and read positions.

    :meth:`write` always appends to the end regardless of the read cursor.
    :meth:`read` advances the cursor but never past the current length and
    never reports EOF, since more data may still be written. A single lock
    guards the region across reads, writes and seeks.

    Example::

        buf = Buffer()
        buf.write(b"abc")
        buf.read(2)   # (b"ab", None)
        buf.write(b"d")
        buf.read(8)   # (b"cd", None)
        buf.read(8)   # (b"", None)
    """

    _data: bytearray
    _cursor: int
    _lock: threading.Lock = field(repr=False)

    def __init__(self, data: bytes | bytearray | memoryview = b"") -> None:
        self._data = bytearray(data)
        self._cursor = 0
        self._lock = threading.Lock()

    @property
    def cursor(self) -> int:
        """Current read position."""
        with self._lock:
            return self._cursor

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def getvalue(self) -> bytes:
        """Return a copy of everything written so far."""
        with self._lock:
            return bytes(self._data)

    def read(self, size: int) -> tuple[bytes, StreamError | None]:
        """Read up to ``size`` bytes from the cursor."""
        check_read_size(size)
        with self._lock:
            count = min(size, len(self._data) - self._cursor)
            data = bytes(self._data[self._cursor : self._cursor + count])
            self._cursor += count
        return data, None

    def write(self, data: bytes) -> tuple[int, StreamError | None]:
        """Append ``data`` to the end of the buffer."""
        with self._lock:
            self._data.extend(data)
        return len(data), None

    def seek(
        self, offset: int, whence: Whence = Whence.START
    ) -> tuple[int, StreamError | None]:
        """Move the read cursor within ``[0, len(self)]``."""
        with self._lock:
            target, err = resolve_seek(self._cursor, len(self._data), offset, whence)
            if err is None:
                self._cursor = target
        return target, err
