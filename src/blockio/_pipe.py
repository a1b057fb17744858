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

"""In-process pipe connecting a writer thread to a reader thread."""

from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass, field

from ._protocols import check_read_size
from .errors import EOF, ErrorKind, StreamError, already_closed

__all__ = [
    "PipeReader",
    "PipeWriter",
    "pipe",
]


@dataclass(slots=True, eq=False)
class _PipeState:
    condition: threading.Condition = field(default_factory=threading.Condition)
    chunks: deque[bytes] = field(default_factory=deque)
    writer_closed: bool = False
    reader_closed: bool = False


class PipeReader:
    """Read side of :func:`pipe`.

    Reads block until the writer has supplied data or closed. After the
    writer closes, buffered chunks are drained before EOF is reported.
    """

    __slots__ = ("_state",)

    def __init__(self, state: _PipeState) -> None:
        self._state = state

    def read(self, size: int) -> tuple[bytes, StreamError | None]:
        check_read_size(size)
        state = self._state
        with state.condition:
            if state.reader_closed:
                return b"", already_closed()
            if size == 0:
                return b"", None
            _ = state.condition.wait_for(
                lambda: bool(state.chunks) or state.writer_closed or state.reader_closed
            )
            if state.reader_closed:
                return b"", already_closed()
            if not state.chunks:
                return b"", EOF
            head = state.chunks.popleft()
            if len(head) > size:
                state.chunks.appendleft(head[size:])
                head = head[:size]
        return head, None

    def close(self) -> StreamError | None:
        """Close the read side, discarding unread data and failing later writes."""
        state = self._state
        with state.condition:
            if state.reader_closed:
                return already_closed()
            state.reader_closed = True
            state.chunks.clear()
            state.condition.notify_all()
        return None


class PipeWriter:
    """Write side of :func:`pipe`. Writes never block."""

    __slots__ = ("_state",)

    def __init__(self, state: _PipeState) -> None:
        self._state = state

    def write(self, data: bytes) -> tuple[int, StreamError | None]:
        state = self._state
        with state.condition:
            if state.writer_closed:
                return 0, already_closed()
            if state.reader_closed:
                return 0, StreamError(ErrorKind.ALREADY_CLOSED, "pipe reader closed")
            if data:
                state.chunks.append(bytes(data))
                state.condition.notify_all()
        return len(data), None

    def close(self) -> StreamError | None:
        """Close the write side; the reader sees EOF once drained."""
        state = self._state
        with state.condition:
            if state.writer_closed:
                return already_closed()
            state.writer_closed = True
            state.condition.notify_all()
        return None


def pipe() -> tuple[PipeReader, PipeWriter]:
    """Return a connected in-memory reader/writer pair.

    Example::

        reader, writer = pipe()
        threading.Thread(target=lambda: (writer.write(b"hi"), writer.close())).start()
        copy(sink, reader)
    """
    state = _PipeState()
    return PipeReader(state), PipeWriter(state)
