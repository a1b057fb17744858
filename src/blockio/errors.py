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

"""Error model for :mod:`blockio`.

Stream operations never raise for I/O conditions. They return their result
paired with an optional :class:`StreamError`::

    data, err = reader.read(1024)
    if is_eof(err):
        ...  # no more data, not a failure
    elif err is not None:
        raise err

End-of-stream is an ordinary :class:`StreamError` whose ``kind`` is
:attr:`ErrorKind.END_OF_STREAM`. Compare it by kind with :func:`is_eof`
rather than by identity against :data:`EOF`.
"""

from __future__ import annotations

from enum import Enum
from typing import Final, override

__all__ = [
    "EOF",
    "BlockIOError",
    "ErrorKind",
    "StreamError",
    "already_closed",
    "is_eof",
    "os_failure",
]


class BlockIOError(Exception):
    """Base class for all blockio exceptions.

    Catching ``BlockIOError`` covers every error value produced by the
    library, including :class:`StreamError` instances a caller chose to
    raise.
    """


class ErrorKind(Enum):
    """Closed set of stream error categories."""

    END_OF_STREAM = "end-of-stream"
    INVALID_SEEK_OFFSET = "invalid-seek-offset"
    READ_FAILURE = "read-failure"
    ALREADY_CLOSED = "already-closed"
    UNKNOWN = "unknown"
    CUSTOM = "custom"


class StreamError(BlockIOError):
    """Error value returned alongside stream results.

    Attributes:
        kind: Category of the failure.
        message: Human readable description. For native failures this is the
            OS ``strerror`` text.
        code: OS ``errno`` for native failures, otherwise ``None``.
        offset: Attempted absolute position for seek range failures.
    """

    kind: ErrorKind
    message: str
    code: int | None
    offset: int | None

    def __init__(
        self,
        kind: ErrorKind,
        message: str | None = None,
        *,
        code: int | None = None,
        offset: int | None = None,
    ) -> None:
        resolved = message if message is not None else kind.value
        super().__init__(resolved)
        self.kind = kind
        self.message = resolved
        self.code = code
        self.offset = offset

    @classmethod
    def custom(cls, message: str) -> StreamError:
        """Return a ``CUSTOM`` error carrying ``message``."""
        return cls(ErrorKind.CUSTOM, message)

    @property
    def is_eof(self) -> bool:
        return self.kind is ErrorKind.END_OF_STREAM

    @override
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StreamError):
            return NotImplemented
        return (self.kind, self.message, self.code, self.offset) == (
            other.kind,
            other.message,
            other.code,
            other.offset,
        )

    @override
    def __hash__(self) -> int:
        return hash((self.kind, self.message, self.code, self.offset))

    @override
    def __repr__(self) -> str:
        parts = [f"kind={self.kind.name}", f"message={self.message!r}"]
        if self.code is not None:
            parts.append(f"code={self.code}")
        if self.offset is not None:
            parts.append(f"offset={self.offset}")
        return f"StreamError({', '.join(parts)})"

    @override
    def __str__(self) -> str:
        if self.code is not None:
            return f"{self.message} (errno {self.code})"
        return self.message


#: End-of-stream marker returned by readers once no more data is available.
EOF: Final[StreamError] = StreamError(ErrorKind.END_OF_STREAM, "EOF")


def is_eof(err: BaseException | None) -> bool:
    """Return True when ``err`` signals end-of-stream rather than a failure."""
    return isinstance(err, StreamError) and err.kind is ErrorKind.END_OF_STREAM


def already_closed() -> StreamError:
    return StreamError(ErrorKind.ALREADY_CLOSED, "already closed")


def os_failure(exc: OSError, kind: ErrorKind = ErrorKind.UNKNOWN) -> StreamError:
    """Translate an ``OSError`` into a :class:`StreamError` of ``kind``.

    The OS message and ``errno`` are preserved so the failure stays
    diagnosable without re-querying the OS.
    """
    message = exc.strerror or str(exc) or kind.value
    return StreamError(kind, message, code=exc.errno)
