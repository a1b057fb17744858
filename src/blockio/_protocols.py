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

"""Capability protocols shared by every blockio stream.

Concrete streams never inherit from these protocols. They satisfy them
structurally, so any object with the right members can be passed wherever
a ``Reader`` or ``Writer`` is expected::

    def drain(src: Reader) -> bytes:
        chunks: list[bytes] = []
        while True:
            data, err = src.read(4096)
            chunks.append(data)
            if err is not None or not data:
                return b"".join(chunks)
"""

from __future__ import annotations

import os
from enum import IntEnum
from typing import Protocol, runtime_checkable

from .errors import ErrorKind, StreamError

__all__ = [
    "ByteReader",
    "ByteScanner",
    "Closer",
    "ReadCloser",
    "ReadSeeker",
    "ReadWriteCloser",
    "ReadWriteSeeker",
    "ReadWriter",
    "Reader",
    "Seeker",
    "Whence",
    "WriteCloser",
    "WriteSeeker",
    "Writer",
]


class Whence(IntEnum):
    """Reference point for :meth:`Seeker.seek`."""

    START = os.SEEK_SET
    CURRENT = os.SEEK_CUR
    END = os.SEEK_END


@runtime_checkable
class Reader(Protocol):
    """Sequential byte source."""

    def read(self, size: int) -> tuple[bytes, StreamError | None]:
        """Read *at most* ``size`` bytes.

        A short read is not an error. Once no more bytes will become
        available the error is :data:`~blockio.errors.EOF`. Requesting zero
        bytes returns ``(b"", None)``.

        Raises:
            ValueError: If ``size`` is negative.
        """
        ...


@runtime_checkable
class Writer(Protocol):
    """Sequential byte sink."""

    def write(self, data: bytes) -> tuple[int, StreamError | None]:
        """Write ``data``.

        Returns the number of bytes written. When fewer than ``len(data)``
        bytes were written the error explains the short write.
        """
        ...


@runtime_checkable
class Closer(Protocol):
    """Releasable resource."""

    def close(self) -> StreamError | None:
        """Release the resource.

        A second call reports ``ALREADY_CLOSED`` instead of running teardown
        again.
        """
        ...


@runtime_checkable
class Seeker(Protocol):
    """Random access over a stream position."""

    def seek(
        self, offset: int, whence: Whence = Whence.START
    ) -> tuple[int, StreamError | None]:
        """Move the stream position.

        Returns the new absolute position. An out-of-range result reports
        ``INVALID_SEEK_OFFSET`` and the position is left untouched.
        """
        ...


@runtime_checkable
class ByteReader(Protocol):
    """Single byte reads with the same EOF convention as :class:`Reader`."""

    def read_byte(self) -> tuple[int, StreamError | None]: ...


@runtime_checkable
class ByteScanner(ByteReader, Protocol):
    """ByteReader with one byte of guaranteed pushback."""

    def unread_byte(self, byte: int) -> StreamError | None:
        """Push ``byte`` back so the next :meth:`read_byte` returns it."""
        ...


@runtime_checkable
class ReadWriter(Reader, Writer, Protocol): ...


@runtime_checkable
class ReadCloser(Reader, Closer, Protocol): ...


@runtime_checkable
class WriteCloser(Writer, Closer, Protocol): ...


@runtime_checkable
class ReadWriteCloser(Reader, Writer, Closer, Protocol): ...


@runtime_checkable
class ReadSeeker(Reader, Seeker, Protocol): ...


@runtime_checkable
class WriteSeeker(Writer, Seeker, Protocol): ...


@runtime_checkable
class ReadWriteSeeker(Reader, Writer, Seeker, Protocol): ...


def check_read_size(size: int) -> None:
    """Raise ``ValueError`` for a negative read size."""
    if size < 0:
        msg = f"Read size must be non-negative, got {size}"
        raise ValueError(msg)


def resolve_seek(
    position: int, length: int, offset: int, whence: int
) -> tuple[int, StreamError | None]:
    """Compute a seek target against an in-memory region of ``length`` bytes.

    Returns the target and ``None`` when it lies in ``[0, length]``, otherwise
    the attempted target paired with an ``INVALID_SEEK_OFFSET`` error.

    Raises:
        ValueError: If ``whence`` is not a :class:`Whence` value.
    """
    match Whence(whence):
        case Whence.START:
            target = offset
        case Whence.CURRENT:
            target = position + offset
        case Whence.END:
            target = length + offset
    if target < 0 or target > length:
        return target, StreamError(
            ErrorKind.INVALID_SEEK_OFFSET,
            f"Seek target {target} outside [0, {length}]",
            offset=target,
        )
    return target, None
