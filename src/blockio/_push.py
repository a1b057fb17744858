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

"""Blocking adapters over asyncio's push-style streams.

asyncio streams deliver data through readiness callbacks on an event loop
and cannot be driven from ordinary blocking code. The adapters here open
the native stream on an :class:`~blockio._pump.EventPump` and turn each
``read``/``write`` into a coroutine submitted to the pump; the calling
thread blocks on the resulting future until the pump reports data, drain
completion, end-of-stream or an error.

The wait has no timeout and cannot be cancelled: a stalled peer blocks the
caller indefinitely.

Example::

    read_fd, write_fd = os.pipe()
    reader, err = PushStreamReader.open_pipe(read_fd)
    writer, err = PushStreamWriter.open_pipe(write_fd)
    writer.write(b"ping")
    reader.read(4)  # (b"ping", None)
"""

from __future__ import annotations

import asyncio
import contextlib
import os
import socket
import threading
import weakref
from typing import BinaryIO, Self

from ._adapters import ReadWriteCloserPair
from ._logging import get_logger
from ._protocols import check_read_size
from ._pump import EventPump, default_pump
from .errors import EOF, ErrorKind, StreamError, already_closed, os_failure

__all__ = [
    "PushStreamReadWriteCloser",
    "PushStreamReader",
    "PushStreamWriter",
]

logger = get_logger(__name__)

type _Pipe = int | BinaryIO


def _pipe_file(pipe: _Pipe, mode: str) -> BinaryIO:
    if isinstance(pipe, int):
        return os.fdopen(pipe, mode, buffering=0)
    return pipe


def _pipe_failure(file: BinaryIO, exc: OSError | ValueError) -> StreamError:
    """Close a pipe whose transport could not be opened and report why."""
    with contextlib.suppress(OSError):
        file.close()
    logger.debug(
        "blockio.push.open_failed",
        event="push.open_failed",
        context={"error": str(exc)},
    )
    if isinstance(exc, OSError):
        return os_failure(exc)
    return StreamError.custom(str(exc))


def _abandon(pump: EventPump, transport: asyncio.BaseTransport) -> None:
    """Finalizer for adapters collected without close."""
    if pump.running:
        pump.call_soon(transport.close)
        logger.debug(
            "blockio.push.abandoned",
            event="push.abandoned",
            context={"pump": pump.name},
        )


class PushStreamReader:
    """ReadCloser over an ``asyncio.StreamReader`` owned by a pump.

    Instances come from :meth:`open_pipe` or
    :meth:`PushStreamReadWriteCloser.open_connection`, which open the native
    stream on the pump loop. Reads are serialized with a lock since an
    asyncio stream accepts only one waiting reader.
    """

    def __init__(
        self,
        stream: asyncio.StreamReader,
        transport: asyncio.BaseTransport,
        *,
        pump: EventPump,
    ) -> None:
        self._stream = stream
        self._transport = transport
        self._pump = pump
        self._lock = threading.Lock()
        self._closed = False
        self._finalizer = weakref.finalize(self, _abandon, pump, transport)

    @classmethod
    def open_pipe(
        cls, pipe: _Pipe, *, pump: EventPump | None = None
    ) -> tuple[Self | None, StreamError | None]:
        """Open the read end of a pipe (descriptor or binary file object).

        Ownership of ``pipe`` passes to the returned reader. When the transport
        cannot be opened, for example because ``pipe`` is a regular file, it
        is closed and the failure is returned.
        """
        resolved = pump if pump is not None else default_pump()
        try:
            file = _pipe_file(pipe, "rb")
        except OSError as exc:
            return None, os_failure(exc)

        async def connect() -> tuple[asyncio.StreamReader, asyncio.BaseTransport]:
            loop = asyncio.get_running_loop()
            stream = asyncio.StreamReader()
            transport, _ = await loop.connect_read_pipe(
                lambda: asyncio.StreamReaderProtocol(stream), file
            )
            return stream, transport

        try:
            stream, transport = resolved.run(connect())
        except (OSError, ValueError) as exc:
            return None, _pipe_failure(file, exc)
        return cls(stream, transport, pump=resolved), None

    @property
    def closed(self) -> bool:
        return self._closed

    def read(self, size: int) -> tuple[bytes, StreamError | None]:
        """Block until data, end-of-stream or an error arrives."""
        check_read_size(size)
        with self._lock:
            if self._closed:
                return b"", already_closed()
            if size == 0:
                return b"", None
            try:
                data = self._pump.run(self._stream.read(size))
            except OSError as exc:
                return b"", os_failure(exc, ErrorKind.READ_FAILURE)
        if not data:
            return b"", EOF
        return data, None

    def close(self) -> StreamError | None:
        """Close the native stream, returning its recorded error if any."""
        with self._lock:
            if self._closed:
                return already_closed()
            self._closed = True
            _ = self._finalizer.detach()

            async def shutdown() -> BaseException | None:
                self._transport.close()
                return self._stream.exception()

            exc = self._pump.run(shutdown())
        if isinstance(exc, OSError):
            return os_failure(exc, ErrorKind.READ_FAILURE)
        if exc is not None:
            return StreamError.custom(str(exc) or type(exc).__name__)
        return None

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        if not self._closed:
            _ = self.close()


class PushStreamWriter:
    """WriteCloser over an ``asyncio.StreamWriter`` owned by a pump.

    ``write`` hands the bytes to the transport and blocks until the pump
    reports the buffer drained below its high-water mark. asyncio accepts
    a write as a whole, so a write either reports every byte or none.
    """

    def __init__(self, stream: asyncio.StreamWriter, *, pump: EventPump) -> None:
        self._stream = stream
        self._pump = pump
        self._lock = threading.Lock()
        self._closed = False
        self._finalizer = weakref.finalize(self, _abandon, pump, stream.transport)

    @classmethod
    def open_pipe(
        cls, pipe: _Pipe, *, pump: EventPump | None = None
    ) -> tuple[Self | None, StreamError | None]:
        """Open the write end of a pipe (descriptor or binary file object).

        Ownership of ``pipe`` passes to the returned writer. When the transport
        cannot be opened, for example because ``pipe`` is a regular file, it
        is closed and the failure is returned.
        """
        resolved = pump if pump is not None else default_pump()
        try:
            file = _pipe_file(pipe, "wb")
        except OSError as exc:
            return None, os_failure(exc)

        async def connect() -> asyncio.StreamWriter:
            loop = asyncio.get_running_loop()
            stream = asyncio.StreamReader()
            transport, protocol = await loop.connect_write_pipe(
                lambda: asyncio.StreamReaderProtocol(stream), file
            )
            return asyncio.StreamWriter(transport, protocol, stream, loop)

        try:
            stream = resolved.run(connect())
        except (OSError, ValueError) as exc:
            return None, _pipe_failure(file, exc)
        return cls(stream, pump=resolved), None

    @property
    def closed(self) -> bool:
        return self._closed

    async def _send(self, data: bytes) -> None:
        self._stream.write(data)
        await self._stream.drain()

    def write(self, data: bytes) -> tuple[int, StreamError | None]:
        """Block until ``data`` is accepted by the transport."""
        with self._lock:
            if self._closed:
                return 0, already_closed()
            if not data:
                return 0, None
            try:
                self._pump.run(self._send(bytes(data)))
            except OSError as exc:
                return 0, os_failure(exc, ErrorKind.READ_FAILURE)
        return len(data), None

    def close(self) -> StreamError | None:
        """Flush and close the native stream.

        Returns the error the stream reported while closing, or ``None``
        when it closed cleanly.
        """
        with self._lock:
            if self._closed:
                return already_closed()
            self._closed = True
            _ = self._finalizer.detach()

            async def shutdown() -> None:
                self._stream.close()
                await self._stream.wait_closed()

            try:
                self._pump.run(shutdown())
            except OSError as exc:
                return os_failure(exc, ErrorKind.READ_FAILURE)
        return None

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        if not self._closed:
            _ = self.close()


class PushStreamReadWriteCloser(ReadWriteCloserPair):
    """Reader and writer over one bidirectional asyncio connection."""

    reader: PushStreamReader
    writer: PushStreamWriter

    @classmethod
    def open_connection(
        cls, host: str, port: int, *, pump: EventPump | None = None
    ) -> tuple[PushStreamReadWriteCloser | None, StreamError | None]:
        """Connect to ``host:port`` over TCP."""
        return cls._open(pump, host=host, port=port)

    @classmethod
    def from_socket(
        cls, sock: socket.socket, *, pump: EventPump | None = None
    ) -> tuple[PushStreamReadWriteCloser | None, StreamError | None]:
        """Adopt a connected, not yet opened socket.

        Ownership of ``sock`` passes to the returned stream.
        """
        return cls._open(pump, sock=sock)

    @classmethod
    def _open(
        cls, pump: EventPump | None, **connect: object
    ) -> tuple[PushStreamReadWriteCloser | None, StreamError | None]:
        resolved = pump if pump is not None else default_pump()
        try:
            stream_reader, stream_writer = resolved.run(
                asyncio.open_connection(**connect)  # pyright: ignore[reportArgumentType]
            )
        except OSError as exc:
            logger.debug(
                "blockio.push.connect_failed",
                event="push.connect_failed",
                context={"errno": exc.errno},
            )
            return None, os_failure(exc)
        reader = PushStreamReader(
            stream_reader, stream_writer.transport, pump=resolved
        )
        writer = PushStreamWriter(stream_writer, pump=resolved)
        return cls(reader, writer), None

    def close(self) -> StreamError | None:
        """Close the writer, then the reader; the reader's error wins."""
        write_err = self.writer.close()
        read_err = self.reader.close()
        return read_err if read_err is not None else write_err
