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

"""Composable blocking I/O streams.

blockio defines a handful of capability protocols (:class:`Reader`,
:class:`Writer`, :class:`Closer`, :class:`Seeker`, :class:`ByteScanner` and
their compositions) and streams that satisfy them uniformly:

- :class:`File`: a thread-safe owner of one OS file descriptor, plus the
  :data:`stdin`, :data:`stdout` and :data:`stderr` singletons
- :class:`BufferReader`: a seekable view over immutable bytes
- :class:`Buffer`: a thread-safe growable buffer
- :class:`PushStreamReader` / :class:`PushStreamWriter`: blocking adapters
  over asyncio streams driven by a background :class:`EventPump`
- :func:`pipe`: an in-process reader/writer pair

Operations return their result paired with an optional
:class:`~blockio.errors.StreamError` instead of raising::

    from blockio import Buffer, File, copy

    src, err = File.open("input.bin", os.O_RDONLY)
    if err is not None:
        raise err
    sink = Buffer()
    count, err = copy(sink, src)
"""

from __future__ import annotations

from ._adapters import NopCloser, ReadWriteCloserPair, ReaderWriter, Scoped, scoped
from ._buffer import Buffer, BufferReader
from ._bufio import PushbackReader
from ._copy import COPY_CHUNK_SIZE, DEFAULT_CHUNK_SIZE, copy, iter_chunks
from ._file import DEFAULT_FILE_MODE, File, stderr, stdin, stdout
from ._logging import StructuredLogger, configure_logging, get_logger
from ._pipe import PipeReader, PipeWriter, pipe
from ._protocols import (
    ByteReader,
    ByteScanner,
    Closer,
    ReadCloser,
    Reader,
    ReadSeeker,
    ReadWriteCloser,
    ReadWriter,
    ReadWriteSeeker,
    Seeker,
    Whence,
    WriteCloser,
    Writer,
    WriteSeeker,
)
from ._pump import EventPump, default_pump
from ._push import PushStreamReadWriteCloser, PushStreamReader, PushStreamWriter
from .errors import EOF, BlockIOError, ErrorKind, StreamError, is_eof

__all__ = [
    "COPY_CHUNK_SIZE",
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_FILE_MODE",
    "EOF",
    "BlockIOError",
    "Buffer",
    "BufferReader",
    "ByteReader",
    "ByteScanner",
    "Closer",
    "ErrorKind",
    "EventPump",
    "File",
    "NopCloser",
    "PipeReader",
    "PipeWriter",
    "PushStreamReadWriteCloser",
    "PushStreamReader",
    "PushStreamWriter",
    "PushbackReader",
    "ReadCloser",
    "ReadSeeker",
    "ReadWriteCloser",
    "ReadWriteCloserPair",
    "ReadWriteSeeker",
    "ReadWriter",
    "Reader",
    "ReaderWriter",
    "Scoped",
    "Seeker",
    "StreamError",
    "StructuredLogger",
    "Whence",
    "WriteCloser",
    "WriteSeeker",
    "Writer",
    "configure_logging",
    "copy",
    "default_pump",
    "get_logger",
    "is_eof",
    "iter_chunks",
    "pipe",
    "scoped",
    "stderr",
    "stdin",
    "stdout",
]
