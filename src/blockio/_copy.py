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

"""Generic transfer algorithms built only on :class:`Reader` and :class:`Writer`."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Final

from ._logging import get_logger
from ._protocols import Reader, Writer
from .errors import StreamError

__all__ = [
    "COPY_CHUNK_SIZE",
    "DEFAULT_CHUNK_SIZE",
    "copy",
    "iter_chunks",
]

#: Largest single read issued by :func:`copy`.
COPY_CHUNK_SIZE: Final[int] = 1024

#: Default chunk size for :func:`iter_chunks` (64KB).
DEFAULT_CHUNK_SIZE: Final[int] = 65_536

logger = get_logger(__name__)


def copy(
    dst: Writer, src: Reader, limit: int | None = None
) -> tuple[int, StreamError | None]:
    """Copy from ``src`` to ``dst`` until EOF, ``limit`` bytes, or an error.

    Data is moved in chunks of at most :data:`COPY_CHUNK_SIZE` bytes. Bytes
    returned alongside a read error are written before the error is
    examined. Reaching end-of-stream is success, as is a read that returns
    no bytes and no error (the signal in-memory buffers give when drained).

    Returns:
        The number of bytes written to ``dst`` and the error that stopped the
        copy, or ``None``. On a short write the count includes the partial
        write and the error is the writer's.
    """
    if limit is not None and limit < 0:
        msg = f"Copy limit must be non-negative, got {limit}"
        raise ValueError(msg)

    written = 0
    while limit is None or written < limit:
        chunk = COPY_CHUNK_SIZE if limit is None else min(limit - written, COPY_CHUNK_SIZE)
        data, read_err = src.read(chunk)
        if data:
            count, write_err = dst.write(data)
            written += count
            if write_err is not None or count < len(data):
                err = write_err if write_err is not None else StreamError.custom("short write")
                _log_failure(written, err)
                return written, err
        if read_err is not None:
            if read_err.is_eof:
                return written, None
            _log_failure(written, read_err)
            return written, read_err
        if not data:
            return written, None
    return written, None


def _log_failure(written: int, err: StreamError) -> None:
    logger.debug(
        "blockio.copy.failed",
        event="copy.failed",
        context={"written": written, "kind": err.kind.value, "error": str(err)},
    )


def iter_chunks(src: Reader, size: int = DEFAULT_CHUNK_SIZE) -> Iterator[bytes]:
    """Yield chunks of at most ``size`` bytes until ``src`` is exhausted.

    Stops at end-of-stream or at an empty read.

    Raises:
        StreamError: For any read failure other than end-of-stream.
        ValueError: If ``size`` is not positive.
    """
    if size <= 0:
        msg = f"Chunk size must be positive, got {size}"
        raise ValueError(msg)
    while True:
        data, err = src.read(size)
        if data:
            yield data
        if err is not None:
            if err.is_eof:
                return
            raise err
        if not data:
            return
