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

"""Small composition utilities over the capability protocols."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from ._protocols import Closer, ReadCloser, Reader, WriteCloser, Writer
from .errors import StreamError

__all__ = [
    "NopCloser",
    "ReadWriteCloserPair",
    "ReaderWriter",
    "Scoped",
    "scoped",
]


@dataclass(slots=True)
class NopCloser:
    """ReadCloser whose close does nothing.

    Lets a plain :class:`Reader` be passed to APIs that insist on
    closability. Closing never touches the wrapped reader.
    """

    reader: Reader

    def read(self, size: int) -> tuple[bytes, StreamError | None]:
        return self.reader.read(size)

    def close(self) -> StreamError | None:  # noqa: PLR6301
        return None


@dataclass(slots=True)
class ReaderWriter:
    """Bidirectional stream built from an independent reader and writer.

    Owns neither side; closing is left to whoever created them.
    """

    reader: Reader
    writer: Writer

    def read(self, size: int) -> tuple[bytes, StreamError | None]:
        return self.reader.read(size)

    def write(self, data: bytes) -> tuple[int, StreamError | None]:
        return self.writer.write(data)


@dataclass
class ReadWriteCloserPair(ReaderWriter):
    """ReaderWriter that also closes both sides.

    Both sides are always closed. When both fail, the reader's error is
    returned.
    """

    reader: ReadCloser
    writer: WriteCloser

    def close(self) -> StreamError | None:
        read_err = self.reader.close()
        write_err = self.writer.close()
        return read_err if read_err is not None else write_err


@dataclass(frozen=True)
class Scoped[R]:
    """Outcome of :func:`scoped`.

    Attributes:
        result: Value returned by the use callback, or None if it never ran.
        error: Acquisition error, if the resource could not be obtained.
        close_error: Error reported when closing the resource.
    """

    result: R | None = None
    error: StreamError | None = None
    close_error: StreamError | None = None

    def on_error(self, handler: Callable[[StreamError], object]) -> Scoped[R]:
        """Call ``handler`` with the acquisition error, if there was one."""
        if self.error is not None:
            _ = handler(self.error)
        return self


def scoped[C: Closer, R](
    acquired: tuple[C | None, StreamError | None],
    use: Callable[[C], R],
) -> Scoped[R]:
    """Use a freshly acquired resource and close it on every exit path.

    ``acquired`` is the ``(resource, error)`` pair returned by constructors
    such as :meth:`File.create`. ``use`` runs only when a resource was
    obtained, and the resource is closed afterwards even if ``use`` raises::

        scoped(File.create("/tmp/out.bin"), lambda f: f.write(b"data")).on_error(
            lambda err: log.warning("create failed: %s", err)
        )
    """
    resource, error = acquired
    if resource is None:
        return Scoped(error=error)
    close_error: StreamError | None = None
    try:
        result = use(resource)
    finally:
        close_error = resource.close()
    return Scoped(result=result, error=error, close_error=close_error)
