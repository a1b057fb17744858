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

"""Byte-level reading with one byte of pushback over any Reader."""

from __future__ import annotations

from dataclasses import dataclass, field

from ._protocols import Reader, check_read_size
from .errors import EOF, StreamError, is_eof

__all__ = ["PushbackReader"]


@dataclass(slots=True)
class PushbackReader:
    """Reader and ByteScanner wrapping another Reader.

    :meth:`unread_byte` stores a single byte that the next read returns
    before anything from the wrapped reader. A second unread before that
    byte is consumed reports an error.

    An empty read from the wrapped reader with no error is treated as
    end-of-stream by :meth:`read_byte`, which cannot return zero bytes.

    Not thread-safe.
    """

    reader: Reader
    _pending: int | None = field(default=None, init=False, repr=False)

    def read(self, size: int) -> tuple[bytes, StreamError | None]:
        """Read up to ``size`` bytes, returning a pushed-back byte first.

        A pending byte is returned on its own as a short read.
        """
        check_read_size(size)
        if size == 0:
            return b"", None
        if self._pending is not None:
            byte, self._pending = self._pending, None
            return bytes((byte,)), None
        return self.reader.read(size)

    def read_byte(self) -> tuple[int, StreamError | None]:
        if self._pending is not None:
            byte, self._pending = self._pending, None
            return byte, None
        data, err = self.reader.read(1)
        if data:
            return data[0], None if is_eof(err) else err
        return 0, err if err is not None else EOF

    def unread_byte(self, byte: int) -> StreamError | None:
        """Push ``byte`` back onto the stream.

        Raises:
            ValueError: If ``byte`` is outside ``0..255``.
        """
        if not 0 <= byte <= 0xFF:
            msg = f"Byte value out of range: {byte}"
            raise ValueError(msg)
        if self._pending is not None:
            return StreamError.custom("unread_byte: pushback already holds a byte")
        self._pending = byte
        return None
