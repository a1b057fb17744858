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

"""Unit tests for the in-memory streams."""

from __future__ import annotations

import pytest

from blockio import (
    Buffer,
    BufferReader,
    ErrorKind,
    Reader,
    ReadSeeker,
    ReadWriter,
    Whence,
    Writer,
)


class TestBufferReader:
    """Tests for BufferReader."""

    def test_satisfies_read_seeker(self) -> None:
        reader = BufferReader(b"abc")
        assert isinstance(reader, ReadSeeker)
        assert not isinstance(reader, Writer)

    def test_read_returns_requested_prefix(self) -> None:
        reader = BufferReader(b"hello world")
        assert reader.read(5) == (b"hello", None)
        assert reader.cursor == 5

    def test_short_read_at_end(self) -> None:
        reader = BufferReader(b"abc")
        _ = reader.read(2)
        assert reader.read(10) == (b"c", None)
        assert reader.cursor == 3

    def test_read_at_end_returns_empty_without_error(self) -> None:
        reader = BufferReader(b"ab")
        _ = reader.read(2)
        assert reader.read(4) == (b"", None)

    def test_zero_size_read(self) -> None:
        reader = BufferReader(b"abc")
        assert reader.read(0) == (b"", None)
        assert reader.cursor == 0

    def test_negative_size_raises(self) -> None:
        with pytest.raises(ValueError, match="non-negative"):
            _ = BufferReader(b"abc").read(-1)

    def test_holds_region_by_reference(self) -> None:
        data = bytearray(b"abcdef")
        reader = BufferReader(data)
        data[0] = ord("z")
        assert reader.read(1) == (b"z", None)

    def test_size_and_len(self) -> None:
        reader = BufferReader(b"abcd")
        assert reader.size == 4
        assert len(reader) == 4

    def test_seek_start_current_end(self) -> None:
        reader = BufferReader(b"hello world")
        assert reader.seek(6) == (6, None)
        assert reader.read(5) == (b"world", None)
        assert reader.seek(-5, Whence.CURRENT) == (6, None)
        assert reader.seek(-11, Whence.END) == (0, None)
        assert reader.read(5) == (b"hello", None)

    def test_seek_to_length_is_allowed(self) -> None:
        reader = BufferReader(b"abc")
        assert reader.seek(0, Whence.END) == (3, None)
        assert reader.read(1) == (b"", None)

    @pytest.mark.parametrize(
        ("offset", "whence", "attempted"),
        [(-1, Whence.START, -1), (4, Whence.START, 4), (1, Whence.END, 4), (-2, Whence.CURRENT, -1)],
    )
    def test_out_of_range_seek_reports_and_does_not_move(
        self, offset: int, whence: Whence, attempted: int
    ) -> None:
        reader = BufferReader(b"abc")
        _ = reader.read(1)
        position, err = reader.seek(offset, whence)
        assert err is not None
        assert err.kind is ErrorKind.INVALID_SEEK_OFFSET
        assert err.offset == attempted
        assert position == attempted
        assert reader.cursor == 1

    def test_seek_accepts_plain_int_whence(self) -> None:
        reader = BufferReader(b"abc")
        assert reader.seek(-1, 2) == (2, None)

    def test_seek_invalid_whence_raises(self) -> None:
        with pytest.raises(ValueError):
            _ = BufferReader(b"abc").seek(0, 99)  # pyright: ignore[reportArgumentType]


class TestBuffer:
    """Tests for the growable Buffer."""

    def test_satisfies_read_writer(self) -> None:
        assert isinstance(Buffer(), ReadWriter)
        assert isinstance(Buffer(), Reader)

    def test_write_reports_full_length(self) -> None:
        buf = Buffer()
        assert buf.write(b"abc") == (3, None)
        assert buf.write(b"") == (0, None)
        assert len(buf) == 3

    def test_write_appends_regardless_of_cursor(self) -> None:
        buf = Buffer(b"abc")
        _ = buf.read(1)
        _ = buf.write(b"de")
        assert buf.getvalue() == b"abcde"
        assert buf.read(10) == (b"bcde", None)

    def test_read_never_reports_eof(self) -> None:
        buf = Buffer()
        assert buf.read(4) == (b"", None)
        _ = buf.write(b"x")
        assert buf.read(4) == (b"x", None)
        assert buf.read(4) == (b"", None)

    def test_zero_size_read(self) -> None:
        buf = Buffer(b"abc")
        assert buf.read(0) == (b"", None)
        assert buf.cursor == 0

    def test_initial_content_is_copied(self) -> None:
        source = bytearray(b"abc")
        buf = Buffer(source)
        source[0] = ord("z")
        assert buf.getvalue() == b"abc"

    def test_seek_moves_read_cursor(self) -> None:
        buf = Buffer(b"hello")
        assert buf.seek(-2, Whence.END) == (3, None)
        assert buf.read(5) == (b"lo", None)
        assert buf.seek(0) == (0, None)
        assert buf.read(2) == (b"he", None)

    def test_seek_out_of_range_reports_invalid_offset(self) -> None:
        buf = Buffer(b"hello")
        position, err = buf.seek(6)
        assert position == 6
        assert err is not None
        assert err.kind is ErrorKind.INVALID_SEEK_OFFSET
        assert buf.cursor == 0

    def test_seek_bound_grows_with_writes(self) -> None:
        buf = Buffer(b"ab")
        assert buf.seek(3)[1] is not None
        _ = buf.write(b"c")
        assert buf.seek(3) == (3, None)
