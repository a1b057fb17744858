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

from __future__ import annotations

import pytest

from blockio import EOF, BufferReader, ErrorKind, PushbackReader, StreamError
from tests.helpers.streams import ScriptedReader


def test_read_byte_walks_the_stream() -> None:
    reader = PushbackReader(BufferReader(b"ab"))
    assert reader.read_byte() == (ord("a"), None)
    assert reader.read_byte() == (ord("b"), None)
    byte, err = reader.read_byte()
    assert byte == 0
    assert err is not None and err.is_eof


def test_unread_byte_is_returned_first() -> None:
    reader = PushbackReader(BufferReader(b"xyz"))
    first, _ = reader.read_byte()
    assert reader.unread_byte(first) is None
    assert reader.read(3) == (b"x", None)
    assert reader.read(3) == (b"yz", None)


def test_unread_accepts_any_byte_value() -> None:
    reader = PushbackReader(BufferReader(b""))
    assert reader.unread_byte(0xFF) is None
    assert reader.read_byte() == (0xFF, None)


def test_second_unread_is_an_error() -> None:
    reader = PushbackReader(BufferReader(b""))
    assert reader.unread_byte(1) is None
    err = reader.unread_byte(2)
    assert err is not None
    assert err.kind is ErrorKind.CUSTOM
    assert reader.read_byte() == (1, None)


@pytest.mark.parametrize("value", [-1, 256])
def test_unread_rejects_out_of_range_values(value: int) -> None:
    with pytest.raises(ValueError, match="out of range"):
        _ = PushbackReader(BufferReader(b"")).unread_byte(value)


def test_zero_size_read_keeps_pending_byte() -> None:
    reader = PushbackReader(BufferReader(b""))
    _ = reader.unread_byte(7)
    assert reader.read(0) == (b"", None)
    assert reader.read(1) == (b"\x07", None)


def test_read_byte_with_trailing_eof_returns_the_byte() -> None:
    reader = PushbackReader(ScriptedReader([(b"z", EOF)]))
    assert reader.read_byte() == (ord("z"), None)


def test_read_byte_surfaces_failures() -> None:
    failure = StreamError(ErrorKind.READ_FAILURE, "broken")
    reader = PushbackReader(ScriptedReader([(b"", failure)]))
    assert reader.read_byte() == (0, failure)
