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

"""Tests for the in-process pipe."""

from __future__ import annotations

import threading

from blockio import Buffer, ErrorKind, copy, pipe


class TestPipe:
    def test_write_then_read(self) -> None:
        reader, writer = pipe()
        assert writer.write(b"hello") == (5, None)
        assert reader.read(16) == (b"hello", None)

    def test_oversized_chunk_is_split(self) -> None:
        reader, writer = pipe()
        _ = writer.write(b"abcdef")
        assert reader.read(4) == (b"abcd", None)
        assert reader.read(4) == (b"ef", None)

    def test_drains_before_eof(self) -> None:
        reader, writer = pipe()
        _ = writer.write(b"a")
        _ = writer.write(b"b")
        assert writer.close() is None
        assert reader.read(1) == (b"a", None)
        assert reader.read(1) == (b"b", None)
        data, err = reader.read(1)
        assert data == b""
        assert err is not None and err.is_eof

    def test_read_blocks_until_write(self) -> None:
        reader, writer = pipe()
        results: list[tuple[bytes, object]] = []
        consumer = threading.Thread(target=lambda: results.append(reader.read(8)))
        consumer.start()
        consumer.join(timeout=0.05)
        assert consumer.is_alive()
        _ = writer.write(b"late")
        consumer.join(timeout=5)
        assert results == [(b"late", None)]

    def test_writer_close_wakes_blocked_reader(self) -> None:
        reader, writer = pipe()
        results: list[tuple[bytes, object]] = []
        consumer = threading.Thread(target=lambda: results.append(reader.read(8)))
        consumer.start()
        _ = writer.close()
        consumer.join(timeout=5)
        assert len(results) == 1
        data, err = results[0]
        assert data == b""
        assert err is not None

    def test_reader_close_fails_later_writes(self) -> None:
        reader, writer = pipe()
        _ = writer.write(b"dropped")
        assert reader.close() is None
        written, err = writer.write(b"x")
        assert written == 0
        assert err is not None
        assert err.kind is ErrorKind.ALREADY_CLOSED
        data, err = reader.read(4)
        assert data == b""
        assert err is not None and err.kind is ErrorKind.ALREADY_CLOSED

    def test_double_close(self) -> None:
        reader, writer = pipe()
        assert writer.close() is None
        assert reader.close() is None
        assert writer.close() is not None
        assert reader.close() is not None

    def test_copy_across_threads(self) -> None:
        reader, writer = pipe()
        payload = bytes(range(256)) * 64

        def produce() -> None:
            for start in range(0, len(payload), 700):
                _ = writer.write(payload[start : start + 700])
            _ = writer.close()

        producer = threading.Thread(target=produce)
        producer.start()
        sink = Buffer()
        assert copy(sink, reader) == (len(payload), None)
        producer.join(timeout=5)
        assert sink.getvalue() == payload
