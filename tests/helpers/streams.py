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

"""Scripted Reader, Writer and Closer doubles."""

from __future__ import annotations

from dataclasses import dataclass, field

from blockio import StreamError


@dataclass(slots=True)
class ScriptedReader:
    """Reader that replays a fixed script of ``(data, error)`` results."""

    script: list[tuple[bytes, StreamError | None]]
    requested: list[int] = field(default_factory=list)

    def read(self, size: int) -> tuple[bytes, StreamError | None]:
        self.requested.append(size)
        if not self.script:
            return b"", None
        data, err = self.script.pop(0)
        return data[:size], err


@dataclass(slots=True)
class LimitedWriter:
    """Writer that accepts at most ``capacity`` bytes in total."""

    capacity: int
    error: StreamError | None = None
    received: bytearray = field(default_factory=bytearray)

    def write(self, data: bytes) -> tuple[int, StreamError | None]:
        room = self.capacity - len(self.received)
        accepted = data[:room]
        self.received.extend(accepted)
        if len(accepted) < len(data):
            return len(accepted), self.error
        return len(accepted), None


@dataclass(slots=True)
class RecordingCloser:
    """Reader/writer that records close calls and returns a canned error."""

    close_error: StreamError | None = None
    closes: int = 0

    def read(self, size: int) -> tuple[bytes, StreamError | None]:
        return b"", None

    def write(self, data: bytes) -> tuple[int, StreamError | None]:
        return len(data), None

    def close(self) -> StreamError | None:
        self.closes += 1
        return self.close_error
