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

import os
from collections.abc import Iterator
from pathlib import Path

import pytest

from blockio import EventPump

pytest_plugins = ["tests.plugins.threadstress"]


@pytest.fixture
def pump() -> Iterator[EventPump]:
    """Provide a started pump that is stopped after the test."""
    event_pump = EventPump(name="test-pump")
    event_pump.start()
    try:
        yield event_pump
    finally:
        _ = event_pump.stop()


@pytest.fixture
def os_pipe() -> tuple[int, int]:
    """Return a fresh ``(read_fd, write_fd)`` pair.

    Ownership passes to whatever stream the test wraps the descriptors in.
    """
    return os.pipe()


@pytest.fixture
def sample_file(tmp_path: Path) -> Path:
    path = tmp_path / "sample.bin"
    _ = path.write_bytes(b"hello world")
    return path
