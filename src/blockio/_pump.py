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

"""Background event pump for push-style streams.

An :class:`EventPump` owns one daemon thread that runs an asyncio event loop
forever. Blocking callers hand coroutines to the pump and wait on the
returned future; readiness callbacks fire on the pump thread and resolve it.

The process-wide pump returned by :func:`default_pump` is started lazily on
first use and is never stopped. Tests and embedders that need an explicit
lifetime construct their own pump and pass it as ``pump=`` to the stream
adapters::

    pump = EventPump(name="test-pump")
    try:
        reader, err = PushStreamReader.open_pipe(read_end, pump=pump)
        ...
    finally:
        pump.stop()
"""

from __future__ import annotations

import asyncio
import threading
from collections.abc import Callable, Coroutine
from concurrent.futures import Future
from typing import Any

from ._logging import get_logger

__all__ = [
    "EventPump",
    "default_pump",
]

logger = get_logger(__name__)


class EventPump:
    """Daemon thread running a dedicated asyncio event loop.

    ``start()`` is idempotent and returns once the loop is running. Work is
    scheduled from other threads only; calling :meth:`run` from the pump
    thread itself would wait on a future that can never complete, so it
    raises ``RuntimeError`` instead.
    """

    def __init__(self, *, name: str = "blockio-pump") -> None:
        self._name = name
        self._lock = threading.Lock()
        self._ready = threading.Event()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None
        self._stopped = False

    @property
    def name(self) -> str:
        return self._name

    @property
    def running(self) -> bool:
        """True once started and until the loop thread exits."""
        with self._lock:
            return self._thread is not None and self._thread.is_alive()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        """The pump's event loop, starting the pump if needed."""
        return self._require_loop()

    def start(self) -> None:
        """Start the loop thread if it is not already running.

        Raises:
            RuntimeError: If the pump was stopped.
        """
        with self._lock:
            if self._stopped:
                msg = f"Event pump {self._name!r} has been stopped"
                raise RuntimeError(msg)
            if self._thread is not None:
                started = False
            else:
                loop = asyncio.new_event_loop()
                thread = threading.Thread(
                    target=self._run,
                    args=(loop,),
                    name=self._name,
                    daemon=True,
                )
                self._loop = loop
                self._thread = thread
                thread.start()
                started = True
        _ = self._ready.wait()
        if started:
            logger.info(
                "blockio.pump.started",
                event="pump.started",
                context={"name": self._name},
            )

    def _run(self, loop: asyncio.AbstractEventLoop) -> None:
        asyncio.set_event_loop(loop)
        _ = loop.call_soon(self._ready.set)
        try:
            loop.run_forever()
        finally:
            try:
                loop.run_until_complete(loop.shutdown_asyncgens())
            finally:
                loop.close()

    def _require_loop(self) -> asyncio.AbstractEventLoop:
        self.start()
        loop = self._loop
        if loop is None:  # pragma: no cover - start() always assigns the loop
            msg = "Event pump failed to start"
            raise RuntimeError(msg)
        return loop

    def in_pump_thread(self) -> bool:
        with self._lock:
            return self._thread is threading.current_thread()

    def submit[T](self, coro: Coroutine[Any, Any, T]) -> Future[T]:
        """Schedule ``coro`` on the pump and return its future."""
        loop = self._require_loop()
        return asyncio.run_coroutine_threadsafe(coro, loop)

    def run[T](self, coro: Coroutine[Any, Any, T]) -> T:
        """Run ``coro`` on the pump and block until it finishes.

        There is no timeout: a coroutine that never completes blocks the
        caller indefinitely. Exceptions raised by ``coro`` propagate.
        """
        if self.in_pump_thread():
            coro.close()
            msg = "EventPump.run() cannot be called from the pump thread"
            raise RuntimeError(msg)
        return self.submit(coro).result()

    def call_soon(self, callback: Callable[..., object], *args: object) -> None:
        """Schedule a plain callback on the pump thread."""
        loop = self._require_loop()
        _ = loop.call_soon_threadsafe(callback, *args)

    def stop(self, timeout: float = 5.0) -> bool:
        """Stop the loop and wait for the thread to exit.

        A stopped pump cannot be restarted. Returns True if the thread
        finished within ``timeout``.
        """
        with self._lock:
            self._stopped = True
            loop = self._loop
            thread = self._thread
        if loop is None or thread is None:
            return True
        if thread.is_alive():
            _ = loop.call_soon_threadsafe(loop.stop)
        thread.join(timeout=timeout)
        logger.debug(
            "blockio.pump.stopped",
            event="pump.stopped",
            context={"name": self._name},
        )
        return not thread.is_alive()


_default_pump_lock = threading.Lock()
_default_pump: EventPump | None = None


def default_pump() -> EventPump:
    """Return the process-wide pump, starting it on first use.

    The pump lives for the rest of the process; there is no shutdown path.
    """
    global _default_pump
    with _default_pump_lock:
        if _default_pump is None:
            pump = EventPump(name="blockio-io")
            pump.start()
            _default_pump = pump
        return _default_pump
