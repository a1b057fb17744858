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

"""Thread-safe streams over OS file descriptors.

:class:`File` owns exactly one descriptor and serializes every operation on
it with a per-instance lock. Constructors mirror the POSIX calls they wrap
and pass flags and mode bits through unchanged::

    file, err = File.open("/etc/hosts", os.O_RDONLY)
    if err is not None:
        raise err
    with file:
        data, err = file.read(512)
"""

from __future__ import annotations

import contextlib
import errno
import os
import stat
import tempfile
import threading
import weakref
from typing import Final, Self

from ._logging import get_logger
from ._protocols import Whence, check_read_size
from .errors import EOF, ErrorKind, StreamError, already_closed, os_failure

__all__ = [
    "DEFAULT_FILE_MODE",
    "File",
    "stderr",
    "stdin",
    "stdout",
]

#: Permission bits used when a constructor is not given a mode (``rw-rw----``).
DEFAULT_FILE_MODE: Final[int] = stat.S_IRUSR | stat.S_IWUSR | stat.S_IRGRP | stat.S_IWGRP

logger = get_logger(__name__)

_owners_lock = threading.Lock()
_owners: dict[int, object] = {}


def _unregister(fd: int, token: object | None) -> bool:
    """Drop ``token``'s claim on ``fd``.

    Returns False when the number now belongs to another owner, which means
    the descriptor was closed behind its File and the OS handed it out again.
    """
    if token is None:
        return True
    with _owners_lock:
        if _owners.get(fd) is not token:
            return False
        del _owners[fd]
    return True


def _release(fd: int, token: object | None) -> None:
    """Finalizer for descriptors whose owner was collected without close."""
    if not _unregister(fd, token):
        return
    try:
        os.close(fd)
    except OSError as exc:
        logger.debug(
            "blockio.file.finalize_failed",
            event="file.finalize_failed",
            context={"fd": fd, "errno": exc.errno},
        )


class _Descriptor:
    """Exclusive owner of one OS descriptor.

    Claims are recorded per descriptor number with an owner token. Wrapping
    a number that another File still holds raises ``ValueError``. A ``fresh``
    descriptor, just returned by the OS, always wins: any older claim on
    that number is stale. Claims are dropped before the native close so the
    number is never reissued while still registered.

    ``standard`` descriptors (0, 1 and 2) are not registered at all and are
    left open at interpreter exit.
    """

    __slots__ = ("__weakref__", "_fd", "_finalizer", "_token")

    def __init__(self, fd: int, *, fresh: bool = False, standard: bool = False) -> None:
        if fd < 0:
            msg = f"Invalid file descriptor: {fd}"
            raise ValueError(msg)
        token: object | None = None
        if not standard:
            token = object()
            with _owners_lock:
                stale = fd in _owners
                if stale and not fresh:
                    msg = f"File descriptor {fd} is already owned by another File"
                    raise ValueError(msg)
                _owners[fd] = token
            if stale:
                logger.debug(
                    "blockio.file.claim_reassigned",
                    event="file.claim_reassigned",
                    context={"fd": fd},
                )
        self._fd = fd
        self._token = token
        self._finalizer = weakref.finalize(self, _release, fd, token)
        self._finalizer.atexit = not standard

    @property
    def fd(self) -> int:
        return self._fd

    @property
    def valid(self) -> bool:
        return self._fd != -1

    def close(self) -> OSError | None:
        """Close and invalidate the descriptor, returning any OS failure."""
        fd, self._fd = self._fd, -1
        _ = self._finalizer.detach()
        if not _unregister(fd, self._token):
            return OSError(errno.EBADF, "Descriptor was closed outside its File")
        try:
            os.close(fd)
        except OSError as exc:
            return exc
        return None


class File:
    """ReadWriteCloser and Seeker over a native file descriptor.

    All operations hold the instance lock for the duration of the native
    call. Operations on distinct instances never contend, even when both
    name the same path.

    After :meth:`close` the descriptor reads as ``-1`` and every operation
    reports ``ALREADY_CLOSED``. A File that is collected while still open
    closes its descriptor.
    """

    __slots__ = ("_descriptor", "_lock", "_name")

    def __init__(self, fd: int, name: str | None = None) -> None:
        """Take ownership of the already-open descriptor ``fd``.

        Raises:
            ValueError: If ``fd`` is negative or already owned by a File.
        """
        self._descriptor = _Descriptor(fd)
        self._name = name
        self._lock = threading.Lock()

    @classmethod
    def _wrap(cls, descriptor: _Descriptor, name: str | None) -> File:
        file = cls.__new__(cls)
        file._descriptor = descriptor
        file._name = name
        file._lock = threading.Lock()
        return file

    @classmethod
    def _standard(cls, fd: int, name: str) -> File:
        return cls._wrap(_Descriptor(fd, standard=True), name)

    @classmethod
    def open(
        cls,
        path: str | os.PathLike[str],
        flags: int,
        mode: int = DEFAULT_FILE_MODE,
    ) -> tuple[File | None, StreamError | None]:
        """Open ``path`` with ``open(2)`` flags and mode."""
        name = os.fspath(path)
        try:
            fd = os.open(name, flags, mode)
        except OSError as exc:
            logger.debug(
                "blockio.file.open_failed",
                event="file.open_failed",
                context={"path": name, "errno": exc.errno},
            )
            return None, os_failure(exc)
        return cls._wrap(_Descriptor(fd, fresh=True), name), None

    @classmethod
    def create(
        cls,
        path: str | os.PathLike[str],
        mode: int = DEFAULT_FILE_MODE,
    ) -> tuple[File | None, StreamError | None]:
        """Create or truncate ``path`` for writing, like ``creat(2)``."""
        return cls.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)

    @classmethod
    def temporary(
        cls, mode: int = DEFAULT_FILE_MODE
    ) -> tuple[File | None, StreamError | None]:
        """Create a uniquely named file in the platform temporary directory.

        The file is opened read-write and :attr:`name` holds its path. The
        caller owns the path and is responsible for unlinking it.
        """
        try:
            fd, path = tempfile.mkstemp()
        except OSError as exc:
            logger.debug(
                "blockio.file.temporary_failed",
                event="file.temporary_failed",
                context={"errno": exc.errno},
            )
            return None, os_failure(exc)
        try:
            os.chmod(path, mode)
        except OSError as exc:
            os.close(fd)
            with contextlib.suppress(OSError):
                os.unlink(path)
            return None, os_failure(exc)
        return cls._wrap(_Descriptor(fd, fresh=True), path), None

    @property
    def fd(self) -> int:
        """Underlying descriptor, or ``-1`` once closed."""
        return self._descriptor.fd

    @property
    def name(self) -> str | None:
        """Path or display name, if known."""
        return self._name

    @property
    def closed(self) -> bool:
        return not self._descriptor.valid

    def fileno(self) -> int:
        return self._descriptor.fd

    def read(self, size: int) -> tuple[bytes, StreamError | None]:
        """Read up to ``size`` bytes; an empty native read is EOF."""
        check_read_size(size)
        with self._lock:
            if not self._descriptor.valid:
                return b"", already_closed()
            if size == 0:
                return b"", None
            try:
                data = os.read(self._descriptor.fd, size)
            except OSError as exc:
                return b"", os_failure(exc, ErrorKind.READ_FAILURE)
        if not data:
            return b"", EOF
        return data, None

    def write(self, data: bytes) -> tuple[int, StreamError | None]:
        """Write all of ``data``.

        A partial native write continues with the remainder. On failure the
        number of bytes already written is returned with the error.
        """
        view = memoryview(data).cast("B")
        written = 0
        with self._lock:
            if not self._descriptor.valid:
                return 0, already_closed()
            while written < len(view):
                try:
                    count = os.write(self._descriptor.fd, view[written:])
                except OSError as exc:
                    return written, os_failure(exc, ErrorKind.READ_FAILURE)
                if count == 0:
                    return written, StreamError.custom("short write")
                written += count
        return written, None

    def seek(
        self, offset: int, whence: Whence = Whence.START
    ) -> tuple[int, StreamError | None]:
        """Reposition the descriptor with ``lseek(2)``."""
        resolved = Whence(whence)
        with self._lock:
            if not self._descriptor.valid:
                return -1, already_closed()
            try:
                position = os.lseek(self._descriptor.fd, offset, resolved)
            except OSError as exc:
                return -1, os_failure(exc)
        return position, None

    def close(self) -> StreamError | None:
        """Close the descriptor.

        The first call closes; later calls report ``ALREADY_CLOSED`` without
        touching the OS. The descriptor is invalidated even when the native
        close fails.
        """
        with self._lock:
            if not self._descriptor.valid:
                return already_closed()
            fd = self._descriptor.fd
            exc = self._descriptor.close()
        if exc is not None:
            logger.debug(
                "blockio.file.close_failed",
                event="file.close_failed",
                context={"fd": fd, "name": self._name, "errno": exc.errno},
            )
            return os_failure(exc)
        return None

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        if not self.closed:
            _ = self.close()

    def __repr__(self) -> str:
        return f"File(fd={self.fd}, name={self._name!r})"


stdin: Final[File] = File._standard(0, "/dev/stdin")  # pyright: ignore[reportPrivateUsage]
stdout: Final[File] = File._standard(1, "/dev/stdout")  # pyright: ignore[reportPrivateUsage]
stderr: Final[File] = File._standard(2, "/dev/stderr")  # pyright: ignore[reportPrivateUsage]
