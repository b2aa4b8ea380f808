# file.py -- Safe access to object files
# Copyright (C) 2026 The mygit contributors
#
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later
# mygit is dual-licensed under the Apache License, Version 2.0 and the GNU
# General Public License as published by the Free Software Foundation; version 2.0
# or (at your option) any later version. You can redistribute it and/or
# modify it under the terms of either of these two licenses.
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
# You should have received a copy of the licenses; if not, see
# <http://www.gnu.org/licenses/> for a copy of the GNU General Public License
# and <http://www.apache.org/licenses/LICENSE-2.0> for a copy of the Apache
# License, Version 2.0.
#

"""Safe access to files in the repository.

Writes go to ``<name>.lock`` and are renamed over ``<name>`` on close, so a
reader never observes a partially written file. This is not a locking
scheme for concurrent writers: the store assumes a single writer.
"""

__all__ = [
    "FileLocked",
    "GitFile",
    "ensure_dir_exists",
]

import errno
import os
import warnings
from collections.abc import Iterable
from types import TracebackType
from typing import IO, Union

PathLike = Union[str, os.PathLike[str]]


def ensure_dir_exists(dirname: PathLike, mode: int | None = None) -> None:
    """Ensure a directory exists, creating if necessary."""
    try:
        os.makedirs(dirname)
    except FileExistsError:
        return
    if mode is not None:
        os.chmod(dirname, mode)


def GitFile(
    filename: PathLike,
    mode: str = "rb",
    mask: int = 0o644,
    fsync: bool = False,
) -> "IO[bytes] | _GitFile":
    """Create a file object that is replaced atomically when written.

    Only read-only and write-only binary modes are supported.

    Args:
      filename: Path to the file
      mode: File mode ('rb' or 'wb')
      mask: File mask for created files
      fsync: Whether to call fsync() before the rename
    Returns: a builtin file object or a _GitFile object
    """
    if "a" in mode:
        raise OSError("append mode not supported for Git files")
    if "+" in mode:
        raise OSError("read/write mode not supported for Git files")
    if "b" not in mode:
        raise OSError("text mode not supported for Git files")
    if "w" in mode:
        return _GitFile(filename, mask, fsync)
    return open(filename, mode)


class FileLocked(FileExistsError):
    """The lock file for a write already exists.

    Either another writer is active or an earlier write was interrupted and
    left its lock file behind; in the latter case it has to be removed by
    hand before the file can be written again.
    """

    def __init__(self, filename: PathLike, lockfilename: str) -> None:
        """Initialize FileLocked.

        Args:
          filename: Name of the file that is locked
          lockfilename: Name of the lock file
        """
        self.lockfilename = lockfilename
        super().__init__(
            errno.EEXIST, f"lock file {lockfilename} exists", os.fspath(filename)
        )


class _GitFile:
    """File that writes to a lock file and renames it into place on close.

    Note: You *must* call close() or abort() on a _GitFile, or use it as a
        context manager; leaving the block with an exception aborts.
    """

    def __init__(self, filename: PathLike, mask: int, fsync: bool = False) -> None:
        self._filename = os.fspath(filename)
        self._lockfilename = self._filename + ".lock"
        self._fsync = fsync
        try:
            fd = os.open(
                self._lockfilename,
                os.O_WRONLY | os.O_CREAT | os.O_EXCL | getattr(os, "O_BINARY", 0),
                mask,
            )
        except FileExistsError as exc:
            raise FileLocked(filename, self._lockfilename) from exc
        self._file = os.fdopen(fd, "wb")
        self._closed = False

    @property
    def closed(self) -> bool:
        """Return whether the file is closed."""
        return self._closed

    def write(self, data: bytes) -> int:
        return self._file.write(data)

    def writelines(self, lines: Iterable[bytes]) -> None:
        self._file.writelines(lines)

    def abort(self) -> None:
        """Close and discard the lockfile without overwriting the target.

        If the file is already closed, this is a no-op.
        """
        if self._closed:
            return
        self._file.close()
        try:
            os.remove(self._lockfilename)
        except FileNotFoundError:
            pass
        self._closed = True

    def close(self) -> None:
        """Close this file, renaming the lockfile over the target.

        Raises:
          OSError: if the target could not be replaced. The lock file is
            removed in that case.
        """
        if self._closed:
            return
        self._file.flush()
        if self._fsync:
            os.fsync(self._file.fileno())
        self._file.close()
        try:
            os.replace(self._lockfilename, self._filename)
        finally:
            self.abort()

    def __del__(self) -> None:
        if not getattr(self, "_closed", True):
            warnings.warn(f"unclosed {self!r}", ResourceWarning, stacklevel=2)
            self.abort()

    def __enter__(self) -> "_GitFile":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if exc_type is not None:
            self.abort()
        else:
            self.close()

    def __fspath__(self) -> str:
        """Return the file path for os.fspath() compatibility."""
        return self._filename
