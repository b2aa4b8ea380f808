# object_store.py -- Object store for git objects
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

"""Git object store on disk.

Objects are kept loose: each one is a zlib-compressed file at
``<store root>/<first two hex digits>/<remaining 38 hex digits>``.

The store assumes a single writer. Two processes writing the same object
produce the same bytes, but nothing serializes their writes.
"""

__all__ = [
    "PACK_MODE",
    "ClosingIterator",
    "DiskObjectStore",
]

import os
import sys
from collections.abc import Callable, Iterator
from types import TracebackType
from typing import TYPE_CHECKING, Generic, TypeVar, Union

from .compression import DecompressingReader, compress_chunks
from .errors import InvalidConfig, MalformedBody, NotTreeError, ObjectMissing
from .file import GitFile, ensure_dir_exists
from .log_utils import getLogger
from .object_format import DEFAULT_OBJECT_FORMAT
from .objects import (
    ObjectID,
    ShaFile,
    Tree,
    TreeEntry,
    check_hexsha,
    hex_to_filename,
    object_header,
    read_object_header,
    read_tree_entries,
    valid_hexsha,
)

if TYPE_CHECKING:
    from .config import Config

logger = getLogger(__name__)

T = TypeVar("T")

if sys.platform == "win32":
    PACK_MODE = 0o644
else:
    PACK_MODE = 0o444


class DiskObjectStore:
    """Git-style object store that exists on disk."""

    def __init__(
        self,
        path: Union[str, os.PathLike[str]],
        *,
        loose_compression_level: int = -1,
        fsync_object_files: bool = False,
        file_mode: int | None = None,
        dir_mode: int | None = None,
    ) -> None:
        """Open an object store.

        Args:
          path: Path of the object store (the store root).
          loose_compression_level: zlib compression level for loose objects
          fsync_object_files: whether to fsync object files for durability
          file_mode: File permission mask for object files
          dir_mode: Directory permission mask for fan-out directories
        """
        self.path = path
        self.loose_compression_level = loose_compression_level
        self.fsync_object_files = fsync_object_files
        self.file_mode = file_mode
        self.dir_mode = dir_mode
        self.object_format = DEFAULT_OBJECT_FORMAT

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}({self.path!r})>"

    @classmethod
    def from_config(
        cls, path: Union[str, os.PathLike[str]], config: "Config"
    ) -> "DiskObjectStore":
        """Create a DiskObjectStore using settings from a configuration.

        Reads ``core.looseCompression`` (falling back to ``core.compression``)
        and ``core.fsyncObjectFiles``.

        Args:
          path: Path to the object store directory
          config: Configuration object to read settings from
        Returns:
          New DiskObjectStore instance
        Raises:
          InvalidConfig: if one of the settings has a bad value
        """
        level = config.get_int((b"core",), b"looseCompression")
        if level is None:
            level = config.get_int((b"core",), b"compression", -1)
        assert level is not None
        if not -1 <= level <= 9:
            raise InvalidConfig(f"bad zlib compression level {level}")
        fsync_object_files = config.get_boolean(
            (b"core",), b"fsyncObjectFiles", False
        )
        return cls(
            path,
            loose_compression_level=level,
            fsync_object_files=bool(fsync_object_files),
        )

    @classmethod
    def init(
        cls, path: Union[str, os.PathLike[str]], *, dir_mode: int | None = None
    ) -> "DiskObjectStore":
        """Create the store root if needed and open the store."""
        ensure_dir_exists(path, dir_mode)
        return cls(path, dir_mode=dir_mode)

    def _get_shafile_path(self, sha: Union[bytes, str]) -> str:
        return hex_to_filename(self.path, check_hexsha(sha))

    def contains(self, sha: Union[bytes, str]) -> bool:
        """Check if an object is present, without reading it.

        Raises:
          InvalidHash: if sha is malformed
        """
        return os.path.exists(self._get_shafile_path(sha))

    def __contains__(self, sha: Union[bytes, str]) -> bool:
        return self.contains(sha)

    def __iter__(self) -> Iterator[ObjectID]:
        """Iterate over the SHAs that are present in this store."""
        return self.iter_loose_objects()

    def iter_loose_objects(self) -> Iterator[ObjectID]:
        """Iterate over the SHAs of all loose objects, in sorted order."""
        try:
            bases = sorted(os.listdir(self.path))
        except FileNotFoundError:
            return
        for base in bases:
            if len(base) != 2:
                continue
            for rest in sorted(os.listdir(os.path.join(self.path, base))):
                sha = os.fsencode(base + rest)
                if not valid_hexsha(sha):
                    continue
                yield ObjectID(sha)

    def put(self, sha: Union[bytes, str], encoded: bytes) -> None:
        """Store an encoded object under its identity.

        The caller must have derived ``sha`` from ``encoded``; this is not
        checked. An object that is already present is left untouched.

        Args:
          sha: Hex SHA of ``encoded``
          encoded: Full encoded object (header and body)
        Raises:
          InvalidHash: if sha is malformed
          OSError: if the object could not be written
        """
        path = self._get_shafile_path(sha)
        if os.path.exists(path):
            logger.debug("Object %s already present", path)
            return
        ensure_dir_exists(os.path.dirname(path), self.dir_mode)
        mask = self.file_mode if self.file_mode is not None else PACK_MODE
        with GitFile(path, "wb", mask=mask, fsync=self.fsync_object_files) as f:
            f.writelines(compress_chunks([encoded], self.loose_compression_level))
        logger.debug("Wrote object %s (%d bytes)", path, len(encoded))

    def get(self, sha: Union[bytes, str]) -> DecompressingReader:
        """Open an object for reading.

        The returned stream yields the encoded object (header and body);
        the caller is responsible for closing it.

        Raises:
          InvalidHash: if sha is malformed
          ObjectMissing: if there is no such object
          CorruptStream: when reading, if the file is not valid zlib data
        """
        hexsha = check_hexsha(sha)
        path = hex_to_filename(self.path, hexsha)
        try:
            f = GitFile(path, "rb")
        except (FileNotFoundError, NotADirectoryError) as exc:
            raise ObjectMissing(hexsha, path) from exc
        return DecompressingReader(f)  # type: ignore[arg-type]

    def add_raw(self, type_name: bytes, body: bytes) -> ObjectID:
        """Encode, hash and store a body of the given kind.

        Returns: hex SHA of the stored object
        """
        encoded = object_header(type_name, len(body)) + body
        sha = ObjectID(self.object_format.hash_object_hex(encoded))
        self.put(sha, encoded)
        return sha

    def add_object(self, obj: ShaFile) -> ObjectID:
        """Add a single object to this object store.

        Args:
          obj: Object to add
        Returns: hex SHA of the object
        """
        return self.add_raw(obj.type_name, obj.as_raw_string())

    def get_raw(self, sha: Union[bytes, str]) -> tuple[bytes, bytes]:
        """Obtain the raw body for an object.

        Args:
          sha: hex SHA for the object
        Returns: tuple with type name and object body
        Raises:
          ObjectMissing: if there is no such object
          CorruptStream: if the file is not valid zlib data
          MalformedHeader: if the object header is invalid
          MalformedBody: if the body length disagrees with the header
        """
        with self.get(sha) as f:
            type_name, length = read_object_header(f)
            body = f.read(length)
            if len(body) != length or f.read(1):
                raise MalformedBody(
                    f"object {sha!r} body does not match declared length {length}"
                )
        return type_name, body

    def __getitem__(self, sha: Union[bytes, str]) -> ShaFile:
        """Obtain an object by SHA."""
        type_name, body = self.get_raw(sha)
        return ShaFile.from_raw_string(type_name, body)

    def iter_tree(self, sha: Union[bytes, str]) -> "ClosingIterator[TreeEntry]":
        """Decode the entries of a stored tree in a single streaming pass.

        The object header is checked before this returns; entries are
        decoded lazily, in stored order. The object file is closed once
        the entries are exhausted, or by calling ``close()`` on the
        returned iterator (which is also a context manager).

        Raises:
          ObjectMissing: if there is no such object
          NotTreeError: if the object is not a tree
          MalformedBody: while iterating, if the tree is truncated
        """
        f = self.get(sha)
        try:
            type_name, _length = read_object_header(f)
            if type_name != Tree.type_name:
                raise NotTreeError(check_hexsha(sha), type_name.decode("ascii"))
        except BaseException:
            f.close()
            raise
        return ClosingIterator(read_tree_entries(f), f.close)  # type: ignore[arg-type]


class ClosingIterator(Generic[T]):
    """Iterator that releases a resource once exhausted, or when closed.

    Also usable as a context manager, for callers that may stop early.
    """

    def __init__(self, it: Iterator[T], close: Callable[[], None]) -> None:
        self._it = it
        self._close = close

    def __iter__(self) -> "ClosingIterator[T]":
        return self

    def __next__(self) -> T:
        try:
            return next(self._it)
        except BaseException:
            self.close()
            raise

    def close(self) -> None:
        close_it = getattr(self._it, "close", None)
        if close_it is not None:
            close_it()
        self._close()

    def __enter__(self) -> "ClosingIterator[T]":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
