# compression.py -- zlib envelope for loose objects
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

"""Compression of objects at rest.

Loose objects are stored as a single zlib stream. The envelope never takes
part in hashing: identities are computed over the uncompressed bytes.
"""

__all__ = [
    "DecompressingReader",
    "compress",
    "compress_chunks",
    "decompress",
]

import zlib
from collections.abc import Iterable, Iterator
from types import TracebackType
from typing import BinaryIO

from .errors import CorruptStream

_ZLIB_BUFSIZE = 65536


def compress_chunks(chunks: Iterable[bytes], level: int = -1) -> Iterator[bytes]:
    """Compress a sequence of chunks into a single zlib stream.

    Args:
      chunks: Uncompressed data, in order
      level: zlib compression level (-1 for the zlib default)
    Returns: Iterator over compressed chunks
    """
    compobj = zlib.compressobj(level)
    for chunk in chunks:
        yield compobj.compress(chunk)
    yield compobj.flush()


def compress(data: bytes, level: int = -1) -> bytes:
    """Compress data into a zlib stream."""
    return b"".join(compress_chunks([data], level))


def decompress(data: bytes) -> bytes:
    """Decompress a complete zlib stream.

    Raises:
      CorruptStream: if the data is not exactly one valid zlib stream
    """
    dcomp = zlib.decompressobj()
    try:
        dcomped = dcomp.decompress(data)
        dcomped += dcomp.flush()
    except zlib.error as exc:
        raise CorruptStream(str(exc)) from exc
    if not dcomp.eof:
        raise CorruptStream("compressed stream is truncated")
    if dcomp.unused_data:
        raise CorruptStream("trailing data after compressed stream")
    return dcomped


class DecompressingReader:
    """Read-only binary stream that inflates a zlib stream on demand.

    Only as much of the underlying file is consumed as is needed to satisfy
    each read. Closing the reader closes the underlying file.
    """

    def __init__(self, f: BinaryIO, buffer_size: int = _ZLIB_BUFSIZE) -> None:
        self._f = f
        self._buffer_size = buffer_size
        self._decomp = zlib.decompressobj()
        self._buf = b""
        self._pos = 0
        self._eof = False
        self.closed = False

    def _fill(self, size: int) -> None:
        while not self._eof and (size < 0 or len(self._buf) - self._pos < size):
            comp = self._f.read(self._buffer_size)
            try:
                if comp:
                    data = self._decomp.decompress(comp)
                else:
                    data = self._decomp.flush()
            except zlib.error as exc:
                raise CorruptStream(str(exc)) from exc
            self._buf = self._buf[self._pos :] + data
            self._pos = 0
            if self._decomp.eof:
                if self._decomp.unused_data or self._f.read(1):
                    raise CorruptStream("trailing data after compressed stream")
                self._eof = True
            elif not comp:
                raise CorruptStream("compressed stream is truncated")

    def read(self, size: int = -1) -> bytes:
        """Read up to size uncompressed bytes; all remaining if size < 0.

        Returns fewer than size bytes only at the end of the stream.

        Raises:
          CorruptStream: if the compressed data is invalid
          ValueError: if the reader has been closed
        """
        if self.closed:
            raise ValueError("I/O operation on closed reader")
        self._fill(size)
        if size < 0:
            end = len(self._buf)
        else:
            end = min(len(self._buf), self._pos + size)
        ret = self._buf[self._pos : end]
        self._pos = end
        return ret

    def readable(self) -> bool:
        return True

    def close(self) -> None:
        """Close the reader and the file it reads from."""
        if self.closed:
            return
        self.closed = True
        self._buf = b""
        self._f.close()

    def __enter__(self) -> "DecompressingReader":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
