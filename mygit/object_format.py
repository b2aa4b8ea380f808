# object_format.py -- Object format (hash algorithm) for git objects
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


"""Digest parameters for object identities.

The identity of an object is the SHA-1 digest of its full encoded form
(header and body). The lengths of binary and hex identities are kept here
so the rest of the package does not hard-code them.
"""

__all__ = [
    "DEFAULT_OBJECT_FORMAT",
    "SHA1",
    "ObjectFormat",
]

from collections.abc import Callable, Iterable
from hashlib import sha1
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from _hashlib import HASH


class ObjectFormat:
    """A hash algorithm used to name objects."""

    def __init__(self, name: str, hash_func: Callable[..., "HASH"]) -> None:
        self.name = name
        self.hash_func = hash_func
        self.oid_length = hash_func().digest_size
        self.hex_length = 2 * self.oid_length

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.name!r})"

    def new_hash(self) -> "HASH":
        """Start an incremental digest."""
        return self.hash_func()

    def hash_chunks(self, chunks: Iterable[bytes]) -> "HASH":
        """Digest a sequence of byte strings as if they were concatenated."""
        h = self.hash_func()
        for chunk in chunks:
            h.update(chunk)
        return h

    def hash_object(self, data: bytes) -> bytes:
        """Return the binary digest of data."""
        return self.hash_func(data).digest()

    def hash_object_hex(self, data: bytes) -> bytes:
        """Return the hex digest of data, as ASCII bytes."""
        return self.hash_func(data).hexdigest().encode("ascii")


SHA1 = ObjectFormat("sha1", sha1)

DEFAULT_OBJECT_FORMAT = SHA1
