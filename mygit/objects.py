# objects.py -- Access to base git objects
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

"""Access to base git objects.

Every object is encoded as ``b"<kind> <length>\\0"`` followed by a body
whose layout depends on the kind. The identity of an object is the SHA-1
of that full encoding.
"""

__all__ = [
    "BLOB_MODE",
    "OBJECT_CLASSES",
    "TREE_MODE",
    "Blob",
    "Commit",
    "ObjectID",
    "RawObjectID",
    "ShaFile",
    "Tree",
    "TreeEntry",
    "check_hexsha",
    "format_timezone",
    "hex_to_filename",
    "hex_to_sha",
    "object_class",
    "object_header",
    "parse_object_header",
    "parse_timezone",
    "parse_tree",
    "pretty_format_tree_entry",
    "read_object_header",
    "read_tree_entries",
    "serialize_tree",
    "sha_to_hex",
    "sorted_tree_items",
    "valid_hexsha",
]

import binascii
import os
import stat
from collections.abc import Iterable, Iterator
from io import BytesIO
from typing import BinaryIO, NamedTuple, NewType, Optional, Union

from .compression import compress_chunks
from .errors import (
    InvalidHash,
    MalformedBody,
    MalformedHeader,
)
from .object_format import DEFAULT_OBJECT_FORMAT

ObjectID = NewType("ObjectID", bytes)
RawObjectID = NewType("RawObjectID", bytes)

# Header fields for commits
_TREE_HEADER = b"tree"
_PARENT_HEADER = b"parent"
_AUTHOR_HEADER = b"author"
_COMMITTER_HEADER = b"committer"

TREE_MODE = stat.S_IFDIR  # 0o40000
BLOB_MODE = 0o100644

# "commit" plus a space plus a 64-bit length plus NUL
_MAX_HEADER_LENGTH = 32

_HEX_DIGITS = frozenset(b"0123456789abcdef")


def sha_to_hex(sha: bytes) -> ObjectID:
    """Takes a string and returns the hex of the sha within."""
    hexsha = binascii.hexlify(sha)
    if len(hexsha) != DEFAULT_OBJECT_FORMAT.hex_length:
        raise InvalidHash(sha, f"incorrect length of sha string: {len(sha)}")
    return ObjectID(hexsha)


def hex_to_sha(hex: Union[bytes, str]) -> RawObjectID:
    """Takes a hex sha and returns a binary sha."""
    return RawObjectID(binascii.unhexlify(check_hexsha(hex)))


def valid_hexsha(hex: Union[bytes, str]) -> bool:
    """Check whether a value is a well-formed lowercase hex identity."""
    if isinstance(hex, str):
        try:
            hex = hex.encode("ascii")
        except UnicodeEncodeError:
            return False
    return len(hex) == DEFAULT_OBJECT_FORMAT.hex_length and _HEX_DIGITS.issuperset(
        hex
    )


def check_hexsha(hex: Union[bytes, str]) -> ObjectID:
    """Validate a hex identity given by a caller.

    Upper-case digits are accepted and normalized to lower case.

    Args:
      hex: Identity as bytes or str
    Returns: The identity as lowercase ASCII bytes
    Raises:
      InvalidHash: if the value is not 40 hex digits
    """
    value = hex
    if isinstance(value, str):
        try:
            value = value.encode("ascii")
        except UnicodeEncodeError as exc:
            raise InvalidHash(hex, "not ASCII") from exc
    if not isinstance(value, bytes):
        raise InvalidHash(repr(hex), "expected bytes or str")
    value = value.lower()
    if len(value) != DEFAULT_OBJECT_FORMAT.hex_length:
        raise InvalidHash(
            hex,
            f"expected {DEFAULT_OBJECT_FORMAT.hex_length} hex digits, got {len(value)}",
        )
    if not _HEX_DIGITS.issuperset(value):
        raise InvalidHash(hex, "not a hex string")
    return ObjectID(value)


def hex_to_filename(path: Union[str, os.PathLike[str]], hex: bytes) -> str:
    """Takes a hex sha and returns its filename relative to the given path."""
    hexstr = hex.decode("ascii")
    return os.path.join(os.fspath(path), hexstr[:2], hexstr[2:])


def object_class(type_name: bytes) -> Optional[type["ShaFile"]]:
    """Get the object class corresponding to the given type name.

    Returns: The ShaFile subclass, or None if type_name is unknown
    """
    return _TYPE_MAP.get(type_name)


def object_header(type_name: bytes, length: int) -> bytes:
    """Return an object header for the given kind and body length."""
    return type_name + b" " + str(length).encode("ascii") + b"\0"


def _parse_header_fields(header: bytes) -> tuple[bytes, int]:
    parts = header.split(b" ")
    if len(parts) != 2:
        raise MalformedHeader(f"expected '<kind> <length>', got {header!r}")
    type_name, length_text = parts
    if type_name not in _TYPE_MAP:
        raise MalformedHeader(f"unknown object kind {type_name!r}")
    if not length_text.isdigit() or (
        len(length_text) > 1 and length_text.startswith(b"0")
    ):
        raise MalformedHeader(f"invalid object length {length_text!r}")
    return type_name, int(length_text)


def parse_object_header(data: bytes) -> tuple[bytes, int, int]:
    """Parse the header at the start of an encoded object.

    Args:
      data: Encoded object (header and body)
    Returns: Tuple of (type_name, body length, offset of the body)
    Raises:
      MalformedHeader: if the header is invalid
    """
    end = data.find(b"\0", 0, _MAX_HEADER_LENGTH)
    if end == -1:
        raise MalformedHeader("object header is not NUL-terminated")
    type_name, length = _parse_header_fields(data[:end])
    return type_name, length, end + 1


def read_object_header(f: BinaryIO) -> tuple[bytes, int]:
    """Read an object header from a stream.

    Consumes exactly the header, including the terminating NUL, leaving the
    stream positioned at the start of the body.

    Returns: Tuple of (type_name, body length)
    Raises:
      MalformedHeader: if the header is invalid or the stream ends first
    """
    header = bytearray()
    while True:
        c = f.read(1)
        if not c:
            raise MalformedHeader("stream ended inside object header")
        if c == b"\0":
            break
        header += c
        if len(header) >= _MAX_HEADER_LENGTH:
            raise MalformedHeader("object header is too long")
    return _parse_header_fields(bytes(header))


class TreeEntry(NamedTuple):
    """Named tuple encapsulating a single tree entry."""

    path: bytes
    mode: int
    sha: ObjectID


def _check_tree_name(name: bytes) -> bool:
    return bool(name) and b"/" not in name and b"\0" not in name


def _parse_tree_entry_header(header: bytes) -> tuple[bytes, int]:
    try:
        mode_text, name = header.split(b" ", 1)
    except ValueError as exc:
        raise MalformedBody(f"tree entry without mode: {header!r}") from exc
    if not mode_text or not all(48 <= c <= 55 for c in mode_text):
        raise MalformedBody(f"invalid mode {mode_text!r}")
    if not _check_tree_name(name):
        raise MalformedBody(f"invalid tree entry name {name!r}")
    return name, int(mode_text, 8)


def parse_tree(text: bytes) -> Iterator[TreeEntry]:
    """Parse a tree body.

    Args:
      text: Serialized text to parse
    Returns: iterator of TreeEntry in stored order
    Raises:
      MalformedBody: if the body is not a valid tree
    """
    return read_tree_entries(BytesIO(text))


def read_tree_entries(f: BinaryIO) -> Iterator[TreeEntry]:
    """Decode tree entries from a stream positioned at the start of the body.

    Entries are produced in a single pass until the stream is exhausted.

    Raises:
      MalformedBody: if the stream ends in the middle of an entry
    """
    oid_length = DEFAULT_OBJECT_FORMAT.oid_length
    while True:
        c = f.read(1)
        if not c:
            return
        header = bytearray()
        while c != b"\0":
            header += c
            c = f.read(1)
            if not c:
                raise MalformedBody(
                    f"tree ended inside entry header {bytes(header)!r}"
                )
        name, mode = _parse_tree_entry_header(bytes(header))
        sha = f.read(oid_length)
        if len(sha) != oid_length:
            raise MalformedBody(
                f"tree entry {name!r} has {len(sha)} of {oid_length} hash bytes"
            )
        yield TreeEntry(name, mode, sha_to_hex(sha))


def serialize_tree(items: Iterable[tuple[bytes, int, bytes]]) -> Iterator[bytes]:
    """Serialize the items in a tree to a text.

    Args:
      items: Iterable over (name, mode, sha) tuples, in the order to store
    Returns: Serialized tree text as chunks
    """
    for name, mode, hexsha in items:
        yield (f"{mode:04o}".encode("ascii") + b" " + name + b"\0" + hex_to_sha(hexsha))


def key_entry(entry: tuple[bytes, tuple[int, bytes]]) -> bytes:
    """Sort key for tree entry.

    Args:
      entry: (name, (mode, sha)) tuple
    """
    (name, (mode, _sha)) = entry
    if stat.S_ISDIR(mode):
        name += b"/"
    return name


def sorted_tree_items(entries: dict[bytes, tuple[int, bytes]]) -> Iterator[TreeEntry]:
    """Iterate over tree entries in git's canonical order.

    Names are compared as raw bytes, with directories sorting as if their
    name ended in a slash.

    Args:
      entries: Dictionary mapping names to (mode, sha) tuples
    Returns: Iterator over TreeEntry
    """
    for name, (mode, hexsha) in sorted(entries.items(), key=key_entry):
        yield TreeEntry(name, mode, ObjectID(hexsha))


def pretty_format_tree_entry(
    name: bytes, mode: int, hexsha: bytes, encoding: str = "utf-8"
) -> str:
    """Pretty format tree entry.

    Args:
      name: Name of the directory entry
      mode: Mode of entry
      hexsha: Hexsha of the referenced object
      encoding: Character encoding for the name
    Returns: string describing the tree entry
    """
    if stat.S_ISDIR(mode):
        kind = "tree"
    else:
        kind = "blob"
    return "{:04o} {} {}\t{}\n".format(
        mode,
        kind,
        hexsha.decode("ascii"),
        name.decode(encoding, "replace"),
    )


def parse_timezone(text: bytes) -> int:
    """Parse a timezone text fragment (e.g. b"+0100").

    Returns: Timezone offset in seconds east of UTC
    Raises:
      ValueError: if the text is not of the form +HHMM or -HHMM
    """
    if len(text) != 5 or text[:1] not in (b"+", b"-") or not text[1:].isdigit():
        raise ValueError(f"invalid timezone {text!r}")
    sign = -1 if text[:1] == b"-" else 1
    hours = int(text[1:3])
    minutes = int(text[3:5])
    return sign * (hours * 3600 + minutes * 60)


def format_timezone(offset: int) -> bytes:
    """Format a timezone for git serialization.

    Args:
      offset: Timezone offset as seconds east of UTC
    """
    if offset % 60 != 0:
        raise ValueError("Unable to handle non-minute offset.")
    if offset < 0:
        sign = "-"
        offset = -offset
    else:
        sign = "+"
    return ("%c%02d%02d" % (sign, offset / 3600, (offset / 60) % 60)).encode("ascii")


def _format_identity_line(field: bytes, identity: bytes, time: int, tz: int) -> bytes:
    return (
        field
        + b" "
        + identity
        + b" "
        + str(time).encode("ascii")
        + b" "
        + format_timezone(tz)
        + b"\n"
    )


def _parse_identity_line(value: bytes) -> tuple[bytes, int, int]:
    try:
        identity, timetext, timezonetext = value.rsplit(b" ", 2)
        time = int(timetext)
        timezone = parse_timezone(timezonetext)
    except ValueError as exc:
        raise MalformedBody(f"invalid identity line {value!r}") from exc
    if b"<" not in identity or not identity.endswith(b">"):
        raise MalformedBody(f"invalid identity {identity!r}")
    return identity, time, timezone


class ShaFile:
    """A git SHA file."""

    type_name: bytes

    _chunked_text: list[bytes]
    _needs_serialization: bool
    _sha: Optional[bytes]

    def __init__(self) -> None:
        """Don't call this directly."""
        self._sha = None
        self._chunked_text = []
        self._needs_serialization = True

    def _deserialize(self, chunks: list[bytes]) -> None:
        raise NotImplementedError(self._deserialize)

    def _serialize(self) -> list[bytes]:
        raise NotImplementedError(self._serialize)

    @staticmethod
    def from_raw_string(type_name: bytes, string: bytes) -> "ShaFile":
        """Creates an object of the indicated type from the raw string given.

        Args:
          type_name: The type name of the object.
          string: The raw uncompressed body.
        Raises:
          MalformedHeader: if type_name is not a known kind
          MalformedBody: if the body is invalid for the kind
        """
        cls = object_class(type_name)
        if cls is None:
            raise MalformedHeader(f"unknown object kind {type_name!r}")
        obj = cls()
        obj.set_raw_string(string)
        return obj

    @staticmethod
    def from_encoded(data: bytes) -> "ShaFile":
        """Create an object from its full encoded form (header and body).

        Raises:
          MalformedHeader: if the header is invalid or its length disagrees
            with the body
        """
        type_name, length, offset = parse_object_header(data)
        if len(data) - offset != length:
            raise MalformedHeader(
                f"header declares {length} bytes, body has {len(data) - offset}"
            )
        return ShaFile.from_raw_string(type_name, data[offset:])

    @classmethod
    def from_string(cls, string: bytes) -> "ShaFile":
        """Create a ShaFile from a string."""
        obj = cls()
        obj.set_raw_string(string)
        return obj

    def set_raw_string(self, text: bytes) -> None:
        """Set the contents of this object from a serialized string."""
        if not isinstance(text, bytes):
            raise TypeError(f"Expected bytes for text, got {text!r}")
        self.set_raw_chunks([text])

    def set_raw_chunks(self, chunks: list[bytes]) -> None:
        """Set the contents of this object from a list of chunks."""
        self._deserialize(chunks)
        self._chunked_text = chunks
        self._sha = None
        self._needs_serialization = False

    def as_raw_chunks(self) -> list[bytes]:
        """Return chunks with serialization of the object body."""
        if self._needs_serialization:
            self._sha = None
            self._chunked_text = self._serialize()
            self._needs_serialization = False
        return self._chunked_text

    def as_raw_string(self) -> bytes:
        """Return raw string with serialization of the object body."""
        return b"".join(self.as_raw_chunks())

    def raw_length(self) -> int:
        """Returns the length of the raw string of this object."""
        return sum(map(len, self.as_raw_chunks()))

    def _header(self) -> bytes:
        return object_header(self.type_name, self.raw_length())

    def as_encoded(self) -> bytes:
        """Return the full encoding: header followed by body."""
        return self._header() + self.as_raw_string()

    def as_legacy_object_chunks(self, compression_level: int = -1) -> Iterator[bytes]:
        """Return chunks representing the object in the loose object format."""
        return compress_chunks(
            [self._header(), *self.as_raw_chunks()], compression_level
        )

    def as_legacy_object(self, compression_level: int = -1) -> bytes:
        """Return string representing the object in the loose object format."""
        return b"".join(self.as_legacy_object_chunks(compression_level))

    def sha(self):
        """The SHA1 object that is the name of this object."""
        if self._sha is None or self._needs_serialization:
            self._sha = DEFAULT_OBJECT_FORMAT.hash_chunks(
                [self._header(), *self.as_raw_chunks()]
            )
        return self._sha

    @property
    def id(self) -> ObjectID:
        """The hex SHA of this object."""
        return ObjectID(self.sha().hexdigest().encode("ascii"))

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.id!r}>"

    def __hash__(self) -> int:
        return hash(self.id)

    def __eq__(self, other: object) -> bool:
        """Return True if the SHAs of the two objects match."""
        return isinstance(other, ShaFile) and self.id == other.id

    def __ne__(self, other: object) -> bool:
        return not self == other


class Blob(ShaFile):
    """A Git Blob object."""

    type_name = b"blob"

    def __init__(self) -> None:
        super().__init__()
        self._chunked_text = []
        self._needs_serialization = False

    def _deserialize(self, chunks: list[bytes]) -> None:
        pass

    def _serialize(self) -> list[bytes]:
        return self._chunked_text

    def _get_data(self) -> bytes:
        return self.as_raw_string()

    def _set_data(self, data: bytes) -> None:
        self.set_raw_string(data)

    data = property(
        _get_data, _set_data, doc="The text contained within the blob object."
    )


class Tree(ShaFile):
    """A Git tree object.

    Entries keep the order in which they were added (or parsed); that order
    is the order in which they are serialized.
    """

    type_name = b"tree"

    def __init__(self) -> None:
        super().__init__()
        self._entries: dict[bytes, tuple[int, ObjectID]] = {}

    def __contains__(self, name: bytes) -> bool:
        return name in self._entries

    def __getitem__(self, name: bytes) -> tuple[int, ObjectID]:
        return self._entries[name]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[bytes]:
        return iter(self._entries)

    def add(self, name: bytes, mode: int, hexsha: Union[bytes, str]) -> None:
        """Add an entry to the tree.

        Args:
          name: The name of the entry, as a single path segment
          mode: The mode of the entry as an integral type
          hexsha: The hex SHA of the entry's contents
        Raises:
          ValueError: if the name is empty or contains a slash or NUL
          InvalidHash: if hexsha is malformed
        """
        if not _check_tree_name(name):
            raise ValueError(f"invalid tree entry name {name!r}")
        self._entries[name] = (mode, check_hexsha(hexsha))
        self._needs_serialization = True

    def iteritems(self) -> Iterator[TreeEntry]:
        """Iterate over entries in stored order."""
        for name, (mode, hexsha) in self._entries.items():
            yield TreeEntry(name, mode, hexsha)

    def items(self) -> list[TreeEntry]:
        """Return the entries in stored order."""
        return list(self.iteritems())

    def _deserialize(self, chunks: list[bytes]) -> None:
        entries: dict[bytes, tuple[int, ObjectID]] = {}
        for name, mode, hexsha in parse_tree(b"".join(chunks)):
            if name in entries:
                raise MalformedBody(f"duplicate tree entry {name!r}")
            entries[name] = (mode, hexsha)
        self._entries = entries

    def _serialize(self) -> list[bytes]:
        return list(serialize_tree(self.iteritems()))

    def as_pretty_string(self) -> str:
        """Return a human-readable listing, one entry per line."""
        return "".join(
            pretty_format_tree_entry(name, mode, hexsha)
            for name, mode, hexsha in self.iteritems()
        )


class Commit(ShaFile):
    """A git commit object."""

    type_name = b"commit"

    def __init__(self) -> None:
        super().__init__()
        self._tree: Optional[ObjectID] = None
        self._parents: list[ObjectID] = []
        self._author: Optional[bytes] = None
        self._author_time: Optional[int] = None
        self._author_timezone = 0
        self._committer: Optional[bytes] = None
        self._commit_time: Optional[int] = None
        self._commit_timezone = 0
        self._message = b""

    def _deserialize(self, chunks: list[bytes]) -> None:
        text = b"".join(chunks)
        try:
            headers, message = text.split(b"\n\n", 1)
        except ValueError as exc:
            raise MalformedBody("commit has no blank line after headers") from exc
        tree = None
        parents: list[ObjectID] = []
        author = committer = None
        for line in headers.split(b"\n"):
            try:
                field, value = line.split(b" ", 1)
            except ValueError as exc:
                raise MalformedBody(f"invalid commit header line {line!r}") from exc
            if field == _TREE_HEADER and tree is None and not parents:
                tree = value
            elif field == _PARENT_HEADER and tree is not None and author is None:
                parents.append(value)
            elif field == _AUTHOR_HEADER and tree is not None and author is None:
                author = _parse_identity_line(value)
            elif field == _COMMITTER_HEADER and author is not None and committer is None:
                committer = _parse_identity_line(value)
            else:
                raise MalformedBody(f"unexpected commit header {field!r}")
        if tree is None or author is None or committer is None:
            raise MalformedBody("commit is missing tree, author or committer")
        for value in [tree, *parents]:
            if not valid_hexsha(value):
                raise MalformedBody(f"invalid object name {value!r} in commit")
        self._tree = ObjectID(tree)
        self._parents = [ObjectID(p) for p in parents]
        self._author, self._author_time, self._author_timezone = author
        self._committer, self._commit_time, self._commit_timezone = committer
        self._message = message

    def _serialize(self) -> list[bytes]:
        if self._tree is None:
            raise ValueError("commit has no tree")
        if self._author is None or self._author_time is None:
            raise ValueError("commit has no author")
        if self._committer is None or self._commit_time is None:
            raise ValueError("commit has no committer")
        chunks = [_TREE_HEADER + b" " + self._tree + b"\n"]
        for p in self._parents:
            chunks.append(_PARENT_HEADER + b" " + p + b"\n")
        chunks.append(
            _format_identity_line(
                _AUTHOR_HEADER, self._author, self._author_time, self._author_timezone
            )
        )
        chunks.append(
            _format_identity_line(
                _COMMITTER_HEADER,
                self._committer,
                self._commit_time,
                self._commit_timezone,
            )
        )
        chunks.append(b"\n")  # There must be a new line after the headers
        chunks.append(self._message)
        return chunks

    def _set(self, name: str, value: object) -> None:
        setattr(self, "_" + name, value)
        self._needs_serialization = True

    @property
    def tree(self) -> Optional[ObjectID]:
        """Tree that is the state of this commit."""
        return self._tree

    @tree.setter
    def tree(self, value: Union[bytes, str]) -> None:
        self._set("tree", check_hexsha(value))

    @property
    def parents(self) -> list[ObjectID]:
        """Parents of this commit, as hex SHAs."""
        return list(self._parents)

    @parents.setter
    def parents(self, value: Iterable[Union[bytes, str]]) -> None:
        self._set("parents", [check_hexsha(p) for p in value])

    @property
    def author(self) -> Optional[bytes]:
        """The author of the commit, as ``Name <email>``."""
        return self._author

    @author.setter
    def author(self, value: bytes) -> None:
        self._set("author", value)

    @property
    def committer(self) -> Optional[bytes]:
        """The committer of the commit, as ``Name <email>``."""
        return self._committer

    @committer.setter
    def committer(self, value: bytes) -> None:
        self._set("committer", value)

    @property
    def author_time(self) -> Optional[int]:
        """The timestamp the commit was written, in seconds since the epoch."""
        return self._author_time

    @author_time.setter
    def author_time(self, value: int) -> None:
        self._set("author_time", value)

    @property
    def author_timezone(self) -> int:
        """The zone the author time is in, in seconds east of UTC."""
        return self._author_timezone

    @author_timezone.setter
    def author_timezone(self, value: int) -> None:
        self._set("author_timezone", value)

    @property
    def commit_time(self) -> Optional[int]:
        """The timestamp of the commit, in seconds since the epoch."""
        return self._commit_time

    @commit_time.setter
    def commit_time(self, value: int) -> None:
        self._set("commit_time", value)

    @property
    def commit_timezone(self) -> int:
        """The zone the commit time is in, in seconds east of UTC."""
        return self._commit_timezone

    @commit_timezone.setter
    def commit_timezone(self, value: int) -> None:
        self._set("commit_timezone", value)

    @property
    def message(self) -> bytes:
        """The commit message."""
        return self._message

    @message.setter
    def message(self, value: bytes) -> None:
        self._set("message", value)


OBJECT_CLASSES = (
    Commit,
    Tree,
    Blob,
)

_TYPE_MAP: dict[bytes, type[ShaFile]] = {}

for cls in OBJECT_CLASSES:
    _TYPE_MAP[cls.type_name] = cls
