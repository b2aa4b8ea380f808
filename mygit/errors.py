# errors.py -- errors for mygit
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

"""mygit-related exception classes.

Filesystem failures are not wrapped: they surface as the built-in
:class:`OSError` family, which already carries the offending ``filename``.
"""

__all__ = [
    "CorruptStream",
    "FileFormatException",
    "InvalidConfig",
    "InvalidHash",
    "InvalidUserIdentity",
    "MalformedBody",
    "MalformedHeader",
    "NotGitRepository",
    "NotTreeError",
    "ObjectFormatException",
    "ObjectMissing",
    "WrongObjectException",
]

import os
from typing import Optional, Union


def _display(sha: Union[bytes, str]) -> str:
    if isinstance(sha, bytes):
        return sha.decode("ascii", "replace")
    return sha


class InvalidHash(ValueError):
    """An object identity was malformed or had the wrong length."""

    def __init__(self, sha: Union[bytes, str], reason: Optional[str] = None) -> None:
        """Initialize an InvalidHash exception.

        Args:
          sha: The offending identity, as given by the caller.
          reason: Optional explanation of what is wrong with it.
        """
        self.sha = sha
        message = f"invalid object name {_display(sha)!r}"
        if reason is not None:
            message += f": {reason}"
        ValueError.__init__(self, message)


class ObjectMissing(Exception):
    """Indicates that a requested object is not in the object store."""

    def __init__(
        self, sha: bytes, path: Union[str, os.PathLike[str], None] = None
    ) -> None:
        """Initialize an ObjectMissing exception.

        Args:
          sha: The hex SHA of the missing object.
          path: The location the object was expected at, if known.
        """
        self.sha = sha
        self.path = path
        Exception.__init__(self, f"{_display(sha)} is not in the object store")


class WrongObjectException(Exception):
    """Baseclass for all the _ is not a _ exceptions on objects.

    Do not instantiate directly.

    Subclasses should define a type_name attribute that indicates what
    was expected if they were raised.
    """

    type_name: str

    def __init__(self, sha: bytes, actual_type: Optional[str] = None) -> None:
        """Initialize a WrongObjectException.

        Args:
          sha: The SHA of the object that was not of the expected type.
          actual_type: The type name the object turned out to have.
        """
        self.sha = sha
        self.actual_type = actual_type
        message = f"{_display(sha)} is not a {self.type_name}"
        if actual_type is not None:
            message += f" (got {actual_type})"
        Exception.__init__(self, message)


class NotTreeError(WrongObjectException):
    """Indicates that the sha requested does not point to a tree."""

    type_name = "tree"


class NotGitRepository(Exception):
    """Indicates that no Git repository was found."""


class FileFormatException(Exception):
    """Base class for exceptions relating to reading git file formats."""


class CorruptStream(FileFormatException):
    """A compressed stream was truncated, had a bad checksum or a bad header."""


class ObjectFormatException(FileFormatException):
    """Indicates an error parsing an object."""


class MalformedHeader(ObjectFormatException):
    """The ``<kind> <length>\\0`` header of an object could not be parsed."""


class MalformedBody(ObjectFormatException):
    """The body of an object violates the format of its kind."""


class InvalidConfig(FileFormatException):
    """A configuration file or value could not be parsed."""


class InvalidUserIdentity(Exception):
    """An identity was not of the form ``Name <email>``."""

    def __init__(self, identity: str) -> None:
        """Initialize InvalidUserIdentity.

        Args:
          identity: The offending identity.
        """
        self.identity = identity
        Exception.__init__(self, f"invalid user identity {identity!r}")
