# repo.py -- For dealing with git repositories.
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

"""Repository access.

A repository is a working directory with a ``.git`` control directory
holding the object store, the configuration and a static ``HEAD``.
"""

__all__ = [
    "BASE_DIRECTORIES",
    "CONTROLDIR",
    "DEFAULT_BRANCH",
    "OBJECTDIR",
    "REFSDIR",
    "DefaultIdentityNotFound",
    "Identity",
    "Repo",
    "check_user_identity",
    "get_user_identity",
]

import os
import socket
import sys
from types import TracebackType
from typing import NamedTuple, Optional, Union

from .config import Config, ConfigFile, StackedConfig
from .errors import InvalidUserIdentity, NotGitRepository
from .file import GitFile
from .log_utils import getLogger
from .object_store import DiskObjectStore

logger = getLogger(__name__)

CONTROLDIR = ".git"
OBJECTDIR = "objects"
REFSDIR = "refs"
DEFAULT_BRANCH = b"master"

BASE_DIRECTORIES = [
    [OBJECTDIR],
    [REFSDIR],
]


class DefaultIdentityNotFound(Exception):
    """Default identity could not be determined."""


class Identity(NamedTuple):
    """A name and email pair used as commit author or committer."""

    name: str
    email: str

    def encode(self, encoding: str = "utf-8") -> bytes:
        """Return the identity in its serialized ``Name <email>`` form."""
        return f"{self.name} <{self.email}>".encode(encoding)


def _host_identity() -> Identity:
    """Guess an identity from the login environment and the host name.

    Raises:
      DefaultIdentityNotFound: if no user name can be found
    """
    username = next(
        (
            os.environ[var]
            for var in ("LOGNAME", "USER", "LNAME", "USERNAME")
            if os.environ.get(var)
        ),
        None,
    )
    fullname = None
    if sys.platform != "win32":
        import pwd

        try:
            entry = pwd.getpwuid(os.getuid())
        except KeyError:
            pass
        else:
            fullname = entry.pw_gecos.split(",")[0]
            username = username or entry.pw_name
    if not username:
        raise DefaultIdentityNotFound("unable to determine the user name")
    email = os.environ.get("EMAIL") or f"{username}@{socket.gethostname()}"
    return Identity(fullname or username, email)


def _identity_field(
    config: Config, kind: Optional[str], field: str
) -> Optional[bytes]:
    if kind:
        value = os.environ.get(f"GIT_{kind}_{field.upper()}")
        if value is not None:
            return value.encode("utf-8")
    try:
        return config.get(("user",), field)
    except KeyError:
        return None


def get_user_identity(config: Config, kind: Optional[str] = None) -> bytes:
    """Determine the identity to use for new commits.

    Each of the name and email is taken from the first of:
    ``$GIT_<KIND>_NAME``/``$GIT_<KIND>_EMAIL`` (only when kind is given,
    usually "AUTHOR" or "COMMITTER"), ``user.name``/``user.email`` in
    config, and the identity of the logged-in user on this host.

    Returns:
      The identity as ``Name <email>``
    Raises:
      DefaultIdentityNotFound: if the host identity is needed but unknown
    """
    name = _identity_field(config, kind, "name")
    email = _identity_field(config, kind, "email")
    if name is None or email is None:
        host = _host_identity()
        if name is None:
            name = host.name.encode("utf-8")
        if email is None:
            email = host.email.encode("utf-8")
    if email.startswith(b"<") and email.endswith(b">"):
        email = email[1:-1]
    return name + b" <" + email + b">"


def check_user_identity(identity: bytes) -> None:
    """Verify that an identity has the form ``Name <email>``.

    Raises:
      InvalidUserIdentity: if it does not, or contains NUL or a newline
    """
    _name, sep, email = identity.partition(b" <")
    if (
        not sep
        or not email.endswith(b">")
        or b">" in email[:-1]
        or b"\0" in identity
        or b"\n" in identity
    ):
        raise InvalidUserIdentity(identity.decode("utf-8", "replace"))


class Repo:
    """A git repository backed by local disk.

    To open an existing repository, call the constructor with
    the path of the repository.

    To create a new repository, use the Repo.init class method.
    """

    path: str
    object_store: DiskObjectStore

    def __init__(self, root: Union[str, os.PathLike[str]]) -> None:
        """Open a repository on disk.

        Args:
          root: Path to the working tree of the repository
        Raises:
          NotGitRepository: if no control directory exists at root
        """
        root = os.fspath(root)
        controldir = os.path.join(root, CONTROLDIR)
        if not os.path.isdir(os.path.join(controldir, OBJECTDIR)):
            raise NotGitRepository(f"No git repository was found at {root}")
        self.path = root
        self._controldir = controldir
        self.object_store = DiskObjectStore.from_config(
            os.path.join(controldir, OBJECTDIR), self.get_config()
        )

    def __repr__(self) -> str:
        return f"<Repo at {self.path!r}>"

    def controldir(self) -> str:
        """Return the path of the control directory."""
        return self._controldir

    @classmethod
    def discover(cls, start: Union[str, os.PathLike[str]] = ".") -> "Repo":
        """Iterate parent directories to discover a repository.

        Return a Repo object for the first parent directory that looks like a
        Git repository.

        Args:
          start: The directory to start discovery from (defaults to '.')
        """
        path = os.path.abspath(start)
        while True:
            try:
                return cls(path)
            except NotGitRepository:
                new_path, _tail = os.path.split(path)
                if new_path == path:  # Root reached
                    break
                path = new_path
        raise NotGitRepository(f"No git repository was found at {os.fspath(start)}")

    @classmethod
    def init(
        cls,
        path: Union[str, os.PathLike[str]],
        *,
        mkdir: bool = False,
        default_branch: bytes = DEFAULT_BRANCH,
    ) -> "Repo":
        """Create a new repository.

        Re-running init on an existing repository rewrites HEAD and leaves
        the objects and an existing configuration file alone.

        Args:
          path: Path in which to create the repository
          mkdir: Whether to create the directory
          default_branch: Branch HEAD points at
        Returns: `Repo` instance
        """
        path = os.fspath(path)
        if mkdir:
            os.mkdir(path)
        controldir = os.path.join(path, CONTROLDIR)
        os.makedirs(controldir, exist_ok=True)
        for d in BASE_DIRECTORIES:
            os.makedirs(os.path.join(controldir, *d), exist_ok=True)
        with GitFile(os.path.join(controldir, "HEAD"), "wb") as f:
            f.write(b"ref: refs/heads/" + default_branch + b"\n")
        config_path = os.path.join(controldir, "config")
        if not os.path.exists(config_path):
            config = ConfigFile()
            config.set("core", "repositoryformatversion", "0")
            config.set("core", "filemode", True)
            config.set("core", "bare", False)
            config.write_to_path(config_path)
        logger.debug("Initialized repository in %s", controldir)
        return cls(path)

    def get_config(self) -> ConfigFile:
        """Retrieve the config object.

        Returns: `ConfigFile` object for the ``.git/config`` file.
        """
        path = os.path.join(self.controldir(), "config")
        try:
            return ConfigFile.from_path(path)
        except FileNotFoundError:
            return ConfigFile(path)

    def get_config_stack(self) -> StackedConfig:
        """Return a config stack for this repository.

        The repository configuration takes precedence over the user's.
        """
        backends = [self.get_config(), *StackedConfig.default_backends()]
        return StackedConfig(backends)

    def close(self) -> None:
        """Close any files opened by this repository."""

    def __enter__(self) -> "Repo":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
