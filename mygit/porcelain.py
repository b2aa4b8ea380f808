# porcelain.py -- Porcelain-like layer on top of mygit
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

"""Simple wrapper that provides porcelain-like functions on top of mygit.

Currently implemented:
 * init
 * hash_object
 * cat_file
 * ls_tree
 * write_tree
 * commit_tree

These functions are meant to behave similarly to the git subcommands.
Differences in behaviour are considered bugs.

Functions should generally accept both unicode strings and bytestrings
"""

__all__ = [
    "DEFAULT_ENCODING",
    "cat_file",
    "commit_tree",
    "hash_object",
    "init",
    "ls_tree",
    "open_repo_closing",
    "write_tree",
]

import io
import os
import time
from collections.abc import Iterator
from contextlib import AbstractContextManager, closing, contextmanager
from typing import IO, Optional, TypeVar, Union

from .log_utils import getLogger
from .object_store import ClosingIterator
from .objects import Blob, Commit, ObjectID, check_hexsha, pretty_format_tree_entry
from .repo import CONTROLDIR, Identity, Repo, check_user_identity, get_user_identity
from .worktree import blob_from_path, build_tree

logger = getLogger(__name__)

DEFAULT_ENCODING = "utf-8"

T = TypeVar("T", bound=Repo)
RepoPath = Union[str, os.PathLike[str], Repo]
IdentityLike = Union[Identity, bytes, str]


@contextmanager
def _noop_context_manager(obj: T) -> Iterator[T]:
    """Context manager that has the same api as closing but does nothing."""
    yield obj


def open_repo_closing(path_or_repo: RepoPath) -> AbstractContextManager[Repo]:
    """Open an argument that can be a repository or a path for a repository.

    returns a context manager that will close the repo on exit if the argument
    is a path, else does nothing if the argument is a repo.
    """
    if isinstance(path_or_repo, Repo):
        return _noop_context_manager(path_or_repo)
    return closing(Repo(path_or_repo))


def init(path: Union[str, os.PathLike[str]] = ".") -> Repo:
    """Create a new git repository.

    Creates the directory if it does not exist yet.

    Args:
      path: Path to repository.
    Returns: A Repo instance
    """
    if not os.path.exists(path):
        os.mkdir(path)
    return Repo.init(path)


def hash_object(
    repo: Optional[RepoPath], path: Union[str, os.PathLike[str]], write: bool = True
) -> ObjectID:
    """Compute the blob identity of a file, optionally storing it.

    Args:
      repo: Path to the repository; only needed when writing
      path: File to hash
      write: Whether to write the blob to the object store
    Returns: hex SHA of the blob
    """
    blob = blob_from_path(path)
    if not write:
        return blob.id
    if repo is None:
        raise ValueError("a repository is required to write objects")
    with open_repo_closing(repo) as r:
        return r.object_store.add_object(blob)


def cat_file(repo: RepoPath, sha: Union[bytes, str]) -> bytes:
    """Return the body of a stored object, without its header.

    Args:
      repo: Path to the repository
      sha: hex SHA of the object
    Raises:
      InvalidHash: if sha is malformed
      ObjectMissing: if there is no such object
    """
    with open_repo_closing(repo) as r:
        _type_name, body = r.object_store.get_raw(sha)
    return body


def _write_entry(outstream: IO, line: str) -> None:
    if isinstance(outstream, io.TextIOBase):
        outstream.write(line)
    else:
        outstream.write(line.encode(DEFAULT_ENCODING))


def ls_tree(
    repo: RepoPath,
    treeish: Union[bytes, str],
    outstream: Optional[IO] = None,
    name_only: bool = True,
) -> Optional[ClosingIterator[bytes]]:
    """List contents of a tree.

    Without an output stream, returns a single-pass iterator over the entry
    names in stored order, which holds the tree object open until it is
    exhausted or closed. The tree header is checked before anything is
    returned.

    Args:
      repo: Path to the repository
      treeish: Tree id to list
      outstream: Output stream to print entries to
      name_only: Only print item name
    Raises:
      NotTreeError: if the object is not a tree
    """
    with open_repo_closing(repo) as r:
        entries = r.object_store.iter_tree(treeish)
    if outstream is None:
        return ClosingIterator((name for name, _mode, _sha in entries), entries.close)
    with entries:
        for name, mode, sha in entries:
            if name_only:
                _write_entry(
                    outstream, name.decode(DEFAULT_ENCODING, "replace") + "\n"
                )
            else:
                _write_entry(outstream, pretty_format_tree_entry(name, mode, sha))
    return None


def write_tree(
    repo: RepoPath,
    path: Union[str, os.PathLike[str], None] = None,
    *,
    sort_entries: bool = False,
) -> ObjectID:
    """Write a tree object from a directory.

    Args:
      repo: Repository for which to write tree
      path: Directory to snapshot (defaults to the working tree)
      sort_entries: Order entries canonically
    Returns: tree id for the tree that was written
    """
    with open_repo_closing(repo) as r:
        if path is None:
            path = r.path
        return build_tree(
            r.object_store, path, ignore=(CONTROLDIR,), sort_entries=sort_entries
        )


def _identity_bytes(identity: IdentityLike) -> bytes:
    if isinstance(identity, Identity):
        identity = identity.encode(DEFAULT_ENCODING)
    elif isinstance(identity, str):
        identity = identity.encode(DEFAULT_ENCODING)
    check_user_identity(identity)
    return identity


def commit_tree(
    repo: RepoPath,
    tree: Union[bytes, str],
    message: Union[str, bytes],
    parent: Union[bytes, str, None] = None,
    author: Optional[IdentityLike] = None,
    committer: Optional[IdentityLike] = None,
    commit_time: Optional[int] = None,
    commit_timezone: Optional[int] = None,
) -> ObjectID:
    """Create a new commit object.

    The commit records the same identity time for author and committer. A
    trailing newline is added to the message if it lacks one.

    Args:
      repo: Path to repository
      tree: An existing tree object
      message: Commit message
      parent: Optional parent commit
      author: Optional author name and email
      committer: Optional committer name and email
      commit_time: Commit timestamp (defaults to now)
      commit_timezone: Commit timezone in seconds east of UTC (defaults to
        the local timezone)
    Returns: hex SHA of the new commit
    Raises:
      InvalidHash: if tree or parent is malformed
      InvalidUserIdentity: if an identity is not of the form ``Name <email>``
    """
    c = Commit()
    c.tree = check_hexsha(tree)
    if parent is not None:
        c.parents = [check_hexsha(parent)]
    if isinstance(message, str):
        message = message.encode(DEFAULT_ENCODING)
    if not message.endswith(b"\n"):
        message += b"\n"
    c.message = message

    with open_repo_closing(repo) as r:
        if author is None or committer is None:
            config = r.get_config_stack()
        if author is None:
            author = get_user_identity(config, kind="AUTHOR")
        c.author = _identity_bytes(author)
        if committer is None:
            committer = get_user_identity(config, kind="COMMITTER")
        c.committer = _identity_bytes(committer)

        if commit_time is None:
            commit_time = int(time.time())
        if commit_timezone is None:
            commit_timezone = time.localtime(commit_time).tm_gmtoff
        c.commit_time = c.author_time = commit_time
        c.commit_timezone = c.author_timezone = commit_timezone

        sha = r.object_store.add_object(c)
    logger.debug("Created commit %s for tree %s", sha.decode("ascii"), c.tree.decode("ascii"))
    return sha
