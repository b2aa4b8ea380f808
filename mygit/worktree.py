# worktree.py -- Snapshotting working directories into trees
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

"""Snapshot a directory on disk into blob and tree objects."""

__all__ = [
    "blob_from_path",
    "build_tree",
]

import os
from collections.abc import Container
from typing import Union

from .log_utils import getLogger
from .object_store import DiskObjectStore
from .objects import BLOB_MODE, TREE_MODE, Blob, ObjectID, Tree, sorted_tree_items

logger = getLogger(__name__)


def blob_from_path(fs_path: Union[str, bytes, os.PathLike[str]]) -> Blob:
    """Create a blob from the contents of a file.

    Args:
      fs_path: Full file system path to file
    Returns: A `Blob` object
    """
    blob = Blob()
    with open(fs_path, "rb") as f:
        blob.data = f.read()
    return blob


def build_tree(
    object_store: DiskObjectStore,
    path: Union[str, os.PathLike[str]],
    *,
    ignore: Container[str] = (".git",),
    sort_entries: bool = False,
) -> ObjectID:
    """Store a directory, recursively, as a tree object.

    Every regular file becomes a blob with mode 0o100644 and every
    subdirectory a nested tree with mode 0o40000. A tree is only written
    after all of its children have been.

    Args:
      object_store: Store to write objects to
      path: Directory to snapshot
      ignore: Entry names to skip at every level
      sort_entries: Order entries canonically instead of by directory
        listing order
    Returns: hex SHA of the tree for path
    Raises:
      OSError: if the directory or one of its files cannot be read
    """
    tree = Tree()
    with os.scandir(path) as it:
        entries = list(it)
    for entry in entries:
        if entry.name in ignore:
            continue
        name = os.fsencode(entry.name)
        if entry.is_dir():
            tree.add(
                name,
                TREE_MODE,
                build_tree(
                    object_store,
                    entry.path,
                    ignore=ignore,
                    sort_entries=sort_entries,
                ),
            )
        else:
            tree.add(name, BLOB_MODE, object_store.add_object(blob_from_path(entry.path)))
    if sort_entries:
        items = sorted_tree_items({name: tree[name] for name in tree})
        tree = Tree()
        for name, mode, hexsha in items:
            tree.add(name, mode, hexsha)
    sha = object_store.add_object(tree)
    logger.debug("Built tree %s for %s (%d entries)", sha.decode("ascii"), path, len(tree))
    return sha
