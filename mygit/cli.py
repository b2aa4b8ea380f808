#
# mygit - Simple git-like object tool
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

"""Simple command-line interface to mygit.

Each subcommand is a `Command` subclass that parses its own arguments and
works on the repository containing the current directory.
"""

__all__ = [
    "Command",
    "commands",
    "main",
]

import argparse
import logging
import os
import signal
import sys
import types
from collections.abc import Sequence

from . import porcelain
from .errors import (
    FileFormatException,
    InvalidHash,
    InvalidUserIdentity,
    NotGitRepository,
    ObjectMissing,
    WrongObjectException,
)
from .log_utils import _configure_logging_from_trace
from .repo import DefaultIdentityNotFound, Repo

logger = logging.getLogger(__name__)

# Errors reported to the user as "fatal: <message>"
_FATAL_ERRORS = (
    DefaultIdentityNotFound,
    FileFormatException,
    InvalidHash,
    InvalidUserIdentity,
    NotGitRepository,
    ObjectMissing,
    WrongObjectException,
    OSError,
)


def signal_int(signal: int, frame: types.FrameType | None) -> None:
    """Handle interrupt signal by exiting.

    Args:
        signal: Signal number
        frame: Current stack frame
    """
    sys.exit(1)


class Command:
    """A mygit subcommand."""

    def run(self, args: Sequence[str]) -> int | None:
        """Run the command."""
        raise NotImplementedError(self.run)


class cmd_init(Command):
    """Create an empty Git repository or reinitialize an existing one."""

    def run(self, args: Sequence[str]) -> None:
        """Execute the init command.

        Args:
            args: Command line arguments
        """
        parser = argparse.ArgumentParser(prog="mygit init")
        parser.add_argument(
            "path", nargs="?", default=os.getcwd(), help="Repository path"
        )
        parsed_args = parser.parse_args(args)
        porcelain.init(parsed_args.path)
        sys.stdout.write("Initialized git directory\n")


class cmd_cat_file(Command):
    """Provide the content of repository objects."""

    def run(self, args: Sequence[str]) -> None:
        """Execute the cat-file command.

        Args:
            args: Command line arguments
        """
        parser = argparse.ArgumentParser(prog="mygit cat-file")
        parser.add_argument(
            "-p",
            dest="pretty",
            action="store_true",
            required=True,
            help="Pretty-print the contents of the object",
        )
        parser.add_argument("object", help="Object to show")
        parsed_args = parser.parse_args(args)
        with Repo.discover() as repo:
            body = porcelain.cat_file(repo, parsed_args.object)
        sys.stdout.flush()
        sys.stdout.buffer.write(body)
        sys.stdout.buffer.flush()


class cmd_hash_object(Command):
    """Compute object ID and optionally create an object from a file."""

    def run(self, args: Sequence[str]) -> None:
        """Execute the hash-object command.

        Args:
            args: Command line arguments
        """
        parser = argparse.ArgumentParser(prog="mygit hash-object")
        parser.add_argument(
            "-w",
            dest="write",
            action="store_true",
            help="Write the object into the object database",
        )
        parser.add_argument("file", help="File to hash")
        parsed_args = parser.parse_args(args)
        if parsed_args.write:
            with Repo.discover() as repo:
                sha = porcelain.hash_object(repo, parsed_args.file, write=True)
        else:
            sha = porcelain.hash_object(None, parsed_args.file, write=False)
        sys.stdout.write(sha.decode("ascii") + "\n")


class cmd_ls_tree(Command):
    """List the contents of a tree object."""

    def run(self, args: Sequence[str]) -> None:
        """Execute the ls-tree command.

        Args:
            args: Command line arguments
        """
        parser = argparse.ArgumentParser(prog="mygit ls-tree")
        parser.add_argument(
            "--name-only", action="store_true", help="Only display name."
        )
        parser.add_argument("treeish", help="Tree to list")
        parsed_args = parser.parse_args(args)
        with Repo.discover() as repo:
            porcelain.ls_tree(
                repo,
                parsed_args.treeish,
                outstream=sys.stdout,
                name_only=parsed_args.name_only,
            )


class cmd_write_tree(Command):
    """Create a tree object from the working directory."""

    def run(self, args: Sequence[str]) -> None:
        """Execute the write-tree command.

        Args:
            args: Command line arguments
        """
        parser = argparse.ArgumentParser(prog="mygit write-tree")
        parser.parse_args(args)
        with Repo.discover() as repo:
            sha = porcelain.write_tree(repo)
        sys.stdout.write("{}\n".format(sha.decode()))


class cmd_commit_tree(Command):
    """Create a new commit object from a tree."""

    def run(self, args: Sequence[str]) -> None:
        """Execute the commit-tree command.

        Args:
            args: Command line arguments
        """
        parser = argparse.ArgumentParser(prog="mygit commit-tree")
        parser.add_argument("--message", "-m", required=True, help="Commit message")
        parser.add_argument("--parent", "-p", help="Parent commit")
        parser.add_argument("tree", help="Tree SHA to commit")
        parsed_args = parser.parse_args(args)
        with Repo.discover() as repo:
            sha = porcelain.commit_tree(
                repo,
                tree=parsed_args.tree,
                message=parsed_args.message,
                parent=parsed_args.parent,
            )
        sys.stdout.write("{}\n".format(sha.decode()))


commands = {
    "cat-file": cmd_cat_file,
    "commit-tree": cmd_commit_tree,
    "hash-object": cmd_hash_object,
    "init": cmd_init,
    "ls-tree": cmd_ls_tree,
    "write-tree": cmd_write_tree,
}


def main(argv: Sequence[str] | None = None) -> int | None:
    """Main entry point for the mygit CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code or None
    """
    if argv is None:
        argv = sys.argv[1:]

    if not argv:
        parser = argparse.ArgumentParser(
            prog="mygit", description="Simple command-line interface to mygit"
        )
        parser.add_argument(
            "command",
            nargs="?",
            help=f"Command to run. Available: {', '.join(sorted(commands.keys()))}",
        )
        parser.print_help()
        return 1

    # Try to configure from GIT_TRACE, fall back to default if it fails
    if not _configure_logging_from_trace():
        logging.basicConfig(
            level=logging.INFO,
            format="%(message)s",
        )

    cmd = argv[0]
    cmd_args = argv[1:]

    try:
        cmd_kls = commands[cmd]
    except KeyError:
        logging.fatal("No such subcommand: %s", cmd)
        return 1
    try:
        return cmd_kls().run(cmd_args)
    except _FATAL_ERRORS as e:
        logger.debug("%s failed", cmd, exc_info=True)
        sys.stderr.write(f"fatal: {e}\n")
        return 1


def _main() -> None:
    signal.signal(signal.SIGINT, signal_int)

    sys.exit(main())


if __name__ == "__main__":
    _main()
