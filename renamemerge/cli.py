#
# git-rename-merge - Command-line interface
# Copyright (C) 2026 The git-rename-merge contributors
# vim: expandtab
#
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later
# git-rename-merge is dual-licensed under the Apache License, Version 2.0 and
# the GNU General Public License as published by the Free Software Foundation;
# version 2.0 or (at your option) any later version. You can redistribute it
# and/or modify it under the terms of either of these two licenses.
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

"""Command-line interface for git-rename-merge.

Installed as ``git-rename-merge``, so git runs it for ``git rename-merge``.
Paths on the command line are relative to the top of the working tree.
"""

__all__ = [
    "Command",
    "cmd_lookup",
    "cmd_ls_unmerged",
    "cmd_merge",
    "commands",
    "main",
    "signal_int",
    "signal_quit",
    "to_display_str",
]

import argparse
import logging
import os
import signal
import sys
import types
from collections.abc import Sequence

from . import __version__, porcelain
from .errors import RenameMergeError
from .log_utils import default_logging_config

logger = logging.getLogger(__name__)


def to_display_str(value: bytes | str) -> str:
    """Convert a bytes or string value to a display string."""
    if isinstance(value, bytes):
        return value.decode("utf-8", "replace")
    return value


def signal_int(signal: int, frame: types.FrameType | None) -> None:
    """Handle interrupt signal by exiting."""
    sys.exit(1)


def signal_quit(signal: int, frame: types.FrameType | None) -> None:
    """Handle quit signal by entering debugger."""
    import pdb

    pdb.set_trace()


class Command:
    """A git-rename-merge subcommand."""

    def __init__(self, repo: str = ".") -> None:
        """Initialize the command.

        Args:
            repo: Directory inside the repository to operate on
        """
        self.repo = repo

    def run(self, args: Sequence[str]) -> int | None:
        """Run the command."""
        raise NotImplementedError(self.run)


class cmd_merge(Command):
    """Record a three-way conflict for a file whose rename was not detected."""

    def run(self, args: Sequence[str]) -> int | None:
        """Execute the merge command.

        Args:
            args: Command line arguments
        """
        parser = argparse.ArgumentParser(
            prog="git-rename-merge merge",
            description=self.__doc__,
            epilog=(
                "Version specs: '' or /dev/null for the empty blob, :N or "
                ":N:PATH for index stage N, :PATH for stage 0, REV:PATH or "
                "REV: for a path in a revision, and a bare PATH for HEAD:PATH. "
                "Forms without a path use DEST."
            ),
        )
        parser.add_argument("dest", help="Destination path of the renamed file")
        parser.add_argument("base", help="Common ancestor version (stage 1)")
        parser.add_argument("ours", help="Current branch version (stage 2)")
        parser.add_argument("theirs", help="Incoming branch version (stage 3)")
        parser.add_argument(
            "-n",
            "--dry-run",
            action="store_true",
            help="Print the index-info record instead of updating the index",
        )
        checkout = parser.add_mutually_exclusive_group()
        checkout.add_argument(
            "--checkout",
            dest="checkout",
            action="store_const",
            const=True,
            help="Write the conflicted file to the working tree (default)",
        )
        checkout.add_argument(
            "--no-checkout",
            dest="checkout",
            action="store_const",
            const=False,
            help="Only update the index",
        )
        external = parser.add_mutually_exclusive_group()
        external.add_argument(
            "--external",
            dest="external",
            action="store_const",
            const=True,
            help="Use 'git checkout -m' to write the conflicted file",
        )
        external.add_argument(
            "--internal",
            dest="external",
            action="store_const",
            const=False,
            help="Merge the file in-process (default)",
        )
        parser.add_argument(
            "--resolve-source",
            metavar="PATH",
            help="Drop the index entries of the pre-rename path",
        )
        parsed_args = parser.parse_args(args)

        try:
            result = porcelain.rename_merge(
                self.repo,
                parsed_args.dest,
                parsed_args.base,
                parsed_args.ours,
                parsed_args.theirs,
                checkout=parsed_args.checkout,
                external=parsed_args.external,
                dry_run=parsed_args.dry_run,
                resolve_source=parsed_args.resolve_source,
                outstream=sys.stdout.buffer,
            )
        except RenameMergeError as e:
            logger.error("error: %s", e)
            return 1

        if parsed_args.dry_run:
            return 0
        for name, version in zip(("base", "ours", "theirs"), result.versions):
            logger.debug("%-6s %s", name, version.spec.describe())
        if result.conflicted is None:
            logger.info(
                "Not checked out; run 'git checkout -m -- %s' when ready.",
                to_display_str(result.path),
            )
        elif result.conflicted:
            logger.info(
                "Fix conflicts and then run 'git add %s'.",
                to_display_str(result.path),
            )
        return 0


class cmd_lookup(Command):
    """Show the mode and object id a version spec resolves to."""

    def run(self, args: Sequence[str]) -> int | None:
        """Execute the lookup command.

        Args:
            args: Command line arguments
        """
        parser = argparse.ArgumentParser(
            prog="git-rename-merge lookup", description=self.__doc__
        )
        parser.add_argument("spec", help="Version spec to resolve")
        parser.add_argument(
            "--path",
            metavar="DEST",
            help="Destination path for specs that leave the path out",
        )
        parsed_args = parser.parse_args(args)

        try:
            entry = porcelain.lookup(self.repo, parsed_args.spec, parsed_args.path)
        except RenameMergeError as e:
            logger.error("error: %s", e)
            return 1
        sys.stdout.write(
            f"{entry.mode:06o} {to_display_str(entry.sha)}\t{entry.spec.describe()}\n"
        )
        return 0


class cmd_ls_unmerged(Command):
    """List unmerged paths, like 'git ls-files -u'."""

    def run(self, args: Sequence[str]) -> int | None:
        """Execute the ls-unmerged command.

        Args:
            args: Command line arguments
        """
        parser = argparse.ArgumentParser(
            prog="git-rename-merge ls-unmerged", description=self.__doc__
        )
        parser.parse_args(args)

        try:
            entries = porcelain.unmerged(self.repo)
        except RenameMergeError as e:
            logger.error("error: %s", e)
            return 1
        for path, stages in entries:
            display_path = to_display_str(path)
            for stage, (mode, sha) in sorted(stages.items()):
                sys.stdout.write(
                    f"{mode:06o} {to_display_str(sha)} {stage}\t{display_path}\n"
                )
        return 0


commands = {
    "lookup": cmd_lookup,
    "ls-unmerged": cmd_ls_unmerged,
    "merge": cmd_merge,
}


def main(argv: Sequence[str] | None = None) -> int | None:
    """Main entry point for the git-rename-merge CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code or None
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = argparse.ArgumentParser(
        prog="git-rename-merge",
        description="Merge a file whose rename git failed to detect",
        add_help=False,  # subcommands handle -h themselves
    )
    parser.add_argument(
        "-C",
        dest="directory",
        default=".",
        metavar="DIR",
        help="Run as if started in DIR",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Show debug output"
    )
    parser.add_argument("--version", action="store_true", help="Show version")
    parser.add_argument("--help", "-h", action="store_true", help="Show help")
    parser.add_argument(
        "command",
        nargs="?",
        help=f"Command to run. Available: {', '.join(sorted(commands.keys()))}",
    )
    parser.add_argument("args", nargs=argparse.REMAINDER, help=argparse.SUPPRESS)
    global_args = parser.parse_args(argv)

    if global_args.version:
        sys.stdout.write(
            "git-rename-merge {}\n".format(".".join(map(str, __version__)))
        )
        return 0

    if global_args.help or not global_args.command:
        parser.print_help()
        return 1

    default_logging_config(verbose=global_args.verbose)

    try:
        cmd_kls = commands[global_args.command]
    except KeyError:
        logging.fatal("No such subcommand: %s", global_args.command)
        return 1
    return cmd_kls(os.path.abspath(global_args.directory)).run(global_args.args)


def _main() -> None:
    if "RENAMEMERGE_PDB" in os.environ and getattr(signal, "SIGQUIT", None):
        signal.signal(signal.SIGQUIT, signal_quit)  # type: ignore[attr-defined,unused-ignore]
    signal.signal(signal.SIGINT, signal_int)

    sys.exit(main())


if __name__ == "__main__":
    _main()
