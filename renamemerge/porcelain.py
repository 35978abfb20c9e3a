# porcelain.py -- High-level rename merge operations
# Copyright (C) 2026 The git-rename-merge contributors
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

"""Simple wrapper that provides the rename merge operations.

Currently implemented:
 * rename_merge
 * lookup
 * unmerged

These functions are meant to behave similarly to the git subcommand they
are named after, and accept either a repository object or the path of a
directory inside a repository.

A typical session after a merge that missed the rename of ``old.c`` to
``new.c`` on our side::

    rename_merge(".", "new.c", ":1:old.c", "new.c", ":3:old.c",
                 resolve_source="old.c")
"""

__all__ = [
    "RenameMergeResult",
    "lookup",
    "open_repo_closing",
    "rename_merge",
    "unmerged",
]

import os
import sys
from collections.abc import Iterator
from contextlib import closing, contextmanager
from dataclasses import dataclass
from typing import BinaryIO, TypeVar

from dulwich.errors import NoIndexPresent, NotGitRepository
from dulwich.repo import BaseRepo, Repo

from .checkout import checkout_merge, external_checkout_merge
from .config import Settings, settings_from_config
from .errors import RenameMergeError
from .index import format_index_info, iter_unmerged, write_conflict
from .log_utils import getLogger
from .lookup import ConflictVersions, ResolvedEntry, resolve_spec, resolve_specs
from .revspec import normalize_path, parse_revision_spec, to_bytes

logger = getLogger(__name__)

T = TypeVar("T", bound=BaseRepo)

RepoPath = str | bytes | os.PathLike[str] | Repo


@dataclass
class RenameMergeResult:
    """Outcome of a rename merge.

    Attributes:
      path: Destination path
      versions: The three versions that were staged
      record: The update-index --index-info lines for the conflict
      conflicted: Whether the checked out file has conflict markers, or None
        if nothing was checked out
    """

    path: bytes
    versions: ConflictVersions
    record: list[bytes]
    conflicted: bool | None = None


@contextmanager
def _noop_context_manager(obj: T) -> Iterator[T]:
    """Context manager that has the same api as closing but does nothing."""
    yield obj


def open_repo_closing(path_or_repo: RepoPath):
    """Open an argument that can be a repository or a path for a repository.

    Paths are searched upwards for a repository, as git does. Returns a
    context manager that will close the repo on exit if the argument is a
    path, else does nothing if the argument is a repo.

    Raises:
      RenameMergeError: if no repository was found
    """
    if isinstance(path_or_repo, BaseRepo):
        return _noop_context_manager(path_or_repo)
    try:
        return closing(Repo.discover(path_or_repo))
    except NotGitRepository as e:
        raise RenameMergeError(f"not a git repository: {e}") from e


def _dest_path(path: str | bytes) -> bytes:
    path = to_bytes(path)
    return normalize_path(path, path)


def rename_merge(
    repo: RepoPath,
    path: str | bytes,
    base: str | bytes,
    ours: str | bytes,
    theirs: str | bytes,
    *,
    checkout: bool | None = None,
    external: bool | None = None,
    dry_run: bool = False,
    resolve_source: str | bytes | None = None,
    outstream: BinaryIO | None = None,
) -> RenameMergeResult:
    """Record a three-way conflict for a renamed file and check it out.

    Args:
      repo: Path to repository or repository object
      path: Destination path of the renamed file
      base: Spec of the common ancestor version (stage 1)
      ours: Spec of the current branch version (stage 2)
      theirs: Spec of the incoming branch version (stage 3)
      checkout: Whether to write the merged file to the working tree;
        defaults to renameMerge.checkout
      external: Whether to run ``git checkout -m`` instead of merging
        in-process; defaults to renameMerge.external
      dry_run: Only print the index-info record to outstream
      resolve_source: Source path whose conflict entries are removed
      outstream: Stream for the dry-run record, defaults to stdout
    Returns: RenameMergeResult
    Raises:
      RenameMergeError: if a version can not be resolved, or the index or
        working tree can not be updated
    """
    dest = _dest_path(path)
    source = _dest_path(resolve_source) if resolve_source is not None else None
    with open_repo_closing(repo) as r:
        settings = settings_from_config(r.get_config_stack()).override(
            checkout=checkout, external=external
        )
        try:
            versions = resolve_specs(r, dest, base, ours, theirs)
        except NoIndexPresent as e:
            raise RenameMergeError("repository has no index") from e
        record = format_index_info(dest, versions)
        result = RenameMergeResult(dest, versions, record)

        if dry_run:
            if outstream is None:
                outstream = sys.stdout.buffer
            for line in record:
                outstream.write(line + b"\n")
            return result

        try:
            write_conflict(r, dest, versions, resolve_source=source)
        except NoIndexPresent as e:
            raise RenameMergeError("repository has no index") from e
        logger.info("Recorded conflict for %s", dest.decode("utf-8", "replace"))

        if settings.checkout:
            result.conflicted = _checkout(r, dest, versions, settings)
            if result.conflicted:
                logger.warning(
                    "CONFLICT (content): Merge conflict in %s",
                    dest.decode("utf-8", "replace"),
                )
    return result


def _checkout(
    repo: Repo, path: bytes, versions: ConflictVersions, settings: Settings
) -> bool:
    if settings.external:
        return external_checkout_merge(repo, path, git_path=settings.git_path)
    return checkout_merge(
        repo,
        path,
        versions,
        honor_filemode=settings.honor_filemode,
        symlinks=settings.symlinks,
    )


def lookup(
    repo: RepoPath, spec: str | bytes, path: str | bytes | None = None
) -> ResolvedEntry:
    """Resolve a single revision spec.

    Args:
      repo: Path to repository or repository object
      spec: Revision spec
      path: Destination path for specs that leave the path out
    Returns: ResolvedEntry
    """
    with open_repo_closing(repo) as r:
        return resolve_spec(r, parse_revision_spec(spec, path))


def unmerged(repo: RepoPath) -> list[tuple[bytes, dict[int, tuple[int, bytes]]]]:
    """List the unmerged paths of a repository.

    Args:
      repo: Path to repository or repository object
    Returns: list of (path, stages) tuples; see index.iter_unmerged
    """
    with open_repo_closing(repo) as r:
        try:
            index = r.open_index()
        except NoIndexPresent as e:
            raise RenameMergeError("repository has no index") from e
        return list(iter_unmerged(index))
