# lookup.py -- Resolving revision specs to file modes and object ids
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

"""Lookups of file versions in the object database and the index."""

__all__ = [
    "ConflictVersions",
    "EMPTY_BLOB_ID",
    "ResolvedEntry",
    "empty_blob",
    "resolve_spec",
    "resolve_specs",
]

import stat
from dataclasses import dataclass
from typing import TYPE_CHECKING, NamedTuple

from dulwich.errors import NoIndexPresent, NotTreeError
from dulwich.index import ConflictedIndexEntry
from dulwich.objects import (
    S_ISGITLINK,
    Blob,
    Commit,
    SubmoduleEncountered,
    Tag,
    Tree,
)
from dulwich.objectspec import AmbiguousShortId, parse_commit, parse_object

from .errors import LookupFailed, NotAFile
from .log_utils import getLogger
from .revspec import RevisionSpec, SpecKind, parse_revision_spec

if TYPE_CHECKING:
    from dulwich.index import Index
    from dulwich.repo import BaseRepo

logger = getLogger(__name__)

EMPTY_BLOB_ID = b"e69de29bb2d1d6434b8b29ae775ad8c2e48c5391"

FILE_MODE = 0o100644


@dataclass(frozen=True)
class ResolvedEntry:
    """A file version: its mode, its blob id and where it came from."""

    mode: int
    sha: bytes
    spec: RevisionSpec


class ConflictVersions(NamedTuple):
    """The three versions that make up a conflict."""

    base: ResolvedEntry
    ours: ResolvedEntry
    theirs: ResolvedEntry


def empty_blob() -> Blob:
    """Return the empty blob."""
    return Blob.from_string(b"")


def _check_file_mode(spec: RevisionSpec, mode: int) -> None:
    if S_ISGITLINK(mode):
        raise NotAFile(spec, "it is a submodule")
    if stat.S_ISDIR(mode):
        raise NotAFile(spec, "it is a directory")
    if not (stat.S_ISREG(mode) or stat.S_ISLNK(mode)):
        raise NotAFile(spec, f"unsupported mode {mode:o}")


def _resolve_empty(spec: RevisionSpec) -> ResolvedEntry:
    # The blob is only stored once the conflict is written
    return ResolvedEntry(FILE_MODE, EMPTY_BLOB_ID, spec)


def _resolve_index(index: "Index", spec: RevisionSpec) -> ResolvedEntry:
    assert spec.path is not None and spec.stage is not None
    try:
        entry = index[spec.path]
    except KeyError:
        raise LookupFailed(spec, "path not in the index")
    if isinstance(entry, ConflictedIndexEntry):
        if spec.stage == 0:
            raise LookupFailed(
                spec, "path is unmerged, use :1:, :2: or :3: to select a stage"
            )
        stage_entry = (entry.ancestor, entry.this, entry.other)[spec.stage - 1]
        if stage_entry is None:
            raise LookupFailed(spec, f"path has no stage {spec.stage} entry")
    else:
        if spec.stage != 0:
            raise LookupFailed(spec, f"path is merged, it has no stage {spec.stage}")
        stage_entry = entry
    return ResolvedEntry(stage_entry.mode, stage_entry.sha, spec)


def _parse_treeish(repo: "BaseRepo", rev: bytes) -> object:
    """Resolve a revision to the tree it names, peeling tags and commits.

    Returns: The Tree, or whatever non-tree object the revision names
    """
    try:
        obj = parse_object(repo, rev)
    except KeyError:
        # Abbreviated commit ids
        obj = parse_commit(repo, rev)
    while isinstance(obj, Tag):
        _obj_type, obj_sha = obj.object
        obj = repo[obj_sha]
    if isinstance(obj, Commit):
        obj = repo[obj.tree]
    return obj


def _resolve_tree(repo: "BaseRepo", spec: RevisionSpec) -> ResolvedEntry:
    assert spec.rev is not None and spec.path is not None
    try:
        tree = _parse_treeish(repo, spec.rev)
    except AmbiguousShortId as e:
        raise LookupFailed(spec, f"short object id {spec.rev!r} is ambiguous") from e
    except (KeyError, ValueError) as e:
        raise LookupFailed(spec, f"unknown revision {spec.rev!r}") from e
    if not isinstance(tree, Tree):
        raise LookupFailed(spec, f"{spec.rev!r} is not a tree-ish")
    try:
        mode, sha = tree.lookup_path(repo.object_store.__getitem__, spec.path)
    except KeyError:
        raise LookupFailed(spec, "path not in tree")
    except NotTreeError:
        raise LookupFailed(spec, "a leading path component is not a directory")
    except SubmoduleEncountered:
        raise NotAFile(spec, "a leading path component is a submodule")
    return ResolvedEntry(mode, sha, spec)


def resolve_spec(
    repo: "BaseRepo", spec: RevisionSpec, index: "Index | None" = None
) -> ResolvedEntry:
    """Look up the mode and blob id a revision spec refers to.

    Args:
      repo: Repository to look in
      spec: Parsed revision spec
      index: Index to use for stage lookups; opened from repo when needed
    Returns: A ResolvedEntry
    Raises:
      LookupFailed: if the spec does not yield a mode and blob id
      NotAFile: if the spec names a directory or a submodule
    """
    if spec.kind is SpecKind.EMPTY:
        resolved = _resolve_empty(spec)
    elif spec.kind is SpecKind.INDEX:
        if index is None:
            try:
                index = repo.open_index()
            except NoIndexPresent:
                raise LookupFailed(spec, "repository has no index")
        resolved = _resolve_index(index, spec)
    else:
        resolved = _resolve_tree(repo, spec)
    _check_file_mode(spec, resolved.mode)
    logger.debug(
        "%s -> %o %s", spec.describe(), resolved.mode, resolved.sha.decode("ascii")
    )
    return resolved


def resolve_specs(
    repo: "BaseRepo",
    path: bytes,
    base: str | bytes,
    ours: str | bytes,
    theirs: str | bytes,
    index: "Index | None" = None,
) -> ConflictVersions:
    """Resolve the three versions of a conflict.

    Args:
      repo: Repository to look in
      path: Destination path, used by specs that leave the path out
      base: Spec of the common ancestor version
      ours: Spec of the current branch version
      theirs: Spec of the incoming branch version
      index: Index to use for stage lookups
    Returns: ConflictVersions
    """
    specs = [parse_revision_spec(s, path) for s in (base, ours, theirs)]
    if index is None and any(s.kind is SpecKind.INDEX for s in specs):
        try:
            index = repo.open_index()
        except NoIndexPresent:
            first = next(s for s in specs if s.kind is SpecKind.INDEX)
            raise LookupFailed(first, "repository has no index")
    return ConflictVersions(*(resolve_spec(repo, s, index) for s in specs))
