# index.py -- Recording synthesized conflicts in the git index
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

"""Writing the three-way conflict entry for a renamed file.

The conflict is recorded the way ``git update-index --index-info`` records
it when fed::

    0 0000000000000000000000000000000000000000\tpath
    <mode> <sha> 1\tpath
    <mode> <sha> 2\tpath
    <mode> <sha> 3\tpath

i.e. the merged (stage 0) entry is removed and the three versions are added
at stages 1, 2 and 3 with zeroed stat data.
"""

__all__ = [
    "ZERO_SHA",
    "format_index_info",
    "iter_unmerged",
    "stage_conflict",
    "unstage_path",
    "write_conflict",
]

from collections.abc import Iterator
from typing import TYPE_CHECKING

from dulwich.index import ConflictedIndexEntry, IndexEntry

from .log_utils import getLogger
from .lookup import EMPTY_BLOB_ID, ConflictVersions, ResolvedEntry, empty_blob

if TYPE_CHECKING:
    from dulwich.index import Index
    from dulwich.repo import Repo

logger = getLogger(__name__)

ZERO_SHA = b"0" * 40


def format_index_info(path: bytes, versions: ConflictVersions) -> list[bytes]:
    """Format the update-index --index-info record for a conflict.

    Args:
      path: Destination path
      versions: The three versions of the conflict
    Returns: list of lines, without trailing newlines
    """
    lines = [b"0 " + ZERO_SHA + b"\t" + path]
    for stage, version in enumerate(versions, 1):
        lines.append(b"%o %s %d\t%s" % (version.mode, version.sha, stage, path))
    return lines


def _index_entry(version: ResolvedEntry) -> IndexEntry:
    return IndexEntry(
        ctime=0,
        mtime=0,
        dev=0,
        ino=0,
        mode=version.mode,
        uid=0,
        gid=0,
        size=0,
        sha=version.sha,
    )


def stage_conflict(index: "Index", path: bytes, versions: ConflictVersions) -> None:
    """Replace the entry of a path with a three-way conflict.

    Args:
      index: Index to modify; it is not written
      path: Destination path
      versions: The three versions of the conflict
    """
    if path in index:
        logger.debug("Removing existing index entry for %r", path)
        del index[path]
    index[path] = ConflictedIndexEntry(
        ancestor=_index_entry(versions.base),
        this=_index_entry(versions.ours),
        other=_index_entry(versions.theirs),
    )


def unstage_path(index: "Index", path: bytes) -> bool:
    """Remove all entries of a path from the index.

    Returns: True if the path was in the index
    """
    if path not in index:
        return False
    del index[path]
    return True


def write_conflict(
    repo: "Repo",
    path: bytes,
    versions: ConflictVersions,
    resolve_source: bytes | None = None,
) -> None:
    """Record a conflict for path in the index of a repository.

    Args:
      repo: Repository whose index to update
      path: Destination path
      versions: The three versions of the conflict
      resolve_source: Optional source path whose entries are dropped in the
        same index write
    """
    if (
        any(v.sha == EMPTY_BLOB_ID for v in versions)
        and EMPTY_BLOB_ID not in repo.object_store
    ):
        logger.debug("Adding empty blob to the object store")
        repo.object_store.add_object(empty_blob())
    index = repo.open_index()
    stage_conflict(index, path, versions)
    if resolve_source is not None and resolve_source != path:
        if unstage_path(index, resolve_source):
            logger.info(
                "Removed %s from the index", resolve_source.decode("utf-8", "replace")
            )
        else:
            logger.warning(
                "%s is not in the index", resolve_source.decode("utf-8", "replace")
            )
    index.write()


def iter_unmerged(
    index: "Index",
) -> Iterator[tuple[bytes, dict[int, tuple[int, bytes]]]]:
    """Iterate over the unmerged paths in an index.

    Args:
      index: Index to inspect
    Returns: iterator over (path, stages) tuples, where stages maps a stage
      number to a (mode, sha) tuple
    """
    for path, entry in sorted(index.items()):
        if not isinstance(entry, ConflictedIndexEntry):
            continue
        stages = {}
        for stage, stage_entry in enumerate(
            (entry.ancestor, entry.this, entry.other), 1
        ):
            if stage_entry is not None:
                stages[stage] = (stage_entry.mode, stage_entry.sha)
        yield path, stages
