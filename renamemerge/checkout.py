# checkout.py -- Materializing a conflicted file in the working tree
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

"""Checkout with merge of a single conflicted path.

This is what ``git checkout -m -- <path>`` does for an unmerged path: the
three staged versions are merged and the result, conflict markers included,
is written to the working tree. The index is left alone, so the path stays
unmerged until the user resolves it and runs ``git add``.
"""

__all__ = [
    "CONFLICT_MARKER",
    "checkout_merge",
    "external_checkout_merge",
    "has_conflict_markers",
    "merged_mode",
    "tree_to_fs_path",
]

import os
import stat
import subprocess
from typing import TYPE_CHECKING

from dulwich.index import build_file_from_blob
from dulwich.merge import merge_blobs
from dulwich.objects import Blob
from dulwich.patch import is_binary

from .errors import CheckoutFailed
from .log_utils import getLogger
from .lookup import FILE_MODE, ConflictVersions

if TYPE_CHECKING:
    from dulwich.repo import Repo

logger = getLogger(__name__)

CONFLICT_MARKER = b"<<<<<<< "

os_sep_bytes = os.sep.encode("ascii")


def tree_to_fs_path(root_path: bytes, tree_path: bytes) -> bytes:
    """Convert a git tree path to a file system path.

    Args:
      root_path: Root filesystem path
      tree_path: Git tree path as bytes
    Returns: File system path.
    """
    if os_sep_bytes != b"/":
        tree_path = tree_path.replace(b"/", os_sep_bytes)
    return os.path.join(root_path, tree_path)


def merged_mode(versions: ConflictVersions) -> int:
    """Pick the mode of the merged file.

    A mode change on one side wins over an unchanged mode on the other;
    when both sides changed it, ours wins.
    """
    if versions.ours.mode == versions.base.mode:
        return versions.theirs.mode
    return versions.ours.mode


def _merge_contents(
    repo: "Repo",
    path: bytes,
    base: Blob,
    ours: Blob,
    theirs: Blob,
    versions: ConflictVersions,
) -> tuple[bytes, bool]:
    if any(stat.S_ISLNK(v.mode) for v in versions) or any(
        is_binary(b.data) for b in (base, ours, theirs)
    ):
        # No content merge: one side wins if the other is unchanged
        if ours.id == theirs.id or theirs.id == base.id:
            return ours.data, False
        if ours.id == base.id:
            return theirs.data, False
        logger.warning(
            "Cannot merge %s, keeping our version", path.decode("utf-8", "replace")
        )
        return ours.data, True
    # A merge driver named in .gitattributes takes over
    return merge_blobs(
        base,
        ours,
        theirs,
        path=path,
        gitattributes=repo.get_gitattributes(),
        config=repo.get_config_stack(),
    )


def has_conflict_markers(data: bytes) -> bool:
    """Check whether data contains a conflict start marker line."""
    return data.startswith(CONFLICT_MARKER) or (b"\n" + CONFLICT_MARKER) in data


def checkout_merge(
    repo: "Repo",
    path: bytes,
    versions: ConflictVersions,
    *,
    honor_filemode: bool = True,
    symlinks: bool = True,
) -> bool:
    """Write the merge of the three versions of a path to the working tree.

    Args:
      repo: Repository with a working tree
      path: Tree path to write
      versions: The three versions of the conflict
      honor_filemode: Whether to set the executable bit from the mode
      symlinks: Whether symlinks are written as symlinks, or as plain files
        holding the link target
    Returns: True if the written file has conflicts
    Raises:
      CheckoutFailed: if the file can not be written
    """
    store = repo.object_store
    base, ours, theirs = (store[v.sha] for v in versions)
    content, conflicted = _merge_contents(repo, path, base, ours, theirs, versions)

    mode = merged_mode(versions)
    if stat.S_ISLNK(mode) and not symlinks:
        mode = FILE_MODE

    full_path = tree_to_fs_path(os.fsencode(repo.path), path)
    try:
        if os.path.isdir(full_path) and not os.path.islink(full_path):
            raise CheckoutFailed(path, "a directory is in the way")
        os.makedirs(os.path.dirname(full_path), exist_ok=True)
        # Replace whatever is at the path
        if os.path.lexists(full_path):
            os.unlink(full_path)
        build_file_from_blob(
            Blob.from_string(content),
            mode,
            full_path,
            honor_filemode=honor_filemode,
        )
    except OSError as e:
        raise CheckoutFailed(path, str(e)) from e
    logger.debug("Wrote %r with mode %o", full_path, mode)
    return conflicted


def external_checkout_merge(
    repo: "Repo", path: bytes, git_path: str = "git"
) -> bool:
    """Run ``git checkout -m`` for a path.

    Args:
      repo: Repository with a working tree
      path: Tree path to check out
      git_path: Path to the git executable
    Returns: True if the written file has conflict markers
    Raises:
      CheckoutFailed: if git could not be run or failed
    """
    args = [git_path, "checkout", "-m", "--", os.fsdecode(path)]
    logger.debug("Running %s", " ".join(args))
    try:
        p = subprocess.run(
            args,
            cwd=repo.path,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
        )
    except OSError as e:
        raise CheckoutFailed(path, str(e)) from e
    if p.returncode != 0:
        raise CheckoutFailed(path, p.stdout)
    full_path = tree_to_fs_path(os.fsencode(repo.path), path)
    if os.path.islink(full_path):
        return False
    with open(full_path, "rb") as f:
        return has_conflict_markers(f.read())
