# utils.py -- Test utilities for git-rename-merge
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

"""Utility functions common to git-rename-merge tests."""

import datetime
import os
import shutil
import tempfile
import time

from dulwich.index import ConflictedIndexEntry, IndexEntry, commit_tree
from dulwich.objects import Blob, Commit
from dulwich.repo import Repo

from . import TestCase

F = 0o100644
X = 0o100755
L = 0o120000

BASE_TEXT = b"one\ntwo\nthree\nfour\nfive\nsix\nseven\n"
OURS_TEXT = b"ONE\ntwo\nthree\nfour\nfive\nsix\nseven\n"
THEIRS_TEXT = b"one\ntwo\nthree\nfour\nfive\nsix\nSEVEN\n"
MERGED_TEXT = b"ONE\ntwo\nthree\nfour\nfive\nsix\nSEVEN\n"


def make_blob(repo, data):
    """Add a blob with the given contents to a repository.

    Returns: The blob
    """
    blob = Blob.from_string(data)
    repo.object_store.add_object(blob)
    return blob


def make_commit(repo, files, parents=(), message=b"Test message.", ref=b"HEAD"):
    """Create a commit with the given files.

    Args:
      repo: Repository to commit to
      files: dict mapping paths to contents, or to (mode, contents) tuples
      parents: Parent commit ids
      message: Commit message
      ref: Ref to point at the new commit, or None
    Returns: The new Commit
    """
    blobs = []
    for path, content in files.items():
        if isinstance(content, tuple):
            mode, data = content
        else:
            mode, data = F, content
        blobs.append((path, make_blob(repo, data).id, mode))
    default_time = int(time.mktime(datetime.datetime(2010, 1, 1).timetuple()))
    commit = Commit()
    commit.tree = commit_tree(repo.object_store, blobs)
    commit.parents = list(parents)
    commit.author = commit.committer = b"Test Author <test@nodomain.com>"
    commit.author_time = commit.commit_time = default_time
    commit.author_timezone = commit.commit_timezone = 0
    commit.message = message
    repo.object_store.add_object(commit)
    if ref is not None:
        repo.refs[ref] = commit.id
    return commit


def index_entry(mode, sha):
    """Return an IndexEntry with zeroed stat data."""
    return IndexEntry(
        ctime=0, mtime=0, dev=0, ino=0, mode=mode, uid=0, gid=0, size=0, sha=sha
    )


def write_tree_file(repo, path, data):
    """Write a file in the working tree of a repository."""
    full_path = os.path.join(repo.path, os.fsdecode(path))
    os.makedirs(os.path.dirname(full_path), exist_ok=True)
    with open(full_path, "wb") as f:
        f.write(data)


def read_tree_file(repo, path):
    """Read a file from the working tree of a repository."""
    with open(os.path.join(repo.path, os.fsdecode(path)), "rb") as f:
        return f.read()


class RepoTestCase(TestCase):
    """Test case with a fresh non-bare repository in a temporary directory."""

    def setUp(self) -> None:
        super().setUp()
        self.test_dir = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.test_dir)
        self.repo_path = os.path.join(self.test_dir, "repo")
        os.mkdir(self.repo_path)
        self.repo = Repo.init(self.repo_path)
        self.addCleanup(self.repo.close)

    def set_index(self, entries):
        """Replace the index contents.

        Args:
          entries: dict mapping paths to (mode, sha) tuples for merged
            entries, or to 3-tuples of (mode, sha) or None for conflicts
        """
        index = self.repo.open_index()
        index.clear()
        for path, value in entries.items():
            if len(value) == 3:
                index[path] = ConflictedIndexEntry(
                    *(index_entry(*v) if v is not None else None for v in value)
                )
            else:
                index[path] = index_entry(*value)
        index.write()

    def make_missed_rename(
        self, base=BASE_TEXT, ours=OURS_TEXT, theirs=THEIRS_TEXT, ours_mode=F
    ):
        """Set up the state after a merge that missed a rename.

        Our branch renamed old.txt to new.txt and edited it, their branch
        edited old.txt. The merge left new.txt as ours at stage 0 and a
        modify/delete conflict for old.txt.

        Returns: tuple of (base, ours, theirs) blobs
        """
        base_commit = make_commit(
            self.repo, {b"old.txt": base, b"other.txt": b"unchanged\n"}
        )
        make_commit(
            self.repo,
            {b"new.txt": (ours_mode, ours), b"other.txt": b"unchanged\n"},
            parents=[base_commit.id],
        )
        make_commit(
            self.repo,
            {b"old.txt": theirs, b"other.txt": b"unchanged\n"},
            parents=[base_commit.id],
            ref=b"refs/heads/theirs",
        )
        self.repo.refs[b"refs/tags/base"] = base_commit.id
        self.base_commit = base_commit
        blobs = (
            make_blob(self.repo, base),
            make_blob(self.repo, ours),
            make_blob(self.repo, theirs),
        )
        other = make_blob(self.repo, b"unchanged\n")
        self.set_index(
            {
                b"new.txt": (ours_mode, blobs[1].id),
                b"old.txt": ((F, blobs[0].id), None, (F, blobs[2].id)),
                b"other.txt": (F, other.id),
            }
        )
        write_tree_file(self.repo, b"new.txt", ours)
        write_tree_file(self.repo, b"old.txt", theirs)
        write_tree_file(self.repo, b"other.txt", b"unchanged\n")
        return blobs
