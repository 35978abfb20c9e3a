# utils.py -- Git compatibility utilities
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

"""Utilities for interacting with cgit."""

import os
import shutil
import subprocess
import tempfile

from .. import SkipTest, TestCase

_DEFAULT_GIT = "git"


def git_version(git_path=_DEFAULT_GIT):
    """Attempt to determine the version of git currently installed.

    Args:
      git_path: Path to the git executable; defaults to the version in
        the system path.
    Returns: A tuple of ints of the form (major, minor, point), or None if no
      git installation was found.
    """
    try:
        _, output = run_git(["--version"], git_path=git_path)
    except OSError:
        return None
    version_prefix = b"git version "
    if not output.startswith(version_prefix):
        return None

    parts = output[len(version_prefix) :].split(b".")
    nums = []
    for part in parts[:3]:
        try:
            nums.append(int(part))
        except ValueError:
            break
    while len(nums) < 3:
        nums.append(0)
    return tuple(nums)


def require_git_version(required_version, git_path=_DEFAULT_GIT):
    """Require git version >= version, or skip the calling test.

    Args:
      required_version: A tuple of ints of the form (major, minor, point)
      git_path: Path to the git executable; defaults to the version in
        the system path.
    Raises:
      SkipTest: if no suitable git version was found at the given path.
    """
    found_version = git_version(git_path=git_path)
    if found_version is None:
        raise SkipTest(f"Test requires git >= {required_version}, but c git not found")

    if found_version < required_version:
        required_version = ".".join(map(str, required_version))
        found_version = ".".join(map(str, found_version))
        raise SkipTest(
            f"Test requires git >= {required_version}, found {found_version}"
        )


def run_git(args, git_path=_DEFAULT_GIT, input=None, **popen_kwargs):
    """Run a git command and capture its standard output.

    Args:
      args: A list of args to the git command.
      git_path: Path to to the git executable.
      input: Input data to be sent to stdin.
      **popen_kwargs: Additional kwargs for subprocess.Popen
    Returns: A tuple of (returncode, stdout contents).
    Raises:
      OSError: if the git executable was not found.
    """
    env = popen_kwargs.pop("env", {})
    env["LC_ALL"] = env["LANG"] = "C"
    env["PATH"] = os.getenv("PATH")
    env["HOME"] = os.getenv("HOME", "/nonexistent")
    env["GIT_CONFIG_NOSYSTEM"] = "1"

    p = subprocess.Popen(
        [git_path, *args],
        env=env,
        stdin=subprocess.PIPE,
        stdout=subprocess.PIPE,
        **popen_kwargs,
    )
    stdout, _ = p.communicate(input=input)
    return (p.returncode, stdout)


def run_git_or_fail(args, git_path=_DEFAULT_GIT, input=None, **popen_kwargs):
    """Run a git command, capture stdout/stderr, and fail if git fails."""
    popen_kwargs.setdefault("stderr", subprocess.STDOUT)
    returncode, stdout = run_git(args, git_path=git_path, input=input, **popen_kwargs)
    if returncode != 0:
        raise AssertionError(f"git {args!r} failed with {returncode}: {stdout!r}")
    return stdout


class CompatTestCase(TestCase):
    """Test case that requires git for compatibility checks.

    Subclasses can change the git version required by overriding
    min_git_version.
    """

    min_git_version: tuple[int, ...] = (2, 28, 0)

    def setUp(self) -> None:
        super().setUp()
        require_git_version(self.min_git_version)
        self.test_dir = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.test_dir)

    def init_git_repo(self, name="repo"):
        """Create a repository with c git.

        Returns: Path to the new repository
        """
        path = os.path.join(self.test_dir, name)
        run_git_or_fail(["init", "-q", "-b", "master", path])
        run_git_or_fail(["config", "user.name", "Test Author"], cwd=path)
        run_git_or_fail(["config", "user.email", "test@nodomain.com"], cwd=path)
        return path
