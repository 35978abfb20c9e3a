# revspec.py -- Parsing of the revision specs naming conflict versions
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

"""Revision spec parsing.

A revision spec names one version of a file. The accepted forms are a
subset of what git itself accepts for ``git show``:

  ``""`` or ``/dev/null``
      the empty blob
  ``:N`` or ``:N:path``
      stage N (0-3) of a path in the index
  ``:path``
      stage 0 of a path in the index
  ``rev:path`` or ``rev:``
      a path inside the tree of a commit, tag or tree
  ``path``
      a path in the current branch, i.e. ``HEAD:path``

Forms that leave the path out refer to the destination path of the merge.
"""

__all__ = [
    "EMPTY_SPECS",
    "RevisionSpec",
    "SpecKind",
    "normalize_path",
    "parse_revision_spec",
    "to_bytes",
]

import enum
from dataclasses import dataclass

from .errors import InvalidRevisionSpec

DEFAULT_ENCODING = "utf-8"

EMPTY_SPECS = (b"", b"/dev/null")

HEAD = b"HEAD"


def to_bytes(text: str | bytes) -> bytes:
    """Convert text to bytes.

    Args:
      text: Text to convert (str or bytes)

    Returns:
      Bytes representation of text
    """
    if isinstance(text, str):
        return text.encode(DEFAULT_ENCODING)
    return text


class SpecKind(enum.Enum):
    """The ways a revision spec can refer to a file version."""

    EMPTY = "empty"
    INDEX = "index"
    TREE = "tree"
    HEAD_PATH = "head"


@dataclass(frozen=True)
class RevisionSpec:
    """A parsed revision spec.

    Attributes:
      kind: How the version is looked up
      text: The spec as given
      rev: Revision whose tree holds the file (TREE and HEAD_PATH)
      path: Tree path of the file (all kinds but EMPTY)
      stage: Index stage (INDEX)
    """

    kind: SpecKind
    text: bytes
    rev: bytes | None = None
    path: bytes | None = None
    stage: int | None = None

    def describe(self) -> str:
        """Return a human readable description of the version."""
        path = (self.path or b"").decode(DEFAULT_ENCODING, "replace")
        if self.kind is SpecKind.EMPTY:
            return "empty blob"
        if self.kind is SpecKind.INDEX:
            return f"stage {self.stage} of {path} in the index"
        rev = (self.rev or HEAD).decode(DEFAULT_ENCODING, "replace")
        return f"{path} in {rev}"


def normalize_path(path: bytes, spec: bytes) -> bytes:
    """Normalize a tree path given on the command line.

    Empty and ``.`` segments are dropped, so ``./dir//file`` becomes
    ``dir/file``.

    Args:
      path: Path to normalize
      spec: Spec the path came from, for error reporting
    Returns: normalized path
    Raises:
      InvalidRevisionSpec: if the path is empty or contains ``..``
    """
    parts = [p for p in path.split(b"/") if p not in (b"", b".")]
    if not parts:
        raise InvalidRevisionSpec(spec, "empty path")
    if b".." in parts:
        raise InvalidRevisionSpec(spec, "path must not contain '..'")
    return b"/".join(parts)


def _path_or_default(
    path: bytes, default_path: bytes | None, spec: bytes
) -> bytes:
    if path:
        return normalize_path(path, spec)
    if default_path is None:
        raise InvalidRevisionSpec(spec, "no path given and no destination path known")
    return normalize_path(default_path, spec)


def parse_revision_spec(
    spec: str | bytes, default_path: str | bytes | None = None
) -> RevisionSpec:
    """Parse a string referring to one version of a file.

    Args:
      spec: The revision spec
      default_path: Path used by forms that leave the path out, normally
        the destination path of the merge
    Returns: A RevisionSpec
    Raises:
      InvalidRevisionSpec: If the spec is malformed
    """
    spec = to_bytes(spec)
    if default_path is not None:
        default_path = to_bytes(default_path)

    if spec in EMPTY_SPECS:
        return RevisionSpec(SpecKind.EMPTY, text=spec)

    if spec.startswith(b":"):
        rest = spec[1:]
        if not rest:
            raise InvalidRevisionSpec(spec, "missing path after ':'")
        stage = 0
        # :N and :N:path select a stage, anything else is a stage 0 path
        if rest[:1].isdigit() and (len(rest) == 1 or rest[1:2] == b":"):
            stage = int(rest[:1])
            if stage > 3:
                raise InvalidRevisionSpec(
                    spec, f"invalid stage number {stage}, must be 0-3"
                )
            rest = rest[2:]
            path = _path_or_default(rest, default_path, spec)
        else:
            path = normalize_path(rest, spec)
        return RevisionSpec(SpecKind.INDEX, text=spec, path=path, stage=stage)

    if b":" in spec:
        rev, path = spec.split(b":", 1)
        return RevisionSpec(
            SpecKind.TREE,
            text=spec,
            rev=rev,
            path=_path_or_default(path, default_path, spec),
        )

    return RevisionSpec(
        SpecKind.HEAD_PATH, text=spec, rev=HEAD, path=normalize_path(spec, spec)
    )
