# errors.py -- Exception classes for git-rename-merge
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

"""Exception classes raised by git-rename-merge."""

__all__ = [
    "CheckoutFailed",
    "InvalidRevisionSpec",
    "LookupFailed",
    "NotAFile",
    "RenameMergeError",
]


class RenameMergeError(Exception):
    """Base class for all errors reported by git-rename-merge."""

    def __init__(self, msg: str) -> None:
        """Initialize RenameMergeError with message."""
        super().__init__(msg)


class InvalidRevisionSpec(RenameMergeError, ValueError):
    """A revision spec could not be parsed."""

    def __init__(self, spec: bytes | str, reason: str) -> None:
        """Initialize an InvalidRevisionSpec exception.

        Args:
            spec: The offending spec, as given by the user.
            reason: Why it was rejected.
        """
        if isinstance(spec, bytes):
            spec = spec.decode("utf-8", "replace")
        self.spec = spec
        self.reason = reason
        super().__init__(f"invalid revision spec {spec!r}: {reason}")


class LookupFailed(RenameMergeError):
    """A revision spec did not resolve to a mode and object id."""

    def __init__(self, spec: object, reason: str) -> None:
        """Initialize a LookupFailed exception.

        Args:
            spec: The RevisionSpec (or its text) that failed to resolve.
            reason: Why no mode/hash was found.
        """
        self.spec = spec
        self.reason = reason
        text = getattr(spec, "text", spec)
        if isinstance(text, bytes):
            text = text.decode("utf-8", "replace")
        super().__init__(f"unable to resolve {text!r}: {reason}")


class NotAFile(LookupFailed):
    """A revision spec resolved to something other than a file."""


class CheckoutFailed(RenameMergeError):
    """Materializing the conflicted file in the working tree failed."""

    def __init__(self, path: bytes, output: bytes | str = b"") -> None:
        """Initialize a CheckoutFailed exception.

        Args:
            path: Tree path that could not be checked out.
            output: Output of the failed command, if any.
        """
        self.path = path
        if isinstance(output, bytes):
            output = output.decode("utf-8", "replace")
        self.output = output.strip()
        message = f"checkout of {path.decode('utf-8', 'replace')} failed"
        if self.output:
            message += f": {self.output}"
        super().__init__(message)
