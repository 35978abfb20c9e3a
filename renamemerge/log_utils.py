# log_utils.py -- Logging utilities for git-rename-merge
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

"""Logging utilities for git-rename-merge.

The library modules only ever call getLogger. Until the command line
interface (or an embedding application) configures logging, records sent to
the "renamemerge" logger go to a null handler, so importing the package never
produces "No handlers could be found" noise.

GIT_TRACE is honoured through dulwich, so tracing behaves as it does for
git and dulwich themselves.
"""

import logging
import sys

from dulwich.log_utils import _configure_logging_from_trace

getLogger = logging.getLogger


class _NullHandler(logging.Handler):
    """No-op logging handler to avoid unexpected logging warnings."""

    def emit(self, record: logging.LogRecord) -> None:
        pass


_NULL_HANDLER = _NullHandler()
_RENAMEMERGE_LOGGER = getLogger("renamemerge")
_RENAMEMERGE_LOGGER.addHandler(_NULL_HANDLER)


def default_logging_config(verbose: bool = False) -> None:
    """Set up the default git-rename-merge loggers.

    GIT_TRACE takes precedence. Without it, plain messages are written to
    stderr, at DEBUG level when verbose is set and INFO otherwise.

    Args:
      verbose: Whether to include debug messages
    """
    remove_null_handler()

    if not _configure_logging_from_trace():
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.INFO,
            stream=sys.stderr,
            format="%(message)s",
        )


def remove_null_handler() -> None:
    """Remove the null handler from the git-rename-merge loggers.

    If a caller wants to set up logging using something other than
    default_logging_config, calling this function first is a minor optimization
    to avoid the overhead of using the _NullHandler.
    """
    _RENAMEMERGE_LOGGER.removeHandler(_NULL_HANDLER)
