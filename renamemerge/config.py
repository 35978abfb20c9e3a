# config.py -- Settings for git-rename-merge read from git config
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

"""Settings read from the git configuration.

All settings live in the ``renameMerge`` section::

    [renameMerge]
        checkout = true
        external = false
        gitPath = git

together with ``core.fileMode`` and ``core.symlinks``. Repository, global and
system configuration files all apply, in git's order.
"""

__all__ = ["CONFIG_SECTION", "Settings", "settings_from_config"]

import os
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from .errors import RenameMergeError

if TYPE_CHECKING:
    from dulwich.config import Config

CONFIG_SECTION = (b"renameMerge",)


@dataclass(frozen=True)
class Settings:
    """Behaviour of a rename merge."""

    checkout: bool = True
    external: bool = False
    git_path: str = "git"
    honor_filemode: bool = os.name != "nt"
    symlinks: bool = True

    def override(self, **kwargs: object) -> "Settings":
        """Return a copy with the given settings replaced.

        Keyword arguments that are None are ignored, so unset command line
        flags leave the configured value alone.
        """
        return replace(self, **{k: v for k, v in kwargs.items() if v is not None})


def _get_boolean(
    config: "Config", section: tuple[bytes, ...], name: bytes, default: bool
) -> bool:
    try:
        return config.get_boolean(section, name, default)
    except ValueError as e:
        raise RenameMergeError(
            f"bad config value for {section[0].decode()}.{name.decode()}: {e}"
        ) from e


def settings_from_config(config: "Config") -> Settings:
    """Read settings from a git configuration.

    Args:
      config: A dulwich Config, typically ``repo.get_config_stack()``
    Returns: Settings
    Raises:
      RenameMergeError: if a boolean setting has an invalid value
    """
    defaults = Settings()
    try:
        git_path = config.get(CONFIG_SECTION, b"gitPath").decode("utf-8")
    except KeyError:
        git_path = defaults.git_path
    return Settings(
        checkout=_get_boolean(config, CONFIG_SECTION, b"checkout", defaults.checkout),
        external=_get_boolean(config, CONFIG_SECTION, b"external", defaults.external),
        git_path=git_path,
        honor_filemode=_get_boolean(
            config, (b"core",), b"filemode", defaults.honor_filemode
        ),
        symlinks=_get_boolean(config, (b"core",), b"symlinks", defaults.symlinks),
    )
