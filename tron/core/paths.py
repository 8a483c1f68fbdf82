"""
Path Resolution

Expands home and platform config-directory tokens in configured path
templates and joins repository-relative paths onto the repository root.

Author: Tron Project
License: MIT
"""

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from ..config.schema import TronConfig
from ..utils.logger import get_logger

logger = get_logger(__name__)

# Bracketed form first so `${HOME}` is never read as a bare `$` token.
_TOKEN_PATTERN = re.compile(
    r"\$\{(?P<braced>HOME|APPDATA|LOCALAPPDATA)\}"
    r"|\$(?P<bare>LOCALAPPDATA|APPDATA|HOME)"
    r"|(?P<tilde>~)"
)


@dataclass(frozen=True)
class PathEnvironment:
    """Directories substituted into path templates."""
    home: Path
    appdata: Path
    localappdata: Path

    @classmethod
    def from_env(cls) -> "PathEnvironment":
        """
        Build the environment for the current user.

        APPDATA and LOCALAPPDATA come from the environment when set and
        otherwise fall back to their usual locations under the home
        directory.
        """
        try:
            home = Path.home()
        except RuntimeError:
            home = Path(".")

        appdata = os.getenv("APPDATA")
        localappdata = os.getenv("LOCALAPPDATA")
        return cls(
            home=home,
            appdata=Path(appdata) if appdata else home / "AppData" / "Roaming",
            localappdata=Path(localappdata) if localappdata else home / "AppData" / "Local",
        )

    def lookup(self, token: str) -> Path:
        """Directory substituted for a token name such as ``HOME``."""
        return {
            "HOME": self.home,
            "APPDATA": self.appdata,
            "LOCALAPPDATA": self.localappdata,
        }[token]


@dataclass(frozen=True)
class ResolvedConfig:
    """A config entry with both of its paths made absolute."""
    name: str
    category: str
    repo_path: Path
    system_path: Path


def expand_path(template: str, env: Optional[PathEnvironment] = None) -> Path:
    """
    Expand path tokens in a template.

    Recognised tokens are ``${HOME}``, ``$HOME``, ``~``, ``${APPDATA}``,
    ``$APPDATA``, ``${LOCALAPPDATA}`` and ``$LOCALAPPDATA``. They are
    replaced left to right in one pass; substituted text is not scanned
    again and anything else passes through unchanged.

    Args:
        template: Path template from the configuration
        env: Directories to substitute (defaults to the current user's)

    Returns:
        Expanded path
    """
    env = env or PathEnvironment.from_env()

    def substitute(match: re.Match) -> str:
        if match.group("tilde"):
            return str(env.home)
        token = match.group("braced") or match.group("bare")
        return str(env.lookup(token))

    return Path(_TOKEN_PATTERN.sub(substitute, template))


def resolve_configs(config: TronConfig, env: Optional[PathEnvironment] = None) -> List[ResolvedConfig]:
    """
    Resolve every configured entry to absolute repository and system paths.

    Args:
        config: Loaded configuration
        env: Directories to substitute (defaults to the current user's)

    Returns:
        Resolved entries in configuration order
    """
    env = env or PathEnvironment.from_env()
    repo_base = expand_path(config.dotfiles.repo_path, env)

    resolved = [
        ResolvedConfig(
            name=entry.name,
            category=entry.category,
            repo_path=repo_base / entry.repo_path,
            system_path=expand_path(entry.system_path, env),
        )
        for entry in config.config
    ]
    logger.debug(f"Resolved {len(resolved)} entries against repository {repo_base}")
    return resolved
