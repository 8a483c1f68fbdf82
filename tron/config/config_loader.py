"""
Configuration Loader

Locates tron.yaml, parses it, merges environment variable overrides and
validates the result. Also writes the starter config used by `tron init`.

Author: Tron Project
License: MIT
"""

import os
import yaml
from pathlib import Path
from typing import Optional, Dict, Any, List
from dotenv import load_dotenv

from .schema import TronConfig
from ..utils.logger import get_logger

logger = get_logger(__name__)

CONFIG_FILENAME = "tron.yaml"
DEFAULT_REPO_DIR = Path("Projects") / "tron-ares-dotfiles"

CONFIG_TEMPLATE = """\
# Tron Ares Dotfiles Configuration

dotfiles:
  repo_path: "{repo_path}"

# Add your configs below:
config: []
#  - name: example
#    category: cli
#    repo_path: example/config.toml
#    system_path: "${{HOME}}/.config/example/config.toml"

# logging:
#   level: WARNING
#   file: ~/.local/state/tron/tron.log
#   json_format: false
"""


def default_repo_path() -> Path:
    """Default location of the dotfiles repository."""
    return Path.home() / DEFAULT_REPO_DIR


class ConfigLoader:
    """
    Configuration loader.

    Finds the config file, loads the YAML, merges environment variables
    and validates the structure.
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize the configuration loader.

        Args:
            config_path: Explicit path to the configuration file. If None,
                the standard locations are searched.
        """
        # Load environment variables from .env if present
        load_dotenv()

        self.config_path = config_path
        self._config: Optional[TronConfig] = None
        self._resolved_path: Optional[Path] = None

    def candidate_paths(self) -> List[Path]:
        """
        Locations searched when no explicit path is given, in order.

        Returns:
            List of candidate config file paths
        """
        candidates = []
        env_path = os.getenv("TRON_CONFIG")
        if env_path:
            candidates.append(Path(env_path).expanduser())
        candidates.append(Path.cwd() / CONFIG_FILENAME)
        candidates.append(default_repo_path() / CONFIG_FILENAME)
        candidates.append(Path.home() / ".config" / "tron" / CONFIG_FILENAME)
        return candidates

    def find_config_file(self) -> Path:
        """
        Locate the configuration file.

        Returns:
            Path to an existing config file

        Raises:
            FileNotFoundError: If no config file can be found
        """
        if self.config_path:
            explicit = Path(self.config_path).expanduser()
            if explicit.exists():
                return explicit
            raise FileNotFoundError(f"Config file not found: {explicit}")

        candidates = self.candidate_paths()
        for candidate in candidates:
            if candidate.exists():
                logger.debug(f"Using config file: {candidate}")
                return candidate

        searched = "\n".join(f"  - {c}" for c in candidates)
        raise FileNotFoundError(
            f"Could not find {CONFIG_FILENAME}. Looked in:\n{searched}\n\n"
            f"Run 'tron init' to create one."
        )

    def load(self) -> TronConfig:
        """
        Load and validate configuration.

        Returns:
            Validated TronConfig object

        Raises:
            FileNotFoundError: If the config file can't be found
            ValueError: If YAML parsing or validation fails
        """
        self._resolved_path = self.find_config_file()
        config_data = self._load_yaml(self._resolved_path)
        config_data = self._merge_env_vars(config_data)

        self._config = TronConfig(**config_data)
        logger.info(
            f"Loaded {len(self._config.config)} config entries from {self._resolved_path}"
        )
        return self._config

    def _load_yaml(self, config_file: Path) -> Dict[str, Any]:
        """
        Load YAML configuration file.

        Returns:
            Dictionary with configuration data
        """
        try:
            with open(config_file, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Failed to parse YAML config: {e}")
        except OSError as e:
            raise ValueError(f"Failed to read {config_file}: {e}")

        if not isinstance(data, dict):
            raise ValueError(f"Failed to parse YAML config: expected a mapping in {config_file}")
        return data

    def _merge_env_vars(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge environment variables into configuration.

        Environment variables override config file values:
        TRON_REPO_PATH, TRON_LOG_LEVEL, TRON_LOG_FILE.

        Args:
            config_data: Configuration dictionary from file

        Returns:
            Merged configuration dictionary
        """
        if os.getenv("TRON_REPO_PATH"):
            config_data.setdefault("dotfiles", {})["repo_path"] = os.getenv("TRON_REPO_PATH")

        if os.getenv("TRON_LOG_LEVEL"):
            config_data.setdefault("logging", {})["level"] = os.getenv("TRON_LOG_LEVEL")
        if os.getenv("TRON_LOG_FILE"):
            config_data.setdefault("logging", {})["file"] = os.getenv("TRON_LOG_FILE")

        # An empty `config:` key parses as None
        if config_data.get("config") is None:
            config_data["config"] = []

        return config_data

    def save(self, config: TronConfig, path: Optional[str] = None) -> Path:
        """
        Save configuration to YAML file.

        Args:
            config: TronConfig object to save
            path: Path to save to (uses the loaded path if None)

        Returns:
            Path written
        """
        target = path or self.config_path or self._resolved_path
        if target is None:
            raise ValueError("No path given to save configuration to")

        save_path = Path(target).expanduser()
        save_path.parent.mkdir(parents=True, exist_ok=True)

        config_dict = config.model_dump(mode="json")

        with open(save_path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(config_dict, f, default_flow_style=False, sort_keys=False)

        logger.info(f"Saved configuration to {save_path}")
        return save_path

    @staticmethod
    def init_repo(repo_path: Optional[str] = None) -> tuple:
        """
        Write a starter tron.yaml into the dotfiles repository.

        Args:
            repo_path: Repository directory (defaults to ~/Projects/tron-ares-dotfiles)

        Returns:
            Tuple of (created: bool, config_path: Path); an existing file
            is never overwritten
        """
        repo = Path(repo_path).expanduser() if repo_path else default_repo_path()
        config_path = repo / CONFIG_FILENAME

        if config_path.exists():
            logger.info(f"Config already exists: {config_path}")
            return False, config_path

        repo.mkdir(parents=True, exist_ok=True)
        config_path.write_text(
            CONFIG_TEMPLATE.format(repo_path=repo.as_posix()), encoding='utf-8'
        )
        logger.info(f"Created {config_path}")
        return True, config_path

    @property
    def config(self) -> Optional[TronConfig]:
        """Get the current configuration object."""
        return self._config

    @property
    def resolved_path(self) -> Optional[Path]:
        """Path of the file the configuration was loaded from."""
        return self._resolved_path


def load_config(config_path: Optional[str] = None) -> TronConfig:
    """
    Convenience function to load configuration.

    Args:
        config_path: Optional path to config file

    Returns:
        Loaded and validated TronConfig object
    """
    loader = ConfigLoader(config_path)
    return loader.load()
