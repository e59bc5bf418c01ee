# PathResolver.py
"""
Path resolution for different distribution environments.

Encapsulates all logic for detecting distribution mode and resolving
application paths for installed and development environments.
"""
import logging
import os
import shutil
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

DistributionMode = Literal["installed", "development"]

DATA_DIR_ENV = "VOCALFLOW_DATA_DIR"
DICTIONARY_FILE = "dictionary.json"
ANALYTICS_FILE = "analytics-store.json"


@dataclass(frozen=True)
class ResolvedPaths:
    """Immutable container for all resolved application paths."""
    app_dir: Path
    config_dir: Path
    data_dir: Path
    logs_dir: Path
    sounds_dir: Path
    environment: DistributionMode

    @property
    def dictionary_file(self) -> Path:
        return self.data_dir / DICTIONARY_FILE

    @property
    def analytics_file(self) -> Path:
        return self.data_dir / ANALYTICS_FILE


class PathResolver:
    """
    Resolves application paths for different distribution environments.

    Environments:
    - installed: frozen bundle or site-packages install, writable state in
      the user data directory (~/.vocalflow or $VOCALFLOW_DATA_DIR)
    - development: running from a source checkout
    """

    def __init__(self, script_path: Path):
        self._script_path = script_path.resolve()
        self._mode = self._detect_distribution_mode()
        self._paths = self._resolve_paths()

    @property
    def paths(self) -> ResolvedPaths:
        """Returns resolved paths for current environment."""
        return self._paths

    @property
    def mode(self) -> DistributionMode:
        """Returns current distribution mode."""
        return self._mode

    def _detect_distribution_mode(self) -> DistributionMode:
        if getattr(sys, 'frozen', False):
            return "installed"
        if "site-packages" in self._script_path.parts:
            return "installed"
        return "development"

    @staticmethod
    def _user_data_dir() -> Path:
        override = os.environ.get(DATA_DIR_ENV)
        if override:
            return Path(override).expanduser()
        return Path.home() / ".vocalflow"

    def _resolve_paths(self) -> ResolvedPaths:
        app_dir = self._script_path.parent

        if self._mode == "installed":
            data_dir = self._user_data_dir()
            config_dir = data_dir / "config"
            logs_dir = data_dir / "logs"
        else:  # development
            data_dir = app_dir / "data"
            config_dir = app_dir / "config"
            logs_dir = app_dir / "logs"

        return ResolvedPaths(
            app_dir=app_dir,
            config_dir=config_dir,
            data_dir=data_dir,
            logs_dir=logs_dir,
            sounds_dir=app_dir / "assets" / "sounds",
            environment=self._mode,
        )

    def get_config_path(self, config_name: str) -> Path:
        return self._paths.config_dir / config_name

    def ensure_local_dir_structure(self) -> None:
        """
        Ensures directories config, data and logs exist.
        For installed mode, copies bundled configs to the data directory on first run.
        """
        self._paths.config_dir.mkdir(parents=True, exist_ok=True)
        self._paths.data_dir.mkdir(parents=True, exist_ok=True)
        self._paths.logs_dir.mkdir(parents=True, exist_ok=True)

        if self._mode == "installed":
            bundled_config_dir = self._paths.app_dir / "config"
            if bundled_config_dir.exists():
                for bundled_config in bundled_config_dir.iterdir():
                    if bundled_config.is_file():
                        target = self._paths.config_dir / bundled_config.name
                        if not target.exists():
                            shutil.copy2(bundled_config, target)
                            logging.info(f"Copied bundled config: {bundled_config.name}")
