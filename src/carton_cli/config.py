"""Configuration management for carton."""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .deps.lockfile import LOCKFILE_NAME
from .models.manifest import MANIFEST_FILENAME

CONFIG_DIR = os.path.expanduser("~/.carton")
CONFIG_FILE = os.path.join(CONFIG_DIR, "config.json")

DEFAULT_INSTALL_PATH = "local"

DEFAULT_CONFIG = {
    "path": DEFAULT_INSTALL_PATH,
    "color": True,
}


def get_config() -> Dict[str, Any]:
    """Get the user configuration merged over the defaults."""
    config = dict(DEFAULT_CONFIG)
    if os.path.exists(CONFIG_FILE):
        try:
            with open(CONFIG_FILE, "r", encoding="utf-8") as f:
                stored = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {CONFIG_FILE}: {e}") from e
        if isinstance(stored, dict):
            config.update(stored)
    return config


def update_config(updates: Dict[str, Any]) -> None:
    """Persist configuration values."""
    config = get_config()
    config.update(updates)
    os.makedirs(CONFIG_DIR, exist_ok=True)
    with open(CONFIG_FILE, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=2, sort_keys=True)


def get_default_path() -> str:
    """Get the default installation prefix."""
    return str(get_config().get("path") or DEFAULT_INSTALL_PATH)


def set_default_path(path: str) -> None:
    update_config({"path": path})


def get_color_enabled() -> bool:
    return bool(get_config().get("color", True))


def set_color_enabled(enabled: bool) -> None:
    update_config({"color": enabled})


@dataclass(frozen=True)
class CartonSettings:
    """Settings for a single carton invocation.

    Attributes:
        project_root: Directory holding the manifest and lock file
        path: Installation prefix, relative to project_root unless absolute
        lock_file: Lock file name or path
        manifest_file: Manifest file name or path
        color: Whether console output is colored
        verbose: Whether to print extra detail
    """

    project_root: Path = Path(".")
    path: str = DEFAULT_INSTALL_PATH
    lock_file: str = LOCKFILE_NAME
    manifest_file: str = MANIFEST_FILENAME
    color: bool = True
    verbose: bool = False

    @property
    def install_path(self) -> Path:
        return self.project_root / self.path

    @property
    def lock_path(self) -> Path:
        return self.project_root / self.lock_file

    @property
    def manifest_path(self) -> Path:
        return self.project_root / self.manifest_file


def resolve_settings(
    project_root: Optional[Path] = None,
    path: Optional[str] = None,
    color: Optional[bool] = None,
    verbose: bool = False,
    env: Optional[Mapping[str, str]] = None,
) -> CartonSettings:
    """Resolve settings: explicit values, then environment, then config file."""
    env = os.environ if env is None else env
    config = get_config()

    if path is None:
        path = env.get("PERL_CARTON_PATH") or str(config.get("path") or DEFAULT_INSTALL_PATH)
    if color is None:
        color = "NO_COLOR" not in env and bool(config.get("color", True))

    return CartonSettings(
        project_root=project_root or Path("."),
        path=path,
        lock_file=env.get("CARTON_LOCK") or LOCKFILE_NAME,
        color=color,
        verbose=verbose,
    )
