"""Lock file support for carton.

The lock file (``carton.lock``) records the exact module versions resolved by
the last install so that every checkout sees the same dependency graph.
"""

import json
import os
import stat
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

LOCKFILE_NAME = "carton.lock"
DEFAULT_LOCKFILE_MODE = 0o644

_MODULE_FIELDS = ("version", "dist", "requires")


class LockFileError(Exception):
    """Base class for lock file failures."""


class LockNotFoundError(LockFileError, FileNotFoundError):
    """The requested lock file does not exist."""

    def __init__(self, path: Path):
        self.path = Path(path)
        super().__init__(f"Can't locate {self.path.name}: {self.path}")


class LockParseError(LockFileError, ValueError):
    """The lock file exists but its contents are malformed."""

    def __init__(self, message: str, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else None
        if self.path is not None:
            message = f"Can't parse {self.path.name}: {message}"
        super().__init__(message)


@dataclass
class LockedModule:
    """A resolved module with its distribution and direct requirements."""

    name: str
    version: Optional[str] = None
    dist: Optional[str] = None
    requires: Dict[str, str] = field(default_factory=dict)
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def display_name(self) -> str:
        """Distribution identifier, or the module name when it is unknown."""
        return self.dist or self.name

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dict for JSON output.

        Keys come out sorted, except inside ``requires`` which keeps record
        order. Keys this model does not know about are written back unchanged.
        """
        result: Dict[str, Any] = dict(self.extra)
        result["requires"] = dict(self.requires)
        if self.version is not None:
            result["version"] = self.version
        if self.dist is not None:
            result["dist"] = self.dist
        return {key: result[key] for key in sorted(result)}

    @classmethod
    def from_dict(cls, name: str, data: Dict[str, Any]) -> "LockedModule":
        """Deserialize one ``modules`` entry.

        Raises:
            LockParseError: If the entry has the wrong shape
        """
        if not isinstance(data, dict):
            raise LockParseError(f"module '{name}' must be an object")

        requires_raw = data.get("requires") or {}
        if not isinstance(requires_raw, dict):
            raise LockParseError(f"'requires' of module '{name}' must be an object")
        requires = {
            str(dep): "" if minimum is None else str(minimum)
            for dep, minimum in requires_raw.items()
        }

        version = data.get("version")
        dist = data.get("dist")
        return cls(
            name=name,
            version=None if version is None else str(version),
            dist=None if dist is None else str(dist),
            requires=requires,
            extra={key: value for key, value in data.items() if key not in _MODULE_FIELDS},
        )


@dataclass
class LockFile:
    """carton lock file: the lock graph of resolved modules keyed by name."""

    lockfile_version: str = "1"
    modules: Dict[str, LockedModule] = field(default_factory=dict)

    def add_module(self, module: LockedModule) -> None:
        """Add or replace a module in the lock graph."""
        self.modules[module.name] = module

    def get_module(self, name: str) -> Optional[LockedModule]:
        return self.modules.get(name)

    def has_module(self, name: str) -> bool:
        return name in self.modules

    def get_all_modules(self) -> List[LockedModule]:
        """Get all modules in lock graph order."""
        return list(self.modules.values())

    def merge(self, modules: Iterable[LockedModule]) -> None:
        """Extend the graph with freshly installed modules, replacing same-named entries."""
        for module in modules:
            self.add_module(module)

    def to_json(self) -> str:
        """Serialize to the normalized JSON form.

        Top-level keys, module names and module fields are sorted; each
        module's ``requires`` keeps its record order, which drives the child
        order of dependency trees.
        """
        data = {
            "lockfile_version": self.lockfile_version,
            "modules": {name: self.modules[name].to_dict() for name in sorted(self.modules)},
        }
        return json.dumps(data, indent=2, ensure_ascii=False) + "\n"

    @classmethod
    def from_json(cls, json_str: str, path: Optional[Path] = None) -> "LockFile":
        """Deserialize from a JSON string.

        Raises:
            LockParseError: If the data is not valid JSON or has the wrong shape
        """
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise LockParseError(str(e), path) from e

        if not isinstance(data, dict):
            raise LockParseError("top-level value must be an object", path)

        modules_raw = data.get("modules") or {}
        if not isinstance(modules_raw, dict):
            raise LockParseError("'modules' must be an object", path)

        lock = cls(lockfile_version=str(data.get("lockfile_version", "1")))
        for name, entry in modules_raw.items():
            try:
                lock.add_module(LockedModule.from_dict(name, entry))
            except LockParseError as e:
                raise LockParseError(str(e), path) from e
        return lock

    def write(self, path: Path) -> None:
        """Write the lock file atomically.

        The content goes to a temporary file in the same directory which then
        replaces ``path``, so readers never observe a partial write. An
        existing file keeps its permission bits.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        try:
            mode = stat.S_IMODE(path.stat().st_mode)
        except FileNotFoundError:
            mode = DEFAULT_LOCKFILE_MODE

        tmp_name: Optional[str] = None
        try:
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=str(path.parent),
                prefix=f".{path.name}.",
                suffix=".tmp",
                delete=False,
            ) as f:
                tmp_name = f.name
                f.write(self.to_json())
            os.chmod(tmp_name, mode)
            os.replace(tmp_name, str(path))
            tmp_name = None
        finally:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)

    @classmethod
    def read(cls, path: Path) -> "LockFile":
        """Read a lock file from disk.

        Raises:
            LockNotFoundError: If the file does not exist
            LockParseError: If the file cannot be parsed
        """
        path = Path(path)
        try:
            content = path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise LockNotFoundError(path) from e
        except UnicodeDecodeError as e:
            raise LockParseError(str(e), path) from e
        return cls.from_json(content, path)

    @classmethod
    def load_or_create(cls, path: Path) -> "LockFile":
        """Load an existing lock file, or start an empty one if there is none.

        A malformed lock file still raises LockParseError.
        """
        try:
            return cls.read(path)
        except LockNotFoundError:
            return cls()


def get_lockfile_path(project_root: Path, filename: str = LOCKFILE_NAME) -> Path:
    """Get the path to the lock file for a project."""
    return project_root / filename
