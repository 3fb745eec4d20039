"""Project manifest (carton.yml) model.

The manifest declares the project's direct dependencies::

    name: my-app
    requires:
      Plack: "1.0"
      JSON: ""

Versions are minimum requirements; an empty or null version accepts any
installed version. Quote versions so YAML does not turn ``1.10`` into a float.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

MANIFEST_FILENAME = "carton.yml"


@dataclass(frozen=True)
class Requirement:
    """A direct dependency: module name plus minimum version ("" for any)."""

    module: str
    version: str = ""

    def __str__(self) -> str:
        if self.version:
            return f"{self.module} ({self.version})"
        return self.module


@dataclass
class ProjectManifest:
    """Parsed carton.yml."""

    name: Optional[str] = None
    requires: List[Requirement] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProjectManifest":
        """Build a manifest from already-loaded YAML data."""
        requires_raw = data.get("requires") or {}
        if not isinstance(requires_raw, dict):
            raise ValueError("'requires' must be a mapping of module name to version")

        requires = []
        for module, version in requires_raw.items():
            requires.append(
                Requirement(
                    module=str(module),
                    version="" if version is None else str(version).strip(),
                )
            )
        name = data.get("name")
        return cls(name=str(name) if name is not None else None, requires=requires)

    @classmethod
    def from_yaml(cls, path: Path) -> "ProjectManifest":
        """Load a manifest file.

        Raises:
            FileNotFoundError: If the manifest does not exist
            ValueError: If the manifest is not valid YAML or has the wrong shape
        """
        if not path.exists():
            raise FileNotFoundError(f"Manifest not found: {path}")

        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path.name}: {e}") from e

        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ValueError(f"{path.name} must contain a YAML mapping")
        return cls.from_dict(data)

