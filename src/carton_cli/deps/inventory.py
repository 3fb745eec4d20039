"""Discover modules installed under a carton installation prefix.

The lock graph is keyed by each distribution's main module, while a
distribution installs many packages (``Plack`` also installs
``Plack::Request``). Installed names are therefore reported per distribution:
from the ``.meta/*/install.json`` records the installer leaves in the
architecture directory when they exist, otherwise from the ``*.pm`` files
folded onto the locked module that owns them.
"""

import json
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Set

from .lockfile import LockedModule

LIBRARY_SUBDIR = Path("lib") / "perl5"


def get_library_path(install_path: Path) -> Path:
    """Return the Perl library directory of an installation prefix."""
    return install_path / LIBRARY_SUBDIR


def _is_arch_dir(directory: Path) -> bool:
    # Architecture-specific trees (e.g. x86_64-linux/) carry XS build output.
    return (directory / "auto").is_dir() or (directory / ".meta").is_dir()


def _library_roots(lib_dir: Path) -> List[Path]:
    roots = [lib_dir]
    for child in sorted(lib_dir.iterdir()):
        if child.is_dir() and _is_arch_dir(child):
            roots.append(child)
    return roots


def module_name_for(pm_file: Path, lib_root: Path) -> str:
    """Convert ``Foo/Bar.pm`` relative to ``lib_root`` into ``Foo::Bar``."""
    relative = pm_file.relative_to(lib_root).with_suffix("")
    return "::".join(relative.parts)


def scan_installed_packages(install_path: Path) -> Set[str]:
    """Return every package name with a ``.pm`` file under ``install_path``."""
    lib_dir = get_library_path(install_path)
    if not lib_dir.is_dir():
        return set()

    roots = _library_roots(lib_dir)
    nested_roots = set(roots[1:])

    installed: Set[str] = set()
    for root in roots:
        for pm_file in root.rglob("*.pm"):
            relative_parts = pm_file.relative_to(root).parts
            if "auto" in relative_parts or any(part.startswith(".") for part in relative_parts):
                continue
            if root == lib_dir and any(pm_file.is_relative_to(arch) for arch in nested_roots):
                continue
            installed.add(module_name_for(pm_file, root))
    return installed


def read_install_meta(install_path: Path) -> Optional[Set[str]]:
    """Return distribution main-module names from installer metadata.

    Returns:
        Set of names, or None when the prefix carries no ``install.json``
        records at all.

    Raises:
        ValueError: If an ``install.json`` is not valid JSON or lacks a name
    """
    lib_dir = get_library_path(install_path)
    if not lib_dir.is_dir():
        return None

    meta_files = sorted(lib_dir.glob("*/.meta/*/install.json"))
    if not meta_files:
        return None

    names: Set[str] = set()
    for meta_file in meta_files:
        try:
            data = json.loads(meta_file.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {meta_file}: {e}") from e
        name = data.get("name") if isinstance(data, dict) else None
        if not isinstance(name, str) or not name:
            raise ValueError(f"Missing module name in {meta_file}")
        names.add(name)
    return names


def _provided_by(modules: Mapping[str, LockedModule]) -> Dict[str, str]:
    owners: Dict[str, str] = {}
    for name, module in modules.items():
        provides = module.extra.get("provides")
        if isinstance(provides, dict):
            for package in provides:
                owners.setdefault(str(package), name)
    return owners


def fold_packages(packages: Iterable[str], modules: Mapping[str, LockedModule]) -> Set[str]:
    """Map installed package names onto the locked modules that own them.

    A package owned by a lock entry (its own name, or listed in the entry's
    ``provides``) maps to that entry. Otherwise it maps to its nearest
    ``::`` parent present in the lock graph. Packages with no owner are kept
    as they are.
    """
    owners = _provided_by(modules)
    folded: Set[str] = set()
    for package in packages:
        if package in modules:
            folded.add(package)
            continue
        if package in owners:
            folded.add(owners[package])
            continue
        parts = package.split("::")
        owner = package
        for size in range(len(parts) - 1, 0, -1):
            prefix = "::".join(parts[:size])
            if prefix in modules:
                owner = prefix
                break
        folded.add(owner)
    return folded


def scan_installed_modules(
    install_path: Path,
    modules: Optional[Mapping[str, LockedModule]] = None,
) -> Set[str]:
    """Return the distribution-level names installed under ``install_path``.

    Args:
        install_path: Installation prefix (the directory holding ``lib/perl5``)
        modules: Lock graph used to fold sub-packages onto their distribution

    Returns:
        Set of module names. Empty if nothing has been installed yet.
    """
    names = read_install_meta(install_path)
    if names is None:
        names = scan_installed_packages(install_path)
    return fold_packages(names, modules or {})
