"""carton dependency commands: show, list and check."""

import sys
from dataclasses import replace
from typing import Optional

import click

from ..config import CartonSettings
from ..deps.checker import check_satisfies
from ..deps.dependency_tree import build_tree, tree_lines
from ..deps.inventory import scan_installed_modules
from ..deps.lockfile import LockFile, LockNotFoundError, LockParseError
from ..models.manifest import ProjectManifest
from ..utils.console import _rich_echo, _rich_error, _rich_success, _rich_warning

SHOW_INDENT = " "
CHECK_INDENT = "  "


def _load_lock(settings: CartonSettings) -> LockFile:
    """Read the project's lock file, exiting with an error if it is unusable."""
    try:
        return LockFile.read(settings.lock_path)
    except LockNotFoundError:
        _rich_error(
            f"Can't find {settings.lock_path.name}: "
            "Run `carton install` to rebuild the lock file."
        )
        sys.exit(1)
    except LockParseError as e:
        _rich_error(str(e))
        sys.exit(1)


@click.command(help="Show modules recorded in the lock file")
@click.option("--tree", "tree_mode", is_flag=True, default=False,
              help="Display modules as a dependency tree")
@click.pass_obj
def show(settings: CartonSettings, tree_mode: bool):
    """List locked distributions, flat or as a tree."""
    lock = _load_lock(settings)

    if tree_mode:
        tree = build_tree(lock.modules)
        for depth, display in tree_lines(tree):
            _rich_echo(SHOW_INDENT * depth + display)
    else:
        for module in lock.get_all_modules():
            _rich_echo(module.display_name)


@click.command(help="Check that declared dependencies match the installed modules")
@click.option("-p", "--path", "path", default=None,
              help="Installation prefix to check (default: local)")
@click.pass_obj
def check(settings: CartonSettings, path: Optional[str]):
    """Report unsatisfied requirements and modules nothing depends on."""
    if path:
        settings = replace(settings, path=path)

    manifest_path = settings.manifest_path
    if not manifest_path.exists():
        _rich_error(f"Can't find {manifest_path.name}: nothing to check.")
        sys.exit(1)

    try:
        manifest = ProjectManifest.from_yaml(manifest_path)
    except ValueError as e:
        _rich_error(f"Error reading {manifest_path.name}: {e}")
        sys.exit(1)

    try:
        lock = LockFile.load_or_create(settings.lock_path)
    except LockParseError as e:
        _rich_error(str(e))
        sys.exit(1)

    try:
        installed = scan_installed_modules(settings.install_path, lock.modules)
    except ValueError as e:
        _rich_error(f"Error reading installed modules in {settings.path}: {e}")
        sys.exit(1)
    if settings.verbose:
        _rich_echo(
            f"Checking {len(manifest.requires)} requirement(s) against "
            f"{len(lock.modules)} locked and {len(installed)} installed module(s)",
            style="dim",
        )

    result = check_satisfies(lock.modules, manifest.requires, installed)

    if result.unsatisfied:
        _rich_warning(
            "Following dependencies are not satisfied. "
            "Run `carton install` to install them."
        )
        for requirement in result.unsatisfied:
            _rich_echo(str(requirement))

    if result.superfluous is not None:
        _rich_warning(
            f"Following modules are found in {settings.path} but couldn't be "
            f"tracked from your {manifest_path.name}"
        )
        for depth, display in tree_lines(result.superfluous):
            _rich_echo(CHECK_INDENT * depth + display)

    if not result.ok:
        sys.exit(1)

    _rich_success(
        f"Dependencies specified in your {manifest_path.name} are satisfied "
        f"and match the modules in {settings.path}."
    )
