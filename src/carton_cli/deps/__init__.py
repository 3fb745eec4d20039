"""Dependency lock management package for carton."""

from .lockfile import (
    LockFile, LockedModule, LockFileError, LockNotFoundError, LockParseError,
    get_lockfile_path
)
from .dependency_tree import (
    DependencyTree, DependencyNode, build_tree, walk_tree, tree_lines,
    render_tree, reachable_modules, find_top_level_modules
)
from .checker import CheckResult, check_satisfies
from .inventory import fold_packages, scan_installed_modules

__all__ = [
    'LockFile',
    'LockedModule',
    'LockFileError',
    'LockNotFoundError',
    'LockParseError',
    'get_lockfile_path',
    'DependencyTree',
    'DependencyNode',
    'build_tree',
    'walk_tree',
    'tree_lines',
    'render_tree',
    'reachable_modules',
    'find_top_level_modules',
    'CheckResult',
    'check_satisfies',
    'fold_packages',
    'scan_installed_modules',
]
