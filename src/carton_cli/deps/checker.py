"""Reconcile declared dependencies against the lock graph and installed modules."""

from dataclasses import dataclass, field
from typing import AbstractSet, List, Optional, Sequence

from ..models.manifest import Requirement
from ..utils.version import satisfies
from .dependency_tree import DependencyTree, ModuleGraph, build_tree, reachable_modules


@dataclass
class CheckResult:
    """Outcome of a satisfaction check.

    Attributes:
        unsatisfied: Declared requirements the lock graph does not meet, in
            declaration order
        superfluous: Tree of installed modules that no declared requirement
            reaches, or None when there are none
    """

    unsatisfied: List[Requirement] = field(default_factory=list)
    superfluous: Optional[DependencyTree] = None

    @property
    def ok(self) -> bool:
        return not self.unsatisfied and self.superfluous is None


def find_unsatisfied(modules: ModuleGraph, declared: Sequence[Requirement]) -> List[Requirement]:
    """Return the declared requirements that the lock graph does not satisfy."""
    unsatisfied = []
    for requirement in declared:
        module = modules.get(requirement.module)
        if module is None or not satisfies(module.version, requirement.version):
            unsatisfied.append(requirement)
    return unsatisfied


def find_superfluous(
    modules: ModuleGraph,
    declared: Sequence[Requirement],
    installed: AbstractSet[str],
) -> Optional[DependencyTree]:
    """Build a tree of installed modules unreachable from the declared requirements.

    Returns:
        DependencyTree rooted at the orphaned modules in name order, or None
        if every installed module is accounted for.
    """
    reachable = reachable_modules(modules, (req.module for req in declared))
    orphans = sorted(set(installed) - reachable)
    if not orphans:
        return None
    return build_tree(modules, roots=orphans)


def check_satisfies(
    modules: ModuleGraph,
    declared: Sequence[Requirement],
    installed: AbstractSet[str],
) -> CheckResult:
    """Check declared requirements against the lock graph and installed set.

    Args:
        modules: Lock graph keyed by module name
        declared: Direct requirements from the project manifest
        installed: Names of modules present in the installation prefix

    Returns:
        CheckResult: Neither input is modified.
    """
    return CheckResult(
        unsatisfied=find_unsatisfied(modules, declared),
        superfluous=find_superfluous(modules, declared, installed),
    )
