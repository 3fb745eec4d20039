"""Dependency tree construction and traversal for the lock graph.

The lock graph is a flat mapping of module name to ``LockedModule``. A tree is
built from it by following ``requires`` edges from a set of root modules.
Edges may point at modules missing from the graph (a hand-edited or partial
lock) and may form cycles; neither is an error. Missing targets become
placeholder leaves and re-entries into a module already on the current path
become cycle leaves.
"""

from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Mapping, Optional, Sequence, Set, Tuple, Union

from .lockfile import LockedModule

ModuleGraph = Mapping[str, LockedModule]


@dataclass
class DependencyNode:
    """A node in a dependency tree.

    The synthetic root of a tree has no module; every other node carries
    either the locked module or, for placeholders, a name-only record.
    """

    module: Optional[LockedModule] = None
    children: List["DependencyNode"] = field(default_factory=list)
    is_placeholder: bool = False
    is_cycle: bool = False

    @property
    def is_synthetic(self) -> bool:
        return self.module is None

    @property
    def name(self) -> Optional[str]:
        return self.module.name if self.module else None

    def child_names(self) -> List[str]:
        return [child.name for child in self.children]


@dataclass
class DependencyTree:
    """A dependency forest hanging off a synthetic root node."""

    root: DependencyNode = field(default_factory=DependencyNode)

    @property
    def children(self) -> List[DependencyNode]:
        return self.root.children

    def top_level_names(self) -> List[str]:
        return self.root.child_names()

    def is_empty(self) -> bool:
        return not self.root.children


def reachable_modules(modules: ModuleGraph, names: Iterable[str]) -> Set[str]:
    """Return every name reachable from ``names`` through ``requires`` edges.

    The starting names are included even when they are absent from the graph.
    Names already seen are not expanded again, so cycles terminate.
    """
    seen: Set[str] = set()
    stack = list(names)
    while stack:
        name = stack.pop()
        if name in seen:
            continue
        seen.add(name)
        module = modules.get(name)
        if module is not None:
            stack.extend(dep for dep in module.requires if dep not in seen)
    return seen


def find_top_level_modules(modules: ModuleGraph) -> List[str]:
    """Return the roots of the dependency forest in graph order.

    A module is top-level when no other module requires it. Modules that are
    not reachable from any top-level module (for example a graph that is a
    single cycle) are promoted to roots one at a time, so every module in the
    graph is reachable from the result.
    """
    required: Set[str] = set()
    for name, module in modules.items():
        required.update(dep for dep in module.requires if dep != name)

    roots = [name for name in modules if name not in required]
    reached = reachable_modules(modules, roots)
    for name in modules:
        if name not in reached:
            roots.append(name)
            reached |= reachable_modules(modules, [name])
    return roots


def _make_node(modules: ModuleGraph, name: str) -> DependencyNode:
    module = modules.get(name)
    if module is None:
        return DependencyNode(module=LockedModule(name=name), is_placeholder=True)
    return DependencyNode(module=module)


def build_tree(modules: ModuleGraph, roots: Optional[Sequence[str]] = None) -> DependencyTree:
    """Build a dependency tree from a flat module mapping.

    Args:
        modules: Lock graph keyed by module name
        roots: Modules to hang directly under the root. Defaults to the
            top-level modules of the graph.

    Returns:
        DependencyTree: Children of each node follow the order of the
        module's ``requires`` entries.
    """
    if roots is None:
        roots = find_top_level_modules(modules)

    tree = DependencyTree()
    stack: List[Tuple[DependencyNode, frozenset]] = []
    for name in roots:
        node = _make_node(modules, name)
        tree.root.children.append(node)
        if not node.is_placeholder:
            stack.append((node, frozenset((name,))))

    while stack:
        node, path = stack.pop()
        for dep in node.module.requires:
            if dep in path:
                child = DependencyNode(module=modules[dep], is_cycle=True)
                node.children.append(child)
                continue
            child = _make_node(modules, dep)
            node.children.append(child)
            if not child.is_placeholder:
                stack.append((child, path | {dep}))

    return tree


Visitor = Callable[[LockedModule, int], None]


def walk_tree(
    tree: Union[DependencyTree, DependencyNode],
    visitor: Visitor,
    skip_root: bool = False,
) -> None:
    """Visit every node of a tree in pre-order with its depth.

    The synthetic root of a ``DependencyTree`` is never visited and its
    children are at depth 0. When walking from a real module node, that node
    is visited at depth 0 unless ``skip_root`` is set, in which case its
    children start at depth 0.
    """
    start = tree.root if isinstance(tree, DependencyTree) else tree

    stack: List[Tuple[DependencyNode, int]] = []
    if start.is_synthetic or skip_root:
        stack.extend((child, 0) for child in reversed(start.children))
    else:
        stack.append((start, 0))

    while stack:
        node, depth = stack.pop()
        visitor(node.module, depth)
        stack.extend((child, depth + 1) for child in reversed(node.children))


def tree_lines(
    tree: Union[DependencyTree, DependencyNode],
    skip_root: bool = False,
) -> List[Tuple[int, str]]:
    """Return ``(depth, distribution)`` pairs for display, in walk order."""
    lines: List[Tuple[int, str]] = []
    walk_tree(tree, lambda module, depth: lines.append((depth, module.display_name)), skip_root)
    return lines


def render_tree(
    tree: Union[DependencyTree, DependencyNode],
    indent: str = "  ",
    skip_root: bool = False,
) -> str:
    """Render a tree as indented text, one module per line."""
    return "".join(
        f"{indent * depth}{display}\n" for depth, display in tree_lines(tree, skip_root)
    )
