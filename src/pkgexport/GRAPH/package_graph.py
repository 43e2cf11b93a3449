"""
Dependency graph of installed packages, used to order image layers.
"""
from typing import List, Dict, Iterable, Optional
from ..MODELS.package_ident import PackageIdent
from ..errors import DependencyCycleError

class PackageGraph:
    """
    Records installed packages and their direct dependencies.
    """
    def __init__(self):
        self._deps: Dict[PackageIdent, List[PackageIdent]] = {}

    def add(self, ident: PackageIdent, deps: Optional[Iterable[PackageIdent]] = None):
        """
        Registers a package and its direct dependencies.

        Dependencies that are never registered themselves are still part of
        the graph and appear in the sort output.

        :param ident: The package being added.
        :param deps: Its direct dependencies.
        """
        edges = self._deps.setdefault(ident, [])
        for dep in deps or []:
            if dep not in edges:
                edges.append(dep)
            self._deps.setdefault(dep, [])

    def __len__(self) -> int:
        return len(self._deps)

    def __contains__(self, ident: PackageIdent) -> bool:
        return ident in self._deps

    def reverse_topological_sort(self) -> List[PackageIdent]:
        """
        Lists every package with its dependencies ahead of it.

        :return: Packages ordered dependencies-first.
        :raises DependencyCycleError: If a circular dependency is detected.
        """
        ordered = []
        visited = set()
        processing = set()

        def visit(ident):
            if ident in processing:
                raise DependencyCycleError(f"Circular dependency detected involving {ident}")
            if ident not in visited:
                processing.add(ident)
                for dep in self._deps.get(ident, []):
                    visit(dep)
                processing.remove(ident)
                visited.add(ident)
                ordered.append(ident)

        for ident in self._deps:
            visit(ident)

        return ordered
