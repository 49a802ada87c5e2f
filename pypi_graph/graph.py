"""
Dependency graph of an index, with its flat snapshot encoding.

Snapshot lines are either ``PACKAGE:DEPENDENCY`` (an edge) or ``PACKAGE``
(a known package declaring no dependencies).
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Tuple, Union

from .exceptions import GraphNotConfiguredError, SnapshotFormatError
from .models import Requirement
from .names import normalize_name


logger = logging.getLogger(__name__)

GRAPH_PATH_ENV = "PYPI_GRAPH_DATA"
SEPARATOR = ":"


class DependencyGraph:
    """Symmetric package -> dependencies and dependency -> dependents index."""

    def __init__(self, key: Callable[[str], str] = normalize_name) -> None:
        self.key = key
        self._requires: Dict[str, List[str]] = {}
        self._required_by: Dict[str, List[str]] = {}

    def add_known_package(self, package: str) -> str:
        """Make ``package`` queryable even if it declares no dependencies."""
        name = self.key(package)
        self._requires.setdefault(name, [])
        self._required_by.setdefault(name, [])
        return name

    def add_edge(self, package: str, dependency: str) -> None:
        pkg = self.add_known_package(package)
        dep = self.add_known_package(dependency)
        self._requires[pkg].append(dep)
        self._required_by[dep].append(pkg)

    def add_requirements(self, package: str, requirements: Iterable[Requirement]) -> None:
        """Record ``package`` and one edge per requirement, in declared order."""
        self.add_known_package(package)
        for requirement in requirements:
            self.add_edge(package, requirement.name)

    def requires(self, package: str) -> List[str]:
        return list(self._requires.get(self.key(package), ()))

    def required_by(self, package: str) -> List[str]:
        return list(self._required_by.get(self.key(package), ()))

    def is_known(self, package: str) -> bool:
        """Tell an unknown package apart from one with no dependencies."""
        return self.key(package) in self._requires

    __contains__ = is_known

    def __len__(self) -> int:
        return len(self._requires)

    def packages(self) -> List[str]:
        return list(self._requires)

    def edges(self) -> Iterator[Tuple[str, str]]:
        for package, dependencies in self._requires.items():
            for dependency in dependencies:
                yield package, dependency

    def dumps(self) -> str:
        lines = []
        for package, dependencies in self._requires.items():
            if not dependencies:
                lines.append(package)
            for dependency in dependencies:
                lines.append(f"{package}{SEPARATOR}{dependency}")
        return "".join(f"{line}\n" for line in lines)

    def dump(self, path: Union[str, Path]) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.dumps(), encoding="utf-8")
        logger.info("Wrote %d packages to %s", len(self), path)
        return path

    @classmethod
    def loads(
        cls, text: str, strict: bool = False, key: Callable[[str], str] = normalize_name
    ) -> "DependencyGraph":
        """Build a graph from snapshot text.

        Lines with more than one separator are skipped with a warning, or
        rejected with ``SnapshotFormatError`` when ``strict`` is set.
        """
        graph = cls(key=key)
        for line_number, line in enumerate(text.splitlines(), start=1):
            if not line:
                continue
            fields = line.split(SEPARATOR)
            if len(fields) == 1:
                graph.add_known_package(line)
            elif len(fields) == 2 and all(fields):
                graph.add_edge(fields[0], fields[1])
            elif strict:
                raise SnapshotFormatError(line_number, line)
            else:
                logger.warning("Skipping malformed snapshot line %d: '%s'", line_number, line)
        return graph

    @classmethod
    def load(
        cls, path: Union[str, Path], strict: bool = False, key: Callable[[str], str] = normalize_name
    ) -> "DependencyGraph":
        path = Path(path)
        graph = cls.loads(path.read_text(encoding="utf-8"), strict=strict, key=key)
        logger.debug("Loaded %d packages from %s", len(graph), path)
        return graph


_DEFAULT_GRAPH: Optional[DependencyGraph] = None


def default_graph() -> DependencyGraph:
    """Return the shared graph loaded from ``$PYPI_GRAPH_DATA`` on first use."""
    global _DEFAULT_GRAPH
    if _DEFAULT_GRAPH is None:
        location = os.environ.get(GRAPH_PATH_ENV)
        if not location:
            raise GraphNotConfiguredError(
                f"Set {GRAPH_PATH_ENV} to the location of a graph snapshot"
            )
        _DEFAULT_GRAPH = DependencyGraph.load(location)
    return _DEFAULT_GRAPH


def requires(package: str) -> List[str]:
    return default_graph().requires(package)


def required_by(package: str) -> List[str]:
    return default_graph().required_by(package)
