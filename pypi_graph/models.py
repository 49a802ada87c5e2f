"""
Core data models for the dependency graph crawler.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from .graph import DependencyGraph


TAR_GZ = "tar.gz"
ZIP = "zip"

CONSTRAINT_OPERATORS = ("==", ">=", ">")


@dataclass(frozen=True)
class Requirement:
    """A single declared dependency of a package."""

    name: str
    extra: Optional[str] = None
    op: Optional[str] = None
    version: Optional[str] = None

    def __post_init__(self) -> None:
        if (self.op is None) != (self.version is None):
            raise ValueError(
                f"Constraint operator and version must be given together: {self.op!r} {self.version!r}"
            )
        if self.op is not None and self.op not in CONSTRAINT_OPERATORS:
            raise ValueError(f"Unsupported constraint operator: {self.op}")

    def __str__(self) -> str:
        text = self.name
        if self.extra is not None:
            text += f"[{self.extra}]"
        if self.op is not None:
            text += f"{self.op}{self.version}"
        return text


@dataclass(frozen=True)
class PackageRequirements:
    """Requirements fetched for one package.

    ``missing`` names the cause when the package legitimately has nothing
    to read (``no-files``, ``no-sdist`` or ``no-requires``).
    """

    package: str
    requirements: List[Requirement] = field(default_factory=list)
    source: Optional[str] = None
    missing: Optional[str] = None

    @property
    def absent(self) -> bool:
        return self.missing is not None


@dataclass(frozen=True)
class PackageFailure:
    """A package excluded from the graph because its extraction failed."""

    package: str
    stage: str
    error: str


@dataclass
class CrawlReport:
    """Outcome of one crawl run."""

    graph: "DependencyGraph"
    total: int = 0
    succeeded: int = 0
    skipped: int = 0
    failures: List[PackageFailure] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failures)
