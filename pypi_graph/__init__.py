"""
PyPI Dependency Graph

Crawl a package index into a dependency graph and resolve the source
repositories of its packages.
"""

__version__ = "0.1.0"

from .graph import DependencyGraph
from .index import PackageIndex
from .repo_uri import RepoURIResolver

__all__ = ["DependencyGraph", "PackageIndex", "RepoURIResolver"]
