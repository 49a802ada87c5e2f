#!/usr/bin/env python3
"""
Example script showing how to use the pypi-graph library.
"""

import logging
from pathlib import Path

from pypi_graph.crawler import crawl
from pypi_graph.graph import DependencyGraph
from pypi_graph.index import PackageIndex
from pypi_graph.repo_uri import RepoURIResolver
from pypi_graph.reporting import export_failures_csv, log_summary


def example_small_crawl():
    """Example: Crawl the first packages of the index into a snapshot."""
    print("="*60)
    print("Example 1: Small Crawl")
    print("="*60)

    index = PackageIndex()
    report = crawl(index, limit=25, progress=True)
    log_summary(report)

    output_dir = Path("./output/example1")
    report.graph.dump(output_dir / "pypi_graph.txt")
    export_failures_csv(report, output_dir / "failures.csv")
    print(f"\nGraph written with {len(report.graph)} packages")


def example_query_snapshot():
    """Example: Query a previously written snapshot."""
    print("\n" + "="*60)
    print("Example 2: Query a Snapshot")
    print("="*60)

    graph = DependencyGraph.load(Path("./output/example1/pypi_graph.txt"))
    for package in graph.packages()[:5]:
        print(f"{package}: requires {graph.requires(package)}, required by {graph.required_by(package)}")


def example_repo_uri():
    """Example: Resolve the source repository of a package."""
    print("\n" + "="*60)
    print("Example 3: Repository URI")
    print("="*60)

    resolver = RepoURIResolver()
    print(f"flask -> {resolver.resolve('flask')}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    example_small_crawl()
    example_query_snapshot()
    example_repo_uri()
