"""
Reporting and export utilities.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from pathlib import Path

import pandas as pd

from .graph import DependencyGraph
from .models import CrawlReport


logger = logging.getLogger(__name__)


def log_summary(report: CrawlReport) -> None:
    logger.info("=" * 60)
    logger.info("CRAWL RESULTS")
    logger.info("=" * 60)
    logger.info("Packages listed: %s", report.total)
    logger.info("With requirements: %s", report.succeeded)
    logger.info("Skipped (nothing to read): %s", report.skipped)
    logger.info("Failed: %s", report.failed)
    logger.info("Graph nodes: %s", len(report.graph))
    logger.info("=" * 60)


def save_snapshot(graph: DependencyGraph, path: Path) -> Path:
    return graph.dump(path)


def export_edges_csv(graph: DependencyGraph, path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df = pd.DataFrame(list(graph.edges()), columns=["package", "dependency"])
    df.to_csv(path, index=False)
    return path


def export_failures_csv(report: CrawlReport, path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df = pd.DataFrame(
        [asdict(failure) for failure in report.failures],
        columns=["package", "stage", "error"],
    )
    df.to_csv(path, index=False)
    return path
