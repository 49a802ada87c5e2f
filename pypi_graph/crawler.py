"""
Crawl every package of an index into a dependency graph.
"""

from __future__ import annotations

import logging
from typing import Optional

from tqdm import tqdm

from .exceptions import ArchiveFormatError, RequirementParseError, TransportError
from .graph import DependencyGraph
from .index import PackageIndex
from .models import CrawlReport, PackageFailure


logger = logging.getLogger(__name__)

_MISSING_MESSAGES = {
    "no-files": "[no-files] no files found for pkg %s",
    "no-sdist": "[tarball] no tar found for pkg %s",
    "no-requires": "[requires.txt] no requires.txt found for pkg %s",
}


def crawl(
    index: PackageIndex,
    graph: Optional[DependencyGraph] = None,
    limit: Optional[int] = None,
    progress: bool = False,
) -> CrawlReport:
    """Fetch the requirements of every listed package into ``graph``.

    Errors while listing the index propagate and end the run. Errors for a
    single package are logged and recorded in the report; such a package is
    left out of the graph entirely.
    """
    if graph is None:
        graph = DependencyGraph()

    packages = index.list_packages()
    if limit is not None:
        packages = packages[:limit]

    report = CrawlReport(graph=graph, total=len(packages))
    for package in tqdm(packages, desc="Crawling packages", unit="pkg", disable=not progress):
        try:
            result = index.fetch_requirements(package)
        except TransportError as e:
            _record_failure(report, package, "transport", e)
            continue
        except ArchiveFormatError as e:
            _record_failure(report, package, "archive", e)
            continue
        except RequirementParseError as e:
            _record_failure(report, package, "requirements", e)
            continue

        if result.absent:
            logger.info(_MISSING_MESSAGES[result.missing], package)
            graph.add_known_package(package)
            report.skipped += 1
            continue

        graph.add_requirements(package, result.requirements)
        report.succeeded += 1
        logger.debug("%s requires %s", package, [str(r) for r in result.requirements])

    logger.info(
        "Crawled %d packages: %d with requirements, %d skipped, %d failed",
        report.total, report.succeeded, report.skipped, report.failed,
    )
    return report


def _record_failure(report: CrawlReport, package: str, stage: str, error: Exception) -> None:
    logger.warning("[ERROR] unable to parse pkg %s due to error: %s", package, error)
    report.failures.append(PackageFailure(package=package, stage=stage, error=str(error)))
