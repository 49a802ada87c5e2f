"""
Command-line interface for the dependency graph crawler.
"""

import argparse
import logging
import os
import sys
from pathlib import Path

from .crawler import crawl
from .exceptions import PyPIGraphError
from .graph import GRAPH_PATH_ENV, DependencyGraph
from .index import DEFAULT_INDEX_URL, PackageIndex
from .repo_uri import RepoURIResolver
from .reporting import export_edges_csv, export_failures_csv, log_summary, save_snapshot


logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pypi-graph",
        description="Build and query the dependency graph of a package index"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log debug output"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    crawl_parser = subparsers.add_parser("crawl", help="Crawl the index into a graph snapshot")
    _add_index_arguments(crawl_parser)
    crawl_parser.add_argument(
        "--output",
        default="pypi_graph.txt",
        help="Snapshot file to write. Default: pypi_graph.txt"
    )
    crawl_parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Only crawl the first N packages"
    )
    crawl_parser.add_argument(
        "--edges-csv",
        default=None,
        help="Also export the edges as CSV"
    )
    crawl_parser.add_argument(
        "--failures-csv",
        default=None,
        help="Also export the failed packages as CSV"
    )
    crawl_parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Disable the progress bar"
    )

    for name, help_text in (
        ("requires", "List the dependencies of a package"),
        ("required-by", "List the packages depending on a package"),
    ):
        query_parser = subparsers.add_parser(name, help=help_text)
        query_parser.add_argument("package")
        query_parser.add_argument(
            "--graph",
            default=os.environ.get(GRAPH_PATH_ENV),
            help=f"Graph snapshot to query. Default: ${GRAPH_PATH_ENV}"
        )
        query_parser.add_argument(
            "--strict",
            action="store_true",
            help="Reject malformed snapshot lines instead of skipping them"
        )

    repo_parser = subparsers.add_parser("repo", help="Resolve the source repository of a package")
    _add_index_arguments(repo_parser)
    repo_parser.add_argument("package")

    return parser


def _add_index_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--index-url",
        default=DEFAULT_INDEX_URL,
        help=f"Package index to crawl. Default: {DEFAULT_INDEX_URL}"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=60.0,
        help="Read timeout in seconds for every request. Default: 60"
    )


def _index_from_args(args) -> PackageIndex:
    return PackageIndex(args.index_url, timeout=(10, args.timeout))


def _run_crawl(args) -> int:
    index = _index_from_args(args)
    try:
        report = crawl(index, limit=args.limit, progress=not args.no_progress)
    except PyPIGraphError as e:
        print(f"[FATAL] {e}", file=sys.stderr)
        return 1

    log_summary(report)
    snapshot = save_snapshot(report.graph, Path(args.output))
    print(f"Graph saved to: {snapshot}")
    if args.edges_csv:
        print(f"Edges saved to: {export_edges_csv(report.graph, Path(args.edges_csv))}")
    if args.failures_csv:
        print(f"Failures saved to: {export_failures_csv(report, Path(args.failures_csv))}")
    return 0


def _run_query(args) -> int:
    if not args.graph:
        print(f"Error: pass --graph or set {GRAPH_PATH_ENV}", file=sys.stderr)
        return 1
    try:
        graph = DependencyGraph.load(args.graph, strict=args.strict)
    except (OSError, PyPIGraphError) as e:
        print(f"Error: unable to load graph: {e}", file=sys.stderr)
        return 1

    if args.package not in graph:
        logger.warning("%s is not in the graph", args.package)
    names = graph.requires(args.package) if args.command == "requires" else graph.required_by(args.package)
    for name in names:
        print(name)
    return 0


def _run_repo(args) -> int:
    resolver = RepoURIResolver(_index_from_args(args))
    try:
        print(resolver.resolve(args.package))
    except PyPIGraphError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


def main(argv=None):
    """Main entry point for the CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.command == "crawl":
        return _run_crawl(args)
    if args.command == "repo":
        return _run_repo(args)
    return _run_query(args)


if __name__ == "__main__":
    sys.exit(main())
