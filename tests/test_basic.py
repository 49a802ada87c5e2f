"""Tests for the pypi_graph package."""

import pytest


def test_package_import():
    """Test that the package can be imported."""
    import pypi_graph
    assert pypi_graph.__version__ == "0.1.0"


def test_cli_import():
    """Test that CLI module can be imported."""
    from pypi_graph.cli import main
    assert callable(main)


def test_cli_queries_snapshot(tmp_path, capsys):
    """Test the requires and required-by commands."""
    from pypi_graph.cli import main

    snapshot = tmp_path / "pypi_graph"
    snapshot.write_text("alpha:beta\nalpha:gamma\nbeta\ngamma\n", encoding="utf-8")

    assert main(["requires", "Alpha", "--graph", str(snapshot)]) == 0
    assert capsys.readouterr().out.split() == ["beta", "gamma"]

    assert main(["required-by", "gamma", "--graph", str(snapshot)]) == 0
    assert capsys.readouterr().out.split() == ["alpha"]


def test_cli_strict_query_rejects_bad_snapshot(tmp_path, capsys):
    """Test that --strict turns malformed snapshot lines into an error."""
    from pypi_graph.cli import main

    snapshot = tmp_path / "pypi_graph"
    snapshot.write_text("a:b:c\n", encoding="utf-8")

    assert main(["requires", "a", "--graph", str(snapshot), "--strict"]) == 1
    assert "Malformed snapshot line 1" in capsys.readouterr().err


def test_cli_crawl_fatal_listing_error(tmp_path, monkeypatch, capsys):
    """Test that a listing failure ends the crawl with status 1."""
    from pypi_graph import cli
    from pypi_graph.exceptions import TransportError

    def fake_crawl(index, limit=None, progress=True):
        raise TransportError("Unable to fetch https://index.example/simple")

    monkeypatch.setattr(cli, "crawl", fake_crawl)

    status = cli.main(["crawl", "--output", str(tmp_path / "graph.txt"), "--no-progress"])

    assert status == 1
    assert "[FATAL]" in capsys.readouterr().err
    assert not (tmp_path / "graph.txt").exists()


def test_cli_crawl_writes_snapshot(tmp_path, monkeypatch, capsys):
    """Test that a successful crawl exits 0 and writes the snapshot and CSVs."""
    from pypi_graph import cli
    from pypi_graph.graph import DependencyGraph
    from pypi_graph.models import CrawlReport

    captured = {}

    def fake_crawl(index, limit=None, progress=True):
        captured["index"] = index
        captured["limit"] = limit
        graph = DependencyGraph()
        graph.add_edge("alpha", "beta")
        return CrawlReport(graph=graph, total=2, succeeded=1, skipped=1)

    monkeypatch.setattr(cli, "crawl", fake_crawl)
    output = tmp_path / "graph.txt"

    status = cli.main([
        "crawl",
        "--index-url", "https://index.example",
        "--limit", "2",
        "--output", str(output),
        "--edges-csv", str(tmp_path / "edges.csv"),
        "--failures-csv", str(tmp_path / "failures.csv"),
        "--no-progress",
    ])

    assert status == 0
    assert output.read_text() == "alpha:beta\nbeta\n"
    assert (tmp_path / "edges.csv").exists()
    assert (tmp_path / "failures.csv").exists()
    assert captured["index"].uri == "https://index.example"
    assert captured["limit"] == 2
    assert "Graph saved to" in capsys.readouterr().out


class FakeResolver:
    def __init__(self, index=None):
        self.index = index

    def resolve(self, package):
        from pypi_graph.exceptions import UnparseableHomepageError

        if package == "proj":
            return "https://github.com/org/proj"
        raise UnparseableHomepageError("https://example.com/x")


def test_cli_repo_prints_uri(monkeypatch, capsys):
    """Test that the repo command prints the resolved URI."""
    from pypi_graph import cli

    monkeypatch.setattr(cli, "RepoURIResolver", FakeResolver)

    assert cli.main(["repo", "proj"]) == 0
    assert capsys.readouterr().out.strip() == "https://github.com/org/proj"


def test_cli_repo_failure_exits_1(monkeypatch, capsys):
    """Test that an unresolved repository exits 1 with the error on stderr."""
    from pypi_graph import cli

    monkeypatch.setattr(cli, "RepoURIResolver", FakeResolver)

    assert cli.main(["repo", "unknown"]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "https://example.com/x" in captured.err


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
