"""Tests for the dependency graph and its snapshot format."""

from collections import Counter

import pytest

from pypi_graph import graph as graph_module
from pypi_graph.exceptions import GraphNotConfiguredError, SnapshotFormatError
from pypi_graph.graph import DependencyGraph
from pypi_graph.models import Requirement


def test_add_edge_keeps_both_directions_with_multiplicity():
    graph = DependencyGraph()
    edges = [("alpha", "beta"), ("alpha", "beta"), ("gamma", "beta"), ("alpha", "delta")]
    for package, dependency in edges:
        graph.add_edge(package, dependency)

    for package in graph.packages():
        for dependency in set(graph.requires(package)):
            assert graph.requires(package).count(dependency) == graph.required_by(dependency).count(package)

    assert graph.requires("alpha") == ["beta", "beta", "delta"]
    assert graph.required_by("beta") == ["alpha", "alpha", "gamma"]
    assert graph.requires("beta") == []
    assert graph.required_by("alpha") == []


def test_lookups_normalize_names():
    graph = DependencyGraph()
    graph.add_edge("Flask-Login", "Flask")

    assert graph.requires("flask_login") == ["flask"]
    assert graph.required_by("FLASK") == ["flask-login"]
    assert "flask.login" in graph


def test_unknown_and_dependency_free_packages():
    graph = DependencyGraph()
    graph.add_known_package("lonely")

    assert graph.requires("lonely") == []
    assert graph.requires("missing") == []
    assert graph.is_known("lonely")
    assert not graph.is_known("missing")


def test_query_results_are_copies():
    graph = DependencyGraph()
    graph.add_edge("alpha", "beta")

    graph.requires("alpha").append("mutated")

    assert graph.requires("alpha") == ["beta"]


def test_add_requirements_uses_names_only():
    graph = DependencyGraph()
    graph.add_requirements("alpha", [
        Requirement("beta", extra="fast", op=">=", version="1.0"),
        Requirement("gamma"),
    ])
    graph.add_requirements("empty", [])

    assert graph.requires("alpha") == ["beta", "gamma"]
    assert graph.is_known("empty")


def test_dumps_writes_edges_and_isolated_packages():
    graph = DependencyGraph()
    graph.add_requirements("alpha", [Requirement("beta"), Requirement("gamma")])
    graph.add_known_package("delta")

    assert graph.dumps() == "alpha:beta\nalpha:gamma\nbeta\ngamma\ndelta\n"


def test_snapshot_round_trip_preserves_edges():
    snapshot = "alpha:beta\nalpha:beta\nbeta:gamma\ndelta\nepsilon:beta\n"

    graph = DependencyGraph.loads(snapshot)
    reloaded = DependencyGraph.loads(graph.dumps())

    expected = Counter(tuple(line.split(":")) for line in snapshot.splitlines() if ":" in line)
    assert Counter(graph.edges()) == expected
    assert Counter(reloaded.edges()) == expected
    assert set(reloaded.packages()) == {"alpha", "beta", "gamma", "delta", "epsilon"}
    assert reloaded.required_by("beta") == ["alpha", "alpha", "epsilon"]


def test_loads_skips_malformed_lines_by_default():
    graph = DependencyGraph.loads("alpha:beta\nbad:line:here\n\ngamma\n")

    assert graph.requires("alpha") == ["beta"]
    assert "bad" not in graph
    assert "gamma" in graph


def test_loads_strict_rejects_malformed_lines():
    with pytest.raises(SnapshotFormatError) as excinfo:
        DependencyGraph.loads("alpha:beta\nbad:line:here\n", strict=True)

    assert excinfo.value.line_number == 2


def test_dump_and_load_file(tmp_path):
    graph = DependencyGraph()
    graph.add_edge("alpha", "beta")
    path = graph.dump(tmp_path / "data" / "pypi_graph")

    assert DependencyGraph.load(path).requires("alpha") == ["beta"]


def test_default_graph_is_loaded_lazily(tmp_path, monkeypatch):
    path = tmp_path / "pypi_graph"
    path.write_text("alpha:beta\n", encoding="utf-8")
    monkeypatch.setattr(graph_module, "_DEFAULT_GRAPH", None)
    monkeypatch.setenv(graph_module.GRAPH_PATH_ENV, str(path))

    assert graph_module.requires("Alpha") == ["beta"]
    assert graph_module.required_by("beta") == ["alpha"]


def test_default_graph_without_location(monkeypatch):
    monkeypatch.setattr(graph_module, "_DEFAULT_GRAPH", None)
    monkeypatch.delenv(graph_module.GRAPH_PATH_ENV, raising=False)

    with pytest.raises(GraphNotConfiguredError):
        graph_module.default_graph()


def test_loads_keeps_custom_key_function(tmp_path):
    graph = DependencyGraph(key=str.lower)
    graph.add_edge("Flask_Login", "Flask")

    reloaded = DependencyGraph.loads(graph.dumps(), key=str.lower)
    from_file = DependencyGraph.load(graph.dump(tmp_path / "graph"), key=str.lower)

    assert reloaded.key is str.lower
    assert from_file.key is str.lower
    assert reloaded.requires("FLASK_LOGIN") == ["flask"]
    assert "flask-login" not in reloaded
