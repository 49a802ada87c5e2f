"""
Package-name normalization shared by the index, the graph and the resolver.
"""

from __future__ import annotations

from packaging.utils import canonicalize_name


def normalize_name(name: str) -> str:
    """Return the canonical (PEP 503) form of a package name."""
    return str(canonicalize_name(name.strip()))
