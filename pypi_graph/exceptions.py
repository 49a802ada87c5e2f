"""
Exception hierarchy for the crawler, the archive extractor and the graph.
"""

from __future__ import annotations


class PyPIGraphError(Exception):
    """Base class for every error raised by pypi_graph."""


class TransportError(PyPIGraphError):
    """The index or an archive could not be reached or read."""


class FormatError(PyPIGraphError):
    """A page, archive or snapshot does not have the expected shape."""


class IndexFormatError(FormatError):
    """An index listing page does not match the expected anchor format."""


class ArchiveFormatError(FormatError):
    """An archive could not be decompressed or unpacked."""


class SnapshotFormatError(FormatError):
    """A graph snapshot line could not be interpreted."""

    def __init__(self, line_number: int, line: str) -> None:
        self.line_number = line_number
        self.line = line
        super().__init__(f"Malformed snapshot line {line_number}: '{line}'")


class AbsentError(PyPIGraphError):
    """Something expected to exist for a package was not found."""


class NoMatchError(AbsentError):
    """No archive entry matched the requested pattern."""

    def __init__(self, uri: str, pattern: str) -> None:
        self.uri = uri
        self.pattern = pattern
        super().__init__(f"No file matched pattern {pattern} in {uri}")


class NoSourceArtifactError(AbsentError):
    """A package has no source distribution to open."""


class RequirementParseError(PyPIGraphError):
    """A requirement line does not follow the requirement grammar."""

    def __init__(self, line: str) -> None:
        self.line = line
        super().__init__(f"Unable to parse requirement from string: '{line}'")


class RepoURIError(PyPIGraphError):
    """A repository URI could not be derived for a package."""


class UnparseableHomepageError(RepoURIError):
    """The metadata declares a home page that is not a known repository host."""

    def __init__(self, homepage: str) -> None:
        self.homepage = homepage
        super().__init__(f"Could not parse repo URI from homepage: {homepage}")


class NoHomepageError(RepoURIError):
    """The metadata declares no home page at all."""

    def __init__(self, metadata: str) -> None:
        self.metadata = metadata
        super().__init__(f"No homepage found in metadata: {metadata}")


class GraphNotConfiguredError(PyPIGraphError):
    """No snapshot location is configured for the default graph."""
