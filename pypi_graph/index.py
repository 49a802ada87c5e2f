"""
Client for the "simple" HTML interface of a package index.
"""

from __future__ import annotations

import logging
import posixpath
import re
from typing import List, Optional, Sequence, Tuple

import requests

from .archive import DEFAULT_TIMEOUT, Pattern, extract
from .exceptions import IndexFormatError, NoMatchError, NoSourceArtifactError, TransportError
from .interfaces import ArchiveExtractor, Session
from .models import TAR_GZ, ZIP, PackageRequirements
from .requirements import parse_requirements


logger = logging.getLogger(__name__)

DEFAULT_INDEX_URL = "https://pypi.python.org"
REQUIRES_PATTERN = "**/*.egg-info/requires.txt"

PACKAGE_ANCHOR_RE = re.compile(
    r"<a href=(['\"])([A-Za-z0-9._-]+)\1>([A-Za-z0-9._-]+)</a><br/>"
)
FILE_ANCHOR_RE = re.compile(
    r"<a href=\"([/A-Za-z0-9._-]+)#md5=[0-9a-fA-F]+\"[^>]*>([A-Za-z0-9._-]+)</a><br/>"
)
TARBALL_RE = re.compile(r"\.tar\.gz$")
ZIPBALL_RE = re.compile(r"\.zip$")


def _last_matching(files: Sequence[str], pattern: "re.Pattern[str]") -> Optional[str]:
    for path in reversed(files):
        if pattern.search(path):
            return path
    return None


def select_source_artifact(files: Sequence[str]) -> Optional[str]:
    """Return the most recent ``.tar.gz`` path; listings are in upload order."""
    return _last_matching(files, TARBALL_RE)


def select_archive(files: Sequence[str]) -> Optional[Tuple[str, str]]:
    """Return ``(path, kind)`` of the latest source archive of either kind.

    Tarballs are preferred; old releases that only shipped a zip source
    distribution fall back to it.
    """
    path = select_source_artifact(files)
    if path is not None:
        return path, TAR_GZ
    path = _last_matching(files, ZIPBALL_RE)
    if path is not None:
        return path, ZIP
    return None


class PackageIndex:
    """List packages and read source distributions from a package index."""

    def __init__(
        self,
        uri: str = DEFAULT_INDEX_URL,
        session: Optional[Session] = None,
        timeout=DEFAULT_TIMEOUT,
        extractor: ArchiveExtractor = extract,
    ) -> None:
        self.uri = uri.rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout
        self.extractor = extractor

    select_source_artifact = staticmethod(select_source_artifact)

    def list_packages(self) -> List[str]:
        """Return every package name listed on the index root page."""
        body = self._get_text(f"{self.uri}/simple")
        packages = []
        for _, href, text in PACKAGE_ANCHOR_RE.findall(body):
            if href != text:
                raise IndexFormatError(f"Names do not match {href} != {text}")
            packages.append(href)
        if not packages and body.strip():
            raise IndexFormatError(f"No package anchors found on {self.uri}/simple")
        logger.info("Found %d packages on %s", len(packages), self.uri)
        return packages

    def list_files(self, package: str) -> List[str]:
        """Return the file paths listed for ``package``, in page order."""
        listing_path = f"/simple/{package}"
        body = self._get_text(f"{self.uri}{listing_path}")
        return [
            posixpath.normpath(posixpath.join(listing_path, href))
            for href, _ in FILE_ANCHOR_RE.findall(body)
        ]

    def fetch_requirements(self, package: str) -> PackageRequirements:
        """Read and parse the requirements declared by the latest tarball.

        A package without files, without a tarball or without a requirements
        file yields an absent result. Parse errors and transport errors are
        raised for the caller to decide on.
        """
        files = self.list_files(package)
        if not files:
            return PackageRequirements(package, missing="no-files")

        path = select_source_artifact(files)
        if path is None:
            logger.debug("No tarball in %s for %s", files, package)
            return PackageRequirements(package, missing="no-sdist")

        uri = f"{self.uri}{path}"
        try:
            raw = self.extractor(uri, REQUIRES_PATTERN, TAR_GZ, session=self.session, timeout=self.timeout)
        except NoMatchError:
            return PackageRequirements(package, source=uri, missing="no-requires")

        requirements = parse_requirements(raw.decode("utf-8", errors="replace"))
        return PackageRequirements(package, requirements=requirements, source=uri)

    def fetch_raw_metadata(self, package: str, pattern: Pattern) -> bytes:
        """Extract ``pattern`` from the latest source archive of ``package``."""
        files = self.list_files(package)
        selected = select_archive(files)
        if selected is None:
            raise NoSourceArtifactError(f"No source archive found in {files} for pkg {package}")
        path, kind = selected
        return self.extractor(f"{self.uri}{path}", pattern, kind, session=self.session, timeout=self.timeout)

    def _get_text(self, url: str) -> str:
        logger.debug("Fetching %s", url)
        try:
            with self.session.get(url, timeout=self.timeout) as response:
                response.raise_for_status()
                return response.text
        except requests.RequestException as exc:
            raise TransportError(f"Unable to fetch {url}: {exc}") from exc
