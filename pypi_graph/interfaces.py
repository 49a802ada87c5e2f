"""
Interfaces for the HTTP session and the archive extractor.
"""

from __future__ import annotations

import re
from typing import Any, Iterator, Optional, Protocol, Union


class Response(Protocol):
    """The subset of ``requests.Response`` the crawler relies on."""

    content: bytes
    text: str

    def raise_for_status(self) -> None:
        ...

    def iter_content(self, chunk_size: int = 1) -> Iterator[bytes]:
        ...

    def close(self) -> None:
        ...

    def __enter__(self) -> "Response":
        ...

    def __exit__(self, *exc_info: Any) -> Optional[bool]:
        ...


class Session(Protocol):
    """An HTTP session able to issue GET requests."""

    def get(self, url: str, **kwargs: Any) -> Response:
        ...


class ArchiveExtractor(Protocol):
    """Pull the bytes of matching entries out of a remote archive."""

    def __call__(
        self,
        uri: str,
        pattern: Union[str, "re.Pattern[str]"],
        kind: str,
        session: Optional[Session] = None,
        timeout: Any = None,
    ) -> bytes:
        ...
