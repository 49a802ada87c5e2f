"""
Pull named files out of remote source archives.

tar.gz archives are streamed: a copy thread moves the HTTP body into a
bounded pipe while ``tarfile`` reads members from the other end, so only the
matched entries are ever held in memory. zip archives keep their index at the
end of the file and are buffered whole before they are opened.
"""

from __future__ import annotations

import io
import logging
import queue
import re
import tarfile
import threading
import zipfile
import zlib
from typing import Any, Optional, Tuple, Union

import requests

from .exceptions import ArchiveFormatError, NoMatchError, TransportError
from .interfaces import Response, Session
from .models import TAR_GZ, ZIP


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = (10, 60)
PIPE_CHUNK_SIZE = 64 * 1024
PIPE_MAX_CHUNKS = 16

_EOF = object()
_POLL_INTERVAL = 0.1

Pattern = Union[str, "re.Pattern[str]"]


def compile_pattern(pattern: Pattern) -> "re.Pattern[str]":
    """Compile a tar-style glob into a regex matching whole archive paths.

    ``**/`` matches any number of leading directories (including none),
    ``*`` and ``?`` never cross a ``/``. Compiled regexes are returned as is
    and are matched from the start of the path.
    """
    if isinstance(pattern, re.Pattern):
        return pattern

    parts = []
    i = 0
    while i < len(pattern):
        if pattern.startswith("**/", i):
            parts.append("(?:.*/)?")
            i += 3
        elif pattern.startswith("**", i):
            parts.append(".*")
            i += 2
        elif pattern[i] == "*":
            parts.append("[^/]*")
            i += 1
        elif pattern[i] == "?":
            parts.append("[^/]")
            i += 1
        else:
            parts.append(re.escape(pattern[i]))
            i += 1
    return re.compile("".join(parts) + r"\Z")


def extract(
    uri: str,
    pattern: Pattern,
    kind: str,
    session: Optional[Session] = None,
    timeout: Any = DEFAULT_TIMEOUT,
) -> bytes:
    """Return the concatenated contents of every entry matching ``pattern``.

    Args:
        uri: Absolute URI of the archive
        pattern: Glob or compiled regex tested against each entry path
        kind: ``"tar.gz"`` or ``"zip"``
        session: HTTP session to use, ``requests`` itself when omitted
        timeout: ``requests`` timeout, also bounds waits on the stream

    Raises:
        NoMatchError: the archive was read completely but nothing matched
        TransportError: the archive could not be downloaded
        ArchiveFormatError: the archive could not be decompressed or unpacked
    """
    regex = compile_pattern(pattern)
    if kind == TAR_GZ:
        data, matched = _extract_tar(uri, regex, session, timeout)
    elif kind == ZIP:
        data, matched = _extract_zip(uri, regex, session, timeout)
    else:
        raise ValueError(f"Unrecognized compression type: {kind}")

    if not matched:
        raise NoMatchError(uri, regex.pattern)
    return data


class StreamPipe(io.RawIOBase):
    """Bounded in-memory pipe between a producer thread and a reader.

    The producer calls ``feed`` for every chunk and ``close_sink`` once the
    source is exhausted; the consumer reads it like any binary file. Closing
    the reader releases a producer blocked on a full pipe.
    """

    def __init__(self, max_chunks: int = PIPE_MAX_CHUNKS, timeout: Optional[float] = None) -> None:
        super().__init__()
        self._chunks: "queue.Queue[Any]" = queue.Queue(maxsize=max_chunks)
        self._pending = b""
        self._eof = False
        self._abandoned = threading.Event()
        self._timeout = timeout

    def feed(self, chunk: Any) -> bool:
        """Queue a chunk; returns False once the reader has gone away."""
        while not self._abandoned.is_set():
            try:
                self._chunks.put(chunk, timeout=_POLL_INTERVAL)
                return True
            except queue.Full:
                continue
        return False

    def close_sink(self, error: Optional[BaseException] = None) -> None:
        """Signal end of input, or hand an error over to the reader."""
        self.feed(error if error is not None else _EOF)

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        if not self._pending:
            if self._eof:
                return 0
            try:
                item = self._chunks.get(timeout=self._timeout)
            except queue.Empty:
                raise TransportError("Timed out waiting for archive data") from None
            if item is _EOF:
                self._eof = True
                return 0
            if isinstance(item, BaseException):
                self._eof = True
                raise item
            self._pending = item

        size = min(len(buffer), len(self._pending))
        buffer[:size] = self._pending[:size]
        self._pending = self._pending[size:]
        return size

    def close(self) -> None:
        self._abandoned.set()
        super().close()


def _read_timeout(timeout: Any) -> Optional[float]:
    if isinstance(timeout, tuple):
        return timeout[-1]
    return timeout


def _open(session: Optional[Session], uri: str, timeout: Any, stream: bool = False) -> Response:
    get = session.get if session is not None else requests.get
    logger.debug("GET %s", uri)
    try:
        response = get(uri, stream=stream, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as exc:
        raise TransportError(f"Unable to fetch {uri}: {exc}") from exc
    return response


def _copy_body(response: Response, pipe: StreamPipe) -> None:
    try:
        for chunk in response.iter_content(chunk_size=PIPE_CHUNK_SIZE):
            if chunk and not pipe.feed(chunk):
                return
    except (requests.RequestException, OSError) as exc:
        pipe.close_sink(TransportError(f"Error while streaming archive: {exc}"))
        return
    pipe.close_sink()


def _extract_tar(
    uri: str, pattern: "re.Pattern[str]", session: Optional[Session], timeout: Any
) -> Tuple[bytes, bool]:
    response = _open(session, uri, timeout, stream=True)
    pipe = StreamPipe(timeout=_read_timeout(timeout))
    copier = threading.Thread(
        target=_copy_body, args=(response, pipe), name="archive-copy", daemon=True
    )
    copier.start()

    data = bytearray()
    matched = False
    try:
        with tarfile.open(fileobj=pipe, mode="r|gz") as archive:
            for member in archive:
                if not member.isfile() or not pattern.match(member.name):
                    continue
                fileobj = archive.extractfile(member)
                if fileobj is None:
                    continue
                data += fileobj.read()
                matched = True
                logger.debug("Matched %s in %s", member.name, uri)
    except (tarfile.TarError, zlib.error, EOFError) as exc:
        raise ArchiveFormatError(f"Unable to read tar.gz archive {uri}: {exc}") from exc
    finally:
        pipe.close()
        copier.join(timeout=_read_timeout(timeout))
        response.close()

    return bytes(data), matched


def _extract_zip(
    uri: str, pattern: "re.Pattern[str]", session: Optional[Session], timeout: Any
) -> Tuple[bytes, bool]:
    response = _open(session, uri, timeout)
    try:
        payload = response.content
    except requests.RequestException as exc:
        raise TransportError(f"Unable to read {uri}: {exc}") from exc
    finally:
        response.close()

    data = bytearray()
    matched = False
    try:
        with zipfile.ZipFile(io.BytesIO(payload)) as archive:
            for info in archive.infolist():
                if info.is_dir() or not pattern.match(info.filename):
                    continue
                data += archive.read(info)
                matched = True
                logger.debug("Matched %s in %s", info.filename, uri)
    except (zipfile.BadZipFile, zlib.error, NotImplementedError) as exc:
        raise ArchiveFormatError(f"Unable to read zip archive {uri}: {exc}") from exc

    return bytes(data), matched
