"""Shared fakes for the HTTP layer and in-memory archive builders."""

import io
import tarfile
import zipfile

import requests


class FakeResponse:
    def __init__(self, body=b"", status_code=200, fail_after=None):
        self.content = body
        self.status_code = status_code
        self.fail_after = fail_after
        self.closed = False

    @property
    def text(self):
        return self.content.decode("utf-8")

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def iter_content(self, chunk_size=1):
        for sent, start in enumerate(range(0, len(self.content), chunk_size)):
            if self.fail_after is not None and sent >= self.fail_after:
                raise requests.ConnectionError("connection reset")
            yield self.content[start:start + chunk_size]

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()
        return None


class FakeSession:
    """Serve canned bodies by URL; unknown URLs answer 404."""

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls = []

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        route = self.routes.get(url)
        if isinstance(route, Exception):
            raise route
        if isinstance(route, FakeResponse):
            return route
        if route is None:
            return FakeResponse(b"not found", status_code=404)
        if isinstance(route, str):
            route = route.encode("utf-8")
        return FakeResponse(route)


def make_tar_gz(files):
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as archive:
        for name, data in files.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            archive.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


def make_zip(files):
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for name, data in files.items():
            archive.writestr(name, data)
    return buffer.getvalue()


