"""
Map a package to the source repository it is developed in.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, Optional

from .exceptions import NoHomepageError, UnparseableHomepageError
from .index import PackageIndex
from .names import normalize_name


logger = logging.getLogger(__name__)

PKG_INFO_PATTERN = "**/PKG-INFO"

# First match wins; each captures scheme://host/owner/repo and drops the rest.
REPO_PATTERNS = [
    re.compile(r"^Home-page:[ \t]*(https?://github\.com/[^/\s#?]+/[^/\s#?]+)(?:[/#?]\S*)?[ \t\r]*$", re.MULTILINE),
    re.compile(r"^Home-page:[ \t]*(https?://bitbucket\.org/[^/\s#?]+/[^/\s#?]+)(?:[/#?]\S*)?[ \t\r]*$", re.MULTILINE),
    re.compile(r"^Home-page:[ \t]*(https?://code\.google\.com/p/[^/\s#?]+)(?:[/#?]\S*)?[ \t\r]*$", re.MULTILINE),
]

HOMEPAGE_RE = re.compile(r"^Home-page:[ \t]*(\S.*?)[ \t\r]*$", re.MULTILINE)

KNOWN_REPOS: Dict[str, str] = {
    "ansible": "github.com/ansible/ansible",
    "apache-libcloud": "github.com/apache/libcloud",
    "bottle": "github.com/bottlepy/bottle",
    "celery": "github.com/celery/celery",
    "chameleon": "github.com/malthe/chameleon",
    "coverage": "bitbucket.org/ned/coveragepy",
    "distribute": "bitbucket.org/tarek/distribute",
    "django": "github.com/django/django",
    "django-cms": "github.com/divio/django-cms",
    "django-tastypie": "github.com/toastdriven/django-tastypie",
    "djangocms-admin-style": "github.com/divio/djangocms-admin-style",
    "djangorestframework": "github.com/tomchristie/django-rest-framework",
    "eve": "github.com/nicolaiarocci/eve",
    "fabric": "github.com/fabric/fabric",
    "flask": "github.com/mitsuhiko/flask",
    "gevent": "github.com/surfly/gevent",
    "gunicorn": "github.com/benoitc/gunicorn",
    "httpie": "github.com/jkbr/httpie",
    "httplib2": "github.com/jcgregorio/httplib2",
    "itsdangerous": "github.com/mitsuhiko/itsdangerous",
    "jinja2": "github.com/mitsuhiko/jinja2",
    "kazoo": "github.com/python-zk/kazoo",
    "kombu": "github.com/celery/kombu",
    "lamson": "github.com/zedshaw/lamson",
    "libcloud": "github.com/apache/libcloud",
    "lxml": "github.com/lxml/lxml",
    "mako": "github.com/zzzeek/mako",
    "markupsafe": "github.com/mitsuhiko/markupsafe",
    "matplotlib": "github.com/matplotlib/matplotlib",
    "mimeparse": "github.com/crosbymichael/mimeparse",
    "mock": "github.com/beyang/mock",
    "nltk": "github.com/nltk/nltk",
    "nose": "github.com/nose-devs/nose",
    "nova": "github.com/openstack/nova",
    "numpy": "github.com/numpy/numpy",
    "pandas": "github.com/pydata/pandas",
    "pastedeploy": "bitbucket.org/ianb/pastedeploy",
    "pattern": "github.com/clips/pattern",
    "psycopg2": "github.com/beyang/psycopg2",
    "pyramid": "github.com/Pylons/pyramid",
    "python-dateutil": "github.com/paxan/python-dateutil",
    "python-lust": "github.com/zedshaw/python-lust",
    "pyyaml": "github.com/yaml/pyyaml",
    "repoze-lru": "github.com/repoze/repoze.lru",
    "requests": "github.com/kennethreitz/requests",
    "salt": "github.com/saltstack/salt",
    "scikit-learn": "github.com/scikit-learn/scikit-learn",
    "scipy": "github.com/scipy/scipy",
    "sentry": "github.com/getsentry/sentry",
    "setuptools": "github.com/jaraco/setuptools",
    "sockjs-tornado": "github.com/mrjoes/sockjs-tornado",
    "south": "bitbucket.org/andrewgodwin/south",
    "sqlalchemy": "github.com/zzzeek/sqlalchemy",
    "ssh": "github.com/bitprophet/ssh",
    "tornado": "github.com/facebook/tornado",
    "translationstring": "github.com/Pylons/translationstring",
    "tulip": "github.com/sourcegraph/tulip",
    "venusian": "github.com/Pylons/venusian",
    "webob": "github.com/Pylons/webob",
    "webpy": "github.com/webpy/webpy",
    "werkzeug": "github.com/mitsuhiko/werkzeug",
    "zope-interface": "github.com/zopefoundation/zope.interface",
}


def repo_uri_from_metadata(package: str, metadata: str) -> str:
    """Derive the repository URI from PKG-INFO text.

    Raises:
        UnparseableHomepageError: a home page is declared but not recognized
        NoHomepageError: the metadata has no home page at all
    """
    for pattern in REPO_PATTERNS:
        match = pattern.search(metadata)
        if match:
            return match.group(1)

    known = KNOWN_REPOS.get(normalize_name(package))
    if known is not None:
        return f"https://{known}"

    match = HOMEPAGE_RE.search(metadata)
    if match:
        raise UnparseableHomepageError(match.group(1))
    raise NoHomepageError(metadata)


class RepoURIResolver:
    """Resolve repository URIs from the packages' descriptor metadata."""

    def __init__(self, index: Optional[PackageIndex] = None) -> None:
        self.index = index if index is not None else PackageIndex()

    def resolve(self, package: str) -> str:
        logger.info("Resolving repository for %s", package)
        raw = self.index.fetch_raw_metadata(package, PKG_INFO_PATTERN)
        return repo_uri_from_metadata(package, raw.decode("utf-8", errors="replace"))


_DEFAULT_RESOLVER: Optional[RepoURIResolver] = None


def resolve_repo_uri(package: str) -> str:
    """Resolve a repository URI with a shared resolver against the default index."""
    global _DEFAULT_RESOLVER
    if _DEFAULT_RESOLVER is None:
        _DEFAULT_RESOLVER = RepoURIResolver()
    return _DEFAULT_RESOLVER.resolve(package)
