"""Assets.

An asset is a concrete, loadable piece of content: a local file, a remote
URL, a repository resource, or a string. Assets carry filters, an optional
target path for the output, and declared variables whose values are
substituted into the source path when the asset is loaded.
"""

from __future__ import annotations

import copy
import logging
import os.path
import posixpath
import re
from abc import ABC, abstractmethod
from email.utils import parsedate_to_datetime
from typing import Dict, Iterable, List, Mapping, Optional

import requests

from assetlink import variables
from assetlink.errors import AssetError, AssetNotFoundError
from assetlink.filters import Filter, FilterCollection
from assetlink.repository import ResourceRepository
from assetlink.resource import ContentResource


class Asset(ABC):

    """Interface of all assets, including collections and deferred proxies."""

    @property
    @abstractmethod
    def filters(self) -> List[Filter]:
        """Return the filters of the asset."""

    @abstractmethod
    def ensure_filter(self, f: Filter):
        """Add a filter unless it is already present."""

    @abstractmethod
    def clear_filters(self):
        ...

    @abstractmethod
    def load(self, additional_filter: Optional[Filter] = None):
        """Load the content and run the load filters on it."""

    @abstractmethod
    def dump(self, additional_filter: Optional[Filter] = None) -> bytes:
        """Return the content after running the dump filters on it.

        Loads the asset first if necessary.
        """

    @property
    @abstractmethod
    def content(self) -> Optional[bytes]:
        """The loaded content, or None if the asset has not been loaded."""

    @content.setter
    @abstractmethod
    def content(self, content: Optional[bytes]):
        ...

    @property
    @abstractmethod
    def source_root(self) -> Optional[str]:
        ...

    @property
    @abstractmethod
    def source_path(self) -> Optional[str]:
        ...

    @property
    @abstractmethod
    def source_directory(self) -> Optional[str]:
        ...

    @property
    @abstractmethod
    def target_path(self) -> Optional[str]:
        """Where the asset should be written to, relative to the output."""

    @target_path.setter
    @abstractmethod
    def target_path(self, target_path: Optional[str]):
        ...

    @property
    @abstractmethod
    def last_modified(self) -> Optional[float]:
        """Return the modification time as a POSIX timestamp, if known."""

    @property
    @abstractmethod
    def vars(self) -> List[str]:
        ...

    @property
    @abstractmethod
    def values(self) -> Dict[str, str]:
        ...

    @abstractmethod
    def set_values(self, values: Mapping[str, str]):
        """Set the values of the declared variables."""


class BaseAsset(Asset):

    """Common implementation of leaf assets.

    Subclasses implement load (usually by calling do_load with the raw
    content) and last_modified.
    """

    def __init__(
        self,
        filters: Iterable[Filter] = (),
        source_root: Optional[str] = None,
        source_path: Optional[str] = None,
        vars: Iterable[str] = (),
    ):
        self._filters = FilterCollection(filters)
        self._source_root = source_root
        self._source_path = source_path
        self._target_path: Optional[str] = None
        self._vars = list(vars)
        self._values: Dict[str, str] = {}
        self._content: Optional[bytes] = None
        self._loaded = False

    def __repr__(self) -> str:
        name = self.__class__.__name__
        return f"{name}(source_root={self._source_root!r}, source_path={self._source_path!r})"

    @property
    def filters(self) -> List[Filter]:
        return self._filters.all()

    def ensure_filter(self, f: Filter):
        self._filters.ensure(f)

    def clear_filters(self):
        self._filters.clear()

    def _working_copy(self, filters: FilterCollection) -> BaseAsset:
        work = copy.copy(self)
        work._filters = filters
        return work

    def _filters_with(self, additional_filter: Optional[Filter]) -> FilterCollection:
        filters = self._filters.copy()
        if additional_filter is not None:
            filters.ensure(additional_filter)
        return filters

    def do_load(self, content: bytes, additional_filter: Optional[Filter] = None):
        """Run the load filters on content and store the result."""
        filters = self._filters_with(additional_filter)
        work = self._working_copy(filters)
        work._content = content
        filters.filter_load(work)
        self._content = work._content
        self._loaded = True

    def dump(self, additional_filter: Optional[Filter] = None) -> bytes:
        if not self._loaded:
            self.load()
        filters = self._filters_with(additional_filter)
        work = self._working_copy(filters)
        filters.filter_dump(work)
        return work._content or b""

    @property
    def content(self) -> Optional[bytes]:
        return self._content

    @content.setter
    def content(self, content: Optional[bytes]):
        self._content = content

    @property
    def source_root(self) -> Optional[str]:
        return self._source_root

    @property
    def source_path(self) -> Optional[str]:
        return self._source_path

    @property
    def source_directory(self) -> Optional[str]:
        if self._source_path is None:
            return None
        if self._source_root is None:
            return posixpath.dirname(self._source_path)
        return posixpath.dirname(f"{self._source_root}/{self._source_path}")

    @property
    def target_path(self) -> Optional[str]:
        return self._target_path

    @target_path.setter
    def target_path(self, target_path: Optional[str]):
        if target_path is not None:
            variables.check_target_path(target_path, self._vars)
        self._target_path = target_path

    @property
    def vars(self) -> List[str]:
        return list(self._vars)

    @property
    def values(self) -> Dict[str, str]:
        return dict(self._values)

    def set_values(self, values: Mapping[str, str]):
        variables.check_declared(values, self._vars, repr(self))
        self._values = dict(values)
        self._loaded = False


class FileAsset(BaseAsset):

    """A file on the local file system, located below source_root."""

    def __init__(
        self,
        source_root: str,
        source_path: str,
        filters: Iterable[Filter] = (),
        vars: Iterable[str] = (),
    ):
        super().__init__(filters, os.fspath(source_root), source_path, vars)

    @property
    def source_file(self) -> str:
        """Return the path of the file, with unresolved placeholders."""
        assert self._source_root is not None and self._source_path is not None
        return os.path.join(self._source_root, self._source_path)

    def _resolved_file(self) -> str:
        path = variables.resolve(self.source_file, self._vars, self._values)
        if not os.path.isfile(path):
            raise AssetNotFoundError(path, reason="the source file does not exist")
        return path

    @property
    def source_directory(self) -> Optional[str]:
        return os.path.dirname(self.source_file)

    def load(self, additional_filter: Optional[Filter] = None):
        path = self._resolved_file()
        logging.debug("loading file asset %s", path)
        with open(path, "rb") as f:
            content = f.read()
        self.do_load(content, additional_filter)

    @property
    def last_modified(self) -> Optional[float]:
        return os.path.getmtime(self._resolved_file())


class HttpAsset(BaseAsset):

    """An asset fetched over HTTP.

    Protocol-relative URLs ("//example.com/foo.css") are fetched over plain
    HTTP. The source root is the scheme and host, the source path the rest of
    the URL.
    """

    TIMEOUT = 10.0

    def __init__(
        self,
        source_url: str,
        filters: Iterable[Filter] = (),
        ignore_errors: bool = False,
        vars: Iterable[str] = (),
    ):
        if source_url.startswith("//"):
            source_url = "http:" + source_url
        elif "://" not in source_url:
            raise ValueError(f"invalid URL {source_url!r}")
        scheme, rest = source_url.split("://", 1)
        host, _, path = rest.partition("/")
        super().__init__(filters, f"{scheme}://{host}", path, vars)
        self.source_url = source_url
        self.ignore_errors = ignore_errors

    def _resolved_url(self) -> str:
        return variables.resolve(self.source_url, self._vars, self._values)

    def load(self, additional_filter: Optional[Filter] = None):
        url = self._resolved_url()
        logging.info("fetching %s", url)
        try:
            response = requests.get(url, timeout=self.TIMEOUT)
            response.raise_for_status()
        except requests.RequestException as ex:
            if not self.ignore_errors:
                raise AssetError(f"unable to fetch {url}: {ex}") from ex
            logging.warning("ignoring failure to fetch %s: %s", url, ex)
            content = b""
        else:
            content = response.content
        self.do_load(content, additional_filter)

    @property
    def last_modified(self) -> Optional[float]:
        url = self._resolved_url()
        try:
            response = requests.head(url, timeout=self.TIMEOUT, allow_redirects=True)
            response.raise_for_status()
        except requests.RequestException as ex:
            if not self.ignore_errors:
                raise AssetError(f"unable to fetch {url}: {ex}") from ex
            logging.warning("ignoring failure to fetch %s: %s", url, ex)
            return None
        header = response.headers.get("Last-Modified")
        if not header:
            return None
        try:
            return parsedate_to_datetime(header).timestamp()
        except (TypeError, ValueError):
            logging.warning("%s: invalid Last-Modified header %r", url, header)
            return None


class StringAsset(BaseAsset):

    """An asset with static content. Mainly useful for testing."""

    def __init__(
        self,
        content: bytes,
        filters: Iterable[Filter] = (),
        source_root: Optional[str] = None,
        source_path: Optional[str] = None,
        last_modified: Optional[float] = None,
    ):
        super().__init__(filters, source_root, source_path)
        self._string = content
        self._last_modified = last_modified

    def load(self, additional_filter: Optional[Filter] = None):
        self.do_load(self._string, additional_filter)

    @property
    def last_modified(self) -> Optional[float]:
        return self._last_modified


class RepositoryResourceAsset(BaseAsset):

    """An asset for a content resource that was already fetched."""

    def __init__(self, resource: ContentResource, filters: Iterable[Filter] = ()):
        super().__init__(filters, None, resource.path)
        self.resource = resource

    def load(self, additional_filter: Optional[Filter] = None):
        self.do_load(self.resource.content, additional_filter)

    @property
    def last_modified(self) -> Optional[float]:
        return self.resource.last_modified_at


class RepositoryPathAsset(BaseAsset):

    """An asset for a repository path (or URI).

    The resource is not fetched from the repository until it is needed, and
    it is fetched again whenever the variable values change.
    """

    def __init__(
        self,
        repo: ResourceRepository,
        path: str,
        filters: Iterable[Filter] = (),
        vars: Iterable[str] = (),
    ):
        super().__init__(filters, None, path, vars)
        self.repo = repo
        self._resource: Optional[ContentResource] = None

    def set_values(self, values: Mapping[str, str]):
        super().set_values(values)
        self._resource = None

    def _load_resource(self) -> ContentResource:
        if self._resource is None:
            assert self._source_path is not None
            path = variables.resolve(self._source_path, self._vars, self._values)
            resource = self.repo.get(path)
            if not isinstance(resource, ContentResource):
                raise AssetError(
                    f"the resource at {path} is not a file resource: {resource.kind()}"
                )
            self._resource = resource
        return self._resource

    def load(self, additional_filter: Optional[Filter] = None):
        self.do_load(self._load_resource().content, additional_filter)

    @property
    def last_modified(self) -> Optional[float]:
        return self._load_resource().last_modified_at


class AssetManager:

    """A registry of named assets, the targets of "@name" references."""

    NAME = re.compile(r"^[a-zA-Z0-9_]+$")

    def __init__(self):
        self._assets: Dict[str, Asset] = {}

    def __repr__(self) -> str:
        return f"AssetManager(names={self.names()!r})"

    def set(self, name: str, asset: Asset):
        if not self.NAME.match(name):
            raise ValueError(f"invalid asset name {name!r}")
        self._assets[name] = asset

    def get(self, name: str) -> Asset:
        asset = self._assets.get(name)
        if asset is None:
            raise AssetError(f"there is no {name!r} asset")
        return asset

    def has(self, name: str) -> bool:
        return name in self._assets

    def names(self) -> List[str]:
        return list(self._assets)


class AssetReference(Asset):

    """A reference to an asset registered in an asset manager.

    The referenced asset is looked up on every access, so it can be
    registered after the reference was created.
    """

    def __init__(self, manager: AssetManager, name: str):
        self.manager = manager
        self.name = name

    def __repr__(self) -> str:
        return f"AssetReference(name={self.name!r})"

    def _asset(self) -> Asset:
        return self.manager.get(self.name)

    @property
    def filters(self) -> List[Filter]:
        return self._asset().filters

    def ensure_filter(self, f: Filter):
        self._asset().ensure_filter(f)

    def clear_filters(self):
        self._asset().clear_filters()

    def load(self, additional_filter: Optional[Filter] = None):
        self._asset().load(additional_filter)

    def dump(self, additional_filter: Optional[Filter] = None) -> bytes:
        return self._asset().dump(additional_filter)

    @property
    def content(self) -> Optional[bytes]:
        return self._asset().content

    @content.setter
    def content(self, content: Optional[bytes]):
        self._asset().content = content

    @property
    def source_root(self) -> Optional[str]:
        return self._asset().source_root

    @property
    def source_path(self) -> Optional[str]:
        return self._asset().source_path

    @property
    def source_directory(self) -> Optional[str]:
        return self._asset().source_directory

    @property
    def target_path(self) -> Optional[str]:
        return self._asset().target_path

    @target_path.setter
    def target_path(self, target_path: Optional[str]):
        self._asset().target_path = target_path

    @property
    def last_modified(self) -> Optional[float]:
        return self._asset().last_modified

    @property
    def vars(self) -> List[str]:
        return self._asset().vars

    @property
    def values(self) -> Dict[str, str]:
        return self._asset().values

    def set_values(self, values: Mapping[str, str]):
        self._asset().set_values(values)
