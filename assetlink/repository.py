"""Resource repositories.

A repository maps absolute repository paths such as "/ns/css/style.css" to
resources. Assets refer to repository paths instead of physical locations,
so the files backing a path can live anywhere on disk (or nowhere at all).
"""

from __future__ import annotations

import logging
import os
import os.path
import posixpath
import re
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Pattern, Sequence, Tuple, Union

from assetlink.errors import ResourceNotFoundError, UnsupportedSchemeError
from assetlink.paths import PathLike, is_repo_absolute, repo_absolute
from assetlink.resource import DirectoryResource, FileResource, Resource
from assetlink.tree import Ref, Tree


def is_glob(path: str) -> bool:
    return "*" in path


def glob_to_regex(glob: str) -> Pattern[str]:
    """Translate a repository glob to a regular expression.

    "*" matches any characters except "/", "**" matches any characters.
    """
    parts = []
    for token in re.split(r"(\*\*|\*)", glob):
        if token == "**":
            parts.append(".*")
        elif token == "*":
            parts.append("[^/]*")
        else:
            parts.append(re.escape(token))
    return re.compile("".join(parts) + r"\Z")


class ResourceRepository(ABC):

    """Abstract base class for repositories."""

    @abstractmethod
    def get(self, path: str) -> Resource:
        """Return the resource at path.

        Raises ResourceNotFoundError if there is none.
        """

    @abstractmethod
    def find(self, glob: str) -> List[Resource]:
        """Return the resources matching glob, sorted by path."""

    @abstractmethod
    def contains(self, path: str) -> bool:
        """Return true if a resource exists at path (or matches the glob)."""

    def supported_schemes(self) -> Sequence[str]:
        """Return the URI schemes that this repository understands."""
        return ()


class InMemoryRepository(ResourceRepository):

    """A repository that keeps its resources in a tree in memory.

    Example usage:

        repo = InMemoryRepository()
        repo.add("/ns", "/path/to/res")
        repo.get("/ns/css/style.css").content

    Mounting a directory walks it once and registers a resource for every file
    and subdirectory. File contents are read lazily.
    """

    def __init__(self):
        self.tree: Tree[Resource] = Tree()
        self.tree.register(self.tree.root, DirectoryResource("/"))

    def __repr__(self) -> str:
        return f"InMemoryRepository(resources={len(self.tree.by_ref)})"

    @staticmethod
    def _normalize(path: str) -> str:
        if not is_repo_absolute(path):
            raise ValueError(f"repository paths must be absolute, got {path!r}")
        return repo_absolute(path, None)

    def add(self, path: str, source: Union[PathLike, Resource]):
        """Add a resource, a local file, or a local directory at path."""
        path = self._normalize(path)
        if isinstance(source, Resource):
            source.path = path
            self._put(source)
            return
        local = os.path.abspath(os.fspath(source))
        if os.path.isdir(local):
            logging.info("mounting directory %s at %s", local, path)
            self._add_directory(path, local)
        elif os.path.isfile(local):
            logging.info("mounting file %s at %s", local, path)
            self._put(FileResource(path, local))
        else:
            raise FileNotFoundError(f"{local} does not exist")

    def _add_directory(self, path: str, local: str):
        for dir_path, dir_names, file_names in os.walk(local):
            dir_names.sort()
            relative = os.path.relpath(dir_path, local)
            if relative == ".":
                repo_dir = path
            else:
                repo_dir = posixpath.join(path, *relative.split(os.sep))
            self._put(DirectoryResource(repo_dir, dir_path))
            for name in sorted(file_names):
                repo_path = posixpath.join(repo_dir, name)
                self._put(FileResource(repo_path, os.path.join(dir_path, name)))
                logging.debug("found resource %s at %s", repo_path, dir_path)

    def _put(self, resource: Resource):
        ref = Ref.parse(resource.path)
        parent = ref.parent
        missing = []
        while parent is not None and parent not in self.tree:
            missing.append(parent)
            parent = parent.parent
        for ref_dir in reversed(missing):
            self.tree.create(ref_dir, DirectoryResource, str(ref_dir))
        self.tree.create(ref, lambda: resource)

    def get(self, path: str) -> Resource:
        path = self._normalize(path)
        resource = self.tree.get(Ref.parse(path))
        if resource is None:
            raise ResourceNotFoundError(f"no resource at {path}")
        return resource

    def find(self, glob: str) -> List[Resource]:
        glob = self._normalize(glob)
        if not is_glob(glob):
            resource = self.tree.get(Ref.parse(glob))
            return [resource] if resource is not None else []
        regex = glob_to_regex(glob)
        return [r for r in self.tree if regex.match(r.path)]

    def contains(self, path: str) -> bool:
        if is_glob(path):
            return bool(self.find(path))
        return Ref.parse(self._normalize(path)) in self.tree


class UriRepository(ResourceRepository):

    """A repository that dispatches URIs to other repositories by scheme.

    URIs have the form "scheme:///path". Plain paths are looked up in the
    repository of the first registered scheme.
    """

    SCHEME = re.compile(r"^[a-z][a-z0-9+.-]*$")

    def __init__(self):
        self.repos: Dict[str, ResourceRepository] = {}
        self.default_scheme: Optional[str] = None

    def __repr__(self) -> str:
        return f"UriRepository(schemes={list(self.repos)!r})"

    def register(self, scheme: str, repo: ResourceRepository):
        """Serve URIs with the given scheme from repo."""
        if not self.SCHEME.match(scheme):
            raise ValueError(f"invalid URI scheme {scheme!r}")
        self.repos[scheme] = repo
        if self.default_scheme is None:
            self.default_scheme = scheme
        logging.debug("registered scheme %s for %r", scheme, repo)

    def supported_schemes(self) -> Sequence[str]:
        return list(self.repos)

    def _split(self, uri: str) -> Tuple[ResourceRepository, str]:
        if "://" in uri:
            scheme, path = uri.split("://", 1)
        else:
            scheme, path = self.default_scheme or "", uri
        repo = self.repos.get(scheme)
        if repo is None:
            supported = ", ".join(self.repos) or "none"
            raise UnsupportedSchemeError(
                f"unsupported scheme {scheme!r} in {uri!r} (supported: {supported})"
            )
        return repo, path

    def get(self, path: str) -> Resource:
        repo, path = self._split(path)
        return repo.get(path)

    def find(self, glob: str) -> List[Resource]:
        repo, glob = self._split(glob)
        return repo.find(glob)

    def contains(self, path: str) -> bool:
        repo, path = self._split(path)
        return repo.contains(path)
