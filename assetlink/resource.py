"""Repository resources."""

from __future__ import annotations

import logging
import os
import time
from abc import ABC, abstractmethod
from typing import Optional


class Resource(ABC):

    """A resource stored in a repository under an absolute path.

    Resources can optionally be backed by a file or directory on the local
    file system, in which case local_path is set. Only subclasses of
    ContentResource carry content; directories and other containers do not.
    """

    def __init__(self, path: str, local_path: Optional[str] = None):
        self.path = path
        self.local_path = local_path

    def __repr__(self) -> str:
        if self.local_path:
            return f"{self.kind()}(path={self.path!r}, local_path={self.local_path!r})"
        return f"{self.kind()}(path={self.path!r})"

    def kind(self) -> str:
        return self.__class__.__name__

    @property
    def name(self) -> str:
        return self.path.rsplit("/", 1)[-1]


class DirectoryResource(Resource):
    """A directory in the repository."""


class ContentResource(Resource):

    """A resource with content and a modification time."""

    @property
    @abstractmethod
    def content(self) -> bytes:
        """Return the resource's content."""

    @property
    @abstractmethod
    def last_modified_at(self) -> float:
        """Return the modification time as a POSIX timestamp."""


class FileResource(ContentResource):

    """A file on the local file system.

    The file is not read until its content is first needed. The content is
    cached after that; call unload to read it again.
    """

    local_path: str

    def __init__(self, path: str, local_path: str):
        super().__init__(path, local_path)
        self._content: Optional[bytes] = None

    def is_loaded(self) -> bool:
        """Return true if the file has been read."""
        return self._content is not None

    def ensure_loaded(self):
        """Read the file if it is not already loaded."""
        if not self.is_loaded():
            self.load()

    def load(self):
        """Read the file from disk."""
        logging.info("loading %s %s from %s", self.kind(), self.path, self.local_path)
        with open(self.local_path, "rb") as f:
            self._content = f.read()

    def unload(self):
        """Forget the cached content."""
        logging.debug("reset %s %s to pre-load", self.kind(), self.path)
        self._content = None

    @property
    def content(self) -> bytes:
        self.ensure_loaded()
        assert self._content is not None
        return self._content

    @property
    def last_modified_at(self) -> float:
        return os.path.getmtime(self.local_path)


class StringResource(ContentResource):

    """A resource whose content lives in memory."""

    def __init__(self, path: str, content: bytes, last_modified_at: Optional[float] = None):
        super().__init__(path)
        self._content = content
        self._last_modified_at = (
            time.time() if last_modified_at is None else last_modified_at
        )

    @property
    def content(self) -> bytes:
        return self._content

    @property
    def last_modified_at(self) -> float:
        return self._last_modified_at
