"""Path helpers for repository and filesystem paths.

Repository paths are always POSIX-style and absolute ("/ns/css/style.css").
Filesystem paths follow the host conventions. The two are never mixed: the
repo_* functions deal with the former, the fs_* functions with the latter.
"""

import os
import os.path
import posixpath
from typing import Optional, Union

PathLike = Union[str, "os.PathLike[str]"]


def is_repo_absolute(path: str) -> bool:
    """Return true if path is an absolute repository path."""
    return path.startswith("/")


def repo_absolute(path: str, base_dir: Optional[str]) -> str:
    """Make a repository path absolute against base_dir.

    Absolute paths are only normalized. A relative path with no base directory
    is anchored at the repository root.
    """
    if not is_repo_absolute(path):
        path = posixpath.join(base_dir or "/", path)
    # normpath keeps a leading "//", which has no meaning in the repository.
    normalized = posixpath.normpath(path)
    if normalized.startswith("//"):
        normalized = "/" + normalized.lstrip("/")
    return normalized


def is_fs_absolute(path: PathLike) -> bool:
    return os.path.isabs(path)


def fs_absolute(path: PathLike, root: PathLike) -> str:
    """Make a filesystem path absolute against root."""
    return os.path.normpath(os.path.join(root, path))


def fs_relative(path: PathLike, root: PathLike) -> str:
    """Make a filesystem path relative to root.

    Must use os.path.relpath rather than Path.relative_to because the latter
    does not go up directories (i.e. use "..").
    """
    return os.path.relpath(path, root)


def is_fs_descendant(path: PathLike, root: PathLike) -> bool:
    """Return true if path lies strictly below the directory root."""
    if not (os.path.isabs(path) and os.path.isabs(root)):
        return False
    path = os.path.normpath(path)
    root = os.path.normpath(root)
    try:
        common = os.path.commonpath([path, root])
    except ValueError:
        # Different drives on Windows.
        return False
    return common == root and path != root
