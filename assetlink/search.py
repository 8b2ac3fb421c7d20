"""Candidate search.

Resolves a repository or filesystem path input to the location it actually
refers to. For relative inputs the precedence is:

1. the repository, relative to the base directory of the template,
2. the filesystem roots, in the order they are configured (the default root
   is always last).

So an asset that lives next to the template referencing it wins over files
with the same name elsewhere.
"""

from __future__ import annotations

import logging
import os.path
from typing import Iterable, Mapping, Optional, Sequence

from assetlink import variables
from assetlink.errors import AssetNotFoundError, ResourceNotFoundError
from assetlink.kinds import Kind, ResolvedKind
from assetlink.paths import (
    fs_absolute,
    fs_relative,
    is_fs_descendant,
    is_repo_absolute,
    repo_absolute,
)
from assetlink.repository import ResourceRepository
from assetlink.resource import ContentResource


def has_content(repo: ResourceRepository, path: str) -> bool:
    """Return true if path names a resource with content, not a directory."""
    try:
        return isinstance(repo.get(path), ContentResource)
    except ResourceNotFoundError:
        return False


def find_candidate(
    repo: ResourceRepository,
    input: str,
    base_dir: Optional[str],
    roots: Sequence[str],
    vars: Iterable[str] = (),
    values: Optional[Mapping[str, str]] = None,
) -> ResolvedKind:
    """Find the location that input refers to.

    Values are substituted only to probe candidates: the returned path keeps
    the placeholders of declared variables. Raises AssetNotFoundError listing
    every location searched, in order.
    """
    vars = list(vars)
    values = values or {}
    substituted = variables.resolve(input, vars, values)
    if is_repo_absolute(input):
        for root in roots:
            if is_fs_descendant(input, root):
                logging.debug("found %s under root %s", input, root)
                return ResolvedKind(Kind.FILESYSTEM_PATH, fs_relative(input, root), root=root)
        if os.path.isfile(substituted):
            logging.debug("found %s on the file system", substituted)
            return ResolvedKind(
                Kind.FILESYSTEM_PATH, os.path.basename(input), root=os.path.dirname(input)
            )
        if has_content(repo, substituted):
            logging.debug("found %s in the repository", substituted)
            return ResolvedKind(Kind.REPOSITORY_PATH, repo_absolute(input, None))
        raise AssetNotFoundError(
            input, list(roots) + ["the repository"], "not a file or repository path"
        )

    searched = []
    if base_dir is not None:
        path = repo_absolute(substituted, base_dir)
        searched.append(base_dir)
        if has_content(repo, path):
            logging.debug("found %s in the repository at %s", input, path)
            return ResolvedKind(Kind.REPOSITORY_PATH, repo_absolute(input, base_dir))
    for root in roots:
        searched.append(root)
        if os.path.isfile(fs_absolute(substituted, root)):
            logging.debug("found %s under root %s", input, root)
            return ResolvedKind(Kind.FILESYSTEM_PATH, input, root=root)
    raise AssetNotFoundError(input, searched)
