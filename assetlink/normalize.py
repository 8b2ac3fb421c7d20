"""Normalization of inputs for asset names.

Generated asset names are hashes of the inputs. The same file must get the
same name no matter whether it is referred to by an absolute repository
path, by a path relative to the template's directory, or by a path relative
to the default root. normalize_for_identity maps all of those to one form:
the file path relative to the default root where possible.

This is only used for naming. The candidate search decides what an input
resolves to.
"""

from __future__ import annotations

import logging
import os.path
from typing import Optional

from assetlink.errors import ResourceNotFoundError
from assetlink.paths import (
    fs_absolute,
    fs_relative,
    is_fs_descendant,
    is_repo_absolute,
    repo_absolute,
)
from assetlink.repository import ResourceRepository, is_glob


def normalize_for_identity(
    repo: ResourceRepository, root: str, input: str, base_dir: Optional[str]
) -> str:
    if input.startswith("@") or input.startswith("//") or "://" in input:
        return input
    if is_fs_descendant(input, root):
        return fs_relative(input, root)
    if is_glob(input):
        return input
    if os.path.isfile(fs_absolute(input, root)):
        return input
    if base_dir is None and not is_repo_absolute(input):
        return input
    path = repo_absolute(input, base_dir)
    try:
        resource = repo.get(path)
    except (ResourceNotFoundError, ValueError):
        return input
    local = resource.local_path
    if local is None:
        normalized = resource.path
    elif is_fs_descendant(local, root):
        normalized = fs_relative(local, root)
    else:
        normalized = os.path.abspath(local)
    logging.debug("normalized %s to %s", input, normalized)
    return normalized
