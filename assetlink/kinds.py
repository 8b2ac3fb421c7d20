"""Classification of asset inputs.

An input is a string referring to an asset, such as "css/*.css",
"/ns/css/style.css", "@main", "//cdn.example.com/x.js" or
"resource:///ns/css/style.css". Classifying it decides how it is resolved.
"""

from __future__ import annotations

import logging
import os.path
from enum import Enum
from typing import NamedTuple, Optional

from assetlink.repository import ResourceRepository, is_glob


class Kind(Enum):
    REFERENCE = "reference"
    HTTP = "http"
    SCHEME_URI = "scheme_uri"
    REPOSITORY_PATH = "repository_path"
    REPOSITORY_GLOB = "repository_glob"
    FILESYSTEM_PATH = "filesystem_path"


class ResolvedKind(NamedTuple):

    """An input tagged with its kind.

    For FILESYSTEM_PATH, path is relative to root. For SCHEME_URI, scheme is
    set and path is the whole URI. For REFERENCE, path is the asset name.
    """

    kind: Kind
    path: str
    root: Optional[str] = None
    scheme: Optional[str] = None


def uri_scheme(input: str) -> Optional[str]:
    """Return the scheme of a URI, or None if input is not a URI."""
    if "://" not in input:
        return None
    return input.split("://", 1)[0]


def may_be_repository_path(input: str) -> bool:
    """Return false for references, URLs, URIs and existing files."""
    if input.startswith("@") or input.startswith("//") or "://" in input:
        return False
    return not os.path.isfile(input)


def classify(input: str, repo: ResourceRepository) -> ResolvedKind:
    """Classify an input.

    Only probes the file system for inputs that are not URIs. Whether a
    repository path actually exists is left to the candidate search.
    """
    if input.startswith("@"):
        resolved = ResolvedKind(Kind.REFERENCE, input[1:])
    elif input.startswith("//"):
        resolved = ResolvedKind(Kind.HTTP, input)
    elif "://" in input:
        scheme = uri_scheme(input)
        if scheme in repo.supported_schemes():
            if is_glob(input):
                resolved = ResolvedKind(Kind.REPOSITORY_GLOB, input, scheme=scheme)
            else:
                resolved = ResolvedKind(Kind.SCHEME_URI, input, scheme=scheme)
        else:
            resolved = ResolvedKind(Kind.HTTP, input)
    elif os.path.isfile(input):
        resolved = ResolvedKind(
            Kind.FILESYSTEM_PATH, os.path.basename(input), root=os.path.dirname(input)
        )
    elif is_glob(input):
        resolved = ResolvedKind(Kind.REPOSITORY_GLOB, input)
    else:
        resolved = ResolvedKind(Kind.REPOSITORY_PATH, input)
    logging.debug("classified %s as %s", input, resolved.kind.name)
    return resolved
