"""Asset factory.

The factory turns the inputs mentioned in templates into assets. Since
relative inputs can only be resolved once the template's directory is known,
create_asset and generate_asset_name return deferred objects; the template
engine calls supply_context on them when it renders the template.
"""

from __future__ import annotations

import logging
import os
import os.path
import posixpath
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from assetlink import variables
from assetlink.asset import (
    Asset,
    AssetManager,
    AssetReference,
    FileAsset,
    HttpAsset,
    RepositoryPathAsset,
)
from assetlink.collection import AssetCollection, GlobAsset
from assetlink.deferred import DeferredAsset, DeferredAssetCollection
from assetlink.errors import AssetError, AssetNotFoundError
from assetlink.filters import Filter, FilterManager
from assetlink.kinds import Kind, ResolvedKind, classify
from assetlink.naming import DeferredAssetName, fingerprint
from assetlink.normalize import normalize_for_identity
from assetlink.paths import PathLike, is_repo_absolute, repo_absolute
from assetlink.repository import ResourceRepository
from assetlink.search import find_candidate

Inputs = Union[str, Iterable[str]]


def as_list(value: Optional[Inputs]) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return list(value)


def target_path_for(output: str, name: str, inputs: Sequence[str], vars: Sequence[str]) -> str:
    """Return the target path of an asset from the output pattern.

    "css/*" becomes "css/<name>.css" if all inputs have the ".css" extension.
    Placeholders of variables are added after "*" unless the pattern already
    contains them, so "js/*.js" becomes "js/<name>.{locale}.js".
    """
    extensions = set()
    for input in inputs:
        ext = posixpath.splitext(input)[1]
        if ext:
            extensions.add(ext)
    if len(extensions) == 1 and not posixpath.splitext(output)[1]:
        output += extensions.pop()
    missing = [
        variables.placeholder(var)
        for var in vars
        if variables.placeholder(var) not in output
    ]
    if missing:
        output = output.replace("*", "*." + ".".join(missing), 1)
    return output.replace("*", name)


class AssetFactory:

    """Creates assets from inputs.

    Relative inputs are looked up in the repository relative to the template's
    directory first, then in the filesystem roots: those passed with the
    "root" option, then extra_roots, then the default root.

    Supported options:

        name    asset name, a string or a DeferredAssetName (default: generated)
        output  target path pattern, "*" stands for the name
        vars    names of the variables used in the inputs
        root    extra filesystem root, or a list of them
        debug   skip the filters whose names start with "?"
    """

    def __init__(
        self,
        repo: ResourceRepository,
        root: PathLike,
        debug: bool = False,
        output: str = "assets/*",
        extra_roots: Iterable[PathLike] = (),
    ):
        self.repo = repo
        self.root = os.path.abspath(os.fspath(root))
        self.extra_roots = [os.path.abspath(os.fspath(r)) for r in extra_roots]
        self.debug = debug
        self.output = output
        self.asset_manager: Optional[AssetManager] = None
        self.filter_manager: Optional[FilterManager] = None

    def __repr__(self) -> str:
        return f"AssetFactory(repo={self.repo!r}, root={self.root!r})"

    def create_asset(
        self,
        inputs: Inputs,
        filters: Inputs = (),
        options: Optional[Mapping[str, Any]] = None,
    ) -> DeferredAssetCollection:
        """Create an asset collection for inputs.

        The collection is usable once its supply_context is called.
        """
        return DeferredAssetCollection(self, as_list(inputs), as_list(filters), options)

    def generate_asset_name(
        self,
        inputs: Inputs,
        filters: Inputs = (),
        options: Optional[Mapping[str, Any]] = None,
    ) -> DeferredAssetName:
        """Generate the name of the asset for inputs.

        The name is usable once its supply_context is called. It is the same
        name create_asset uses for the same arguments.
        """
        return DeferredAssetName(self, as_list(inputs), as_list(filters), options)

    def create_asset_for_base_dir(
        self,
        base_dir: Optional[str],
        inputs: Inputs,
        filters: Inputs = (),
        options: Optional[Mapping[str, Any]] = None,
    ) -> AssetCollection:
        inputs = as_list(inputs)
        filters = as_list(filters)
        options = dict(options or {})
        name = options.pop("name", None)
        if isinstance(name, DeferredAssetName):
            if not name.is_resolved():
                name.supply_context(base_dir)
            name = name.name
        elif name is None:
            name = self.generate_asset_name_for_base_dir(base_dir, inputs, filters, options)
        vars = list(options.get("vars", ()))
        roots = self.roots(options)
        debug = options.get("debug", self.debug)

        collection = AssetCollection(vars=vars)
        for input in inputs:
            collection.add(self.parse_input(input, base_dir, roots, vars))
        for filter_name in filters:
            if filter_name.startswith("?"):
                if debug:
                    continue
                filter_name = filter_name[1:]
            collection.ensure_filter(self.get_filter(filter_name))
        output = options.get("output", self.output)
        collection.target_path = target_path_for(output, str(name), inputs, vars)
        logging.debug("created asset %s with %d inputs", collection.target_path, len(inputs))
        return collection

    def generate_asset_name_for_base_dir(
        self,
        base_dir: Optional[str],
        inputs: Inputs,
        filters: Inputs = (),
        options: Optional[Mapping[str, Any]] = None,
    ) -> str:
        normalized = [
            normalize_for_identity(self.repo, self.root, input, base_dir)
            for input in as_list(inputs)
        ]
        return fingerprint(normalized, as_list(filters), dict(options or {}))

    def roots(self, options: Mapping[str, Any]) -> List[str]:
        """Return the filesystem roots to search, in order.

        The roots from the "root" option come first, then the extra roots of
        the factory, then the default root.
        """
        extra = options.get("root")
        if extra is None:
            extra = []
        elif isinstance(extra, (str, os.PathLike)):
            extra = [extra]
        return [os.fspath(r) for r in extra] + self.extra_roots + [self.root]

    def get_filter(self, name: str) -> Filter:
        if self.filter_manager is None:
            raise AssetError(f"cannot use the {name!r} filter without a filter manager")
        return self.filter_manager.get(name)

    def parse_input(
        self,
        input: str,
        base_dir: Optional[str],
        roots: Sequence[str],
        vars: Sequence[str] = (),
    ) -> Asset:
        """Create the asset for a single input."""
        resolved = classify(input, self.repo)
        creators: Dict[Kind, Callable[..., Asset]] = {
            Kind.REFERENCE: self._create_reference,
            Kind.HTTP: self._create_http,
            Kind.SCHEME_URI: self._create_uri,
            Kind.REPOSITORY_GLOB: self._create_glob,
            Kind.REPOSITORY_PATH: self._create_path,
            Kind.FILESYSTEM_PATH: self._create_path,
        }
        return creators[resolved.kind](resolved, input, base_dir, roots, vars)

    def parse_input_with_values(
        self,
        input: str,
        base_dir: Optional[str],
        roots: Sequence[str],
        vars: Sequence[str],
        values: Mapping[str, str],
    ) -> Asset:
        """Create the asset for a path input, given the variable values."""
        candidate = find_candidate(self.repo, input, base_dir, roots, vars, values)
        return self._create_for_candidate(candidate, vars)

    def _create_reference(self, resolved: ResolvedKind, *args) -> Asset:
        if self.asset_manager is None:
            raise AssetError(f"cannot reference @{resolved.path} without an asset manager")
        return AssetReference(self.asset_manager, resolved.path)

    def _create_http(self, resolved: ResolvedKind, input, base_dir, roots, vars) -> Asset:
        return HttpAsset(input, vars=vars)

    def _create_uri(self, resolved: ResolvedKind, input, base_dir, roots, vars) -> Asset:
        return RepositoryPathAsset(self.repo, input, vars=vars)

    def _create_glob(self, resolved: ResolvedKind, input, base_dir, roots, vars) -> Asset:
        glob = input
        if resolved.scheme is None:
            if not is_repo_absolute(input):
                if base_dir is None:
                    raise AssetNotFoundError(
                        input, reason="relative globs need the directory of a template"
                    )
            glob = repo_absolute(input, base_dir)
        glob_vars = [var for var in vars if variables.placeholder(var) in glob]
        return GlobAsset(self.repo, glob, vars=glob_vars)

    def _create_path(self, resolved: ResolvedKind, input, base_dir, roots, vars) -> Asset:
        if variables.has_placeholders(input, vars):
            return DeferredAsset(self, input, roots, vars, base_dir=base_dir)
        return self._create_for_candidate(find_candidate(self.repo, input, base_dir, roots))

    def _create_for_candidate(self, candidate: ResolvedKind, vars: Sequence[str] = ()) -> Asset:
        if candidate.kind is Kind.FILESYSTEM_PATH:
            assert candidate.root is not None
            return FileAsset(candidate.root, candidate.path, vars=vars)
        return RepositoryPathAsset(self.repo, candidate.path, vars=vars)
