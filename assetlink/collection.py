"""Asset collections.

A collection groups assets that are written to a single target. Iterating
over a collection yields its leaves, with nested collections flattened, and
assigns every leaf its own target path derived from the collection's. Debug
mode uses those to reference each leaf separately.
"""

from __future__ import annotations

import logging
import posixpath
from typing import Dict, Iterable, Iterator, List, Mapping, Optional

from assetlink import variables
from assetlink.asset import Asset, RepositoryResourceAsset
from assetlink.errors import InvalidStateError
from assetlink.filters import Filter, FilterCollection
from assetlink.repository import ResourceRepository
from assetlink.resource import ContentResource


def leaf_target_path(target_path: str, leaf: Asset, n: int, vars: Iterable[str]) -> str:
    """Return the target path of the nth leaf of a collection.

    For example the first leaf "/ns/css/style.css" of a collection written to
    "css/main.css" gets "css/main_style_1.css".
    """
    base, ext = posixpath.splitext(target_path)
    stem = ""
    if leaf.source_path:
        stem = posixpath.splitext(posixpath.basename(leaf.source_path))[0]
    for var in vars:
        key = variables.placeholder(var)
        if key in target_path:
            stem = stem.replace(key, "")
    stem = stem.strip(".") or "part"
    return f"{base}_{stem}_{n}{ext}"


class AssetCollection(Asset):

    """A list of assets, each of which may itself be a collection."""

    def __init__(
        self,
        assets: Iterable[Asset] = (),
        filters: Iterable[Filter] = (),
        source_root: Optional[str] = None,
        vars: Iterable[str] = (),
    ):
        self._assets: List[Asset] = list(assets)
        self._filters = FilterCollection(filters)
        self._source_root = source_root
        self._target_path: Optional[str] = None
        self._content: Optional[bytes] = None
        self._vars = list(vars)
        self._values: Dict[str, str] = {}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(assets={self._assets!r})"

    def all(self) -> List[Asset]:
        """Return the direct children of the collection."""
        return list(self._assets)

    def add(self, asset: Asset):
        self._assets.append(asset)

    def remove_leaf(self, leaf: Asset, graceful: bool = False) -> bool:
        """Remove leaf from this collection or a nested one.

        Raises ValueError if leaf is not found, unless graceful is true.
        """
        for i, asset in enumerate(self._assets):
            if asset is leaf:
                del self._assets[i]
                return True
            if isinstance(asset, AssetCollection) and asset.remove_leaf(leaf, True):
                return True
        if graceful:
            return False
        raise ValueError(f"{leaf!r} is not a leaf of {self!r}")

    def replace_leaf(self, needle: Asset, replacement: Asset, graceful: bool = False) -> bool:
        """Replace needle with replacement, in this collection or a nested one.

        Raises ValueError if needle is not found, unless graceful is true.
        """
        for i, asset in enumerate(self._assets):
            if asset is needle:
                self._assets[i] = replacement
                return True
            if isinstance(asset, AssetCollection) and asset.replace_leaf(
                needle, replacement, True
            ):
                return True
        if graceful:
            return False
        raise ValueError(f"{needle!r} is not a leaf of {self!r}")

    def _leaves(self) -> Iterator[Asset]:
        for asset in self._assets:
            if isinstance(asset, AssetCollection):
                leaves: Iterable[Asset] = asset._leaves()
            else:
                leaves = [asset]
            for leaf in leaves:
                for f in self._filters:
                    leaf.ensure_filter(f)
                yield leaf

    def __iter__(self) -> Iterator[Asset]:
        """Iterate over the leaves, assigning each its own target path."""
        for n, leaf in enumerate(self._leaves(), 1):
            if self._target_path is not None:
                leaf.target_path = leaf_target_path(self._target_path, leaf, n, self._vars)
            yield leaf

    @property
    def filters(self) -> List[Filter]:
        return self._filters.all()

    def ensure_filter(self, f: Filter):
        self._filters.ensure(f)

    def clear_filters(self):
        self._filters.clear()

    def load(self, additional_filter: Optional[Filter] = None):
        parts = []
        for leaf in self:
            leaf.load(additional_filter)
            parts.append(leaf.content or b"")
        self._content = b"\n".join(parts)

    def dump(self, additional_filter: Optional[Filter] = None) -> bytes:
        return b"\n".join(leaf.dump(additional_filter) for leaf in self)

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
        return None

    @property
    def source_directory(self) -> Optional[str]:
        return None

    @property
    def target_path(self) -> Optional[str]:
        return self._target_path

    @target_path.setter
    def target_path(self, target_path: Optional[str]):
        if target_path is not None:
            variables.check_target_path(target_path, self._vars)
        self._target_path = target_path

    @property
    def last_modified(self) -> Optional[float]:
        """Return the modification time of the newest leaf."""
        times = [t for t in (leaf.last_modified for leaf in self) if t is not None]
        return max(times) if times else None

    @property
    def vars(self) -> List[str]:
        return list(self._vars)

    @property
    def values(self) -> Dict[str, str]:
        return dict(self._values)

    def set_values(self, values: Mapping[str, str]):
        variables.check_declared(values, self._vars, repr(self))
        self._values = dict(values)
        for asset in self._assets:
            declared = asset.vars
            if declared:
                asset.set_values({k: v for k, v in values.items() if k in declared})


class GlobAsset(AssetCollection):

    """A collection of the repository resources matching a glob.

    The glob is expanded once, when the leaves are first needed. Variables are
    substituted into the glob before expansion, so the leaves have no
    variables of their own and the values cannot change afterwards.
    """

    def __init__(
        self,
        repo: ResourceRepository,
        glob: str,
        filters: Iterable[Filter] = (),
        vars: Iterable[str] = (),
    ):
        super().__init__((), filters, None, vars)
        self.repo = repo
        self.glob = glob
        self._expanded = False

    def __repr__(self) -> str:
        return f"GlobAsset(glob={self.glob!r})"

    def is_expanded(self) -> bool:
        return self._expanded

    def _expand(self):
        if self._expanded:
            return
        glob = variables.resolve(self.glob, self._vars, self._values)
        resources = self.repo.find(glob)
        logging.debug("glob %s matched %d resources", glob, len(resources))
        for resource in resources:
            if isinstance(resource, ContentResource):
                self._assets.append(RepositoryResourceAsset(resource))
        self._expanded = True

    def all(self) -> List[Asset]:
        self._expand()
        return super().all()

    def add(self, asset: Asset):
        self._expand()
        super().add(asset)

    def remove_leaf(self, leaf: Asset, graceful: bool = False) -> bool:
        self._expand()
        return super().remove_leaf(leaf, graceful)

    def replace_leaf(self, needle: Asset, replacement: Asset, graceful: bool = False) -> bool:
        self._expand()
        return super().replace_leaf(needle, replacement, graceful)

    def _leaves(self) -> Iterator[Asset]:
        self._expand()
        return super()._leaves()

    def set_values(self, values: Mapping[str, str]):
        if self._expanded:
            raise InvalidStateError(
                f"cannot change the values of {self!r} after it was expanded"
            )
        super().set_values(values)
