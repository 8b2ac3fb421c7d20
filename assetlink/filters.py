"""Filters applied to asset content.

Filters are opaque to the resolution engine: it stores them, forwards them
to resolved assets, and never looks inside.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Callable, Dict, Iterable, Iterator, List, Optional

from assetlink.errors import AssetError

if TYPE_CHECKING:
    # pylint: disable=cyclic-import
    from assetlink.asset import Asset


class Filter(ABC):

    """A transformation of asset content.

    filter_load runs when the asset is loaded, filter_dump every time the
    asset is dumped. Both receive a working copy of the asset and modify its
    content in place.
    """

    @abstractmethod
    def filter_load(self, asset: Asset):
        ...

    @abstractmethod
    def filter_dump(self, asset: Asset):
        ...


class CallbackFilter(Filter):

    """A filter built from plain functions."""

    def __init__(
        self,
        load: Optional[Callable[[Asset], None]] = None,
        dump: Optional[Callable[[Asset], None]] = None,
    ):
        self.load = load
        self.dump = dump

    def filter_load(self, asset: Asset):
        if self.load:
            self.load(asset)

    def filter_dump(self, asset: Asset):
        if self.dump:
            self.dump(asset)


class FilterCollection(Filter):

    """An ordered set of filters, itself usable as a filter."""

    def __init__(self, filters: Iterable[Filter] = ()):
        self._filters: List[Filter] = []
        for f in filters:
            self.ensure(f)

    def __repr__(self) -> str:
        return f"FilterCollection({self._filters!r})"

    def ensure(self, f: Filter):
        """Add a filter unless it is already present.

        The filters of a nested collection are merged into this one.
        """
        if isinstance(f, FilterCollection):
            for inner in f:
                self.ensure(inner)
        elif not any(existing is f for existing in self._filters):
            self._filters.append(f)

    def all(self) -> List[Filter]:
        return list(self._filters)

    def clear(self):
        self._filters = []

    def copy(self) -> FilterCollection:
        return FilterCollection(self._filters)

    def __iter__(self) -> Iterator[Filter]:
        return iter(list(self._filters))

    def __len__(self) -> int:
        return len(self._filters)

    def filter_load(self, asset: Asset):
        for f in self._filters:
            f.filter_load(asset)

    def filter_dump(self, asset: Asset):
        for f in self._filters:
            f.filter_dump(asset)


class FilterManager:

    """A registry of filters by name."""

    NAME_CHARS = set("abcdefghijklmnopqrstuvwxyz0123456789_")

    def __init__(self):
        self._filters: Dict[str, Filter] = {}

    def __repr__(self) -> str:
        return f"FilterManager(names={self.names()!r})"

    def set(self, name: str, f: Filter):
        if not name or not set(name.lower()) <= self.NAME_CHARS:
            raise ValueError(f"invalid filter name {name!r}")
        self._filters[name] = f

    def get(self, name: str) -> Filter:
        f = self._filters.get(name)
        if f is None:
            raise AssetError(f"there is no {name!r} filter")
        return f

    def has(self, name: str) -> bool:
        return name in self._filters

    def names(self) -> List[str]:
        return list(self._filters)
