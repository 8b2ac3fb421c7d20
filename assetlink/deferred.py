"""Deferred assets.

Templates mention assets before the information needed to resolve them is
available: relative inputs depend on the directory of the template, and
inputs with variables depend on values only known at render time. The
proxies in this module capture the input when the asset is created and
resolve it exactly once, when supply_context provides the missing context.

Writes made before resolution (filters, content and target path) are staged
and replayed onto the resolved asset.
"""

from __future__ import annotations

import logging
from typing import (
    TYPE_CHECKING,
    Any,
    Dict,
    Iterator,
    List,
    Mapping,
    Optional,
    Sequence,
)

from assetlink import variables
from assetlink.asset import Asset
from assetlink.collection import AssetCollection
from assetlink.errors import InvalidStateError
from assetlink.filters import Filter

if TYPE_CHECKING:
    # pylint: disable=cyclic-import
    from assetlink.factory import AssetFactory

# Marks a base directory that was not supplied yet, since None is a valid one.
UNKNOWN = object()


class _Staging:

    """Writes to be replayed onto the resolved asset."""

    def __init__(self):
        self.filters: List[Filter] = []
        self.content: Optional[bytes] = None
        self.has_content = False
        self.target_path: Optional[str] = None
        self.has_target_path = False

    def ensure_filter(self, f: Filter):
        if not any(existing is f for existing in self.filters):
            self.filters.append(f)

    def set_content(self, content: Optional[bytes]):
        self.content = content
        self.has_content = True

    def set_target_path(self, target_path: Optional[str]):
        self.target_path = target_path
        self.has_target_path = True

    def replay(self, asset: Asset):
        for f in self.filters:
            asset.ensure_filter(f)
        if self.has_content:
            asset.content = self.content
        if self.has_target_path:
            asset.target_path = self.target_path


class DeferredAsset(Asset):

    """A single repository or filesystem path resolved on demand.

    Once the base directory is known (passed to the constructor or through
    supply_context), the asset resolves as soon as all of its variables have
    values, or on the first access that needs the content. Accessing it
    before any base directory was supplied raises InvalidStateError.

    source_path, source_root and target_path never trigger resolution. Before
    resolution they return the raw input, None, and the staged target path.
    """

    def __init__(
        self,
        factory: AssetFactory,
        input: str,
        roots: Sequence[str],
        vars: Sequence[str] = (),
        base_dir: Any = UNKNOWN,
        target_path: Optional[str] = None,
    ):
        self._factory: Optional[AssetFactory] = factory
        self._input = input
        self._roots = list(roots)
        self._vars = list(vars)
        self._values: Dict[str, str] = {}
        self._base_dir = base_dir
        self._staging = _Staging()
        self._inner: Optional[Asset] = None
        if target_path is not None:
            self.target_path = target_path

    def __repr__(self) -> str:
        if self._inner is not None:
            return f"DeferredAsset(inner={self._inner!r})"
        return f"DeferredAsset(input={self._input!r})"

    def is_resolved(self) -> bool:
        return self._inner is not None

    def is_context_known(self) -> bool:
        return self._base_dir is not UNKNOWN

    def _has_all_values(self) -> bool:
        return all(
            var in self._values
            for var in self._vars
            if variables.placeholder(var) in self._input
        )

    def supply_context(
        self, base_dir: Optional[str], values: Optional[Mapping[str, str]] = None
    ):
        """Set the base directory, and optionally the variable values.

        Resolves immediately if every variable in the input has a value.
        """
        if self.is_context_known():
            raise InvalidStateError(f"the context of {self!r} was already supplied")
        if values is not None:
            variables.check_declared(values, self._vars, repr(self))
            self._values = dict(values)
        self._base_dir = base_dir
        if self._has_all_values():
            self._resolve()

    def _resolve(self):
        assert self._factory is not None
        logging.debug("resolving %s in %s", self._input, self._base_dir)
        inner = self._factory.parse_input_with_values(
            self._input, self._base_dir, self._roots, self._vars, self._values
        )
        declared = inner.vars
        if declared:
            inner.set_values({k: v for k, v in self._values.items() if k in declared})
        self._staging.replay(inner)
        self._inner = inner
        self._factory = None
        self._roots = []
        self._staging = _Staging()

    def _asset(self) -> Asset:
        if self._inner is None:
            if not self.is_context_known():
                raise InvalidStateError(
                    f"cannot access {self!r} before supply_context is called"
                )
            self._resolve()
        assert self._inner is not None
        return self._inner

    @property
    def filters(self) -> List[Filter]:
        if self._inner is not None:
            return self._inner.filters
        return list(self._staging.filters)

    def ensure_filter(self, f: Filter):
        if self._inner is not None:
            self._inner.ensure_filter(f)
        else:
            self._staging.ensure_filter(f)

    def clear_filters(self):
        if self._inner is not None:
            self._inner.clear_filters()
        else:
            self._staging.filters = []

    def load(self, additional_filter: Optional[Filter] = None):
        self._asset().load(additional_filter)

    def dump(self, additional_filter: Optional[Filter] = None) -> bytes:
        return self._asset().dump(additional_filter)

    @property
    def content(self) -> Optional[bytes]:
        return self._asset().content

    @content.setter
    def content(self, content: Optional[bytes]):
        if self._inner is not None:
            self._inner.content = content
        else:
            self._staging.set_content(content)

    @property
    def source_root(self) -> Optional[str]:
        if self._inner is not None:
            return self._inner.source_root
        return None

    @property
    def source_path(self) -> Optional[str]:
        if self._inner is not None:
            return self._inner.source_path
        return self._input

    @property
    def source_directory(self) -> Optional[str]:
        return self._asset().source_directory

    @property
    def target_path(self) -> Optional[str]:
        if self._inner is not None:
            return self._inner.target_path
        return self._staging.target_path

    @target_path.setter
    def target_path(self, target_path: Optional[str]):
        if target_path is not None:
            variables.check_target_path(target_path, self._vars)
        if self._inner is not None:
            self._inner.target_path = target_path
        else:
            self._staging.set_target_path(target_path)

    @property
    def last_modified(self) -> Optional[float]:
        return self._asset().last_modified

    @property
    def vars(self) -> List[str]:
        return list(self._vars)

    @property
    def values(self) -> Dict[str, str]:
        if self._inner is not None:
            return self._inner.values
        return dict(self._values)

    def set_values(self, values: Mapping[str, str]):
        """Set the variable values, resolving the asset if the context is known.

        The values cannot change once the asset is resolved.
        """
        if self._inner is not None:
            raise InvalidStateError(f"cannot change the values of resolved {self!r}")
        variables.check_declared(values, self._vars, repr(self))
        self._values = dict(values)
        if self.is_context_known():
            self._resolve()


class DeferredAssetCollection(Asset):

    """An asset collection created once the base directory is known.

    Call supply_context exactly once before reading anything from the
    collection. Only ensure_filter and the content and target_path setters
    may be used before that.
    """

    def __init__(
        self,
        factory: AssetFactory,
        inputs: Sequence[str],
        filters: Sequence[str] = (),
        options: Optional[Mapping[str, Any]] = None,
    ):
        self._factory: Optional[AssetFactory] = factory
        self._inputs: List[str] = list(inputs)
        self._filters: List[str] = list(filters)
        self._options: Dict[str, Any] = dict(options or {})
        self._staging = _Staging()
        self._inner: Optional[AssetCollection] = None

    def __repr__(self) -> str:
        if self._inner is not None:
            return f"DeferredAssetCollection(inner={self._inner!r})"
        return f"DeferredAssetCollection(inputs={self._inputs!r})"

    def is_resolved(self) -> bool:
        return self._inner is not None

    def supply_context(
        self, base_dir: Optional[str], values: Optional[Mapping[str, str]] = None
    ):
        """Create the collection for inputs relative to base_dir.

        base_dir is a repository directory, or None if there is no template
        directory to resolve relative inputs against.
        """
        if self._inner is not None:
            raise InvalidStateError(f"the context of {self!r} was already supplied")
        assert self._factory is not None
        logging.debug("resolving %s in %s", self._inputs, base_dir)
        inner = self._factory.create_asset_for_base_dir(
            base_dir, self._inputs, self._filters, self._options
        )
        if values is not None:
            inner.set_values(values)
        self._staging.replay(inner)
        self._inner = inner
        self._factory = None
        self._inputs = []
        self._filters = []
        self._options = {}
        self._staging = _Staging()

    def _collection(self) -> AssetCollection:
        if self._inner is None:
            raise InvalidStateError(
                f"cannot access {self!r} before supply_context is called"
            )
        return self._inner

    def all(self) -> List[Asset]:
        return self._collection().all()

    def add(self, asset: Asset):
        self._collection().add(asset)

    def remove_leaf(self, leaf: Asset, graceful: bool = False) -> bool:
        return self._collection().remove_leaf(leaf, graceful)

    def replace_leaf(self, needle: Asset, replacement: Asset, graceful: bool = False) -> bool:
        return self._collection().replace_leaf(needle, replacement, graceful)

    def __iter__(self) -> Iterator[Asset]:
        return iter(self._collection())

    @property
    def filters(self) -> List[Filter]:
        return self._collection().filters

    def ensure_filter(self, f: Filter):
        if self._inner is not None:
            self._inner.ensure_filter(f)
        else:
            self._staging.ensure_filter(f)

    def clear_filters(self):
        self._collection().clear_filters()

    def load(self, additional_filter: Optional[Filter] = None):
        self._collection().load(additional_filter)

    def dump(self, additional_filter: Optional[Filter] = None) -> bytes:
        return self._collection().dump(additional_filter)

    @property
    def content(self) -> Optional[bytes]:
        return self._collection().content

    @content.setter
    def content(self, content: Optional[bytes]):
        if self._inner is not None:
            self._inner.content = content
        else:
            self._staging.set_content(content)

    @property
    def source_root(self) -> Optional[str]:
        return self._collection().source_root

    @property
    def source_path(self) -> Optional[str]:
        return self._collection().source_path

    @property
    def source_directory(self) -> Optional[str]:
        return self._collection().source_directory

    @property
    def target_path(self) -> Optional[str]:
        return self._collection().target_path

    @target_path.setter
    def target_path(self, target_path: Optional[str]):
        if self._inner is not None:
            self._inner.target_path = target_path
            return
        if target_path is not None:
            variables.check_target_path(target_path, self._options.get("vars", ()))
        self._staging.set_target_path(target_path)

    @property
    def last_modified(self) -> Optional[float]:
        return self._collection().last_modified

    @property
    def vars(self) -> List[str]:
        return self._collection().vars

    @property
    def values(self) -> Dict[str, str]:
        return self._collection().values

    def set_values(self, values: Mapping[str, str]):
        self._collection().set_values(values)
