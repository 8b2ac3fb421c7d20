"""Generated asset names."""

from __future__ import annotations

import hashlib
import json
import logging
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Sequence

from assetlink.errors import InvalidStateError

if TYPE_CHECKING:
    # pylint: disable=cyclic-import
    from assetlink.factory import AssetFactory

NAME_LENGTH = 7


def fingerprint(
    inputs: Sequence[str], filters: Sequence[str], options: Mapping[str, Any]
) -> str:
    """Return a short hash identifying an asset.

    The "name" option is ignored, since it is what the hash stands in for.
    """
    options = {k: v for k, v in options.items() if k != "name"}
    data = json.dumps([list(inputs), list(filters), options], sort_keys=True, default=str)
    return hashlib.sha1(data.encode("utf-8")).hexdigest()[:NAME_LENGTH]


class DeferredAssetName:

    """An asset name that is generated once the base directory is known.

    Call supply_context exactly once before using the name.
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
        self._name: Optional[str] = None

    def __repr__(self) -> str:
        if self._name is None:
            return f"DeferredAssetName(inputs={self._inputs!r})"
        return f"DeferredAssetName(name={self._name!r})"

    def __str__(self) -> str:
        return self.name

    def is_resolved(self) -> bool:
        return self._name is not None

    def supply_context(self, base_dir: Optional[str]):
        """Generate the name for inputs relative to base_dir."""
        if self._name is not None:
            raise InvalidStateError(f"the base directory of {self!r} was already set")
        assert self._factory is not None
        self._name = self._factory.generate_asset_name_for_base_dir(
            base_dir, self._inputs, self._filters, self._options
        )
        logging.debug("generated asset name %s for %s", self._name, self._inputs)
        self._factory = None
        self._inputs = []
        self._filters = []
        self._options = {}

    @property
    def name(self) -> str:
        if self._name is None:
            raise InvalidStateError(
                "the asset name is not known until supply_context is called"
            )
        return self._name
