"""Deferred resolution and naming of assets referenced by templates."""

from assetlink.asset import Asset
from assetlink.collection import AssetCollection
from assetlink.deferred import DeferredAsset, DeferredAssetCollection
from assetlink.errors import (
    AssetError,
    AssetNotFoundError,
    InvalidStateError,
    MissingVariableError,
    ResourceNotFoundError,
    UnsupportedSchemeError,
)
from assetlink.factory import AssetFactory
from assetlink.naming import DeferredAssetName
from assetlink.repository import InMemoryRepository, UriRepository

__all__ = [
    "Asset",
    "AssetCollection",
    "AssetError",
    "AssetFactory",
    "AssetNotFoundError",
    "DeferredAsset",
    "DeferredAssetCollection",
    "DeferredAssetName",
    "InMemoryRepository",
    "InvalidStateError",
    "MissingVariableError",
    "ResourceNotFoundError",
    "UnsupportedSchemeError",
    "UriRepository",
]
