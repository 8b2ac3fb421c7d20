import os.path

import pytest

from assetlink.factory import AssetFactory
from assetlink.repository import InMemoryRepository, UriRepository

FIXTURES = os.path.abspath(os.path.join(os.path.dirname(__file__), "fixtures"))


@pytest.fixture
def fixtures_dir() -> str:
    return FIXTURES


@pytest.fixture
def repo() -> InMemoryRepository:
    repo = InMemoryRepository()
    repo.add("/webmozart/puli", FIXTURES)
    return repo


@pytest.fixture
def uri_repo(repo) -> UriRepository:
    uri_repo = UriRepository()
    uri_repo.register("resource", repo)
    return uri_repo


@pytest.fixture
def factory(repo) -> AssetFactory:
    return AssetFactory(repo, FIXTURES)


@pytest.fixture
def uri_factory(uri_repo) -> AssetFactory:
    return AssetFactory(uri_repo, FIXTURES)
