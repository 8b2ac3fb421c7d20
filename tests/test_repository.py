import os.path

import pytest

from assetlink.errors import ResourceNotFoundError, UnsupportedSchemeError
from assetlink.repository import InMemoryRepository, UriRepository, glob_to_regex
from assetlink.resource import DirectoryResource, FileResource, StringResource


def test_mount_directory(repo, fixtures_dir):
    resource = repo.get("/webmozart/puli/css/style.css")

    assert isinstance(resource, FileResource)
    assert resource.local_path == os.path.join(fixtures_dir, "css", "style.css")
    assert resource.name == "style.css"
    assert not resource.is_loaded()
    assert resource.content == b"/* style.css */\n"
    assert resource.is_loaded()
    resource.unload()
    assert not resource.is_loaded()


def test_parent_directories_are_created(repo):
    assert isinstance(repo.get("/webmozart"), DirectoryResource)
    assert isinstance(repo.get("/webmozart/puli/css"), DirectoryResource)
    assert repo.contains("/")


def test_get_missing(repo):
    with pytest.raises(ResourceNotFoundError):
        repo.get("/webmozart/puli/css/missing.css")


def test_relative_paths_are_rejected(repo):
    with pytest.raises(ValueError):
        repo.get("css/style.css")


def test_paths_are_normalized(repo):
    assert repo.contains("/webmozart/puli/views/../css/./style.css")


def test_find_glob(repo):
    paths = [r.path for r in repo.find("/webmozart/puli/css/*.css")]

    assert paths == ["/webmozart/puli/css/reset.css", "/webmozart/puli/css/style.css"]


def test_find_recursive_glob(repo):
    paths = [r.path for r in repo.find("/webmozart/puli/**/style.css")]

    assert paths == [
        "/webmozart/puli/css/style.css",
        "/webmozart/puli/custom-root/css/style.css",
    ]


def test_find_plain_path(repo):
    assert [r.path for r in repo.find("/webmozart/puli/css/style.css")] == [
        "/webmozart/puli/css/style.css"
    ]
    assert repo.find("/webmozart/puli/css/missing.css") == []


def test_contains_glob(repo):
    assert repo.contains("/webmozart/puli/js/*.js")
    assert not repo.contains("/webmozart/puli/js/*.coffee")


@pytest.mark.parametrize(
    "glob, path, matches",
    [
        ("/a/*.css", "/a/b.css", True),
        ("/a/*.css", "/a/b/c.css", False),
        ("/a/**.css", "/a/b/c.css", True),
        ("/a/b.css", "/a/bxcss", False),
    ],
)
def test_glob_to_regex(glob, path, matches):
    assert bool(glob_to_regex(glob).match(path)) == matches


def test_add_string_resource():
    repo = InMemoryRepository()
    repo.add("/app/config.json", StringResource("/ignored", b"{}", 42.0))
    resource = repo.get("/app/config.json")

    assert resource.path == "/app/config.json"
    assert resource.content == b"{}"
    assert resource.last_modified_at == 42.0
    assert resource.local_path is None


def test_add_missing_source(tmp_path):
    with pytest.raises(FileNotFoundError):
        InMemoryRepository().add("/x", tmp_path / "missing")


def test_add_single_file(tmp_path):
    path = tmp_path / "app.js"
    path.write_text("x")
    repo = InMemoryRepository()
    repo.add("/js/app.js", path)

    assert repo.get("/js/app.js").content == b"x"


def test_uri_repository(repo, uri_repo):
    assert uri_repo.supported_schemes() == ["resource"]
    assert uri_repo.get("resource:///webmozart/puli/css/style.css").path == (
        "/webmozart/puli/css/style.css"
    )
    # Plain paths use the first registered scheme.
    assert uri_repo.contains("/webmozart/puli/css/style.css")
    assert len(uri_repo.find("resource:///webmozart/puli/css/*.css")) == 2


def test_uri_repository_unknown_scheme(uri_repo):
    with pytest.raises(UnsupportedSchemeError):
        uri_repo.get("other:///webmozart/puli/css/style.css")


def test_uri_repository_invalid_scheme(repo):
    with pytest.raises(ValueError):
        UriRepository().register("Not A Scheme", repo)
