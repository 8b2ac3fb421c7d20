import pytest

from assetlink.asset import FileAsset, RepositoryPathAsset
from assetlink.deferred import DeferredAsset
from assetlink.errors import InvalidStateError, MissingVariableError
from assetlink.filters import CallbackFilter


def test_collection_cannot_be_read_before_context(factory):
    asset = factory.create_asset(["css/style.css"])

    assert not asset.is_resolved()
    with pytest.raises(InvalidStateError):
        asset.load()
    with pytest.raises(InvalidStateError):
        list(asset)
    with pytest.raises(InvalidStateError):
        asset.target_path
    with pytest.raises(InvalidStateError):
        asset.vars
    with pytest.raises(InvalidStateError):
        asset.set_values({})


def test_collection_context_is_supplied_once(factory):
    asset = factory.create_asset(["css/style.css"])
    asset.supply_context("/webmozart/puli")

    assert asset.is_resolved()
    with pytest.raises(InvalidStateError):
        asset.supply_context("/webmozart/puli")


def test_collection_content_is_stable(factory):
    asset = factory.create_asset(["css/style.css"])
    asset.supply_context("/webmozart/puli")

    first = asset.dump()
    second = asset.dump()
    assert first == second == b"/* style.css */\n"


def test_collection_replays_staged_writes(factory):
    def mark(asset):
        asset.content += b"/* marked */\n"

    marker = CallbackFilter(dump=mark)
    asset = factory.create_asset(["css/style.css"])
    asset.ensure_filter(marker)
    asset.ensure_filter(marker)
    asset.target_path = "css/main.css"
    asset.supply_context("/webmozart/puli")

    assert asset.filters == [marker]
    assert asset.target_path == "css/main.css"
    assert [leaf.target_path for leaf in asset] == ["css/main_style_1.css"]
    assert asset.dump() == b"/* style.css */\n/* marked */\n"


def test_collection_replays_staged_content(factory):
    asset = factory.create_asset(["css/style.css"])
    asset.content = b"preset"
    asset.supply_context("/webmozart/puli")

    assert asset.content == b"preset"


def test_collection_rejects_target_path_without_variables(factory):
    asset = factory.create_asset(["js/messages.{locale}.js"], options={"vars": ["locale"]})

    with pytest.raises(InvalidStateError):
        asset.target_path = "js/messages.js"
    asset.target_path = "js/messages.{locale}.js"


def test_collection_values(factory):
    asset = factory.create_asset(["js/messages.{locale}.js"], options={"vars": ["locale"]})
    asset.supply_context("/webmozart/puli", {"locale": "en"})

    assert asset.vars == ["locale"]
    assert asset.values == {"locale": "en"}
    assert asset.target_path.endswith(".{locale}.js")
    assert asset.dump() == b"/* messages.en.js */\n"


def test_collection_rejects_undeclared_values(factory):
    asset = factory.create_asset(["css/style.css"])
    with pytest.raises(ValueError):
        asset.supply_context("/webmozart/puli", {"locale": "en"})


def test_collection_without_values_fails_on_load(factory):
    asset = factory.create_asset(["js/messages.{locale}.js"], options={"vars": ["locale"]})
    asset.supply_context("/webmozart/puli")

    with pytest.raises(MissingVariableError):
        asset.load()


def test_asset_needs_context(factory, fixtures_dir):
    asset = DeferredAsset(factory, "css/style.css", [fixtures_dir])

    assert asset.source_path == "css/style.css"
    assert asset.source_root is None
    with pytest.raises(InvalidStateError):
        asset.load()
    with pytest.raises(InvalidStateError):
        asset.content
    with pytest.raises(InvalidStateError):
        asset.last_modified


def test_asset_resolves_lazily_with_known_base_dir(factory, fixtures_dir):
    asset = DeferredAsset(factory, "css/style.css", [fixtures_dir], base_dir="/webmozart/puli")

    assert not asset.is_resolved()
    asset.load()
    assert asset.is_resolved()
    assert asset.content == b"/* style.css */\n"
    assert asset.source_path == "/webmozart/puli/css/style.css"


def test_asset_resolves_when_values_are_supplied(factory, fixtures_dir):
    asset = DeferredAsset(factory, "js/messages.{locale}.js", [fixtures_dir], ["locale"])
    asset.supply_context("/webmozart/puli", {"locale": "en"})

    assert asset.is_resolved()
    assert asset.values == {"locale": "en"}
    assert asset.source_path == "/webmozart/puli/js/messages.{locale}.js"
    assert asset.dump() == b"/* messages.en.js */\n"


def test_asset_waits_for_values(factory, fixtures_dir):
    asset = DeferredAsset(factory, "js/messages.{locale}.js", [fixtures_dir], ["locale"])
    asset.supply_context("/webmozart/puli")

    assert not asset.is_resolved()
    asset.set_values({"locale": "en"})
    assert asset.is_resolved()
    with pytest.raises(InvalidStateError):
        asset.set_values({"locale": "de"})


def test_asset_context_is_supplied_once(factory, fixtures_dir):
    asset = DeferredAsset(factory, "css/style.css", [fixtures_dir])
    asset.supply_context(None)

    with pytest.raises(InvalidStateError):
        asset.supply_context(None)


def test_asset_without_base_dir_searches_roots(factory, fixtures_dir):
    asset = DeferredAsset(factory, "css/style.css", [fixtures_dir])
    asset.supply_context(None)
    asset.load()

    assert asset.source_root == fixtures_dir
    assert asset.content == b"/* style.css */\n"


def test_asset_rejects_target_path_without_variables(factory, fixtures_dir):
    with pytest.raises(InvalidStateError):
        DeferredAsset(
            factory,
            "js/messages.{locale}.js",
            [fixtures_dir],
            ["locale"],
            target_path="js/messages.js",
        )

    asset = DeferredAsset(
        factory,
        "js/messages.{locale}.js",
        [fixtures_dir],
        ["locale"],
        target_path="js/messages.{locale}.js",
    )
    with pytest.raises(InvalidStateError):
        asset.target_path = "js/all.js"
    assert asset.target_path == "js/messages.{locale}.js"


def test_asset_replays_staged_writes(factory, fixtures_dir):
    def strip(asset):
        asset.content = asset.content.strip()

    strip_filter = CallbackFilter(load=strip)
    asset = DeferredAsset(factory, "css/style.css", [fixtures_dir])
    asset.ensure_filter(strip_filter)
    asset.target_path = "css/out.css"
    asset.supply_context("/webmozart/puli")
    asset.load()

    assert asset.filters == [strip_filter]
    assert asset.target_path == "css/out.css"
    assert asset.content == b"/* style.css */"


def test_asset_resolves_to_file_asset(factory, fixtures_dir):
    asset = DeferredAsset(factory, "js/messages.{locale}.js", [fixtures_dir], ["locale"])
    asset.supply_context("/nowhere", {"locale": "en"})

    inner = asset._asset()
    assert isinstance(inner, FileAsset)
    assert inner.source_path == "js/messages.{locale}.js"
    assert inner.values == {"locale": "en"}


def test_asset_resolves_to_repository_asset(factory, fixtures_dir):
    asset = DeferredAsset(factory, "/webmozart/puli/css/style.css", [fixtures_dir])
    asset.supply_context(None)

    assert isinstance(asset._asset(), RepositoryPathAsset)


def test_name_lifecycle(factory):
    name = factory.generate_asset_name("css/style.css")

    with pytest.raises(InvalidStateError):
        str(name)
    name.supply_context("/webmozart/puli")
    assert len(name.name) == 7
    assert name.name.isalnum()
    with pytest.raises(InvalidStateError):
        name.supply_context("/webmozart/puli")
