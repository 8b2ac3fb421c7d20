import logging
import re
import sys
from argparse import Namespace
from pathlib import Path

import pytest

from assetlink import cli
from assetlink.logs import ColorFormatter, ExitStreamHandler, verbosity_level
from assetlink.files import CONFIG_FILE, FileSystem, create_project
from assetlink.project import Project, ProjectConfig
from assetlink.repository import UriRepository


@pytest.fixture
def project_dir(tmp_path, monkeypatch) -> Path:
    path = create_project(tmp_path, "site")
    monkeypatch.chdir(path)
    return path


def test_config_defaults():
    cfg = ProjectConfig.loads(Path(CONFIG_FILE), "project_name: site\nmounts: {/site: res}\n")
    cfg.validate()

    assert cfg["project_name"] == "site"
    assert cfg["mounts"] == {"/site": "res"}
    assert cfg["roots"] == []
    assert cfg["debug"] is False
    assert cfg.get("missing") is None


def test_config_errors(caplog):
    cfg = ProjectConfig.loads(Path(CONFIG_FILE), "debug: yes please\nwhatever: 1\n")
    with caplog.at_level(logging.ERROR):
        cfg.validate()

    messages = "\n".join(r.getMessage() for r in caplog.records)
    assert "missing 'project_name'" in messages
    assert "unknown key 'whatever'" in messages
    assert "'debug' must be a bool" in messages
    assert cfg["debug"] is False


def test_config_invalid_yaml(caplog):
    with caplog.at_level(logging.ERROR):
        cfg = ProjectConfig.loads(Path(CONFIG_FILE), "- a\n- b\n")

    assert cfg.data == {}
    assert caplog.records


def test_create_project(tmp_path):
    path = create_project(tmp_path, "site")

    assert (path / CONFIG_FILE).is_file()
    assert (path / "res" / "views" / "index.html.jinja").is_file()
    with pytest.raises(SystemExit):
        create_project(tmp_path, "site")


def test_find_project_from_subdirectory(project_dir, monkeypatch):
    monkeypatch.chdir(project_dir / "res" / "css")
    fs = FileSystem.find()

    assert fs.root.resolve() == project_dir.resolve()


def test_find_outside_of_project(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    with pytest.raises(SystemExit):
        FileSystem.find()


def test_project_repository(project_dir):
    project = Project.find()
    paths = [r.path for r in project.resources("/site/css/*")]

    assert project.name == "site"
    assert paths == ["/site/css/reset.css", "/site/css/style.css"]


def test_project_renders_templates(project_dir):
    project = Project.find()
    output = project.environment().get_template("/site/views/index.html.jinja").render(
        locale="en"
    )

    assert re.search(r'href="css/[0-9a-f]{7}\.css"', output)
    assert re.search(r'src="js/[0-9a-f]{7}\.en\.js"', output)


def test_project_with_schemes_and_roots(project_dir):
    (project_dir / "vendor" / "css").mkdir(parents=True)
    (project_dir / "vendor" / "css" / "grid.css").write_text("/* grid */\n")
    fs = FileSystem(project_dir)
    cfg = ProjectConfig.loads(
        fs.join(CONFIG_FILE),
        "project_name: site\n"
        "mounts: {/site: res}\n"
        "schemes: [resource]\n"
        "roots: [vendor]\n",
    )
    cfg.validate()
    project = Project(fs, cfg)

    assert isinstance(project.repo, UriRepository)
    asset = project.factory.create_asset(["resource:///site/css/style.css", "css/grid.css"])
    asset.supply_context(None)
    assert asset.dump() == b"body {\n  font-family: sans-serif;\n}\n\n/* grid */\n"


def test_missing_mount_is_skipped(project_dir, caplog):
    fs = FileSystem(project_dir)
    cfg = ProjectConfig.loads(fs.join(CONFIG_FILE), "project_name: x\nmounts: {/x: nope}\n")
    cfg.validate()
    with caplog.at_level(logging.ERROR):
        project = Project(fs, cfg)

    assert not project.repo.contains("/x")
    assert "nope not found" in caplog.text


def test_command_name(project_dir, capsys):
    args = Namespace(inputs=["../css/style.css"], dir="/site/views", filters=[], vars=[])
    cli.command_name(args)
    relative = capsys.readouterr().out

    args = Namespace(inputs=["/site/css/style.css"], dir=None, filters=[], vars=[])
    cli.command_name(args)
    absolute = capsys.readouterr().out

    assert re.fullmatch(r"[0-9a-f]{7}\n", relative)
    assert relative == absolute


def test_command_resolve(project_dir, capsys):
    args = Namespace(
        inputs=["../css/reset.css", "../js/messages.{locale}.js"],
        dir="/site/views",
        debug=True,
        vars=["locale=en"],
    )
    cli.command_resolve(args)
    out = capsys.readouterr().out

    assert "/site/css/reset.css -> assets/" in out
    assert "_reset_1.{locale}" in out
    assert "_messages_2.{locale}" in out


def test_command_list(project_dir, capsys):
    cli.command_list(Namespace(glob="/site/js/*", files=False))

    assert capsys.readouterr().out == "/site/js/messages.en.js\n"


def test_parse_values():
    assert cli.parse_values(["a=1", "b=x=y"]) == {"a": "1", "b": "x=y"}
    with pytest.raises(SystemExit):
        cli.parse_values(["nope"])


@pytest.fixture
def run(monkeypatch):
    """Run the command line tool, restoring the root logger afterwards."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level

    def run(*args: str):
        monkeypatch.setattr(sys, "argv", ["assetlink", *args])
        cli.main()

    yield run
    root.handlers[:] = handlers
    root.setLevel(level)


def exit_handler() -> ExitStreamHandler:
    return next(h for h in logging.getLogger().handlers if isinstance(h, ExitStreamHandler))


def test_main_reports_asset_errors(project_dir, run, capsys):
    with pytest.raises(SystemExit) as info:
        run("resolve", "missing.css", "-d", "/site")

    assert info.value.code == 1
    err = capsys.readouterr().err
    assert err.startswith("assetlink: FATAL: asset 'missing.css' not found in: /site, ")


def test_main_render(project_dir, run, capsys):
    run("render", "/site/views/index.html.jinja", "--var", "locale=en")
    out = capsys.readouterr().out

    assert re.search(r'<link href="css/[0-9a-f]{7}\.css" rel="stylesheet">', out)
    assert re.search(r'<script src="js/[0-9a-f]{7}\.en\.js"></script>', out)


def test_main_new(tmp_path, monkeypatch, run, capsys):
    monkeypatch.chdir(tmp_path)
    run("new", "blog")

    assert "Creating a new assetlink project in blog/" in capsys.readouterr().out
    assert (tmp_path / "blog" / CONFIG_FILE).is_file()


def test_main_help(run, capsys):
    run("help", "resolve")

    assert "usage: assetlink resolve" in capsys.readouterr().out


def test_errors_exit_unless_keep_going(project_dir, run, capsys):
    run("list", "/nothing/*")
    assert exit_handler().exit_level == logging.ERROR
    with pytest.raises(SystemExit):
        logging.error("broken")

    logging.getLogger().handlers.remove(exit_handler())
    run("list", "-k", "/nothing/*")
    assert exit_handler().exit_level == logging.FATAL
    logging.error("broken")

    assert "assetlink: ERROR: broken" in capsys.readouterr().err


@pytest.mark.parametrize(
    "verbose, level",
    [(None, logging.WARNING), (0, logging.WARNING), (1, logging.INFO), (2, logging.DEBUG)],
)
def test_verbosity_level(verbose, level):
    assert verbosity_level(verbose) == level


def test_color_formatter():
    record = logging.LogRecord("x", logging.ERROR, __file__, 1, "bad %s", ("input",), None)

    assert ColorFormatter(use_color=False).format(record) == "assetlink: ERROR: bad input"
    assert ColorFormatter(use_color=True).format(record) == (
        "assetlink: \x1b[31;1mERROR:\x1b[0m bad input"
    )
