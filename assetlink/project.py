"""assetlink project."""

from __future__ import annotations

import logging
from typing import Any, Iterator

from jinja2 import Environment

from assetlink.config import Config
from assetlink.factory import AssetFactory
from assetlink.files import CONFIG_FILE, FileSystem
from assetlink.logs import fatal
from assetlink.repository import InMemoryRepository, ResourceRepository, UriRepository
from assetlink.resource import Resource
from assetlink.templating import asset_environment


class ProjectConfig(Config):

    required = {
        "project_name": "Unnamed Project",
        "mounts": {},
    }

    optional = {
        "root": ".",
        "roots": [],
        "schemes": [],
        "debug": False,
        "output": "assets/*",
    }


class Project:

    """An assetlink project.

    A project is a directory with an assetlink.yml file. The configuration
    mounts directories of the project into a repository, for example:

        project_name: site
        mounts:
          /site: res
        roots: [vendor]
        schemes: [resource]

    Mounting walks the directories, but no file is read until it is needed.
    Paths in the configuration are relative to the project directory.
    """

    def __init__(self, fs: FileSystem, cfg: ProjectConfig):
        self.fs = fs
        self.cfg = cfg
        self.name = cfg["project_name"]
        self.repo = self.build_repository()
        self.factory = AssetFactory(
            self.repo,
            fs.join(cfg["root"]),
            debug=cfg["debug"],
            output=cfg["output"],
            extra_roots=[str(fs.join(r)) for r in cfg["roots"]],
        )

    def __repr__(self) -> str:
        return f"Project(name={self.name!r}, path={self.fs.root!r})"

    @staticmethod
    def find() -> Project:
        """Find the project based on the current working directory."""
        fs = FileSystem.find()
        logging.info("found project %s", fs.root.resolve())
        cfg_path = fs.file(CONFIG_FILE)
        if cfg_path is None:
            fatal("%s disappeared", CONFIG_FILE)
        cfg = ProjectConfig.load(cfg_path)
        cfg.validate()
        logging.debug("project config: %r", cfg)
        return Project(fs, cfg)

    def build_repository(self) -> ResourceRepository:
        """Mount the configured directories into a new repository."""
        repo = InMemoryRepository()
        for path, directory in sorted(self.cfg["mounts"].items()):
            local = self.fs.dir(str(directory))
            if local is None:
                continue
            try:
                repo.add(str(path), local)
            except ValueError as ex:
                logging.error("%s: invalid mount %r: %s", CONFIG_FILE, path, ex)
        if not self.cfg["schemes"]:
            return repo
        uri_repo = UriRepository()
        for scheme in self.cfg["schemes"]:
            uri_repo.register(scheme, repo)
        return uri_repo

    def resources(self, glob: str = "/**") -> Iterator[Resource]:
        """Iterate over the resources matching glob, in path order."""
        yield from self.repo.find(glob)

    def environment(self, **kwargs: Any) -> Environment:
        """Return a Jinja2 environment for the templates in the repository."""
        return asset_environment(self.repo, self.factory, **kwargs)
