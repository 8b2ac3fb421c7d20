"""File structure of assetlink projects."""

import logging
import os.path
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from assetlink import defaults
from assetlink.logs import fatal

CONFIG_FILE = "assetlink.yml"


def create_project(parent: Path, project_name: str) -> Path:
    """Create a skeleton project named project_name in parent.

    Exits with a fatal log if the project directory already exists.
    """

    def create(root: Path, structure: Mapping[str, Any]):
        for name, val in structure.items():
            path = root / name
            if isinstance(val, dict):
                path.mkdir()
                create(path, val)
            elif isinstance(val, str):
                with open(path, "x") as f:
                    f.write(val)
            else:
                raise TypeError(f"unexpected type in project structure: {type(val)}")

    try:
        create(parent, defaults.structure(project_name))
    except FileExistsError as ex:
        fatal("%s already exists", ex.filename)
    return parent / project_name


class FileSystem:

    """The directory of a project, containing its assetlink.yml."""

    def __init__(self, root: Path):
        self.root = root

    def __repr__(self) -> str:
        return f"FileSystem(root={self.root!r})"

    @staticmethod
    def find(start: Optional[Path] = None) -> "FileSystem":
        """Find the project root by searching upwards for assetlink.yml.

        Starts in the current directory by default. Exits with a fatal log if
        no directory up to the file system root contains the file.
        """
        cwd = Path.cwd()
        path = (start or cwd).resolve()
        while True:
            config = path / CONFIG_FILE
            if config.is_file():
                # os.path.relpath rather than Path.relative_to, which does not
                # go up directories.
                return FileSystem(Path(os.path.relpath(path, cwd)))
            if path == path.parent:
                fatal("not in an assetlink project (no %s found)", CONFIG_FILE)
            path = path.parent

    def join(self, path: Union[str, Path]) -> Path:
        """Get a path within the project."""
        return self.root / path

    def _existing(self, path: Union[str, Path], kind: str) -> Optional[Path]:
        path = self.root / path
        if not path.exists():
            logging.error("%s %s not found", kind, path)
            return None
        if (kind == "directory") != path.is_dir():
            logging.error("%s is not a %s", path, kind)
            return None
        return path

    def dir(self, path: Union[str, Path]) -> Optional[Path]:
        """Get a directory that is expected to exist, logging an error if not."""
        return self._existing(path, "directory")

    def file(self, path: Union[str, Path]) -> Optional[Path]:
        """Get a file that is expected to exist, logging an error if not."""
        return self._existing(path, "file")
