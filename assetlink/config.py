"""YAML configuration."""

import logging
from abc import ABC, abstractmethod
from io import StringIO
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, TextIO, Type, TypeVar

import yaml

T = TypeVar("T", bound="Config")


class Config(ABC):

    """Abstract base class for YAML configuration.

    Subclasses define the "required" and "optional" keys with their defaults.
    The type of a default is also the expected type of the value, unless the
    default is None.

    Example usage:

        cfg = ProjectConfig.load(Path("assetlink.yml"))
        cfg.validate(root=".")

    The creator must call validate(), passing any context-dependent defaults
    as keyword arguments.
    """

    def __init__(self, path: Path, data: Mapping[str, Any]):
        self.path = path
        self.data = data

    def __repr__(self) -> str:
        name = self.__class__.__name__
        return f"{name}(path={self.path!r}, data={self.data!r})"

    @property
    @abstractmethod
    def required(self) -> Dict[str, Any]:
        """Required configuration keys and their defaults."""

    @property
    @abstractmethod
    def optional(self) -> Dict[str, Any]:
        """Optional configuration keys and their defaults."""

    def validate(self, **defaults: Any):
        """Validate the loaded configuration and fill in defaults.

        Missing required keys, unknown keys and values of the wrong type are
        logged as errors. The offending values are replaced by defaults.
        """
        known = {**self.required, **self.optional}
        for key in self.required:
            if key not in self.data:
                logging.error("%s: missing %r", self.path, key)
        data = dict(self.data)
        for key, val in self.data.items():
            if key not in known:
                logging.error("%s: unknown key %r", self.path, key)
                continue
            default = known[key]
            if default is not None and not isinstance(val, type(default)):
                logging.error(
                    "%s: %r must be a %s, got %s",
                    self.path,
                    key,
                    type(default).__name__,
                    type(val).__name__,
                )
                del data[key]
        self.data = {**known, **defaults, **data}

    @classmethod
    def load(cls: Type[T], path: Path) -> T:
        """Load configuration from a file."""
        with open(path) as f:
            return cls.load_from(path, f)

    @classmethod
    def loads(cls: Type[T], path: Path, content: str) -> T:
        """Load configuration from a string."""
        return cls.load_from(path, StringIO(content))

    @classmethod
    def load_from(cls: Type[T], path: Path, content: TextIO) -> T:
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as ex:
            logging.error("cannot parse %s: %s", path, ex)
            data = {}
        if data is None:
            data = {}
        if not isinstance(data, dict):
            logging.error("invalid YAML in %s: %s", path, type(data))
            data = {}
        return cls(path, data)

    def __getitem__(self, key: str) -> Any:
        return self.data[key]

    def get(self, key: str) -> Optional[Any]:
        """Get a configuration value, or None if it does not exist."""
        return self.data.get(key)
