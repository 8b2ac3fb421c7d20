"""Errors raised while resolving assets."""

from typing import Iterable, Optional


class AssetError(Exception):
    """Base class for all asset errors."""


class AssetNotFoundError(AssetError):

    """No candidate location satisfies an asset input.

    The searched locations are kept in order so that the message shows exactly
    where the input was looked for.
    """

    def __init__(self, input: str, searched: Iterable[str] = (), reason: str = ""):
        self.input = input
        self.searched = list(searched)
        message = f"asset {input!r} not found"
        if self.searched:
            message += " in: " + ", ".join(self.searched)
        if reason:
            message += f" ({reason})"
        super().__init__(message)


class InvalidStateError(AssetError):
    """An operation was invoked in the wrong lifecycle state."""


class MissingVariableError(AssetError):

    """A declared variable has no value."""

    def __init__(self, variable: str, template: Optional[str] = None):
        self.variable = variable
        self.template = template
        message = f"variable {variable!r} has no value"
        if template is not None:
            message += f" in {template!r}"
        super().__init__(message)


class UnsupportedSchemeError(AssetError):
    """A URI uses a scheme that the repository does not serve."""


class ResourceNotFoundError(AssetError):
    """A repository path does not exist."""
