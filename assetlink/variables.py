"""Asset variables.

Inputs and target paths can contain "{name}" placeholders for declared
variables. For example "js/messages.{locale}.js" with the variable "locale"
becomes "js/messages.en.js" once the value "en" is known.
"""

from typing import Iterable, Mapping

from assetlink.errors import InvalidStateError, MissingVariableError


def placeholder(var: str) -> str:
    return "{" + var + "}"


def has_placeholders(template: str, vars: Iterable[str]) -> bool:
    """Return true if template mentions any of the declared variables."""
    return any(placeholder(var) in template for var in vars)


def resolve(template: str, vars: Iterable[str], values: Mapping[str, str]) -> str:
    """Substitute the values of the declared variables in template.

    Only placeholders of declared variables are replaced. Raises
    MissingVariableError if a placeholder occurs but its value is unknown.
    """
    for var in vars:
        key = placeholder(var)
        if key not in template:
            continue
        if var not in values:
            raise MissingVariableError(var, template)
        template = template.replace(key, str(values[var]))
    return template


def check_target_path(target_path: str, vars: Iterable[str]):
    """Require every declared variable to occur in target_path.

    Otherwise assets that differ only in their variable values would all be
    written to the same target.
    """
    for var in vars:
        if placeholder(var) not in target_path:
            raise InvalidStateError(
                f"target path {target_path!r} must contain {placeholder(var)!r}"
            )


def check_declared(values: Mapping[str, str], vars: Iterable[str], owner: str):
    """Reject values for variables that were never declared."""
    declared = set(vars)
    for var in values:
        if var not in declared:
            raise ValueError(f"{owner} has no variable named {var!r}")
