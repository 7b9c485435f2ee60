"""Template variable interpolation.

Resolves ``$name``, ``${name}``, ``${name:format}`` and ``[[name]]`` tokens
against request-scoped variables first and dashboard variables second.
Multi-value variables are rendered according to the requested format:

- ``glob`` (default): ``{a,b}``
- ``regex``: ``(a|b)`` with every value regex-escaped
- ``csv``: ``a,b``
- ``pipe``: ``a|b``

Unknown variables are left untouched.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Protocol

_VARIABLE_PATTERN = re.compile(
    r"\$(\w+)|\[\[([\s\S]+?)(?::(\w+))?\]\]|\$\{(\w+)(?:\.([^:^}]+))?(?::(\w+))?\}"
)
_REGEX_SPECIAL = re.compile(r"[\\^$*+?.()|\[\]{}/]")


def regex_escape(value: str) -> str:
    """Escape characters that have a meaning inside a regular expression."""
    return _REGEX_SPECIAL.sub(lambda m: "\\" + m.group(0), value)


class TemplateInterpolator(Protocol):
    """What the data source needs from the dashboard's template service."""

    def replace(
        self,
        text: str | None,
        scoped_vars: dict[str, Any] | None = None,
        fmt: str | None = None,
    ) -> str: ...

    def variable_names(self) -> list[str]: ...


@dataclass
class TemplateVariable:
    """A dashboard template variable and its current value."""

    name: str
    value: str | list[str] = ""
    text: str | list[str] | None = None


@dataclass
class TemplateSrv:
    """Interpolates template tokens against scoped and dashboard variables."""

    variables: list[TemplateVariable] = field(default_factory=list)

    def variable_names(self) -> list[str]:
        return [f"${v.name}" for v in self.variables]

    def _lookup(self, name: str, scoped_vars: dict[str, Any]) -> Any:
        if name in scoped_vars:
            scoped = scoped_vars[name]
            if isinstance(scoped, dict):
                return scoped.get("value")
            return scoped
        for variable in self.variables:
            if variable.name == name:
                return variable.value
        return None

    def replace(
        self,
        text: str | None,
        scoped_vars: dict[str, Any] | None = None,
        fmt: str | None = None,
    ) -> str:
        """Substitute every variable token found in ``text``."""
        if not text:
            return text or ""
        scoped_vars = scoped_vars or {}

        def _substitute(match: re.Match[str]) -> str:
            name = match.group(1) or match.group(2) or match.group(4)
            token_format = match.group(3) or match.group(6)
            value = self._lookup(name, scoped_vars)
            if value is None:
                return match.group(0)
            return format_value(value, token_format or fmt)

        return _VARIABLE_PATTERN.sub(_substitute, text)


def format_value(value: Any, fmt: str | None = None) -> str:
    """Render a variable value for the given interpolation format."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        value = str(value)

    if fmt == "regex":
        if isinstance(value, str):
            return regex_escape(value)
        escaped = [regex_escape(str(v)) for v in value]
        if len(escaped) == 1:
            return escaped[0]
        return "(" + "|".join(escaped) + ")"

    if fmt == "csv":
        return value if isinstance(value, str) else ",".join(str(v) for v in value)

    if fmt == "pipe":
        return value if isinstance(value, str) else "|".join(str(v) for v in value)

    if isinstance(value, str):
        return value
    if len(value) == 1:
        return str(value[0])
    return "{" + ",".join(str(v) for v in value) + "}"
