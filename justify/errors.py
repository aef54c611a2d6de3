# justify/errors.py
from __future__ import annotations


class JustifyError(Exception):
    """Base class for errors raised by justify."""


class ParseError(JustifyError):
    """Malformed input: a template or a persisted JSON document."""


class TemplateParseError(ParseError):
    pass


class TemplateExecutionError(JustifyError):
    """Template referenced a field the render options do not define."""


class RegistryParseError(ParseError):
    pass


class StateParseError(ParseError):
    pass


class NotFoundError(JustifyError, FileNotFoundError):
    """A persisted file is absent. Callers may fall back to defaults."""


class RegistryNotFoundError(NotFoundError):
    pass


class StateNotFoundError(NotFoundError):
    pass


class AlreadyExistsError(JustifyError, FileExistsError):
    """A destructive write was refused without an explicit override."""


class UnknownTargetError(JustifyError):
    def __init__(self, name: str) -> None:
        super().__init__(f"unknown target: {name}")
        self.name = name


class NoTargetsError(JustifyError):
    def __init__(self) -> None:
        super().__init__("no targets")


class ProjectTypeNotDetectedError(JustifyError):
    pass


class JustifyConfigError(JustifyError):
    """Config error in .justify/config.toml"""
