from __future__ import annotations


class MixdownError(Exception):
    """Base class for failures that abort a site build."""


class SourceError(MixdownError):
    pass


class ParseError(MixdownError):
    pass


class ConfigError(MixdownError):
    pass


class RenderError(MixdownError):
    pass


class TemplateNotFoundError(RenderError):
    def __init__(self, name: str):
        super().__init__(f"template {name!r} not found")
        self.name = name
