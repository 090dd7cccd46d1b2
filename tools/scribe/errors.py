"""
Error taxonomy for scribe.

Every failure the generator can report derives from ``ScribeError`` so the
CLI can turn it into a message and a non-zero exit status.
"""

from typing import Optional, Tuple


class ScribeError(Exception):
    """Base class for all generator errors."""
    pass


class InputError(ScribeError):
    """The protocol file is missing or unreadable."""
    pass


class ConfigError(ScribeError):
    """Generation options (CLI or YAML) are invalid."""
    pass


class OutputError(ScribeError):
    """A generated artifact could not be written."""
    pass


class SchemaError(ScribeError):
    """The protocol document is not structurally usable."""
    pass


class NotAProtocolDocument(SchemaError):
    def __init__(self, tag: str):
        super().__init__(
            f"The file is not a wayland protocol file (root element is <{tag}>)")
        self.tag = tag


class MissingProtocolName(SchemaError):
    def __init__(self):
        super().__init__("Missing protocol name")


class Malformed(SchemaError):
    """Lower-level XML error; ``position`` is (line, column) when known."""

    def __init__(self, message: str, position: Optional[Tuple[int, int]] = None):
        super().__init__(f"XML error: {message}")
        self.position = position
