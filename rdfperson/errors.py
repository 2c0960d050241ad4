"""Error taxonomy for record construction, parsing, registry and store access.

Entity errors are never recovered internally: a ValidationError raised by a
constructor reaches the caller of Registry.create() unchanged.
"""

from __future__ import annotations


class RdfPersonError(Exception):
    """Base class for every error raised by this package."""


class ValidationError(RdfPersonError, ValueError):
    """A field is missing, empty, out of range, or inconsistent."""

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


class ParseError(RdfPersonError, ValueError):
    """Fixed-pattern extraction could not find a required sub-pattern."""

    def __init__(self, message: str, missing: list[str] | None = None):
        self.missing = list(missing or [])
        super().__init__(message)


class UnregisteredClassError(RdfPersonError, LookupError):
    """A registry operation referenced a class name that is not registered."""

    def __init__(self, name: str, message: str | None = None):
        self.name = name
        super().__init__(message or f'Class "{name}" is not registered')


class ConfigError(RdfPersonError):
    """Invalid configuration: duplicate registration, bad connector settings."""


class TriplestoreError(RdfPersonError):
    """An HTTP request to the triple store failed."""

    def __init__(self, operation: str, message: str, status_code: int | None = None):
        self.operation = operation
        self.status_code = status_code
        super().__init__(f"{operation} failed: {message}")
