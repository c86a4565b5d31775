"""
Error taxonomy for the builder.

Recoverable errors derive from BuilderError and carry the dotted path they
concern. UnsupportedConstruct and FieldAccessFault are deliberately outside
that hierarchy: `except BuilderError` never catches them.
"""
from typing import Any, Optional


class BuilderError(Exception):
    """Base class for all recoverable builder errors."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class BuilderStoreError(BuilderError):
    """Raised by BuilderStore reads."""


class MissingPath(BuilderStoreError):
    """Typed read of a path that was never registered."""

    def __init__(self, path: str):
        super().__init__(f"No value registered for field '{path}'", path)


class FieldUnset(BuilderStoreError):
    """Typed read of a registered path whose slot holds no value."""

    def __init__(self, path: str):
        super().__init__(f"Field '{path}' is registered but has no value", path)


class UnknownPath(BuilderStoreError):
    """Null probe on a path that was never registered."""

    def __init__(self, path: str):
        super().__init__(f"Field '{path}' was never set on this builder", path)


class TypeMismatch(BuilderStoreError):
    """Stored value does not match the requested type."""

    def __init__(self, path: str, expected: Any, actual: Any):
        expected_name = getattr(expected, '__name__', repr(expected))
        super().__init__(
            f"Field '{path}' holds {type(actual).__name__} value {actual!r}, expected {expected_name}",
            path,
        )
        self.expected = expected
        self.actual = actual


class NonReflectableField(BuilderError):
    """Accessor does not correspond to a stored dataclass field."""

    def __init__(self, owner: Any, path: str, reason: str):
        owner_name = getattr(owner, '__name__', repr(owner))
        super().__init__(f"{owner_name}.{path} is not a reflectable field: {reason}", path)
        self.owner = owner


class DecodeFailure(BuilderError):
    """The target type's construction contract rejected the assembled data."""


class UnsupportedConstruct(NotImplementedError):
    """Fatal: the decode bridge cannot satisfy this construction contract.

    Sequence- and mapping-typed fields have no path-segment model. Not a
    BuilderError; build() lets it escape.
    """

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class FieldAccessFault(RuntimeError):
    """Fatal fault raised by the attribute-style Lens surface.

    The Lens has no channel to report a typed error, so any failing read or
    write through it surfaces as this fault, chained to the underlying error.
    Use Builder.value_for()/set() for the checked equivalents.
    """

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path
