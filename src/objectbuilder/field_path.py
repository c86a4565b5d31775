"""
FieldPath: ordered segment list addressing a (possibly nested) dataclass field.

The dotted form ('customer.address.city') is the stable string key used by the
store's registration table; the segment tuple is what every other component
compares and concatenates.
"""
from dataclasses import dataclass
from typing import Iterable, Iterator, Tuple, Union


@dataclass(frozen=True)
class FieldPath:
    """Immutable path of field-name segments. Empty path = the root object."""
    segments: Tuple[str, ...] = ()

    def __post_init__(self):
        segments = tuple(self.segments)
        for segment in segments:
            if not isinstance(segment, str) or not segment:
                raise ValueError(f"Invalid field path segment: {segment!r}")
            if '.' in segment:
                raise ValueError(f"Field path segment may not contain '.': {segment!r}")
        object.__setattr__(self, 'segments', segments)

    @classmethod
    def parse(cls, dotted: str) -> 'FieldPath':
        """Parse dotted form. '' parses to the root path."""
        if not dotted:
            return cls()
        return cls(tuple(dotted.split('.')))

    @classmethod
    def coerce(cls, value: Union['FieldPath', str, Iterable[str]]) -> 'FieldPath':
        """Accept a FieldPath, a dotted string or a sequence of segments."""
        if isinstance(value, FieldPath):
            return value
        if isinstance(value, str):
            return cls.parse(value)
        return cls(tuple(value))

    @property
    def dotted(self) -> str:
        return '.'.join(self.segments)

    @property
    def name(self) -> str:
        if not self.segments:
            raise ValueError("Root path has no field name")
        return self.segments[-1]

    @property
    def parent(self) -> 'FieldPath':
        if not self.segments:
            raise ValueError("Root path has no parent")
        return FieldPath(self.segments[:-1])

    @property
    def is_root(self) -> bool:
        return not self.segments

    def child(self, name: str) -> 'FieldPath':
        return FieldPath(self.segments + (name,))

    def is_prefix_of(self, other: 'FieldPath') -> bool:
        """True if other lies strictly below this path."""
        n = len(self.segments)
        return len(other.segments) > n and other.segments[:n] == self.segments

    def __add__(self, other: Union['FieldPath', str]) -> 'FieldPath':
        if isinstance(other, FieldPath):
            return FieldPath(self.segments + other.segments)
        if isinstance(other, str):
            return self + FieldPath.parse(other)
        return NotImplemented

    def __len__(self) -> int:
        return len(self.segments)

    def __iter__(self) -> Iterator[str]:
        return iter(self.segments)

    def __str__(self) -> str:
        return self.dotted

    def __repr__(self) -> str:
        return f"FieldPath({self.dotted!r})"


ROOT = FieldPath()
