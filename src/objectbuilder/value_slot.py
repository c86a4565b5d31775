"""
Tri-state value cells and runtime type matching.

A slot is UNSET (never assigned, or cleared), NULL (explicitly empty) or
PRESENT (holds a value tagged with its runtime type). Slots accept any value
on write; matches_type() re-validates on every typed read.
"""
from dataclasses import dataclass
from enum import Enum
import types
from typing import Annotated, Any, Literal, Optional, Union, get_args, get_origin

from objectbuilder.config import BuilderConfig, get_builder_config

NoneType = type(None)
UnionType = getattr(types, 'UnionType', None)


class SlotState(Enum):
    UNSET = 'unset'
    NULL = 'null'
    PRESENT = 'present'


@dataclass(frozen=True)
class ValueSlot:
    """Storage cell. Build PRESENT slots with ValueSlot.of(value)."""
    state: SlotState
    value: Any = None
    tag: Optional[type] = None

    @classmethod
    def of(cls, value: Any) -> 'ValueSlot':
        return cls(SlotState.PRESENT, value, type(value))

    @property
    def is_present(self) -> bool:
        return self.state is SlotState.PRESENT

    @property
    def is_null(self) -> bool:
        return self.state is SlotState.NULL

    @property
    def is_set(self) -> bool:
        """True once a value or an explicit null was written."""
        return self.state is not SlotState.UNSET

    def unbox(self) -> Any:
        return self.value if self.is_present else None

    def __repr__(self) -> str:
        if self.is_present:
            return f"Present({self.value!r}: {self.tag.__name__})"
        return self.state.name


UNSET = ValueSlot(SlotState.UNSET)
NULL = ValueSlot(SlotState.NULL)


def is_union(tp: Any) -> bool:
    origin = get_origin(tp)
    return origin is Union or (UnionType is not None and origin is UnionType)


def is_optional(tp: Any) -> bool:
    """True for Optional[X], Union[..., None] and X | None."""
    return is_union(tp) and NoneType in get_args(tp)


def unwrap_optional(tp: Any) -> Any:
    """Optional[X] -> X. Unions with several non-None members stay as a Union."""
    if not is_optional(tp):
        return tp
    members = tuple(arg for arg in get_args(tp) if arg is not NoneType)
    if len(members) == 1:
        return members[0]
    return Union[members]


def matches_type(value: Any, expected: Any, config: Optional[BuilderConfig] = None) -> bool:
    """Check a stored value against a declared field type.

    Containers are checked on their origin only (List[int] accepts any list).
    No value is ever converted; this only answers yes or no.
    """
    config = config or get_builder_config()

    if expected is Any or expected is object:
        return True
    if expected is None or expected is NoneType:
        return value is None

    if is_union(expected):
        return any(matches_type(value, member, config) for member in get_args(expected))

    origin = get_origin(expected)
    if origin is Literal:
        return value in get_args(expected)
    if origin is Annotated:
        return matches_type(value, get_args(expected)[0], config)
    if origin is not None:
        expected = origin

    if not isinstance(expected, type):
        # TypeVar, forward-reference string or other non-class annotation
        return True

    if isinstance(value, bool) and expected in (int, float) and config.strict_bool:
        return False
    if expected is float and isinstance(value, int) and not isinstance(value, bool):
        return config.numeric_tower
    return isinstance(value, expected)
