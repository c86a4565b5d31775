"""
Reflection provider: maps field accessors of a dataclass to FieldDescriptors.

Accessors come in three forms, all resolving to the same FieldPath:
- dotted string:  'customer.address.city'
- FieldPath:      FieldPath(('customer', 'address', 'city'))
- FieldRef:       field_ref(Order).customer.address.city

Only stored dataclass fields are reflectable. Properties, methods, ClassVars
and init=False fields raise NonReflectableField.
"""
import collections.abc
from dataclasses import MISSING, dataclass, fields as dataclass_fields, is_dataclass
import logging
import weakref
from typing import Any, Callable, Dict, Optional, Union, get_origin, get_type_hints

from objectbuilder.errors import NonReflectableField
from objectbuilder.field_path import FieldPath, ROOT
from objectbuilder.value_slot import is_optional, unwrap_optional

logger = logging.getLogger(__name__)

# Resolved annotations per dataclass; entries go away with the class
_hints_cache = weakref.WeakKeyDictionary()

_COLLECTION_BASES = (
    collections.abc.Sequence,
    collections.abc.Set,
    collections.abc.Mapping,
)


@dataclass(frozen=True)
class FieldDescriptor:
    """Structural description of one reflected field.

    Attributes:
        name: Field name (last path segment)
        path: Full path from the root type
        field_type: Declared (resolved) annotation
        owner: Dataclass that declares the field
        has_default: True if the dataclass supplies a default or default_factory
    """
    name: str
    path: FieldPath
    field_type: Any
    owner: type
    has_default: bool = False

    @property
    def is_optional(self) -> bool:
        return is_optional(self.field_type)

    @property
    def is_structured(self) -> bool:
        return is_structured(self.field_type)


class FieldRef:
    """Attribute-chaining accessor: field_ref(Order).customer.name.

    Segments are collected without validation; the builder resolves them
    through the reflection provider on first use.
    """

    def __init__(self, root_type: type, path: FieldPath = ROOT):
        object.__setattr__(self, '_root_type', root_type)
        object.__setattr__(self, '_path', path)

    def __getattr__(self, name: str) -> 'FieldRef':
        if name.startswith('__') and name.endswith('__'):
            raise AttributeError(name)
        return FieldRef(self._root_type, self._path.child(name))

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("FieldRef is read-only")

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, FieldRef):
            return NotImplemented
        return self._root_type is other._root_type and self._path == other._path

    def __hash__(self) -> int:
        return hash((self._root_type, self._path))

    def __repr__(self) -> str:
        return f"FieldRef({self._root_type.__name__}.{self._path.dotted})"


Accessor = Union[FieldPath, str, FieldRef]
ReflectionProvider = Callable[[type, FieldPath], FieldDescriptor]


def field_ref(root_type: type) -> FieldRef:
    """Start an attribute-chaining accessor for root_type."""
    if not is_dataclass(root_type):
        raise TypeError(f"{getattr(root_type, '__name__', root_type)} is not a dataclass")
    return FieldRef(root_type)


def accessor_path(root_type: type, accessor: Accessor) -> FieldPath:
    """Turn any accessor form into a FieldPath without reflecting it."""
    if isinstance(accessor, FieldRef):
        if accessor._root_type is not root_type:
            raise NonReflectableField(
                root_type, accessor._path.dotted,
                f"accessor belongs to {accessor._root_type.__name__}",
            )
        return accessor._path
    return FieldPath.coerce(accessor)


def resolved_hints(cls: type) -> Dict[str, Any]:
    """Resolved annotations for a dataclass (string annotations evaluated)."""
    hints = _hints_cache.get(cls)
    if hints is None:
        try:
            hints = get_type_hints(cls)
        except (NameError, TypeError) as e:
            # Locally defined types can't always be resolved from module globals
            logger.debug(f"get_type_hints({cls.__name__}) failed ({e}); using raw field annotations")
            hints = {f.name: f.type for f in dataclass_fields(cls)}
        _hints_cache[cls] = hints
    return hints


def is_structured(tp: Any) -> bool:
    """True for dataclass types (or Optional thereof): drilled into, never stored whole."""
    inner = unwrap_optional(tp)
    return isinstance(inner, type) and is_dataclass(inner)


def structured_type(tp: Any) -> type:
    """Dataclass type behind a structured annotation."""
    inner = unwrap_optional(tp)
    if not (isinstance(inner, type) and is_dataclass(inner)):
        raise TypeError(f"{tp!r} is not a structured type")
    return inner


def is_collection(tp: Any) -> bool:
    """True for sequence, set and mapping annotations (str and bytes excluded)."""
    inner = unwrap_optional(tp)
    candidate = get_origin(inner) or inner
    if not isinstance(candidate, type):
        return False
    if issubclass(candidate, (str, bytes, bytearray)):
        return False
    return issubclass(candidate, _COLLECTION_BASES)


def has_default(field_info) -> bool:
    return field_info.default is not MISSING or field_info.default_factory is not MISSING


def _describe_missing(owner: type, name: str) -> str:
    attr = getattr(owner, name, MISSING)
    if isinstance(attr, property):
        return "computed property"
    if attr is not MISSING and callable(attr):
        return "method"
    if attr is not MISSING:
        return "class attribute"
    return "no such field"


def field_info_of(owner: Any, name: str, root_type: Any = None, path: Optional[FieldPath] = None):
    """Dataclass Field object for owner.name.

    Raises:
        NonReflectableField: owner is not a dataclass, or name is not a
            constructor field of it
    """
    root_type = root_type if root_type is not None else owner
    dotted = path.dotted if path is not None else name
    if not (isinstance(owner, type) and is_dataclass(owner)):
        raise NonReflectableField(root_type, dotted, f"{getattr(owner, '__name__', owner)} is not a dataclass")

    field_info = next((f for f in dataclass_fields(owner) if f.name == name), None)
    if field_info is None:
        raise NonReflectableField(root_type, dotted, _describe_missing(owner, name))
    if not field_info.init:
        raise NonReflectableField(root_type, dotted, "field is not a constructor parameter (init=False)")
    return field_info


def field_type_of(owner: Any, name: str) -> Any:
    """Resolved annotation of owner.name (see field_info_of for errors)."""
    field_info = field_info_of(owner, name)
    return resolved_hints(owner).get(name, field_info.type)


def reflect_field(root_type: type, path: FieldPath) -> FieldDescriptor:
    """Default reflection provider: walk dataclass fields along path.

    Raises:
        NonReflectableField: if any segment is not a stored, constructible
            dataclass field, or an intermediate segment is not structured
    """
    if path.is_root:
        raise NonReflectableField(root_type, '', "empty field path")

    owner = root_type
    descriptor = None
    for depth, segment in enumerate(path):
        walked = FieldPath(path.segments[:depth + 1])
        field_info = field_info_of(owner, segment, root_type, walked)
        field_type = resolved_hints(owner).get(segment, field_info.type)
        descriptor = FieldDescriptor(
            name=segment,
            path=walked,
            field_type=field_type,
            owner=owner,
            has_default=has_default(field_info),
        )
        owner = unwrap_optional(field_type)

    return descriptor
