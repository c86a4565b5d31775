"""
BuilderStore: path-keyed tri-state storage behind a Builder.

Flat storage, nested addressing:
- External: builder.fields.customer.address.city = "Oslo"
- Internal: store._slots[FieldPath(('customer', 'address', 'city'))] = Present("Oslo")

A path is registered (reflected once, remembered by its dotted string) the
first time it is written. Registration is never undone: clearing a field
resets its slot to UNSET but keeps the entry, so later probes still know the
path. Reads never reflect; an unwritten path is simply unknown.

Structured (dataclass-typed) paths are normally only written through their
leaves. Presence and null probes on such a path look at its descendants:
it "contains" a value when anything below it does.
"""
import logging
from typing import Any, Dict, Iterator, List, Optional, Tuple

from objectbuilder.errors import FieldUnset, MissingPath, TypeMismatch, UnknownPath
from objectbuilder.field_path import FieldPath
from objectbuilder.reflection import (
    Accessor, FieldDescriptor, ReflectionProvider, accessor_path, reflect_field,
)
from objectbuilder.value_slot import NULL, UNSET, ValueSlot, matches_type

logger = logging.getLogger(__name__)


class BuilderStore:
    """Mapping FieldPath -> ValueSlot plus the dotted-path registration table.

    Not thread-safe: writes and first-time registration need external
    synchronization. Reads of an unmodified store are safe.
    """

    def __init__(self, target_type: type, reflection: ReflectionProvider = reflect_field):
        """
        Args:
            target_type: Root dataclass whose fields are stored
            reflection: Provider resolving (target_type, path) to a FieldDescriptor
        """
        self.target_type = target_type
        self._reflect = reflection
        self._slots: Dict[FieldPath, ValueSlot] = {}
        self._registered: Dict[str, FieldPath] = {}
        self._descriptors: Dict[FieldPath, FieldDescriptor] = {}
        self._described: Dict[str, FieldDescriptor] = {}

    # ==================== REGISTRATION ====================

    def describe(self, accessor: Accessor) -> FieldDescriptor:
        """Reflect accessor without registering it (no slot is created).

        The descriptor is cached, so a later register() does not reflect again.
        """
        path = accessor_path(self.target_type, accessor)
        known = self._registered.get(path.dotted)
        if known is not None:
            return self._descriptors[known]
        descriptor = self._described.get(path.dotted)
        if descriptor is None:
            descriptor = self._reflect(self.target_type, path)
            self._described[path.dotted] = descriptor
        return descriptor

    def register(self, accessor: Accessor) -> FieldPath:
        """Resolve accessor to its FieldPath, reflecting only on first sight."""
        path = accessor_path(self.target_type, accessor)
        known = self._registered.get(path.dotted)
        if known is not None:
            return known

        descriptor = self.describe(path)
        self._registered[path.dotted] = descriptor.path
        self._descriptors[descriptor.path] = descriptor
        self._slots.setdefault(descriptor.path, UNSET)
        logger.debug(f"Registered {self.target_type.__name__}.{descriptor.path.dotted} ({descriptor.field_type!r})")
        return descriptor.path

    def lookup(self, accessor: Accessor) -> Optional[FieldPath]:
        """Registered path for accessor, or None. Never reflects."""
        return self._registered.get(accessor_path(self.target_type, accessor).dotted)

    def descriptor(self, accessor: Accessor) -> Optional[FieldDescriptor]:
        path = self.lookup(accessor)
        return self._descriptors.get(path) if path is not None else None

    def declared_type(self, accessor: Accessor) -> Any:
        descriptor = self.descriptor(accessor)
        return descriptor.field_type if descriptor is not None else Any

    def registered_paths(self) -> List[FieldPath]:
        return list(self._registered.values())

    # ==================== WRITES ====================

    def set_present(self, accessor: Accessor, value: Any) -> FieldPath:
        """Store value at accessor. Never type-checks; reads do."""
        path = self.register(accessor)
        self._slots[path] = ValueSlot.of(value)
        logger.debug(f"Set {path.dotted} = {value!r}")
        return path

    def set_null(self, accessor: Accessor) -> FieldPath:
        """Mark accessor explicitly empty. Only meaningful for Optional fields."""
        path = self.register(accessor)
        self._slots[path] = NULL
        logger.debug(f"Set {path.dotted} = NULL")
        return path

    def clear(self, accessor: Accessor) -> FieldPath:
        """Reset accessor to UNSET. The registration entry is kept."""
        path = self.register(accessor)
        self._slots[path] = UNSET
        logger.debug(f"Cleared {path.dotted}")
        return path

    def clear_below(self, accessor: Accessor) -> int:
        """Reset every registered descendant of accessor to UNSET.

        Returns:
            Number of slots cleared
        """
        prefix = accessor_path(self.target_type, accessor)
        cleared = 0
        for path in self._descendants(prefix):
            self._slots[path] = UNSET
            cleared += 1
        if cleared:
            logger.debug(f"Cleared {cleared} field(s) below {prefix.dotted}")
        return cleared

    # ==================== READS ====================

    def get_typed(self, accessor: Accessor, expected: Any = None) -> Any:
        """Typed read.

        Args:
            accessor: Field to read
            expected: Requested type; defaults to the field's declared type

        Returns:
            The stored value, or None for an explicitly nulled field whose
            requested type admits None

        Raises:
            MissingPath: path never registered
            FieldUnset: registered but holds no value
            TypeMismatch: value (or null) does not satisfy the requested type
        """
        path = self.lookup(accessor)
        if path is None:
            raise MissingPath(accessor_path(self.target_type, accessor).dotted)

        slot = self._slots[path]
        if not slot.is_set:
            raise FieldUnset(path.dotted)

        if expected is None:
            expected = self.declared_type(path)
        value = slot.unbox()
        if not matches_type(value, expected):
            raise TypeMismatch(path.dotted, expected, value)
        return value

    def is_null(self, accessor: Accessor) -> bool:
        """True if nothing is present at accessor (UNSET counts as null).

        Raises:
            UnknownPath: nothing at or below accessor was ever registered
        """
        path = accessor_path(self.target_type, accessor)
        exact = self._registered.get(path.dotted)
        below = list(self._descendants(path))
        if exact is None and not below:
            raise UnknownPath(path.dotted)
        if exact is not None and self._slots[exact].is_present:
            return False
        return not any(self._slots[p].is_present for p in below)

    def contains(self, accessor: Accessor) -> bool:
        """True if a value is present at accessor (or, for structured paths, below it)."""
        path = accessor_path(self.target_type, accessor)
        exact = self._registered.get(path.dotted)
        if exact is not None and self._slots[exact].is_present:
            return True
        return any(self._slots[p].is_present for p in self._descendants(path))

    def slot(self, accessor: Accessor) -> ValueSlot:
        """Raw slot at accessor; UNSET for unregistered paths."""
        path = self.lookup(accessor)
        return self._slots[path] if path is not None else UNSET

    def present_values(self) -> Dict[str, Any]:
        """Snapshot of set fields: dotted path -> value (None for NULL)."""
        return {
            path.dotted: slot.unbox()
            for path, slot in self._slots.items()
            if slot.is_set
        }

    def items(self) -> Iterator[Tuple[FieldPath, ValueSlot]]:
        return iter(list(self._slots.items()))

    def _descendants(self, prefix: FieldPath) -> Iterator[FieldPath]:
        return (path for path in list(self._slots) if prefix.is_prefix_of(path))

    def __len__(self) -> int:
        return len(self._registered)

    def __contains__(self, accessor: Any) -> bool:
        return self.lookup(accessor) is not None

    def __repr__(self) -> str:
        return f"BuilderStore({self.target_type.__name__}, {dict((p.dotted, s) for p, s in self._slots.items())!r})"
