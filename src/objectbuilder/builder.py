"""
Builder: public entry point for staging and materializing a dataclass.

    builder = Builder(Order)
    builder.fields.id = "A-1"                     # unchecked, attribute style
    builder.set('customer.name', "Ada")           # checked, dotted path
    builder.set(field_ref(Order).total, 42)       # checked, FieldRef
    order = builder.build()                       # runs Order's construction contract

build() is the one recoverable checkpoint: it either returns a complete,
independent instance or raises DecodeFailure. It never mutates the builder,
so it can be called again after further edits.
"""
from dataclasses import fields as dataclass_fields, is_dataclass
import logging
from typing import Any, Dict, Generic, Type, TypeVar

from objectbuilder.decoder import BuilderDecoder
from objectbuilder.errors import NonReflectableField, TypeMismatch
from objectbuilder.field_path import FieldPath, ROOT
from objectbuilder.lens import Lens
from objectbuilder.reflection import (
    Accessor, ReflectionProvider, is_structured, reflect_field, resolved_hints, structured_type,
)
from objectbuilder.store import BuilderStore

logger = logging.getLogger(__name__)

T = TypeVar('T')


class Builder(Generic[T]):
    """Partial object builder for a dataclass target type."""

    def __init__(self, target_type: Type[T], reflection: ReflectionProvider = reflect_field):
        """
        Args:
            target_type: Dataclass to build
            reflection: Reflection provider used to resolve accessors (called
                at most once per distinct field)
        """
        if not (isinstance(target_type, type) and is_dataclass(target_type)):
            raise TypeError(f"Builder target must be a dataclass type, got {target_type!r}")
        self.target_type = target_type
        self._store = BuilderStore(target_type, reflection)

    @classmethod
    def from_instance(cls, instance: T, reflection: ReflectionProvider = reflect_field) -> 'Builder[T]':
        """Seed a builder with every leaf value of an existing instance."""
        builder = cls(type(instance), reflection)
        builder.update_from(instance)
        return builder

    @property
    def store(self) -> BuilderStore:
        return self._store

    @property
    def fields(self) -> Lens:
        """Root Lens: builder.fields.customer.name = "Ada"."""
        return Lens(self._store, ROOT, self.target_type)

    def lens(self, accessor: Accessor) -> Lens:
        """Lens bound to a structured field. Taking a lens writes nothing."""
        descriptor = self._store.describe(accessor)
        path = descriptor.path
        if not descriptor.is_structured:
            raise NonReflectableField(self.target_type, path.dotted, "leaf fields have no lens; use value_for()")
        return Lens(self._store, path, structured_type(descriptor.field_type))

    # ==================== CHECKED API ====================

    def set(self, accessor: Accessor, value: Any) -> 'Builder[T]':
        """Set a field.

        Leaf fields store value (None stores an explicit null). Structured
        fields accept None (nulls the field and clears everything below it)
        or an instance, which is flattened into leaf writes.

        Raises:
            NonReflectableField: accessor is not a stored field of the target
            TypeMismatch: a structured field was given a non-instance value
        """
        path = self._store.register(accessor)
        descriptor = self._store.descriptor(path)

        if not descriptor.is_structured:
            if value is None:
                self._store.set_null(path)
            else:
                self._store.set_present(path, value)
            return self

        if value is None:
            self._store.set_null(path)
            self._store.clear_below(path)
            return self

        nested_type = structured_type(descriptor.field_type)
        if not isinstance(value, nested_type):
            raise TypeMismatch(path.dotted, nested_type, value)
        self._store.clear(path)
        self._write_instance(value, nested_type, path)
        return self

    def update_from(self, instance: Any) -> 'Builder[T]':
        """Write every leaf of instance (a target_type instance) into the builder."""
        if not isinstance(instance, self.target_type):
            raise TypeMismatch('', self.target_type, instance)
        self._write_instance(instance, self.target_type, ROOT)
        return self

    def clear(self, accessor: Accessor) -> 'Builder[T]':
        """Reset a field to unset (and, for structured fields, everything below it)."""
        path = self._store.clear(accessor)
        if self._store.descriptor(path).is_structured:
            self._store.clear_below(path)
        return self

    def value_for(self, accessor: Accessor, expected: Any = None) -> Any:
        """Typed read; see BuilderStore.get_typed for errors."""
        return self._store.get_typed(accessor, expected)

    def contains(self, accessor: Accessor) -> bool:
        return self._store.contains(accessor)

    def is_nil(self, accessor: Accessor) -> bool:
        """True if accessor is null or unset. Raises UnknownPath if never set."""
        return self._store.is_null(accessor)

    def current_values(self) -> Dict[str, Any]:
        """Dotted path -> value for every field set so far (None for nulls)."""
        return self._store.present_values()

    def build(self) -> T:
        """Materialize a new target instance from the current values.

        Raises:
            DecodeFailure: the target's construction contract rejected the data
                (missing required field, mistyped value, validation error)
            UnsupportedConstruct: the target declares a sequence/mapping field
        """
        logger.debug(f"Building {self.target_type.__name__} from {len(self._store)} registered field(s)")
        decoder = BuilderDecoder(self._store)
        instance = decoder.decode(self.target_type)
        logger.debug(f"Built {self.target_type.__name__}")
        return instance

    def _write_instance(self, obj: Any, obj_type: type, prefix: FieldPath) -> None:
        """Flatten obj into leaf writes under prefix, walking obj_type's declared fields."""
        hints = resolved_hints(obj_type)
        for field_info in dataclass_fields(obj_type):
            if not field_info.init:
                continue
            path = prefix.child(field_info.name)
            field_type = hints.get(field_info.name, field_info.type)
            value = getattr(obj, field_info.name)

            if is_structured(field_type):
                if value is None:
                    self._store.set_null(path)
                    self._store.clear_below(path)
                else:
                    self._write_instance(value, structured_type(field_type), path)
            elif value is None:
                self._store.set_null(path)
            else:
                self._store.set_present(path, value)

    def __repr__(self) -> str:
        return f"Builder[{self.target_type.__name__}]({self.current_values()!r})"
