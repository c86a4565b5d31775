"""
Lens: attribute-style read/write view into a region of a BuilderStore.

    builder.fields.customer.address.city = "Oslo"
    builder.fields.customer.address.city        # "Oslo"
    builder.fields.customer                     # Lens(Order.customer)

Drilling into a dataclass-typed field yields a child Lens; a leaf field
reads/writes the store directly. This is the unchecked surface: it has no
way to report a typed error, so every failure becomes a FieldAccessFault.
The checked equivalents live on Builder (value_for, set, contains, is_nil).
"""
import logging
from typing import Any

from objectbuilder.config import get_builder_config
from objectbuilder.errors import BuilderError, FieldAccessFault, FieldUnset
from objectbuilder.field_path import FieldPath, ROOT
from objectbuilder.reflection import field_type_of, is_structured, structured_type
from objectbuilder.store import BuilderStore
from objectbuilder.value_slot import is_optional

logger = logging.getLogger(__name__)


class Lens:
    """Non-owning view = (store, fixed prefix, dataclass type at that prefix).

    All state lives in the store; any number of lenses may share it.
    """

    def __init__(self, store: BuilderStore, prefix: FieldPath = ROOT, lens_type: type = None):
        object.__setattr__(self, '_store', store)
        object.__setattr__(self, '_prefix', prefix)
        object.__setattr__(self, '_type', lens_type if lens_type is not None else store.target_type)

    def _field_type(self, name: str) -> Any:
        try:
            return field_type_of(self._type, name)
        except BuilderError as e:
            raise FieldAccessFault(f"{self!r} has no field '{name}': {e}", self._prefix.child(name).dotted) from e

    def __getattr__(self, name: str) -> Any:
        """Child Lens for structured fields, stored value for leaf fields."""
        if name.startswith('__') and name.endswith('__'):
            raise AttributeError(name)

        field_type = self._field_type(name)
        path = self._prefix.child(name)
        if is_structured(field_type):
            return Lens(self._store, path, structured_type(field_type))

        try:
            return self._store.get_typed(path)
        except BuilderError as e:
            # Cleared Optional leaves read as empty
            if isinstance(e, FieldUnset) and is_optional(field_type):
                return None
            raise FieldAccessFault(f"Cannot read '{path.dotted}': {e}", path.dotted) from e

    def __setattr__(self, name: str, value: Any) -> None:
        """Write a leaf field. Whole-object assignment to a structured field is ignored."""
        field_type = self._field_type(name)
        path = self._prefix.child(name)

        if is_structured(field_type):
            log = logger.warning if get_builder_config().warn_on_structured_assignment else logger.debug
            log(f"Ignoring assignment to structured field '{path.dotted}'; set its leaf fields instead")
            return

        try:
            if value is None:
                self._store.set_null(path)
            else:
                self._store.set_present(path, value)
        except BuilderError as e:
            raise FieldAccessFault(f"Cannot write '{path.dotted}': {e}", path.dotted) from e

    def __delattr__(self, name: str) -> None:
        """Clear a leaf, or every stored leaf below a structured field."""
        field_type = self._field_type(name)
        path = self._prefix.child(name)
        try:
            if is_structured(field_type):
                self._store.clear_below(path)
            else:
                self._store.clear(path)
        except BuilderError as e:
            raise FieldAccessFault(f"Cannot clear '{path.dotted}': {e}", path.dotted) from e

    def __dir__(self):
        from dataclasses import fields
        return [f.name for f in fields(self._type)]

    def __repr__(self) -> str:
        root = self._store.target_type.__name__
        return f"Lens({root}.{self._prefix.dotted})" if self._prefix else f"Lens({root})"


def lens_path(lens: Lens) -> FieldPath:
    """Prefix a lens is bound to (attribute access on the lens itself is for fields)."""
    return object.__getattribute__(lens, '_prefix')


def lens_type(lens: Lens) -> type:
    return object.__getattribute__(lens, '_type')
