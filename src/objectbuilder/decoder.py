"""
Decode bridge: runs a type's construction contract over builder storage.

A construction contract pulls its data through a Decoder instead of parsing
a document. Dataclasses get a reflection-driven contract (decode_dataclass);
any type may supply its own as a classmethod:

    @dataclass(frozen=True)
    class Money:
        amount: int
        currency: str

        @classmethod
        def __decode__(cls, decoder):
            currency = decoder.decode_field('currency', str)
            return cls(decoder.decode_field('amount', int), currency.upper())

Non-dataclass leaf types can use single-value extraction:

    class Sku(str):
        @classmethod
        def __decode__(cls, decoder):
            return cls(decoder.single_value(str))

Cursor discipline: every field-scoped call pushes exactly one segment and
pops it on every exit path (see BuilderDecoder._field_scope).
"""
from contextlib import contextmanager
from dataclasses import fields as dataclass_fields
import logging
from typing import Any, Generator, List, Protocol

from objectbuilder.errors import BuilderError, BuilderStoreError, DecodeFailure, UnknownPath, UnsupportedConstruct
from objectbuilder.field_path import FieldPath
from objectbuilder.reflection import has_default, is_collection, is_structured, resolved_hints
from objectbuilder.store import BuilderStore
from objectbuilder.value_slot import is_optional, unwrap_optional

logger = logging.getLogger(__name__)


class Decoder(Protocol):
    """Pull protocol a construction contract uses to request field data."""

    @property
    def coding_path(self) -> FieldPath: ...

    def field_exists(self, name: str) -> bool: ...

    def field_is_null(self, name: str) -> bool: ...

    def field_holds_null(self, name: str) -> bool: ...

    def decode_field(self, name: str, field_type: Any) -> Any: ...

    def single_value(self, value_type: Any) -> Any: ...


class BuilderDecoder:
    """Decoder answering from a BuilderStore through a path cursor."""

    def __init__(self, store: BuilderStore):
        self._store = store
        self._cursor: List[str] = []

    @property
    def coding_path(self) -> FieldPath:
        return FieldPath(tuple(self._cursor))

    @contextmanager
    def _field_scope(self, name: str) -> Generator[FieldPath, None, None]:
        self._cursor.append(name)
        try:
            yield self.coding_path
        finally:
            self._cursor.pop()

    # ==================== PRIMITIVES ====================

    def field_exists(self, name: str) -> bool:
        """True if a value is present for name. Unreachable paths read as absent."""
        with self._field_scope(name) as path:
            try:
                return self._store.contains(path)
            except BuilderError:
                return False

    def field_is_null(self, name: str) -> bool:
        """True if name is null or unset.

        Raises:
            DecodeFailure: name was never set on the builder
        """
        with self._field_scope(name) as path:
            try:
                return self._store.is_null(path)
            except UnknownPath as e:
                raise DecodeFailure(f"No value associated with field '{name}'", path.dotted) from e

    def field_holds_null(self, name: str) -> bool:
        """True only if name was explicitly set to null (cleared fields are not)."""
        with self._field_scope(name) as path:
            return self._store.slot(path).is_null

    def decode_field(self, name: str, field_type: Any) -> Any:
        """Decode name as field_type, recursing into structured types.

        Raises:
            DecodeFailure: missing, unset or mistyped value, or the nested
                contract rejected its data
            UnsupportedConstruct: field_type is a sequence or mapping
        """
        with self._field_scope(name):
            return self.decode(field_type)

    def single_value(self, value_type: Any) -> Any:
        """Value stored at the current path itself (no push)."""
        path = self.coding_path
        try:
            return self._store.get_typed(path, value_type)
        except BuilderStoreError as e:
            raise DecodeFailure(f"Cannot decode '{path.dotted or '<root>'}': {e}", path.dotted) from e

    # ==================== DISPATCH ====================

    def decode(self, value_type: Any) -> Any:
        """Run value_type's construction contract at the current path."""
        path = self.coding_path
        if is_collection(value_type):
            raise UnsupportedConstruct(
                f"Cannot decode {value_type!r} at '{path.dotted or '<root>'}': "
                f"sequence and mapping fields cannot be built incrementally",
                path.dotted,
            )

        if is_optional(value_type):
            if not self._store.contains(path):
                return None
            value_type = unwrap_optional(value_type)

        contract = getattr(value_type, '__decode__', None)
        if callable(contract):
            return contract(self)
        if is_structured(value_type):
            return decode_dataclass(value_type, self)
        return self.single_value(value_type)


def decode_dataclass(cls: type, decoder: Decoder) -> Any:
    """Reflection-driven construction contract for dataclasses.

    Per init field:
    - sequence/mapping fields are always requested (and fail fatally)
    - present fields are decoded
    - absent fields with a default keep it, unless nulled: Optional fields
      then get None, other fields are requested and fail the type check
    - absent Optional fields become None
    - anything else is requested and fails with DecodeFailure

    The constructor then runs unmodified, so __post_init__ validation applies.
    """
    hints = resolved_hints(cls)
    kwargs = {}
    for field_info in dataclass_fields(cls):
        if not field_info.init:
            continue
        name = field_info.name
        field_type = hints.get(name, field_info.type)

        if is_collection(field_type) or decoder.field_exists(name):
            kwargs[name] = decoder.decode_field(name, field_type)
        elif has_default(field_info):
            if is_optional(field_type):
                if _is_nulled(decoder, name):
                    kwargs[name] = None
            elif decoder.field_holds_null(name):
                # Explicit null on a non-Optional field fails the typed read
                kwargs[name] = decoder.decode_field(name, field_type)
        elif is_optional(field_type):
            kwargs[name] = None
        else:
            kwargs[name] = decoder.decode_field(name, field_type)

    where = decoder.coding_path.dotted or '<root>'
    logger.debug(f"Constructing {cls.__name__} at '{where}' with fields {sorted(kwargs)}")
    try:
        return cls(**kwargs)
    except (TypeError, ValueError) as e:
        raise DecodeFailure(f"{cls.__name__} rejected builder data at '{where}': {e}", decoder.coding_path.dotted) from e


def _is_nulled(decoder: Decoder, name: str) -> bool:
    """True if name was set on the builder and holds nothing."""
    try:
        return decoder.field_is_null(name)
    except DecodeFailure:
        return False
