"""
Type-checked partial object builder for dataclasses.

Stage field values for a dataclass one (possibly nested) field at a time,
then materialize a complete instance through the type's own construction
contract, so defaults and __post_init__ validation run unmodified.

Quick Start:
    >>> from dataclasses import dataclass
    >>> from typing import Optional
    >>> from objectbuilder import Builder
    >>>
    >>> @dataclass(frozen=True)
    ... class Address:
    ...     city: str
    >>>
    >>> @dataclass(frozen=True)
    ... class Customer:
    ...     name: str
    ...     address: Address
    ...     email: Optional[str] = None
    >>>
    >>> builder = Builder(Customer)
    >>> builder.fields.name = "Ada"
    >>> builder.fields.address.city = "London"
    >>> builder.build()
    Customer(name='Ada', address=Address(city='London'), email=None)

Architecture:
    Builder (facade)
      ├── BuilderStore  FieldPath -> ValueSlot (UNSET / NULL / Present)
      ├── Lens          attribute-style, unchecked view into the store
      └── BuilderDecoder  answers field_exists / field_is_null / decode_field
                          for the target's construction contract

Modules:
    - field_path: FieldPath value type
    - value_slot: tri-state slots and runtime type matching
    - reflection: accessor -> FieldDescriptor (reflection provider), FieldRef
    - store: BuilderStore
    - lens: Lens
    - decoder: Decoder protocol, BuilderDecoder, dataclass contract
    - builder: Builder facade
    - config: BuilderConfig and scoped overrides
    - errors: error taxonomy
"""

from objectbuilder.field_path import FieldPath, ROOT
from objectbuilder.value_slot import NULL, UNSET, SlotState, ValueSlot, matches_type

from objectbuilder.errors import (
    BuilderError,
    BuilderStoreError,
    MissingPath,
    FieldUnset,
    UnknownPath,
    TypeMismatch,
    NonReflectableField,
    DecodeFailure,
    UnsupportedConstruct,
    FieldAccessFault,
)

from objectbuilder.config import (
    BuilderConfig,
    builder_config,
    get_builder_config,
    set_builder_config,
    reset_builder_config,
)

from objectbuilder.reflection import FieldDescriptor, FieldRef, field_ref, reflect_field
from objectbuilder.store import BuilderStore
from objectbuilder.lens import Lens, lens_path, lens_type
from objectbuilder.decoder import BuilderDecoder, Decoder, decode_dataclass
from objectbuilder.builder import Builder

__all__ = [
    # Paths and slots
    'FieldPath',
    'ROOT',
    'ValueSlot',
    'SlotState',
    'UNSET',
    'NULL',
    'matches_type',
    # Errors
    'BuilderError',
    'BuilderStoreError',
    'MissingPath',
    'FieldUnset',
    'UnknownPath',
    'TypeMismatch',
    'NonReflectableField',
    'DecodeFailure',
    'UnsupportedConstruct',
    'FieldAccessFault',
    # Configuration
    'BuilderConfig',
    'builder_config',
    'get_builder_config',
    'set_builder_config',
    'reset_builder_config',
    # Reflection
    'FieldDescriptor',
    'FieldRef',
    'field_ref',
    'reflect_field',
    # Core
    'BuilderStore',
    'Lens',
    'lens_path',
    'lens_type',
    'Decoder',
    'BuilderDecoder',
    'decode_dataclass',
    'Builder',
]

__version__ = '1.0.0'
__description__ = 'Type-checked partial object builder for dataclasses'
