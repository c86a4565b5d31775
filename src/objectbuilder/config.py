"""
Builder configuration.

Held in a ContextVar so that overrides are scoped to the current context
(thread or task) and never leak into other builders.

Usage:
    with builder_config(numeric_tower=False):
        builder.value_for('price', float)   # int values now mismatch
"""
import contextvars
import dataclasses
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Generator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuilderConfig:
    """Knobs for type checking and the Lens surface.

    Attributes:
        numeric_tower: int values satisfy float fields (values are never converted)
        strict_bool: bool values never satisfy int/float fields
        warn_on_structured_assignment: log ignored whole-object Lens assignments
            at WARNING instead of DEBUG
    """
    numeric_tower: bool = True
    strict_bool: bool = True
    warn_on_structured_assignment: bool = False


DEFAULT_CONFIG = BuilderConfig()

_current_config: contextvars.ContextVar[BuilderConfig] = contextvars.ContextVar(
    'objectbuilder_config', default=DEFAULT_CONFIG
)


def get_builder_config() -> BuilderConfig:
    return _current_config.get()


def set_builder_config(config: BuilderConfig) -> None:
    """Replace the configuration for the current context."""
    if not isinstance(config, BuilderConfig):
        raise TypeError(f"Expected BuilderConfig, got {type(config).__name__}")
    _current_config.set(config)
    logger.debug(f"Builder config set: {config}")


def reset_builder_config() -> None:
    _current_config.set(DEFAULT_CONFIG)


@contextmanager
def builder_config(**overrides) -> Generator[BuilderConfig, None, None]:
    """Scoped configuration override.

    Args:
        **overrides: BuilderConfig field values to change inside the block

    Yields:
        The effective configuration
    """
    config = dataclasses.replace(_current_config.get(), **overrides)
    token = _current_config.set(config)
    try:
        yield config
    finally:
        _current_config.reset(token)
