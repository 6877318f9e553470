import os
import logging
from enum import Enum
from dataclasses import dataclass
from collections.abc import Iterable
from typing import Any, FrozenSet, Optional, Union

from .exceptions import ConfigurationError

ALL = 'all'
DEFAULT_ENVIRONMENT = 'development'
ENVIRONMENT_VARIABLES = ('USESCONNECTION_ENV', 'APP_ENV')

EnvironmentSet = Union[str, FrozenSet[str]]


def _to_name(value: Any) -> str:
    if isinstance(value, Enum):
        value = value.value
    if not isinstance(value, str):
        raise ConfigurationError(f"environment must be a string, got {value!r}")
    return value


def normalize_environments(value: Any) -> EnvironmentSet:
    """Turn a single environment, a collection of them or `all` into
    either the `ALL` sentinel or a frozenset of names."""
    if value is None:
        return frozenset()
    if isinstance(value, (str, Enum)):
        name = _to_name(value)
        if name == ALL:
            return ALL
        return frozenset((name,)) if name else frozenset()
    if isinstance(value, Iterable):
        return frozenset(name for name in map(_to_name, value) if name)
    raise ConfigurationError(f"can't use {value!r} as an environment set")


def environment_matches(environment: str, environments: EnvironmentSet) -> bool:
    if environments == ALL:
        return True
    return environment in environments


def current_environment() -> str:
    for name in ENVIRONMENT_VARIABLES:
        value = os.environ.get(name)
        if value:
            return value
    return DEFAULT_ENVIRONMENT


@dataclass(frozen=True)
class SelectorContext(object):
    environment: str
    logger: logging.Logger

    @classmethod
    def from_env(cls, logger: Optional[logging.Logger] = None) -> 'SelectorContext':
        return cls(
            environment=current_environment(),
            logger=logger or logging.getLogger('usesconnection'),
        )
