"""Runtime support imported by generated federation modules."""

from dataclasses import dataclass
from typing import Any

from .core.errors import (
    EntityTypeMismatchError,
    FederationError,
    IntrospectionDisabledError,
    UnknownEntityTypeError,
)

# A representation as sent by the gateway: __typename plus key fields
Map = dict[str, Any]


@dataclass
class Service:
    """Value of the _service query field."""
    sdl: str


__all__ = [
    "EntityTypeMismatchError",
    "FederationError",
    "IntrospectionDisabledError",
    "Map",
    "Service",
    "UnknownEntityTypeError",
]
