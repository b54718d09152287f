"""Plugins bundled with gql-fedgen."""

from .federation import FederationPlugin
from .modelgen import ModelGenPlugin

__all__ = [
    "FederationPlugin",
    "ModelGenPlugin",
]
