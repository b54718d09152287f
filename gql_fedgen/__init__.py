"""GraphQL federation-aware code generator for Python."""

__version__ = "0.1.0"
